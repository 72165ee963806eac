import logging
import sys
from typing import List, Optional

from near_contract_builder.cli.commands.argument_parser import parse_arguments
from near_contract_builder.cli.commands.build_command import handle_build
from near_contract_builder.cli.commands.config_loader import ensure_app_directories, load_and_resolve_config
from near_contract_builder.cli.commands.verify_command import handle_verify
from near_contract_builder.cli.logging_setup import setup_logging

logger = logging.getLogger(__name__)

COMMAND_HANDLERS = {
    "build": handle_build,
    "verify": handle_verify,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Console entry point for `near-build`."""
    args = parse_arguments(argv)

    config = load_and_resolve_config(args.config)
    ensure_app_directories(config)
    setup_logging(config)

    handler = COMMAND_HANDLERS[args.command]
    try:
        return handler(args, config)
    except KeyboardInterrupt:
        logger.warning("Interrupted")
        return 130
    except Exception as e:
        logger.critical(f"An error occurred during '{args.command}': {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
