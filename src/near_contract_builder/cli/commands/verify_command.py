import argparse
import logging
from typing import Any, Dict

from near_contract_builder.application.services.ui_service import UIService
from near_contract_builder.cli.adapter_factory import create_build_system, create_ui_service
from near_contract_builder.domain.ports.ui_service import LogLevel

logger = logging.getLogger(__name__)


def handle_verify(args: argparse.Namespace, config: Dict[str, Any]) -> int:
    """Handles the 'verify' command logic."""
    ui = UIService(create_ui_service(config))
    build_system = create_build_system(config)

    info = build_system.get_build_info()
    ok = bool(info.get("verified"))

    table = ui.table(["Setting", "Value"], title="Build configuration")
    table.add_row("Command", info["command"])
    table.add_row("Arguments", " ".join(info["arguments"]))
    table.add_row("Target", info["target"])
    table.add_row("Version", info["version"])
    table.render()

    if ok:
        ui.log("cargo is available", LogLevel.SUCCESS)
    else:
        ui.log(f"cargo could not be verified; is `{info['command']}` installed and on PATH?", LogLevel.ERROR)
    ui.close()
    return 0 if ok else 1
