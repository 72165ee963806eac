import logging
import sys
from typing import Any, Dict

import colorama
from rich.console import Console
from rich.logging import RichHandler

from near_contract_builder.infrastructure.adapters.output.logging_output_sink import CARGO_LOGGER_NAME

_LEVEL_COLORS = {
    logging.CRITICAL: colorama.Fore.RED + colorama.Style.BRIGHT,
    logging.ERROR: colorama.Fore.RED,
    logging.WARNING: colorama.Fore.YELLOW,
    logging.INFO: colorama.Fore.CYAN,
}


class ColoramaFormatter(logging.Formatter):
    """Plain formatter that colors the level name."""

    def format(self, record):
        original = record.levelname
        color = next((c for level, c in sorted(_LEVEL_COLORS.items(), reverse=True) if record.levelno >= level), "")
        if color:
            record.levelname = f"{color}{original}{colorama.Style.RESET_ALL}"
        try:
            return super().format(record)
        finally:
            record.levelname = original


def setup_logging(config: Dict[str, Any]):
    """Configures logging based on the application configuration."""
    log_config = config.get('logging', {}) or {}
    level_name = str(log_config.get('level', 'INFO')).upper()
    level = getattr(logging, level_name, logging.INFO)
    log_format = log_config.get('format', '%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    log_file = log_config.get('log_file')  # Path is already resolved

    ui_config = config.get('ui', {}) or {}
    enhanced_logging = ui_config.get('enhanced_logging', True)

    if enhanced_logging:
        # Rich renders time and level itself
        console_handler = RichHandler(
            console=Console(stderr=True),
            show_time=True,
            show_level=True,
            show_path=False,
            markup=False,
        )
        console_handler.setFormatter(logging.Formatter("%(message)s"))
    else:
        colorama.init()
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(ColoramaFormatter(log_format))

    handlers = [console_handler]
    if log_file:
        try:
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setFormatter(logging.Formatter(log_format))
            handlers.append(file_handler)
        except OSError as e:
            print(f"Warning: Could not configure file logging to {log_file}: {e}", file=sys.stderr)

    # Use force=True to allow reconfiguration if called multiple times (e.g., in tests)
    logging.basicConfig(level=level, handlers=handlers, force=True)

    # cargo's own stderr stays visible even when the builder logs at WARNING
    logging.getLogger(CARGO_LOGGER_NAME).setLevel(min(level, logging.INFO))

    dependencies_to_silence = {
        "asyncio": logging.WARNING,
    }
    for name, lvl in dependencies_to_silence.items():
        logging.getLogger(name).setLevel(lvl)

    logging.info(f"Logging configured. Level: {level_name}, File: {log_file or 'None'}")
