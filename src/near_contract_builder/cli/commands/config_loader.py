import copy
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config/application.yml"

DEFAULT_CONFIG: Dict[str, Any] = {
    'build_system': {
        'command': 'cargo',
        'read_chunk_size': 4096,
        'version_timeout': 30,
    },
    'logging': {
        'level': 'INFO',
        'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        'log_file': None,
    },
    'ui': {
        'type': 'rich',
        'enhanced_logging': True,
        'show_elapsed': True,
    },
}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively overlays `override` on a copy of `base`."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_and_resolve_config(config_path: Optional[str] = None, base_dir: Optional[Path] = None) -> dict:
    """
    Loads YAML configuration over the built-in defaults and resolves relative paths.

    A missing default config file is not an error; an explicitly requested file
    that is missing, or a file that is not a mapping, is fatal.
    """
    base_dir = base_dir or Path.cwd()
    explicit = config_path is not None
    absolute_config_path = (base_dir / (config_path or DEFAULT_CONFIG_PATH)).resolve()
    logger.debug(f"Attempting to load configuration from: {absolute_config_path}")

    try:
        with open(absolute_config_path, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f)
    except FileNotFoundError:
        if explicit:
            logger.critical(f"Configuration file not found at {absolute_config_path}")
            sys.exit(1)
        logger.warning(f"No configuration file at {absolute_config_path}; using defaults")
        return copy.deepcopy(DEFAULT_CONFIG)
    except (OSError, yaml.YAMLError) as err:
        logger.critical(f"Error loading configuration from {absolute_config_path}: {err}", exc_info=True)
        sys.exit(1)

    if config_data is None:
        config_data = {}
    if not isinstance(config_data, dict):
        logger.critical(f"Configuration in {absolute_config_path} must be a mapping, got {type(config_data).__name__}")
        sys.exit(1)

    config = _merge(DEFAULT_CONFIG, config_data)
    resolve_path(config, absolute_config_path.parent, ['logging', 'log_file'])  # Optional

    logger.info(f"Configuration loaded successfully from {absolute_config_path}")
    return config


def resolve_path(config: dict, root: Path, keys: list, default: Optional[str] = None):
    """Helper to get, resolve, and update a path in the config dict."""
    current = config
    for key in keys[:-1]:
        current = current.get(key, {})
        if not isinstance(current, dict):
            logger.warning(f"Config path {'->'.join(keys)} structure invalid. Using default '{default}' if available.")
            return

    last_key = keys[-1]
    relative_path = current.get(last_key, default)

    if relative_path is not None:
        resolved_path = str((root / relative_path).resolve())
        current[last_key] = resolved_path
        logger.debug(f"Resolved config path '{'.'.join(keys)}': {relative_path} -> {resolved_path}")


def ensure_app_directories(config: dict):
    """Creates the log file's directory when file logging is configured."""
    log_file = config.get('logging', {}).get('log_file')
    if not log_file:
        return
    target_dir = Path(log_file).parent
    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        logger.debug(f"Ensured directory exists: {target_dir}")
    except OSError as e:
        logger.error(f"Failed to create directory {target_dir}: {e}", exc_info=True)
