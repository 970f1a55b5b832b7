"""
reaper_harness.config - Configuration Loading

This module loads harness settings from YAML and installs the logging
configuration used by the plugin side of the harness.

Configuration Files:
    - harness.yaml: default settings shipped next to this module

Environment Variables:
    REAPER_HARNESS_CONFIG: path to a YAML file replacing harness.yaml
"""

import copy
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

# Configuration directory
CONFIG_DIR = Path(__file__).parent

DEFAULT_CONFIG_PATH = CONFIG_DIR / "harness.yaml"
CONFIG_ENV_VAR = "REAPER_HARNESS_CONFIG"

DEFAULT_MODE_ENV_VAR = "RUN_REAPER_INTEGRATION_TEST"

# Used when a key is missing from the YAML file (or the file is missing)
DEFAULTS: Dict[str, Any] = {
    "mode": {
        "env_var": DEFAULT_MODE_ENV_VAR,
    },
    "action": {
        "description": "",
    },
    "driver": {
        "env_var": "",
    },
    "logging": {
        "level": "INFO",
        "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        "file": "",
    },
}


def load_yaml(path: Path) -> Dict[str, Any]:
    """
    Load a YAML configuration file.

    Args:
        path: Path to the YAML file

    Returns:
        Parsed YAML content as a dictionary (empty if the file doesn't exist)

    Raises:
        yaml.YAMLError: If the file contains invalid YAML
        ValueError: If the top level of the file is not a mapping
    """
    if not path.exists():
        logger.warning(f"Configuration file not found: {path}")
        return {}

    with open(path, 'r') as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Configuration root must be a mapping: {path}")
    return data


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def resolve_config_path(path: Optional[Path] = None) -> Path:
    """Pick the explicit path, then REAPER_HARNESS_CONFIG, then harness.yaml."""
    if path is not None:
        return Path(path)
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    return DEFAULT_CONFIG_PATH


def load_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load the harness configuration merged over the built-in defaults."""
    config_path = resolve_config_path(path)
    return _merge(DEFAULTS, load_yaml(config_path))


def get_mode_env_var(config: Dict[str, Any]) -> str:
    """Name of the environment variable that selects automated mode."""
    return config.get("mode", {}).get("env_var") or DEFAULT_MODE_ENV_VAR


def get_driver_env_var(config: Dict[str, Any]) -> str:
    """
    Variable the external driver sets on the host.

    driver.env_var when given, otherwise the plugin-side mode.env_var so both
    ends agree by default.
    """
    return config.get("driver", {}).get("env_var") or get_mode_env_var(config)


def get_action_description(config: Dict[str, Any], action_name: str) -> str:
    return config.get("action", {}).get("description") or action_name


def configure_logging(config: Dict[str, Any]) -> None:
    """
    Install root logging handlers from the logging section.

    No-op when the root logger already has handlers (the host or a test
    runner configured logging first).
    """
    if logging.getLogger().handlers:
        return

    log_config = config.get("logging", {})
    level_name = str(log_config.get("level") or "INFO").upper()
    level = getattr(logging, level_name, None)
    if not isinstance(level, int):
        logger.warning(f"Unknown log level '{level_name}', using INFO")
        level = logging.INFO

    handlers = [logging.StreamHandler()]
    log_file = log_config.get("file")
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        format=log_config.get("format") or DEFAULTS["logging"]["format"],
        handlers=handlers,
    )


__all__ = [
    'CONFIG_DIR',
    'CONFIG_ENV_VAR',
    'DEFAULT_CONFIG_PATH',
    'DEFAULT_MODE_ENV_VAR',
    'DEFAULTS',
    'load_yaml',
    'load_config',
    'resolve_config_path',
    'get_mode_env_var',
    'get_driver_env_var',
    'get_action_description',
    'configure_logging',
]
