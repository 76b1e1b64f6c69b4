"""
Configuration Loader

Loads YAML configuration for training and generation. Files are looked up in
the project's `configs/` directory: `babble_<environment>.yaml` first, then
`babble.yaml`. Values found there are merged over DEFAULT_CONFIG, so a file
only needs the keys it changes.
"""

import copy
import logging
import os

import yaml

from babble.exceptions import ConfigError

module_logger = logging.getLogger(__name__)

CONFIG_NAME = "babble"

DEFAULT_CONFIG = {
    "generation": {
        "max_tokens": 100,
        "boundaries": "line-endings",
        "segments": 1,
        "seed": None,
    },
    "training": {
        "encoding": "utf-8",
        "progress_interval": 10000,
        "max_consecutive_read_errors": 10,
    },
    "logging": {
        "level": "INFO",
        "console_json": False,
        "log_file": None,
    },
    "monitoring": {
        "enabled": False,
        "interval": 10.0,
        "memory_limit_percentage": 85,
    },
}


def find_config_dir(start_dir=None):
    """
    Find the nearest `configs` directory, walking up from `start_dir`.

    Args:
        start_dir (str, optional): Where to start. Defaults to this module's directory.

    Returns:
        str or None: Path to the configs directory, or None if there is none.
    """
    project_root = start_dir or os.path.dirname(os.path.abspath(__file__))

    # Stop at filesystem root
    while project_root != os.path.dirname(project_root):
        config_dir = os.path.join(project_root, "configs")
        if os.path.isdir(config_dir):
            return config_dir
        project_root = os.path.dirname(project_root)

    return None


def merge_config(base, overrides):
    """
    Merge `overrides` into a copy of `base`, key by key for nested mappings.

    Returns:
        dict: The merged configuration.
    """
    merged = copy.deepcopy(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = value
    return merged


def read_config_file(config_path):
    with open(config_path, "r", encoding="utf-8") as f:
        config = yaml.safe_load(f)

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ConfigError(
            f"Configuration in {config_path} must be a mapping, got {type(config).__name__}")
    return config


def load_config(environment="development", config_path=None, config_dir=None, logger=None):
    """
    Load the configuration for an environment.

    Args:
        environment (str): Environment name ('development', 'test' or 'production').
        config_path (str, optional): Explicit file to load instead of searching `configs/`.
        config_dir (str, optional): Directory to search instead of discovering one.
        logger (Logger, optional): Logger for diagnostics.

    Returns:
        dict: DEFAULT_CONFIG merged with the first configuration file found.

    Raises:
        ConfigError: If `config_path` is given but missing or malformed.
    """
    logger = logger or module_logger

    if config_path is not None:
        if not os.path.exists(config_path):
            raise ConfigError(f"Configuration file not found: {config_path}")
        try:
            config = read_config_file(config_path)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e
        logger.info("Configuration loaded", extra={
            "metrics": {"config_path": config_path, "environment": environment}
        })
        return merge_config(DEFAULT_CONFIG, config)

    config_dir = config_dir or find_config_dir()
    if config_dir is None:
        logger.info("No configs directory found, using defaults")
        return copy.deepcopy(DEFAULT_CONFIG)

    candidates = [
        os.path.join(config_dir, f"{CONFIG_NAME}_{environment}.yaml"),
        os.path.join(config_dir, f"{CONFIG_NAME}.yaml"),
    ]

    for candidate in candidates:
        if not os.path.exists(candidate):
            continue
        try:
            config = read_config_file(candidate)
        except (yaml.YAMLError, ConfigError, OSError) as e:
            logger.warning(f"Error loading configuration from {candidate}: {e}")
            continue

        logger.info("Configuration loaded", extra={
            "metrics": {"config_path": candidate, "environment": environment}
        })
        return merge_config(DEFAULT_CONFIG, config)

    logger.info("No configuration file found, using defaults", extra={
        "metrics": {"config_dir": config_dir, "environment": environment}
    })
    return copy.deepcopy(DEFAULT_CONFIG)
