"""Configuration loading for VMScaleSim."""

from pathlib import Path
from typing import Optional

import yaml

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent / "default.yaml"


def load_config(config_path: str) -> dict:
    """Load configuration from YAML file.

    Args:
        config_path: Path to configuration file

    Returns:
        Configuration dictionary (empty if the file is empty)
    """
    with open(config_path, 'r') as f:
        return yaml.safe_load(f) or {}


def merge_configs(base_config: dict, override_config: dict) -> dict:
    """Recursively merge override_config into a copy of base_config.

    Nested dicts are merged; any other value (lists included) is replaced.
    """
    merged = base_config.copy()
    for key, value in override_config.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_with_defaults(config_path: Optional[str] = None) -> dict:
    """Load a configuration file layered over the packaged defaults.

    Args:
        config_path: Optional override file

    Returns:
        Merged configuration
    """
    config = load_config(str(DEFAULT_CONFIG_PATH))
    if config_path:
        config = merge_configs(config, load_config(config_path))
    return config
