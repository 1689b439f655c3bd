"""
Configuration module for Pixie recommendations.

This module provides configuration loading and validation utilities.
"""

from pathlib import Path
import yaml
from typing import Dict, Any, Optional

REQUIRED_SECTIONS = ('recommend', 'data', 'logging')


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to config file. If None, loads default.yaml

    Returns:
        Configuration dictionary

    Raises:
        ValueError: If a required section is missing
    """
    if config_path is None:
        config_path = Path(__file__).parent / "default.yaml"
    else:
        config_path = Path(config_path)

    with open(config_path, 'r') as f:
        config = yaml.safe_load(f) or {}

    missing = [s for s in REQUIRED_SECTIONS if s not in config]
    if missing:
        raise ValueError(f"Config {config_path} is missing sections: {', '.join(missing)}")

    return config


def get_default_config() -> Dict[str, Any]:
    """Get default configuration dictionary."""
    return load_config()


__all__ = ['load_config', 'get_default_config']
