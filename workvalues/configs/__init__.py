"""Configuration loading module."""

from .loader import load_config, validate_config, get_config_value, resolve_path

__all__ = ["load_config", "validate_config", "get_config_value", "resolve_path"]
