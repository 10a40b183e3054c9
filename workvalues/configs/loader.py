"""
Configuration loading and validation.

This module handles loading of the pipeline YAML configuration and
validates that all required fields are present and consistent.
"""

import logging
from pathlib import Path
from typing import Dict, Any, List

import yaml

logger = logging.getLogger(__name__)

REQUIRED_SECTIONS = ["global", "instrument", "catalog", "matching"]


def load_config(filepath: str) -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Args:
        filepath: Path to the YAML configuration file

    Returns:
        Configuration dictionary

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is invalid
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {filepath}")

    logger.info(f"Loading configuration from {filepath}")
    with open(filepath, "r") as f:
        config = yaml.safe_load(f)

    if config is None:
        raise ValueError(f"Configuration file is empty: {filepath}")

    return config


def validate_config(config: Dict[str, Any]) -> List[str]:
    """
    Validate configuration and return list of warnings/errors.

    Args:
        config: Configuration dictionary

    Returns:
        List of warning/error messages (empty if valid)
    """
    issues = []

    for section in REQUIRED_SECTIONS:
        if section not in config:
            issues.append(f"Missing required section: {section}")

    if "instrument" in config and "path" not in (config["instrument"] or {}):
        issues.append("Missing instrument.path")

    if "catalog" in config:
        catalog = config["catalog"] or {}
        if "path" not in catalog:
            issues.append("Missing catalog.path")
        if "version" not in catalog:
            issues.append("Missing catalog.version (catalog output is unversioned)")

    if "matching" in config:
        matching = config["matching"] or {}
        minimum = matching.get("minimum_threshold", 0.291)
        strong = matching.get("strong_threshold", 0.368)
        for name, value in [("minimum_threshold", minimum), ("strong_threshold", strong)]:
            if not -1 <= value <= 1:
                issues.append(f"matching.{name} must be in [-1, 1], got {value}")
        if strong < minimum:
            issues.append(
                f"matching.strong_threshold ({strong}) is below minimum_threshold ({minimum})"
            )
        chunk_size = matching.get("chunk_size", 500)
        if chunk_size <= 0:
            issues.append(f"matching.chunk_size must be positive, got {chunk_size}")

    return issues


def get_config_value(config: Dict[str, Any], path: str, default: Any = None) -> Any:
    """
    Get a nested configuration value using dot notation.

    Args:
        config: Configuration dictionary
        path: Dot-separated path (e.g., "matching.strong_threshold")
        default: Default value if path doesn't exist

    Returns:
        Configuration value or default
    """
    keys = path.split(".")
    value = config
    for key in keys:
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default
    return value


def resolve_path(config_path: str, target: str) -> Path:
    """
    Resolve a path from the config relative to the project root.

    Paths in the config are written relative to the directory that contains
    ``configs/``; absolute paths are returned unchanged.
    """
    target_path = Path(target)
    if target_path.is_absolute():
        return target_path
    config_dir = Path(config_path).resolve().parent
    root = config_dir.parent if config_dir.name == "configs" else config_dir
    return root / target_path
