#!/usr/bin/env python3
"""
NessusLens - Configuration Management Module
Copyright (C) 2026  Dorin Badea
GPLv3 License

Persistent defaults for the CLI (sorting, filtering, grouping, export).
"""

import copy
import json
import logging
import os
import stat
from typing import Any, Dict, Tuple

# Config version
CONFIG_VERSION = "1.2.0"

# Environment variable overriding the config home directory
ENV_NESSUSLENS_HOME = "NESSUSLENS_HOME"

# Default config structure
DEFAULT_CONFIG: Dict[str, Any] = {
    "version": CONFIG_VERSION,
    "defaults": {
        "sort_field": None,  # severity, cvss_score, host, ...
        "sort_direction": None,  # "asc" / "desc"
        "filter": None,  # all, critical, high, ..., has_cve
        "group_by_cve": None,  # True/False
        "collapse_groups": None,  # True/False
        "output_dir": None,
        "export_formats": None,  # list[str] subset of csv/json/jsonl/summary
        "max_workers": None,  # int | None
    },
}

logger = logging.getLogger("NessusLens")


def get_config_paths() -> Tuple[str, str]:
    """
    Get the config directory and file path.

    $NESSUSLENS_HOME wins when set; otherwise ~/.nessuslens/config.json.
    """
    override = os.environ.get(ENV_NESSUSLENS_HOME)
    if override and override.strip():
        config_dir = os.path.expanduser(override.strip())
    else:
        config_dir = os.path.join(os.path.expanduser("~"), ".nessuslens")
    return config_dir, os.path.join(config_dir, "config.json")


def ensure_config_dir() -> str:
    """
    Create config directory if it doesn't exist.

    Returns:
        Path to config directory
    """
    config_dir, _ = get_config_paths()
    if not os.path.isdir(config_dir):
        os.makedirs(config_dir, mode=0o700, exist_ok=True)
    try:
        os.chmod(config_dir, 0o700)
    except OSError:
        logger.debug("Failed to chmod config dir: %s", config_dir, exc_info=True)
    return config_dir


def load_config() -> Dict[str, Any]:
    """
    Load configuration from file.

    Returns:
        Configuration dictionary (defaults if file doesn't exist or is unreadable)
    """
    _, config_file = get_config_paths()
    if not os.path.isfile(config_file):
        return copy.deepcopy(DEFAULT_CONFIG)

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            config = json.load(f)
        if not isinstance(config, dict):
            raise ValueError("config root is not an object")

        # Merge with defaults for any missing keys
        merged = copy.deepcopy(DEFAULT_CONFIG)
        merged.update(config)
        return merged

    except (json.JSONDecodeError, ValueError, IOError):
        logger.debug("Failed to load config file; using defaults", exc_info=True)
        return copy.deepcopy(DEFAULT_CONFIG)


def save_config(config: Dict[str, Any]) -> bool:
    """
    Save configuration to file with secure permissions.

    Args:
        config: Configuration dictionary to save

    Returns:
        True if save succeeded
    """
    try:
        ensure_config_dir()
    except OSError:
        logger.debug("Failed to create config dir", exc_info=True)
        return False
    _, config_file = get_config_paths()

    # Ensure version is current
    config["version"] = CONFIG_VERSION

    try:
        # Write to temp file first then rename (atomic)
        temp_file = config_file + ".tmp"
        with open(temp_file, "w", encoding="utf-8") as f:
            json.dump(config, f, indent=2)

        # Set secure permissions (owner read/write only)
        os.chmod(temp_file, stat.S_IRUSR | stat.S_IWUSR)

        os.replace(temp_file, config_file)
        return True

    except (IOError, OSError):
        logger.debug("Failed to save config file", exc_info=True)
        return False


def get_persistent_defaults() -> Dict[str, Any]:
    """
    Get persisted defaults from config file.

    Returns:
        Dict with default keys; values may be None if not configured.
    """
    config = load_config()
    raw = config.get("defaults")
    defaults = DEFAULT_CONFIG["defaults"].copy()
    if isinstance(raw, dict):
        defaults.update({k: v for k, v in raw.items() if k in defaults})
    return defaults


def update_persistent_defaults(**kwargs: Any) -> bool:
    """
    Update persisted defaults in config file.

    Any keys not present in DEFAULT_CONFIG["defaults"] are ignored.

    Returns:
        True if save succeeded
    """
    config = load_config()
    existing = config.get("defaults")
    defaults = existing if isinstance(existing, dict) else {}

    allowed = set(DEFAULT_CONFIG["defaults"].keys())
    for key, value in kwargs.items():
        if key in allowed:
            defaults[key] = value

    config["defaults"] = defaults
    return save_config(config)
