"""
Configuration Management Module

Handles loading and validating application configuration from config.json
Merges user settings over defaults so new keys always exist
"""

import copy
import json
from pathlib import Path
import logging

from .constants import DEFAULT_STATS_FILE

logger = logging.getLogger("ccstats")

DEFAULT_CONFIG = {
    "crypto": {
        "aes_key_length": 256,
        # Unsalted SHA-256 pass over the password before PBKDF2. Existing
        # encrypted statements need it on to stay readable.
        "hash_password": True,
    },
    "output": {
        "stats_file": DEFAULT_STATS_FILE,
    },
    "store": {
        "lock_timeout_seconds": 10,
    },
}


def load_config():
    """
    Load configuration from config.json with sensible defaults

    Returns:
        dict: Configuration dictionary
    """
    from .constants import CONFIG_FILE

    defaults = copy.deepcopy(DEFAULT_CONFIG)

    if not CONFIG_FILE.exists():
        _save_config(CONFIG_FILE, defaults)
        return defaults

    try:
        with open(CONFIG_FILE, 'r', encoding='utf-8') as f:
            config = json.load(f)

        if not isinstance(config, dict):
            logger.error(f"Config file {CONFIG_FILE} is not a JSON object. Using defaults.")
            return defaults

        # Merge with defaults to ensure all keys exist
        merged = _deep_merge(defaults, config)

        # Save merged config back if anything was added
        if merged != config:
            _save_config(CONFIG_FILE, merged)

        return merged
    except json.JSONDecodeError as e:
        logger.error(f"Config file corrupted: {e}. Using defaults.")
        return defaults
    except OSError as e:
        logger.error(f"Error loading config: {e}. Using defaults.")
        return defaults


def _deep_merge(defaults: dict, override: dict) -> dict:
    """
    Deep merge override config into defaults, preserving new defaults

    Args:
        defaults: Default configuration
        override: User-provided configuration

    Returns:
        dict: Merged configuration
    """
    result = defaults.copy()
    for key, value in override.items():
        if key in defaults and isinstance(defaults[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(defaults[key], value)
        else:
            result[key] = value
    return result


def _save_config(config_file: Path, config: dict):
    """
    Save configuration to file

    Args:
        config_file: Path to config file
        config: Configuration dictionary
    """
    try:
        config_file.parent.mkdir(parents=True, exist_ok=True)
        with open(config_file, 'w', encoding='utf-8') as f:
            json.dump(config, f, indent=4)
    except OSError as e:
        logger.error(f"Failed to save config: {e}")
