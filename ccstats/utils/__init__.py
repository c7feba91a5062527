"""
================================================================================
UTILS MODULE - Shared Utilities and Helpers
================================================================================

Shared infrastructure used across all application components.

Exported Functions:
    Logging:
        - setup_logging() - Initialize logging infrastructure
        - set_run_context(context) - Set execution context
        - set_console_level(level) - Quiet the console handler
        - logger - Main application logger

    Configuration:
        - load_config() - Load configuration from config.json

    Constants:
        - All system constants via wildcard import
        - File paths, date formats, encryption parameters

Usage:
    from ccstats.utils import logger, load_config
    from ccstats.utils.constants import AES_KDF_ITERATIONS
================================================================================
"""

from .logger import setup_logging, set_run_context, set_console_level, logger
from .constants import *
from .config import load_config

__all__ = [
    'setup_logging',
    'set_run_context',
    'set_console_level',
    'logger',
    'load_config',
]
