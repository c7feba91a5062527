"""
================================================================================
CCSTATS PACKAGE - Credit Card Statement Statistics
================================================================================

Top-level package containing all application modules organized by function.

Package Structure:
    ccstats/core/        - Core business logic (transactions, pool, statement,
                           encryption, encrypted store)
    ccstats/processors/  - Input processing (HTML statement extraction)
    ccstats/tools/       - Reporting helpers used by the CLI
    ccstats/utils/       - Shared utilities (logging, config, constants)

Design Principles:
    - Separation of concerns
    - Minimal circular dependencies
    - Test-friendly architecture
    - Clear public APIs
================================================================================
"""

__version__ = "2025.1"
