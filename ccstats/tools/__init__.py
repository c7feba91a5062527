"""
================================================================================
TOOLS MODULE - Reporting Utilities
================================================================================

Helpers behind the CLI report commands.

Available Tools:
    report.py - Statistics summary, weekly breakdown and CSV export

Usage:
    from ccstats.tools import report
    print(report.format_summary(report.summarize(statement.pool)))

    Or via CLI wrapper:
    python cli.py stats statement.html
================================================================================
"""

from ccstats.tools import report

__all__ = ['report']
