#!/usr/bin/env python3
"""
================================================================================
CLI - Command Line Interface
================================================================================

Provides command-line access to the statement analyzer:
    - Statistics for a statement HTML export
    - Encrypting a statement to an encrypted JSON store
    - Statistics and weekly breakdowns from an encrypted store
    - Merging a new statement into an existing encrypted store
    - CSV export

Password Sources (first match wins):
    1. --password argument
    2. CCSTATS_PASSWORD environment variable
    3. Interactive prompt

Usage:
    python cli.py [command] [options]
    python cli.py --help
================================================================================
"""

import sys
import os
import argparse
import logging
import json
from pathlib import Path
from typing import Any, Optional

from getpass import getpass

from ccstats.core import (
    AESCipher,
    CCStatsError,
    EncryptedStatementStore,
    TransactionKind,
)
from ccstats.decimal_utils import round_usd
from ccstats.processors import load_statement
from ccstats.tools import report
from ccstats.utils import load_config, set_run_context, set_console_level, logger
from ccstats.utils.constants import PASSWORD_ENV_VAR


# ANSI color codes
class Colors:
    HEADER = '\033[95m'
    BLUE = '\033[94m'
    CYAN = '\033[96m'
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    RED = '\033[91m'
    ENDC = '\033[0m'
    BOLD = '\033[1m'
    UNDERLINE = '\033[4m'


def _pretty_json(payload: Any):
    """Render JSON to stdout with stable formatting."""
    print(json.dumps(payload, indent=2, sort_keys=True, default=str))


def print_header(text):
    """Print formatted header"""
    print(f"\n{Colors.BOLD}{Colors.BLUE}{'=' * 70}{Colors.ENDC}")
    print(f"{Colors.BOLD}{Colors.CYAN}{text:^70}{Colors.ENDC}")
    print(f"{Colors.BOLD}{Colors.BLUE}{'=' * 70}{Colors.ENDC}\n")


def print_success(text):
    """Print success message"""
    print(f"{Colors.GREEN}✓{Colors.ENDC} {text}")


def print_error(text):
    """Print error message"""
    print(f"{Colors.RED}✗{Colors.ENDC} {text}", file=sys.stderr)


def print_info(text):
    """Print info message"""
    print(f"{Colors.CYAN}ℹ{Colors.ENDC} {text}")


def _get_password(args) -> str:
    if getattr(args, 'password', None):
        return args.password
    env_password = os.environ.get(PASSWORD_ENV_VAR)
    if env_password:
        return env_password
    return getpass("Statement password: ")


def _build_store(config: dict) -> EncryptedStatementStore:
    crypto = config['crypto']
    cipher = AESCipher(
        key_length=int(crypto['aes_key_length']),
        hash_password=bool(crypto['hash_password']),
    )
    return EncryptedStatementStore(cipher, lock_timeout=config['store']['lock_timeout_seconds'])


def _select(pool, args):
    """Apply the optional --credits/--debits and --from/--to filters."""
    if getattr(args, 'credits', False):
        pool = pool.filter_by_type(TransactionKind.CREDIT)
    elif getattr(args, 'debits', False):
        pool = pool.filter_by_type(TransactionKind.DEBIT)

    start = getattr(args, 'date_from', None)
    end = getattr(args, 'date_to', None)
    if start or end:
        if not (start and end):
            raise CCStatsError("--from and --to must be given together")
        pool = pool.filter_by_date_range(start, end)
    return pool


def _print_summary(title, pool, as_json=False):
    summary = report.summarize(pool)
    if as_json:
        _pretty_json(summary)
    else:
        print_header(title)
        print(report.format_summary(summary))
    return summary


# ==================================
# COMMANDS
# ==================================

def cmd_stats(args):
    config = load_config()
    statement = load_statement(args.statement)
    pool = _select(statement.pool, args)

    _print_summary(f"Statement statistics: {Path(args.statement).name}", pool, args.json)
    if not args.json:
        print_info(f"Authorized: {len(statement.authorized)}  Posted: {len(statement.posted)}")

    if args.output:
        output_path = Path(args.output_path or config['output']['stats_file'])
        report.write_summary(pool, output_path)
        if not args.json:
            print_success(f"Statistics written to {output_path}")
    return True


def cmd_encrypt(args):
    config = load_config()
    statement = load_statement(args.statement)
    store = _build_store(config)
    target = store.write(args.output, _get_password(args), statement)
    print_success(f"Encrypted {len(statement)} transactions to {target}")
    return True


def cmd_show(args):
    config = load_config()
    store = _build_store(config)
    statement = store.read(args.store, _get_password(args))
    pool = _select(statement.pool, args)
    _print_summary(f"Encrypted statement: {Path(args.store).name}", pool, args.json)
    return True


def cmd_weekly(args):
    config = load_config()
    store = _build_store(config)
    statement = store.read(args.store, _get_password(args))
    # purchases are the negative amounts
    spending = statement.pool.debit_transactions()

    weeks = report.weekly_breakdown(spending, args.date_from, args.date_to)
    if args.json:
        _pretty_json(weeks)
    else:
        print(report.format_weekly(weeks), end='')
        spent = -spending.filter_by_date_range(args.date_from, args.date_to).balance()
        print(f"Total spent in range: ${round_usd(spent)}")
    return True


def cmd_merge(args):
    config = load_config()
    store = _build_store(config)
    password = _get_password(args)

    master = store.read(args.store, password)
    child = _select(load_statement(args.statement).pool.debit_transactions(), args)

    before = len(master)
    master.merge(child)
    store.write(args.store, password, master)
    print_success(f"Merged {len(master) - before} transactions into {args.store} ({len(master)} total)")
    return True


def cmd_export(args):
    config = load_config()
    store = _build_store(config)
    statement = store.read(args.store, _get_password(args))
    target = report.export_csv(_select(statement.pool, args), args.output)
    print_success(f"Exported transactions to {target}")
    return True


def _add_password(parser):
    parser.add_argument('--password', help=f'Store password (default: ${PASSWORD_ENV_VAR} or prompt)')


def _add_filters(parser, types=True):
    parser.add_argument('--from', dest='date_from', help='Start date, e.g. "Sep 01, 2017"')
    parser.add_argument('--to', dest='date_to', help='End date, e.g. "Sep 30, 2017"')
    if types:
        group = parser.add_mutually_exclusive_group()
        group.add_argument('--credits', action='store_true', help='Only credit transactions')
        group.add_argument('--debits', action='store_true', help='Only debit transactions')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='ccstats - Credit card statement statistics with encrypted storage',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  %(prog)s stats statement.html                      # Print statistics
  %(prog)s stats statement.html --output             # Also write ccstats_stats.txt
  %(prog)s encrypt statement.html master.json        # Encrypt statement
  %(prog)s show master.json --credits                # Statistics from encrypted store
  %(prog)s weekly master.json --from "Sep 01, 2017" --to "Sep 30, 2017"
  %(prog)s merge master.json new.html --from "Dec 16, 2017" --to "Jan 13, 2018"
  %(prog)s export master.json transactions.csv
        '''
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    parser_stats = subparsers.add_parser('stats', help='Statistics for a statement HTML file')
    parser_stats.add_argument('statement', help='Statement HTML export (.html/.htm)')
    parser_stats.add_argument('--output', action='store_true', help='Write statistics to a text file')
    parser_stats.add_argument('--output-path', help='Statistics file path (default from config)')
    parser_stats.add_argument('--json', action='store_true', help='Print statistics as JSON')
    _add_filters(parser_stats)
    parser_stats.set_defaults(func=cmd_stats)

    parser_encrypt = subparsers.add_parser('encrypt', help='Encrypt a statement to a JSON store')
    parser_encrypt.add_argument('statement', help='Statement HTML export (.html/.htm)')
    parser_encrypt.add_argument('output', help='Encrypted JSON output path')
    _add_password(parser_encrypt)
    parser_encrypt.set_defaults(func=cmd_encrypt)

    parser_show = subparsers.add_parser('show', help='Statistics from an encrypted store')
    parser_show.add_argument('store', help='Encrypted JSON statement')
    parser_show.add_argument('--json', action='store_true', help='Print statistics as JSON')
    _add_password(parser_show)
    _add_filters(parser_show)
    parser_show.set_defaults(func=cmd_show)

    parser_weekly = subparsers.add_parser('weekly', help='Weekly breakdown of spending (debit transactions)')
    parser_weekly.add_argument('store', help='Encrypted JSON statement')
    parser_weekly.add_argument('--from', dest='date_from', required=True, help='Start date, e.g. "Sep 01, 2017"')
    parser_weekly.add_argument('--to', dest='date_to', required=True, help='End date, e.g. "Sep 30, 2017"')
    parser_weekly.add_argument('--json', action='store_true', help='Print the breakdown as JSON')
    _add_password(parser_weekly)
    parser_weekly.set_defaults(func=cmd_weekly)

    parser_merge = subparsers.add_parser('merge', help='Merge the purchases of a statement into an encrypted store')
    parser_merge.add_argument('store', help='Encrypted JSON statement to update')
    parser_merge.add_argument('statement', help='Statement HTML export to merge')
    _add_password(parser_merge)
    _add_filters(parser_merge, types=False)
    parser_merge.set_defaults(func=cmd_merge)

    parser_export = subparsers.add_parser('export', help='Export an encrypted store to CSV')
    parser_export.add_argument('store', help='Encrypted JSON statement')
    parser_export.add_argument('output', help='CSV output path')
    _add_password(parser_export)
    _add_filters(parser_export)
    parser_export.set_defaults(func=cmd_export)

    return parser


def main(argv: Optional[list] = None):
    """Main CLI entry point"""
    parser = build_parser()

    # Parse arguments
    args = parser.parse_args(argv)

    # If no command specified, show help
    if not args.command:
        parser.print_help()
        return 0

    set_run_context('cli')
    if getattr(args, 'json', False):
        # keep stdout a single JSON document
        set_console_level(logging.WARNING)

    # Run command
    try:
        success = args.func(args)
        return 0 if success else 1
    except KeyboardInterrupt:
        print_info("\nOperation cancelled by user")
        return 130
    except CCStatsError as e:
        print_error(str(e))
        return 1
    except OSError as e:
        print_error(f"File error: {e}")
        return 1
    except Exception as e:
        logger.exception("Unexpected error")
        print_error(f"Unexpected error: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
