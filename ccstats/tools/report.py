"""
Statistics reports for transaction pools.

summarize() collects the pool statistics into a dict, format_summary()
renders it as the plain-text stats file, weekly_breakdown() slices a date
range into 7 day windows, and to_dataframe()/export_csv() hand the
transactions to pandas.
"""

import logging
from datetime import date, timedelta
from pathlib import Path
from typing import Any, Dict, List, Union

import pandas as pd

from ccstats.core.pool import TransactionPool
from ccstats.core.transaction import parse_statement_date
from ccstats.decimal_utils import round_usd
from ccstats.utils.constants import STATEMENT_DATE_FORMAT

logger = logging.getLogger("ccstats")

CSV_COLUMNS = ['date', 'description', 'amount', 'type', 'authorized']


def _describe(transaction) -> Any:
    if transaction is None:
        return None
    return {
        'date': transaction.date.isoformat(),
        'description': transaction.description,
        'amount': transaction.amount,
        'authorized': transaction.authorized,
    }


def summarize(pool: TransactionPool) -> Dict[str, Any]:
    """Collect every pool statistic into one dict."""
    date_range = pool.date_range()
    most_common = pool.most_common_transaction()
    return {
        'transactions': len(pool),
        'balance': pool.balance(),
        'earliest': date_range[0].isoformat() if date_range else None,
        'latest': date_range[1].isoformat() if date_range else None,
        'days': pool.date_span_days(),
        'average_transaction': pool.average_transaction_amount(),
        'average_per_day': pool.average_per_day(),
        'average_per_week': pool.average_per_week(),
        'standard_deviation': pool.standard_deviation(),
        'most_expensive': _describe(pool.most_expensive()),
        'least_expensive': _describe(pool.least_expensive()),
        # debits are negative, so the biggest purchase is the lowest debit
        'largest_purchase': _describe(pool.debit_transactions().least_expensive()),
        'most_common': _describe(most_common),
        'most_common_frequency': pool.frequency_of(most_common) if most_common is not None else 0,
    }


def format_summary(summary: Dict[str, Any]) -> str:
    lines = [
        f"Transactions: {summary['transactions']}",
        f"Balance: ${round_usd(summary['balance'])}",
    ]
    if summary['earliest']:
        lines.append(f"Date range: {summary['earliest']} -> {summary['latest']} ({summary['days']} days)")
    lines.extend([
        f"Average / Transaction: ${round_usd(summary['average_transaction'])}",
        f"Average / Day: ${round_usd(summary['average_per_day'])}",
        f"Average / Week: ${round_usd(summary['average_per_week'])}",
        f"Standard Deviation: +/- ${round_usd(summary['standard_deviation'])}",
    ])
    for label, key in (('Highest amount', 'most_expensive'), ('Lowest amount', 'least_expensive')):
        item = summary[key]
        if item:
            lines.append(f"{label}: {item['description']} ${round_usd(item['amount'])} on {item['date']}")
    if summary['largest_purchase']:
        item = summary['largest_purchase']
        lines.append(
            f"Largest purchase: {item['description']} ${round_usd(abs(item['amount']))} on {item['date']}"
        )
    if summary['most_common']:
        item = summary['most_common']
        lines.append(
            f"Most common: {item['description']} ${round_usd(abs(item['amount']))} "
            f"x{summary['most_common_frequency']}"
        )
    return '\n'.join(lines) + '\n'


def write_summary(pool: TransactionPool, path: Union[str, Path]) -> Path:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    with open(target, 'w', encoding='utf-8') as f:
        f.write(format_summary(summarize(pool)))
    logger.info(f"[REPORT] Statistics written to {target}")
    return target


def weekly_breakdown(pool: TransactionPool, start: Union[str, date],
                     end: Union[str, date]) -> List[Dict[str, Any]]:
    """
    Statistics per 7 day window from start to end (inclusive). The last
    window is cut short at end.
    """
    start_date = parse_statement_date(start)
    end_date = parse_statement_date(end)

    weeks = []
    window_start = start_date
    while window_start <= end_date:
        window_end = min(window_start + timedelta(days=6), end_date)
        week = pool.filter_by_date_range(window_start, window_end)
        weeks.append({
            'start': window_start.strftime(STATEMENT_DATE_FORMAT),
            'end': window_end.strftime(STATEMENT_DATE_FORMAT),
            'balance': week.balance(),
            'average_per_day': week.average_per_day(),
            'standard_deviation': week.standard_deviation(),
            'transactions': len(week),
        })
        window_start = window_end + timedelta(days=1)
    return weeks


def format_weekly(weeks: List[Dict[str, Any]]) -> str:
    blocks = []
    for week in weeks:
        blocks.append(
            f"Transactions statistics for {week['start']} -> {week['end']}:\n---\n"
            f"Balance: ${round_usd(week['balance'])}\n"
            f"Average / Day: ${round_usd(week['average_per_day'])}\n"
            f"Standard Deviation: +/- ${round_usd(week['standard_deviation'])}\n"
            f"# of transactions: {week['transactions']}\n---\n"
        )
    return ''.join(blocks)


def to_dataframe(pool: TransactionPool) -> pd.DataFrame:
    """One row per transaction, pool order (most recent first)."""
    records = [
        {
            'date': t.date.isoformat(),
            'description': t.description,
            'amount': str(t.amount),
            'type': t.kind.value,
            'authorized': t.authorized,
        }
        for t in pool
    ]
    return pd.DataFrame(records, columns=CSV_COLUMNS)


def export_csv(pool: TransactionPool, path: Union[str, Path]) -> Path:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    to_dataframe(pool).to_csv(target, index=False)
    logger.info(f"[REPORT] Exported {len(pool)} transactions to {target}")
    return target
