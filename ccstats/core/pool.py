"""
================================================================================
TRANSACTION POOL - Sorted, Frequency-Tracked Transaction Collection
================================================================================

Ordered collection of Transactions with statistics over its contents.

Invariants:
    1. Sort order - always sorted by date, most recent first. Transactions on
       the same day keep their insertion order.
    2. Frequency index - every member is counted under exactly one
       representative key (equality = description + amount), and the counts
       always sum to len(pool). Insertions and removals both maintain it.

Filters:
    Every filter returns a NEW pool and leaves this one untouched. Filters
    walk the pool in order, so results keep the same relative order.

Statistics:
    balance, date span, averages (per transaction, per day, per week, over a
    nominal date range), sample standard deviation, most/least expensive and
    most common transaction. All return a neutral value (0 or None) on an
    empty pool instead of raising.

Usage:
    pool = TransactionPool(transactions)
    credits = pool.credit_transactions()
    week = credits.filter_by_date_range('Sep 01, 2017', 'Sep 07, 2017')
    print(week.balance(), week.average_per_day())
================================================================================
"""

from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, Iterator, List, Optional, Tuple, Union

from ccstats.core.transaction import Transaction, TransactionKind, parse_statement_date

DateLike = Union[str, date]


class TransactionFrequency:
    """Occurrence counter for one representative transaction."""

    def __init__(self, transaction: Transaction, frequency: int = 1):
        self.transaction = transaction
        self.frequency = frequency

    def increment(self):
        self.frequency += 1

    def decrement(self):
        self.frequency -= 1

    def __repr__(self):
        return (f"[Description={self.transaction.description},"
                f"Amount={abs(self.transaction.amount):.2f}, frequency={self.frequency}]")


class TransactionPool:
    """Date-descending collection of transactions with a frequency index."""

    def __init__(self, transactions: Optional[Iterable[Transaction]] = None):
        self._transactions: List[Transaction] = []
        self._frequencies: Dict[Transaction, TransactionFrequency] = {}
        if transactions is not None:
            self.insert_all(transactions)

    # ------------------------------------------------------------------
    # Container protocol
    # ------------------------------------------------------------------

    def __len__(self):
        return len(self._transactions)

    def __iter__(self) -> Iterator[Transaction]:
        return iter(self._transactions)

    def __getitem__(self, index):
        return self._transactions[index]

    def __bool__(self):
        return bool(self._transactions)

    def __repr__(self):
        return f"TransactionPool(size={len(self)}, balance={self.balance()})"

    def to_list(self) -> List[Transaction]:
        return list(self._transactions)

    # ------------------------------------------------------------------
    # Insertion
    # ------------------------------------------------------------------

    def insert(self, transaction: Transaction):
        """
        Insert keeping the pool sorted by date, most recent first.

        Scans from the head past every transaction dated on or after the new
        one, so same-day transactions stay in insertion order. A plain
        "first position not strictly after" scan would put each new same-day
        transaction first instead; the stable order is what round trips.
        """
        i = 0
        size = len(self._transactions)
        while i < size and self._transactions[i].date >= transaction.date:
            i += 1

        self._transactions.insert(i, transaction)
        self._update_frequency(transaction)

    def insert_all(self, transactions: Iterable[Transaction]):
        """Insert one at a time, in iteration order."""
        for transaction in transactions:
            self.insert(transaction)

    def _update_frequency(self, transaction: Transaction):
        entry = self._frequencies.get(transaction)
        if entry is not None:
            entry.increment()
        else:
            self._frequencies[transaction] = TransactionFrequency(transaction, 1)

    def _release_frequency(self, transaction: Transaction):
        entry = self._frequencies[transaction]
        entry.decrement()
        if entry.frequency == 0:
            del self._frequencies[transaction]

    # ------------------------------------------------------------------
    # Filters
    # ------------------------------------------------------------------

    def _select(self, predicate) -> 'TransactionPool':
        return TransactionPool(t for t in self._transactions if predicate(t))

    def filter_by_type(self, kind: TransactionKind) -> 'TransactionPool':
        """Debits are amount < 0, credits amount >= 0."""
        kind = TransactionKind(kind)
        if kind is TransactionKind.DEBIT:
            return self._select(lambda t: t.amount < 0)
        return self._select(lambda t: t.amount >= 0)

    def debit_transactions(self) -> 'TransactionPool':
        return self.filter_by_type(TransactionKind.DEBIT)

    def credit_transactions(self) -> 'TransactionPool':
        return self.filter_by_type(TransactionKind.CREDIT)

    def filter_by_date_range(self, start: DateLike, end: DateLike) -> 'TransactionPool':
        """
        All transactions from start to end, both inclusive.

        Args:
            start: date or 'MMM dd, yyyy' text
            end: date or 'MMM dd, yyyy' text

        Raises:
            InvalidDateError: malformed date text
        """
        start_date = parse_statement_date(start)
        end_date = parse_statement_date(end)
        return self._select(lambda t: start_date <= t.date <= end_date)

    def filter_by_amount_range(self, minimum, maximum) -> 'TransactionPool':
        minimum = Decimal(str(minimum))
        maximum = Decimal(str(maximum))
        return self._select(lambda t: minimum <= t.amount <= maximum)

    def filter_by_description(self, keyword: str, substring: bool = False) -> 'TransactionPool':
        """
        Case-insensitive description match.

        Args:
            keyword: text to look for
            substring: also accept descriptions that merely contain keyword
        """
        key = keyword.lower()

        def matches(transaction):
            description = transaction.description.lower()
            return description == key or (substring and key in description)

        return self._select(matches)

    def transactions_equal_to(self, transaction: Transaction) -> 'TransactionPool':
        """Every transaction with the same description and amount."""
        return self._select(lambda t: t == transaction)

    # ------------------------------------------------------------------
    # Removal
    # ------------------------------------------------------------------

    def _remove_where(self, predicate) -> bool:
        kept = []
        removed = False
        for transaction in self._transactions:
            if predicate(transaction):
                self._release_frequency(transaction)
                removed = True
            else:
                kept.append(transaction)
        self._transactions = kept
        return removed

    def remove_by_keyword(self, keyword: str) -> bool:
        """Remove every transaction whose description contains keyword (any case)."""
        key = keyword.lower()
        return self._remove_where(lambda t: key in t.description.lower())

    def remove_by_equivalence(self, transaction: Transaction) -> bool:
        """Remove every transaction equal to the given one."""
        return self._remove_where(lambda t: t == transaction)

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def balance(self) -> Decimal:
        return sum((t.amount for t in self._transactions), Decimal(0))

    def date_range(self) -> Optional[Tuple[date, date]]:
        """(earliest, latest), or None for an empty pool."""
        if not self._transactions:
            return None
        return self._transactions[-1].date, self._transactions[0].date

    def date_span_days(self) -> int:
        """
        Days from the earliest to the latest transaction, both included.

        Relies on the sort order: index 0 is the latest transaction and the
        last index the earliest.
        """
        if not self._transactions:
            return 0
        earliest, latest = self.date_range()
        return (latest - earliest).days + 1

    def average_transaction_amount(self) -> Decimal:
        if not self._transactions:
            return Decimal(0)
        return self.balance() / len(self._transactions)

    def average_per_day(self) -> Decimal:
        """Average over the days spanned by transactions that actually exist."""
        if not self._transactions:
            return Decimal(0)
        return self.balance() / self.date_span_days()

    def average_per_week(self) -> Decimal:
        return self.average_per_day() * 7

    def average_over_date_range(self, start: DateLike, end: DateLike) -> Decimal:
        """
        Average per day over the nominal range start..end (inclusive).

        Unlike average_per_day() every day of the range counts, including
        days without transactions: a 17 day range with transactions on only
        the first 15 days still divides by 17. A reversed range (end before
        start) covers no days and averages to 0.
        """
        start_date = parse_statement_date(start)
        end_date = parse_statement_date(end)
        if end_date < start_date:
            return Decimal(0)
        pool = self.filter_by_date_range(start_date, end_date)
        days = (end_date - start_date).days
        return pool.balance() / (days + 1)

    def standard_deviation(self) -> Decimal:
        """Sample standard deviation (n - 1) of the amounts."""
        size = len(self._transactions)
        if size <= 1:
            return Decimal(0)

        average = self.average_transaction_amount()
        squared = sum(((t.amount - average) ** 2 for t in self._transactions), Decimal(0))
        return (squared / (size - 1)).sqrt()

    def most_expensive(self) -> Optional[Transaction]:
        """Highest amount; on exact ties the later-scanned transaction wins."""
        if not self._transactions:
            return None

        result = self._transactions[0]
        for transaction in self._transactions:
            if transaction.amount >= result.amount:
                result = transaction
        return result

    def least_expensive(self) -> Optional[Transaction]:
        """Lowest amount; on exact ties the later-scanned transaction wins."""
        if not self._transactions:
            return None

        result = self._transactions[0]
        for transaction in self._transactions:
            if transaction.amount <= result.amount:
                result = transaction
        return result

    # ------------------------------------------------------------------
    # Frequency index
    # ------------------------------------------------------------------

    def most_common_frequency(self) -> Optional[TransactionFrequency]:
        """Frequency record with the highest count; earliest-inserted key wins ties."""
        best = None
        for entry in self._frequencies.values():
            if best is None or entry.frequency > best.frequency:
                best = entry
        return best

    def most_common_transaction(self) -> Optional[Transaction]:
        best = self.most_common_frequency()
        return best.transaction if best is not None else None

    def frequency_of(self, transaction: Transaction) -> int:
        entry = self._frequencies.get(transaction)
        return entry.frequency if entry is not None else 0

    def frequencies(self) -> Dict[Transaction, int]:
        """Snapshot of representative transaction -> occurrence count."""
        return {key: entry.frequency for key, entry in self._frequencies.items()}
