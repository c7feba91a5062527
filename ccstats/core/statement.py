"""
Statement: a transaction pool split into authorized and posted transactions.

The statement owns its pool. The authorized/posted views are filtered from
the pool every time they are read, so they can never drift from its contents.
"""

from typing import Iterable, Optional

from ccstats.core.pool import TransactionPool
from ccstats.core.transaction import Transaction


class Statement:

    def __init__(self, transactions: Optional[Iterable[Transaction]] = None):
        self._pool = TransactionPool(transactions)

    @classmethod
    def from_raw(cls, rows: Iterable) -> 'Statement':
        """Build from extractor rows (description, date, amount, is_debit, is_authorized)."""
        return cls(Transaction.from_raw(row) for row in rows)

    @classmethod
    def from_partitions(cls, authorized: Iterable[Transaction],
                        posted: Iterable[Transaction]) -> 'Statement':
        statement = cls(authorized)
        statement._pool.insert_all(posted)
        return statement

    @property
    def pool(self) -> TransactionPool:
        return self._pool

    @property
    def authorized(self) -> TransactionPool:
        """Pending transactions."""
        return TransactionPool(t for t in self._pool if t.authorized)

    @property
    def posted(self) -> TransactionPool:
        """Settled transactions."""
        return TransactionPool(t for t in self._pool if not t.authorized)

    def merge(self, other):
        """
        Append every transaction of other (a Statement or any iterable of
        transactions). Append semantics: nothing is deduplicated.
        """
        source = other.pool if isinstance(other, Statement) else other
        self._pool.insert_all(list(source))

    def __len__(self):
        return len(self._pool)

    def __iter__(self):
        return iter(self._pool)

    def __getitem__(self, index):
        return self._pool[index]

    def __bool__(self):
        return bool(self._pool)

    def __repr__(self):
        return (f"Statement(size={len(self)}, authorized={len(self.authorized)}, "
                f"posted={len(self.posted)})")
