"""
================================================================================
TRANSACTION - Single Statement Ledger Line
================================================================================

Immutable value object for one line of a credit card statement.

Sign Convention:
    amount < 0  -> Debit: consumption of credit (a purchase)
    amount >= 0 -> Credit: grant of credit (a payment or refund)

Equality:
    Two transactions are equal when description and amount match exactly.
    Date and authorization status are deliberately left out so recurring
    charges (same merchant, same amount, different days) compare equal.
    This is what the pool's frequency index counts.

Raw Input:
    Extractors hand over RawTransaction tuples
    (description, date text, amount magnitude, is_debit, is_authorized);
    Transaction.from_raw() applies the sign convention and parses the date.
================================================================================
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import NamedTuple, Union

from ccstats.core.exceptions import InvalidDateError
from ccstats.decimal_utils import parse_amount
from ccstats.utils.constants import STATEMENT_DATE_FORMAT


class TransactionKind(Enum):
    DEBIT = 'debit'
    CREDIT = 'credit'


class RawTransaction(NamedTuple):
    """Transaction row exactly as an extractor produced it."""
    description: str
    date: str
    amount: Union[Decimal, str]
    is_debit: bool
    is_authorized: bool


def parse_statement_date(value: Union[str, date]) -> date:
    """
    Parse a statement date ('Dec 17, 2015').

    date objects pass through unchanged (datetime values are truncated to
    their date).

    Raises:
        InvalidDateError: text does not match 'MMM dd, yyyy'
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value).strip(), STATEMENT_DATE_FORMAT).date()
    except ValueError:
        raise InvalidDateError(
            f"Invalid statement date {value!r}, expected format like 'Dec 17, 2015'"
        ) from None


@dataclass(frozen=True, eq=False)
class Transaction:
    description: str
    date: date
    amount: Decimal
    authorized: bool = False

    def __post_init__(self):
        object.__setattr__(self, 'description', self.description.strip())
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, 'amount', parse_amount(self.amount))

    @classmethod
    def from_raw(cls, raw) -> 'Transaction':
        """Build a Transaction from a RawTransaction (or any 5-tuple in that order)."""
        description, date_value, amount, is_debit, is_authorized = raw
        magnitude = abs(amount if isinstance(amount, Decimal) else parse_amount(amount))
        return cls(
            description=description,
            date=parse_statement_date(date_value),
            amount=-magnitude if is_debit else magnitude,
            authorized=bool(is_authorized),
        )

    @property
    def kind(self) -> TransactionKind:
        return TransactionKind.DEBIT if self.amount < 0 else TransactionKind.CREDIT

    @property
    def is_debit(self) -> bool:
        return self.amount < 0

    @property
    def is_credit(self) -> bool:
        return self.amount >= 0

    def __eq__(self, other):
        if not isinstance(other, Transaction):
            return NotImplemented
        return self.description == other.description and self.amount == other.amount

    def __hash__(self):
        return hash((self.description, self.amount))

    def __str__(self):
        status = 'Authorized' if self.authorized else 'Posted'
        kind = 'Credit' if self.is_credit else 'Debit'
        return (f"[Status: {status}, Type: {kind}, Description: {self.description}, "
                f"Amount: {abs(self.amount)}, Date: {self.date.isoformat()}.]")
