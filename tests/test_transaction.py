"""
Unit tests for the Transaction value object.
Covers equality semantics, sign convention and statement date parsing.
"""

from dataclasses import FrozenInstanceError
from datetime import date, datetime
from decimal import Decimal

import pytest

from ccstats.core.exceptions import InvalidDateError
from ccstats.core.transaction import (
    RawTransaction,
    Transaction,
    TransactionKind,
    parse_statement_date,
)


class TestTransactionEquality:
    """Equality is description + amount only"""

    def test_equal_when_description_and_amount_match(self):
        a = Transaction('Netflix', date(2024, 1, 1), Decimal('-15.99'), authorized=True)
        b = Transaction('Netflix', date(2024, 2, 1), Decimal('-15.99'), authorized=False)
        assert a == b
        assert hash(a) == hash(b)

    def test_not_equal_on_different_amount(self):
        a = Transaction('Netflix', date(2024, 1, 1), Decimal('-15.99'))
        b = Transaction('Netflix', date(2024, 1, 1), Decimal('-16.99'))
        assert a != b

    def test_not_equal_on_different_description(self):
        a = Transaction('Netflix', date(2024, 1, 1), Decimal('-15.99'))
        b = Transaction('netflix', date(2024, 1, 1), Decimal('-15.99'))
        assert a != b

    def test_decimal_scale_does_not_matter(self):
        a = Transaction('Coffee', date(2024, 1, 1), Decimal('-5'))
        b = Transaction('Coffee', date(2024, 1, 1), Decimal('-5.00'))
        assert a == b
        assert len({a, b}) == 1

    def test_not_equal_to_other_types(self):
        t = Transaction('Coffee', date(2024, 1, 1), Decimal('-5'))
        assert t != ('Coffee', Decimal('-5'))


class TestTransactionConstruction:

    def test_description_is_trimmed(self):
        t = Transaction('  AMAZON.CA \n', date(2024, 1, 1), Decimal('-1'))
        assert t.description == 'AMAZON.CA'

    def test_amount_text_is_parsed(self):
        t = Transaction('Refund', date(2024, 1, 1), '12.30')
        assert t.amount == Decimal('12.30')

    def test_immutable(self):
        t = Transaction('Coffee', date(2024, 1, 1), Decimal('-5'))
        with pytest.raises(FrozenInstanceError):
            t.amount = Decimal('0')

    def test_from_raw_debit_is_negative(self):
        t = Transaction.from_raw(RawTransaction('Coffee', 'Dec 17, 2015', Decimal('4.50'), True, True))
        assert t.amount == Decimal('-4.50')
        assert t.date == date(2015, 12, 17)
        assert t.authorized is True
        assert t.kind is TransactionKind.DEBIT
        assert t.is_debit and not t.is_credit

    def test_from_raw_credit_is_positive(self):
        t = Transaction.from_raw(('Payment', 'Dec 10, 2015', '500.00', False, False))
        assert t.amount == Decimal('500.00')
        assert t.authorized is False
        assert t.kind is TransactionKind.CREDIT

    def test_from_raw_uses_magnitude(self):
        t = Transaction.from_raw(('Coffee', 'Dec 17, 2015', Decimal('-4.50'), True, False))
        assert t.amount == Decimal('-4.50')

    def test_zero_amount_is_credit(self):
        t = Transaction('Adjustment', date(2024, 1, 1), Decimal('0'))
        assert t.kind is TransactionKind.CREDIT

    def test_str_shows_status_and_type(self):
        t = Transaction('Coffee', date(2024, 1, 10), Decimal('-5.00'), authorized=True)
        text = str(t)
        assert 'Authorized' in text
        assert 'Debit' in text
        assert '5.00' in text
        assert '2024-01-10' in text


class TestParseStatementDate:

    def test_statement_format(self):
        assert parse_statement_date('Dec 17, 2015') == date(2015, 12, 17)

    def test_single_digit_day(self):
        assert parse_statement_date('Jan 1, 2024') == date(2024, 1, 1)

    def test_date_passthrough(self):
        d = date(2024, 3, 4)
        assert parse_statement_date(d) is d

    def test_datetime_truncated(self):
        assert parse_statement_date(datetime(2024, 3, 4, 15, 30)) == date(2024, 3, 4)

    @pytest.mark.parametrize('text', ['2015-12-17', 'Dec 32, 2015', 'Foo 01, 2015', ''])
    def test_malformed_raises(self, text):
        with pytest.raises(InvalidDateError):
            parse_statement_date(text)

    def test_invalid_date_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_statement_date('not a date')
