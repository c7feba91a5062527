"""
================================================================================
STATEMENT EXTRACTOR - Credit Card Statement HTML -> Raw Transactions
================================================================================

Scrapes the transaction tables of an online-banking credit card history page.

Expected Layout:
    - The first <table> is the account header and is skipped.
    - Two or more remaining tables: the first lists authorized (pending)
      transactions, the second posted ones.
    - Exactly one remaining table: posted transactions only.
    - In every table the first <tr> holds column headers.
    - Each data row: <th> date ('Dec 14, 2015'), then <td> cells for
      description, debit amount and credit amount.

Amount Rules:
    A debit cell with text and no child elements makes the row a debit;
    otherwise the credit cell is read. '$' and ',' are stripped.

Output:
    RawTransaction tuples (description, date text, amount, is_debit,
    is_authorized), or a Statement via to_statement().

Errors:
    InvalidStatementPathError - missing file / wrong extension
    StatementParseError - anything that does not match the layout above
================================================================================
"""

import logging
from pathlib import Path
from typing import List, Union

from bs4 import BeautifulSoup

from ccstats.core.exceptions import (
    InvalidDateError,
    InvalidStatementPathError,
    StatementParseError,
)
from ccstats.core.statement import Statement
from ccstats.core.transaction import RawTransaction, parse_statement_date
from ccstats.decimal_utils import parse_amount
from ccstats.utils.constants import STATEMENT_EXTENSIONS

logger = logging.getLogger("ccstats")

AUTHORIZED_TABLE, POSTED_TABLE = 0, 1
DESCRIPTION_CELL, DEBIT_CELL, CREDIT_CELL = 0, 1, 2


def validate_statement_path(path: Union[str, Path]) -> Path:
    """
    Check that a statement file exists and is an HTML export.

    Returns:
        Absolute path to the statement

    Raises:
        InvalidStatementPathError
    """
    statement_path = Path(path)
    if not statement_path.exists():
        raise InvalidStatementPathError(f"The statement file {statement_path} does not exist")
    if not statement_path.is_file():
        raise InvalidStatementPathError(f"The statement path {statement_path} is not a file")
    if statement_path.suffix.lower() not in STATEMENT_EXTENSIONS:
        raise InvalidStatementPathError(
            f"Statement file {statement_path.name} has an invalid file extension (.html or .htm only)"
        )
    return statement_path.resolve()


class StatementExtractor:
    """Parses one statement HTML document."""

    def __init__(self, html: str):
        self.soup = BeautifulSoup(html, 'html.parser')

    @classmethod
    def from_file(cls, path: Union[str, Path], encoding: str = 'utf-8') -> 'StatementExtractor':
        statement_path = validate_statement_path(path)
        with open(statement_path, 'r', encoding=encoding) as f:
            html = f.read()
        logger.info(f"[EXTRACT] Reading statement {statement_path.name}")
        return cls(html)

    def read(self) -> List[RawTransaction]:
        """All transactions, authorized table first."""
        tables = self.soup.find_all('table')
        if not tables:
            raise StatementParseError("Statement contains no tables")

        # header table
        tables = tables[1:]
        if not tables:
            raise StatementParseError("Statement contains no transaction tables")

        rows = []
        if len(tables) >= 2:
            rows.extend(self._extract_table(tables[AUTHORIZED_TABLE], authorized=True))
            rows.extend(self._extract_table(tables[POSTED_TABLE], authorized=False))
        else:
            rows.extend(self._extract_table(tables[0], authorized=False))

        logger.info(f"[EXTRACT] Extracted {len(rows)} transactions")
        return rows

    def to_statement(self) -> Statement:
        return Statement.from_raw(self.read())

    def _extract_table(self, table, authorized: bool) -> List[RawTransaction]:
        rows = table.find_all('tr')
        transactions = []
        # first row is the column headers
        for index, row in enumerate(rows[1:], start=1):
            try:
                transactions.append(self._extract_row(row, authorized))
            except (InvalidDateError, ValueError, IndexError) as e:
                kind = 'authorized' if authorized else 'posted'
                logger.error(f"[EXTRACT] Unreadable {kind} row {index}: {e}")
                raise StatementParseError(f"Unreadable {kind} transaction row {index}: {e}") from e
        return transactions

    @staticmethod
    def _extract_row(row, authorized: bool) -> RawTransaction:
        # the date is the row header ('th'), not a 'td' cell
        header = row.find('th')
        if header is None:
            raise ValueError("row has no date header")
        date_text = header.get_text(strip=True)
        parse_statement_date(date_text)

        cells = row.find_all('td')
        description = ''.join(cells[DESCRIPTION_CELL].strings).strip()
        debit = cells[DEBIT_CELL]
        credit = cells[CREDIT_CELL]

        debit_text = debit.get_text(strip=True)
        if debit.find(True) is None and debit_text:
            return RawTransaction(description, date_text, parse_amount(debit_text), True, authorized)

        credit_text = credit.get_text(strip=True)
        return RawTransaction(description, date_text, parse_amount(credit_text), False, authorized)


def load_statement(path: Union[str, Path]) -> Statement:
    """Validate, read and extract a statement file."""
    return StatementExtractor.from_file(path).to_statement()
