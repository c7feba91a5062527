"""
================================================================================
CORE MODULE - Core Business Logic
================================================================================

Central package for transaction collections and encrypted persistence.

Exported Classes:
    Transaction - Immutable statement line (equal on description + amount)
    RawTransaction - Extractor output tuple
    TransactionKind - DEBIT / CREDIT
    TransactionPool - Date-sorted collection with frequency index and stats
    TransactionFrequency - Occurrence counter in the frequency index
    Statement - Pool split into authorized / posted transactions
    AESCipher - Password-based AES-CBC cipher
    EncryptedBlock - IV, ciphertext and salt of one encrypted value
    EncryptedStatementStore - Statement <-> encrypted JSON file

Usage:
    from ccstats.core import Statement, EncryptedStatementStore
    from ccstats.core.encryption import AESCipher
================================================================================
"""

from ccstats.core.exceptions import (
    CCStatsError,
    InvalidStatementPathError,
    StatementParseError,
    InvalidDateError,
    CryptoError,
    DecryptionError,
    KeyLengthError,
    EncryptedStatementError,
)
from ccstats.core.transaction import (
    Transaction,
    RawTransaction,
    TransactionKind,
    parse_statement_date,
)
from ccstats.core.pool import TransactionPool, TransactionFrequency
from ccstats.core.statement import Statement
from ccstats.core.encryption import AESCipher, EncryptedBlock
from ccstats.core.store import EncryptedStatementStore

__all__ = [
    'CCStatsError',
    'InvalidStatementPathError',
    'StatementParseError',
    'InvalidDateError',
    'CryptoError',
    'DecryptionError',
    'KeyLengthError',
    'EncryptedStatementError',
    'Transaction',
    'RawTransaction',
    'TransactionKind',
    'parse_statement_date',
    'TransactionPool',
    'TransactionFrequency',
    'Statement',
    'AESCipher',
    'EncryptedBlock',
    'EncryptedStatementStore',
]
