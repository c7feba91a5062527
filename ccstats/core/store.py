"""
================================================================================
ENCRYPTED STATEMENT STORE - Statement <-> Encrypted JSON
================================================================================

Persists a Statement as JSON where every field of every transaction is
encrypted on its own with AESCipher (own salt, own IV, no key reuse).

File Format (UTF-8 JSON):
    {
      "aes-key-length": "256",
      "transactions": {
        "transaction-1": {"date": "<hex>", "description": "<hex>",
                          "amount": "<hex>", "authorized": "<hex>"},
        ...
      }
    }

    Plaintexts: date as ISO text (2015-12-17), description, amount as signed
    decimal text (-5.00), authorized as "true"/"false". Entries are numbered
    from 1 in pool order.

Failure Semantics:
    write() builds the whole document before touching the file, then
    truncates and writes it under a file lock.
    read() raises on the first problem (malformed JSON, missing key,
    decryption failure, unparseable field) and never returns a partial
    Statement.
================================================================================
"""

import json
import logging
from datetime import date
from pathlib import Path
from typing import Dict, Optional, Union

import filelock

from ccstats.core.encryption import AESCipher
from ccstats.core.exceptions import DecryptionError, EncryptedStatementError, KeyLengthError
from ccstats.core.statement import Statement
from ccstats.core.transaction import Transaction
from ccstats.decimal_utils import parse_amount
from ccstats.utils.constants import (
    STORE_KEY_LENGTH_FIELD,
    STORE_TRANSACTIONS_FIELD,
    STORE_TRANSACTION_PREFIX,
    STORE_TRANSACTION_FIELDS,
)

logger = logging.getLogger("ccstats")

PathLike = Union[str, Path]


def _entry_number(name: str) -> int:
    if not name.startswith(STORE_TRANSACTION_PREFIX):
        raise EncryptedStatementError(f"Unexpected transaction entry {name!r}")
    try:
        return int(name[len(STORE_TRANSACTION_PREFIX):])
    except ValueError:
        raise EncryptedStatementError(f"Unexpected transaction entry {name!r}") from None


class EncryptedStatementStore:
    """Reads and writes encrypted statement files."""

    def __init__(self, cipher: Optional[AESCipher] = None, lock_timeout: float = 10):
        self.cipher = cipher if cipher is not None else AESCipher()
        self.lock_timeout = lock_timeout

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    def _encrypt_transaction(self, password: str, transaction: Transaction) -> Dict[str, str]:
        fields = {
            'date': transaction.date.isoformat(),
            'description': transaction.description,
            'amount': str(transaction.amount),
            'authorized': 'true' if transaction.authorized else 'false',
        }
        return {name: self.cipher.encrypt_text(password, value) for name, value in fields.items()}

    def to_document(self, password: str, statement: Statement) -> dict:
        """Encrypt statement into the JSON document structure."""
        transactions = {}
        for i, transaction in enumerate(statement, start=1):
            transactions[f"{STORE_TRANSACTION_PREFIX}{i}"] = self._encrypt_transaction(password, transaction)

        return {
            STORE_KEY_LENGTH_FIELD: str(self.cipher.key_length),
            STORE_TRANSACTIONS_FIELD: transactions,
        }

    def write(self, path: PathLike, password: str, statement: Statement) -> Path:
        """
        Encrypt statement and write it to path (truncate-and-write).

        Returns:
            Path written
        """
        target = Path(path)
        document = self.to_document(password, statement)

        target.parent.mkdir(parents=True, exist_ok=True)
        lock = filelock.FileLock(str(target) + '.lock', timeout=self.lock_timeout)
        try:
            with lock:
                with open(target, 'w', encoding='utf-8') as f:
                    json.dump(document, f, indent=4)
        except filelock.Timeout:
            logger.error(f"[STORE] Failed to acquire lock for {target}")
            raise
        except OSError as e:
            logger.error(f"[STORE] Failed to write encrypted statement {target}: {e}")
            raise

        logger.info(f"[STORE] Wrote {len(statement)} encrypted transactions to {target}")
        return target

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def _decrypt_transaction(self, cipher: AESCipher, password: str, name: str, entry) -> Transaction:
        if not isinstance(entry, dict):
            raise EncryptedStatementError(f"{name} is not a JSON object")
        missing = [field for field in STORE_TRANSACTION_FIELDS if field not in entry]
        if missing:
            raise EncryptedStatementError(f"{name} is missing fields: {', '.join(missing)}")

        values = {field: cipher.decrypt_text(password, entry[field]) for field in STORE_TRANSACTION_FIELDS}

        authorized = values['authorized'].strip().lower()
        if authorized not in ('true', 'false'):
            raise EncryptedStatementError(f"{name} has invalid authorized flag")
        try:
            return Transaction(
                description=values['description'],
                date=date.fromisoformat(values['date']),
                amount=parse_amount(values['amount']),
                authorized=authorized == 'true',
            )
        except ValueError as e:
            raise EncryptedStatementError(f"{name} could not be decoded: {e}") from e

    def from_document(self, password: str, document) -> Statement:
        """Decrypt a parsed JSON document into a new Statement."""
        if not isinstance(document, dict):
            raise EncryptedStatementError("Encrypted statement must be a JSON object")
        for field in (STORE_KEY_LENGTH_FIELD, STORE_TRANSACTIONS_FIELD):
            if field not in document:
                raise EncryptedStatementError(f"Encrypted statement is missing '{field}'")

        try:
            key_length = int(document[STORE_KEY_LENGTH_FIELD])
        except (TypeError, ValueError):
            raise EncryptedStatementError(
                f"Invalid '{STORE_KEY_LENGTH_FIELD}': {document[STORE_KEY_LENGTH_FIELD]!r}"
            ) from None
        try:
            cipher = AESCipher(key_length=key_length, hash_password=self.cipher.hash_password)
        except KeyLengthError as e:
            raise EncryptedStatementError(str(e)) from e

        entries = document[STORE_TRANSACTIONS_FIELD]
        if not isinstance(entries, dict):
            raise EncryptedStatementError(f"'{STORE_TRANSACTIONS_FIELD}' must be a JSON object")

        transactions = [
            self._decrypt_transaction(cipher, password, name, entries[name])
            for name in sorted(entries, key=_entry_number)
        ]
        return Statement(transactions)

    def read(self, path: PathLike, password: str) -> Statement:
        """
        Read and decrypt an encrypted statement file.

        Raises:
            EncryptedStatementError: malformed JSON or missing keys
            DecryptionError: wrong password or tampered field
            OSError: file cannot be read
        """
        source = Path(path)
        try:
            with open(source, 'r', encoding='utf-8') as f:
                document = json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"[STORE] Encrypted statement {source} is not valid JSON: {e}")
            raise EncryptedStatementError(f"{source} is not valid JSON: {e}") from e

        try:
            statement = self.from_document(password, document)
        except DecryptionError:
            logger.error(f"[STORE] Failed to decrypt {source}. Wrong password or corrupted data.")
            raise
        except EncryptedStatementError as e:
            logger.error(f"[STORE] Malformed encrypted statement {source}: {e}")
            raise

        logger.info(f"[STORE] Read {len(statement)} transactions from {source}")
        return statement
