"""
================================================================================
TEST: Encrypted Statement Store
================================================================================

Round trips statements through the encrypted JSON format and checks that
every malformed or undecryptable file fails loudly with no partial result.
================================================================================
"""

import json
import shutil
import tempfile
import unittest
from datetime import date
from decimal import Decimal
from pathlib import Path
from unittest.mock import patch

import filelock
import pytest

from ccstats.core.encryption import AESCipher
from ccstats.core.exceptions import (
    DecryptionError,
    EncryptedStatementError,
)
from ccstats.core.statement import Statement
from ccstats.core.store import EncryptedStatementStore
from ccstats.core.transaction import Transaction

PASSWORD = 'hunter2'

pytestmark = pytest.mark.usefixtures('fast_kdf')


@pytest.fixture
def statement():
    return Statement([
        Transaction('STARBUCKS #123', date(2015, 12, 16), Decimal('-4.50'), authorized=True),
        Transaction('AMAZON.CA', date(2015, 12, 14), Decimal('-1250.99')),
        Transaction('STARBUCKS #123', date(2015, 12, 14), Decimal('-4.50')),
        Transaction('PAYMENT - THANK YOU', date(2015, 12, 10), Decimal('500.00')),
    ])


@pytest.fixture
def store():
    return EncryptedStatementStore()


def _fields(statement):
    return [(t.description, t.date, t.amount, t.authorized) for t in statement]


class TestRoundTrip:

    def test_preserves_order_and_fields(self, tmp_path, store, statement):
        path = store.write(tmp_path / 'master.json', PASSWORD, statement)

        loaded = store.read(path, PASSWORD)

        assert _fields(loaded) == _fields(statement)
        assert loaded is not statement
        assert len(loaded.authorized) == 1
        assert loaded.pool.balance() == Decimal('-759.99')

    def test_amount_scale_survives(self, tmp_path, store):
        original = Statement([Transaction('Refund', date(2024, 1, 1), Decimal('100.00'))])
        store.write(tmp_path / 's.json', PASSWORD, original)
        assert str(store.read(tmp_path / 's.json', PASSWORD)[0].amount) == '100.00'

    def test_empty_statement(self, tmp_path, store):
        store.write(tmp_path / 'empty.json', PASSWORD, Statement())
        assert len(store.read(tmp_path / 'empty.json', PASSWORD)) == 0

    @pytest.mark.parametrize('key_length', [128, 192])
    def test_reader_uses_file_key_length(self, tmp_path, statement, key_length):
        writer = EncryptedStatementStore(AESCipher(key_length=key_length))
        writer.write(tmp_path / 'k.json', PASSWORD, statement)

        reader = EncryptedStatementStore(AESCipher(key_length=256))
        assert _fields(reader.read(tmp_path / 'k.json', PASSWORD)) == _fields(statement)

    def test_same_day_order_survives(self, tmp_path, store):
        day = date(2024, 3, 1)
        original = Statement([Transaction(f'T{i}', day, Decimal(-i)) for i in range(1, 6)])
        store.write(tmp_path / 'same_day.json', PASSWORD, original)
        loaded = store.read(tmp_path / 'same_day.json', PASSWORD)
        assert [t.description for t in loaded] == ['T1', 'T2', 'T3', 'T4', 'T5']

    def test_write_truncates_existing_file(self, tmp_path, store, statement):
        path = tmp_path / 'master.json'
        store.write(path, PASSWORD, statement)
        store.write(path, PASSWORD, Statement([statement[0]]))
        assert len(store.read(path, PASSWORD)) == 1

    def test_write_creates_parent_directories(self, tmp_path, store, statement):
        path = store.write(tmp_path / 'nested' / 'dir' / 'master.json', PASSWORD, statement)
        assert path.exists()


class TestDocumentShape:

    def test_structure(self, tmp_path, store, statement):
        path = store.write(tmp_path / 'master.json', PASSWORD, statement)
        document = json.loads(path.read_text(encoding='utf-8'))

        assert document['aes-key-length'] == '256'
        assert list(document['transactions']) == [
            'transaction-1', 'transaction-2', 'transaction-3', 'transaction-4'
        ]
        for entry in document['transactions'].values():
            assert set(entry) == {'date', 'description', 'amount', 'authorized'}

    def test_fields_are_hex_and_encrypted_separately(self, tmp_path, store, statement):
        path = store.write(tmp_path / 'master.json', PASSWORD, statement)
        text = path.read_text(encoding='utf-8')
        document = json.loads(text)

        assert 'STARBUCKS' not in text
        values = [v for entry in document['transactions'].values() for v in entry.values()]
        assert all(int(v, 16) >= 0 for v in values)
        assert len(set(values)) == len(values)

    def test_plaintext_formats(self, store, statement):
        document = store.to_document(PASSWORD, statement)
        entry = document['transactions']['transaction-1']
        cipher = store.cipher
        assert cipher.decrypt_text(PASSWORD, entry['date']) == '2015-12-16'
        assert cipher.decrypt_text(PASSWORD, entry['amount']) == '-4.50'
        assert cipher.decrypt_text(PASSWORD, entry['authorized']) == 'true'
        assert cipher.decrypt_text(PASSWORD, entry['description']) == 'STARBUCKS #123'

    def test_clamped_cipher_records_real_length(self, store, statement):
        clamped = EncryptedStatementStore(AESCipher(key_length=512))
        assert clamped.to_document(PASSWORD, statement)['aes-key-length'] == '256'

    def test_entries_read_in_numeric_order(self, tmp_path, store):
        original = Statement([
            Transaction(f'T{i}', date(2024, 1, 1), Decimal(-i)) for i in range(1, 12)
        ])
        document = store.to_document(PASSWORD, original)
        shuffled = dict(sorted(document['transactions'].items()))
        document['transactions'] = shuffled
        path = tmp_path / 'shuffled.json'
        path.write_text(json.dumps(document), encoding='utf-8')

        loaded = store.read(path, PASSWORD)
        assert [t.description for t in loaded] == [f'T{i}' for i in range(1, 12)]


class TestReadFailures:

    def test_wrong_password(self, tmp_path, store, statement):
        store.write(tmp_path / 'master.json', PASSWORD, statement)
        # bad padding raises DecryptionError; garbage that happens to unpad
        # fails field parsing instead
        with pytest.raises((DecryptionError, EncryptedStatementError)):
            store.read(tmp_path / 'master.json', 'not the password')

    def test_malformed_json(self, tmp_path, store):
        path = tmp_path / 'broken.json'
        path.write_text('{"aes-key-length": "256", ', encoding='utf-8')
        with pytest.raises(EncryptedStatementError):
            store.read(path, PASSWORD)

    @pytest.mark.parametrize('document', [
        {'transactions': {}},
        {'aes-key-length': '256'},
        [],
        {'aes-key-length': 'abc', 'transactions': {}},
        {'aes-key-length': '100', 'transactions': {}},
        {'aes-key-length': '256', 'transactions': []},
        {'aes-key-length': '256', 'transactions': {'tx-1': {}}},
        {'aes-key-length': '256', 'transactions': {'transaction-one': {}}},
        {'aes-key-length': '256', 'transactions': {'transaction-1': 'abc'}},
    ])
    def test_malformed_documents(self, tmp_path, store, document):
        path = tmp_path / 'bad.json'
        path.write_text(json.dumps(document), encoding='utf-8')
        with pytest.raises(EncryptedStatementError):
            store.read(path, PASSWORD)

    def test_missing_field(self, tmp_path, store, statement):
        document = store.to_document(PASSWORD, statement)
        del document['transactions']['transaction-2']['amount']
        path = tmp_path / 'missing.json'
        path.write_text(json.dumps(document), encoding='utf-8')

        with pytest.raises(EncryptedStatementError, match='amount'):
            store.read(path, PASSWORD)

    def test_tampered_field_fails_whole_read(self, tmp_path, store, statement):
        document = store.to_document(PASSWORD, statement)
        document['transactions']['transaction-4']['date'] = 'zz'
        path = tmp_path / 'tampered.json'
        path.write_text(json.dumps(document), encoding='utf-8')

        with pytest.raises(DecryptionError):
            store.read(path, PASSWORD)

    def test_invalid_authorized_flag(self, tmp_path, store, statement):
        document = store.to_document(PASSWORD, statement)
        document['transactions']['transaction-1']['authorized'] = store.cipher.encrypt_text(PASSWORD, 'maybe')
        path = tmp_path / 'flag.json'
        path.write_text(json.dumps(document), encoding='utf-8')

        with pytest.raises(EncryptedStatementError, match='authorized'):
            store.read(path, PASSWORD)

    def test_invalid_amount(self, tmp_path, store, statement):
        document = store.to_document(PASSWORD, statement)
        document['transactions']['transaction-1']['amount'] = store.cipher.encrypt_text(PASSWORD, 'lots')
        path = tmp_path / 'amount.json'
        path.write_text(json.dumps(document), encoding='utf-8')

        with pytest.raises(EncryptedStatementError):
            store.read(path, PASSWORD)

    def test_missing_file(self, tmp_path, store):
        with pytest.raises(OSError):
            store.read(tmp_path / 'nope.json', PASSWORD)


class TestStoreLocking(unittest.TestCase):
    """Writes go through <path>.lock"""

    def setUp(self):
        self.tmpdir = Path(tempfile.mkdtemp())
        self.path = self.tmpdir / 'master.json'
        self.kdf_patch = patch('ccstats.core.encryption.AES_KDF_ITERATIONS', 1000)
        self.kdf_patch.start()
        self.statement = Statement([Transaction('Coffee', date(2024, 1, 10), Decimal('-5.00'))])

    def tearDown(self):
        self.kdf_patch.stop()
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def test_write_times_out_while_locked(self):
        store = EncryptedStatementStore(lock_timeout=0.1)
        with filelock.FileLock(str(self.path) + '.lock'):
            with self.assertRaises(filelock.Timeout):
                store.write(self.path, PASSWORD, self.statement)
        self.assertFalse(self.path.exists())

    def test_write_succeeds_after_release(self):
        store = EncryptedStatementStore(lock_timeout=0.1)
        with filelock.FileLock(str(self.path) + '.lock'):
            pass
        store.write(self.path, PASSWORD, self.statement)
        self.assertEqual(len(store.read(self.path, PASSWORD)), 1)
