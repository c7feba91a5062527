"""
================================================================================
PYTEST CONFIGURATION
================================================================================

Pytest configuration and shared fixtures for the entire test suite.

Global Setup:
    - TEST_MODE=1 in the environment
    - Working directory switched to a fresh temp directory BEFORE test
      modules are imported, so BASE_DIR-relative paths (configs/, outputs/)
      never touch the real project

Shared Fixtures:
    - fast_kdf: lowers the PBKDF2 iteration count for store/CLI tests
    - coffee_transactions / coffee_pool: the Coffee/Payment scenario
    - statement_html / statement_file: a two-table statement export
================================================================================
"""
import os
import sys
import shutil
import tempfile
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

# Ensure project root is on sys.path for the cli module
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

_TEST_PROJECT_DIR = None
_ORIGINAL_CWD = None


def pytest_configure(config):
    """
    Hook called before test collection starts.
    Move into an isolated working directory before any ccstats import.
    """
    global _TEST_PROJECT_DIR, _ORIGINAL_CWD

    os.environ['TEST_MODE'] = '1'
    os.environ.pop('CCSTATS_PASSWORD', None)

    _TEST_PROJECT_DIR = Path(tempfile.mkdtemp(prefix="ccstats_test_"))
    _ORIGINAL_CWD = os.getcwd()
    os.chdir(_TEST_PROJECT_DIR)


def pytest_unconfigure(config):
    """
    Hook called after all tests finish.
    Restore original directory and clean up.
    """
    if _ORIGINAL_CWD:
        os.chdir(_ORIGINAL_CWD)

    if _TEST_PROJECT_DIR and _TEST_PROJECT_DIR.exists():
        shutil.rmtree(_TEST_PROJECT_DIR, ignore_errors=True)

    os.environ.pop('TEST_MODE', None)


@pytest.fixture(autouse=True)
def reset_log_context():
    """Drop file handlers a CLI test may have attached."""
    yield
    from ccstats.utils.logger import set_run_context
    set_run_context('test')


@pytest.fixture
def fast_kdf(monkeypatch):
    """Cheap key derivation for tests that encrypt many fields."""
    monkeypatch.setattr('ccstats.core.encryption.AES_KDF_ITERATIONS', 1000)


@pytest.fixture
def coffee_transactions():
    from ccstats.core.transaction import Transaction
    return [
        Transaction('Coffee', date(2024, 1, 10), Decimal('-5.00')),
        Transaction('Coffee', date(2024, 1, 10), Decimal('-5.00')),
        Transaction('Payment', date(2024, 1, 5), Decimal('100.00')),
    ]


@pytest.fixture
def coffee_pool(coffee_transactions):
    from ccstats.core.pool import TransactionPool
    return TransactionPool(coffee_transactions)


STATEMENT_HTML = """
<html>
<body>
<table><tr><td>Visa Account ending 1234</td></tr></table>
<table>
  <tr><th>Date</th><th>Description</th><th>Pending Debit</th><th>Pending Credit</th></tr>
  <tr><th>Dec 16, 2015</th><td>STARBUCKS #123</td><td>$4.50</td><td></td></tr>
</table>
<table>
  <tr><th>Date</th><th>Description</th><th>Debit</th><th>Credit</th></tr>
  <tr><th>Dec 14, 2015</th><td>  AMAZON.CA<br>  </td><td>$1,250.99</td><td></td></tr>
  <tr><th>Dec 10, 2015</th><td>PAYMENT - THANK YOU</td><td><span></span></td><td>$500.00</td></tr>
  <tr><th>Dec 14, 2015</th><td>STARBUCKS #123</td><td>$4.50</td><td></td></tr>
</table>
</body>
</html>
"""


@pytest.fixture
def statement_html():
    return STATEMENT_HTML


@pytest.fixture
def statement_file(tmp_path, statement_html):
    path = tmp_path / 'statement.html'
    path.write_text(statement_html, encoding='utf-8')
    return path
