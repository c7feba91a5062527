"""
================================================================================
CONSTANTS - System-Wide Configuration Values
================================================================================

Centralized repository for all hardcoded constants used throughout the
statement analyzer. Organized by functional category.

Constant Categories:
    1. File Paths - Directory and file locations
    2. Statement Parsing - Date formats and accepted file types
    3. Encryption - AES / PBKDF2 parameters of the encrypted store format
    4. Runtime - Environment variables

Key Constants:

    Encryption:
        AES_SALT_LENGTH = 20
            Random salt appended to every encrypted block

        AES_IV_LENGTH = 16
            CBC initialization vector prepended to every encrypted block

        AES_KDF_ITERATIONS = 65536
            PBKDF2 iteration count. Part of the file format: changing it
            makes existing encrypted statements unreadable.

        AES_DEFAULT_KEY_LENGTH = 256
            Key length (bits) used when none is configured

File Path Constants:
    All paths are relative to BASE_DIR (current working directory)
    Supports monkeypatching for test isolation

Note:
    Values in this file are STATIC. For runtime-configurable settings,
    use config.json via ccstats.utils.config module.
================================================================================
"""

from pathlib import Path

# ==========================================
# FILE PATHS
# ==========================================
BASE_DIR = Path.cwd()
OUTPUT_DIR = BASE_DIR / 'outputs'
LOG_DIR = OUTPUT_DIR / 'logs'
CONFIG_FILE = BASE_DIR / 'configs' / 'config.json'
DEFAULT_STATS_FILE = 'ccstats_stats.txt'

# ==========================================
# STATEMENT PARSING
# ==========================================
"""
Statements print every date as MMM dd, yyyy (i.e. Dec 14, 2015)
"""
STATEMENT_DATE_FORMAT = '%b %d, %Y'
STATEMENT_EXTENSIONS = ('.html', '.htm')

# ==========================================
# ENCRYPTION CONSTANTS
# ==========================================
"""
Parameters of the encrypted statement format. Every encrypted field is
hex(IV || ciphertext || salt).
"""
AES_SALT_LENGTH = 20  # Salt length in bytes for key derivation
AES_IV_LENGTH = 16  # CBC initialization vector length in bytes
AES_BLOCK_SIZE = 128  # AES block size in bits (PKCS7 padding unit)
AES_KDF_ITERATIONS = 65536  # PBKDF2 iterations
AES_DEFAULT_KEY_LENGTH = 256  # Default key length in bits
AES_MAX_KEY_LENGTH = 256  # Largest key the AES implementation accepts
AES_KEY_LENGTHS = (128, 192, 256)  # Key lengths AES accepts directly

STORE_KEY_LENGTH_FIELD = 'aes-key-length'
STORE_TRANSACTIONS_FIELD = 'transactions'
STORE_TRANSACTION_PREFIX = 'transaction-'
STORE_TRANSACTION_FIELDS = ('date', 'description', 'amount', 'authorized')

# ==========================================
# RUNTIME
# ==========================================
"""
Password source for the CLI when --password is not given
"""
PASSWORD_ENV_VAR = 'CCSTATS_PASSWORD'
