"""
Exception hierarchy for statement processing, encryption and storage.

Everything raised deliberately by ccstats derives from CCStatsError so the
CLI can report it with a single handler.
"""


class CCStatsError(Exception):
    """Base class for all ccstats errors."""


class InvalidStatementPathError(CCStatsError):
    """Statement file is missing or is not an .html/.htm file."""


class StatementParseError(CCStatsError):
    """Statement HTML does not have the expected transaction tables."""


class InvalidDateError(CCStatsError, ValueError):
    """Date text is not in the 'MMM dd, yyyy' statement format."""


class CryptoError(CCStatsError):
    pass


class DecryptionError(CryptoError):
    """Encrypted block is malformed, tampered with, or the password is wrong."""


class KeyLengthError(CryptoError, ValueError):
    """Requested AES key length is not usable."""


class EncryptedStatementError(CCStatsError):
    """Encrypted statement document is malformed or missing required keys."""
