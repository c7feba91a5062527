"""Statement input processors

Import from ccstats.processors to turn statement files into transactions
without depending on the HTML parsing details.
"""

from ccstats.processors.extractor import StatementExtractor, load_statement, validate_statement_path

__all__ = [
    "StatementExtractor",
    "load_statement",
    "validate_statement_path",
]
