"""
E-Statement Parser

Parsing and normalization of pipe-delimited card-management statement extracts.
"""

__version__ = "0.1.0"

from .errors import StatementParseError
from .models import StatementRecord, Transaction
from .parser import parse_statement, parse_statement_bytes, parse_statement_file

__all__ = [
    "StatementParseError",
    "StatementRecord",
    "Transaction",
    "parse_statement",
    "parse_statement_bytes",
    "parse_statement_file",
]
