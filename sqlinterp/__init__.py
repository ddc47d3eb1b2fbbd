"""
SQL injection detection for interpolated strings.

A static-analysis rule that flags variables interpolated or concatenated
into string literals that look like SQL statements.
"""

import logging

__version__ = "1.0.0"

from sqlinterp.core.engine import ScanEngine
from sqlinterp.core.findings import Finding, Severity, Confidence
from sqlinterp.core.tokens import Document, Token, TokenKind, BlockMode
from sqlinterp.config import ScanConfig

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "ScanEngine",
    "Finding",
    "Severity",
    "Confidence",
    "Document",
    "Token",
    "TokenKind",
    "BlockMode",
    "ScanConfig",
]
