"""Core data structures, rule framework and host driver."""

from sqlinterp.core.errors import SQLInterpError, FormatError, PreconditionError
from sqlinterp.core.findings import Finding, Severity, Confidence, FindingCategory
from sqlinterp.core.tokens import Document, Token, TokenKind, BlockMode
from sqlinterp.core.rules import Rule, RuleRegistry
from sqlinterp.core.engine import ScanEngine

__all__ = [
    "SQLInterpError",
    "FormatError",
    "PreconditionError",
    "Finding",
    "Severity",
    "Confidence",
    "FindingCategory",
    "Document",
    "Token",
    "TokenKind",
    "BlockMode",
    "Rule",
    "RuleRegistry",
    "ScanEngine",
]
