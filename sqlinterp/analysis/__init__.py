"""Literal classification, variable extraction and statement scanning."""

from sqlinterp.analysis.variables import extract_variables
from sqlinterp.analysis.annotations import SafeVariableRegistry
from sqlinterp.analysis.literals import (
    is_candidate_statement, is_interpolated, literal_text, effective_line,
)
from sqlinterp.analysis.scanner import scan_statement, StatementScan

__all__ = [
    "extract_variables",
    "SafeVariableRegistry",
    "is_candidate_statement",
    "is_interpolated",
    "literal_text",
    "effective_line",
    "scan_statement",
    "StatementScan",
]
