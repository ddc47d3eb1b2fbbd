"""
Statement scanner for SQL injection through interpolation and concatenation.

Starting at a literal that looks like a SQL statement, the scanner walks the
following tokens of the same statement and collects every variable that
ends up in the SQL text without being quoted:

    "SELECT * FROM $table"              # interpolated
    'SELECT * FROM ' . $table           # concatenated
    "SELECT $a FROM t" . " WHERE $b"    # both literals contribute

Variables whitelisted with "## SQL safe (...)" on a literal's effective line
are dropped from that literal's contribution. Concatenated bare variables
are never whitelisted.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from sqlinterp.analysis.literals import (
    effective_line, is_candidate_statement, is_interpolated, literal_text,
)
from sqlinterp.analysis.variables import extract_variables
from sqlinterp.core.errors import FormatError
from sqlinterp.core.tokens import Token, TokenKind

logger = logging.getLogger(__name__)


CONCATENATION_OPERATORS = frozenset({"."})


class ScanState(Enum):
    """States of the statement scanner, starting at ENTRY on the candidate literal."""
    ENTRY = "entry"
    SCANNING = "scanning"
    ACCUMULATING = "accumulating"
    DONE = "done"


@dataclass
class StatementScan:
    """
    Outcome of scanning one statement.

    Either a list of unsafe variables (possibly empty) or the error that
    stopped the analysis of this statement.
    """
    variables: List[str] = field(default_factory=list)
    error: Optional[FormatError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def is_risky(self) -> bool:
        return self.ok and len(self.variables) > 0


def is_entry_point(token: Token) -> bool:
    """Check if a token can start a statement scan."""
    return token.kind.is_literal and is_candidate_statement(token)


def unsafe_literal_variables(token: Token, safe_variables) -> List[str]:
    """Return the interpolated variables of a literal that are not whitelisted."""
    if not is_interpolated(token):
        return []

    whitelisted = safe_variables.lookup(effective_line(token))
    return [
        variable
        for variable in extract_variables(literal_text(token))
        if variable not in whitelisted
    ]


def scan_statement(token: Token, safe_variables) -> StatementScan:
    """
    Scan the statement starting at `token` for unsafe variables.

    `safe_variables` is the populated SafeVariableRegistry of the document.
    A FormatError is returned in the result instead of being raised;
    registry contract violations propagate to the caller.
    """
    if not is_entry_point(token):
        return StatementScan()

    unsafe: List[str] = []
    concatenating = False
    current: Optional[Token] = token
    state = ScanState.SCANNING

    try:
        while current is not None and state is not ScanState.DONE:
            kind = current.kind

            if kind.is_literal:
                found = unsafe_literal_variables(current, safe_variables)
                if found:
                    unsafe.extend(found)
                    state = ScanState.ACCUMULATING
                concatenating = False
            elif kind is TokenKind.OPERATOR:
                concatenating = current.content.strip() in CONCATENATION_OPERATORS
            elif kind is TokenKind.STATEMENT_TERMINATOR:
                state = ScanState.DONE
            elif kind is TokenKind.SYMBOL:
                if concatenating:
                    unsafe.append(current.content)
                    state = ScanState.ACCUMULATING
                concatenating = False

            current = current.next_sibling
    except FormatError as e:
        logger.debug("Unable to classify %r: %s", current, e)
        return StatementScan(error=e)

    return StatementScan(variables=unsafe)
