"""
Classification of literal tokens.

Decides whether a literal looks like a SQL statement, what its text is,
and whether variables inside it get interpolated.
"""

import re

from sqlinterp.core.errors import FormatError
from sqlinterp.core.tokens import BlockMode, Token, TokenKind


SQL_STATEMENT_PATTERN = re.compile(r"\b(?:SELECT|INSERT|UPDATE|DELETE)\b", re.IGNORECASE)

# Leading marker of a quote-like literal: q{...} or qq{...}.
QUOTE_LIKE_LEAD_PATTERN = re.compile(r"\A(qq?)([^q])", re.DOTALL)


def literal_text(token: Token) -> str:
    """
    Return the text of a literal.

    Block literals return their body without the closing delimiter line.
    """
    if token.kind is TokenKind.BLOCK_LITERAL:
        return "".join(token.heredoc[:-1])
    return token.content


def is_candidate_statement(token: Token) -> bool:
    """Check if the literal contains a SELECT, INSERT, UPDATE or DELETE keyword."""
    return SQL_STATEMENT_PATTERN.search(literal_text(token)) is not None


def is_interpolated(token: Token) -> bool:
    """
    Check if variables inside the literal are interpolated.

    Raises FormatError for a quote-like literal without a recognizable
    leading marker.
    """
    kind = token.kind

    if kind is TokenKind.LITERAL_DOUBLE:
        return True

    if kind is TokenKind.LITERAL_INTERPOLATE:
        match = QUOTE_LIKE_LEAD_PATTERN.match(token.content)
        if match is None:
            raise FormatError(f"Unknown format for >{token.content}<")
        return match.group(1) == "qq"

    if kind is TokenKind.BLOCK_LITERAL:
        return token.block_mode is BlockMode.INTERPOLATE

    return False


def effective_line(token: Token) -> int:
    """
    Line on which a trailing annotation for this literal is expected.

    This is the line the literal's content ends on. A block literal's
    content is its opening delimiter, so its effective line is the line of
    the statement that opens it; the body follows that statement.
    """
    return token.line + token.content.count("\n")
