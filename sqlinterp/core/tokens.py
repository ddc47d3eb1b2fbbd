"""
Token stream data structures supplied by the host.

The host analysis engine tokenizes a source file and hands the core a
Document: an ordered list of tokens, each linked to the next token of the
same statement. The core only ever reads these structures.
"""

import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from sqlinterp.core.findings import CodeSnippet


class TokenKind(Enum):
    """Kinds of tokens the core knows how to handle."""
    LITERAL_SINGLE = "literal_single"
    LITERAL_DOUBLE = "literal_double"
    LITERAL_INTERPOLATE = "literal_interpolate"
    BLOCK_LITERAL = "block_literal"
    OPERATOR = "operator"
    SYMBOL = "symbol"
    STATEMENT_TERMINATOR = "statement_terminator"
    COMMENT = "comment"
    OTHER = "other"

    @property
    def is_literal(self) -> bool:
        return self in LITERAL_KINDS


LITERAL_KINDS = frozenset({
    TokenKind.LITERAL_SINGLE,
    TokenKind.LITERAL_DOUBLE,
    TokenKind.LITERAL_INTERPOLATE,
    TokenKind.BLOCK_LITERAL,
})


class BlockMode(Enum):
    """How the opening delimiter of a block literal was written."""
    INTERPOLATE = "interpolate"  # <<"TAG" or <<TAG
    LITERAL = "literal"          # <<'TAG'
    COMMAND = "command"          # <<`TAG`


@dataclass(eq=False)
class Token:
    """
    A single token of a statement.

    For block literals, `content` holds the opening delimiter (for example
    `<<"SQL"`) and `heredoc` holds the body lines, each with its trailing
    newline, followed by the closing delimiter line.
    """
    kind: TokenKind
    content: str
    line: int
    next_sibling: Optional["Token"] = field(default=None, repr=False)
    heredoc: Tuple[str, ...] = ()
    block_mode: Optional[BlockMode] = None

    def __post_init__(self):
        if isinstance(self.kind, str):
            self.kind = TokenKind(self.kind)
        if isinstance(self.block_mode, str):
            self.block_mode = BlockMode(self.block_mode)
        self.heredoc = tuple(self.heredoc)

    def __repr__(self) -> str:
        return f"Token(kind={self.kind.value!r}, content={self.content!r}, line={self.line})"

    def __str__(self) -> str:
        return self.content


class Document:
    """
    The unit of analysis: every token of one source file.

    The document owns the safe-variable registry built from its comments.
    The registry is populated on first access and never changes afterwards.
    """

    def __init__(
        self,
        tokens: Iterable[Token],
        path: str = "<unknown>",
        source: Optional[str] = None,
    ):
        self.tokens: List[Token] = list(tokens)
        self.path = path
        self.source = source
        self._lines: Optional[List[str]] = None
        self._safe_variables: Optional[Any] = None
        self._state_lock = threading.Lock()

    @classmethod
    def from_statements(
        cls,
        statements: Iterable[Sequence[Token]],
        path: str = "<unknown>",
        source: Optional[str] = None,
    ) -> "Document":
        """
        Build a document from statements, linking each token to the next
        token of the same statement.
        """
        tokens: List[Token] = []
        for statement in statements:
            statement = list(statement)
            for current, following in zip(statement, statement[1:]):
                current.next_sibling = following
            if statement:
                statement[-1].next_sibling = None
            tokens.extend(statement)
        return cls(tokens, path=path, source=source)

    def find(self, kind: TokenKind) -> List[Token]:
        """Return every token of the given kind, in document order."""
        return [token for token in self.tokens if token.kind is kind]

    def comments(self) -> List[Token]:
        return self.find(TokenKind.COMMENT)

    @property
    def safe_variables(self):
        """The populated safe-variable registry of this document."""
        if self._safe_variables is None:
            from sqlinterp.analysis.annotations import SafeVariableRegistry

            with self._state_lock:
                if self._safe_variables is None:
                    self._safe_variables = SafeVariableRegistry()
        self._safe_variables.parse_annotations(self)
        return self._safe_variables

    @property
    def lines(self) -> List[str]:
        """Get the source code lines, if the host supplied the source."""
        if self._lines is None:
            self._lines = self.source.splitlines() if self.source else []
        return self._lines

    def get_snippet(self, line_number: int, context_lines: int = 3) -> Optional[CodeSnippet]:
        """Get a code snippet around a line number."""
        lines = self.lines
        if not lines or line_number < 1 or line_number > len(lines):
            return None

        start = max(0, line_number - context_lines - 1)
        end = min(len(lines), line_number + context_lines)

        return CodeSnippet(
            code=lines[line_number - 1],
            highlighted_line=line_number,
            context_before=lines[start:line_number - 1],
            context_after=lines[line_number:end],
        )
