"""
Parsing of "## SQL safe (...)" annotations.

Authors can whitelist variables they have already quoted or validated:

    my $sql = "SELECT * FROM t WHERE id = $id"; ## SQL safe ($id)

The registry maps the line number of each annotation to the variable
spellings it lists.
"""

import logging
import re
import threading
from types import MappingProxyType
from typing import Dict, FrozenSet, List, Mapping, Optional

from sqlinterp.core.errors import PreconditionError

logger = logging.getLogger(__name__)


ANNOTATION_PATTERN = re.compile(
    r"""
    \A
    (?:\#!.*?)?
    \s*
    \#\#
    \s*
    SQL\s+safe
    \s*
    \((.*?)\)
    """,
    re.IGNORECASE | re.VERBOSE | re.MULTILINE | re.DOTALL,
)

SEPARATOR_PATTERN = re.compile(r"[\s,]+")


def parse_annotation(comment: str) -> Optional[List[str]]:
    """
    Return the variable spellings listed by an annotation comment, or None
    if the comment is not an annotation.
    """
    match = ANNOTATION_PATTERN.search(comment)
    if match is None:
        return None
    return [name for name in SEPARATOR_PATTERN.split(match.group(1)) if name]


class SafeVariableRegistry:
    """
    Safe variables of one document, keyed by line number.

    `parse_annotations` builds the registry once; later calls are no-ops.
    The build happens under a lock and the finished mapping is published
    in a single assignment, so readers never see a partial registry.
    """

    def __init__(self):
        self._entries: Optional[Mapping[int, FrozenSet[str]]] = None
        self._lock = threading.Lock()

    @property
    def is_populated(self) -> bool:
        return self._entries is not None

    def parse_annotations(self, document) -> None:
        """Scan every comment of the document for annotations."""
        if self._entries is not None:
            return

        with self._lock:
            if self._entries is not None:
                return

            entries: Dict[int, List[str]] = {}
            for comment in document.comments():
                names = parse_annotation(comment.content)
                if names is None:
                    continue
                entries.setdefault(comment.line, []).extend(names)

            logger.debug(
                "Found SQL safe annotations on %d line(s) of %s",
                len(entries), document.path,
            )
            self._entries = MappingProxyType(
                {line: frozenset(names) for line, names in entries.items()}
            )

    def lookup(self, line: int) -> FrozenSet[str]:
        """Return the variables marked as safe on a line."""
        if self._entries is None:
            raise PreconditionError("Parsed comments not found")
        if isinstance(line, bool) or not isinstance(line, int) or line < 1:
            raise PreconditionError(f"A positive line number is mandatory, got {line!r}")

        return self._entries.get(line, frozenset())

    def as_dict(self) -> Dict[int, FrozenSet[str]]:
        if self._entries is None:
            raise PreconditionError("Parsed comments not found")
        return dict(self._entries)
