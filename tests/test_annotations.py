"""
Tests for "## SQL safe" annotation parsing.
"""

import pytest
import os
import sys
from concurrent.futures import ThreadPoolExecutor

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlinterp.analysis.annotations import SafeVariableRegistry, parse_annotation
from sqlinterp.core.errors import PreconditionError
from sqlinterp.core.tokens import Document, Token, TokenKind


def comment(content, line):
    return Token(TokenKind.COMMENT, content, line)


class TestParseAnnotation:
    """Tests for the annotation grammar."""

    def test_basic_annotation(self):
        assert parse_annotation("## SQL safe ($table)") == ["$table"]

    def test_whitespace_separated(self):
        assert parse_annotation("## SQL safe ($a $b)") == ["$a", "$b"]

    def test_comma_separated(self):
        assert parse_annotation("## SQL safe ($value, $other)") == ["$value", "$other"]

    def test_case_insensitive(self):
        assert parse_annotation("## sql SAFE($x)") == ["$x"]

    def test_no_space_before_parenthesis(self):
        assert parse_annotation("##SQL safe($x)") == ["$x"]

    def test_shebang_prefix(self):
        assert parse_annotation("#!/usr/bin/perl ## SQL safe ($x)") == ["$x"]

    def test_complex_spellings(self):
        assert parse_annotation('## SQL safe (${long} $h->{"key"})') == ["${long}", '$h->{"key"}']

    def test_single_hash_is_not_an_annotation(self):
        assert parse_annotation("# SQL safe ($x)") is None

    def test_unrelated_comment(self):
        assert parse_annotation("## no critic (PreventSQLInjection)") is None
        assert parse_annotation("# just a comment") is None

    def test_empty_list(self):
        assert parse_annotation("## SQL safe ()") == []


class TestSafeVariableRegistry:
    """Tests for the per-document registry."""

    def test_lookup(self):
        """Test lookup of annotated lines."""
        document = Document([
            comment("## SQL safe ($table)", 3),
            comment("# unrelated", 4),
        ])
        registry = SafeVariableRegistry()
        registry.parse_annotations(document)

        assert registry.lookup(3) == frozenset({"$table"})
        assert registry.lookup(4) == frozenset()
        assert registry.lookup(100) == frozenset()

    def test_line_accumulates_annotations(self):
        """Test several annotations on the same line."""
        document = Document([
            comment("## SQL safe ($a)", 7),
            comment("## SQL safe ($b)", 7),
        ])
        registry = SafeVariableRegistry()
        registry.parse_annotations(document)

        assert registry.lookup(7) == frozenset({"$a", "$b"})

    def test_lookup_before_parse(self):
        """Test that querying an unpopulated registry is a caller error."""
        registry = SafeVariableRegistry()

        with pytest.raises(PreconditionError):
            registry.lookup(1)

    @pytest.mark.parametrize("line", ["12", None, 0, -3, 1.5, True])
    def test_malformed_line_number(self, line):
        """Test that malformed line numbers are rejected."""
        registry = SafeVariableRegistry()
        registry.parse_annotations(Document([]))

        with pytest.raises(PreconditionError):
            registry.lookup(line)

    def test_parse_is_idempotent(self):
        """Test that parsing twice gives the same content as parsing once."""
        document = Document([comment("## SQL safe ($x $y)", 2)])
        registry = SafeVariableRegistry()

        registry.parse_annotations(document)
        first = registry.as_dict()
        registry.parse_annotations(document)

        assert registry.as_dict() == first
        assert registry.lookup(2) == frozenset({"$x", "$y"})

    def test_registry_is_not_rebuilt(self):
        """Test that the registry does not change once built."""
        document = Document([comment("## SQL safe ($x)", 2)])
        registry = SafeVariableRegistry()
        registry.parse_annotations(document)

        document.tokens.append(comment("## SQL safe ($y)", 5))
        registry.parse_annotations(document)

        assert registry.lookup(5) == frozenset()

    def test_concurrent_population(self):
        """Test that concurrent readers all see the complete registry."""
        document = Document([comment(f"## SQL safe ($v{i})", i) for i in range(1, 200)])

        def read(line):
            return document.safe_variables.lookup(line)

        with ThreadPoolExecutor(max_workers=8) as executor:
            results = list(executor.map(read, range(1, 200)))

        assert results == [frozenset({f"$v{i}"}) for i in range(1, 200)]

    def test_document_owns_one_registry(self):
        """Test that the document caches its registry."""
        document = Document([comment("## SQL safe ($x)", 1)])

        assert document.safe_variables is document.safe_variables
        assert document.safe_variables.is_populated


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
