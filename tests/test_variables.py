"""
Tests for variable extraction.
"""

import pytest
import os
import sys

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlinterp.analysis.variables import extract_variables


class TestExtractVariables:
    """Tests for extract_variables()."""

    def test_simple_variable(self):
        """Test a plain scalar."""
        assert extract_variables("A test $variable string") == ["$variable"]

    def test_repeated_variable_reported_once(self):
        """Test that a repeated variable is only reported once."""
        assert extract_variables("A test $variable $variable string") == ["$variable"]

    def test_braced_variable(self):
        """Test the ${name} form."""
        assert extract_variables("A test ${variable_long} string") == ["${variable_long}"]

    def test_nested_data_structure(self):
        """Test dereferencing chains."""
        assert extract_variables('A test $test->{value}->[1]->{"key"} string') == [
            '$test->{value}->[1]->{"key"}',
        ]

    def test_multiple_forms_in_order(self):
        """Test several forms in one string, in order of appearance."""
        text = 'A test $$test{value}[1]{"key"} ${variable_long} $test->{value}->[1]->{"key"} string'

        assert extract_variables(text) == [
            '$$test{value}[1]{"key"}',
            "${variable_long}",
            '$test->{value}->[1]->{"key"}',
        ]

    def test_first_appearance_order(self):
        """Test that order follows first appearance."""
        assert extract_variables("$b and $a and $b again") == ["$b", "$a"]

    def test_array_sigil(self):
        """Test arrays are interpolated too."""
        assert extract_variables("WHERE id IN (@ids)") == ["@ids"]

    def test_package_variable(self):
        """Test package variables."""
        assert extract_variables("FROM $Config::table") == ["$Config::table"]

    def test_quoted_hash_key(self):
        """Test single-quoted hash keys."""
        assert extract_variables("WHERE id = $args{'id'}") == ["$args{'id'}"]

    def test_escaped_sigil_ignored(self):
        """Test that escaped sigils are not variables."""
        assert extract_variables("Costs \\$5 or \\@home") == []

    def test_escaped_backslash_before_variable(self):
        """Test that a literal backslash does not escape the sigil."""
        assert extract_variables("path \\\\$dir") == ["$dir"]

    def test_no_variables(self):
        """Test text without variables."""
        assert extract_variables("SELECT * FROM users") == []
        assert extract_variables("") == []

    def test_removal_applies_to_every_copy(self):
        """Test that every copy of a matched span is removed before searching again."""
        # "$id" is removed from inside "$identifier" as well.
        assert extract_variables("$id $identifier") == ["$id"]

    def test_input_is_not_modified(self):
        """Test the caller's string is left alone."""
        text = "SELECT $a FROM $b"
        extract_variables(text)
        assert text == "SELECT $a FROM $b"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
