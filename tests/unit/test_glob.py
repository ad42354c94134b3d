"""Tests for vaultctl.core.glob."""

from __future__ import annotations

from vaultctl.core.glob import compile_glob, glob_expression, has_magic


class TestGlobExpression:
    """Tests for translating wildcards."""

    def test_has_magic(self):
        """Test has magic."""
        assert has_magic("secret/f*")
        assert has_magic("secret/fo?")
        assert not has_magic("secret/foo")

    def test_wildcards(self):
        """Test wildcards."""
        assert glob_expression("f*") == "f.*"
        assert glob_expression("f?o") == "f.o"

    def test_literal_characters_are_escaped(self):
        """Test literal characters are escaped."""
        matcher = compile_glob("/secret", "a.b*")
        assert matcher.match("/secret/a.bc")
        assert not matcher.match("/secret/aXbc")


class TestAnchoring:
    """Root patterns anchor only the start; others anchor both ends."""

    def test_root_pattern_is_prefix_anchored(self):
        """Test root pattern is prefix anchored."""
        matcher = compile_glob("/", "se?")
        assert matcher.match("/sec")
        assert matcher.match("/secret")
        assert not matcher.match("/team")

    def test_nested_pattern_is_fully_anchored(self):
        """Test nested pattern is fully anchored."""
        matcher = compile_glob("/secret", "fo?")
        assert matcher.match("/secret/foo")
        assert not matcher.match("/secret/food")
        assert not matcher.match("/other/secret/foo")
