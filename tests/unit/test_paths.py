"""Tests for vaultctl.core.paths."""

from __future__ import annotations

import pytest

from vaultctl.core.paths import api_path, basename, clean, parent, resolve, split


class TestClean:
    """Tests for lexical path cleaning."""

    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("", "."),
            ("/", "/"),
            ("//", "/"),
            ("///secret//foo/", "/secret/foo"),
            ("/secret/./foo", "/secret/foo"),
            ("/secret/../foo", "/foo"),
            ("/../..", "/"),
            ("secret/foo/", "secret/foo"),
        ],
    )
    def test_clean(self, path, expected):
        """Test clean."""
        assert clean(path) == expected


class TestResolve:
    """Tests for resolving paths against a working path."""

    @pytest.mark.parametrize(
        ("base", "path", "expected"),
        [
            ("", "test", "/test"),
            ("", ".", "/"),
            ("foo", "bar", "/foo/bar"),
            ("/", "foo/", "/foo"),
            ("/secret/app", "..", "/secret"),
            ("/secret/app", "/other", "/other"),
            ("/secret", "../../..", "/"),
        ],
    )
    def test_resolve(self, base, path, expected):
        """Test resolve."""
        assert resolve(base, path) == expected

    @pytest.mark.parametrize("path", ["", ".", "a/b/", "../x", "/abs//path/", "a/../../b"])
    @pytest.mark.parametrize("base", ["", "/", "foo", "/secret/app/"])
    def test_resolve_is_idempotent(self, base, path):
        """Test resolve is idempotent."""
        once = resolve(base, path)
        assert resolve(base, once) == once
        assert once.startswith("/")


class TestHelpers:
    """Tests for split, parent, basename and api_path."""

    def test_split_keeps_separator_on_directory(self):
        """Test split keeps separator on directory."""
        assert split("/secret/foo") == ("/secret/", "foo")
        assert split("/secret/") == ("/secret/", "")
        assert split("foo") == ("", "foo")

    def test_parent(self):
        """Test parent."""
        assert parent("/secret/foo") == "/secret"
        assert parent("/secret") == "/"
        assert parent("foo") == "."

    def test_basename(self):
        """Test basename."""
        assert basename("/secret/foo/") == "foo"
        assert basename("/") == "/"

    def test_api_path_strips_leading_separator(self):
        """Test api path strips leading separator."""
        assert api_path("/secret/foo") == "secret/foo"
        assert api_path("secret/foo") == "secret/foo"
        assert api_path("/") == ""
