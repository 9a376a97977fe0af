"""
Tests for path prefixing and path-info helpers.
"""
from __future__ import annotations

import pytest

from objectstore_fs.paths import PathPrefixer, dirname, pathinfo


class TestPathPrefixer:
    """Test logical path <-> storage key translation."""

    def test_apply_prefix_joins_without_double_separator(self):
        """Leading separators on the path are dropped before joining."""
        prefixer = PathPrefixer("root/")
        assert prefixer.apply_prefix("a/b.txt") == "root/a/b.txt"
        assert prefixer.apply_prefix("/a/b.txt") == "root/a/b.txt"

    def test_leading_separator_stripped_from_prefix(self):
        """The prefix is stored without leading separators."""
        prefixer = PathPrefixer("//root/")
        assert prefixer.prefix == "root/"

    def test_empty_prefix(self):
        """An empty prefix maps paths to themselves (minus a leading separator)."""
        prefixer = PathPrefixer()
        assert prefixer.apply_prefix("/file.txt") == "file.txt"
        assert prefixer.remove_prefix("file.txt") == "file.txt"

    def test_prefix_without_trailing_separator_is_plain_concatenation(self):
        """No separator is invented between prefix and path."""
        prefixer = PathPrefixer("root")
        assert prefixer.apply_prefix("file.txt") == "rootfile.txt"

    def test_no_key_starts_with_separator(self):
        """Storage keys never begin with a separator."""
        for prefix in ("", "/", "root/"):
            prefixer = PathPrefixer(prefix)
            for path in ("", "/", "a", "/a/b"):
                assert not prefixer.apply_prefix(path).startswith("/")

    @pytest.mark.parametrize("path", ["a.txt", "a/b/c.txt", "dir/"])
    def test_remove_inverts_apply(self, path):
        """remove_prefix(apply_prefix(p)) returns p for paths without a leading separator."""
        prefixer = PathPrefixer("root/")
        assert prefixer.remove_prefix(prefixer.apply_prefix(path)) == path

    def test_remove_prefix_passes_foreign_keys_through(self):
        """Keys outside the prefix are returned unchanged."""
        prefixer = PathPrefixer("root/")
        assert prefixer.remove_prefix("other/file.txt") == "other/file.txt"


class TestPathInfo:
    """Test dirname/pathinfo derivation."""

    def test_dirname_top_level(self):
        assert dirname("file.txt") == ""

    def test_dirname_nested(self):
        assert dirname("a/b/c.txt") == "a/b"

    def test_pathinfo_with_extension(self):
        """All four fields are present when the basename has an extension."""
        assert pathinfo("docs/report.pdf") == {
            "dirname": "docs",
            "basename": "report.pdf",
            "filename": "report",
            "extension": "pdf",
        }

    def test_pathinfo_without_extension(self):
        """extension is omitted rather than empty."""
        info = pathinfo("Makefile")
        assert "extension" not in info
        assert info["filename"] == "Makefile"
        assert info["dirname"] == ""
