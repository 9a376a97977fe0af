"""
Tests for directory emulation over flat listings.
"""
from __future__ import annotations

from objectstore_fs.directories import emulate_directories
from objectstore_fs.models import Entry


def _paths(entries):
    return [(e.type, e.path) for e in entries]


class TestEmulateDirectories:
    """Test synthesis of implied directories."""

    def test_implied_ancestors_added(self):
        """Every ancestor of a nested file is synthesized once, in sorted order."""
        listing = [Entry(type="file", path="a/b/c.txt"), Entry(type="file", path="a/d.txt")]
        result = emulate_directories(listing)

        assert _paths(result) == [
            ("file", "a/b/c.txt"),
            ("file", "a/d.txt"),
            ("dir", "a"),
            ("dir", "a/b"),
        ]

    def test_listed_directories_not_duplicated(self):
        listing = [Entry(type="dir", path="a"), Entry(type="file", path="a/x.txt")]
        result = emulate_directories(listing)
        assert _paths(result) == [("dir", "a"), ("file", "a/x.txt")]

    def test_idempotent(self):
        """Emulating an already emulated listing adds nothing."""
        once = emulate_directories([Entry(type="file", path="a/b/c/d.txt")])
        twice = emulate_directories(once)
        assert _paths(twice) == _paths(once)

    def test_root_and_above_never_added(self):
        """Only ancestors strictly below the listed directory appear."""
        listing = [Entry(type="file", path="docs/2024/jan/a.txt")]
        result = emulate_directories(listing, root="docs")
        assert _paths(result) == [
            ("file", "docs/2024/jan/a.txt"),
            ("dir", "docs/2024"),
            ("dir", "docs/2024/jan"),
        ]

    def test_top_level_files_add_nothing(self):
        listing = [Entry(type="file", path="a.txt")]
        assert _paths(emulate_directories(listing)) == [("file", "a.txt")]
