"""
Path utilities for objectstore-fs.

Maps logical paths onto storage keys under a configured root prefix and
back, and derives the path-info fields attached to file entries.
"""
from __future__ import annotations

from pathlib import PurePosixPath
from typing import Dict

SEPARATOR = "/"

__all__ = ["PathPrefixer", "SEPARATOR", "dirname", "pathinfo"]


class PathPrefixer:
    """
    Translate between logical paths and storage keys.

    The prefix is stored without leading separators. No trailing separator
    is added: a prefix meant as a directory should be given as "root/".

    Examples:
        >>> prefixer = PathPrefixer("/uploads/")
        >>> prefixer.apply_prefix("img/a.png")
        'uploads/img/a.png'
        >>> prefixer.remove_prefix("uploads/img/a.png")
        'img/a.png'
    """

    def __init__(self, prefix: str = "") -> None:
        self._prefix = ""
        self.set_prefix(prefix)

    @property
    def prefix(self) -> str:
        return self._prefix

    def set_prefix(self, prefix: str) -> None:
        self._prefix = (prefix or "").lstrip(SEPARATOR)

    def apply_prefix(self, path: str) -> str:
        """Storage key for a logical path; never starts with a separator."""
        return (self._prefix + path.lstrip(SEPARATOR)).lstrip(SEPARATOR)

    def remove_prefix(self, key: str) -> str:
        """Logical path for a storage key; keys outside the prefix pass through."""
        if self._prefix and key.startswith(self._prefix):
            return key[len(self._prefix):]
        return key


def dirname(path: str) -> str:
    """
    Parent directory of a logical path, "" for top-level paths.

    >>> dirname("a/b/c.txt")
    'a/b'
    >>> dirname("c.txt")
    ''
    """
    parent = str(PurePosixPath(path).parent)
    return "" if parent == "." else parent


def pathinfo(path: str) -> Dict[str, str]:
    """
    Path-info fields for a file path.

    Returns a dict with ``dirname``, ``basename`` and ``filename`` always
    present and ``extension`` only when the basename has one.

    >>> pathinfo("docs/report.final.pdf")
    {'dirname': 'docs', 'basename': 'report.final.pdf', 'filename': 'report.final', 'extension': 'pdf'}
    """
    pure = PurePosixPath(path)
    info = {
        "dirname": dirname(path),
        "basename": pure.name,
        "filename": pure.stem,
    }
    if pure.suffix:
        info["extension"] = pure.suffix[1:]
    return info
