"""
Directory emulation for flat object listings.

An object store only returns keys that exist. Directories are either
zero-byte marker objects or implied by deeper keys; this module fills in
the implied ones so a listing reads as a coherent tree.
"""
from __future__ import annotations

from typing import Iterable, List, Set

from .models import Entry
from .paths import SEPARATOR, dirname

__all__ = ["emulate_directories"]


def emulate_directories(entries: Iterable[Entry], root: str = "") -> List[Entry]:
    """
    Append a directory entry for every implied ancestor not already listed.

    Only ancestors strictly below ``root`` are synthesized; the listed
    directory itself and anything above it are never added. Running the
    function on its own output adds nothing.

    Args:
        entries: Normalized listing entries
        root: Logical directory the listing was taken from ("" for the root)

    Returns:
        The original entries followed by synthesized directories in sorted order

    Examples:
        >>> listing = [Entry(type="file", path="a/b/c.txt")]
        >>> [e.path for e in emulate_directories(listing)]
        ['a/b/c.txt', 'a', 'a/b']
    """
    root = root.strip(SEPARATOR)
    listing = list(entries)

    listed: Set[str] = {entry.path for entry in listing if entry.is_dir}
    implied: Set[str] = set()

    for entry in listing:
        parent = dirname(entry.path)
        while parent and parent != root and parent not in implied:
            if root and not parent.startswith(root + SEPARATOR):
                break
            implied.add(parent)
            parent = dirname(parent)

    for path in sorted(implied - listed):
        listing.append(Entry(type="dir", path=path))

    return listing
