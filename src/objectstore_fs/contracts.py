"""
Filesystem adapter contract.

The generic filesystem layer talks to storage backends only through this
protocol. Boolean operations report expected failures (absent objects,
refused deletes) with False; metadata operations report an absent object
with None. Unexpected conditions raise.
"""
from __future__ import annotations

from typing import Any, BinaryIO, List, Mapping, Optional, Protocol, Union, runtime_checkable

from .models import Entry, Visibility

Config = Optional[Mapping[str, Any]]

__all__ = ["Config", "FilesystemAdapter"]


@runtime_checkable
class FilesystemAdapter(Protocol):
    """Protocol every storage backend of the filesystem layer satisfies."""

    supports_overwrite: bool

    def write(self, path: str, contents: Union[bytes, str], config: Config = None) -> Optional[Entry]:
        """Write a new file; returns the written file's metadata."""
        ...

    def update(self, path: str, contents: Union[bytes, str], config: Config = None) -> Optional[Entry]:
        """Overwrite an existing file."""
        ...

    def write_stream(self, path: str, resource: BinaryIO, config: Config = None) -> Optional[Entry]:
        """Write a new file from a readable stream."""
        ...

    def update_stream(self, path: str, resource: BinaryIO, config: Config = None) -> Optional[Entry]:
        """Overwrite an existing file from a readable stream."""
        ...

    def read(self, path: str) -> Optional[Entry]:
        """Read a file; the Entry carries ``contents``."""
        ...

    def read_stream(self, path: str) -> Optional[Entry]:
        """Read a file as a stream; the Entry carries ``stream``."""
        ...

    def delete(self, path: str) -> bool:
        ...

    def delete_dir(self, dirname: str) -> bool:
        ...

    def create_dir(self, dirname: str, config: Config = None) -> Optional[Entry]:
        ...

    def rename(self, path: str, new_path: str) -> bool:
        ...

    def copy(self, path: str, new_path: str) -> bool:
        ...

    def has(self, path: str) -> bool:
        ...

    def list_contents(self, directory: str = "", recursive: bool = False) -> List[Entry]:
        ...

    def get_metadata(self, path: str) -> Optional[Entry]:
        ...

    def get_size(self, path: str) -> Optional[Entry]:
        ...

    def get_mimetype(self, path: str) -> Optional[Entry]:
        ...

    def get_timestamp(self, path: str) -> Optional[Entry]:
        ...

    def get_visibility(self, path: str) -> Optional[Entry]:
        ...

    def set_visibility(self, path: str, visibility: Union[Visibility, str]) -> Optional[Entry]:
        ...
