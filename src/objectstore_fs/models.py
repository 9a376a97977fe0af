"""
Data models for filesystem entries.

These Pydantic models describe what the adapter hands back to callers:
one Entry per object or directory, created per call and never persisted.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class Visibility(str, Enum):
    """Two-state view over an object's ACL grants."""
    PUBLIC = "public"
    PRIVATE = "private"


class Entry(BaseModel):
    """
    Canonical metadata for one file or directory.

    Directories carry only ``type`` and ``path``. Files may carry any of
    the optional fields; fields the store did not report stay None and are
    dropped by as_dict().
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    type: Literal["file", "dir"] = Field(..., description="Entry kind")
    path: str = Field(..., description="Logical path, no leading or trailing separator")

    size: Optional[int] = Field(default=None, ge=0, description="Size in bytes")
    mimetype: Optional[str] = Field(default=None, description="Content type")
    timestamp: Optional[int] = Field(default=None, description="Last modified, epoch seconds")

    contents: Optional[bytes] = Field(default=None, description="Object body (read)")
    stream: Optional[Any] = Field(default=None, description="Readable body stream (read_stream)")

    etag: Optional[str] = Field(default=None, description="Entity tag without quotes")
    storageclass: Optional[str] = Field(default=None, description="Storage class")
    versionid: Optional[str] = Field(default=None, description="Object version id")
    metadata: Optional[Dict[str, str]] = Field(default=None, description="User metadata")
    visibility: Optional[Visibility] = Field(default=None, description="public or private")

    dirname: Optional[str] = Field(default=None, description="Parent directory ('' at top level)")
    basename: Optional[str] = Field(default=None, description="Last path component")
    extension: Optional[str] = Field(default=None, description="Extension without dot")
    filename: Optional[str] = Field(default=None, description="Basename without extension")

    headers: Optional[Dict[str, str]] = Field(default=None, description="Raw head response headers")

    @property
    def is_dir(self) -> bool:
        return self.type == "dir"

    @property
    def is_file(self) -> bool:
        return self.type == "file"

    def as_dict(self) -> Dict[str, Any]:
        """Canonical dict form without absent fields; visibility as plain string."""
        data = self.model_dump(exclude_none=True)
        if "visibility" in data:
            data["visibility"] = data["visibility"].value
        return data


__all__ = ["Entry", "Visibility"]
