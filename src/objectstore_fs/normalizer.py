"""
Response normalization.

Maps raw listing rows, upload options and head response headers into
Entry metadata. The provider-to-canonical field tables are fixed and only
applied to keys present in the source; absent keys produce no field.
"""
from __future__ import annotations

from email.utils import parsedate_to_datetime
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from .models import Entry
from .paths import SEPARATOR, PathPrefixer, pathinfo

__all__ = ["HEADER_MAP", "RESULT_MAP", "normalize_head", "normalize_response"]

# Listing row / upload option field -> Entry field
RESULT_MAP: Mapping[str, str] = MappingProxyType({
    "Body": "contents",
    "ContentLength": "size",
    "ContentType": "mimetype",
    "size": "size",
    "Metadata": "metadata",
    "StorageClass": "storageclass",
    "hash": "etag",
    "VersionId": "versionid",
    "visibility": "visibility",
})

# Head response header (lowercase) -> Entry field
HEADER_MAP: Mapping[str, str] = MappingProxyType({
    "content-length": "size",
    "content-type": "mimetype",
    "etag": "etag",
    "x-amz-storage-class": "storageclass",
    "x-amz-version-id": "versionid",
})

_META_HEADER_PREFIX = "x-amz-meta-"


def _map_fields(source: Mapping[str, Any], table: Mapping[str, str]) -> Dict[str, Any]:
    return {table[name]: value for name, value in source.items() if name in table and value is not None}


def _clean_etag(value: Any) -> str:
    return str(value).strip('"')


def normalize_response(
    response: Mapping[str, Any],
    path: Optional[str] = None,
    prefixer: Optional[PathPrefixer] = None,
) -> Entry:
    """
    Normalize a listing row or upload result into an Entry.

    The path comes from ``path`` when given, otherwise from the row's
    ``name`` (object) or ``prefix`` (grouped directory) with the root prefix
    removed. A path ending in a separator is a directory and yields only
    ``type`` and ``path``.

    Args:
        response: Raw row or option mapping
        path: Logical path override
        prefixer: Resolver used to strip the root prefix from row keys

    Returns:
        Normalized Entry

    Raises:
        ValueError: If no path can be determined

    Examples:
        >>> normalize_response({"name": "a/b/", "time": 1000}).as_dict()
        {'type': 'dir', 'path': 'a/b'}
    """
    if not path:
        key = response.get("name")
        if key is None:
            key = response.get("prefix")
        if key is None:
            raise ValueError(f"Cannot normalize response without name or prefix: {sorted(response)}")
        path = prefixer.remove_prefix(key) if prefixer else key

    if path.endswith(SEPARATOR):
        return Entry(type="dir", path=path.rstrip(SEPARATOR))

    fields: Dict[str, Any] = dict(pathinfo(path))
    if response.get("time") is not None:
        fields["timestamp"] = int(response["time"])
    fields.update(_map_fields(response, RESULT_MAP))
    if "etag" in fields:
        fields["etag"] = _clean_etag(fields["etag"])
    if "size" in fields:
        fields["size"] = int(fields["size"])

    return Entry(type="file", path=path, **fields)


def normalize_head(path: str, headers: Mapping[str, str]) -> Entry:
    """
    Normalize head response headers into a file Entry.

    Known headers become canonical fields, ``x-amz-meta-*`` headers are
    gathered into ``metadata``, and the full header set is kept in
    ``headers`` so callers can read anything the table does not cover.
    """
    lowered = {name.lower(): value for name, value in headers.items()}

    fields: Dict[str, Any] = dict(pathinfo(path))
    fields.update(_map_fields(lowered, HEADER_MAP))
    if "size" in fields:
        fields["size"] = int(fields["size"])
    if "etag" in fields:
        fields["etag"] = _clean_etag(fields["etag"])

    last_modified = lowered.get("last-modified")
    if last_modified:
        try:
            fields["timestamp"] = int(parsedate_to_datetime(last_modified).timestamp())
        except (TypeError, ValueError):
            pass

    user_metadata = {
        name[len(_META_HEADER_PREFIX):]: value
        for name, value in lowered.items()
        if name.startswith(_META_HEADER_PREFIX)
    }
    if user_metadata:
        fields["metadata"] = user_metadata

    return Entry(type="file", path=path, headers=dict(headers), **fields)
