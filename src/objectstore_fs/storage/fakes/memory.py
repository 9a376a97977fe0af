"""
In-memory object store client.

This implementation explicitly subclasses ObjectStoreClient to ensure
interface changes break CI immediately, preventing silent drift.
Reads, lists and heads are immediately consistent with writes.
"""
from __future__ import annotations

import hashlib
import io
import time
from dataclasses import dataclass, field
from email.utils import formatdate
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional

from ..base import ACL_PRIVATE, ACL_PUBLIC_READ, PUBLIC_GRANT_URI, Body, HeadResponse, ObjectStoreClient
from ..errors import ObjectNotFound, TransportError

__all__ = ["InMemoryObjectStoreClient"]

_OWNER_GRANT = {
    "Grantee": {"Type": "CanonicalUser", "ID": "in-memory-owner"},
    "Permission": "FULL_CONTROL",
}
_PUBLIC_READ_GRANT = {
    "Grantee": {"Type": "Group", "URI": PUBLIC_GRANT_URI},
    "Permission": "READ",
}
_KNOWN_ACLS = {ACL_PRIVATE, ACL_PUBLIC_READ}


@dataclass
class _StoredObject:
    data: bytes
    acl: str = ACL_PRIVATE
    content_type: str = "binary/octet-stream"
    metadata: Dict[str, str] = field(default_factory=dict)
    storage_class: str = "STANDARD"
    last_modified: int = 0

    @property
    def etag(self) -> str:
        return hashlib.md5(self.data).hexdigest()


class InMemoryObjectStoreClient(ObjectStoreClient):
    """
    Object store client keeping every bucket in a dict.

    Buckets are created on first write. Missing buckets behave as empty.
    """

    def __init__(self, page_size: int = 1000) -> None:
        self._buckets: Dict[str, Dict[str, _StoredObject]] = {}
        self._head_status: Dict[tuple, int] = {}
        self.page_size = page_size
        self.pages_served = 0

    def _bucket(self, bucket: str) -> Dict[str, _StoredObject]:
        return self._buckets.setdefault(bucket, {})

    def _get(self, bucket: str, key: str) -> _StoredObject:
        try:
            return self._buckets[bucket][key]
        except KeyError:
            raise ObjectNotFound(f"No such key: {bucket}/{key}", bucket=bucket, key=key)

    def put_object(
        self,
        body: Body,
        bucket: str,
        key: str,
        acl: str = ACL_PRIVATE,
        options: Optional[Mapping[str, Any]] = None,
    ) -> None:
        if acl not in _KNOWN_ACLS:
            raise TransportError(f"Unsupported canned ACL: {acl}", bucket=bucket, key=key)
        options = options or {}
        data = body if isinstance(body, bytes) else body.read()
        self._bucket(bucket)[key] = _StoredObject(
            data=data,
            acl=acl,
            content_type=options.get("ContentType", "binary/octet-stream"),
            metadata=dict(options.get("Metadata") or {}),
            storage_class=options.get("StorageClass", "STANDARD"),
            last_modified=int(time.time()),
        )

    def get_object(self, bucket: str, key: str, stream: bool = False) -> Body:
        stored = self._get(bucket, key)
        if stream:
            return io.BytesIO(stored.data)
        return stored.data

    def delete_object(self, bucket: str, key: str) -> None:
        self._get(bucket, key)
        del self._buckets[bucket][key]

    def delete_objects(self, bucket: str, keys: Iterable[str]) -> List[str]:
        objects = self._bucket(bucket)
        for key in keys:
            objects.pop(key, None)
        return []

    def list_objects(
        self,
        bucket: str,
        prefix: str = "",
        marker: Optional[str] = None,
        max_keys: Optional[int] = None,
        delimiter: Optional[str] = None,
    ) -> Iterator[Dict[str, Any]]:
        """List rows lazily, one simulated page of ``page_size`` rows at a time."""
        rows = self._collect_rows(bucket, prefix, marker, delimiter)
        if max_keys is not None:
            rows = rows[:max_keys]

        for start in range(0, len(rows), self.page_size):
            self.pages_served += 1
            yield from rows[start:start + self.page_size]

    def _collect_rows(
        self,
        bucket: str,
        prefix: str,
        marker: Optional[str],
        delimiter: Optional[str],
    ) -> List[Dict[str, Any]]:
        objects = self._buckets.get(bucket, {})
        rows: Dict[str, Dict[str, Any]] = {}

        for key in sorted(objects):
            if not key.startswith(prefix):
                continue
            if marker is not None and key <= marker:
                continue

            rest = key[len(prefix):]
            if delimiter and delimiter in rest:
                common = prefix + rest[:rest.index(delimiter) + len(delimiter)]
                rows.setdefault(common, {"prefix": common})
                continue

            stored = objects[key]
            rows[key] = {
                "name": key,
                "size": len(stored.data),
                "time": stored.last_modified,
                "hash": stored.etag,
                "StorageClass": stored.storage_class,
            }

        return [rows[name] for name in sorted(rows)]

    def head_object(self, bucket: str, key: str) -> HeadResponse:
        stored = self._get(bucket, key)
        headers = {
            "content-length": str(len(stored.data)),
            "content-type": stored.content_type,
            "etag": f'"{stored.etag}"',
            "last-modified": formatdate(stored.last_modified, usegmt=True),
            "x-amz-storage-class": stored.storage_class,
        }
        for name, value in stored.metadata.items():
            headers[f"x-amz-meta-{name.lower()}"] = value
        return HeadResponse(
            status_code=self._head_status.get((bucket, key), 200),
            headers=headers,
        )

    def copy_object(
        self,
        bucket: str,
        source_key: str,
        dest_key: str,
        acl: str = ACL_PRIVATE,
        options: Optional[Mapping[str, Any]] = None,
    ) -> None:
        source = self._get(bucket, source_key)
        if acl not in _KNOWN_ACLS:
            raise TransportError(f"Unsupported canned ACL: {acl}", bucket=bucket, key=dest_key)
        options = options or {}
        content_type = source.content_type
        metadata = dict(source.metadata)
        if options.get("MetadataDirective") == "REPLACE":
            content_type = options.get("ContentType", "binary/octet-stream")
            metadata = dict(options.get("Metadata") or {})
        self._bucket(bucket)[dest_key] = _StoredObject(
            data=source.data,
            acl=acl,
            content_type=content_type,
            metadata=metadata,
            storage_class=options.get("StorageClass", "STANDARD"),
            last_modified=int(time.time()),
        )

    def get_object_acl(self, bucket: str, key: str) -> List[Dict[str, Any]]:
        stored = self._get(bucket, key)
        grants = [dict(_OWNER_GRANT)]
        if stored.acl == ACL_PUBLIC_READ:
            grants.append(dict(_PUBLIC_READ_GRANT))
        return grants

    def put_object_acl(self, bucket: str, key: str, acl: str) -> None:
        stored = self._get(bucket, key)
        if acl not in _KNOWN_ACLS:
            raise TransportError(f"Unsupported canned ACL: {acl}", bucket=bucket, key=key)
        stored.acl = acl

    # Test utilities

    def keys(self, bucket: str) -> List[str]:
        """Sorted keys currently stored in a bucket."""
        return sorted(self._buckets.get(bucket, {}))

    def set_head_status(self, bucket: str, key: str, status_code: int) -> None:
        """Make head_object answer with a specific status for one key."""
        self._head_status[(bucket, key)] = status_code

    def clear(self) -> None:
        """Clear all stored data."""
        self._buckets.clear()
        self._head_status.clear()
        self.pages_served = 0
