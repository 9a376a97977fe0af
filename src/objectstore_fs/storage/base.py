"""
Storage interfaces for objectstore-fs.

These protocols define the boundary between the filesystem adapter and
object store clients, enabling clean dependency injection and testing with
fakes.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, BinaryIO, Dict, Iterable, Iterator, List, Mapping, Optional, Protocol, Union, runtime_checkable

# Grantee URI S3 uses for the anonymous "everyone" group
PUBLIC_GRANT_URI = "http://acs.amazonaws.com/groups/global/AllUsers"

# Canned ACLs the adapter writes
ACL_PUBLIC_READ = "public-read"
ACL_PRIVATE = "private"

Body = Union[bytes, BinaryIO]


@dataclass(frozen=True)
class HeadResponse:
    """
    Result of a head request.

    Invariants:
    - headers: keys are lowercase HTTP header names
    - status_code: the HTTP status the store answered with; callers decide
      whether it counts as success
    """
    status_code: int
    headers: Dict[str, str] = field(default_factory=dict)


__all__ = [
    "ACL_PRIVATE",
    "ACL_PUBLIC_READ",
    "Body",
    "HeadResponse",
    "ObjectStoreClient",
    "PUBLIC_GRANT_URI",
]


@runtime_checkable
class ObjectStoreClient(Protocol):
    """
    Protocol for the primitive object store operations the adapter needs.

    Every method raises ObjectNotFound when the addressed object is absent
    and TransportError for any other failure.
    """

    def put_object(
        self,
        body: Body,
        bucket: str,
        key: str,
        acl: str = ACL_PRIVATE,
        options: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """
        Store an object, overwriting any existing one.

        Args:
            body: Payload bytes or a readable binary stream
            bucket: Target bucket
            key: Storage key
            acl: Canned ACL to apply
            options: Extra request parameters (ContentType, CacheControl,
                ContentLength, Metadata, ...)
        """
        ...

    def get_object(self, bucket: str, key: str, stream: bool = False) -> Body:
        """
        Retrieve an object.

        Returns:
            Bytes, or a readable stream when stream=True
        """
        ...

    def delete_object(self, bucket: str, key: str) -> None:
        """Delete a single object."""
        ...

    def delete_objects(self, bucket: str, keys: Iterable[str]) -> List[str]:
        """
        Delete many objects in as few requests as possible.

        Keys that do not exist are not failures.

        Returns:
            Keys the store refused to delete (empty on full success)
        """
        ...

    def list_objects(
        self,
        bucket: str,
        prefix: str = "",
        marker: Optional[str] = None,
        max_keys: Optional[int] = None,
        delimiter: Optional[str] = None,
    ) -> Iterator[Dict[str, Any]]:
        """
        Lazily list objects under a key prefix, following pagination.

        Rows are either object rows ``{"name", "size", "time", "hash", ...}``
        or, when a delimiter is given, grouped rows ``{"prefix"}``.
        The iterator is finite and cannot be restarted.

        Args:
            bucket: Bucket to list
            prefix: Only keys starting with this prefix
            marker: Only keys sorting after this key
            max_keys: Stop after this many rows
            delimiter: Group keys sharing the prefix up to this delimiter
        """
        ...

    def head_object(self, bucket: str, key: str) -> HeadResponse:
        """Fetch object headers without the body."""
        ...

    def copy_object(
        self,
        bucket: str,
        source_key: str,
        dest_key: str,
        acl: str = ACL_PRIVATE,
        options: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """
        Server-side copy of one key to another within a bucket.

        Args:
            bucket: Bucket holding both keys
            source_key: Key copied from
            dest_key: Key copied to
            acl: Canned ACL for the copy
            options: Extra copy request parameters (StorageClass,
                ServerSideEncryption, MetadataDirective, ...)
        """
        ...

    def get_object_acl(self, bucket: str, key: str) -> List[Dict[str, Any]]:
        """
        Return the object's ACL grants.

        Each grant looks like ``{"Grantee": {"Type": ..., "URI": ...},
        "Permission": "READ"}``.
        """
        ...

    def put_object_acl(self, bucket: str, key: str, acl: str) -> None:
        """Replace the object's ACL with a canned ACL."""
        ...
