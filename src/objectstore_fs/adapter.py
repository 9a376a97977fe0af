"""
Filesystem adapter over an object store.

Translates filesystem verbs (write, read, delete, list, copy, metadata,
visibility) into object store client calls. The adapter holds no state
between calls beyond the bucket, root prefix and default write options.
"""
from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, BinaryIO, Dict, List, Mapping, Optional, Union

from .contracts import Config
from .directories import emulate_directories
from .models import Entry, Visibility
from .normalizer import normalize_head, normalize_response
from .options import COPY_ONLY_OPTIONS, resolve_copy_options, resolve_write_options, validate_default_options
from .paths import SEPARATOR, PathPrefixer
from .settings import Settings
from .storage.base import ACL_PRIVATE, ACL_PUBLIC_READ, PUBLIC_GRANT_URI, Body, ObjectStoreClient
from .storage.errors import ObjectNotFound, TransportError, UnexpectedStatus

__all__ = ["ObjectStoreAdapter", "adapter_from_settings"]

logger = logging.getLogger(__name__)

# Head statuses that carry usable metadata
_HEAD_OK = (200, 206)

# Keys per batch delete request (S3 limit)
DELETE_BATCH_SIZE = 1000

# Write options that are never sent as upload request parameters
_LOCAL_OPTIONS = ("visibility", "mimetype", "ACL") + COPY_ONLY_OPTIONS


class ObjectStoreAdapter:
    """
    FilesystemAdapter implementation backed by an ObjectStoreClient.

    Design Notes: Consistency

    Object stores have no directories, no atomic rename and may show a
    just-deleted object in a listing for a while. The adapter therefore:

    - checks existence with an exact head request, never a prefix listing
    - trusts the delete call's own result instead of re-checking
    - deletes directories by listing every nested key and batch deleting
    - renames as copy-then-delete and never deletes before the copy succeeded

    Error policy: boolean operations turn ObjectNotFound and TransportError
    into False, and so do ``read``/``read_stream`` with None. Metadata,
    visibility and write operations turn ObjectNotFound into None and let
    TransportError and UnexpectedStatus propagate. ``has`` only swallows
    ObjectNotFound.
    """

    supports_overwrite = True

    def __init__(
        self,
        client: ObjectStoreClient,
        bucket: str,
        prefix: str = "",
        options: Optional[Mapping[str, Any]] = None,
        verify_deletes: bool = False,
    ) -> None:
        """
        Initialize the adapter.

        Args:
            client: Object store client performing the requests
            bucket: Bucket holding the files
            prefix: Root key prefix (leading separators are stripped)
            options: Default write options applied to every upload
            verify_deletes: Re-check existence after delete and log a warning
                when the object is still visible (does not change results)

        Raises:
            ValueError: If bucket is empty or options holds unknown keys
        """
        if not bucket:
            raise ValueError("bucket is required")
        options = dict(options or {})
        validate_default_options(options)

        self._client = client
        self._bucket = bucket
        self._prefixer = PathPrefixer()
        self.set_prefix(prefix)
        self._options: Mapping[str, Any] = MappingProxyType(options)
        self.verify_deletes = verify_deletes

        logger.debug(f"Object store adapter for bucket {bucket!r}, prefix {self._prefixer.prefix!r}")

    # Configuration accessors

    @property
    def client(self) -> ObjectStoreClient:
        return self._client

    @property
    def bucket(self) -> str:
        return self._bucket

    def set_bucket(self, bucket: str) -> None:
        if not bucket:
            raise ValueError("bucket is required")
        self._bucket = bucket

    @property
    def prefix(self) -> str:
        return self._prefixer.prefix

    def set_prefix(self, prefix: str) -> None:
        self._prefixer.set_prefix(prefix)
        stored = self._prefixer.prefix
        if stored and not stored.endswith(SEPARATOR):
            logger.warning(
                f"Prefix {stored!r} does not end with {SEPARATOR!r}; "
                f"keys will be formed by plain concatenation and "
                f"list_contents will not find files written under it"
            )

    @property
    def options(self) -> Mapping[str, Any]:
        return self._options

    def apply_prefix(self, path: str) -> str:
        return self._prefixer.apply_prefix(path)

    def remove_prefix(self, key: str) -> str:
        return self._prefixer.remove_prefix(key)

    # Writing

    def write(self, path: str, contents: Union[bytes, str], config: Config = None) -> Optional[Entry]:
        """
        Write a file.

        Returns:
            Entry describing the write as requested (not re-fetched from the
            store), or None if the store reports the target as not found
        """
        return self._upload(path, contents, config)

    def update(self, path: str, contents: Union[bytes, str], config: Config = None) -> Optional[Entry]:
        return self._upload(path, contents, config)

    def write_stream(self, path: str, resource: BinaryIO, config: Config = None) -> Optional[Entry]:
        return self._upload(path, resource, config)

    def update_stream(self, path: str, resource: BinaryIO, config: Config = None) -> Optional[Entry]:
        return self._upload(path, resource, config)

    def create_dir(self, dirname: str, config: Config = None) -> Optional[Entry]:
        """Write a zero-length directory marker at ``dirname/``."""
        return self._upload(dirname.rstrip(SEPARATOR) + SEPARATOR, b"", config)

    def _upload(self, path: str, body: Union[bytes, str, Body], config: Config) -> Optional[Entry]:
        key = self.apply_prefix(path)
        options = resolve_write_options(self._options, config, path, body)
        acl = options.get("ACL", ACL_PRIVATE)
        request_options = {name: value for name, value in options.items() if name not in _LOCAL_OPTIONS}

        payload = body.encode("utf-8") if isinstance(body, str) else body

        logger.debug(f"PUT {self._bucket}/{key} (acl={acl})")
        try:
            self._client.put_object(payload, self._bucket, key, acl, request_options)
        except ObjectNotFound as e:
            logger.warning(f"Upload target not found for {path}: {e}")
            return None

        return normalize_response(options, path)

    # Reading

    def read(self, path: str) -> Optional[Entry]:
        """Read a whole file; None when it does not exist or cannot be fetched."""
        contents = self._read_object(path, stream=False)
        if contents is None:
            return None
        return Entry(type="file", path=path, contents=contents)

    def read_stream(self, path: str) -> Optional[Entry]:
        """
        Open a file for streaming; None when it does not exist or cannot
        be opened.

        The caller owns the returned stream and must close it.
        """
        stream = self._read_object(path, stream=True)
        if stream is None:
            return None
        return Entry(type="file", path=path, stream=stream)

    def _read_object(self, path: str, stream: bool) -> Optional[Body]:
        key = self.apply_prefix(path)
        logger.debug(f"GET {self._bucket}/{key} (stream={stream})")
        try:
            return self._client.get_object(self._bucket, key, stream)
        except ObjectNotFound:
            return None
        except TransportError as e:
            logger.warning(f"Read of {self._bucket}/{key} failed: {e}")
            return None

    # Existence and metadata

    def has(self, path: str) -> bool:
        """
        Exact existence check for one key.

        A key that merely starts with ``path`` does not count.

        Raises:
            TransportError: If the store cannot be asked
            UnexpectedStatus: If the head answer is neither success nor 404
        """
        return self.get_metadata(path) is not None

    def get_metadata(self, path: str) -> Optional[Entry]:
        """
        Head the object and return its metadata.

        The Entry carries the normalized fields (size, mimetype, timestamp,
        etag, storage class, version, user metadata) plus the complete
        header set in ``headers``.

        Raises:
            UnexpectedStatus: If the store answers with a status other than 200/206
            TransportError: For any other failure
        """
        key = self.apply_prefix(path)
        try:
            response = self._client.head_object(self._bucket, key)
        except ObjectNotFound:
            return None

        if response.status_code not in _HEAD_OK:
            raise UnexpectedStatus(
                f"Unexpected HTTP status {response.status_code}",
                response.status_code,
                bucket=self._bucket,
                key=key,
            )

        return normalize_head(path, response.headers)

    def get_size(self, path: str) -> Optional[Entry]:
        return self.get_metadata(path)

    def get_mimetype(self, path: str) -> Optional[Entry]:
        return self.get_metadata(path)

    def get_timestamp(self, path: str) -> Optional[Entry]:
        return self.get_metadata(path)

    # Deleting, copying, renaming

    def delete(self, path: str) -> bool:
        """
        Delete one file.

        Returns:
            True if the store accepted the delete; False if the object was
            absent or the request failed
        """
        key = self.apply_prefix(path)
        logger.debug(f"DELETE {self._bucket}/{key}")
        try:
            self._client.delete_object(self._bucket, key)
        except ObjectNotFound:
            logger.debug(f"Delete of absent object {self._bucket}/{key}")
            return False
        except TransportError as e:
            logger.warning(f"Delete failed for {self._bucket}/{key}: {e}")
            return False

        if self.verify_deletes:
            self._verify_deleted(path)
        return True

    def _verify_deleted(self, path: str) -> None:
        try:
            still_visible = self.has(path)
        except (TransportError, UnexpectedStatus) as e:
            logger.warning(f"Could not verify delete of {path}: {e}")
            return
        if still_visible:
            logger.warning(f"{path} still visible after delete (eventual consistency)")

    def delete_dir(self, dirname: str) -> bool:
        """
        Delete a directory and every object nested under it.

        Lists all keys under ``dirname/`` and removes them, together with
        the directory marker, through batch delete requests.

        Returns:
            True only if no key was refused; False on transport failure

        Raises:
            ValueError: If asked to delete the root directory
        """
        dirname = dirname.strip(SEPARATOR)
        if not dirname:
            raise ValueError("Refusing to delete the root directory")

        marker = self.apply_prefix(dirname + SEPARATOR)
        try:
            keys = [row["name"] for row in self._client.list_objects(self._bucket, marker) if "name" in row]
            if marker not in keys:
                keys.append(marker)

            failed: List[str] = []
            for start in range(0, len(keys), DELETE_BATCH_SIZE):
                failed.extend(self._client.delete_objects(self._bucket, keys[start:start + DELETE_BATCH_SIZE]))
        except (ObjectNotFound, TransportError) as e:
            logger.warning(f"Delete of directory {dirname} failed: {e}")
            return False

        if failed:
            logger.warning(f"Delete of directory {dirname} left {len(failed)} object(s): {failed[:5]}")
            return False

        logger.debug(f"Deleted {len(keys)} key(s) under {self._bucket}/{marker}")
        return True

    def copy(self, path: str, new_path: str) -> bool:
        """
        Server-side copy carrying the source visibility forward.

        The adapter's default options (storage class, encryption) are sent
        with the copy; content type and user metadata stay the source's
        unless the defaults set ``MetadataDirective="REPLACE"``.

        Returns:
            True on success; False if the source is absent or the copy failed
        """
        source_key = self.apply_prefix(path)
        dest_key = self.apply_prefix(new_path)
        try:
            visibility = self._raw_visibility(path)
        except ObjectNotFound:
            logger.warning(f"Copy source {path} not found")
            return False
        except TransportError as e:
            # Stores without ACL support still copy; the copy stays private
            logger.debug(f"ACL lookup failed for {self._bucket}/{source_key}, copying as private: {e}")
            visibility = Visibility.PRIVATE

        acl = ACL_PUBLIC_READ if visibility == Visibility.PUBLIC else ACL_PRIVATE
        options = resolve_copy_options(self._options)
        logger.debug(f"COPY {self._bucket}/{source_key} -> {dest_key} (acl={acl})")
        try:
            self._client.copy_object(self._bucket, source_key, dest_key, acl, options)
        except (ObjectNotFound, TransportError) as e:
            logger.warning(f"Copy {path} -> {new_path} failed: {e}")
            return False
        return True

    def rename(self, path: str, new_path: str) -> bool:
        """
        Move a file as copy-then-delete.

        The original is deleted only after the copy succeeded, so a failed
        copy never loses data. Renaming a file onto its own key leaves it in
        place and succeeds when it exists.
        """
        if self.apply_prefix(path) == self.apply_prefix(new_path):
            return self.has(path)
        if not self.copy(path, new_path):
            return False
        return self.delete(path)

    # Listing

    def list_contents(self, directory: str = "", recursive: bool = False) -> List[Entry]:
        """
        List a directory.

        Non-recursive listings pass a "/" delimiter so the store groups
        deeper keys into sub-directory rows; recursive listings return every
        key and implied directories are synthesized.

        Listing looks under ``prefix/``, so with a root prefix that does not
        end in "/" (e.g. "root", which stores ``a`` as key ``roota``) files
        written through the adapter are not listed.

        Raises:
            TransportError: If the listing request fails
        """
        directory = directory.strip(SEPARATOR)
        location = self.apply_prefix(directory + SEPARATOR) if directory else self.apply_prefix("")
        if location and not location.endswith(SEPARATOR):
            location += SEPARATOR

        delimiter = None if recursive else SEPARATOR
        logger.debug(f"LIST {self._bucket}/{location} (recursive={recursive})")

        normalized: List[Entry] = []
        for row in self._client.list_objects(self._bucket, location, delimiter=delimiter):
            entry = normalize_response(row, prefixer=self._prefixer)
            if entry.path == directory or not entry.path:
                continue
            normalized.append(entry)

        return emulate_directories(normalized, root=directory)

    # Visibility

    def get_visibility(self, path: str) -> Optional[Entry]:
        """Report the object's visibility; None when it does not exist."""
        try:
            visibility = self._raw_visibility(path)
        except ObjectNotFound:
            return None
        return Entry(type="file", path=path, visibility=visibility)

    def set_visibility(self, path: str, visibility: Union[Visibility, str]) -> Optional[Entry]:
        """
        Make an object public or private.

        Raises:
            ValueError: If visibility is not "public" or "private"
            TransportError: If the ACL cannot be written
        """
        visibility = Visibility(visibility)
        acl = ACL_PUBLIC_READ if visibility == Visibility.PUBLIC else ACL_PRIVATE
        key = self.apply_prefix(path)
        try:
            self._client.put_object_acl(self._bucket, key, acl)
        except ObjectNotFound:
            return None
        return Entry(type="file", path=path, visibility=visibility)

    def _raw_visibility(self, path: str) -> Visibility:
        """
        Object ACL presented as a visibility.

        Public only when an AllUsers READ grant is present.
        """
        grants = self._client.get_object_acl(self._bucket, self.apply_prefix(path))
        for grant in grants:
            grantee: Dict[str, Any] = grant.get("Grantee") or {}
            if grantee.get("URI") == PUBLIC_GRANT_URI and grant.get("Permission") == "READ":
                return Visibility.PUBLIC
        return Visibility.PRIVATE


def adapter_from_settings(settings: Settings, client: Optional[ObjectStoreClient] = None) -> ObjectStoreAdapter:
    """
    Build an adapter from Settings.

    Args:
        settings: Validated Settings
        client: Client to use; a boto3-backed S3ObjectStoreClient is created
            from the settings when omitted

    Returns:
        Configured ObjectStoreAdapter
    """
    if client is None:
        from .storage.s3_client import S3ObjectStoreClient
        client = S3ObjectStoreClient(settings=settings)

    return ObjectStoreAdapter(
        client,
        settings.bucket,
        prefix=settings.prefix,
        options=settings.default_options,
        verify_deletes=settings.verify_deletes,
    )
