"""
S3 object store client.

Implements the ObjectStoreClient protocol on top of boto3, for AWS S3 and
S3-compatible services (MinIO, Ceph RGW) reached through a custom endpoint.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from ..settings import Settings
from .base import ACL_PRIVATE, Body, HeadResponse, ObjectStoreClient
from .errors import ObjectNotFound, ObjectStoreError, TransportError, UnexpectedStatus

__all__ = ["S3ObjectStoreClient", "translate_error"]

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}

# put_object parameters upload_fileobj cannot take through ExtraArgs
_STREAM_UNSUPPORTED_ARGS = ("ContentLength",)


def translate_error(exc: Exception, bucket: str, key: Optional[str] = None) -> ObjectStoreError:
    """
    Map a botocore exception onto the object store error taxonomy.

    Args:
        exc: ClientError or BotoCoreError raised by boto3
        bucket: Bucket the request addressed
        key: Key the request addressed

    Returns:
        ObjectNotFound for 404/NoSuchKey/NotFound, UnexpectedStatus for
        non-error statuses botocore still raises on (e.g. 304),
        TransportError otherwise
    """
    location = f"{bucket}/{key}" if key is not None else bucket
    if isinstance(exc, ClientError):
        error = exc.response.get("Error") or {}
        code = str(error.get("Code") or "")
        if code in _NOT_FOUND_CODES:
            return ObjectNotFound(f"Object not found: {location}", bucket=bucket, key=key)
        status = (exc.response.get("ResponseMetadata") or {}).get("HTTPStatusCode")
        if status is not None and int(status) < 400:
            return UnexpectedStatus(f"Unexpected HTTP status {status} for {location}", int(status), bucket=bucket, key=key)
        message = error.get("Message") or code or str(exc)
        return TransportError(f"S3 error for {location}: {message}", bucket=bucket, key=key)
    return TransportError(f"S3 transport error for {location}: {exc}", bucket=bucket, key=key)


class S3ObjectStoreClient(ObjectStoreClient):
    """
    ObjectStoreClient backed by a boto3 S3 client.

    Credentials come from boto3's default chain (environment, shared
    config, instance metadata); this class never handles them.
    """

    def __init__(self, *, settings: Optional[Settings] = None, client: Any = None) -> None:
        """
        Initialize the client.

        Args:
            settings: Settings supplying endpoint, region, addressing style
                and timeouts (ignored when ``client`` is given)
            client: Pre-built boto3 S3 client

        Raises:
            ValueError: If neither settings nor client is given
        """
        if client is not None:
            self._client = client
            return

        if settings is None:
            raise ValueError("S3ObjectStoreClient needs settings or a boto3 client")

        config = Config(
            s3={"addressing_style": settings.url_style},
            connect_timeout=settings.connect_timeout_s,
            read_timeout=settings.read_timeout_s,
        )
        use_ssl = True
        if settings.endpoint_url:
            use_ssl = settings.endpoint_url.startswith("https://")
            logger.debug(f"S3 client using custom endpoint: {settings.endpoint_url}")

        self._client = boto3.client(
            "s3",
            endpoint_url=settings.endpoint_url,
            region_name=settings.region,
            use_ssl=use_ssl,
            config=config,
        )

    @property
    def raw(self) -> Any:
        """Underlying boto3 client."""
        return self._client

    def put_object(
        self,
        body: Body,
        bucket: str,
        key: str,
        acl: str = ACL_PRIVATE,
        options: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """
        Upload an object.

        Bytes go through a single put_object request. Streams go through
        upload_fileobj, which switches to multipart uploads for large or
        length-unknown streams.
        """
        extra: Dict[str, Any] = dict(options or {})
        extra["ACL"] = acl
        try:
            if isinstance(body, bytes):
                self._client.put_object(Bucket=bucket, Key=key, Body=body, **extra)
            else:
                for name in _STREAM_UNSUPPORTED_ARGS:
                    extra.pop(name, None)
                self._client.upload_fileobj(body, bucket, key, ExtraArgs=extra)
        except (ClientError, BotoCoreError) as e:
            raise translate_error(e, bucket, key) from e

    def get_object(self, bucket: str, key: str, stream: bool = False) -> Body:
        try:
            response = self._client.get_object(Bucket=bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise translate_error(e, bucket, key) from e

        if stream:
            return response["Body"]
        try:
            return response["Body"].read()
        except BotoCoreError as e:
            raise translate_error(e, bucket, key) from e

    def delete_object(self, bucket: str, key: str) -> None:
        try:
            self._client.delete_object(Bucket=bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise translate_error(e, bucket, key) from e

    def delete_objects(self, bucket: str, keys: Iterable[str]) -> List[str]:
        keys = list(keys)
        failed: List[str] = []
        chunks = [keys[i : i + 1000] for i in range(0, len(keys), 1000)]
        for chunk in chunks:
            try:
                response = self._client.delete_objects(
                    Bucket=bucket,
                    Delete={"Objects": [{"Key": key} for key in chunk], "Quiet": True},
                )
            except (ClientError, BotoCoreError) as e:
                raise translate_error(e, bucket) from e
            for error in response.get("Errors", []) or []:
                if str(error.get("Code") or "") in _NOT_FOUND_CODES:
                    continue
                logger.debug(f"Batch delete refused {bucket}/{error.get('Key')}: {error.get('Code')}")
                failed.append(error.get("Key"))
        return failed

    def list_objects(
        self,
        bucket: str,
        prefix: str = "",
        marker: Optional[str] = None,
        max_keys: Optional[int] = None,
        delimiter: Optional[str] = None,
    ) -> Iterator[Dict[str, Any]]:
        """
        Lazily list objects with the list_objects_v2 paginator.

        Object rows and grouped prefix rows of one page are yielded in key
        order; pages are fetched only as the iterator advances.
        """
        params: Dict[str, Any] = {"Bucket": bucket, "Prefix": prefix}
        if delimiter:
            params["Delimiter"] = delimiter
        if marker:
            params["StartAfter"] = marker
        if max_keys is not None:
            params["PaginationConfig"] = {"MaxItems": max_keys}

        paginator = self._client.get_paginator("list_objects_v2")
        try:
            for page in paginator.paginate(**params):
                rows: List[Dict[str, Any]] = []
                for obj in page.get("Contents", []) or []:
                    row: Dict[str, Any] = {
                        "name": obj["Key"],
                        "size": obj.get("Size", 0),
                        "hash": str(obj.get("ETag", "")).strip('"'),
                    }
                    if obj.get("LastModified") is not None:
                        row["time"] = int(obj["LastModified"].timestamp())
                    if obj.get("StorageClass"):
                        row["StorageClass"] = obj["StorageClass"]
                    rows.append(row)
                for common in page.get("CommonPrefixes", []) or []:
                    rows.append({"prefix": common["Prefix"]})
                rows.sort(key=lambda r: r.get("name") or r.get("prefix"))
                yield from rows
        except (ClientError, BotoCoreError) as e:
            raise translate_error(e, bucket, prefix) from e

    def head_object(self, bucket: str, key: str) -> HeadResponse:
        try:
            response = self._client.head_object(Bucket=bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise translate_error(e, bucket, key) from e

        metadata = response.get("ResponseMetadata") or {}
        return HeadResponse(
            status_code=int(metadata.get("HTTPStatusCode", 200)),
            headers={name.lower(): value for name, value in (metadata.get("HTTPHeaders") or {}).items()},
        )

    def copy_object(
        self,
        bucket: str,
        source_key: str,
        dest_key: str,
        acl: str = ACL_PRIVATE,
        options: Optional[Mapping[str, Any]] = None,
    ) -> None:
        extra: Dict[str, Any] = dict(options or {})
        extra["ACL"] = acl
        try:
            self._client.copy_object(
                Bucket=bucket,
                Key=dest_key,
                CopySource={"Bucket": bucket, "Key": source_key},
                **extra,
            )
        except (ClientError, BotoCoreError) as e:
            raise translate_error(e, bucket, source_key) from e

    def get_object_acl(self, bucket: str, key: str) -> List[Dict[str, Any]]:
        try:
            response = self._client.get_object_acl(Bucket=bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise translate_error(e, bucket, key) from e
        return list(response.get("Grants", []) or [])

    def put_object_acl(self, bucket: str, key: str, acl: str) -> None:
        try:
            self._client.put_object_acl(Bucket=bucket, Key=key, ACL=acl)
        except (ClientError, BotoCoreError) as e:
            raise translate_error(e, bucket, key) from e
