"""
Object store error classes.

Provides a small taxonomy of errors that object store clients raise.
SDK exceptions and HTTP status codes are mapped onto these classes so the
adapter can decide, per operation, which failures are expected (absent
objects) and which must reach the caller.
"""
from __future__ import annotations

from typing import Optional


class ObjectStoreError(Exception):
    """
    Base class for all object store errors.

    Carries the bucket and key the failing request addressed, when known.
    """

    def __init__(self, message: str, *, bucket: Optional[str] = None, key: Optional[str] = None):
        super().__init__(message)
        self.bucket = bucket
        self.key = key


class ObjectNotFound(ObjectStoreError):
    """
    Object absent from the store.

    Raised when:
    - HTTP 404 Not Found
    - S3 error codes NoSuchKey / NotFound

    This is an expected condition; the adapter converts it to a False or
    None result instead of propagating it.
    """
    pass


class TransportError(ObjectStoreError):
    """
    Network, authentication or protocol failure.

    Raised for every client failure that is not an absent object:
    connection errors, 403 Forbidden, throttling, malformed responses.
    """
    pass


class UnexpectedStatus(ObjectStoreError):
    """
    Response with a status that is neither success nor an explicit error.

    A head request answered with e.g. 304 carries no usable metadata and
    must not be treated as success.
    """

    def __init__(self, message: str, status_code: int, *, bucket: Optional[str] = None, key: Optional[str] = None):
        super().__init__(message, bucket=bucket, key=key)
        self.status_code = status_code


__all__ = [
    "ObjectStoreError",
    "ObjectNotFound",
    "TransportError",
    "UnexpectedStatus",
]
