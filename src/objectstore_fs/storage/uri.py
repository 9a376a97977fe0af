"""
S3 location URI parsing.

Lets command line users address a bucket and root prefix in one argument,
e.g. ``s3://my-bucket/team/data/``.
"""
from __future__ import annotations

from dataclasses import dataclass
import re

__all__ = ["ParsedLocation", "parse_s3_uri"]

_URI_PATTERN = re.compile(r"^s3://([^/]*)(?:/(.*))?$")


@dataclass(frozen=True)
class ParsedLocation:
    """
    Parsed components of an S3 location URI.

    Attributes:
        bucket: Bucket name
        prefix: Root prefix inside the bucket ("" for the bucket root)
        original: Original URI string for error messages
    """
    bucket: str
    prefix: str
    original: str


def parse_s3_uri(uri: str) -> ParsedLocation:
    """
    Parse an ``s3://bucket[/prefix]`` location.

    Unlike object URIs the prefix part is optional, since a location may
    address the bucket root. A non-empty prefix is returned exactly as
    written; no trailing separator is added.

    Args:
        uri: Location URI to parse

    Returns:
        ParsedLocation with validated components

    Raises:
        ValueError: If the URI is malformed or contains unsafe patterns

    Examples:
        >>> parse_s3_uri("s3://my-bucket/data/")
        ParsedLocation(bucket='my-bucket', prefix='data/', original='s3://my-bucket/data/')
    """
    if not uri:
        raise ValueError("URI cannot be empty")

    if ".." in uri:
        raise ValueError(f"URI contains path traversal: {uri}")

    if "\\" in uri:
        raise ValueError(f"URI contains backslashes (use forward slashes): {uri}")

    match = _URI_PATTERN.match(uri)
    if not match:
        raise ValueError(f"Invalid URI format, expected s3://bucket[/prefix]: {uri}")

    bucket, prefix = match.groups()
    if not bucket:
        raise ValueError(f"Bucket name cannot be empty: {uri}")

    prefix = prefix or ""
    if prefix.startswith("/"):
        raise ValueError(f"URI path cannot start with '/': {uri}")

    return ParsedLocation(bucket=bucket, prefix=prefix, original=uri)
