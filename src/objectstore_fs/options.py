"""
Write and copy option resolution.

Merges adapter defaults with per-call configuration into the request
options sent with an upload, deriving ContentType and ContentLength when
the caller did not supply them, and selects the defaults a server-side
copy carries over.
"""
from __future__ import annotations

import io
import logging
import mimetypes
import os
from typing import Any, Dict, Mapping, Optional, Union

from .storage.base import ACL_PRIVATE, ACL_PUBLIC_READ, Body

__all__ = [
    "COPY_ONLY_OPTIONS",
    "META_OPTIONS",
    "content_size",
    "guess_mimetype",
    "resolve_copy_options",
    "resolve_write_options",
    "stream_size",
    "validate_default_options",
]

logger = logging.getLogger(__name__)

# Request parameters callers may set on an upload or copy
META_OPTIONS = (
    "ACL",
    "CacheControl",
    "ContentDisposition",
    "ContentEncoding",
    "ContentLength",
    "ContentType",
    "Expires",
    "GrantFullControl",
    "GrantRead",
    "GrantReadACP",
    "GrantWriteACP",
    "Metadata",
    "MetadataDirective",
    "RequestPayer",
    "SSECustomerAlgorithm",
    "SSECustomerKey",
    "SSECustomerKeyMD5",
    "SSEKMSKeyId",
    "ServerSideEncryption",
    "StorageClass",
    "Tagging",
    "WebsiteRedirectLocation",
)

DEFAULT_MIMETYPE = "text/plain"

# Leading-byte signatures checked before falling back to the filename
_SIGNATURES = (
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"%PDF-", "application/pdf"),
    (b"PK\x03\x04", "application/zip"),
    (b"\x1f\x8b", "application/gzip"),
    (b"BZh", "application/x-bzip2"),
    (b"\x28\xb5\x2f\xfd", "application/zstd"),
    (b"OggS", "audio/ogg"),
    (b"ID3", "audio/mpeg"),
    (b"<?xml", "text/xml"),
)

# Sniffed types too generic to beat an extension-based guess
_WEAK_MIMETYPES = {"text/plain", "application/x-empty"}

# Options only valid on a copy request
COPY_ONLY_OPTIONS = ("MetadataDirective",)

# Options a copy sends only when told to replace the source's metadata
_REPLACE_ONLY_OPTIONS = (
    "CacheControl",
    "ContentDisposition",
    "ContentEncoding",
    "ContentType",
    "Expires",
    "Metadata",
)

# Options never sent with a copy (the ACL follows the source visibility)
_NOT_COPIED_OPTIONS = ("ACL", "ContentLength")


def validate_default_options(options: Mapping[str, Any]) -> None:
    """
    Reject default option keys the adapter would not send.

    Raises:
        ValueError: If options is not a mapping or holds unknown keys
    """
    if not isinstance(options, Mapping):
        raise ValueError(f"default options must be a mapping, got {type(options).__name__}")
    unknown = sorted(set(options) - set(META_OPTIONS))
    if unknown:
        raise ValueError(
            f"Unknown default option(s): {', '.join(unknown)}. "
            f"Recognized options: {', '.join(META_OPTIONS)}"
        )


def _string_metadata(metadata: Any) -> Dict[str, str]:
    """
    User metadata with every name and value as a string.

    Raises:
        ValueError: If metadata is not a mapping
    """
    if not isinstance(metadata, Mapping):
        raise ValueError(f"Metadata must be a mapping, got {type(metadata).__name__}")
    return {str(name): str(value) for name, value in metadata.items()}


def _sniff_content(content: bytes) -> Optional[str]:
    if not content:
        return "application/x-empty"
    for signature, mimetype in _SIGNATURES:
        if content.startswith(signature):
            return mimetype
    head = content[:512].lstrip().lower()
    if head.startswith(b"<!doctype html") or head.startswith(b"<html"):
        return "text/html"
    sample = content[:1024]
    try:
        sample.decode("utf-8")
    except UnicodeDecodeError as e:
        # A multi-byte character cut by the sample boundary is still text
        if e.start < len(sample) - 3 or len(sample) == len(content):
            return "application/octet-stream"
    return "text/plain"


def guess_mimetype(path: str, content: Union[bytes, str, Any, None] = None) -> str:
    """
    Guess the mimetype of a payload.

    Content signatures win unless they only say "some text"; then the
    filename extension decides, defaulting to text/plain. Streams are never
    read, so only the filename is consulted for them.

    >>> guess_mimetype("logo.bin", b"\\x89PNG\\r\\n\\x1a\\n....")
    'image/png'
    >>> guess_mimetype("index.html", "<p>hi</p>")
    'text/html'
    """
    if isinstance(content, str):
        content = content.encode("utf-8")
    if isinstance(content, bytes):
        sniffed = _sniff_content(content)
        if sniffed and sniffed not in _WEAK_MIMETYPES:
            return sniffed

    by_name, _ = mimetypes.guess_type(path, strict=False)
    return by_name or DEFAULT_MIMETYPE


def content_size(content: Union[bytes, str]) -> int:
    """Byte length of an in-memory payload (str is measured as UTF-8)."""
    if isinstance(content, str):
        return len(content.encode("utf-8"))
    return len(content)


def stream_size(stream: Any) -> Optional[int]:
    """
    Bytes remaining in a stream, or None when that cannot be known.

    Real files are measured with fstat; other seekable streams by seeking
    to the end and back. Pipes, sockets and generators give None.
    """
    try:
        size = os.fstat(stream.fileno()).st_size
    except (AttributeError, OSError, io.UnsupportedOperation, ValueError):
        size = None

    try:
        position = stream.tell()
    except (AttributeError, OSError, io.UnsupportedOperation, ValueError):
        return size

    if size is not None:
        return max(size - position, 0)

    try:
        if not stream.seekable():
            return None
        end = stream.seek(0, io.SEEK_END)
        stream.seek(position)
    except (AttributeError, OSError, io.UnsupportedOperation, ValueError):
        return None
    return end - position


def resolve_write_options(
    defaults: Mapping[str, Any],
    config: Optional[Mapping[str, Any]],
    path: str,
    body: Union[bytes, str, Body],
) -> Dict[str, Any]:
    """
    Build the options for one upload.

    Precedence: per-call ``config`` over adapter ``defaults``. The
    filesystem-level keys ``visibility`` and ``mimetype`` are kept for local
    reference and translated into ``ACL`` and ``ContentType``. Unknown
    per-call keys are ignored.

    ContentType is guessed when absent. ContentLength is measured when
    absent and removed entirely when it cannot be determined. Metadata
    values are stored as strings, so ``{"version": 2}`` is sent as
    ``{"version": "2"}``.

    Args:
        defaults: Adapter-level default options
        config: Per-call configuration (may be None)
        path: Logical path being written (used for mimetype guessing)
        body: Payload bytes/str or a readable stream

    Returns:
        A new dict; neither input mapping is modified

    Raises:
        ValueError: If Metadata is not a mapping
    """
    options: Dict[str, Any] = dict(defaults)
    config = config or {}

    visibility = config.get("visibility")
    if visibility:
        visibility = str(getattr(visibility, "value", visibility))
        options["visibility"] = visibility
        options["ACL"] = ACL_PUBLIC_READ if visibility == "public" else ACL_PRIVATE

    mimetype = config.get("mimetype")
    if mimetype:
        options["mimetype"] = mimetype
        options["ContentType"] = mimetype

    for option in META_OPTIONS:
        if option in config:
            options[option] = config[option]

    if options.get("Metadata") is not None:
        options["Metadata"] = _string_metadata(options["Metadata"])

    if not options.get("ContentType"):
        options["ContentType"] = guess_mimetype(path, body)

    if options.get("ContentLength") is None:
        if isinstance(body, (bytes, str)):
            options["ContentLength"] = content_size(body)
        else:
            options["ContentLength"] = stream_size(body)

    if options["ContentLength"] is None:
        del options["ContentLength"]

    logger.debug(f"Resolved write options for {path}: {sorted(options)}")
    return options


def resolve_copy_options(defaults: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Build the options sent with a server-side copy.

    Adapter defaults such as StorageClass and server-side encryption carry
    over to the copy. Body-describing options (content type, caching,
    user metadata) are sent only with ``MetadataDirective="REPLACE"``;
    otherwise the copy keeps the source's. ACL and ContentLength are never
    sent.

    >>> resolve_copy_options({"StorageClass": "STANDARD_IA", "ContentType": "text/csv"})
    {'StorageClass': 'STANDARD_IA'}
    """
    replace = defaults.get("MetadataDirective") == "REPLACE"
    options: Dict[str, Any] = {}
    for name, value in defaults.items():
        if name in _NOT_COPIED_OPTIONS:
            continue
        if name in _REPLACE_ONLY_OPTIONS and not replace:
            continue
        options[name] = value

    if options.get("Metadata") is not None:
        options["Metadata"] = _string_metadata(options["Metadata"])
    return options
