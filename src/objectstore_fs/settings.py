"""
Settings and configuration for objectstore-fs.

Centralizes configuration values and provides validation with fail-fast behavior.
Loads settings from environment variables or a YAML file at adapter construction time.
"""
from __future__ import annotations

import json
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional

from .options import validate_default_options

__all__ = ["Settings", "create_settings_from_env", "create_settings_from_file"]

URL_STYLES = ("path", "virtual")

# S3 bucket naming rules (lowercase, digits, dots, hyphens; 3-63 chars)
_BUCKET_PATTERN = r"^[a-z0-9][a-z0-9.-]{1,61}[a-z0-9]$"


@dataclass(frozen=True)
class Settings:
    """
    Configuration settings for the object store filesystem adapter.

    Adapter Settings:
        bucket: Bucket holding the files (required)
        prefix: Root key prefix every logical path lives under
        default_options: Write options applied to every upload
        verify_deletes: Re-check existence after delete (diagnostic only)

    Client Settings (boto3):
        endpoint_url: Custom endpoint for S3-compatible stores (MinIO, Ceph)
        region: Region name passed to the client
        url_style: Addressing style, "path" or "virtual"
        connect_timeout_s: Connection timeout in seconds
        read_timeout_s: Read timeout in seconds
    """
    bucket: str
    prefix: str = ""
    default_options: Mapping[str, Any] = field(default_factory=dict)
    verify_deletes: bool = False

    endpoint_url: Optional[str] = None
    region: str = "us-east-1"
    url_style: str = "path"
    connect_timeout_s: float = 10.0
    read_timeout_s: float = 60.0

    def __post_init__(self):
        """Validate settings on construction."""
        if not self.bucket:
            raise ValueError("bucket is required")

        if not re.match(_BUCKET_PATTERN, self.bucket):
            raise ValueError(f"Invalid bucket name: {self.bucket}")

        if self.prefix is None:
            raise ValueError("prefix must be a string (use '' for the bucket root)")

        if self.url_style not in URL_STYLES:
            raise ValueError(f"url_style must be one of {', '.join(URL_STYLES)}, got {self.url_style}")

        if self.connect_timeout_s <= 0:
            raise ValueError(f"connect_timeout_s must be positive, got {self.connect_timeout_s}")

        if self.read_timeout_s <= 0:
            raise ValueError(f"read_timeout_s must be positive, got {self.read_timeout_s}")

        if self.endpoint_url is not None and not re.match(r"^https?://", self.endpoint_url):
            raise ValueError(f"endpoint_url must start with http:// or https://, got {self.endpoint_url}")

        validate_default_options(self.default_options)
        # Frozen copy so callers cannot mutate defaults behind the adapter's back
        object.__setattr__(self, "default_options", MappingProxyType(dict(self.default_options)))

    def with_location(self, bucket: str, prefix: str) -> Settings:
        """Return a copy addressing a different bucket and prefix."""
        return Settings(
            bucket=bucket,
            prefix=prefix,
            default_options=dict(self.default_options),
            verify_deletes=self.verify_deletes,
            endpoint_url=self.endpoint_url,
            region=self.region,
            url_style=self.url_style,
            connect_timeout_s=self.connect_timeout_s,
            read_timeout_s=self.read_timeout_s,
        )


def _str_to_bool(value: str) -> bool:
    return value.lower() in ("true", "1", "yes", "on")


def create_settings_from_env(bucket: Optional[str] = None) -> Settings:
    """
    Load settings from environment variables.

    Environment Variables:
        - OBJECTSTORE_FS_BUCKET (required)
        - OBJECTSTORE_FS_PREFIX (default: "")
        - OBJECTSTORE_FS_DEFAULT_OPTIONS (JSON object, default: {})
        - OBJECTSTORE_FS_VERIFY_DELETES (default: false)
        - OBJECTSTORE_FS_ENDPOINT_URL (optional, for MinIO/custom endpoints)
        - OBJECTSTORE_FS_REGION (default: us-east-1)
        - OBJECTSTORE_FS_URL_STYLE (default: path)
        - OBJECTSTORE_FS_CONNECT_TIMEOUT (default: 10.0)
        - OBJECTSTORE_FS_READ_TIMEOUT (default: 60.0)

    Args:
        bucket: Bucket overriding OBJECTSTORE_FS_BUCKET (used when a command
            names its location explicitly)

    Returns:
        Settings object with validated configuration

    Raises:
        ValueError: If configuration is invalid or required values missing

    Note:
        Creates a fresh Settings instance every time (no caching).
    """
    def get_float(key: str, default: float) -> float:
        value = os.getenv(key)
        return float(value) if value else default

    bucket = bucket or os.getenv("OBJECTSTORE_FS_BUCKET")
    if not bucket:
        raise ValueError("OBJECTSTORE_FS_BUCKET environment variable is required")

    raw_options = os.getenv("OBJECTSTORE_FS_DEFAULT_OPTIONS")
    default_options: Mapping[str, Any] = {}
    if raw_options:
        try:
            default_options = json.loads(raw_options)
        except json.JSONDecodeError as e:
            raise ValueError(f"OBJECTSTORE_FS_DEFAULT_OPTIONS is not valid JSON: {e}") from e
        if not isinstance(default_options, dict):
            raise ValueError("OBJECTSTORE_FS_DEFAULT_OPTIONS must be a JSON object")

    return Settings(
        bucket=bucket,
        prefix=os.getenv("OBJECTSTORE_FS_PREFIX", ""),
        default_options=default_options,
        verify_deletes=_str_to_bool(os.getenv("OBJECTSTORE_FS_VERIFY_DELETES", "false")),
        endpoint_url=os.getenv("OBJECTSTORE_FS_ENDPOINT_URL") or None,
        region=os.getenv("OBJECTSTORE_FS_REGION", "us-east-1"),
        url_style=os.getenv("OBJECTSTORE_FS_URL_STYLE", "path"),
        connect_timeout_s=get_float("OBJECTSTORE_FS_CONNECT_TIMEOUT", 10.0),
        read_timeout_s=get_float("OBJECTSTORE_FS_READ_TIMEOUT", 60.0),
    )


def create_settings_from_file(path: Path) -> Settings:
    """
    Load settings from a YAML file.

    The file holds a mapping whose keys are Settings field names::

        bucket: media-assets
        prefix: uploads/
        default_options:
          CacheControl: max-age=3600

    Args:
        path: YAML file to read

    Returns:
        Settings object with validated configuration

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not a mapping or holds unknown keys
    """
    import yaml

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Settings file not found: {path}")

    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Settings file must contain a mapping: {path}")

    known = set(Settings.__dataclass_fields__)
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown settings in {path}: {', '.join(unknown)}")

    return Settings(**data)
