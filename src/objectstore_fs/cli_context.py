"""
CLI Context for managing application dependencies.

Holds the settings and the adapter of one CLI invocation, avoiding global
state and keeping commands easy to test.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .adapter import ObjectStoreAdapter, adapter_from_settings
from .settings import Settings, create_settings_from_env, create_settings_from_file
from .storage.uri import parse_s3_uri


@dataclass
class CLIContext:
    """
    Shared context for CLI commands.

    Settings are resolved once per command; the adapter (and with it the
    boto3 client) is only built when a command first needs it.
    """
    settings: Settings
    _adapter: Optional[ObjectStoreAdapter] = None

    @classmethod
    def from_env(cls, bucket: Optional[str] = None) -> CLIContext:
        """
        Create CLI context from environment variables.

        Args:
            bucket: Bucket overriding OBJECTSTORE_FS_BUCKET

        Returns:
            CLIContext with settings loaded from environment
        """
        return cls(settings=create_settings_from_env(bucket=bucket))

    @classmethod
    def from_file(cls, path: Path) -> CLIContext:
        """
        Create CLI context from a YAML settings file.

        Returns:
            CLIContext with settings loaded from the file
        """
        return cls(settings=create_settings_from_file(path))

    @classmethod
    def load(cls, config: Optional[Path] = None, location: Optional[str] = None) -> CLIContext:
        """
        Resolve the context for one command invocation.

        Args:
            config: YAML settings file; the environment is used when omitted
            location: ``s3://bucket[/prefix]`` overriding bucket and prefix

        Returns:
            CLIContext ready for use

        Raises:
            ValueError: If settings or the location URI are invalid
        """
        parsed = parse_s3_uri(location) if location else None
        if config is not None:
            context = cls.from_file(config)
        else:
            context = cls.from_env(bucket=parsed.bucket if parsed else None)
        if parsed is not None:
            context = cls(settings=context.settings.with_location(parsed.bucket, parsed.prefix))
        return context

    @property
    def adapter(self) -> ObjectStoreAdapter:
        """
        Get or create the adapter (lazy initialization).

        Returns:
            ObjectStoreAdapter configured from the settings
        """
        if self._adapter is None:
            self._adapter = adapter_from_settings(self.settings)
        return self._adapter
