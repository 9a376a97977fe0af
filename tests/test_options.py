"""
Tests for write option resolution and mimetype detection.
"""
from __future__ import annotations

import io
from types import MappingProxyType

import pytest

from objectstore_fs.options import (
    guess_mimetype, resolve_copy_options, resolve_write_options, stream_size, validate_default_options
)


class TestValidateDefaultOptions:
    """Test default option validation."""

    def test_known_options_accepted(self):
        validate_default_options({"CacheControl": "max-age=60", "StorageClass": "STANDARD_IA"})

    def test_unknown_option_rejected(self):
        """Unknown keys are reported by name."""
        with pytest.raises(ValueError, match="Colour"):
            validate_default_options({"Colour": "blue"})

    def test_non_mapping_rejected(self):
        with pytest.raises(ValueError, match="mapping"):
            validate_default_options(["ACL"])


class TestGuessMimetype:
    """Test content and filename based mimetype guessing."""

    def test_signature_beats_extension(self):
        """A PNG signature wins over a misleading extension."""
        assert guess_mimetype("picture.txt", b"\x89PNG\r\n\x1a\n" + b"\x00" * 16) == "image/png"

    def test_plain_text_defers_to_extension(self):
        """Generic text content lets the extension decide."""
        assert guess_mimetype("style.css", "body { color: red; }") == "text/css"

    def test_html_content(self):
        assert guess_mimetype("page", b"<!DOCTYPE html><html></html>") == "text/html"

    def test_binary_content(self):
        assert guess_mimetype("blob", b"\x00\x01\x02\xff\xfe") == "application/octet-stream"

    def test_unknown_defaults_to_text_plain(self):
        """No signature and no known extension falls back to text/plain."""
        assert guess_mimetype("notes", "just words") == "text/plain"

    def test_stream_uses_filename_only(self):
        """Streams are not read for sniffing."""
        stream = io.BytesIO(b"%PDF-1.7")
        assert guess_mimetype("doc.json", stream) == "application/json"
        assert stream.tell() == 0


class TestStreamSize:
    """Test stream length measurement."""

    def test_seekable_stream_measured_from_position(self):
        stream = io.BytesIO(b"0123456789")
        stream.seek(4)
        assert stream_size(stream) == 6
        assert stream.tell() == 4

    def test_real_file_measured(self, tmp_path):
        path = tmp_path / "data.bin"
        path.write_bytes(b"x" * 42)
        with open(path, "rb") as f:
            assert stream_size(f) == 42

    def test_unsized_stream(self):
        """Objects that cannot report position give None."""

        class Pipe:
            def read(self, n=-1):
                return b""

        assert stream_size(Pipe()) is None


class TestResolveWriteOptions:
    """Test merging defaults and per-call configuration."""

    def test_inputs_not_mutated(self):
        """Neither defaults nor config are modified."""
        defaults = MappingProxyType({"CacheControl": "max-age=60"})
        config = {"visibility": "public"}
        options = resolve_write_options(defaults, config, "a.txt", b"hi")

        assert dict(defaults) == {"CacheControl": "max-age=60"}
        assert config == {"visibility": "public"}
        assert options["CacheControl"] == "max-age=60"

    def test_visibility_translated_to_acl(self):
        """visibility is kept and mapped to a canned ACL."""
        public = resolve_write_options({}, {"visibility": "public"}, "a.txt", b"hi")
        private = resolve_write_options({}, {"visibility": "private"}, "a.txt", b"hi")

        assert public["visibility"] == "public"
        assert public["ACL"] == "public-read"
        assert private["ACL"] == "private"

    def test_mimetype_sets_content_type(self):
        options = resolve_write_options({}, {"mimetype": "application/x-custom"}, "a.txt", b"hi")
        assert options["mimetype"] == "application/x-custom"
        assert options["ContentType"] == "application/x-custom"

    def test_config_overrides_defaults(self):
        """Per-call meta options win over adapter defaults."""
        options = resolve_write_options(
            {"CacheControl": "max-age=60"}, {"CacheControl": "no-cache"}, "a.txt", b"hi"
        )
        assert options["CacheControl"] == "no-cache"

    def test_unknown_config_keys_ignored(self):
        options = resolve_write_options({}, {"Colour": "blue"}, "a.txt", b"hi")
        assert "Colour" not in options

    def test_content_type_and_length_derived(self):
        """ContentType is guessed and ContentLength measured when absent."""
        options = resolve_write_options({}, None, "data.json", '{"k": "v"}')
        assert options["ContentType"] == "application/json"
        assert options["ContentLength"] == 10

    def test_str_length_measured_as_utf8(self):
        options = resolve_write_options({}, None, "a.txt", "héllo")
        assert options["ContentLength"] == 6

    def test_unknown_stream_length_removed(self):
        """ContentLength is dropped when the stream size cannot be known."""

        class Pipe:
            def read(self, n=-1):
                return b""

        options = resolve_write_options({}, None, "a.txt", Pipe())
        assert "ContentLength" not in options

    def test_explicit_content_length_kept(self):
        options = resolve_write_options({}, {"ContentLength": 99}, "a.txt", b"hi")
        assert options["ContentLength"] == 99

    def test_metadata_values_stored_as_strings(self):
        """Non-string metadata values are converted before the upload."""
        options = resolve_write_options(
            {"Metadata": {"team": "data"}}, {"Metadata": {"version": 2, "draft": False}}, "a.txt", b"hi"
        )
        assert options["Metadata"] == {"version": "2", "draft": "False"}

    def test_non_mapping_metadata_rejected(self):
        with pytest.raises(ValueError, match="Metadata"):
            resolve_write_options({}, {"Metadata": ["version", 2]}, "a.txt", b"hi")


class TestResolveCopyOptions:
    """Test which defaults a server-side copy carries."""

    def test_storage_and_encryption_carried(self):
        options = resolve_copy_options(
            {"StorageClass": "STANDARD_IA", "ServerSideEncryption": "aws:kms", "SSEKMSKeyId": "key-1"}
        )
        assert options == {
            "StorageClass": "STANDARD_IA",
            "ServerSideEncryption": "aws:kms",
            "SSEKMSKeyId": "key-1",
        }

    def test_body_options_need_replace_directive(self):
        """Content type and metadata keep the source's unless replaced."""
        defaults = {"ContentType": "text/csv", "CacheControl": "no-cache", "Metadata": {"team": "data"}}

        assert resolve_copy_options(defaults) == {}

        replaced = resolve_copy_options({**defaults, "MetadataDirective": "REPLACE"})
        assert replaced["ContentType"] == "text/csv"
        assert replaced["CacheControl"] == "no-cache"
        assert replaced["Metadata"] == {"team": "data"}
        assert replaced["MetadataDirective"] == "REPLACE"

    def test_acl_and_length_never_sent(self):
        assert resolve_copy_options({"ACL": "public-read", "ContentLength": 5}) == {}
