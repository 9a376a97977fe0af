"""
CLI smoke tests with the in-memory object store.

Tests command wiring and output without a real S3 endpoint. Each test gets
a CLIContext whose adapter runs against InMemoryObjectStoreClient.
"""
from __future__ import annotations

import pytest
from typer.testing import CliRunner

from objectstore_fs.adapter import ObjectStoreAdapter
from objectstore_fs.cli import app
from objectstore_fs.cli_context import CLIContext
from objectstore_fs.models import Visibility
from objectstore_fs.settings import Settings
from objectstore_fs.storage.errors import TransportError


@pytest.fixture
def cli_adapter(client, monkeypatch):
    """Route every CLI command to an in-memory adapter rooted at root/."""
    settings = Settings(bucket="test-bucket", prefix="root/")
    adapter = ObjectStoreAdapter(client, settings.bucket, prefix=settings.prefix)
    seen = {}

    def fake_load(cls, config=None, location=None):
        seen["config"] = config
        seen["location"] = location
        return cls(settings=settings, _adapter=adapter)

    monkeypatch.setattr(CLIContext, "load", classmethod(fake_load))
    adapter.seen = seen
    return adapter


class TestCLISmokeTests:
    """Smoke tests for CLI commands."""

    def setup_method(self):
        """Set up test environment."""
        self.runner = CliRunner()

    def test_ls(self, cli_adapter):
        cli_adapter.write("a.txt", b"hello")
        cli_adapter.write("docs/b.txt", b"world")

        result = self.runner.invoke(app, ["ls"])

        assert result.exit_code == 0
        assert "a.txt" in result.output
        assert "docs/" in result.output

    def test_ls_recursive(self, cli_adapter):
        cli_adapter.write("docs/deep/b.txt", b"world")

        result = self.runner.invoke(app, ["ls", "docs", "--recursive"])

        assert result.exit_code == 0
        assert "docs/deep/b.txt" in result.output

    def test_ls_empty(self, cli_adapter):
        result = self.runner.invoke(app, ["ls"])
        assert result.exit_code == 0
        assert "No entries" in result.output

    def test_cat(self, cli_adapter):
        cli_adapter.write("a.txt", b"hello")

        result = self.runner.invoke(app, ["cat", "a.txt"])

        assert result.exit_code == 0
        assert result.output == "hello"

    def test_cat_missing_exits_1(self, cli_adapter):
        result = self.runner.invoke(app, ["cat", "missing.txt"])
        assert result.exit_code == 1

    def test_put_and_get(self, cli_adapter, tmp_path):
        source = tmp_path / "report.json"
        source.write_bytes(b'{"ok": true}')
        target = tmp_path / "out" / "copy.json"

        put = self.runner.invoke(app, ["put", str(source), "reports/r.json", "--public"])
        assert put.exit_code == 0
        assert "Wrote reports/r.json" in put.output
        assert cli_adapter.get_visibility("reports/r.json").visibility == Visibility.PUBLIC
        assert cli_adapter.get_mimetype("reports/r.json").mimetype == "application/json"

        get = self.runner.invoke(app, ["get", "reports/r.json", str(target)])
        assert get.exit_code == 0
        assert target.read_bytes() == b'{"ok": true}'

    def test_put_content_type(self, cli_adapter, tmp_path):
        source = tmp_path / "blob"
        source.write_bytes(b"data")

        result = self.runner.invoke(app, ["put", str(source), "blob", "--content-type", "application/x-thing"])

        assert result.exit_code == 0
        assert cli_adapter.get_mimetype("blob").mimetype == "application/x-thing"

    def test_put_missing_local_file(self, cli_adapter, tmp_path):
        result = self.runner.invoke(app, ["put", str(tmp_path / "absent"), "x"])
        assert result.exit_code == 1

    def test_rm(self, cli_adapter):
        cli_adapter.write("a.txt", b"x")

        assert self.runner.invoke(app, ["rm", "a.txt"]).exit_code == 0
        assert cli_adapter.has("a.txt") is False
        assert self.runner.invoke(app, ["rm", "a.txt"]).exit_code == 1

    def test_mkdir_and_rmdir(self, cli_adapter):
        mkdir = self.runner.invoke(app, ["mkdir", "photos"])
        assert mkdir.exit_code == 0
        assert "Created photos/" in mkdir.output

        cli_adapter.write("photos/a.png", b"x")
        rmdir = self.runner.invoke(app, ["rmdir", "photos"])
        assert rmdir.exit_code == 0
        assert cli_adapter.list_contents("", recursive=True) == []

    def test_rmdir_root_is_invalid(self, cli_adapter):
        result = self.runner.invoke(app, ["rmdir", "/"])
        assert result.exit_code == 2

    def test_mv_and_cp(self, cli_adapter):
        cli_adapter.write("a.txt", b"x")

        assert self.runner.invoke(app, ["cp", "a.txt", "b.txt"]).exit_code == 0
        assert self.runner.invoke(app, ["mv", "b.txt", "c.txt"]).exit_code == 0
        assert cli_adapter.has("a.txt") is True
        assert cli_adapter.has("b.txt") is False
        assert cli_adapter.read("c.txt").contents == b"x"

    def test_mv_missing_source(self, cli_adapter):
        assert self.runner.invoke(app, ["mv", "nope.txt", "c.txt"]).exit_code == 1

    def test_stat(self, cli_adapter):
        cli_adapter.write("a.txt", b"hello")

        result = self.runner.invoke(app, ["stat", "a.txt", "--verbose"])

        assert result.exit_code == 0
        assert "Path: a.txt" in result.output
        assert "5 bytes" in result.output
        assert "text/plain" in result.output

    def test_exists(self, cli_adapter):
        cli_adapter.write("a.txt", b"x")

        found = self.runner.invoke(app, ["exists", "a.txt"])
        missing = self.runner.invoke(app, ["exists", "a"])

        assert found.exit_code == 0
        assert "yes" in found.output
        assert missing.exit_code == 1
        assert "no" in missing.output

    def test_visibility(self, cli_adapter):
        cli_adapter.write("a.txt", b"x")

        shown = self.runner.invoke(app, ["visibility", "a.txt"])
        changed = self.runner.invoke(app, ["visibility", "a.txt", "--set", "public"])

        assert "a.txt: private" in shown.output
        assert changed.exit_code == 0
        assert "a.txt: public" in changed.output
        assert cli_adapter.get_visibility("a.txt").visibility == Visibility.PUBLIC

    def test_visibility_rejects_unknown_value(self, cli_adapter):
        cli_adapter.write("a.txt", b"x")
        result = self.runner.invoke(app, ["visibility", "a.txt", "--set", "world"])
        assert result.exit_code != 0

    def test_transport_error_exit_code(self, cli_adapter, client, monkeypatch):
        def broken(*args, **kwargs):
            raise TransportError("connection refused")

        monkeypatch.setattr(client, "list_objects", broken)
        result = self.runner.invoke(app, ["ls"])
        assert result.exit_code == 3

    def test_location_and_config_forwarded(self, cli_adapter, tmp_path):
        config = tmp_path / "settings.yaml"
        config.write_text("bucket: test-bucket\n")

        self.runner.invoke(app, ["ls", "--config", str(config), "--location", "s3://other/data/"])

        assert cli_adapter.seen["config"] == config
        assert cli_adapter.seen["location"] == "s3://other/data/"


class TestCLIContext:
    """Test settings resolution for CLI commands."""

    def test_load_from_env(self):
        context = CLIContext.load()
        assert context.settings.bucket == "test-bucket"

    def test_location_overrides_env(self):
        context = CLIContext.load(location="s3://other-bucket/data/")
        assert context.settings.bucket == "other-bucket"
        assert context.settings.prefix == "data/"

    def test_location_without_env_bucket(self, monkeypatch):
        monkeypatch.delenv("OBJECTSTORE_FS_BUCKET")
        context = CLIContext.load(location="s3://other-bucket")
        assert context.settings.bucket == "other-bucket"
        assert context.settings.prefix == ""

    def test_load_from_file(self, tmp_path):
        config = tmp_path / "settings.yaml"
        config.write_text("bucket: file-bucket\nprefix: base/\n")
        context = CLIContext.load(config=config)
        assert context.settings.bucket == "file-bucket"
        assert context.settings.prefix == "base/"

    def test_adapter_is_lazy_and_cached(self, monkeypatch):
        built = []

        def fake_adapter_from_settings(settings):
            built.append(settings)
            return object()

        monkeypatch.setattr("objectstore_fs.cli_context.adapter_from_settings", fake_adapter_from_settings)
        context = CLIContext.load()

        assert built == []
        assert context.adapter is context.adapter
        assert len(built) == 1
