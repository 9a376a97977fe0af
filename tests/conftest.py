"""Root pytest configuration for objectstore-fs tests."""
import pytest

from objectstore_fs.adapter import ObjectStoreAdapter
from objectstore_fs.settings import Settings
from objectstore_fs.storage.fakes import InMemoryObjectStoreClient

BUCKET = "test-bucket"
PREFIX = "root/"


# Keep real OBJECTSTORE_FS_* variables from leaking into tests
@pytest.fixture(autouse=True)
def test_env(monkeypatch):
    """Automatically set up test environment variables."""
    for name in (
        "OBJECTSTORE_FS_PREFIX",
        "OBJECTSTORE_FS_DEFAULT_OPTIONS",
        "OBJECTSTORE_FS_VERIFY_DELETES",
        "OBJECTSTORE_FS_ENDPOINT_URL",
        "OBJECTSTORE_FS_REGION",
        "OBJECTSTORE_FS_URL_STYLE",
        "OBJECTSTORE_FS_CONNECT_TIMEOUT",
        "OBJECTSTORE_FS_READ_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("OBJECTSTORE_FS_BUCKET", BUCKET)


# Standardized test fixtures
@pytest.fixture
def settings():
    """Standard test settings."""
    return Settings(bucket=BUCKET, prefix=PREFIX)


@pytest.fixture
def client():
    """In-memory object store client."""
    return InMemoryObjectStoreClient()


@pytest.fixture
def adapter(client):
    """Adapter rooted at root/ in the test bucket."""
    return ObjectStoreAdapter(client, BUCKET, prefix=PREFIX)


@pytest.fixture
def bare_adapter(client):
    """Adapter without a root prefix."""
    return ObjectStoreAdapter(client, BUCKET)
