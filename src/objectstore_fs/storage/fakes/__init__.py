# Fake implementations for testing

from .memory import InMemoryObjectStoreClient

__all__ = ["InMemoryObjectStoreClient"]
