"""Content-addressed storage tiers."""

from agentnft.storage.backend import StorageBackend
from agentnft.storage.local import LocalStore
from agentnft.storage.remote import IndexerStorage, RemoteStorage

__all__ = [
    "StorageBackend",
    "LocalStore",
    "RemoteStorage",
    "IndexerStorage",
]
