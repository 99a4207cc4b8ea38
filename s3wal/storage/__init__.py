"""Object store adapters for the write-ahead log."""

from s3wal.storage.base import DeleteFailure, ObjectNotFound, ObjectStore, ObjectStoreError
from s3wal.storage.memory import InMemoryObjectStore

__all__ = [
    "DeleteFailure",
    "InMemoryObjectStore",
    "ObjectNotFound",
    "ObjectStore",
    "ObjectStoreError",
]
