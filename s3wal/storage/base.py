"""
Object store interface consumed by the write-ahead log.

Adapters bind a bucket at construction and translate their client's
exceptions into ObjectNotFound (absent key) and ObjectStoreError (anything
else). They never retry on the log's behalf.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Sequence


class ObjectStoreError(Exception):
    """Raised when an object store request fails."""
    pass


class ObjectNotFound(ObjectStoreError):
    """Raised by get() when the key does not exist."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"object not found: {key}")


@dataclass(frozen=True)
class DeleteFailure:
    """A per-key error reported by a batch delete."""

    key: str
    reason: str


class ObjectStore(ABC):
    """Blob storage with prefix listing and batched deletes."""

    max_delete_batch: int = 1000

    @abstractmethod
    def put(self, key: str, body: bytes) -> None:
        """Create or overwrite the object at key."""

    @abstractmethod
    def get(self, key: str) -> bytes:
        """
        Fetch the object at key.

        Raises:
            ObjectNotFound: If the key does not exist
            ObjectStoreError: On any other failure
        """

    @abstractmethod
    def list_pages(self, prefix: str) -> Iterator[List[str]]:
        """
        Lazily list keys starting with prefix.

        Yields pages of keys in lexicographic order. A failure while fetching
        a page raises ObjectStoreError from the iterator.
        """

    @abstractmethod
    def delete_batch(self, keys: Sequence[str]) -> List[DeleteFailure]:
        """
        Delete up to max_delete_batch keys in one request.

        Returns:
            Per-key failures reported by an otherwise successful request

        Raises:
            ValueError: If more than max_delete_batch keys are given; no
                request is issued
            ObjectStoreError: If the request itself fails
        """

    def list_keys(self, prefix: str) -> Iterable[str]:
        """Iterate every key under prefix, draining all pages."""
        for page in self.list_pages(prefix):
            yield from page
