"""In-memory object store for tests and local demos."""

import bisect
import threading
from typing import Dict, Iterator, List, Optional, Sequence, Set

from s3wal.storage.base import DeleteFailure, ObjectNotFound, ObjectStore, ObjectStoreError


class InMemoryObjectStore(ObjectStore):
    """
    Dict-backed object store with S3-like listing semantics.

    Keys are listed in lexicographic order in pages of ``page_size``. Faults
    can be injected per operation to exercise error paths:

    - ``fail_puts`` / ``fail_gets`` / ``fail_lists`` / ``fail_deletes``: when
      True, the next call of that kind raises ObjectStoreError
    - ``fail_list_after_pages``: raise after yielding that many pages
    - ``undeletable_keys``: keys reported as per-key delete failures
    """

    def __init__(self, page_size: int = 1000, max_delete_batch: int = 1000):
        if page_size <= 0:
            raise ValueError(f"page_size must be positive, got {page_size}")
        self.page_size = page_size
        self.max_delete_batch = max_delete_batch

        self._objects: Dict[str, bytes] = {}
        self._lock = threading.Lock()

        self.fail_puts = False
        self.fail_gets = False
        self.fail_lists = False
        self.fail_deletes = False
        self.fail_list_after_pages: Optional[int] = None
        self.undeletable_keys: Set[str] = set()

        self.put_calls = 0
        self.list_page_calls = 0
        self.delete_calls: List[List[str]] = []

    def put(self, key: str, body: bytes) -> None:
        with self._lock:
            self.put_calls += 1
            if self.fail_puts:
                raise ObjectStoreError(f"injected put failure for {key}")
            self._objects[key] = bytes(body)

    def get(self, key: str) -> bytes:
        with self._lock:
            if self.fail_gets:
                raise ObjectStoreError(f"injected get failure for {key}")
            try:
                return self._objects[key]
            except KeyError:
                raise ObjectNotFound(key) from None

    def list_pages(self, prefix: str) -> Iterator[List[str]]:
        if self.fail_lists:
            raise ObjectStoreError(f"injected list failure for {prefix}")

        start_after = ""
        pages = 0
        while True:
            if self.fail_list_after_pages is not None and pages >= self.fail_list_after_pages:
                raise ObjectStoreError(f"injected list failure after {pages} page(s)")

            with self._lock:
                self.list_page_calls += 1
                ordered = sorted(k for k in self._objects if k.startswith(prefix))
            start = bisect.bisect_right(ordered, start_after) if start_after else 0
            page = ordered[start:start + self.page_size]
            if not page:
                return

            pages += 1
            yield page
            if len(page) < self.page_size:
                return
            start_after = page[-1]

    def delete_batch(self, keys: Sequence[str]) -> List[DeleteFailure]:
        if len(keys) > self.max_delete_batch:
            raise ValueError(
                f"batch of {len(keys)} keys exceeds limit {self.max_delete_batch}"
            )
        with self._lock:
            self.delete_calls.append(list(keys))
            if self.fail_deletes:
                raise ObjectStoreError("injected delete failure")

            failures = []
            for key in keys:
                if key in self.undeletable_keys:
                    failures.append(DeleteFailure(key=key, reason="AccessDenied"))
                    continue
                self._objects.pop(key, None)
            return failures

    def raw_put(self, key: str, body: bytes) -> None:
        """Store bytes without fault injection or call accounting."""
        with self._lock:
            self._objects[key] = bytes(body)

    def keys(self) -> List[str]:
        with self._lock:
            return sorted(self._objects)

    def __len__(self) -> int:
        return len(self._objects)

    def __contains__(self, key: object) -> bool:
        return key in self._objects
