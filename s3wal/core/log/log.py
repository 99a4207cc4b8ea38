"""
Write-ahead log stored as one object per record.

Records live under ``<prefix>/<20-digit offset>`` in an object store. The
log keeps only one piece of state in memory, the cached length, which is
advisory: the store is authoritative and recover() resynchronizes the cache.
"""

import threading
from typing import Iterator, List, Optional, Tuple

from s3wal.core.log.errors import (
    EmptyLogError,
    PartialDeleteError,
    RecordNotFoundError,
    StoreDeleteError,
    StoreListError,
    StoreReadError,
    StoreWriteError,
)
from s3wal.core.log.format import Record, deserialize_record, serialize_record
from s3wal.core.log.keys import (
    SEPARATOR,
    encode_key,
    list_prefix,
    normalize_prefix,
    try_decode_key,
)
from s3wal.storage.base import ObjectNotFound, ObjectStore, ObjectStoreError
from s3wal.utils.logging import get_logger

logger = get_logger(__name__)


class WriteAheadLog:
    """
    Append-only log over an object store.

    Offsets start at 1 and are assigned as ``cached_length + 1``. A single
    lock guards the cached length and is held across the store call in
    append(), last_record() and recover(), so those operations are
    serialized within one instance. Holding a lock across network I/O trades
    throughput for a simple single-writer discipline.

    Only one writer per prefix is supported. append() issues a plain
    overwriting put: two processes appending to the same prefix will compute
    the same offset and the later write silently replaces the earlier one.
    Callers must enforce a single writer themselves.

    Attributes:
        store: Object store holding the records
        prefix: Normalized key namespace
        delete_batch_size: Maximum keys per batch delete during truncate
    """

    def __init__(
        self,
        store: ObjectStore,
        prefix: str,
        delete_batch_size: Optional[int] = None,
    ):
        """
        Initialize a log. Does not touch the store; call recover() before
        trusting length when the prefix may already hold records.

        Args:
            store: Object store holding the records
            prefix: Key namespace; leading and trailing "/" are stripped
            delete_batch_size: Keys per batch delete (default: store limit)

        Raises:
            ValueError: If prefix is empty or delete_batch_size is not positive
        """
        self.store = store
        self.prefix = normalize_prefix(prefix)
        if not self.prefix:
            raise ValueError("prefix must contain at least one non-separator character")

        batch_size = store.max_delete_batch if delete_batch_size is None else delete_batch_size
        if batch_size <= 0:
            raise ValueError(f"delete_batch_size must be positive, got {batch_size}")
        self.delete_batch_size = min(batch_size, store.max_delete_batch)

        self._lock = threading.Lock()
        self._length = 0

        logger.info(
            "Initialized write-ahead log",
            prefix=self.prefix,
            delete_batch_size=self.delete_batch_size,
        )

    @property
    def length(self) -> int:
        """Cached highest known offset (0 when empty or not yet recovered)."""
        with self._lock:
            return self._length

    def key_for(self, offset: int) -> str:
        """Object key a record at offset is stored under."""
        return encode_key(self.prefix, offset)

    def append(self, data: bytes) -> int:
        """
        Append a record.

        On failure the cached length is unchanged, so a retried append reuses
        the same offset. A failed or cancelled append may still have reached
        the store; run recover() to learn the true state.

        Args:
            data: Record payload

        Returns:
            The offset assigned to the record

        Raises:
            StoreWriteError: If the object could not be written
        """
        data = bytes(data)

        with self._lock:
            offset = self._length + 1
            key = self.key_for(offset)
            body = serialize_record(offset, data)

            try:
                self.store.put(key, body)
            except ObjectStoreError as e:
                logger.error("Append failed", offset=offset, key=key, error=str(e))
                raise StoreWriteError(e, key=key, offset=offset) from e

            self._length = offset

        logger.debug("Appended record", offset=offset, key=key, size=len(data))
        return offset

    def read(self, offset: int) -> Record:
        """
        Read and validate the record at offset.

        Args:
            offset: Offset to read (offsets start at 1)

        Returns:
            The record

        Raises:
            RecordNotFoundError: If no object exists at offset
            TruncatedRecordError: If the object is too short to be a record
            OffsetMismatchError: If the object holds a different offset
            ChecksumMismatchError: If the object fails checksum validation
            StoreReadError: If the store request failed
        """
        key = self.key_for(offset)
        if offset == 0:
            raise RecordNotFoundError(offset, key=key)

        try:
            body = self.store.get(key)
        except ObjectNotFound:
            raise RecordNotFoundError(offset, key=key) from None
        except ObjectStoreError as e:
            logger.error("Read failed", offset=offset, key=key, error=str(e))
            raise StoreReadError(e, key=key, offset=offset) from e

        record = deserialize_record(body, expected_offset=offset, key=key)
        logger.debug("Read record", offset=offset, key=key, size=len(record.data))
        return record

    def last_record(self) -> Record:
        """
        Return the record with the highest offset in the store.

        Lists the whole prefix, so the cost grows with the number of records.
        Updates the cached length to the offset found.

        Raises:
            EmptyLogError: If the prefix holds no records
            StoreListError: If listing failed
            IntegrityError: If the last record fails validation
        """
        with self._lock:
            last_offset = self._max_offset()
            self._length = last_offset

            if last_offset == 0:
                raise EmptyLogError(self.prefix)

            return self.read(last_offset)

    def recover(self) -> int:
        """
        Resynchronize the cached length with the store.

        Call this at startup and after any failure that leaves the store's
        state uncertain (a failed append, a partial truncate).

        Returns:
            The highest offset present, or 0 if the log is empty

        Raises:
            StoreListError: If listing failed
        """
        with self._lock:
            previous = self._length
            self._length = self._max_offset()
            recovered = self._length

        logger.info(
            "Recovered write-ahead log",
            prefix=self.prefix,
            last_offset=recovered,
            previous_length=previous,
        )
        return recovered

    def truncate(self, after_offset: int) -> None:
        """
        Delete every record with an offset greater than after_offset.

        ``truncate(0)`` clears the log. Keys that do not decode as offsets are
        left alone.

        Args:
            after_offset: Last offset to keep

        Raises:
            ValueError: If after_offset is negative
            StoreListError: If listing failed
            StoreDeleteError: If a batch delete request failed
            PartialDeleteError: If some keys could not be deleted; the cached
                length is left stale and recover() must be called
        """
        if after_offset < 0:
            raise ValueError(f"Offset must be non-negative, got {after_offset}")

        to_delete = [key for key, offset in self._scan() if offset > after_offset]

        failures: List[Tuple[str, str]] = []
        for start in range(0, len(to_delete), self.delete_batch_size):
            batch = to_delete[start:start + self.delete_batch_size]
            try:
                batch_failures = self.store.delete_batch(batch)
            except ObjectStoreError as e:
                logger.error(
                    "Batch delete failed",
                    after_offset=after_offset,
                    first_key=batch[0],
                    last_key=batch[-1],
                    error=str(e),
                )
                raise StoreDeleteError(e, key=batch[0]) from e

            failures.extend((f.key, f.reason) for f in batch_failures)

        if failures:
            logger.warning(
                "Truncate left objects undeleted",
                after_offset=after_offset,
                failed=len(failures),
                requested=len(to_delete),
            )
            raise PartialDeleteError(after_offset, failures)

        with self._lock:
            self._length = after_offset

        logger.info(
            "Truncated write-ahead log",
            prefix=self.prefix,
            after_offset=after_offset,
            deleted=len(to_delete),
        )

    def _scan(self) -> Iterator[Tuple[str, int]]:
        """
        Yield (key, offset) for every record key under the prefix.

        Lists the whole prefix. Keys nested below the prefix or whose last
        segment is not an offset are skipped.
        """
        listing_prefix = list_prefix(self.prefix)
        try:
            for key in self.store.list_keys(listing_prefix):
                name = key[len(listing_prefix):]
                offset = None if SEPARATOR in name else try_decode_key(key)
                if offset is None:
                    logger.warning("Skipping unrecognized key", key=key)
                    continue
                yield key, offset
        except ObjectStoreError as e:
            logger.error("Listing failed", prefix=listing_prefix, error=str(e))
            raise StoreListError(e, key=listing_prefix) from e

    def _max_offset(self) -> int:
        return max((offset for _, offset in self._scan()), default=0)

    def __repr__(self) -> str:
        return f"WriteAheadLog(prefix={self.prefix!r}, length={self._length})"
