"""
Exception hierarchy for the write-ahead log.

Errors fall into four families so callers can tell a corrupted record from a
missing one from an unavailable store:

- IntegrityError: a fetched object failed framing validation
- RecordNotFoundError / EmptyLogError: nothing stored where expected
- StoreError: the object store call itself failed
- PartialDeleteError: a truncate left some objects behind
"""

from typing import List, Optional, Tuple


class WALError(Exception):
    """Base class for all write-ahead log errors."""
    pass


class MalformedKeyError(WALError):
    """Raised when an object key does not end in a decimal offset."""

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"malformed key {key!r}: {reason}")


class IntegrityError(WALError):
    """Base class for framing failures detected on read."""

    def __init__(self, message: str, key: Optional[str] = None, offset: Optional[int] = None):
        self.key = key
        self.offset = offset
        super().__init__(message)


class TruncatedRecordError(IntegrityError):
    """Raised when an object is shorter than the fixed frame overhead."""

    def __init__(self, size: int, key: Optional[str] = None, offset: Optional[int] = None):
        self.size = size
        super().__init__(
            f"record too short ({size} bytes) at offset {offset} (key {key})",
            key=key,
            offset=offset,
        )


class OffsetMismatchError(IntegrityError):
    """Raised when the embedded offset differs from the one implied by the key."""

    def __init__(self, expected: int, actual: int, key: Optional[str] = None):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"offset mismatch for key {key}: expected {expected}, got {actual}",
            key=key,
            offset=expected,
        )


class ChecksumMismatchError(IntegrityError):
    """Raised when the trailing SHA-256 does not match the record contents."""

    def __init__(self, offset: int, key: Optional[str] = None):
        super().__init__(
            f"checksum mismatch for offset {offset} (key {key})",
            key=key,
            offset=offset,
        )


class RecordNotFoundError(WALError):
    """Raised when no object exists for the requested offset."""

    def __init__(self, offset: int, key: Optional[str] = None):
        self.offset = offset
        self.key = key
        super().__init__(f"no record at offset {offset} (key {key})")


class EmptyLogError(WALError):
    """Raised by last_record() when the prefix holds no records."""

    def __init__(self, prefix: str):
        self.prefix = prefix
        super().__init__(f"WAL is empty (prefix {prefix!r})")


class StoreError(WALError):
    """Base class for object store transport failures."""

    operation = "store"

    def __init__(
        self,
        cause: BaseException,
        key: Optional[str] = None,
        offset: Optional[int] = None,
    ):
        self.cause = cause
        self.key = key
        self.offset = offset
        details = []
        if offset is not None:
            details.append(f"offset={offset}")
        if key is not None:
            details.append(f"key={key}")
        where = f" ({', '.join(details)})" if details else ""
        super().__init__(f"{self.operation} failed{where}: {cause}")


class StoreWriteError(StoreError):
    operation = "put object"


class StoreReadError(StoreError):
    operation = "get object"


class StoreListError(StoreError):
    operation = "list objects"


class StoreDeleteError(StoreError):
    operation = "delete objects"


class PartialDeleteError(WALError):
    """
    Raised when a truncate's batch deletes reported per-key failures.

    The cached length is left unchanged; call recover() before continuing.
    """

    def __init__(self, after_offset: int, failures: List[Tuple[str, str]]):
        self.after_offset = after_offset
        self.failures = failures
        parts = "; ".join(f"{key}: {reason}" for key, reason in failures)
        super().__init__(
            f"truncate after offset {after_offset} left {len(failures)} "
            f"object(s) undeleted: {parts}"
        )
