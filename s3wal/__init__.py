"""
s3wal - A write-ahead log stored in S3-compatible object storage.

Each record is written as its own object under a key prefix, framed with its
offset and a SHA-256 checksum. The log supports:
- Appending records at contiguous 1-based offsets
- Validated reads by offset
- Recovering the log length by listing the store
- Truncating a suffix of the log
"""

__version__ = "0.1.0"

from s3wal.core.log import Record, WriteAheadLog
from s3wal.core.log.errors import (
    ChecksumMismatchError,
    EmptyLogError,
    IntegrityError,
    MalformedKeyError,
    OffsetMismatchError,
    PartialDeleteError,
    RecordNotFoundError,
    StoreDeleteError,
    StoreError,
    StoreListError,
    StoreReadError,
    StoreWriteError,
    TruncatedRecordError,
    WALError,
)

__all__ = [
    "Record",
    "WriteAheadLog",
    "WALError",
    "MalformedKeyError",
    "IntegrityError",
    "TruncatedRecordError",
    "OffsetMismatchError",
    "ChecksumMismatchError",
    "RecordNotFoundError",
    "EmptyLogError",
    "StoreError",
    "StoreWriteError",
    "StoreReadError",
    "StoreListError",
    "StoreDeleteError",
    "PartialDeleteError",
]
