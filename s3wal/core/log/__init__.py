"""
Core log implementation.

This package provides the object-backed write-ahead log with:
- Fixed-width offset keys that list in offset order
- Binary record format with offset and SHA-256 validation
- Length recovery from the object store
- Suffix truncation with batched deletes
"""

from s3wal.core.log.format import Record, deserialize_record, serialize_record
from s3wal.core.log.keys import decode_key, encode_key, try_decode_key
from s3wal.core.log.log import WriteAheadLog

__all__ = [
    "Record",
    "WriteAheadLog",
    "decode_key",
    "deserialize_record",
    "encode_key",
    "serialize_record",
    "try_decode_key",
]
