"""
Record format for objects stored in the log.

Wire format:
    Offset (8 bytes)    - Big-endian unsigned offset of the record
    Data (variable)     - Opaque payload
    Checksum (32 bytes) - SHA-256 of offset and data

The offset is embedded so that an object copied or renamed to the wrong key
is detected on read; the checksum catches partial writes and corruption.
"""

import hashlib
import struct
from dataclasses import dataclass
from typing import Optional

from s3wal.core.log.errors import (
    ChecksumMismatchError,
    OffsetMismatchError,
    TruncatedRecordError,
)

OFFSET_SIZE = 8
CHECKSUM_SIZE = hashlib.sha256().digest_size
FRAME_OVERHEAD = OFFSET_SIZE + CHECKSUM_SIZE

_OFFSET_STRUCT = struct.Struct(">Q")


@dataclass(frozen=True)
class Record:
    """
    A single record in the log.

    Attributes:
        offset: 1-based logical position in the log
        data: Record payload
    """

    offset: int
    data: bytes

    def __post_init__(self) -> None:
        """Validate record fields."""
        if self.offset < 0:
            raise ValueError(f"Offset must be non-negative, got {self.offset}")
        if not isinstance(self.data, bytes):
            raise TypeError(f"Data must be bytes, got {type(self.data)}")


def serialize_record(offset: int, data: bytes) -> bytes:
    """
    Frame a record for storage.

    Args:
        offset: Offset the record is written at
        data: Record payload

    Returns:
        Framed object body
    """
    header = _OFFSET_STRUCT.pack(offset)
    hasher = hashlib.sha256()
    hasher.update(header)
    hasher.update(data)
    return header + data + hasher.digest()


def deserialize_record(
    body: bytes,
    expected_offset: int,
    key: Optional[str] = None,
) -> Record:
    """
    Validate a framed object body and unpack it.

    Args:
        body: Raw object contents
        expected_offset: Offset implied by the key the body was fetched from
        key: Object key, used in error messages

    Returns:
        The validated record

    Raises:
        TruncatedRecordError: If body is shorter than the frame overhead
        OffsetMismatchError: If the embedded offset differs from expected
        ChecksumMismatchError: If the trailing checksum does not match
    """
    if len(body) < FRAME_OVERHEAD:
        raise TruncatedRecordError(len(body), key=key, offset=expected_offset)

    (stored_offset,) = _OFFSET_STRUCT.unpack_from(body, 0)
    if stored_offset != expected_offset:
        raise OffsetMismatchError(expected_offset, stored_offset, key=key)

    content = body[:-CHECKSUM_SIZE]
    if hashlib.sha256(content).digest() != body[-CHECKSUM_SIZE:]:
        raise ChecksumMismatchError(expected_offset, key=key)

    return Record(offset=stored_offset, data=bytes(content[OFFSET_SIZE:]))
