"""
Mapping between log offsets and object keys.

Keys have the form ``<prefix>/<offset>`` where the offset is zero padded to
20 decimal digits, enough for any unsigned 64-bit value. Fixed width keeps
lexicographic key order identical to numeric offset order, so a prefix
listing is already sorted by offset.
"""

from typing import Optional

from s3wal.core.log.errors import MalformedKeyError

OFFSET_PADDING = 20
MAX_OFFSET = 2**64 - 1
SEPARATOR = "/"


def normalize_prefix(prefix: str) -> str:
    """Strip leading and trailing separators from a prefix."""
    return prefix.strip(SEPARATOR)


def list_prefix(prefix: str) -> str:
    """Return the listing prefix for all records under ``prefix``."""
    return normalize_prefix(prefix) + SEPARATOR


def encode_key(prefix: str, offset: int) -> str:
    """
    Build the object key for an offset.

    Args:
        prefix: Normalized key namespace
        offset: Record offset

    Returns:
        Object key

    Raises:
        ValueError: If offset does not fit in an unsigned 64-bit integer
    """
    if offset < 0 or offset > MAX_OFFSET:
        raise ValueError(f"Offset out of range: {offset}")
    return f"{prefix}{SEPARATOR}{str(offset).zfill(OFFSET_PADDING)}"


def decode_key(key: str) -> int:
    """
    Extract the offset from an object key.

    Raises:
        MalformedKeyError: If the key has no separator, ends with one, or its
            last path segment is not an unsigned 64-bit decimal integer
    """
    idx = key.rfind(SEPARATOR)
    if idx < 0:
        raise MalformedKeyError(key, "no path separator")
    if idx == len(key) - 1:
        raise MalformedKeyError(key, "empty offset segment")

    suffix = key[idx + 1:]
    # str.isdigit() also accepts non-ASCII digits such as superscripts
    if not (suffix.isascii() and suffix.isdigit()):
        raise MalformedKeyError(key, f"offset segment {suffix!r} is not a decimal integer")

    offset = int(suffix)
    if offset > MAX_OFFSET:
        raise MalformedKeyError(key, f"offset {offset} exceeds 64 bits")
    return offset


def try_decode_key(key: str) -> Optional[int]:
    """Like decode_key(), but return None for keys that do not parse."""
    try:
        return decode_key(key)
    except MalformedKeyError:
        return None
