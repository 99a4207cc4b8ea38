"""Tests for offset/key encoding."""

import pytest

from s3wal.core.log.errors import MalformedKeyError
from s3wal.core.log.keys import (
    MAX_OFFSET,
    decode_key,
    encode_key,
    list_prefix,
    normalize_prefix,
    try_decode_key,
)


class TestEncodeKey:
    """Test building keys from offsets."""

    def test_zero_padded_to_twenty_digits(self):
        """Test that offsets are padded to 20 digits."""
        assert encode_key("wal", 1) == "wal/00000000000000000001"
        assert encode_key("a/b", 12345) == "a/b/00000000000000012345"

    def test_max_offset_fits(self):
        """Test that the largest 64-bit offset needs no truncation."""
        assert encode_key("wal", MAX_OFFSET) == "wal/18446744073709551615"

    def test_out_of_range_offset_raises_error(self):
        """Test that offsets outside 64 bits are rejected."""
        with pytest.raises(ValueError, match="Offset out of range"):
            encode_key("wal", -1)
        with pytest.raises(ValueError, match="Offset out of range"):
            encode_key("wal", MAX_OFFSET + 1)

    def test_lexicographic_order_matches_numeric(self):
        """Test that sorting keys sorts offsets."""
        offsets = [1000, 2, 99, 10, 1, 123456789]
        keys = sorted(encode_key("wal", o) for o in offsets)

        assert [decode_key(k) for k in keys] == sorted(offsets)


class TestDecodeKey:
    """Test strict and lenient key decoding."""

    def test_decode_round_trip(self):
        """Test decoding a key produced by encode_key."""
        assert decode_key(encode_key("tenant/wal", 42)) == 42

    def test_decode_unpadded_suffix(self):
        """Test that any unsigned decimal suffix decodes."""
        assert decode_key("wal/7") == 7

    @pytest.mark.parametrize(
        "key",
        [
            "00000000000000000001",
            "wal/",
            "wal/abc",
            "wal/-1",
            "wal/+1",
            "wal/1.5",
            "wal/ 1",
            "wal/18446744073709551616",
            "wal/²",
        ],
    )
    def test_malformed_keys_raise_error(self, key):
        """Test that malformed keys fail strict decoding."""
        with pytest.raises(MalformedKeyError) as exc_info:
            decode_key(key)

        assert exc_info.value.key == key

    def test_lenient_decode_returns_none(self):
        """Test that lenient decoding skips instead of raising."""
        assert try_decode_key("wal/readme.txt") is None
        assert try_decode_key("noslash") is None
        assert try_decode_key("wal/00000000000000000003") == 3


class TestPrefix:
    """Test prefix normalization."""

    def test_strips_separators(self):
        """Test that leading and trailing slashes are removed."""
        assert normalize_prefix("/wal/") == "wal"
        assert normalize_prefix("//a/b//") == "a/b"

    def test_list_prefix(self):
        """Test the listing prefix ends with one separator."""
        assert list_prefix("/wal/") == "wal/"
