"""Core components for the object-backed log."""

from s3wal.core import log

__all__ = ["log"]
