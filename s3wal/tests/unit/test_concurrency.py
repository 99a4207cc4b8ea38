"""Tests for concurrent access to one log instance."""

import threading

import pytest

from s3wal.core.log.log import WriteAheadLog
from s3wal.storage.memory import InMemoryObjectStore


class TestConcurrentAccess:
    """Test that the engine lock serializes offset assignment."""

    @pytest.fixture
    def wal(self):
        return WriteAheadLog(InMemoryObjectStore(page_size=7), prefix="wal")

    def test_concurrent_appends(self, wal):
        """Test concurrent appends from multiple threads."""
        offsets = []
        offsets_lock = threading.Lock()

        def writer(thread_id, count):
            for i in range(count):
                offset = wal.append(f"thread-{thread_id}-msg-{i}".encode())
                with offsets_lock:
                    offsets.append(offset)

        threads = [threading.Thread(target=writer, args=(i, 20)) for i in range(5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sorted(offsets) == list(range(1, 101))
        assert wal.length == 100
        assert wal.recover() == 100

    def test_concurrent_appends_and_recovers(self, wal):
        """Test that recover never moves the length backwards under appends."""
        errors = []

        def writer():
            for i in range(50):
                wal.append(f"msg-{i}".encode())

        def recoverer():
            try:
                for _ in range(20):
                    wal.recover()
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=writer), threading.Thread(target=recoverer)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert wal.recover() == 50
        assert [wal.read(o).data for o in (1, 50)] == [b"msg-0", b"msg-49"]
