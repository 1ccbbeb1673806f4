"""Unit tests for the reader/writer lock."""

import threading
import time

import pytest

from ttlstore.utils.rwlock import RWLock


def _wait_until(predicate, timeout: float = 2.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


class TestRWLock:
    """Test RWLock sharing and exclusion rules."""

    def test_readers_share(self):
        """Two readers can hold the lock at the same time."""
        lock = RWLock()
        inside = threading.Barrier(2, timeout=2)
        results = []

        def reader():
            with lock.read_locked():
                # both threads must be inside together for the barrier to pass
                inside.wait()
                results.append(True)

        threads = [threading.Thread(target=reader) for _ in range(2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert results == [True, True]

    def test_writer_excludes_readers(self):
        """A reader waits while a writer holds the lock."""
        lock = RWLock()
        acquired = threading.Event()

        lock.acquire_write()

        def reader():
            with lock.read_locked():
                acquired.set()

        thread = threading.Thread(target=reader)
        thread.start()
        time.sleep(0.05)
        assert not acquired.is_set()

        lock.release_write()
        thread.join(timeout=2)
        assert acquired.is_set()

    def test_writer_excludes_writer(self):
        """A second writer waits for the first."""
        lock = RWLock()
        acquired = threading.Event()

        lock.acquire_write()

        def writer():
            with lock.write_locked():
                acquired.set()

        thread = threading.Thread(target=writer)
        thread.start()
        time.sleep(0.05)
        assert not acquired.is_set()

        lock.release_write()
        thread.join(timeout=2)
        assert acquired.is_set()

    def test_waiting_writer_blocks_new_readers(self):
        """Once a writer queues, later readers go after it."""
        lock = RWLock()
        order = []

        lock.acquire_read()

        def writer():
            with lock.write_locked():
                order.append("writer")

        def late_reader():
            with lock.read_locked():
                order.append("reader")

        w = threading.Thread(target=writer)
        w.start()
        assert _wait_until(lambda: lock._writers_waiting == 1)

        r = threading.Thread(target=late_reader)
        r.start()
        time.sleep(0.05)
        assert order == []

        lock.release_read()
        w.join(timeout=2)
        r.join(timeout=2)
        assert order == ["writer", "reader"]

    def test_release_without_acquire(self):
        """Unbalanced releases raise instead of corrupting the counts."""
        lock = RWLock()
        with pytest.raises(RuntimeError):
            lock.release_read()
        with pytest.raises(RuntimeError):
            lock.release_write()

    def test_context_manager_releases_on_error(self):
        """An exception inside the block still releases the lock."""
        lock = RWLock()
        with pytest.raises(KeyError):
            with lock.write_locked():
                raise KeyError("boom")

        # would block forever if the write side leaked
        with lock.read_locked():
            pass
        with lock.write_locked():
            pass
