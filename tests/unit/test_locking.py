"""Tests for the readers/writer lock."""

import threading
import time

import pytest

from studylib.core.locking import LockingError, RWLock


def test_readers_share_the_lock():
    """Two threads can hold the read lock at once."""
    lock = RWLock()
    both_inside = threading.Barrier(2, timeout=5)

    def reader():
        with lock.read():
            both_inside.wait()

    threads = [threading.Thread(target=reader) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=5)
    assert not any(t.is_alive() for t in threads)


def test_writer_excludes_readers():
    """A reader waits until the writer releases."""
    lock = RWLock()
    events: list[str] = []
    writer_in = threading.Event()

    def writer():
        with lock.write():
            writer_in.set()
            time.sleep(0.05)
            events.append("write done")

    def reader():
        writer_in.wait(timeout=5)
        with lock.read():
            events.append("read")

    threads = [threading.Thread(target=writer), threading.Thread(target=reader)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=5)
    assert events == ["write done", "read"]


def test_waiting_writer_blocks_new_readers():
    """Once a writer is queued, later readers go after it."""
    lock = RWLock()
    events: list[str] = []

    def write():
        with lock.write():
            events.append("write")

    def read():
        with lock.read():
            events.append("read")

    lock.acquire_read()
    writer = threading.Thread(target=write)
    writer.start()
    while not lock._writers_waiting:
        time.sleep(0.001)

    reader = threading.Thread(target=read)
    reader.start()
    time.sleep(0.05)
    assert events == []

    lock.release_read()
    writer.join(timeout=5)
    reader.join(timeout=5)
    assert events == ["write", "read"]


def test_reentrant():
    """The owning thread may nest both modes, and read inside write."""
    lock = RWLock()
    with lock.write():
        with lock.write():
            with lock.read():
                pass
    with lock.read():
        with lock.read():
            pass
    # Fully released: another thread can write
    def other_writer():
        with lock.write():
            pass

    t = threading.Thread(target=other_writer)
    t.start()
    t.join(timeout=5)
    assert not t.is_alive()


def test_upgrade_refused():
    lock = RWLock()
    with lock.read():
        with pytest.raises(LockingError):
            lock.acquire_write()


def test_release_unheld_raises():
    lock = RWLock()
    with pytest.raises(LockingError):
        lock.release_read()
    with pytest.raises(LockingError):
        lock.release_write()
