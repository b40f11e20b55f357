"""Multiple-readers / single-writer lock for the in-memory library index.

Readers may hold the lock together; a writer holds it alone. Waiting
writers block new readers, so a steady stream of searches cannot starve a
mutation. Both modes are re-entrant for the owning thread, and the writer
may also take the read lock. Upgrading a read lock to a write lock is
refused with LockingError instead of deadlocking.
"""

from contextlib import contextmanager
from threading import Condition, Lock, Thread, current_thread
from typing import Iterator, Optional


class LockingError(RuntimeError):
    """Lock used in a way that would deadlock or was never acquired."""


class RWLock:
    """Shareable lock; use via the `read()` and `write()` context managers."""

    def __init__(self) -> None:
        self._cond = Condition(Lock())
        self._readers: dict[Thread, int] = {}
        self._writer: Optional[Thread] = None
        self._writer_depth = 0
        self._writers_waiting = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write(self) -> Iterator[None]:
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()

    def acquire_read(self) -> None:
        me = current_thread()
        with self._cond:
            if self._writer is me:
                self._writer_depth += 1
                return
            if me in self._readers:
                self._readers[me] += 1
                return
            while self._writer is not None or self._writers_waiting:
                self._cond.wait()
            self._readers[me] = 1

    def release_read(self) -> None:
        me = current_thread()
        with self._cond:
            if self._writer is me:
                self._writer_depth -= 1
                return
            count = self._readers.get(me)
            if not count:
                raise LockingError("release_read() called on unheld lock")
            if count == 1:
                del self._readers[me]
                if not self._readers:
                    self._cond.notify_all()
            else:
                self._readers[me] = count - 1

    def acquire_write(self) -> None:
        me = current_thread()
        with self._cond:
            if self._writer is me:
                self._writer_depth += 1
                return
            if me in self._readers:
                raise LockingError("can't upgrade a read lock to a write lock")
            self._writers_waiting += 1
            try:
                while self._writer is not None or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = me
            self._writer_depth = 1

    def release_write(self) -> None:
        with self._cond:
            if self._writer is not current_thread():
                raise LockingError("release_write() called on unheld lock")
            self._writer_depth -= 1
            if not self._writer_depth:
                self._writer = None
                self._cond.notify_all()
