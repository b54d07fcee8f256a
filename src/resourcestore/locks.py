"""Advisory locks handed out by resources."""
from __future__ import annotations

import logging
import threading
from types import TracebackType
from typing import Callable, Dict, Optional, Protocol, Type

logger = logging.getLogger(__name__)


class Lock:
    """Scoped lock token; release it explicitly or use it as a context manager."""

    def __init__(self, path: str, on_release: Optional[Callable[[], None]] = None):
        self._path = path
        self._on_release = on_release
        self._released = False

    @property
    def path(self) -> str:
        return self._path

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        if self._released:
            return
        if self._on_release is not None:
            self._on_release()
        self._released = True

    def __enter__(self) -> "Lock":
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self.release()

    def __repr__(self) -> str:
        return f"Lock({self._path!r}, released={self._released})"


class LockProvider(Protocol):
    def acquire(self, path: str) -> Lock:
        ...


class NullLockProvider:
    """Hands out locks that provide no mutual exclusion."""

    def acquire(self, path: str) -> Lock:
        return Lock(path)


class MemoryLockProvider:
    """In-process locking, one re-entrant lock per store path."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.RLock] = {}
        self._holders: Dict[str, int] = {}

    def acquire(self, path: str) -> Lock:
        with self._guard:
            lock = self._locks.get(path)
            if lock is None:
                lock = threading.RLock()
                self._locks[path] = lock
            self._holders[path] = self._holders.get(path, 0) + 1

        lock.acquire()
        logger.debug("Acquired lock on %r", path)
        return Lock(path, on_release=lambda: self._release(path, lock))

    def _release(self, path: str, lock: threading.RLock) -> None:
        lock.release()
        with self._guard:
            remaining = self._holders.get(path, 1) - 1
            if remaining <= 0:
                self._holders.pop(path, None)
                self._locks.pop(path, None)
            else:
                self._holders[path] = remaining
        logger.debug("Released lock on %r", path)

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


LOCK_PROVIDERS: Dict[str, Callable[[], LockProvider]] = {
    "memory": MemoryLockProvider,
    "null": NullLockProvider,
}
