"""Polling watcher that notifies resource listeners about filesystem changes."""
from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, List, Optional, Tuple

from . import paths
from .errors import IllegalResourceState
from .notification import ResourceNotification, deliver

if TYPE_CHECKING:
    from .store import FileSystemResourceStore

logger = logging.getLogger(__name__)

Clock = Callable[[], float]

DEFAULT_DELAY = 30


class TimeUnit(str, Enum):
    """Units accepted for the poll interval."""

    MILLISECONDS = "milliseconds"
    SECONDS = "seconds"
    MINUTES = "minutes"
    HOURS = "hours"

    def to_seconds(self, value: float) -> float:
        return value * _UNIT_SECONDS[self]


_UNIT_SECONDS = {
    TimeUnit.MILLISECONDS: 0.001,
    TimeUnit.SECONDS: 1.0,
    TimeUnit.MINUTES: 60.0,
    TimeUnit.HOURS: 3600.0,
}


@dataclass
class WatcherStats:
    """Counters emitted by the watcher for observability."""

    ticks: int = 0
    notifications: int = 0
    listener_failures: int = 0


class Watch:
    """Baseline kept for one (path, listener) registration.

    ``checked`` is the time of the last poll, or 0 while the item is known to
    be absent. ``contents`` holds the child listing seen by the last poll of a
    directory. Equality only considers the path and the listener.
    """

    def __init__(self, path: str, listener: Any, file: Path, now: float):
        self.path = path
        self.listener = listener
        self.file = file
        self.checked: float = now if file.exists() else 0
        self.contents: Optional[List[Path]] = _list_children(file) if file.is_dir() else None

    def changed(self, now: float) -> List[Path]:
        """Files changed since the previous call, advancing the baseline to ``now``."""

        if not self.file.exists():
            if self.checked != 0:
                self.checked = 0  # deleted, report once
                self.contents = None
                return [self.file]
            return []

        mark = self.checked
        self.checked = now

        if self.file.is_dir():
            previous = self.contents or []
            current = _list_children(self.file)
            self.contents = current

            current_set = set(current)
            previous_set = set(previous)
            delta = [child for child in previous if child not in current_set]
            delta.extend(child for child in current if child not in previous_set)

            if _mtime(self.file) > mark:
                delta.append(self.file)
            if any(_mtime(child) > mark for child in current):
                delta.append(self.file)
            return list(dict.fromkeys(delta))

        self.contents = None
        if _mtime(self.file) > mark:
            return [self.file]
        return []

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Watch):
            return NotImplemented
        return self.path == other.path and self.listener == other.listener

    def __hash__(self) -> int:
        return hash((self.path, self.listener))

    def __repr__(self) -> str:
        return f"Watch(path={self.path!r}, listener={self.listener!r})"


class FileSystemWatcher:
    """Active object polling watched store paths on a single background thread.

    The poll task runs while at least one watch is registered: it starts with
    the first ``add_listener`` and is cancelled when the last watch is removed.
    Each tick diffs every watch against the filesystem and hands a
    ``ResourceNotification`` to listeners whose watch changed. Listener
    failures are logged and counted, never propagated.
    """

    def __init__(
        self,
        store: FileSystemResourceStore,
        delay: float = DEFAULT_DELAY,
        unit: TimeUnit = TimeUnit.SECONDS,
        clock: Clock = time.time,
    ):
        _check_delay(delay)
        self._store = store
        self._delay = delay
        self._unit = TimeUnit(unit)
        self._clock = clock
        self._lock = threading.Lock()
        self._watches: Tuple[Watch, ...] = ()
        self._pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="resource-watcher")
        self._monitor: Optional[_RecurringTask] = None
        self._closed = False
        self._stats = WatcherStats()

    @property
    def delay(self) -> float:
        return self._delay

    @property
    def unit(self) -> TimeUnit:
        return self._unit

    @property
    def interval(self) -> float:
        """Poll interval in seconds."""

        return self._unit.to_seconds(self._delay)

    @property
    def watches(self) -> Tuple[Watch, ...]:
        return self._watches

    @property
    def stats(self) -> WatcherStats:
        return self._stats

    def is_running(self) -> bool:
        monitor = self._monitor
        return monitor is not None and not monitor.cancelled

    def add_listener(self, path: str, listener: Any) -> None:
        """Start notifying ``listener`` about changes to ``path``."""

        path = paths.valid(path)
        with self._lock:
            if self._closed:
                raise IllegalResourceState("Watcher has been closed")
            watch = Watch(path, listener, paths.to_file(self._store.base_directory, path), self._clock())
            if watch in self._watches:
                return
            self._watches = self._watches + (watch,)
            logger.debug("Watching %r for %r", path, listener)
            if self._monitor is None:
                self._start()

    def remove_listener(self, path: str, listener: Any) -> bool:
        """Stop notifying ``listener`` about ``path``; returns whether a watch was removed."""

        path = paths.valid(path)
        with self._lock:
            remaining = tuple(
                watch for watch in self._watches if not (watch.path == path and watch.listener == listener)
            )
            if len(remaining) == len(self._watches):
                return False
            self._watches = remaining
            logger.debug("Stopped watching %r for %r", path, listener)
            if not remaining:
                self._stop()
            return True

    def schedule(self, delay: float, unit: TimeUnit = TimeUnit.SECONDS) -> None:
        """Change the poll interval, rescheduling the poll task if it is running."""

        _check_delay(delay)
        with self._lock:
            self._delay = delay
            self._unit = TimeUnit(unit)
            if self._monitor is not None:
                self._stop()
                self._start()
        logger.info("Poll interval set to %s %s", delay, self._unit.value)

    def check(self, now: Optional[float] = None) -> int:
        """Poll every watch once; returns the number of notifications delivered."""

        if now is None:
            now = self._clock()
        delivered = 0
        for watch in self._watches:
            try:
                changed_files = watch.changed(now)
            except OSError:
                logger.warning("Unable to check %s", watch.file, exc_info=True)
                continue
            if not changed_files:
                continue
            notify = ResourceNotification.for_files(self._store, self._store.base_directory, changed_files)
            try:
                deliver(watch.listener, notify)
            except BaseException:
                self._stats.listener_failures += 1
                logger.exception("Listener %r failed for %s", watch.listener, list(notify.delta))
                continue
            delivered += 1
        self._stats.ticks += 1
        self._stats.notifications += delivered
        logger.debug("Poll finished: %s watches, %s notifications", len(self._watches), delivered)
        return delivered

    def close(self) -> None:
        """Cancel polling and release the worker thread."""

        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._watches = ()
            self._stop()
        self._pool.shutdown(wait=False)

    def _start(self) -> None:
        self._monitor = _RecurringTask(self._pool, self._poll, self.interval)
        logger.info("Polling %s watches every %s %s", len(self._watches), self._delay, self._unit.value)

    def _stop(self) -> None:
        if self._monitor is not None:
            self._monitor.cancel()
            self._monitor = None
            logger.info("Polling stopped")

    def _poll(self) -> None:
        try:
            self.check()
        except Exception:  # pragma: no cover - protective logging
            logger.exception("Poll failed")


class _RecurringTask:
    """Runs ``action`` on ``pool`` with a fixed delay between runs until cancelled."""

    def __init__(self, pool: ThreadPoolExecutor, action: Callable[[], None], interval: float):
        self._action = action
        self._interval = interval
        self._cancelled = threading.Event()
        self._future: Future = pool.submit(self._run)

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        # an in-flight run finishes, later runs are skipped
        self._cancelled.set()
        self._future.cancel()

    def _run(self) -> None:
        while not self._cancelled.wait(self._interval):
            self._action()


def _check_delay(delay: float) -> None:
    if delay <= 0:
        raise ValueError(f"Poll delay must be positive, got {delay}")


def _list_children(directory: Path) -> List[Path]:
    try:
        return sorted(directory.iterdir())
    except OSError:
        return []


def _mtime(file: Path) -> float:
    try:
        return file.stat().st_mtime
    except OSError:
        return 0
