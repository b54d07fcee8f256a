"""Resource store over a base directory on the local filesystem."""
from __future__ import annotations

import logging
import time
from pathlib import Path
from types import TracebackType
from typing import TYPE_CHECKING, Optional, Type, Union

from . import files, paths
from .locks import LOCK_PROVIDERS, LockProvider, MemoryLockProvider
from .resource import FileSystemResource
from .watcher import DEFAULT_DELAY, Clock, FileSystemWatcher, TimeUnit

if TYPE_CHECKING:
    from .config import StoreConfig, WatcherConfig
    from .notification import Listener

logger = logging.getLogger(__name__)


class FileSystemResourceStore:
    """Hands out resources below ``base_directory`` and watches them for changes."""

    def __init__(
        self,
        base_directory: Union[str, Path],
        lock_provider: Optional[LockProvider] = None,
        *,
        delay: float = DEFAULT_DELAY,
        unit: TimeUnit = TimeUnit.SECONDS,
        clock: Clock = time.time,
    ):
        base = Path(base_directory)
        if not base.is_dir():
            raise ValueError(f"Base directory required, {base} is not a directory")
        self._base_directory = base.resolve()
        self._lock_provider = lock_provider if lock_provider is not None else MemoryLockProvider()
        self._watcher = FileSystemWatcher(self, delay=delay, unit=unit, clock=clock)
        logger.debug("Resource store opened on %s", self._base_directory)

    @classmethod
    def from_config(
        cls, store_config: StoreConfig, watcher_config: Optional[WatcherConfig] = None
    ) -> FileSystemResourceStore:
        lock_provider = LOCK_PROVIDERS[store_config.lock_provider]()
        if watcher_config is None:
            return cls(store_config.base_directory, lock_provider)
        return cls(
            store_config.base_directory,
            lock_provider,
            delay=watcher_config.delay,
            unit=watcher_config.unit,
        )

    @property
    def base_directory(self) -> Path:
        return self._base_directory

    @property
    def lock_provider(self) -> LockProvider:
        return self._lock_provider

    @property
    def watcher(self) -> FileSystemWatcher:
        return self._watcher

    def get(self, path: str) -> FileSystemResource:
        return FileSystemResource(self, path)

    def remove(self, path: str) -> bool:
        """Delete the resource at ``path`` and everything below it."""

        return files.delete(paths.to_file(self._base_directory, paths.valid(path)))

    def move(self, path: str, target: str) -> bool:
        """Rename the resource at ``path`` to ``target``."""

        source = paths.to_file(self._base_directory, paths.valid(path))
        dest = paths.to_file(self._base_directory, paths.valid(target))
        if source.exists():
            dest.parent.mkdir(parents=True, exist_ok=True)
        return files.move(source, dest)

    def add_listener(self, path: str, listener: Listener) -> None:
        self._watcher.add_listener(path, listener)

    def remove_listener(self, path: str, listener: Listener) -> bool:
        return self._watcher.remove_listener(path, listener)

    def close(self) -> None:
        self._watcher.close()
        logger.debug("Resource store on %s closed", self._base_directory)

    def __enter__(self) -> FileSystemResourceStore:
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"FileSystemResourceStore({self._base_directory})"
