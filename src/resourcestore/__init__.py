"""Path-addressed resource store with polling change notification."""
from __future__ import annotations

from .errors import IllegalResourceState, ResourceError, ResourceIOError
from .files import AtomicOutputStream, delete, move, out
from .locks import Lock, MemoryLockProvider, NullLockProvider
from .notification import ResourceListener, ResourceNotification
from .resource import FileSystemResource, Resource, ResourceAdaptor, ResourceType, as_resource
from .store import FileSystemResourceStore
from .watcher import FileSystemWatcher, TimeUnit, Watch, WatcherStats

__all__ = [
    "AtomicOutputStream",
    "FileSystemResource",
    "FileSystemResourceStore",
    "FileSystemWatcher",
    "IllegalResourceState",
    "Lock",
    "MemoryLockProvider",
    "NullLockProvider",
    "Resource",
    "ResourceAdaptor",
    "ResourceError",
    "ResourceIOError",
    "ResourceListener",
    "ResourceNotification",
    "ResourceType",
    "TimeUnit",
    "Watch",
    "WatcherStats",
    "as_resource",
    "delete",
    "move",
    "out",
]
