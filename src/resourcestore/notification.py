"""Change notifications delivered to resource listeners.

A notification carries the delta of changed store paths:

* a listener on a single file, ``user_projections/epsg.properties``, is told
  about changes to that file with ``delta == ("user_projections/epsg.properties",)``;
* a listener on a directory, ``styles``, is told about children added to or
  removed from the directory by name, and about content changes inside it
  through the directory path itself.

Removed resources may appear in a delta; resolving them yields a resource of
type ``UNDEFINED`` since the content is no longer present.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Iterable, Protocol, Tuple, Union

from . import paths

if TYPE_CHECKING:
    from .resource import Resource


class ResourceLookup(Protocol):
    def get(self, path: str) -> Resource:
        ...


@dataclass(frozen=True)
class ResourceNotification:
    """Immutable delta of changed store paths."""

    store: ResourceLookup = field(compare=False, repr=False)
    delta: Tuple[str, ...]

    @classmethod
    def for_path(cls, store: ResourceLookup, path: str) -> ResourceNotification:
        """Notification of a change to a single resource."""

        return cls(store=store, delta=(path,))

    @classmethod
    def for_paths(cls, store: ResourceLookup, changed: Iterable[str]) -> ResourceNotification:
        """Notification of an unordered set of changes, sorted by path."""

        return cls(store=store, delta=tuple(sorted(changed)))

    @classmethod
    def for_files(
        cls,
        store: ResourceLookup,
        base_directory: Union[str, Path],
        files: Iterable[Union[str, Path]],
    ) -> ResourceNotification:
        """Notification of changed filesystem items, kept in discovery order."""

        return cls(store=store, delta=tuple(paths.convert(base_directory, file) for file in files))

    def resource(self) -> Resource:
        """The first changed resource in ``delta``."""

        return self.store.get(self.delta[0])

    def __len__(self) -> int:
        return len(self.delta)

    def __iter__(self):
        return iter(self.delta)


class ResourceListener(Protocol):
    """Receives notifications about changes to a watched path."""

    def changed(self, notify: ResourceNotification) -> None:
        ...


Listener = Union[ResourceListener, Callable[[ResourceNotification], Any]]


def deliver(listener: Any, notify: ResourceNotification) -> None:
    """Invoke ``listener`` with ``notify``; plain callables are accepted too."""

    changed = getattr(listener, "changed", None)
    if callable(changed):
        changed(notify)
    else:
        listener(notify)
