"""Path-addressed resources backed by the filesystem."""
from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import IO, TYPE_CHECKING, List, Optional, Protocol, Union

from . import files, paths
from .errors import IllegalResourceState, ResourceIOError
from .locks import Lock

if TYPE_CHECKING:
    from .notification import Listener
    from .store import FileSystemResourceStore

logger = logging.getLogger(__name__)


class ResourceType(str, Enum):
    """What a resource path currently refers to."""

    FILE = "file"
    DIRECTORY = "directory"
    UNDEFINED = "undefined"


class Resource(Protocol):
    """Capabilities shared by every resource handle."""

    @property
    def path(self) -> str:
        ...

    @property
    def name(self) -> str:
        ...

    def get_type(self) -> ResourceType:
        ...

    def input_stream(self) -> IO[bytes]:
        ...

    def output_stream(self) -> Union[IO[bytes], files.AtomicOutputStream]:
        ...

    def file(self) -> Path:
        ...

    def dir(self) -> Path:
        ...

    def parent(self) -> Optional[Resource]:
        ...

    def get(self, child: str) -> Resource:
        ...

    def list(self) -> List[Resource]:
        ...

    def lastmodified(self) -> float:
        ...

    def lock(self) -> Lock:
        ...


def detect_type(file: Path) -> ResourceType:
    """Type of ``file`` as found on disk right now."""

    if file.is_dir():
        return ResourceType.DIRECTORY
    if file.exists():
        return ResourceType.FILE
    return ResourceType.UNDEFINED


class FileSystemResource:
    """Handle on a store path; the type is looked up on every call."""

    def __init__(self, store: FileSystemResourceStore, path: str):
        self._store = store
        self._path = paths.valid(path)
        self._file = paths.to_file(store.base_directory, self._path)

    @property
    def path(self) -> str:
        return self._path

    @property
    def name(self) -> str:
        return paths.name(self._path)

    @property
    def store(self) -> FileSystemResourceStore:
        return self._store

    def get_type(self) -> ResourceType:
        return detect_type(self._file)

    def input_stream(self) -> IO[bytes]:
        if self.get_type() is ResourceType.DIRECTORY:
            raise IllegalResourceState(f"{self._path} is a directory")
        try:
            return open(self._file, "rb")
        except OSError as exc:
            raise ResourceIOError(f"Unable to read {self._path}") from exc

    def output_stream(self) -> files.AtomicOutputStream:
        """Open the resource for an atomic write, creating parent directories as needed."""

        kind = self.get_type()
        if kind is ResourceType.DIRECTORY:
            raise IllegalResourceState(f"{self._path} is a directory")
        if kind is ResourceType.UNDEFINED:
            self._make_parents()
        return files.out(self._file)

    def file(self) -> Path:
        """Backing file, created empty if the resource does not exist yet."""

        kind = self.get_type()
        if kind is ResourceType.DIRECTORY:
            raise IllegalResourceState(f"File requested, but {self._path} is a directory")
        if kind is ResourceType.UNDEFINED:
            self._make_parents()
            try:
                self._file.touch()
            except OSError as exc:
                raise ResourceIOError(f"Unable to create file {self._path}") from exc
        return self._file

    def dir(self) -> Path:
        """Backing directory, created if the resource does not exist yet."""

        kind = self.get_type()
        if kind is ResourceType.FILE:
            raise IllegalResourceState(f"Directory requested, but {self._path} is a file")
        if kind is ResourceType.UNDEFINED:
            try:
                self._file.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise ResourceIOError(f"Unable to create directory {self._path}") from exc
        return self._file

    def parent(self) -> Optional[FileSystemResource]:
        parent_path = paths.parent(self._path)
        if parent_path is None:
            return None
        return self._store.get(parent_path)

    def get(self, child: str) -> FileSystemResource:
        return self._store.get(paths.path(self._path, child))

    def list(self) -> List[FileSystemResource]:
        if not self._file.is_dir():
            return []
        try:
            names = sorted(entry.name for entry in self._file.iterdir())
        except OSError:
            logger.warning("Unable to list %s", self._file)
            return []
        return [self.get(name) for name in names]

    def lastmodified(self) -> float:
        try:
            return self._file.stat().st_mtime
        except OSError:
            return 0

    def lock(self) -> Lock:
        return self._store.lock_provider.acquire(self._path)

    def add_listener(self, listener: Listener) -> None:
        self._store.add_listener(self._path, listener)

    def remove_listener(self, listener: Listener) -> None:
        self._store.remove_listener(self._path, listener)

    def _make_parents(self) -> None:
        try:
            self._file.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ResourceIOError(f"Unable to create parent directory for {self._path}") from exc

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FileSystemResource):
            return NotImplemented
        return self._store is other._store and self._path == other._path

    def __hash__(self) -> int:
        return hash(self._path)

    def __repr__(self) -> str:
        return f"FileSystemResource({self._path!r})"


class ResourceAdaptor:
    """Read-mostly resource over one existing file outside of any store.

    Bridges call sites that only ever deal with a single file. Tree navigation
    is unsupported and the lock provides no mutual exclusion.
    """

    def __init__(self, file: Union[str, Path, None]):
        if file is None or not Path(file).exists():
            raise ValueError("File required")
        if Path(file).is_dir():
            raise ValueError("File required (not a directory)")
        self._file = Path(file)

    @property
    def path(self) -> str:
        return paths.normalize(self._file)

    @property
    def name(self) -> str:
        return self._file.name

    def get_type(self) -> ResourceType:
        return ResourceType.FILE

    def input_stream(self) -> IO[bytes]:
        try:
            return open(self._file, "rb")
        except OSError as exc:
            raise ResourceIOError(f"Unable to read {self._file}") from exc

    def output_stream(self) -> IO[bytes]:
        # writes straight through, no temp file
        try:
            return open(self._file, "wb")
        except OSError as exc:
            raise ResourceIOError(f"Unable to write {self._file}") from exc

    def file(self) -> Path:
        return self._file

    def dir(self) -> Path:
        raise IllegalResourceState("Resource adaptor cannot be used to create directory")

    def parent(self) -> Optional[Resource]:
        raise IllegalResourceState("Resource adaptor does not support parent()")

    def get(self, child: str) -> Resource:
        raise IllegalResourceState("Resource adaptor does not support get()")

    def list(self) -> List[Resource]:
        return []

    def lastmodified(self) -> float:
        try:
            return self._file.stat().st_mtime
        except OSError:
            return 0

    def lock(self) -> Lock:
        return Lock(self.path)

    def add_listener(self, listener: Listener) -> None:
        raise IllegalResourceState("Resource adaptor does not support listeners")

    def remove_listener(self, listener: Listener) -> None:
        raise IllegalResourceState("Resource adaptor does not support listeners")

    def __repr__(self) -> str:
        return f"ResourceAdaptor({self._file})"


def as_resource(file: Union[str, Path, None]) -> ResourceAdaptor:
    """Adapt a single existing file to the resource API."""

    return ResourceAdaptor(file)
