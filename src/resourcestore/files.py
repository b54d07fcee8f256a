"""Crash-safe file mutation helpers: atomic writes, moves and recursive deletes."""
from __future__ import annotations

import logging
import os
from pathlib import Path
from types import TracebackType
from typing import IO, Iterable, Optional, Type, Union

from .errors import ResourceIOError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

TEMP_SUFFIX = ".tmp"


class AtomicOutputStream:
    """Binary output stream that replaces its target only when closed.

    Bytes are written to a sibling ``<name>.tmp`` file. ``close()`` moves the
    temporary file over the target, so readers never observe a partially
    written target. Leaving a ``with`` block through an exception, or calling
    ``abort()``, discards the temporary file and keeps the original target.
    """

    def __init__(self, target: PathLike):
        self._target = Path(target)
        self._temp = temp_file(self._target)
        if self._temp.exists():
            self._temp.unlink()
        try:
            self._delegate: IO[bytes] = open(self._temp, "wb")
        except OSError as exc:
            raise ResourceIOError(f"Unable to open {self._temp} for writing") from exc
        self._closed = False

    @property
    def target(self) -> Path:
        return self._target

    @property
    def closed(self) -> bool:
        return self._closed

    def writable(self) -> bool:
        return not self._closed

    def write(self, data: bytes) -> int:
        return self._delegate.write(data)

    def writelines(self, lines: Iterable[bytes]) -> None:
        self._delegate.writelines(lines)

    def flush(self) -> None:
        self._delegate.flush()

    def close(self) -> None:
        """Finish writing and move the temporary file over the target."""

        if self._closed:
            return
        self._closed = True
        self._delegate.close()
        try:
            move(self._temp, self._target)
        except ResourceIOError:
            self._discard()
            raise

    def abort(self) -> None:
        """Discard everything written so far, leaving the target untouched."""

        if self._closed:
            return
        self._closed = True
        self._delegate.close()
        self._discard()

    def _discard(self) -> None:
        try:
            self._temp.unlink()
        except FileNotFoundError:
            pass
        except OSError:
            logger.warning("Could not delete %s", self._temp)

    def __enter__(self) -> "AtomicOutputStream":
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        if exc_type is None:
            self.close()
        else:
            self.abort()

    def __repr__(self) -> str:
        return f"AtomicOutputStream({self._target})"


def temp_file(file: PathLike) -> Path:
    target = Path(file)
    return target.with_name(target.name + TEMP_SUFFIX)


def out(file: PathLike) -> AtomicOutputStream:
    """Open ``file`` for an atomic write-then-rename."""

    return AtomicOutputStream(file)


def move(source: Optional[PathLike], dest: Optional[PathLike]) -> bool:
    """Rename ``source`` to ``dest``, replacing an existing destination.

    Returns ``True`` on success; failures raise ``ResourceIOError``.
    """

    if source is None:
        raise ValueError("File source required")
    if dest is None:
        raise ValueError("File dest required")

    source_path = Path(source)
    dest_path = Path(dest)
    if not source_path.exists():
        raise ResourceIOError(f"Failed to move {source_path} - source does not exist")

    if _canonical(source_path) == _canonical(dest_path):
        return True

    # a rename cannot replace a directory, clear it out of the way first
    if dest_path.is_dir() and not dest_path.is_symlink():
        if not delete(dest_path):
            raise ResourceIOError(
                f"Failed to move {source_path.absolute()} - unable to remove existing: {_canonical(dest_path)}"
            )

    try:
        os.replace(source_path, dest_path)
    except OSError as exc:
        raise ResourceIOError(f"Failed to move {source_path.absolute()} to {dest_path.absolute()}") from exc

    logger.debug("Moved %s to %s", source_path, dest_path)
    return True


def delete(file: Optional[PathLike]) -> bool:
    """Remove a file or directory tree.

    Missing items count as already deleted. Items that cannot be removed are
    logged and reported through the return value rather than raised.
    """

    if file is None:
        return True
    path = Path(file)
    if not path.exists() and not path.is_symlink():
        return True

    all_clean = True
    if path.is_dir() and not path.is_symlink():
        all_clean = _empty_directory(path)
        try:
            path.rmdir()
        except OSError as exc:
            logger.warning("Could not delete %s: %s", path.absolute(), exc)
            return False
        return all_clean

    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as exc:
        logger.warning("Could not delete %s: %s", path.absolute(), exc)
        return False
    return True


def _empty_directory(directory: Path) -> bool:
    if not directory.is_dir():
        raise ValueError(f"{directory} does not appear to be a directory at all...")

    all_clean = True
    try:
        children = list(directory.iterdir())
    except OSError as exc:
        logger.warning("Could not list %s: %s", directory.absolute(), exc)
        return False

    for child in children:
        if child.is_dir() and not child.is_symlink():
            all_clean &= delete(child)
            continue
        try:
            os.remove(child)
        except FileNotFoundError:
            continue
        except OSError as exc:
            logger.warning("Could not delete %s: %s", child.absolute(), exc)
            all_clean = False
    return all_clean


def _canonical(path: Path) -> str:
    return os.path.normcase(os.path.realpath(path))
