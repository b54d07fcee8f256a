"""Conversion between store paths and platform file locations.

Store paths are ``/`` separated, relative to the store base directory and
never start or end with a separator. The empty string is the store root.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional, Union

SEPARATOR = "/"

_RESERVED_SEGMENTS = {".", "..", "~"}


def valid(path: Optional[str]) -> str:
    """Normalized form of ``path``, without empty segments or outer separators."""

    if path is None:
        raise ValueError("Resource path required")
    if "\\" in path:
        raise ValueError(f"Resource path must use '/' separators: {path!r}")
    for segment in names(path):
        if segment in _RESERVED_SEGMENTS:
            raise ValueError(f"Relative segment '{segment}' not allowed in resource path: {path!r}")
    return SEPARATOR.join(names(path))


def names(path: str) -> List[str]:
    return [segment for segment in path.split(SEPARATOR) if segment]


def name(path: str) -> str:
    parts = names(path)
    return parts[-1] if parts else ""


def parent(path: str) -> Optional[str]:
    """Path of the containing directory, or ``None`` for the store root."""

    parts = names(path)
    if not parts:
        return None
    return SEPARATOR.join(parts[:-1])


def path(*segments: Optional[str]) -> str:
    """Join segments into a store path, skipping empty ones."""

    parts: List[str] = []
    for segment in segments:
        if segment:
            parts.extend(names(segment))
    return SEPARATOR.join(parts)


def convert(base_directory: Union[str, Path], file: Union[str, Path]) -> str:
    """Store path of ``file`` relative to ``base_directory``."""

    base = os.path.abspath(os.fspath(base_directory))
    target = os.path.abspath(os.fspath(file))
    relative = os.path.relpath(target, base)
    if relative == os.curdir:
        return ""
    if relative == os.pardir or relative.startswith(os.pardir + os.sep):
        raise ValueError(f"{file} is not located under {base_directory}")
    return SEPARATOR.join(relative.split(os.sep))


def to_file(base_directory: Union[str, Path], store_path: str) -> Path:
    """Platform location of ``store_path`` below ``base_directory``."""

    return Path(base_directory).joinpath(*names(store_path))


def normalize(file: Union[str, Path]) -> str:
    """Separator-normalized form of a platform path."""

    return os.fspath(file).replace(os.sep, SEPARATOR)
