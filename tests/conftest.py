"""Shared fixtures for the resource store tests."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest

from resourcestore import FileSystemResourceStore
from tests.utils import FakeClock, RecordingListener


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(tmp_path: Path, clock: FakeClock) -> Iterator[FileSystemResourceStore]:
    base = tmp_path / "data"
    base.mkdir()
    with FileSystemResourceStore(base, clock=clock) as resource_store:
        yield resource_store


@pytest.fixture
def listener() -> RecordingListener:
    return RecordingListener()
