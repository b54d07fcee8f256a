"""Test helpers shared across the resource store tests."""

from __future__ import annotations

import os
from pathlib import Path
from typing import List

from resourcestore import ResourceNotification


class FakeClock:
    """Clock whose time only moves when told to."""

    def __init__(self, now: float = 1_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now


class RecordingListener:
    """Listener that remembers every notification it receives."""

    def __init__(self) -> None:
        self.notifications: List[ResourceNotification] = []

    def changed(self, notify: ResourceNotification) -> None:
        self.notifications.append(notify)

    @property
    def deltas(self) -> List[List[str]]:
        return [list(n.delta) for n in self.notifications]


def set_mtime(path: Path, mtime: float) -> None:
    """Pin both access and modification time of ``path``."""
    os.utime(path, (mtime, mtime))
