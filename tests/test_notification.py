"""Tests for change notifications."""

from __future__ import annotations

import dataclasses
from pathlib import Path

import pytest

from resourcestore import FileSystemResourceStore, ResourceNotification, ResourceType


class TestConstruction:
    """The three ways of building a notification."""

    def test_unordered_set_is_sorted(self, store: FileSystemResourceStore) -> None:
        """Test that a set of paths comes back in lexicographic order."""
        notify = ResourceNotification.for_paths(store, {"b/x", "a/y", "a"})
        assert notify.delta == ("a", "a/y", "b/x")

    def test_single_path(self, store: FileSystemResourceStore) -> None:
        """Test the single change shape."""
        notify = ResourceNotification.for_path(store, "styles/pophatch.sld")
        assert notify.delta == ("styles/pophatch.sld",)
        assert len(notify) == 1

    def test_files_keep_discovery_order(self, store: FileSystemResourceStore) -> None:
        """Test that filesystem items are converted without sorting."""
        base = store.base_directory
        notify = ResourceNotification.for_files(store, base, [base / "z.txt", base / "styles", Path(base, "a", "b")])
        assert list(notify) == ["z.txt", "styles", "a/b"]

    def test_delta_is_immutable(self, store: FileSystemResourceStore) -> None:
        """Test that neither the notification nor its delta can change."""
        notify = ResourceNotification.for_paths(store, ["a"])
        assert isinstance(notify.delta, tuple)
        with pytest.raises(dataclasses.FrozenInstanceError):
            notify.delta = ("b",)  # type: ignore[misc]

    def test_equality_ignores_store(self, store: FileSystemResourceStore) -> None:
        """Test that notifications compare by delta."""
        assert ResourceNotification.for_paths(store, ["b", "a"]) == ResourceNotification.for_paths(None, ["a", "b"])


class TestResolution:
    """Resolving the first changed path."""

    def test_resource_of_first_entry(self, store: FileSystemResourceStore) -> None:
        """Test that the first delta entry resolves through the store."""
        store.get("styles").dir()
        notify = ResourceNotification.for_paths(store, ["styles/gone.sld", "styles"])
        resource = notify.resource()
        assert resource.path == "styles"
        assert resource.get_type() is ResourceType.DIRECTORY

    def test_removed_resource_is_undefined(self, store: FileSystemResourceStore) -> None:
        """Test that a deleted path resolves to an UNDEFINED resource."""
        notify = ResourceNotification.for_path(store, "styles/gone.sld")
        assert notify.resource().get_type() is ResourceType.UNDEFINED
