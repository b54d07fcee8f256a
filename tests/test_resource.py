"""Tests for filesystem resources and the single-file adaptor."""

from __future__ import annotations

from pathlib import Path

import pytest

from resourcestore import (
    FileSystemResourceStore,
    IllegalResourceState,
    ResourceIOError,
    ResourceType,
    as_resource,
)


class TestFileSystemResource:
    """Resources handed out by the store."""

    def test_path_and_name(self, store: FileSystemResourceStore) -> None:
        """Test that path and name derive from the store path."""
        resource = store.get("styles/icons/city.png")
        assert resource.path == "styles/icons/city.png"
        assert resource.name == "city.png"
        assert store.get("").name == ""

    def test_path_is_normalized(self, store: FileSystemResourceStore) -> None:
        """Test that equivalent spellings give equal resources."""
        assert store.get("styles/").path == "styles"
        assert store.get("/styles//icons").path == "styles/icons"
        assert store.get("styles/") == store.get("styles")

    def test_type_follows_disk(self, store: FileSystemResourceStore) -> None:
        """Test that the type is looked up on every call."""
        resource = store.get("thing")
        assert resource.get_type() is ResourceType.UNDEFINED

        (store.base_directory / "thing").mkdir()
        assert resource.get_type() is ResourceType.DIRECTORY

        (store.base_directory / "thing").rmdir()
        (store.base_directory / "thing").write_bytes(b"")
        assert resource.get_type() is ResourceType.FILE

    def test_output_stream_is_atomic(self, store: FileSystemResourceStore) -> None:
        """Test that writing creates parents and leaves no temp file."""
        resource = store.get("security/users.xml")
        with resource.output_stream() as out:
            out.write(b"<users/>")

        with resource.input_stream() as stream:
            assert stream.read() == b"<users/>"
        assert [p.name for p in (store.base_directory / "security").iterdir()] == ["users.xml"]

    def test_output_stream_on_directory(self, store: FileSystemResourceStore) -> None:
        """Test that a directory cannot be opened for writing."""
        store.get("dir").dir()
        with pytest.raises(IllegalResourceState):
            store.get("dir").output_stream()

    def test_input_stream_missing(self, store: FileSystemResourceStore) -> None:
        """Test that reading a missing resource is an I/O failure."""
        with pytest.raises(ResourceIOError):
            store.get("missing.txt").input_stream()

    def test_file_creates_missing(self, store: FileSystemResourceStore) -> None:
        """Test that file() creates an empty file on demand."""
        file = store.get("a/b/c.txt").file()
        assert file.is_file()
        assert file.read_bytes() == b""

    def test_dir_creates_missing(self, store: FileSystemResourceStore) -> None:
        """Test that dir() creates the directory on demand."""
        directory = store.get("a/b").dir()
        assert directory.is_dir()

    def test_type_mismatch(self, store: FileSystemResourceStore) -> None:
        """Test that file() and dir() refuse the wrong kind of item."""
        store.get("file.txt").file()
        store.get("folder").dir()
        with pytest.raises(IllegalResourceState):
            store.get("file.txt").dir()
        with pytest.raises(IllegalResourceState):
            store.get("folder").file()

    def test_navigation(self, store: FileSystemResourceStore) -> None:
        """Test parent, child lookup and listing."""
        styles = store.get("styles")
        styles.get("b.sld").file()
        styles.get("a.sld").file()
        styles.get("icons").dir()

        assert [r.path for r in styles.list()] == ["styles/a.sld", "styles/b.sld", "styles/icons"]
        assert styles.get("a.sld").parent() == styles
        assert styles.parent() == store.get("")
        assert store.get("").parent() is None
        assert styles.get("a.sld").list() == []
        assert store.get("missing").list() == []

    def test_lastmodified(self, store: FileSystemResourceStore) -> None:
        """Test that a missing resource reports 0."""
        assert store.get("missing").lastmodified() == 0
        file = store.get("present").file()
        assert store.get("present").lastmodified() == file.stat().st_mtime

    def test_lock(self, store: FileSystemResourceStore) -> None:
        """Test that locks come from the store's provider."""
        with store.get("a").lock() as lock:
            assert lock.path == "a"
            assert not lock.released
        assert lock.released

    def test_listener_registration(self, store: FileSystemResourceStore) -> None:
        """Test that resources register listeners with the store watcher."""
        def on_change(notify) -> None:
            pass

        resource = store.get("styles")
        resource.add_listener(on_change)
        assert [w.path for w in store.watcher.watches] == ["styles"]
        resource.remove_listener(on_change)
        assert store.watcher.watches == ()

    def test_invalid_paths(self, store: FileSystemResourceStore) -> None:
        """Test that relative segments are rejected."""
        with pytest.raises(ValueError):
            store.get("../etc/passwd")
        with pytest.raises(ValueError):
            store.get("a\\b")


class TestResourceAdaptor:
    """The restricted single-file adaptor."""

    @pytest.fixture
    def file(self, tmp_path: Path) -> Path:
        file = tmp_path / "legacy.properties"
        file.write_bytes(b"key=value")
        return file

    def test_requires_existing_file(self, tmp_path: Path) -> None:
        """Test construction preconditions."""
        with pytest.raises(ValueError):
            as_resource(None)
        with pytest.raises(ValueError):
            as_resource(tmp_path / "missing")
        with pytest.raises(ValueError):
            as_resource(tmp_path)

    def test_reads_and_writes(self, file: Path) -> None:
        """Test that streams go straight to the wrapped file."""
        resource = as_resource(file)
        with resource.input_stream() as stream:
            assert stream.read() == b"key=value"
        with resource.output_stream() as stream:
            stream.write(b"key=other")
        assert file.read_bytes() == b"key=other"

    def test_metadata(self, file: Path) -> None:
        """Test name, type, file and listing."""
        resource = as_resource(file)
        assert resource.name == "legacy.properties"
        assert resource.path.endswith("/legacy.properties")
        assert resource.get_type() is ResourceType.FILE
        assert resource.file() == file
        assert resource.list() == []
        assert resource.lastmodified() == file.stat().st_mtime

    def test_unsupported_operations(self, file: Path) -> None:
        """Test that tree navigation is refused."""
        resource = as_resource(file)
        with pytest.raises(IllegalResourceState):
            resource.parent()
        with pytest.raises(IllegalResourceState):
            resource.get("child")
        with pytest.raises(IllegalResourceState):
            resource.dir()
        with pytest.raises(IllegalResourceState):
            resource.add_listener(lambda notify: None)

    def test_lock_is_noop(self, file: Path) -> None:
        """Test that the adaptor lock can be taken twice without blocking."""
        resource = as_resource(file)
        first = resource.lock()
        second = resource.lock()
        first.release()
        second.release()
        assert first.released and second.released
