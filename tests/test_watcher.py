"""Tests for the index watcher."""

import shutil
import threading
import time
from pathlib import Path
from unittest.mock import Mock, patch

import pytest
from watchdog.events import (
    DirCreatedEvent,
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
)

from conftest import make_match_document, write_match
from soupheat.core.errors import RootNotFoundError
from soupheat.infra.index import MatchIndex
from soupheat.infra.watcher import IndexWatcher, MatchFileEvent, MatchFileHandler


class TestMatchFileEvent:
    """Tests for MatchFileEvent dataclass."""

    def test_filename_property(self):
        event = MatchFileEvent(Path("/data/EMEA/week1/m2.json"), "created", 0.0)
        assert event.filename == "m2.json"


class TestMatchFileHandler:
    """Tests for event filtering and forwarding."""

    @pytest.fixture
    def received(self):
        return []

    @pytest.fixture
    def handler(self, received):
        return MatchFileHandler(received.append)

    def test_created_match_file(self, handler, received):
        handler.on_created(FileCreatedEvent("/data/m1.json"))
        assert len(received) == 1
        assert received[0].event_type == "created"
        assert received[0].file_path == Path("/data/m1.json")

    def test_extension_case_insensitive(self, handler, received):
        handler.on_modified(FileModifiedEvent("/data/M1.JSON"))
        assert [e.event_type for e in received] == ["modified"]

    def test_other_files_ignored(self, handler, received):
        handler.on_created(FileCreatedEvent("/data/readme.txt"))
        handler.on_deleted(FileDeletedEvent("/data/m1.json.part"))
        assert received == []

    def test_directories_ignored(self, handler, received):
        handler.on_created(DirCreatedEvent("/data/week2.json"))
        assert received == []

    def test_deleted(self, handler, received):
        handler.on_deleted(FileDeletedEvent("/data/m1.json"))
        assert [e.event_type for e in received] == ["deleted"]

    def test_rename_into_match_extension(self, handler, received):
        handler.on_moved(FileMovedEvent("/data/m1.download", "/data/m1.json"))
        assert [e.file_path for e in received] == [Path("/data/m1.json")]

    def test_move_between_folders_reports_both_sides(self, handler, received):
        handler.on_moved(FileMovedEvent("/data/a/m1.json", "/data/b/m1.json"))
        assert len(received) == 2

    def test_custom_extensions(self, received):
        handler = MatchFileHandler(received.append, extensions=[".match"])
        handler.on_created(FileCreatedEvent("/data/m1.json"))
        handler.on_created(FileCreatedEvent("/data/m1.match"))
        assert [e.filename for e in received] == ["m1.match"]


class TestIndexWatcher:
    """Tests for debounced index rebuilds."""

    def _event(self, name="m1.json"):
        return MatchFileEvent(Path(name), "created", time.time())

    def test_flush_rebuilds_and_notifies(self, match_root):
        index = MatchIndex()
        watcher = IndexWatcher(match_root, index, debounce_seconds=60)
        received = []
        watcher.on_rebuild(received.append)

        watcher.notify(self._event())
        assert len(watcher.pending_events) == 1

        assert watcher.flush() is True
        assert index.is_built
        assert len(index) == 3
        assert len(received) == 1
        assert watcher.pending_events == []

    def test_flush_without_changes(self, match_root):
        watcher = IndexWatcher(match_root, MatchIndex())
        assert watcher.flush() is False

    def test_debounce_coalesces_bursts(self, match_root):
        index = MatchIndex()
        watcher = IndexWatcher(match_root, index, debounce_seconds=0.2)
        done = threading.Event()
        batches = []

        @watcher.on_rebuild
        def record(events):
            batches.append(events)
            done.set()

        with patch.object(index, "build", wraps=index.build) as mock_build:
            for name in ("a.json", "b.json", "c.json"):
                watcher.notify(self._event(name))
            assert done.wait(timeout=5)

        mock_build.assert_called_once()
        assert [len(b) for b in batches] == [3]

    def test_callback_error_does_not_break_rebuild(self, match_root):
        watcher = IndexWatcher(match_root, MatchIndex(), debounce_seconds=60)
        failing = Mock(side_effect=RuntimeError("boom"))
        after = Mock()
        watcher.on_rebuild(failing)
        watcher.on_rebuild(after)

        watcher.notify(self._event())
        assert watcher.flush() is True
        after.assert_called_once()

    def test_rebuild_after_root_removed(self, match_root):
        index = MatchIndex()
        index.build(match_root)
        watcher = IndexWatcher(match_root, index, debounce_seconds=60)
        callback = Mock()
        watcher.on_rebuild(callback)

        watcher.notify(self._event())
        shutil.rmtree(match_root)

        assert watcher.flush() is False
        callback.assert_not_called()
        assert watcher.pending_events == []
        assert len(index) == 3

    def test_start_missing_root(self, tmp_path):
        watcher = IndexWatcher(tmp_path / "absent", MatchIndex())
        with pytest.raises(RootNotFoundError):
            watcher.start()
        assert not watcher.is_running

    def test_start_builds_index_and_stop(self, match_root):
        index = MatchIndex()
        watcher = IndexWatcher(match_root, index, debounce_seconds=60)
        watcher.start()
        try:
            assert watcher.is_running
            assert len(index) == 3
        finally:
            watcher.stop()
        assert not watcher.is_running

    def test_stop_drops_pending(self, match_root):
        watcher = IndexWatcher(match_root, MatchIndex(), debounce_seconds=60)
        watcher.notify(self._event())
        watcher.stop()
        assert watcher.pending_events == []

    def test_new_file_is_indexed(self, match_root):
        index = MatchIndex()
        watcher = IndexWatcher(match_root, index, debounce_seconds=0.1)
        rebuilt = threading.Event()
        watcher.on_rebuild(lambda events: rebuilt.set())

        watcher.start()
        try:
            write_match(match_root, "EMEA/week1/m4.json", make_match_document("m4", "Lotus"))
            assert rebuilt.wait(timeout=10)
        finally:
            watcher.stop()

        assert "m4" in index
