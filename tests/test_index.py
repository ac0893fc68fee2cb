"""Tests for the match index."""

from __future__ import annotations

import threading
from types import MappingProxyType

import pytest

from conftest import make_match_document, write_match
from soupheat.core.errors import RootNotFoundError
from soupheat.infra.index import MatchIndex


class TestMatchIndexBuild:
    """Tests for building the index."""

    def test_maps_ids_to_files(self, match_root):
        index = MatchIndex()
        entries = index.build(match_root)
        assert set(entries) == {"m1", "m2", "m3"}
        assert entries["m2"] == (match_root / "EMEA/week1/m2.json").absolute()
        assert index.lookup("m3").name == "m3.json"

    def test_unbuilt_index(self):
        index = MatchIndex()
        assert not index.is_built
        assert index.root is None
        assert index.lookup("m1") is None
        assert len(index) == 0

    def test_snapshot_is_read_only(self, match_root):
        index = MatchIndex()
        entries = index.build(match_root)
        assert isinstance(entries, MappingProxyType)
        with pytest.raises(TypeError):
            entries["x"] = match_root  # type: ignore[index]

    def test_unparseable_files_skipped(self, corrupt_root):
        index = MatchIndex()
        index.build(corrupt_root)
        assert "good" in index
        assert index.stats()["skipped"] == 1

    def test_duplicate_ids_last_scanned_wins(self, tmp_path, caplog):
        write_match(tmp_path, "a/dup.json", make_match_document("same"))
        write_match(tmp_path, "b/dup.json", make_match_document("same"))

        index = MatchIndex()
        index.build(tmp_path)

        assert index.lookup("same") == (tmp_path / "b/dup.json").absolute()
        assert index.stats()["collisions"] == 1
        assert "Duplicate match id same" in caplog.text

    def test_rebuild_replaces_entries(self, match_root):
        index = MatchIndex()
        index.build(match_root)
        (match_root / "PACIFIC/m3.json").unlink()
        index.build(match_root)
        assert "m3" not in index
        assert len(index) == 2

    def test_missing_root_keeps_previous_snapshot(self, match_root, tmp_path):
        index = MatchIndex()
        index.build(match_root)
        with pytest.raises(RootNotFoundError):
            index.build(tmp_path / "missing")
        assert len(index) == 3
        assert index.root == match_root.absolute()

    def test_stats(self, match_root):
        index = MatchIndex()
        index.build(match_root)
        stats = index.stats()
        assert stats["entries"] == 3
        assert stats["root"] == str(match_root.absolute())
        assert stats["built_at"] is not None

    def test_clear(self, match_root):
        index = MatchIndex()
        index.build(match_root)
        index.clear()
        assert len(index) == 0
        assert not index.is_built


class TestMatchIndexConcurrency:
    """Readers never observe a partially built index."""

    def test_concurrent_reads_during_rebuilds(self, match_root):
        index = MatchIndex()
        index.build(match_root)
        observed: list[int] = []
        stop = threading.Event()

        def reader():
            while not stop.is_set():
                observed.append(len(index.snapshot().entries))

        thread = threading.Thread(target=reader)
        thread.start()
        for _ in range(5):
            index.build(match_root)
        stop.set()
        thread.join()

        assert observed
        assert set(observed) == {3}
