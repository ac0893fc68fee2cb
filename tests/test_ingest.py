"""Tests for summary ingestion."""

from __future__ import annotations

import pytest

from conftest import make_match_document, write_match
from soupheat.core.errors import RootNotFoundError
from soupheat.pipeline.ingest import ingest_matches, ingest_report, should_report


class TestIngestMatches:
    """Tests for ingest_matches."""

    def test_summaries_for_every_match(self, match_root):
        summaries = ingest_matches(match_root)
        assert [s.match_id for s in summaries] == ["m1", "m2", "m3"]
        assert [s.region for s in summaries] == ["AMERICAS", "EMEA", "PACIFIC"]
        assert [s.map for s in summaries] == ["Ascent", "Bind", "Haven"]

    def test_corrupt_file_skipped(self, corrupt_root, caplog):
        """One valid and one corrupt file yield exactly one summary."""
        summaries = ingest_matches(corrupt_root)
        assert [s.match_id for s in summaries] == ["good"]
        assert "bad.json" in caplog.text

    def test_missing_root(self, tmp_path):
        with pytest.raises(RootNotFoundError, match="Folder does not exist"):
            ingest_matches(tmp_path / "missing")

    def test_empty_root(self, tmp_path):
        assert ingest_matches(tmp_path) == []


class TestIngestReport:
    """Tests for the detailed report."""

    def test_counts(self, corrupt_root):
        report = ingest_report(corrupt_root)
        assert report.total_files == 2
        assert report.parsed == 1
        assert len(report.skipped) == 1
        assert report.skipped[0].stage == "parse"
        assert report.duration_seconds >= 0

    def test_to_dict(self, corrupt_root):
        data = ingest_report(corrupt_root).to_dict()
        assert data["parsed"] == 1
        assert data["skipped"][0]["path"].endswith("bad.json")


class TestProgress:
    """Progress cadence: first file, every tenth file and the last file."""

    def test_should_report(self):
        assert should_report(1, 25)
        assert not should_report(2, 25)
        assert should_report(10, 25)
        assert should_report(20, 25)
        assert should_report(25, 25)

    def test_callback_cadence(self, tmp_path):
        for i in range(25):
            write_match(tmp_path, f"m{i:02d}.json", make_match_document(f"m{i:02d}"))

        calls = []
        ingest_matches(tmp_path, lambda processed, total: calls.append((processed, total)))
        assert calls == [(1, 25), (10, 25), (20, 25), (25, 25)]

    def test_custom_interval(self, tmp_path):
        for i in range(4):
            write_match(tmp_path, f"m{i}.json", make_match_document(f"m{i}"))

        calls = []
        ingest_matches(tmp_path, lambda p, t: calls.append(p), progress_every=2)
        assert calls == [1, 2, 4]

    def test_corrupt_files_count_toward_progress(self, corrupt_root):
        calls = []
        ingest_matches(corrupt_root, lambda p, t: calls.append((p, t)))
        assert calls == [(1, 2), (2, 2)]
