"""Tests for the command line interface."""

import json
import logging

import pytest
import yaml
from typer.testing import CliRunner

from soupheat import __version__
from soupheat.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def restore_root_logger(monkeypatch):
    """The CLI callback reconfigures logging against the runner's streams."""
    monkeypatch.setenv("SOUPHEAT_LOG_LEVEL", "WARNING")
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestVersion:
    """Tests for --version."""

    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout


class TestListCommand:
    """Tests for the list command."""

    def test_table(self, match_root):
        result = runner.invoke(app, ["list", str(match_root)])
        assert result.exit_code == 0
        assert "Matches (3 of 3)" in result.stdout
        assert "Haven" in result.stdout

    def test_json_with_filter(self, match_root):
        result = runner.invoke(app, ["list", str(match_root), "--region", "EMEA", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert [m["match_id"] for m in data] == ["m2"]
        assert data[0]["score"] == "2-1"

    def test_missing_root(self, tmp_path):
        result = runner.invoke(app, ["list", str(tmp_path / "absent")])
        assert result.exit_code == 1
        assert "Error:" in result.stdout


class TestShowCommand:
    """Tests for the show command."""

    def test_show(self, match_root):
        result = runner.invoke(app, ["show", str(match_root), "m1"])
        assert result.exit_code == 0
        assert "Match Information" in result.stdout
        assert "p-blue-1#NA1" in result.stdout
        # Observers are not listed
        assert "p-obs" not in result.stdout

    def test_unknown_match(self, match_root):
        result = runner.invoke(app, ["show", str(match_root), "ghost"])
        assert result.exit_code == 1
        assert "Match not found with ID: ghost" in result.stdout


class TestBatchCommand:
    """Tests for the batch command."""

    def test_json_keeps_order(self, match_root):
        result = runner.invoke(app, ["batch", str(match_root), "m3", "m2", "m1", "--json", "-b", "2"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert [d["match_id"] for d in data] == ["m3", "m2", "m1"]

    def test_missing_id(self, match_root):
        result = runner.invoke(app, ["batch", str(match_root), "m1", "ghost"])
        assert result.exit_code == 1


class TestIndexCommand:
    """Tests for the index command."""

    def test_index(self, match_root):
        result = runner.invoke(app, ["index", str(match_root)])
        assert result.exit_code == 0
        assert "Match Index" in result.stdout
        assert "Entries" in result.stdout


class TestHeatmapCommand:
    """Tests for the heatmap command."""

    def test_writes_json(self, match_root, tmp_path):
        out = tmp_path / "heat.json"
        result = runner.invoke(
            app, ["heatmap", str(match_root), "m1", "m3", "-o", str(out), "--weapon", "Vandal"]
        )
        assert result.exit_code == 0
        assert "Heatmap written" in result.stdout
        data = json.loads(out.read_text())
        assert data["kill_events"] == 4
        assert data["maps"] == ["Ascent", "Haven"]

    def test_time_window(self, match_root, tmp_path):
        out = tmp_path / "heat.json"
        result = runner.invoke(
            app, ["heatmap", str(match_root), "m1", "-o", str(out), "--time-start", "40"]
        )
        assert result.exit_code == 0
        assert json.loads(out.read_text())["kill_events"] == 2

    def test_unwritable_output(self, match_root, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        result = runner.invoke(app, ["heatmap", str(match_root), "m1", "-o", str(blocker / "heat.json")])
        assert result.exit_code == 1
        assert "Error:" in result.stdout

    def test_invalid_mode(self, match_root, tmp_path):
        result = runner.invoke(
            app, ["heatmap", str(match_root), "m1", "-o", str(tmp_path / "h.json"), "--mode", "assists"]
        )
        assert result.exit_code == 1
        assert "player_mode" in result.stdout


class TestExportCommand:
    """Tests for the export command."""

    def test_csv(self, match_root, tmp_path):
        out = tmp_path / "kills.csv"
        result = runner.invoke(app, ["export", str(match_root), "m1", "m2", "-o", str(out), "-f", "csv"])
        assert result.exit_code == 0
        assert "Exported 2 matches" in result.stdout
        assert len(out.read_text().splitlines()) == 7

    def test_unwritable_output(self, match_root, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        result = runner.invoke(app, ["export", str(match_root), "m1", "-o", str(blocker / "m.json")])
        assert result.exit_code == 1
        assert "Error:" in result.stdout

    def test_unknown_format(self, match_root, tmp_path):
        result = runner.invoke(
            app, ["export", str(match_root), "m1", "-o", str(tmp_path / "x"), "-f", "xlsx"]
        )
        assert result.exit_code == 1
        assert not (tmp_path / "x").exists()


class TestConfigCommand:
    """Tests for the config command."""

    def test_show_defaults(self):
        result = runner.invoke(app, ["config"])
        assert result.exit_code == 0
        assert yaml.safe_load(result.stdout)["retrieval"]["batch_size"] == 10

    def test_init_and_refuse_overwrite(self, tmp_path):
        path = tmp_path / "soupheat.yaml"
        result = runner.invoke(app, ["config", "--init", str(path)])
        assert result.exit_code == 0
        assert path.exists()

        result = runner.invoke(app, ["config", "--init", str(path)])
        assert result.exit_code == 1

    def test_config_option(self, tmp_path):
        path = tmp_path / "custom.yaml"
        path.write_text("retrieval:\n  batch_size: 3\n")
        result = runner.invoke(app, ["--config", str(path), "config"])
        assert result.exit_code == 0
        assert yaml.safe_load(result.stdout)["retrieval"]["batch_size"] == 3
