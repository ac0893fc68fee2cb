"""Tests for match document parsing, weapon lookup and region inference."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from conftest import VANDAL_UUID, make_match_document, write_match
from soupheat.core.documents import (
    MatchDocument,
    parse_match_document,
    read_match_file,
    read_match_id,
)
from soupheat.core.regions import classify_region
from soupheat.core.weapons import WEAPON_CATALOG, resolve_weapon, weapon_names


class TestParseMatchDocument:
    """Tests for the raw document model."""

    def test_parses_complete_document(self):
        """A full document exposes its blocks through snake_case fields."""
        document = parse_match_document(json.dumps(make_match_document("abc")))
        assert isinstance(document, MatchDocument)
        assert document.match_info.match_id == "abc"
        assert document.match_info.map == "Ascent"
        assert len(document.players) == 3
        assert len(document.round_results) == 3

    def test_nested_lists_default_to_empty(self):
        """Rounds without playerStats and kills without playerLocations are valid."""
        raw = make_match_document("abc", rounds=[{"roundNum": 0, "winningTeam": "Red"}])
        document = parse_match_document(json.dumps(raw))
        assert document.round_results[0].player_stats == []

    def test_missing_top_level_block_fails(self):
        """A document without roundResults is rejected."""
        raw = make_match_document("abc")
        del raw["roundResults"]
        with pytest.raises(ValidationError):
            parse_match_document(json.dumps(raw))

    def test_unknown_fields_ignored(self):
        """Extra keys in the source are tolerated."""
        raw = make_match_document("abc")
        raw["matchInfo"]["queueId"] = "competitive"
        raw["coaches"] = []
        document = parse_match_document(json.dumps(raw))
        assert document.match_info.match_id == "abc"


class TestReadMatchFile:
    """Tests for the per-file reader."""

    def test_success(self, tmp_path):
        """A valid file yields an ok result with a document."""
        path = write_match(tmp_path, "m.json", make_match_document("m"))
        result = read_match_file(path)
        assert result.ok
        assert result.error is None
        assert result.document.match_info.match_id == "m"

    def test_invalid_json_is_parse_failure(self, tmp_path):
        """Malformed JSON is reported at the parse stage, not raised."""
        path = write_match(tmp_path, "bad.json", "{ not json")
        result = read_match_file(path)
        assert not result.ok
        assert result.stage == "parse"
        assert result.error

    def test_missing_field_names_location(self, tmp_path):
        """Schema failures name the missing field."""
        raw = make_match_document("m")
        del raw["matchInfo"]["map"]
        path = write_match(tmp_path, "m.json", raw)
        result = read_match_file(path)
        assert result.stage == "parse"
        assert "map" in result.error

    def test_unreadable_file_is_read_failure(self, tmp_path):
        """A missing file is reported at the read stage."""
        result = read_match_file(tmp_path / "gone.json")
        assert not result.ok
        assert result.stage == "read"

    def test_invalid_utf8_is_read_failure(self, tmp_path):
        """Undecodable bytes are reported at the read stage."""
        path = tmp_path / "binary.json"
        path.write_bytes(b"\xff\xfe\x00garbage")
        result = read_match_file(path)
        assert result.stage == "read"


class TestReadMatchId:
    """Tests for the identifier probe used by the index."""

    def test_reads_id_only(self, tmp_path):
        """Only matchInfo.matchId needs to be present."""
        path = write_match(tmp_path, "partial.json", {"matchInfo": {"matchId": "xyz"}})
        assert read_match_id(path) == "xyz"

    def test_malformed_returns_none(self, tmp_path):
        """Unparseable files have no identifier."""
        path = write_match(tmp_path, "bad.json", "[]")
        assert read_match_id(path) is None

    def test_missing_file_returns_none(self, tmp_path):
        assert read_match_id(tmp_path / "nope.json") is None


class TestWeapons:
    """Tests for weapon catalog lookup."""

    def test_known_uuid(self):
        assert resolve_weapon(VANDAL_UUID) == "Vandal"

    def test_lookup_is_case_insensitive(self):
        assert resolve_weapon(VANDAL_UUID.lower()) == "Vandal"

    def test_unknown_uuid(self):
        assert resolve_weapon("00000000-0000-0000-0000-000000000000") is None

    def test_empty_identifier(self):
        assert resolve_weapon(None) is None
        assert resolve_weapon("") is None

    def test_weapon_names_distinct_and_sorted(self):
        names = weapon_names()
        assert names == sorted(set(WEAPON_CATALOG.values()))
        assert names.count("Vandal") == 1


class TestClassifyRegion:
    """Tests for region inference from paths."""

    @pytest.mark.parametrize(
        "path,expected",
        [
            ("/data/AMERICAS/match.json", "AMERICAS"),
            ("/data/vct/EMEA/week2/match.json", "EMEA"),
            ("/data/PACIFIC_stage1/match.json", "PACIFIC"),
            ("/data/CHINA/match.json", "CHINA"),
            ("/data/masters/match.json", "UNKNOWN"),
        ],
    )
    def test_tokens(self, path, expected):
        assert classify_region(path) == expected

    def test_priority_order(self):
        """AMERICAS wins over EMEA when both tokens appear."""
        assert classify_region("/EMEA/vs/AMERICAS/match.json") == "AMERICAS"
        assert classify_region("/CHINA/PACIFIC/match.json") == "PACIFIC"

    def test_case_sensitive(self):
        """Tokens are matched exactly as written."""
        assert classify_region("/data/americas/match.json") == "UNKNOWN"
