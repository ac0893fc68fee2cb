"""Shared fixtures: match document builders and on-disk corpora."""

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

from soupheat.core.config import reset_config

VANDAL_UUID = "9C82E19D-4575-0200-1A81-3EACF00CF872"
SHERIFF_UUID = "E370FA57-4757-3604-3648-499A3F21CC59"

# 2023-06-10 12:00:00 UTC
START_MILLIS = 1686398400000


def make_player(puuid, team="Blue", agent="agent-jett", name=None, stats=None):
    """A raw player entry as found in match documents."""
    player = {
        "puuid": puuid,
        "gameName": name or puuid,
        "tagLine": "NA1",
        "teamId": team,
    }
    if agent is not None:
        player["characterId"] = agent
    if stats is not None:
        player["stats"] = stats
    return player


def make_kill(
    killer,
    victim,
    weapon=VANDAL_UUID,
    killer_xy=(1000, 2000),
    victim_xy=(1500, 2500),
    time_ms=30000,
    include_killer_location=True,
):
    """A raw kill record with player location snapshots."""
    kill = {
        "killer": killer,
        "victim": victim,
        "timeSinceRoundStartMillis": time_ms,
        "playerLocations": [],
    }
    if weapon is not None:
        kill["finishingDamage"] = {"damageItem": weapon}
    if victim_xy is not None:
        kill["victimLocation"] = {"x": victim_xy[0], "y": victim_xy[1]}
    if include_killer_location:
        kill["playerLocations"].append(
            {"puuid": killer, "location": {"x": killer_xy[0], "y": killer_xy[1]}}
        )
    return kill


def make_round(round_num, winner="Blue", kills_by_player=None):
    """A raw round result; kills_by_player maps puuid -> list of kills."""
    return {
        "roundNum": round_num,
        "winningTeam": winner,
        "playerStats": [
            {"puuid": puuid, "kills": kills} for puuid, kills in (kills_by_player or {}).items()
        ],
    }


def make_match_document(
    match_id,
    map_name="Ascent",
    start_millis=START_MILLIS,
    players=None,
    rounds=None,
    length_millis=2400000,
):
    """A complete match document as a dict."""
    if players is None:
        players = [
            make_player("p-blue-1", "Blue", stats={"score": 250, "kills": 2, "deaths": 1, "assists": 0}),
            make_player("p-red-1", "Red", agent="agent-sova", stats={"score": 120, "kills": 1, "deaths": 2}),
            make_player("p-obs", "Neutral", agent=None),
        ]
    if rounds is None:
        rounds = [
            make_round(0, "Blue", {"p-blue-1": [make_kill("p-blue-1", "p-red-1", time_ms=15000)]}),
            make_round(
                1,
                "Red",
                {"p-red-1": [make_kill("p-red-1", "p-blue-1", weapon=SHERIFF_UUID, time_ms=45000)]},
            ),
            make_round(2, "Blue", {"p-blue-1": [make_kill("p-blue-1", "p-red-1", time_ms=80000)]}),
        ]
    return {
        "matchInfo": {
            "matchId": match_id,
            "map": map_name,
            "gameStartMillis": start_millis,
            "gameLengthMillis": length_millis,
        },
        "players": players,
        "roundResults": rounds,
    }


def write_match(root: Path, relative: str, document) -> Path:
    """Write a document (dict or raw text) under root, creating directories."""
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(document, str):
        path.write_text(document, encoding="utf-8")
    else:
        path.write_text(json.dumps(document), encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep tests independent of config files and SOUPHEAT_* variables on the host."""
    for key in list(os.environ):
        if key.startswith("SOUPHEAT_"):
            monkeypatch.delenv(key)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    reset_config()
    yield
    reset_config()


@pytest.fixture
def match_root(tmp_path) -> Path:
    """A small corpus: three matches across regions, plus noise files."""
    root = tmp_path / "matches"
    write_match(root, "AMERICAS/week1/m1.json", make_match_document("m1", "Ascent"))
    write_match(root, "EMEA/week1/m2.json", make_match_document("m2", "Bind"))
    write_match(root, "PACIFIC/m3.json", make_match_document("m3", "Haven"))
    write_match(root, "notes/readme.txt", "not a match")
    return root


@pytest.fixture
def corrupt_root(tmp_path) -> Path:
    """One valid and one corrupt match file."""
    root = tmp_path / "mixed"
    write_match(root, "good.json", make_match_document("good"))
    write_match(root, "bad.json", "{ this is not json")
    return root
