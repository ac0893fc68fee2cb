"""
SoupHeat Data Contracts

Every record that crosses a module boundary is defined here.

Producers: core/transform.py
Consumers: pipeline/, infra/parallel.py, visualization/, export.py, api/, cli.py

Records are immutable values. to_dict() returns JSON-ready primitives with
timestamps as ISO-8601 UTC strings.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any


def _iso_utc(value: datetime) -> str:
    """Format an aware UTC datetime as ISO-8601 with a Z suffix."""
    return value.isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class Location:
    """A point in map coordinate space."""

    x: int
    y: int

    def to_dict(self) -> dict[str, int]:
        return {"x": self.x, "y": self.y}


ORIGIN = Location(0, 0)


# ============================================================
# LIST VIEW
# ============================================================


@dataclass(frozen=True)
class MatchSummary:
    """Lightweight match record for list views. One per source file."""

    match_id: str
    map: str
    region: str
    game_start: datetime
    teams: tuple[str, ...]  # distinct "Blue"/"Red" in first-seen order
    score: str  # "<blueWins>-<redWins>"

    def to_dict(self) -> dict[str, Any]:
        return {
            "match_id": self.match_id,
            "map": self.map,
            "region": self.region,
            "game_start": _iso_utc(self.game_start),
            "teams": list(self.teams),
            "score": self.score,
        }


# ============================================================
# DETAIL VIEW
# ============================================================


@dataclass(frozen=True)
class PlayerStats:
    """Per-player match statistics."""

    puuid: str
    game_name: str
    tag_line: str
    agent: str | None
    team: str
    team_id: str
    score: int = 0
    kills: int = 0
    deaths: int = 0
    assists: int = 0
    rounds_played: int = 0
    is_observer: bool = False

    @property
    def display_name(self) -> str:
        return f"{self.game_name}#{self.tag_line}" if self.tag_line else self.game_name

    def to_dict(self) -> dict[str, Any]:
        return {
            "puuid": self.puuid,
            "game_name": self.game_name,
            "tag_line": self.tag_line,
            "agent": self.agent,
            "team": self.team,
            "team_id": self.team_id,
            "score": self.score,
            "kills": self.kills,
            "deaths": self.deaths,
            "assists": self.assists,
            "rounds_played": self.rounds_played,
            "is_observer": self.is_observer,
        }


@dataclass(frozen=True)
class KillEvent:
    """A kill with killer and victim positions, used for heatmaps."""

    killer_puuid: str
    victim_puuid: str
    weapon: str | None
    killer_location: Location
    victim_location: Location
    round_num: int
    round_time_millis: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "killer_puuid": self.killer_puuid,
            "victim_puuid": self.victim_puuid,
            "weapon": self.weapon,
            "killer_location": self.killer_location.to_dict(),
            "victim_location": self.victim_location.to_dict(),
            "round_num": self.round_num,
            "round_time_millis": self.round_time_millis,
        }


@dataclass(frozen=True)
class MatchDetail:
    """Full match record: players and positional kill events."""

    match_id: str
    map: str
    region: str
    game_start: datetime
    game_length_millis: int
    rounds_played: int
    winning_team: str
    players: tuple[PlayerStats, ...]
    kill_events: tuple[KillEvent, ...]

    def player(self, puuid: str) -> PlayerStats | None:
        """Find a player by puuid."""
        for player in self.players:
            if player.puuid == puuid:
                return player
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "match_id": self.match_id,
            "map": self.map,
            "region": self.region,
            "game_start": _iso_utc(self.game_start),
            "game_length_millis": self.game_length_millis,
            "rounds_played": self.rounds_played,
            "winning_team": self.winning_team,
            "players": [p.to_dict() for p in self.players],
            "kill_events": [k.to_dict() for k in self.kill_events],
        }
