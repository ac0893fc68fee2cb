"""
Heatmap Data Module.

Filters kill events and projects them onto normalized minimap coordinates,
ready for frontend rendering. Works on one match or aggregates many.

Filter semantics (per field):
- None: no filtering on that field
- empty collection: nothing passes
- otherwise: only matching events pass

Uses coordinate transforms from radar.py.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from soupheat.core.constants import UNKNOWN_WEAPON
from soupheat.core.schemas import KillEvent, MatchDetail
from soupheat.visualization.radar import transform_coordinates

logger = logging.getLogger(__name__)

PLAYER_MODES = ("killer", "victim", "both")


@dataclass(frozen=True)
class HeatmapFilters:
    """Kill event filters."""

    players: frozenset[str] | None = None
    player_mode: str = "both"  # "killer", "victim" or "both"
    weapons: frozenset[str] | None = None
    rounds: frozenset[int] | None = None
    time_range: tuple[float, float] | None = None  # seconds into the round, inclusive

    def __post_init__(self) -> None:
        if self.player_mode not in PLAYER_MODES:
            raise ValueError(
                f"player_mode must be one of {', '.join(PLAYER_MODES)}, got {self.player_mode!r}"
            )
        if self.time_range is not None and self.time_range[0] > self.time_range[1]:
            raise ValueError(f"time_range start exceeds end: {self.time_range}")

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> HeatmapFilters:
        """Build filters from plain JSON-style values (lists instead of sets)."""
        data = data or {}
        players = data.get("players")
        weapons = data.get("weapons")
        rounds = data.get("rounds")
        time_range = data.get("time_range")
        return cls(
            players=frozenset(players) if players is not None else None,
            player_mode=data.get("player_mode", "both"),
            weapons=frozenset(weapons) if weapons is not None else None,
            rounds=frozenset(int(r) for r in rounds) if rounds is not None else None,
            time_range=(float(time_range[0]), float(time_range[1])) if time_range else None,
        )


@dataclass(frozen=True)
class HeatmapPoint:
    """A single point on a heatmap overlay."""

    x: float
    y: float
    point_type: str  # "kill" or "death"
    player_puuid: str
    weapon: str | None
    round_number: int
    match_id: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "x": round(self.x, 4),
            "y": round(self.y, 4),
            "type": self.point_type,
            "puuid": self.player_puuid,
            "weapon": self.weapon,
            "round": self.round_number,
            "match_id": self.match_id,
        }


def _passes_filters(event: KillEvent, filters: HeatmapFilters) -> bool:
    """Return True if *event* passes all active filters."""
    if filters.players is not None:
        killer = event.killer_puuid in filters.players
        victim = event.victim_puuid in filters.players
        if filters.player_mode == "killer" and not killer:
            return False
        if filters.player_mode == "victim" and not victim:
            return False
        if filters.player_mode == "both" and not (killer or victim):
            return False

    if filters.weapons is not None and event.weapon not in filters.weapons:
        return False

    if filters.rounds is not None and event.round_num not in filters.rounds:
        return False

    if filters.time_range is not None:
        seconds = event.round_time_millis / 1000
        lo, hi = filters.time_range
        if not (lo <= seconds <= hi):
            return False

    return True


def filter_kill_events(detail: MatchDetail, filters: HeatmapFilters | None = None) -> list[KillEvent]:
    """Kill events of one match that pass the filters, in match order."""
    if filters is None:
        return list(detail.kill_events)
    return [event for event in detail.kill_events if _passes_filters(event, filters)]


def generate_kill_heatmap(
    details: Iterable[MatchDetail],
    filters: HeatmapFilters | None = None,
) -> dict[str, Any]:
    """Generate kill and death heatmap data.

    Kill points sit at the killer's position, death points at the victim's.
    Positions without a projection (unknown map, placeholder coordinates)
    are dropped.

    Args:
        details: One or more matches; points from all of them are combined.
        filters: Optional kill event filters.

    Returns:
        ``{"maps": list[str], "points": list[dict], "total": int,
        "kill_events": int, "skipped": int}``
    """
    points: list[HeatmapPoint] = []
    maps: list[str] = []
    event_count = 0
    skipped = 0

    for detail in details:
        if detail.map not in maps:
            maps.append(detail.map)

        for event in filter_kill_events(detail, filters):
            event_count += 1
            for point_type, puuid, location in (
                ("kill", event.killer_puuid, event.killer_location),
                ("death", event.victim_puuid, event.victim_location),
            ):
                pos = transform_coordinates(location.x, location.y, detail.map)
                if pos is None:
                    skipped += 1
                    continue
                points.append(
                    HeatmapPoint(
                        x=pos[0],
                        y=pos[1],
                        point_type=point_type,
                        player_puuid=puuid,
                        weapon=event.weapon,
                        round_number=event.round_num,
                        match_id=detail.match_id,
                    )
                )

    if len(maps) > 1:
        logger.warning(f"Heatmap combines matches from several maps: {', '.join(maps)}")
    logger.debug(f"Heatmap: {len(points)} points from {event_count} kill events ({skipped} skipped)")

    return {
        "maps": maps,
        "points": [p.to_dict() for p in points],
        "total": len(points),
        "kill_events": event_count,
        "skipped": skipped,
    }


def filter_options(details: Iterable[MatchDetail]) -> dict[str, Any]:
    """Values available to the filters across the given matches.

    Returns:
        ``{"players": [{"puuid", "name", "agent", "team"}], "weapons": [str],
        "rounds": [int]}``; only active players (non-observers with an agent)
        are listed and unknown weapons are left out.
    """
    players: dict[str, dict[str, Any]] = {}
    weapons: set[str] = set()
    rounds: set[int] = set()

    for detail in details:
        for player in detail.players:
            if player.is_observer or not player.agent or player.puuid in players:
                continue
            players[player.puuid] = {
                "puuid": player.puuid,
                "name": player.display_name,
                "agent": player.agent,
                "team": player.team,
            }
        for event in detail.kill_events:
            if event.weapon is not None and event.weapon != UNKNOWN_WEAPON:
                weapons.add(event.weapon)
            rounds.add(event.round_num)

    return {
        "players": list(players.values()),
        "weapons": sorted(weapons),
        "rounds": sorted(rounds),
    }
