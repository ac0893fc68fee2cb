"""
Record Transformer

Turns a parsed MatchDocument into the two record shapes served to the
presentation layer:
- MatchSummary: teams, score and start time for list views
- MatchDetail: player stats and positional kill events for heatmaps

Both entry points are pure functions of (path, document). The path only
contributes the region tag.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path

from soupheat.core.constants import (
    PLAYING_TEAMS,
    WINNING_TEAM_DRAW,
    WINNING_TEAM_UNKNOWN,
    Team,
)
from soupheat.core.documents import MatchDocument, RawKill, RawPlayer, RawRoundResult
from soupheat.core.regions import classify_region
from soupheat.core.schemas import (
    ORIGIN,
    KillEvent,
    Location,
    MatchDetail,
    MatchSummary,
    PlayerStats,
)
from soupheat.core.weapons import resolve_weapon

logger = logging.getLogger(__name__)


# ============================================================================
# Shared helpers
# ============================================================================


def millis_to_utc(millis: int) -> datetime:
    """Convert epoch milliseconds to an aware UTC datetime; out-of-range values map to now."""
    try:
        return datetime.fromtimestamp(millis / 1000, tz=UTC)
    except (OverflowError, OSError, ValueError) as e:
        logger.debug(f"Invalid start time {millis}: {e}; using current time")
        return datetime.now(UTC)


def tally_round_wins(document: MatchDocument) -> dict[str, int]:
    """Count round wins per playing team. Unknown winner labels are ignored."""
    wins = {team: 0 for team in PLAYING_TEAMS}
    for round_result in document.round_results:
        if round_result.winning_team in wins:
            wins[round_result.winning_team] += 1
    return wins


def format_score(wins: dict[str, int]) -> str:
    """Format a win tally as "<blue>-<red>"."""
    return f"{wins.get(Team.BLUE, 0)}-{wins.get(Team.RED, 0)}"


def derive_winning_team(wins: dict[str, int]) -> str:
    """Team with more round wins, or "Draw" on equal tallies."""
    blue, red = wins.get(Team.BLUE, 0), wins.get(Team.RED, 0)
    if blue > red:
        return Team.BLUE.value
    if red > blue:
        return Team.RED.value
    return WINNING_TEAM_DRAW


def _distinct_teams(players: list[RawPlayer]) -> tuple[str, ...]:
    teams: list[str] = []
    for player in players:
        if player.team_id in PLAYING_TEAMS and player.team_id not in teams:
            teams.append(player.team_id)
    return tuple(teams)


def _to_location(raw) -> Location:
    return Location(raw.x, raw.y)


# ============================================================================
# Summary
# ============================================================================


def to_summary(path: str | Path, document: MatchDocument) -> MatchSummary:
    """
    Build the list-view summary of a match.

    Args:
        path: File the document was read from (region is inferred from it)
        document: Parsed match document

    Returns:
        MatchSummary
    """
    info = document.match_info
    return MatchSummary(
        match_id=info.match_id,
        map=info.map,
        region=classify_region(path),
        game_start=millis_to_utc(info.game_start_millis),
        teams=_distinct_teams(document.players),
        score=format_score(tally_round_wins(document)),
    )


# ============================================================================
# Detail
# ============================================================================


def to_player_stats(player: RawPlayer) -> PlayerStats:
    """Map a raw player entry; missing stats default to 0."""
    stats = player.stats

    def stat(name: str) -> int:
        value = getattr(stats, name) if stats is not None else None
        return value if value is not None else 0

    return PlayerStats(
        puuid=player.puuid,
        game_name=player.game_name,
        tag_line=player.tag_line,
        agent=player.character_id,
        team=player.team_id,
        team_id=player.team_id,
        score=stat("score"),
        kills=stat("kills"),
        deaths=stat("deaths"),
        assists=stat("assists"),
        rounds_played=stat("rounds_played"),
        is_observer=player.team_id not in PLAYING_TEAMS,
    )


def _to_kill_event(kill: RawKill, round_num: int) -> KillEvent | None:
    # No heatmap point without a victim position
    if kill.victim_location is None:
        return None

    damage_item = kill.finishing_damage.damage_item if kill.finishing_damage else None

    killer_location = ORIGIN
    for snapshot in kill.player_locations:
        if snapshot.puuid == kill.killer:
            killer_location = _to_location(snapshot.location)
            break

    return KillEvent(
        killer_puuid=kill.killer,
        victim_puuid=kill.victim,
        weapon=resolve_weapon(damage_item),
        killer_location=killer_location,
        victim_location=_to_location(kill.victim_location),
        round_num=round_num,
        round_time_millis=kill.time_since_round_start_millis,
    )


def extract_kill_events(round_results: list[RawRoundResult]) -> list[KillEvent]:
    """
    Reconstruct kill events in source order: rounds, then players, then kills.

    Kills without a victim location are dropped. The killer location comes
    from the kill's player-location snapshot, or (0, 0) when the killer is
    missing from it.
    """
    events: list[KillEvent] = []
    for round_result in round_results:
        for player_round in round_result.player_stats:
            for kill in player_round.kills:
                event = _to_kill_event(kill, round_result.round_num)
                if event is not None:
                    events.append(event)
    return events


def to_detail(
    path: str | Path,
    document: MatchDocument,
    *,
    derive_winner: bool = False,
) -> MatchDetail:
    """
    Build the full match detail.

    Args:
        path: File the document was read from (region is inferred from it)
        document: Parsed match document
        derive_winner: Derive winning_team from round wins instead of the
            "Unknown" placeholder

    Returns:
        MatchDetail
    """
    info = document.match_info
    winning_team = (
        derive_winning_team(tally_round_wins(document)) if derive_winner else WINNING_TEAM_UNKNOWN
    )
    return MatchDetail(
        match_id=info.match_id,
        map=info.map,
        region=classify_region(path),
        game_start=millis_to_utc(info.game_start_millis),
        game_length_millis=info.game_length_millis,
        rounds_played=len(document.round_results),
        winning_team=winning_team,
        players=tuple(to_player_stats(p) for p in document.players),
        kill_events=tuple(extract_kill_events(document.round_results)),
    )
