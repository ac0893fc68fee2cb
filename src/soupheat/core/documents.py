"""
Raw match document model and per-file reader.

Match documents are JSON with three top-level blocks: matchInfo, players
and roundResults. The pydantic models below mirror that layout (camelCase
aliases) and define the default for every optional field, so transformation
code never has to guess about missing data.

Reading a file never raises for per-file problems. The outcome is a
ParseResult; callers decide whether a failure is skipped or surfaced.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)


class _RawModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)


class RawLocation(_RawModel):
    x: int
    y: int


class RawPlayerLocation(_RawModel):
    puuid: str
    location: RawLocation


class RawFinishingDamage(_RawModel):
    damage_item: str | None = Field(None, alias="damageItem")


class RawKill(_RawModel):
    killer: str
    victim: str
    finishing_damage: RawFinishingDamage | None = Field(None, alias="finishingDamage")
    killer_location: RawLocation | None = Field(None, alias="killerLocation")
    victim_location: RawLocation | None = Field(None, alias="victimLocation")
    time_since_round_start_millis: int = Field(alias="timeSinceRoundStartMillis")
    player_locations: list[RawPlayerLocation] = Field(default_factory=list, alias="playerLocations")


class RawPlayerRoundStats(_RawModel):
    puuid: str
    kills: list[RawKill] = Field(default_factory=list)


class RawRoundResult(_RawModel):
    round_num: int = Field(alias="roundNum")
    winning_team: str | None = Field(None, alias="winningTeam")
    player_stats: list[RawPlayerRoundStats] = Field(default_factory=list, alias="playerStats")


class RawStats(_RawModel):
    score: int | None = None
    kills: int | None = None
    deaths: int | None = None
    assists: int | None = None
    rounds_played: int | None = Field(None, alias="roundsPlayed")


class RawPlayer(_RawModel):
    puuid: str
    game_name: str = Field(alias="gameName")
    tag_line: str = Field(alias="tagLine")
    character_id: str | None = Field(None, alias="characterId")
    team_id: str = Field(alias="teamId")
    stats: RawStats | None = None


class RawMatchInfo(_RawModel):
    match_id: str = Field(alias="matchId")
    map: str
    game_start_millis: int = Field(alias="gameStartMillis")
    game_length_millis: int = Field(alias="gameLengthMillis")


class MatchDocument(_RawModel):
    """A complete match document as read from disk."""

    match_info: RawMatchInfo = Field(alias="matchInfo")
    players: list[RawPlayer]
    round_results: list[RawRoundResult] = Field(alias="roundResults")


class _MatchIdInfo(_RawModel):
    match_id: str = Field(alias="matchId")


class _MatchIdProbe(_RawModel):
    """Only the identifier; the rest of the document is not validated."""

    match_info: _MatchIdInfo = Field(alias="matchInfo")


# ============================================================
# PER-FILE PARSE RESULT
# ============================================================


@dataclass(frozen=True)
class ParseResult:
    """Outcome of reading one match file: a document or a failure cause."""

    path: Path
    document: MatchDocument | None = None
    error: str | None = None
    stage: str | None = None  # "read" or "parse" on failure

    @property
    def ok(self) -> bool:
        return self.document is not None

    @classmethod
    def success(cls, path: Path, document: MatchDocument) -> ParseResult:
        return cls(path=path, document=document)

    @classmethod
    def failure(cls, path: Path, stage: str, error: str) -> ParseResult:
        return cls(path=path, error=error, stage=stage)


def parse_match_document(content: str | bytes) -> MatchDocument:
    """Validate JSON text as a match document. Raises pydantic.ValidationError."""
    return MatchDocument.model_validate_json(content)


def read_match_file(path: str | Path) -> ParseResult:
    """
    Read and parse a single match file.

    Args:
        path: Path to a match JSON file

    Returns:
        ParseResult with the document, or the failing stage and cause
    """
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        return ParseResult.failure(path, "read", str(e))

    try:
        document = parse_match_document(content)
    except ValidationError as e:
        first = e.errors()[0]
        where = ".".join(str(part) for part in first["loc"]) or "document"
        return ParseResult.failure(path, "parse", f"{where}: {first['msg']}")

    return ParseResult.success(path, document)


def read_match_id(path: str | Path) -> str | None:
    """Extract only matchInfo.matchId from a file; None if unreadable or malformed."""
    try:
        content = Path(path).read_bytes()
        return _MatchIdProbe.model_validate_json(content).match_info.match_id
    except (OSError, ValidationError) as e:
        logger.debug(f"No match id in {path}: {e}")
        return None
