"""
SoupHeat Core - Foundation modules for match ingestion.

This module contains the fundamental components:
- constants: Team labels, region tags and engine defaults
- config: Application configuration management
- errors: Caller-visible error types
- weapons: Weapon catalog
- regions: Region inference from file paths
- documents: Raw match document model and per-file reader
- schemas: Records that cross module boundaries
- transform: Document to summary/detail transformation
- utils: Timing and progress helpers
"""

from soupheat.core.constants import (
    DEFAULT_BATCH_SIZE,
    MATCH_FILE_EXTENSIONS,
    PLAYING_TEAMS,
    WINNING_TEAM_UNKNOWN,
    Region,
    Team,
)
from soupheat.core.errors import (
    BatchExecutionError,
    MatchNotFoundError,
    RootNotFoundError,
    RootNotReadableError,
    SoupHeatError,
)
from soupheat.core.schemas import (
    KillEvent,
    Location,
    MatchDetail,
    MatchSummary,
    PlayerStats,
)

__all__ = [
    # Enums
    "Region",
    "Team",
    # Constants
    "DEFAULT_BATCH_SIZE",
    "MATCH_FILE_EXTENSIONS",
    "PLAYING_TEAMS",
    "WINNING_TEAM_UNKNOWN",
    # Errors
    "BatchExecutionError",
    "MatchNotFoundError",
    "RootNotFoundError",
    "RootNotReadableError",
    "SoupHeatError",
    # Schemas (data contracts)
    "KillEvent",
    "Location",
    "MatchDetail",
    "MatchSummary",
    "PlayerStats",
]
