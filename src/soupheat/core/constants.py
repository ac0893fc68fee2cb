"""
SoupHeat - Constants

Team labels, region tags, file conventions and retrieval defaults shared by
the ingestion and retrieval engine.
"""

from enum import StrEnum


class Team(StrEnum):
    """Canonical team labels used in match documents."""

    BLUE = "Blue"
    RED = "Red"


class Region(StrEnum):
    """
    Region tags inferred from file path conventions.

    Declaration order is the classifier's priority order.
    """

    AMERICAS = "AMERICAS"
    EMEA = "EMEA"
    PACIFIC = "PACIFIC"
    CHINA = "CHINA"
    UNKNOWN = "UNKNOWN"


# Teams that count as participants; anything else is an observer
PLAYING_TEAMS: tuple[str, ...] = (Team.BLUE.value, Team.RED.value)

# Region tokens searched in a path, in priority order
REGION_TOKENS: tuple[Region, ...] = (
    Region.AMERICAS,
    Region.EMEA,
    Region.PACIFIC,
    Region.CHINA,
)

# Match document files
MATCH_FILE_EXTENSIONS: tuple[str, ...] = (".json",)

# Placeholder for MatchDetail.winning_team when it is not derived
WINNING_TEAM_UNKNOWN = "Unknown"
WINNING_TEAM_DRAW = "Draw"

# Ingestion progress is reported after the first file, every N files and the last
DEFAULT_PROGRESS_EVERY = 10

# Batch retrieval
DEFAULT_BATCH_SIZE = 10
DEFAULT_BATCH_PAUSE_SECONDS = 0.01

# Weapon names the presentation layer treats as "no weapon"
UNKNOWN_WEAPON = "Unknown"
