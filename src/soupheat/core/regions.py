"""Region inference from match file paths."""

from __future__ import annotations

from pathlib import Path

from soupheat.core.constants import REGION_TOKENS, Region


def classify_region(path: str | Path) -> str:
    """
    Infer the region tag from a file path.

    The first region token found in the path wins, checked in the order
    AMERICAS, EMEA, PACIFIC, CHINA. Paths without a token are UNKNOWN.

    Args:
        path: Match file path (absolute or relative)

    Returns:
        Region tag string
    """
    path_str = str(path)
    for token in REGION_TOKENS:
        if token.value in path_str:
            return token.value
    return Region.UNKNOWN.value
