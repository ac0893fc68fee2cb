"""
Export Functionality for SoupHeat

Provides export formats for match data:
- JSON: full match details, programmatic access
- CSV: one row per kill event, spreadsheet friendly
- Heatmap: point data as JSON or CSV (chosen by file suffix)

Every writer goes through write_binary_file, which creates parent
directories and replaces the target atomically.
"""

from __future__ import annotations

import csv
import json
import logging
import os
import tempfile
from collections.abc import Iterable
from datetime import UTC, datetime
from io import StringIO
from pathlib import Path
from typing import Any

from soupheat import __version__
from soupheat.core.schemas import MatchDetail

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("json", "csv")

KILL_EVENT_COLUMNS = [
    "match_id",
    "map",
    "round_num",
    "round_time_millis",
    "killer_puuid",
    "killer_name",
    "killer_team",
    "victim_puuid",
    "victim_name",
    "victim_team",
    "weapon",
    "killer_x",
    "killer_y",
    "victim_x",
    "victim_y",
]


# ============================================================================
# File Writing
# ============================================================================


def write_binary_file(path: str | Path, data: bytes) -> Path:
    """
    Write bytes to path, creating parent directories.

    The data lands in a temporary sibling first and is moved into place, so
    readers never see a half-written file.

    Returns:
        The written path
    """
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp_name, target)
    except OSError:
        Path(tmp_name).unlink(missing_ok=True)
        raise

    logger.debug(f"Wrote {len(data)} bytes to {target}")
    return target


def _write_text(path: str | Path, text: str) -> Path:
    return write_binary_file(path, text.encode("utf-8"))


def _metadata(kind: str) -> dict[str, Any]:
    return {
        "exported_at": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
        "format": kind,
        "version": __version__,
    }


# ============================================================================
# JSON Export
# ============================================================================


def export_details_json(
    details: Iterable[MatchDetail],
    output_path: str | Path | None = None,
    indent: int = 2,
    include_metadata: bool = True,
) -> str:
    """
    Export match details to JSON format.

    Args:
        details: Match details to export
        output_path: Optional path to write the file
        indent: JSON indentation level
        include_metadata: Whether to include export metadata

    Returns:
        JSON string
    """
    export_data: dict[str, Any] = {"matches": [d.to_dict() for d in details]}
    if include_metadata:
        export_data = {"_metadata": _metadata("soupheat_matches"), **export_data}

    json_str = json.dumps(export_data, indent=indent)

    if output_path:
        _write_text(output_path, json_str)
        logger.info(f"Exported {len(export_data['matches'])} matches to JSON: {output_path}")

    return json_str


# ============================================================================
# CSV Export
# ============================================================================


def kill_event_rows(details: Iterable[MatchDetail]) -> list[dict[str, Any]]:
    """Flatten kill events into rows keyed by KILL_EVENT_COLUMNS."""
    rows = []
    for detail in details:
        for event in detail.kill_events:
            killer = detail.player(event.killer_puuid)
            victim = detail.player(event.victim_puuid)
            rows.append(
                {
                    "match_id": detail.match_id,
                    "map": detail.map,
                    "round_num": event.round_num,
                    "round_time_millis": event.round_time_millis,
                    "killer_puuid": event.killer_puuid,
                    "killer_name": killer.display_name if killer else "",
                    "killer_team": killer.team if killer else "",
                    "victim_puuid": event.victim_puuid,
                    "victim_name": victim.display_name if victim else "",
                    "victim_team": victim.team if victim else "",
                    "weapon": event.weapon or "",
                    "killer_x": event.killer_location.x,
                    "killer_y": event.killer_location.y,
                    "victim_x": event.victim_location.x,
                    "victim_y": event.victim_location.y,
                }
            )
    return rows


def export_kill_events_csv(
    details: Iterable[MatchDetail],
    output_path: str | Path | None = None,
    delimiter: str = ",",
    include_header: bool = True,
) -> str:
    """
    Export kill events to CSV format, one row per kill.

    Args:
        details: Match details whose kill events are exported
        output_path: Optional path to write the file
        delimiter: CSV delimiter character
        include_header: Whether to include column headers

    Returns:
        CSV string
    """
    rows = kill_event_rows(details)

    output = StringIO()
    writer = csv.DictWriter(output, fieldnames=KILL_EVENT_COLUMNS, delimiter=delimiter)
    if include_header:
        writer.writeheader()
    writer.writerows(rows)

    csv_str = output.getvalue()

    if output_path:
        _write_text(output_path, csv_str)
        logger.info(f"Exported {len(rows)} kill events to CSV: {output_path}")

    return csv_str


# ============================================================================
# Heatmap Export
# ============================================================================


def export_heatmap(
    heatmap: dict[str, Any],
    output_path: str | Path,
    indent: int = 2,
    delimiter: str = ",",
) -> Path:
    """
    Export heatmap data from generate_kill_heatmap.

    A .csv suffix writes the points as CSV; anything else writes JSON.

    Returns:
        The written path
    """
    path = Path(output_path)

    if path.suffix.lower() == ".csv":
        columns = ["x", "y", "type", "puuid", "weapon", "round", "match_id"]
        output = StringIO()
        writer = csv.DictWriter(output, fieldnames=columns, delimiter=delimiter, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(heatmap.get("points", []))
        _write_text(path, output.getvalue())
    else:
        payload = {"_metadata": _metadata("soupheat_heatmap"), **heatmap}
        _write_text(path, json.dumps(payload, indent=indent))

    logger.info(f"Exported heatmap ({heatmap.get('total', 0)} points) to: {path}")
    return path


def export_matches(
    details: list[MatchDetail],
    output_path: str | Path,
    format: str = "json",
    indent: int = 2,
    delimiter: str = ",",
) -> Path:
    """
    Export match details in the requested format.

    Args:
        details: Match details to export
        output_path: Destination file
        format: "json" (full details) or "csv" (kill events)

    Returns:
        The written path
    """
    fmt = format.lower()
    if fmt == "json":
        export_details_json(details, output_path, indent=indent)
    elif fmt == "csv":
        export_kill_events_csv(details, output_path, delimiter=delimiter)
    else:
        raise ValueError(f"Unknown export format: {format}. Use one of: {', '.join(EXPORT_FORMATS)}")
    return Path(output_path)
