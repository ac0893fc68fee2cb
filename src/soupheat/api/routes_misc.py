"""
Miscellaneous route handlers.

Endpoints:
- GET /health: health check
- GET /api/index: match index stats
- POST /api/index/rebuild: rebuild the match index for a root
- POST /api/export: match details as a JSON or CSV download
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from fastapi import APIRouter, Query
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import Response

from soupheat.api.shared import ExportRequest, RootRequest, __version__, _get_library, resolve_root
from soupheat.core.config import get_config
from soupheat.export import export_details_json, export_kill_events_csv

logger = logging.getLogger(__name__)

router = APIRouter(tags=["misc"])


# =============================================================================
# Health & Info
# =============================================================================


@router.get("/health")
async def health() -> dict[str, Any]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


# =============================================================================
# Match Index
# =============================================================================


@router.get("/api/index")
async def get_index_stats(
    root: str | None = Query(None, description="Build the index for this root first if needed"),
) -> dict[str, Any]:
    """Get match index statistics."""
    library = _get_library()
    index = library.index

    if root is not None and (not index.is_built or index.root != Path(root).absolute()):
        return await run_in_threadpool(library.build_index, root)
    return index.stats()


@router.post("/api/index/rebuild")
async def rebuild_index(request: RootRequest) -> dict[str, Any]:
    """Rebuild the match index from a full scan of root."""
    library = _get_library()
    root = resolve_root(request.root)
    return await run_in_threadpool(library.build_index, root)


# =============================================================================
# Export
# =============================================================================


_EXPORT_MEDIA_TYPES = {"json": "application/json", "csv": "text/csv"}


@router.post("/api/export")
async def export_details(request: ExportRequest) -> Response:
    """
    Download match details as a JSON or CSV attachment.

    Nothing is written on the server; the file is the response body.
    """
    library = _get_library()
    root = resolve_root(request.root)
    export_config = get_config().export
    fmt = request.format or export_config.default_format

    if fmt not in _EXPORT_MEDIA_TYPES:
        raise ValueError(f"Unknown export format: {fmt}")

    details = await run_in_threadpool(library.get_matches, root, request.match_ids)
    if fmt == "csv":
        content = export_kill_events_csv(details, delimiter=export_config.csv_delimiter)
    else:
        content = export_details_json(details, indent=export_config.json_indent)

    filename = "kill_events.csv" if fmt == "csv" else "matches.json"
    return Response(
        content=content,
        media_type=_EXPORT_MEDIA_TYPES[fmt],
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "X-Match-Count": str(len(details)),
        },
    )
