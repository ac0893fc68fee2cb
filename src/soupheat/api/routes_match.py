"""
Match route handlers.

Endpoints:
- GET /api/matches: match summaries for a root (rebuilds the index)
- POST /api/matches/batch: several match details, in request order
- GET /api/matches/{match_id}: one match detail
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Query
from fastapi.concurrency import run_in_threadpool

from soupheat.api.shared import BatchRequest, _get_library, resolve_root
from soupheat.pipeline.library import filter_summaries

logger = logging.getLogger(__name__)

router = APIRouter(tags=["matches"])


# NOTE: Static path routes must come BEFORE parameterized routes to avoid conflicts


@router.get("/api/matches")
async def list_matches(
    root: str | None = Query(None, description="Ingestion root"),
    map: str | None = Query(None, description="Only matches on this map"),
    region: str | None = Query(None, description="Only matches from this region"),
) -> dict[str, Any]:
    """List match summaries under root and refresh the match index."""
    library = _get_library()
    root = resolve_root(root)

    summaries = await run_in_threadpool(library.load_matches, root)
    selected = filter_summaries(summaries, map_name=map, region=region)

    return {
        "root": root,
        "total": len(summaries),
        "count": len(selected),
        "matches": [s.to_dict() for s in selected],
    }


@router.post("/api/matches/batch")
async def get_match_batch(request: BatchRequest) -> dict[str, Any]:
    """Fetch several match details; a missing identifier fails the whole batch."""
    library = _get_library()
    root = resolve_root(request.root)

    details = await run_in_threadpool(
        library.get_matches, root, request.match_ids, request.batch_size
    )

    return {"count": len(details), "matches": [d.to_dict() for d in details]}


@router.get("/api/matches/{match_id}")
async def get_match(
    match_id: str,
    root: str | None = Query(None, description="Ingestion root"),
) -> dict[str, Any]:
    """Fetch the detail of one match."""
    library = _get_library()
    root = resolve_root(root)

    detail = await run_in_threadpool(library.get_match, root, match_id)
    return detail.to_dict()
