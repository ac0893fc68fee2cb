"""
Heatmap route handlers.

Endpoints:
- GET /api/maps: maps with coordinate transforms
- GET /api/weapons: weapon names usable as heatmap filters
- POST /api/heatmap: kill/death heatmap over one or more matches
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter
from fastapi.concurrency import run_in_threadpool

from soupheat.api.shared import HeatmapRequest, _get_library, resolve_root
from soupheat.core.weapons import weapon_names
from soupheat.visualization.heatmaps import HeatmapFilters, filter_options, generate_kill_heatmap
from soupheat.visualization.radar import available_maps, map_image_url

logger = logging.getLogger(__name__)

router = APIRouter(tags=["heatmaps"])


@router.get("/api/maps")
async def list_maps() -> dict[str, Any]:
    """List maps that heatmap points can be projected onto."""
    maps = [{"name": name, "image_url": map_image_url(name)} for name in available_maps()]
    return {"maps": maps, "total": len(maps)}


@router.get("/api/weapons")
async def list_weapons() -> dict[str, Any]:
    """Weapon names accepted by the heatmap weapon filter."""
    weapons = weapon_names()
    return {"weapons": weapons, "total": len(weapons)}


@router.post("/api/heatmap")
async def create_heatmap(request: HeatmapRequest) -> dict[str, Any]:
    """Generate heatmap points for the requested matches."""
    library = _get_library()
    root = resolve_root(request.root)
    filters = HeatmapFilters.from_dict(request.filters.model_dump())

    details = await run_in_threadpool(library.get_matches, root, request.match_ids)

    heatmap = generate_kill_heatmap(details, filters)
    heatmap["options"] = filter_options(details)
    heatmap["image_url"] = map_image_url(heatmap["maps"][0]) if heatmap["maps"] else None
    return heatmap
