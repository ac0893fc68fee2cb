"""
Background job route handlers.

Long loads run as jobs so clients can poll progress instead of holding a
request open.

Endpoints:
- POST /api/jobs/load: ingest summaries for a root
- POST /api/jobs/details: fetch several match details
- GET /api/jobs/{job_id}: job status, progress and result
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse

from soupheat.api.shared import (
    BatchRequest,
    RootRequest,
    _get_job_runner,
    _get_job_store,
    _get_library,
    resolve_root,
    validate_job_id,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["jobs"])


def _accepted(job_id: str, status: str) -> JSONResponse:
    return JSONResponse(
        status_code=202,
        content={"job_id": job_id, "status": status, "status_url": f"/api/jobs/{job_id}"},
    )


@router.post("/api/jobs/load", status_code=202)
async def submit_load_job(request: RootRequest) -> JSONResponse:
    """
    Queue ingestion of every match under root.

    Returns a job ID immediately (202 Accepted). Poll GET /api/jobs/{job_id}
    for progress; the result is the list of summaries.
    """
    library = _get_library()
    root = resolve_root(request.root)

    def task(on_progress):
        return [s.to_dict() for s in library.load_matches(root, on_progress)]

    job = _get_job_runner().submit("load", task)
    return _accepted(job.job_id, job.status.value)


@router.post("/api/jobs/details", status_code=202)
async def submit_details_job(request: BatchRequest) -> JSONResponse:
    """Queue a batch detail fetch. The result is the list of details in request order."""
    library = _get_library()
    root = resolve_root(request.root)
    match_ids = list(request.match_ids)

    def task(on_progress):
        details = library.get_matches(root, match_ids, request.batch_size, on_progress)
        return [d.to_dict() for d in details]

    job = _get_job_runner().submit("details", task)
    return _accepted(job.job_id, job.status.value)


@router.get("/api/jobs/{job_id}")
async def get_job_status(job_id: str) -> dict[str, Any]:
    """Get the status of a job."""
    validate_job_id(job_id)
    job = _get_job_store().get_job(job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    return job.to_dict()
