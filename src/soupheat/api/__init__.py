"""
SoupHeat Web API

FastAPI application serving match summaries, match details and heatmap data
from local match folders.

This package exposes:
- app: The FastAPI application (served by uvicorn via `soupheat serve`)
- library: The shared MatchLibrary (one match index per process)
- job_store / job_runner: Background job tracking (used by tests)
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from soupheat.api.shared import JobRunner, JobStore, __version__
from soupheat.core.config import configure_logging, get_config
from soupheat.core.errors import (
    BatchExecutionError,
    MatchNotFoundError,
    RootNotFoundError,
    RootNotReadableError,
)
from soupheat.pipeline.library import MatchLibrary

configure_logging(get_config().logging)
logger = logging.getLogger(__name__)

# =============================================================================
# FastAPI App Creation
# =============================================================================

app = FastAPI(
    title="SoupHeat API",
    description="Match replay ingestion and retrieval for kill heatmaps",
    version=__version__,
)

# =============================================================================
# CORS Configuration
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# =============================================================================
# GZip Middleware
# =============================================================================

app.add_middleware(GZipMiddleware, minimum_size=1000)

# =============================================================================
# Global Instances (tests import these)
# =============================================================================

library = MatchLibrary()
job_store = JobStore()
job_runner = JobRunner(job_store, max_workers=get_config().api.job_workers)

# =============================================================================
# Exception Handlers
# =============================================================================


def _error(status_code: int, error: str, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error, "detail": str(exc)})


@app.exception_handler(RootNotFoundError)
async def root_not_found_handler(request: Request, exc: RootNotFoundError) -> JSONResponse:
    return _error(404, "Root not found", exc)


@app.exception_handler(RootNotReadableError)
async def root_not_readable_handler(request: Request, exc: RootNotReadableError) -> JSONResponse:
    return _error(403, "Root not readable", exc)


@app.exception_handler(MatchNotFoundError)
async def match_not_found_handler(request: Request, exc: MatchNotFoundError) -> JSONResponse:
    return _error(404, "Match not found", exc)


@app.exception_handler(BatchExecutionError)
async def batch_execution_handler(request: Request, exc: BatchExecutionError) -> JSONResponse:
    logger.error(f"Batch execution failed for {request.method} {request.url.path}: {exc}")
    return _error(500, "Batch execution failed", exc)


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    return _error(400, "Invalid request", exc)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Global exception handler to prevent information disclosure."""
    logger.exception(f"Unhandled exception for {request.method} {request.url.path}")

    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "detail": "An unexpected error occurred. Please try again later.",
        },
    )


# =============================================================================
# Include Route Modules
# =============================================================================

from soupheat.api.routes_heatmap import router as heatmap_router  # noqa: E402
from soupheat.api.routes_jobs import router as jobs_router  # noqa: E402
from soupheat.api.routes_match import router as match_router  # noqa: E402
from soupheat.api.routes_misc import router as misc_router  # noqa: E402

app.include_router(heatmap_router)
app.include_router(jobs_router)
app.include_router(match_router)
app.include_router(misc_router)
