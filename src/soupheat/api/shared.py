"""
Shared utilities for SoupHeat API.

Contains validation, request models, root resolution, and the JobStore /
JobRunner classes used across all route modules.
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from collections import OrderedDict
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal

from fastapi import HTTPException
from pydantic import BaseModel, ConfigDict, Field

from soupheat import __version__  # noqa: F401
from soupheat.core.config import get_config
from soupheat.core.errors import SoupHeatError
from soupheat.core.utils import ProgressCallback, progress_percent

logger = logging.getLogger(__name__)

# =============================================================================
# Input Validation
# =============================================================================


def validate_job_id(job_id: str) -> str:
    """Reject anything that is not a UUID with a 400."""
    try:
        uuid.UUID(job_id)
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail="Invalid job_id: must be a valid UUID") from None
    return job_id


def resolve_root(root: str | None) -> str:
    """Use the given root or the configured default. Raises HTTPException if neither."""
    if root:
        return root
    default_root = get_config().api.default_root
    if default_root:
        return default_root
    raise HTTPException(
        status_code=400,
        detail="No root given and no api.default_root configured",
    )


# =============================================================================
# Background Jobs
# =============================================================================

# Finished jobs are kept this long for polling
JOB_RETENTION_SECONDS = 3600
JOB_CAPACITY = 100


class JobStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class Job:
    job_id: str
    kind: str
    status: JobStatus = JobStatus.PENDING
    processed: int = 0
    total: int = 0
    result: Any = None
    error: str | None = None
    created_at: float = field(default_factory=time.monotonic)

    @property
    def age(self) -> float:
        return time.monotonic() - self.created_at

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "job_id": self.job_id,
            "kind": self.kind,
            "status": self.status.value,
            "progress": {
                "processed": self.processed,
                "total": self.total,
                "percentage": progress_percent(self.processed, self.total),
            },
        }
        if self.status is JobStatus.COMPLETED:
            data["result"] = self.result
        if self.error:
            data["error"] = self.error
        return data


class JobStore:
    """
    Thread-safe in-memory registry of background jobs.

    Jobs older than ``retention_seconds`` disappear, and once ``capacity``
    jobs are held the oldest are evicted to make room for new ones.
    """

    def __init__(
        self, retention_seconds: float = JOB_RETENTION_SECONDS, capacity: int = JOB_CAPACITY
    ) -> None:
        self._jobs: OrderedDict[str, Job] = OrderedDict()
        self._lock = threading.Lock()
        self.retention_seconds = retention_seconds
        self.capacity = capacity

    def _prune(self, room_for: int = 0) -> None:
        # Insertion order is creation order, so stale and surplus jobs sit at the front
        dropped = 0
        while self._jobs:
            oldest = next(iter(self._jobs.values()))
            if oldest.age <= self.retention_seconds and len(self._jobs) + room_for <= self.capacity:
                break
            self._jobs.popitem(last=False)
            dropped += 1
        if dropped:
            logger.info(f"Dropped {dropped} old job(s); {len(self._jobs)} kept")

    def create_job(self, kind: str) -> Job:
        with self._lock:
            self._prune(room_for=1)
            job = Job(job_id=str(uuid.uuid4()), kind=kind)
            self._jobs[job.job_id] = job
            return job

    def get_job(self, job_id: str) -> Job | None:
        """The job, or None when unknown or past retention."""
        with self._lock:
            self._prune()
            return self._jobs.get(job_id)

    def update_job(self, job_id: str, **changes: Any) -> None:
        """Set fields on a job; updates for jobs already dropped are ignored."""
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                return
            for name, value in changes.items():
                setattr(job, name, value)

    def list_jobs(self) -> list[Job]:
        with self._lock:
            self._prune()
            return list(self._jobs.values())


JobTask = Callable[[ProgressCallback], Any]


class JobRunner:
    """Runs jobs on a small thread pool and records their outcome in a JobStore."""

    def __init__(self, job_store: JobStore, max_workers: int = 2) -> None:
        self.job_store = job_store
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="soupheat-job")

    def _run(self, job_id: str, task: JobTask) -> None:
        def on_progress(processed: int, total: int) -> None:
            self.job_store.update_job(job_id, processed=processed, total=total)

        self.job_store.update_job(job_id, status=JobStatus.PROCESSING)
        try:
            result = task(on_progress)
        except SoupHeatError as e:
            logger.warning(f"Job {job_id} failed: {e}")
            self.job_store.update_job(job_id, status=JobStatus.FAILED, error=str(e))
        except Exception as e:
            logger.exception(f"Job {job_id} crashed")
            self.job_store.update_job(
                job_id, status=JobStatus.FAILED, error=f"Job failed ({type(e).__name__})"
            )
        else:
            self.job_store.update_job(job_id, result=result, status=JobStatus.COMPLETED)

    def submit(self, kind: str, task: JobTask) -> Job:
        """Queue task and return its job; task receives a progress callback."""
        job = self.job_store.create_job(kind)
        self._executor.submit(self._run, job.job_id, task)
        logger.info(f"Queued {kind} job {job.job_id}")
        return job

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)


# =============================================================================
# Lazy Accessors
# =============================================================================


def _get_job_store() -> JobStore:
    """Lazy import of job_store to avoid circular dependency.

    api/__init__.py creates the shared instances, and route modules are
    imported by api/__init__.py at module load time.
    """
    from soupheat.api import job_store

    return job_store


def _get_job_runner() -> JobRunner:
    from soupheat.api import job_runner

    return job_runner


def _get_library():
    from soupheat.api import library

    return library


# =============================================================================
# Pydantic Request Models
# =============================================================================


class RootRequest(BaseModel):
    """Request body naming an ingestion root."""

    root: str | None = Field(None, description="Ingestion root (default: api.default_root)")


class BatchRequest(RootRequest):
    """Request body for fetching several match details."""

    match_ids: list[str] = Field(..., description="Match identifiers, results keep this order")
    batch_size: int | None = Field(None, ge=1, description="Concurrent fetches per chunk")


class HeatmapFiltersModel(BaseModel):
    """Kill event filters; omitted fields do not filter."""

    players: list[str] | None = None
    player_mode: Literal["killer", "victim", "both"] = "both"
    weapons: list[str] | None = None
    rounds: list[int] | None = None
    time_range: tuple[float, float] | None = Field(None, description="Seconds into the round")


class HeatmapRequest(RootRequest):
    """Request body for heatmap generation."""

    match_ids: list[str] = Field(..., min_length=1)
    filters: HeatmapFiltersModel = Field(default_factory=HeatmapFiltersModel)


class ExportRequest(RootRequest):
    """Request body for downloading match details. Unknown fields are rejected."""

    model_config = ConfigDict(extra="forbid")

    match_ids: list[str] = Field(..., min_length=1)
    format: Literal["json", "csv"] | None = Field(None, description="Default: export.default_format")
