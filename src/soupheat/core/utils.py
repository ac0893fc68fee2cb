"""Timing and progress helpers shared by the indexer, ingestion and jobs."""

import logging
import time
from collections.abc import Callable
from functools import wraps
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

# on_progress(processed, total)
ProgressCallback = Callable[[int, int], None]


def timed(func: F) -> F:
    """Log how long each call to ``func`` takes."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        started = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            logger.info(f"{func.__qualname__} took {time.perf_counter() - started:.3f}s")

    return wrapper  # type: ignore


class PerformanceMonitor:
    """
    Times a ``with`` block and logs the outcome.

    ``elapsed`` holds the duration in seconds once the block exits.
    Exceptions are logged and re-raised.
    """

    def __init__(self, label: str, level: int = logging.INFO):
        self.label = label
        self.level = level
        self.elapsed = 0.0
        self._started = 0.0

    def __enter__(self) -> "PerformanceMonitor":
        self._started = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.elapsed = time.perf_counter() - self._started
        if exc is None:
            logger.log(self.level, f"{self.label}: {self.elapsed:.3f}s")
        else:
            logger.error(f"{self.label}: failed after {self.elapsed:.3f}s ({exc})")
        return False


def progress_percent(processed: int, total: int) -> int:
    """Whole-number completion percentage; an empty workload counts as done."""
    if total <= 0:
        return 100
    return min(100, round(processed / total * 100))
