"""
SoupHeat error types.

Per-file read/parse problems never surface as exceptions; they are carried
as ParseResult failures (see soupheat.core.documents). Everything here is
caller-visible.
"""

from __future__ import annotations

from pathlib import Path


class SoupHeatError(Exception):
    """Base class for caller-visible ingestion and retrieval failures."""


class RootNotFoundError(SoupHeatError):
    """The requested ingestion root does not exist or is not a directory."""

    def __init__(self, root: str | Path):
        self.root = str(root)
        super().__init__(f"Folder does not exist: {self.root}")


class RootNotReadableError(SoupHeatError):
    """The ingestion root exists but cannot be listed."""

    def __init__(self, root: str | Path):
        self.root = str(root)
        super().__init__(f"Folder is not readable: {self.root}")


class MatchNotFoundError(SoupHeatError):
    """No match document under the root carries the requested identifier."""

    def __init__(self, match_id: str):
        self.match_id = match_id
        super().__init__(f"Match not found with ID: {match_id}")


class BatchExecutionError(SoupHeatError):
    """A batch worker failed to run to completion."""
