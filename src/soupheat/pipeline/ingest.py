"""
Ingestion Pipeline - summaries for every match document under a root.

Scanning, reading and transformation run sequentially. A file that cannot
be read or parsed is logged and skipped; partial success is the normal
outcome. Only a bad root fails the whole call.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from soupheat.core.constants import DEFAULT_PROGRESS_EVERY, MATCH_FILE_EXTENSIONS
from soupheat.core.documents import ParseResult, read_match_file
from soupheat.core.schemas import MatchSummary
from soupheat.core.transform import to_summary
from soupheat.core.utils import PerformanceMonitor, ProgressCallback
from soupheat.infra.scanner import scan_match_files, validate_root

logger = logging.getLogger(__name__)


@dataclass
class IngestReport:
    """Result of ingesting one root."""

    root: Path
    total_files: int
    summaries: list[MatchSummary] = field(default_factory=list)
    skipped: list[ParseResult] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def parsed(self) -> int:
        return len(self.summaries)

    def to_dict(self) -> dict:
        return {
            "root": str(self.root),
            "total_files": self.total_files,
            "parsed": self.parsed,
            "skipped": [
                {"path": str(r.path), "stage": r.stage, "error": r.error} for r in self.skipped
            ],
            "duration_seconds": round(self.duration_seconds, 3),
        }


def should_report(processed: int, total: int, every: int = DEFAULT_PROGRESS_EVERY) -> bool:
    """Progress is reported after the first file, every `every` files and the last file."""
    return processed == 1 or processed == total or (every > 0 and processed % every == 0)


def ingest_report(
    root: str | Path,
    on_progress: ProgressCallback | None = None,
    *,
    extensions: Iterable[str] = MATCH_FILE_EXTENSIONS,
    progress_every: int = DEFAULT_PROGRESS_EVERY,
) -> IngestReport:
    """
    Ingest every match document under root.

    Args:
        root: Ingestion root directory
        on_progress: Called with (processed, total)
        extensions: File suffixes treated as match documents
        progress_every: Progress reporting interval in files

    Returns:
        IngestReport with summaries in discovery order and skipped files

    Raises:
        RootNotFoundError: Root does not exist
    """
    root_path = validate_root(root)

    with PerformanceMonitor(f"Ingesting {root_path}") as monitor:
        files = scan_match_files(root_path, extensions)
        report = IngestReport(root=root_path, total_files=len(files))

        for processed, file_path in enumerate(files, start=1):
            result = read_match_file(file_path)
            if result.ok:
                report.summaries.append(to_summary(file_path, result.document))
            else:
                logger.warning(f"Skipping {file_path} ({result.stage} error): {result.error}")
                report.skipped.append(result)

            if on_progress is not None and should_report(processed, report.total_files, progress_every):
                on_progress(processed, report.total_files)

    report.duration_seconds = monitor.elapsed
    logger.info(
        f"Ingested {report.parsed}/{report.total_files} matches from {root_path} "
        f"({len(report.skipped)} skipped)"
    )
    return report


def ingest_matches(
    root: str | Path,
    on_progress: ProgressCallback | None = None,
    **kwargs,
) -> list[MatchSummary]:
    """Summaries for every parseable match document under root."""
    return ingest_report(root, on_progress, **kwargs).summaries
