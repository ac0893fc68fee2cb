"""
Match Library - the operations offered to the presentation layer.

Owns one MatchIndex and one BatchRetriever and wires them to the
configuration:
- list summaries for a root (optionally with progress); rebuilds the index
- fetch one match detail by identifier
- fetch many match details, batched, optionally with progress
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from soupheat.core.config import SoupHeatConfig, get_config
from soupheat.core.schemas import MatchDetail, MatchSummary
from soupheat.core.utils import ProgressCallback
from soupheat.infra.index import MatchIndex
from soupheat.infra.parallel import BatchRetriever
from soupheat.pipeline.ingest import IngestReport, ingest_report

logger = logging.getLogger(__name__)


def filter_summaries(
    summaries: Iterable[MatchSummary],
    map_name: str | None = None,
    region: str | None = None,
) -> list[MatchSummary]:
    """Keep summaries on the given map and/or region (case-insensitive)."""
    selected = []
    for summary in summaries:
        if map_name is not None and summary.map.lower() != map_name.lower():
            continue
        if region is not None and summary.region.lower() != region.lower():
            continue
        selected.append(summary)
    return selected


class MatchLibrary:
    """
    Facade over ingestion, indexing and retrieval.

    Usage:
        library = MatchLibrary()
        summaries = library.load_matches("/data/vct")
        details = library.get_matches("/data/vct", [s.match_id for s in summaries[:5]])
    """

    def __init__(self, config: SoupHeatConfig | None = None, index: MatchIndex | None = None):
        self.config = config or get_config()
        self.index = index or MatchIndex(self.config.ingest.extensions)
        retrieval = self.config.retrieval
        self.retriever = BatchRetriever(
            self.index,
            batch_size=retrieval.batch_size,
            pause_seconds=retrieval.pause_seconds,
            derive_winner=retrieval.derive_winning_team,
            extensions=self.config.ingest.extensions,
        )

    def ingest(self, root: str | Path, on_progress: ProgressCallback | None = None) -> IngestReport:
        """Ingest summaries without touching the index."""
        return ingest_report(
            root,
            on_progress,
            extensions=self.config.ingest.extensions,
            progress_every=self.config.ingest.progress_every,
        )

    def load_matches(
        self,
        root: str | Path,
        on_progress: ProgressCallback | None = None,
        *,
        rebuild_index: bool = True,
    ) -> list[MatchSummary]:
        """
        List summaries for every match under root.

        Args:
            root: Ingestion root directory
            on_progress: Called with (processed, total) during ingestion
            rebuild_index: Rebuild the match index for root afterwards

        Returns:
            Summaries in discovery order
        """
        report = self.ingest(root, on_progress)
        if rebuild_index:
            self.index.build(root)
        return report.summaries

    def build_index(self, root: str | Path) -> dict:
        """Rebuild the index for root and return its stats."""
        self.index.build(root)
        return self.index.stats()

    def get_match(self, root: str | Path, match_id: str) -> MatchDetail:
        """Fetch one match detail (index first, then a full scan)."""
        return self.retriever.get_one(root, match_id)

    def get_matches(
        self,
        root: str | Path,
        match_ids: Iterable[str],
        batch_size: int | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> list[MatchDetail]:
        """Fetch many match details in request order."""
        return self.retriever.get_many(root, match_ids, batch_size, on_progress)
