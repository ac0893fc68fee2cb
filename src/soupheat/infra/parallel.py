"""
Batch Retrieval of Match Details

Implements:
- Single match lookup through the match index, with a full-scan fallback
- Chunked thread-pool retrieval of many matches, bounded by the batch size
- Results in request order regardless of completion order
- Progress callbacks and a short pause between chunks

Unbounded fan-out over thousands of file reads can exhaust file descriptors
and threads, so each chunk gets its own pool sized to the chunk and is fully
joined before the next one starts.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path

from soupheat.core.constants import (
    DEFAULT_BATCH_PAUSE_SECONDS,
    DEFAULT_BATCH_SIZE,
    MATCH_FILE_EXTENSIONS,
)
from soupheat.core.documents import read_match_file, read_match_id
from soupheat.core.errors import BatchExecutionError, MatchNotFoundError, SoupHeatError
from soupheat.core.schemas import MatchDetail
from soupheat.core.transform import to_detail
from soupheat.core.utils import ProgressCallback
from soupheat.infra.index import MatchIndex
from soupheat.infra.scanner import iter_match_files

logger = logging.getLogger(__name__)


class BatchRetriever:
    """
    Fetches match details by identifier.

    Usage:
        retriever = BatchRetriever(index, batch_size=10)
        details = retriever.get_many(root, ["m3", "m1", "m2"])
    """

    def __init__(
        self,
        index: MatchIndex,
        *,
        batch_size: int = DEFAULT_BATCH_SIZE,
        pause_seconds: float = DEFAULT_BATCH_PAUSE_SECONDS,
        derive_winner: bool = False,
        extensions: Iterable[str] = MATCH_FILE_EXTENSIONS,
    ):
        """
        Initialize the retriever.

        Args:
            index: Match index consulted before falling back to a scan
            batch_size: Default number of concurrent fetches per chunk
            pause_seconds: Pause between chunks
            derive_winner: Derive MatchDetail.winning_team from round wins
            extensions: File suffixes scanned on an index miss
        """
        if batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {batch_size}")
        self.index = index
        self.batch_size = batch_size
        self.pause_seconds = pause_seconds
        self.derive_winner = derive_winner
        self.extensions = tuple(extensions)

    # ------------------------------------------------------------------
    # Single match
    # ------------------------------------------------------------------

    def _load_detail(self, path: Path, match_id: str) -> MatchDetail | None:
        result = read_match_file(path)
        if not result.ok:
            logger.debug(f"Could not load {path} ({result.stage} error): {result.error}")
            return None
        if result.document.match_info.match_id != match_id:
            return None
        return to_detail(path, result.document, derive_winner=self.derive_winner)

    def _indexed_path(self, root: Path, match_id: str) -> Path | None:
        # An index built for another root says nothing about this one
        if self.index.root != root.absolute():
            return None
        return self.index.lookup(match_id)

    def get_one(self, root: str | Path, match_id: str) -> MatchDetail:
        """
        Fetch the detail of one match.

        Tries the indexed file first. On a miss (never indexed, file gone or
        changed) the root is rescanned and the first file carrying the
        identifier wins.

        Raises:
            RootNotFoundError: Fallback scan on a missing root
            MatchNotFoundError: No file under root has the identifier
        """
        root_path = Path(root)

        indexed = self._indexed_path(root_path, match_id)
        if indexed is not None:
            detail = self._load_detail(indexed, match_id)
            if detail is not None:
                return detail
            logger.info(f"Index entry for {match_id} is stale, rescanning {root_path}")

        for file_path in iter_match_files(root_path, self.extensions):
            if read_match_id(file_path) != match_id:
                continue
            detail = self._load_detail(file_path, match_id)
            if detail is not None:
                return detail

        raise MatchNotFoundError(match_id)

    # ------------------------------------------------------------------
    # Batches
    # ------------------------------------------------------------------

    def _run_chunk(self, root: Path, chunk: Sequence[str]) -> list[MatchDetail | SoupHeatError]:
        """Fetch one chunk concurrently; outcomes are indexed by request position."""
        outcomes: list[MatchDetail | SoupHeatError | None] = [None] * len(chunk)
        faults: list[tuple[int, BaseException]] = []

        with ThreadPoolExecutor(
            max_workers=len(chunk), thread_name_prefix="soupheat-batch"
        ) as executor:
            future_to_pos = {
                executor.submit(self.get_one, root, match_id): pos
                for pos, match_id in enumerate(chunk)
            }
            for future in as_completed(future_to_pos):
                pos = future_to_pos[future]
                try:
                    outcomes[pos] = future.result()
                except SoupHeatError as e:
                    outcomes[pos] = e
                except Exception as e:
                    logger.error(f"Worker for {chunk[pos]} failed: {e!r}")
                    faults.append((pos, e))

        if faults:
            pos, cause = min(faults, key=lambda fault: fault[0])
            raise BatchExecutionError(
                f"Worker crashed while loading match {chunk[pos]}: {cause!r}"
            ) from cause

        return outcomes  # type: ignore[return-value]

    def get_many(
        self,
        root: str | Path,
        match_ids: Iterable[str],
        batch_size: int | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> list[MatchDetail]:
        """
        Fetch many match details with bounded parallelism.

        Args:
            root: Ingestion root directory
            match_ids: Identifiers to fetch; result order follows this order
            batch_size: Concurrent fetches per chunk (default: retriever's)
            on_progress: Called with (completed, total) once per loaded match

        Returns:
            Details in request order

        Raises:
            MatchNotFoundError: First missing identifier; aborts the batch
            BatchExecutionError: A worker failed to run to completion
        """
        size = self.batch_size if batch_size is None else batch_size
        if size < 1:
            raise ValueError(f"batch_size must be at least 1, got {size}")

        root_path = Path(root)
        ids = list(match_ids)
        total = len(ids)
        results: list[MatchDetail] = []

        logger.info(f"Loading {total} match details in batches of {size}")

        for start in range(0, total, size):
            chunk = ids[start : start + size]
            for outcome in self._run_chunk(root_path, chunk):
                if isinstance(outcome, SoupHeatError):
                    logger.warning(f"Batch aborted after {len(results)}/{total}: {outcome}")
                    raise outcome
                results.append(outcome)
                if on_progress is not None:
                    on_progress(len(results), total)

            if start + size < total and self.pause_seconds > 0:
                time.sleep(self.pause_seconds)

        return results
