"""
Match Index

Process-lifetime cache mapping match identifiers to the files they live in.
The index is never the source of truth: anything missing from it can be
found again by rescanning the root.

The mapping is held as a read-only snapshot. build() assembles a complete
new mapping off to the side and swaps it in under a lock, so readers (which
never lock) see either the previous snapshot or the new one, never a
partially built map.

Duplicate identifiers: the last file scanned wins. Each collision is logged
with both paths and counted in stats().
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from types import MappingProxyType

from soupheat.core.constants import MATCH_FILE_EXTENSIONS
from soupheat.core.documents import read_match_id
from soupheat.core.utils import PerformanceMonitor
from soupheat.infra.scanner import iter_match_files

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IndexSnapshot:
    """An immutable, fully built index generation."""

    root: Path | None
    entries: Mapping[str, Path]
    collisions: int = 0
    skipped: int = 0
    built_at: datetime | None = None


_EMPTY_SNAPSHOT = IndexSnapshot(root=None, entries=MappingProxyType({}))


class MatchIndex:
    """
    Thread-safe match id -> file path index.

    Usage:
        index = MatchIndex()
        index.build(Path("/data/vct"))
        path = index.lookup("a1b2c3")
    """

    def __init__(self, extensions: Iterable[str] = MATCH_FILE_EXTENSIONS):
        self.extensions = tuple(extensions)
        self._snapshot = _EMPTY_SNAPSHOT
        self._build_lock = threading.Lock()

    @property
    def root(self) -> Path | None:
        """Root of the current snapshot, None if never built."""
        return self._snapshot.root

    @property
    def is_built(self) -> bool:
        return self._snapshot.built_at is not None

    def build(self, root: str | Path) -> Mapping[str, Path]:
        """
        Rebuild the index from a fresh scan of root.

        Files that cannot be read or carry no match id are left out of the
        index; they are not errors.

        Args:
            root: Ingestion root directory

        Returns:
            The newly installed read-only mapping

        Raises:
            RootNotFoundError: Root does not exist (previous snapshot kept)
        """
        root_path = Path(root)
        with self._build_lock, PerformanceMonitor(f"Indexing {root_path}"):
            entries: dict[str, Path] = {}
            collisions = 0
            skipped = 0

            for file_path in iter_match_files(root_path, self.extensions):
                match_id = read_match_id(file_path)
                if match_id is None:
                    skipped += 1
                    continue
                previous = entries.get(match_id)
                if previous is not None:
                    collisions += 1
                    logger.warning(
                        f"Duplicate match id {match_id}: {file_path} replaces {previous}"
                    )
                entries[match_id] = file_path.absolute()

            snapshot = IndexSnapshot(
                root=root_path.absolute(),
                entries=MappingProxyType(entries),
                collisions=collisions,
                skipped=skipped,
                built_at=datetime.now(UTC),
            )
            # Single reference assignment: readers switch generations atomically
            self._snapshot = snapshot

        logger.info(
            f"Indexed {len(entries)} matches under {root_path} "
            f"({skipped} skipped, {collisions} duplicate ids)"
        )
        return snapshot.entries

    def lookup(self, match_id: str) -> Path | None:
        """Path of the file holding match_id, or None if not indexed."""
        return self._snapshot.entries.get(match_id)

    def snapshot(self) -> IndexSnapshot:
        """The current index generation."""
        return self._snapshot

    def clear(self) -> None:
        """Drop all entries."""
        with self._build_lock:
            self._snapshot = _EMPTY_SNAPSHOT

    def stats(self) -> dict:
        snapshot = self._snapshot
        return {
            "root": str(snapshot.root) if snapshot.root else None,
            "entries": len(snapshot.entries),
            "collisions": snapshot.collisions,
            "skipped": snapshot.skipped,
            "built_at": snapshot.built_at.isoformat() if snapshot.built_at else None,
        }

    def __len__(self) -> int:
        return len(self._snapshot.entries)

    def __contains__(self, match_id: object) -> bool:
        return match_id in self._snapshot.entries
