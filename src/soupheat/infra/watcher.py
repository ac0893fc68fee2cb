"""
Index Watcher for Match Folders

Monitors an ingestion root for match files being added, changed, moved or
removed and rebuilds the match index once the folder has been quiet for
the debounce period. Bursts of events (e.g. copying a whole tournament
folder) are coalesced into a single rebuild.
"""

from __future__ import annotations

import logging
import os
import threading
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from soupheat.core.constants import MATCH_FILE_EXTENSIONS
from soupheat.core.errors import SoupHeatError
from soupheat.infra.index import MatchIndex
from soupheat.infra.scanner import validate_root

logger = logging.getLogger(__name__)


@dataclass
class MatchFileEvent:
    """A change to a match file."""

    file_path: Path
    event_type: str  # "created", "modified", "deleted" or "moved"
    timestamp: float

    @property
    def filename(self) -> str:
        return self.file_path.name


class MatchFileHandler(FileSystemEventHandler):
    """
    Handler for match file events.

    Filters for match file extensions and forwards each change to on_change.
    """

    def __init__(
        self,
        on_change: Callable[[MatchFileEvent], None],
        extensions: Iterable[str] = MATCH_FILE_EXTENSIONS,
    ):
        super().__init__()
        self.on_change = on_change
        self.extensions = tuple(ext.lower() for ext in extensions)

    def _is_match_file(self, path: str) -> bool:
        return path.lower().endswith(self.extensions)

    def _forward(self, path: str | bytes, event_type: str) -> None:
        path_str = os.fsdecode(path)
        if not self._is_match_file(path_str):
            return
        logger.debug(f"Match file {event_type}: {path_str}")
        self.on_change(MatchFileEvent(Path(path_str), event_type, time.time()))

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._forward(event.src_path, "created")

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._forward(event.src_path, "modified")

    def on_deleted(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._forward(event.src_path, "deleted")

    def on_moved(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        # A rename into or out of the match extension counts on either side
        self._forward(event.src_path, "moved")
        self._forward(event.dest_path, "moved")


class IndexWatcher:
    """
    Keeps a MatchIndex in sync with its folder.

    Example usage:
        watcher = IndexWatcher(root, index)

        @watcher.on_rebuild
        def report(events):
            print(f"Index rebuilt after {len(events)} changes")

        watcher.start()
        # Keep running...
        watcher.stop()
    """

    def __init__(
        self,
        root: str | Path,
        index: MatchIndex,
        debounce_seconds: float = 1.0,
        recursive: bool = True,
    ):
        """
        Initialize the index watcher.

        Args:
            root: Ingestion root to watch
            index: Index rebuilt on changes
            debounce_seconds: Quiet period before a rebuild
            recursive: Whether to watch subdirectories
        """
        self.root = Path(root)
        self.index = index
        self.debounce_seconds = debounce_seconds
        self.recursive = recursive

        self._pending: list[MatchFileEvent] = []
        self._lock = threading.Lock()
        self._timer: threading.Timer | None = None
        self._observer: Observer | None = None
        self._callbacks: list[Callable[[list[MatchFileEvent]], None]] = []
        self._running = False

    def on_rebuild(
        self, callback: Callable[[list[MatchFileEvent]], None]
    ) -> Callable[[list[MatchFileEvent]], None]:
        """Decorator to register a callback run after each rebuild."""
        self._callbacks.append(callback)
        return callback

    @property
    def pending_events(self) -> list[MatchFileEvent]:
        with self._lock:
            return list(self._pending)

    def notify(self, event: MatchFileEvent) -> None:
        """Record a change and (re)arm the debounce timer."""
        with self._lock:
            self._pending.append(event)
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self.debounce_seconds, self.flush)
            self._timer.daemon = True
            self._timer.start()

    def flush(self) -> bool:
        """
        Rebuild the index now if changes are pending.

        A failed rebuild (root deleted or unreadable) is logged and the
        previous index stays in place.

        Returns:
            True if a rebuild ran
        """
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            events, self._pending = self._pending, []

        if not events:
            return False

        logger.info(f"Rebuilding index after {len(events)} change(s) in {self.root}")
        try:
            self.index.build(self.root)
        except SoupHeatError as e:
            logger.error(f"Index rebuild failed for {self.root}: {e}")
            return False

        for callback in self._callbacks:
            try:
                callback(events)
            except Exception as e:
                logger.error(f"Error in rebuild callback: {e}")
        return True

    def start(self, blocking: bool = False) -> None:
        """
        Start watching the root.

        Args:
            blocking: If True, blocks until stop() is called or interrupted
        """
        if self._running:
            logger.warning("Watcher is already running")
            return

        validate_root(self.root)
        if not self.index.is_built or self.index.root != self.root.absolute():
            self.index.build(self.root)

        handler = MatchFileHandler(self.notify, self.index.extensions)
        self._observer = Observer()
        self._observer.schedule(handler, str(self.root), recursive=self.recursive)
        self._observer.start()
        self._running = True
        logger.info(f"Watching for match changes in: {self.root}")

        if blocking:
            try:
                while self._running:
                    time.sleep(1)
            except KeyboardInterrupt:
                self.stop()

    def stop(self) -> None:
        """Stop watching and drop pending changes."""
        self._running = False

        if self._observer:
            self._observer.stop()
            self._observer.join(timeout=5)
            self._observer = None

        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._pending = []

        logger.info("Index watcher stopped")

    @property
    def is_running(self) -> bool:
        return self._running
