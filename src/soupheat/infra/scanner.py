"""
Directory Scanner

Recursively discovers match files under an ingestion root, following
symbolic links. Discovery is best-effort: entries that cannot be read
mid-walk are skipped, only a missing or unreadable root is an error.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Iterator
from pathlib import Path

from soupheat.core.constants import MATCH_FILE_EXTENSIONS
from soupheat.core.errors import RootNotFoundError, RootNotReadableError
from soupheat.core.utils import timed

logger = logging.getLogger(__name__)


def validate_root(root: str | Path) -> Path:
    """
    Check that an ingestion root exists and can be listed.

    Raises:
        RootNotFoundError: Root does not exist or is not a directory
        RootNotReadableError: Root exists but cannot be listed
    """
    root_path = Path(root)
    if not root_path.is_dir():
        raise RootNotFoundError(root)
    if not os.access(root_path, os.R_OK | os.X_OK):
        raise RootNotReadableError(root)
    return root_path


def _has_extension(filename: str, extensions: tuple[str, ...]) -> bool:
    lowered = filename.lower()
    return any(lowered.endswith(ext) for ext in extensions)


def iter_match_files(
    root: str | Path,
    extensions: Iterable[str] = MATCH_FILE_EXTENSIONS,
) -> Iterator[Path]:
    """
    Lazily yield match files under root in discovery order.

    Directory entries are visited in name order. Symlinked directories are
    followed, so a directory reachable through a link is reported under
    both paths. Only a link back to one of its own ancestors is pruned.

    Args:
        root: Directory to scan
        extensions: File suffixes to accept (case-insensitive)

    Yields:
        Absolute paths of candidate match files
    """
    root_path = validate_root(root).absolute()
    exts = tuple(ext.lower() for ext in extensions)
    # dirpath -> real paths of the directories above it on the current descent
    ancestors: dict[str, tuple[str, ...]] = {os.fspath(root_path): ()}

    def on_error(error: OSError) -> None:
        logger.debug(f"Skipping unreadable entry {error.filename}: {error.strerror}")

    for dirpath, dirnames, filenames in os.walk(root_path, onerror=on_error, followlinks=True):
        above = ancestors.pop(dirpath, ())
        real = os.path.realpath(dirpath)
        if real in above:
            dirnames[:] = []
            continue

        dirnames.sort()
        chain = (*above, real)
        for dirname in dirnames:
            ancestors[os.path.join(dirpath, dirname)] = chain
        for filename in sorted(filenames):
            if _has_extension(filename, exts):
                yield Path(dirpath) / filename


@timed
def scan_match_files(
    root: str | Path,
    extensions: Iterable[str] = MATCH_FILE_EXTENSIONS,
) -> list[Path]:
    """Materialize the full candidate list (gives ingestion a known total)."""
    files = list(iter_match_files(root, extensions))
    logger.info(f"Found {len(files)} match files in {root}")
    return files
