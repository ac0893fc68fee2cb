"""
SoupHeat - Match Replay Ingestion and Retrieval for Heatmaps

Ingests esports match-replay JSON documents from a directory tree and serves
match summaries for list views and full match details (with per-kill
positions) for heatmap rendering.

Usage:
    from soupheat import MatchLibrary

    library = MatchLibrary()
    summaries = library.load_matches("/data/vct")

    detail = library.get_match("/data/vct", summaries[0].match_id)
    for event in detail.kill_events:
        print(event.killer_puuid, event.weapon, event.victim_location)
"""

__version__ = "0.1.0"
__author__ = "SoupHeat Contributors"


def __getattr__(name):
    """Lazy import for heavy dependencies."""
    if name == "MatchLibrary":
        from soupheat.pipeline.library import MatchLibrary
        return MatchLibrary
    elif name == "MatchIndex":
        from soupheat.infra.index import MatchIndex
        return MatchIndex
    elif name == "BatchRetriever":
        from soupheat.infra.parallel import BatchRetriever
        return BatchRetriever
    elif name == "ingest_matches":
        from soupheat.pipeline.ingest import ingest_matches
        return ingest_matches
    elif name == "scan_match_files":
        from soupheat.infra.scanner import scan_match_files
        return scan_match_files
    elif name == "to_summary":
        from soupheat.core.transform import to_summary
        return to_summary
    elif name == "to_detail":
        from soupheat.core.transform import to_detail
        return to_detail
    elif name == "IndexWatcher":
        from soupheat.infra.watcher import IndexWatcher
        return IndexWatcher
    raise AttributeError(f"module 'soupheat' has no attribute '{name}'")


__all__ = [
    # Version
    "__version__",
    # Engine
    "MatchLibrary",
    "MatchIndex",
    "BatchRetriever",
    "ingest_matches",
    "scan_match_files",
    "to_summary",
    "to_detail",
    "IndexWatcher",
]
