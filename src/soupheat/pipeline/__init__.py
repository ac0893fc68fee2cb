"""
SoupHeat Pipeline - match ingestion and the library facade.

This module handles:
- Summary ingestion over a directory tree (ingest)
- Index-backed single and batch retrieval (library)
"""

from soupheat.pipeline.ingest import IngestReport, ingest_matches, ingest_report
from soupheat.pipeline.library import MatchLibrary, filter_summaries

__all__ = ["IngestReport", "MatchLibrary", "filter_summaries", "ingest_matches", "ingest_report"]
