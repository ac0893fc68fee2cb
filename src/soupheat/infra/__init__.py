"""
SoupHeat Infrastructure - file system and concurrency components.

This module contains:
- scanner: Recursive match file discovery
- index: Thread-safe match id -> file path index
- parallel: Bounded-parallel batch retrieval of match details
- watcher: File system monitoring that keeps the index fresh
"""

__all__: list[str] = []
