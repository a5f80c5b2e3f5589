"""
Store Module

Record storage and persistence layer.

This module provides:
- SQLite-backed tables, one per record type
- Idempotent table registration with layout conflict detection
- Whole-subtree persistence as a JSON document column
- Fetch-all retrieval back into record trees
"""

__version__ = "0.1.0"

from .repository import RecordStore

__all__ = ["RecordStore"]
