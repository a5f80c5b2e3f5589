"""
FDDI Core Module

Record schema, JSON codec and progress roll-up for FDD planning data.

This module provides:
- Program / Project / Aspect / ... record types (pydantic)
- Deterministic JSON encode/decode with typed errors
- Completion, target date and lateness roll-up over a record tree
- Import of MS Project CSV outlines and name search over a record tree
"""

__version__ = "0.1.0"

from .codec import decode, encode
from .errors import (
    CodecError,
    DecodeError,
    EncodeError,
    FDDIError,
    SchemaError,
    StorageError,
)
from .outline_import import load_outline_csv, read_outline_csv
from .schemas import (
    KPI,
    Activity,
    Aspect,
    AspectInfo,
    Feature,
    Milestone,
    MilestoneInfo,
    Note,
    Program,
    Progress,
    Project,
    Subject,
)
from .search import SearchMatch, search_records

__all__ = [
    "KPI",
    "Activity",
    "Aspect",
    "AspectInfo",
    "CodecError",
    "DecodeError",
    "EncodeError",
    "FDDIError",
    "Feature",
    "Milestone",
    "MilestoneInfo",
    "Note",
    "Program",
    "Progress",
    "Project",
    "SchemaError",
    "SearchMatch",
    "StorageError",
    "Subject",
    "decode",
    "encode",
    "load_outline_csv",
    "read_outline_csv",
    "search_records",
]
