"""Domain models for rapidreporter.

This package contains the core data structures, enumerations, and value
objects used throughout the system. All models use Pydantic v2 for
validation and serialization.
"""

from rapidreporter.domain.models import (
    MAX_NOTES,
    AssetKind,
    AssetLink,
    AssetRef,
    CropRect,
    ExportResult,
    Monitor,
    MonitorMatch,
    Note,
    NoteType,
    RegionSelection,
    RenderedReport,
    Session,
)

__all__ = [
    "MAX_NOTES",
    "AssetKind",
    "AssetLink",
    "AssetRef",
    "CropRect",
    "ExportResult",
    "Monitor",
    "MonitorMatch",
    "Note",
    "NoteType",
    "RegionSelection",
    "RenderedReport",
    "Session",
]
