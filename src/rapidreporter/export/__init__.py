"""Report export for rapidreporter.

Public API:
    SessionExporter -- export_session(session) boundary
    ExportPackager -- Writes a rendered report into an export folder
    ExportError, ExportCollisionError, ExportIOError -- Failures
"""

from rapidreporter.export.exporter import SessionExporter
from rapidreporter.export.packager import (
    ExportCollisionError,
    ExportError,
    ExportIOError,
    ExportPackager,
    export_folder_name,
)

__all__ = [
    "ExportCollisionError",
    "ExportError",
    "ExportIOError",
    "ExportPackager",
    "SessionExporter",
    "export_folder_name",
]
