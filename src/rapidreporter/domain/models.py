"""Core domain models for the rapidreporter system.

These models represent the data flowing through the capture-and-export
pipeline: the session and its notes, the monitors and region selections
used for screenshot capture, and the rendered report with the assets it
references.
"""

from __future__ import annotations

import enum
import uuid
from datetime import datetime
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

MAX_NOTES = 200


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class NoteType(str, enum.Enum):
    """Category of a recorded observation."""

    TEST = "test"
    BUG = "bug"
    WARNING = "warning"
    OBSERVATION = "observation"
    QUESTION = "question"
    IDEA = "idea"
    SNIPPET = "snippet"
    SCREENSHOT = "screenshot"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class AssetKind(str, enum.Enum):
    """Kind of file referenced by a rendered report."""

    ICON = "icon"
    SCREENSHOT = "screenshot"


DurationMinutes = Literal[30, 60, 90, 120] | None


# ---------------------------------------------------------------------------
# Session Models
# ---------------------------------------------------------------------------


class Note(BaseModel):
    """One categorised, timestamped observation.

    For ``screenshot`` notes ``text`` holds the absolute path of the image
    file; for ``snippet`` notes it holds raw code kept verbatim. All other
    types are stored trimmed.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex, description="Unique note identifier")
    timestamp: datetime = Field(default_factory=datetime.now, description="When the note was recorded")
    type: NoteType = Field(description="Category of the note")
    text: str = Field(description="Note body, image path, or raw snippet")

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("text")
    @classmethod
    def _validate_text(cls, value: str, info: ValidationInfo) -> str:
        note_type = info.data.get("type")
        if note_type == NoteType.SNIPPET:
            if not value.strip():
                raise ValueError("snippet text must not be blank")
            return value
        value = value.strip()
        if not value:
            raise ValueError("note text must not be empty")
        return value


class Session(BaseModel):
    """One timed exploratory-testing run and its accumulated notes.

    ``notes`` is stored newest-first because that is how the UI displays
    it. Consumers that need the recording order must use
    :meth:`chronological_notes`; the report renderer does.
    """

    tester_name: str = Field(description="Name of the tester running the session")
    charter: str = Field(description="What is being tested in this session")
    duration_minutes: DurationMinutes = Field(
        default=60, description="Planned length in minutes, None for no limit"
    )
    started_at: datetime = Field(
        default_factory=datetime.now, frozen=True, description="When the session started"
    )
    notes: list[Note] = Field(
        default_factory=list, description="Recorded notes, newest first"
    )

    @field_validator("tester_name")
    @classmethod
    def _validate_tester_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("tester name must not be empty")
        return value

    @field_validator("charter")
    @classmethod
    def _validate_charter(cls, value: str) -> str:
        value = value.strip()
        if len(value) < 3:
            raise ValueError("charter must be at least 3 characters")
        return value

    @field_validator("notes")
    @classmethod
    def _cap_notes(cls, value: list[Note]) -> list[Note]:
        return value[:MAX_NOTES]

    def add_note(self, note: Note) -> Note:
        """Prepend a note, dropping the oldest one past ``MAX_NOTES``."""
        self.notes.insert(0, note)
        del self.notes[MAX_NOTES:]
        return note

    def record(self, note_type: NoteType | str, text: str) -> Note:
        """Create a note stamped with the current time and add it."""
        return self.add_note(Note(type=note_type, text=text))

    def chronological_notes(self) -> list[Note]:
        """Notes in recording order (oldest first)."""
        return list(reversed(self.notes))

    @property
    def note_count(self) -> int:
        return len(self.notes)


# ---------------------------------------------------------------------------
# Capture Geometry Models
# ---------------------------------------------------------------------------


class Monitor(BaseModel):
    """A screenshotable display, positioned in global desktop coordinates."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(description="Provider-specific monitor identifier")
    x: int = Field(description="Left edge in global desktop coordinates")
    y: int = Field(description="Top edge in global desktop coordinates")
    width: int = Field(gt=0)
    height: int = Field(gt=0)
    name: str = Field(default="", description="Human-readable monitor name")

    def contains(self, x: int, y: int) -> bool:
        """Whether the global point lies inside this monitor (right/bottom exclusive)."""
        return self.x <= x < self.x + self.width and self.y <= y < self.y + self.height


class RegionSelection(BaseModel):
    """A user-drawn capture rectangle in global desktop coordinates."""

    model_config = ConfigDict(frozen=True)

    x: int
    y: int
    width: int = Field(gt=0)
    height: int = Field(gt=0)
    device_pixel_ratio: float = Field(default=1.0, gt=0)
    monitor_id: int | None = Field(default=None, description="Reserved, not used for resolution")


class CropRect(BaseModel):
    """A rectangle in monitor-local logical coordinates."""

    model_config = ConfigDict(frozen=True)

    x: int
    y: int
    width: int = Field(gt=0)
    height: int = Field(gt=0)


class MonitorMatch(BaseModel):
    """Result of resolving a selection against the monitor layout."""

    model_config = ConfigDict(frozen=True)

    monitor: Monitor
    origin_x: int
    origin_y: int
    matched: bool = Field(
        default=True, description="False when the first-monitor fallback was applied"
    )

    def to_local(self, selection: RegionSelection) -> CropRect:
        """Translate a global selection to this monitor's local coordinates."""
        return CropRect(
            x=selection.x - self.origin_x,
            y=selection.y - self.origin_y,
            width=selection.width,
            height=selection.height,
        )


# ---------------------------------------------------------------------------
# Report / Export Models
# ---------------------------------------------------------------------------


class AssetRef(BaseModel):
    """A file referenced by the rendered report."""

    model_config = ConfigDict(frozen=True)

    kind: AssetKind
    source_path: Path
    export_relative_path: str = Field(
        description="Path used in the Markdown, relative to the export folder"
    )


class AssetLink(BaseModel):
    """Where the renderer placed one asset link in the Markdown.

    ``start``/``end`` delimit the whole link element (the image syntax or
    the ``<img>`` tag), so only links the renderer emitted are ever
    rewritten; user text that merely looks like a link is left alone.
    """

    model_config = ConfigDict(frozen=True)

    kind: AssetKind
    export_relative_path: str
    start: int = Field(ge=0)
    end: int = Field(ge=0)


class RenderedReport(BaseModel):
    """Markdown text plus the assets it references."""

    model_config = ConfigDict(frozen=True)

    markdown: str
    assets: list[AssetRef] = Field(default_factory=list)
    links: list[AssetLink] = Field(default_factory=list)

    def assets_of(self, kind: AssetKind) -> list[AssetRef]:
        return [a for a in self.assets if a.kind == kind]


class ExportResult(BaseModel):
    """Outcome of a successful export."""

    model_config = ConfigDict(frozen=True)

    markdown_path: Path
    folder: Path
    missing_assets: list[Path] = Field(
        default_factory=list, description="Screenshot sources that no longer existed"
    )
