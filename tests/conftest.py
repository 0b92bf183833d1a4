"""Shared test fixtures for the rapidreporter test suite.

Provides common fixtures used across the unit tests: sample sessions,
monitor layouts, real image files on disk, and a mock screenshot
provider.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from unittest.mock import AsyncMock

import cv2
import numpy as np
import pytest

from rapidreporter.domain.models import Monitor, Note, NoteType, Session
from rapidreporter.report.icons import IconLibrary


# ---------------------------------------------------------------------------
# Image Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_image() -> np.ndarray:
    """A 200x300 BGR image whose pixel values encode their column."""
    image = np.zeros((200, 300, 3), dtype=np.uint8)
    image[:, :, 0] = np.arange(300, dtype=np.uint16)[None, :] % 256
    return image


@pytest.fixture
def frame_file(tmp_path: Path, sample_image: np.ndarray) -> Path:
    """The sample image written as a PNG, standing in for a captured frame."""
    path = tmp_path / "frames" / "monitor-2-1700000000000.png"
    path.parent.mkdir(parents=True)
    cv2.imwrite(str(path), sample_image)
    return path


@pytest.fixture
def screenshot_file(tmp_path: Path) -> Path:
    """A small PNG referenced by screenshot notes."""
    path = tmp_path / "shots" / "shot-1.png"
    path.parent.mkdir(parents=True)
    cv2.imwrite(str(path), np.full((10, 10, 3), 127, dtype=np.uint8))
    return path


# ---------------------------------------------------------------------------
# Session Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_session() -> Session:
    """A session with no notes, started at a fixed moment."""
    return Session(
        tester_name="Ada",
        charter="Explore the checkout flow",
        duration_minutes=60,
        started_at=datetime(2026, 2, 20, 18, 0, 0),
    )


def make_note(note_type: NoteType | str, text: str, minute: int, second: int = 0) -> Note:
    """A note with a deterministic id and timestamp."""
    return Note(
        id=f"note-{minute:02d}{second:02d}",
        timestamp=datetime(2026, 2, 20, 18, minute, second),
        type=note_type,
        text=text,
    )


@pytest.fixture
def note_factory():
    return make_note


# ---------------------------------------------------------------------------
# Capture Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def two_monitors() -> list[Monitor]:
    """Monitor 1 at the origin (100x100) and monitor 2 to its right (200x200)."""
    return [
        Monitor(id=1, x=0, y=0, width=100, height=100),
        Monitor(id=2, x=100, y=0, width=200, height=200),
    ]


@pytest.fixture
def mock_provider(two_monitors: list[Monitor], frame_file: Path) -> AsyncMock:
    """A mock ScreenshotProvider returning ``two_monitors`` and ``frame_file``."""
    mock = AsyncMock()
    mock.list_monitors.return_value = two_monitors
    mock.first_monitor.return_value = two_monitors[0]
    mock.capture_monitor.return_value = frame_file
    return mock


@pytest.fixture
def icon_library(tmp_path: Path) -> IconLibrary:
    return IconLibrary(tmp_path / "icon-cache")
