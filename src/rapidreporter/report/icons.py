"""Icons used by the Markdown report.

Each icon-backed note type has one canonical file, ``<type>.png``. A
directory of custom icons can be configured; any type missing from it
falls back to a generated badge (a coloured disc with a glyph) drawn
with OpenCV and cached on disk.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import cv2
import numpy as np

from rapidreporter.domain.models import NoteType
from rapidreporter.utils.imaging import save_png

logger = logging.getLogger(__name__)

ICON_SIZE = 64

# Colours are BGR (OpenCV order).
ICON_STYLES: dict[NoteType, tuple[tuple[int, int, int], str]] = {
    NoteType.BUG: ((48, 48, 214), "B"),
    NoteType.IDEA: ((0, 190, 250), "I"),
    NoteType.OBSERVATION: ((200, 130, 40), "O"),
    NoteType.QUESTION: ((170, 80, 150), "?"),
    NoteType.WARNING: ((0, 140, 255), "!"),
}

ICON_TYPES: tuple[NoteType, ...] = tuple(ICON_STYLES)


def icon_filename(note_type: NoteType) -> str:
    return f"{note_type.value}.png"


def draw_icon(note_type: NoteType, size: int = ICON_SIZE) -> np.ndarray:
    """Render the badge for ``note_type`` as a BGRA image."""
    color, glyph = ICON_STYLES[note_type]
    image = np.zeros((size, size, 4), dtype=np.uint8)
    center = size // 2
    cv2.circle(image, (center, center), center - 2, (*color, 255), -1, cv2.LINE_AA)

    font = cv2.FONT_HERSHEY_SIMPLEX
    scale = size / 40
    thickness = max(size // 16, 1)
    (text_w, text_h), _ = cv2.getTextSize(glyph, font, scale, thickness)
    origin = (center - text_w // 2, center + text_h // 2)
    cv2.putText(image, glyph, origin, font, scale, (255, 255, 255, 255), thickness, cv2.LINE_AA)
    return image


class IconLibrary:
    """Resolves and materialises icon files for the icon-backed note types."""

    def __init__(self, cache_dir: Path | str, custom_dir: Path | str | None = None) -> None:
        self._cache_dir = Path(cache_dir)
        self._custom_dir = Path(custom_dir) if custom_dir else None

    def path_for(self, note_type: NoteType) -> Path:
        """Source path for an icon; custom icons win over generated ones."""
        if note_type not in ICON_STYLES:
            raise KeyError(f"No icon for note type {note_type.value!r}")
        name = icon_filename(note_type)
        if self._custom_dir is not None:
            custom = self._custom_dir / name
            if custom.is_file():
                return custom
        return self._cache_dir / name

    def icon_paths(self) -> dict[NoteType, Path]:
        return {t: self.path_for(t) for t in ICON_TYPES}

    async def materialize(self, note_types: list[NoteType] | None = None) -> dict[NoteType, Path]:
        """Make sure the icon files exist, generating any that are missing."""
        loop = asyncio.get_event_loop()
        types = note_types if note_types is not None else list(ICON_TYPES)
        return await loop.run_in_executor(None, self._materialize_sync, types)

    def _materialize_sync(self, note_types: list[NoteType]) -> dict[NoteType, Path]:
        paths = {}
        for note_type in note_types:
            path = self.path_for(note_type)
            if not path.exists():
                path.parent.mkdir(parents=True, exist_ok=True)
                save_png(draw_icon(note_type), path)
                logger.debug("Generated %s icon at %s", note_type.value, path)
            paths[note_type] = path
        return paths
