"""Image processing utilities for rapidreporter.

Shared image loading, saving, and conversion functions used by the
capture and report modules.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path

import cv2
import numpy as np

logger = logging.getLogger(__name__)


def load_image(path: Path | str) -> np.ndarray:
    """Read an image file into a numpy array (BGR/BGRA, OpenCV format)."""
    image = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
    if image is None:
        raise ValueError(f"Failed to read image: {path}")
    return image


def save_png(image: np.ndarray, path: Path | str) -> Path:
    """Write a numpy image array to a PNG file."""
    path = Path(path)
    if not cv2.imwrite(str(path), image):
        raise ValueError(f"Failed to write PNG: {path}")
    return path


def image_size(image: np.ndarray) -> tuple[int, int]:
    """Return ``(width, height)`` of a numpy image."""
    h, w = image.shape[:2]
    return w, h


def unique_path(directory: Path, stem: str, suffix: str = ".png") -> Path:
    """Build ``<stem>-<millis><suffix>`` in ``directory``, adding a counter if taken."""
    millis = int(time.time() * 1000)
    candidate = directory / f"{stem}-{millis}{suffix}"
    counter = 1
    while candidate.exists():
        candidate = directory / f"{stem}-{millis}-{counter}{suffix}"
        counter += 1
    return candidate
