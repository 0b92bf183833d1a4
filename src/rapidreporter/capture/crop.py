"""Crop operation for region captures.

Selections arrive in logical (monitor-local) coordinates while the
captured frame is in physical pixels, so the rectangle is scaled by the
device pixel ratio before slicing.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import numpy as np

from rapidreporter.capture.base import CaptureFailedError
from rapidreporter.domain.models import CropRect
from rapidreporter.utils.imaging import image_size, load_image, save_png, unique_path

logger = logging.getLogger(__name__)


def scale_rect(rect: CropRect, device_pixel_ratio: float) -> tuple[int, int, int, int]:
    """Scale a logical rect to physical pixels as ``(x, y, width, height)``.

    Ratios below 1.0 are treated as 1.0. Origins are clamped at zero and
    sizes to at least one pixel.
    """
    dpr = max(device_pixel_ratio, 1.0)
    x = max(round(rect.x * dpr), 0)
    y = max(round(rect.y * dpr), 0)
    w = max(round(rect.width * dpr), 1)
    h = max(round(rect.height * dpr), 1)
    return x, y, w, h


def crop_array(
    image: np.ndarray, rect: CropRect, device_pixel_ratio: float = 1.0
) -> np.ndarray:
    """Crop a numpy image, clamping the rectangle to the image bounds.

    Raises:
        ValueError: If the rectangle lies entirely outside the image.
    """
    x, y, w, h = scale_rect(rect, device_pixel_ratio)
    img_w, img_h = image_size(image)
    x2 = min(x + w, img_w)
    y2 = min(y + h, img_h)
    if x >= x2 or y >= y2:
        raise ValueError("Crop area is outside the image bounds")
    return image[y:y2, x:x2].copy()


class ImageCropper:
    """Crops captured frames and writes the result beside the source."""

    async def crop(
        self, image_path: Path | str, rect: CropRect, device_pixel_ratio: float = 1.0
    ) -> Path:
        """Crop ``image_path`` to ``rect`` and return the new PNG's path.

        Raises:
            CaptureFailedError: If the image cannot be read, the rect misses
                it entirely, or the output cannot be written.
        """
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(
            None, self._crop_sync, Path(image_path), rect, device_pixel_ratio
        )

    def _crop_sync(self, source: Path, rect: CropRect, device_pixel_ratio: float) -> Path:
        try:
            image = load_image(source)
            cropped = crop_array(image, rect, device_pixel_ratio)
            out_path = unique_path(source.parent, f"{source.stem}-region")
            save_png(cropped, out_path)
        except ValueError as e:
            raise CaptureFailedError(str(e), source) from e
        w, h = image_size(cropped)
        logger.info("Cropped %s to %dx%d -> %s", source.name, w, h, out_path.name)
        return out_path
