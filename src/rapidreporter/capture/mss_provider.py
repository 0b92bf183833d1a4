"""Screenshot provider implementation using mss.

Enumerates the physical monitors of the desktop and grabs full frames,
writing them as PNG files into the configured screenshot directory.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import mss
import mss.tools
from mss.exception import ScreenShotError

from rapidreporter.capture.base import (
    CaptureFailedError,
    NoMonitorsAvailableError,
    PermissionDeniedError,
    ScreenshotProvider,
)
from rapidreporter.domain.models import Monitor
from rapidreporter.utils.imaging import unique_path

logger = logging.getLogger(__name__)


class MssScreenshotProvider(ScreenshotProvider):
    """Captures monitors with mss.

    mss is synchronous, so every grab runs in the default thread pool
    executor to keep the event loop responsive. Monitor ids follow mss
    numbering: 1 is the first physical monitor (0, the virtual union of
    all monitors, is never exposed).
    """

    def __init__(self, output_dir: Path | str) -> None:
        self._output_dir = Path(output_dir)

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    async def list_monitors(self) -> list[Monitor]:
        loop = asyncio.get_event_loop()
        monitors = await loop.run_in_executor(None, self._list_sync)
        if not monitors:
            raise NoMonitorsAvailableError()
        logger.debug("Found %d screenshotable monitor(s)", len(monitors))
        return monitors

    async def capture_monitor(self, monitor_id: int) -> Path:
        loop = asyncio.get_event_loop()
        path = await loop.run_in_executor(None, self._capture_sync, monitor_id)
        logger.info("Captured monitor %d to %s", monitor_id, path)
        return path

    def _list_sync(self) -> list[Monitor]:
        try:
            with mss.mss() as sct:
                raw = list(sct.monitors[1:])
        except PermissionError as e:
            raise PermissionDeniedError("screen recording", str(e)) from e
        except ScreenShotError as e:
            raise CaptureFailedError(f"Failed to enumerate monitors: {e}") from e
        return [
            Monitor(
                id=index,
                x=m["left"],
                y=m["top"],
                width=m["width"],
                height=m["height"],
                name=f"Monitor {index}",
            )
            for index, m in enumerate(raw, start=1)
        ]

    def _capture_sync(self, monitor_id: int) -> Path:
        """Synchronous frame grab (runs in thread pool)."""
        try:
            self._output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise CaptureFailedError(
                f"Cannot create screenshot directory: {e}", self._output_dir
            ) from e

        path = unique_path(self._output_dir, f"monitor-{monitor_id}")
        try:
            with mss.mss() as sct:
                if not 1 <= monitor_id < len(sct.monitors):
                    raise CaptureFailedError(f"Unknown monitor id {monitor_id}")
                shot = sct.grab(sct.monitors[monitor_id])
                mss.tools.to_png(shot.rgb, shot.size, output=str(path))
        except PermissionError as e:
            raise PermissionDeniedError("screen recording", str(e)) from e
        except ScreenShotError as e:
            raise CaptureFailedError(f"Failed to capture monitor {monitor_id}: {e}") from e
        except OSError as e:
            raise CaptureFailedError(f"Failed to save screenshot: {e}", path) from e
        return path
