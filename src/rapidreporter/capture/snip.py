"""OS-native interactive capture via the Windows Snipping Tool.

On Windows the region overlay is replaced by the system snipping UI.
The snip lands on the clipboard, which is polled until a new image
appears or the timeout expires. A timeout means the user cancelled.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

from PIL import Image, ImageGrab

from rapidreporter.capture.base import CaptureFailedError, PermissionDeniedError
from rapidreporter.utils.imaging import unique_path

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 45.0
DEFAULT_POLL_INTERVAL = 0.15

_LAUNCH_COMMANDS: tuple[tuple[str, ...], ...] = (
    ("explorer.exe", "ms-screenclip:"),
    ("cmd", "/C", "start", "", "ms-screenclip:"),
)


class NativeSnipCapture:
    """Runs the Windows Snipping Tool and imports the next clipboard image."""

    def __init__(
        self,
        output_dir: Path | str,
        timeout: float = DEFAULT_TIMEOUT,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        platform: str = sys.platform,
    ) -> None:
        self._output_dir = Path(output_dir)
        self._timeout = timeout
        self._poll_interval = poll_interval
        self._platform = platform

    @property
    def is_supported(self) -> bool:
        return self._platform == "win32"

    async def capture(self) -> Path | None:
        """Launch the snipping UI and wait for its image.

        Returns:
            The saved PNG path, or None when the user cancelled or no
            image arrived before the timeout.

        Raises:
            CaptureFailedError: If not on Windows, the tool cannot be
                launched, or the image cannot be saved.
            PermissionDeniedError: If the clipboard cannot be read.
        """
        if not self.is_supported:
            raise CaptureFailedError("Native snipping is only available on Windows")

        loop = asyncio.get_event_loop()
        baseline = await loop.run_in_executor(None, self._grab_clipboard)
        baseline_key = _image_key(baseline)
        logger.debug("Clipboard baseline image present: %s", baseline_key is not None)

        await self._launch()

        deadline = loop.time() + self._timeout
        logger.info("Waiting up to %.0fs for a snip on the clipboard", self._timeout)
        while loop.time() < deadline:
            image = await loop.run_in_executor(None, self._grab_clipboard)
            if image is not None and _image_key(image) != baseline_key:
                return await loop.run_in_executor(None, self._save, image)
            await asyncio.sleep(self._poll_interval)

        logger.info("Snip timed out waiting for a clipboard image")
        return None

    async def _launch(self) -> None:
        for command in _LAUNCH_COMMANDS:
            try:
                process = await asyncio.create_subprocess_exec(*command)
            except OSError as e:
                logger.warning("Launch attempt %s failed: %s", " ".join(command), e)
                continue
            # Launchers exit once the snipping UI is up; the exit code is not meaningful.
            returncode = await process.wait()
            logger.debug("Launched snipping tool via %s (exit %s)", command[0], returncode)
            return
        raise CaptureFailedError("Could not launch Windows Snipping Tool")

    def _grab_clipboard(self) -> Image.Image | None:
        try:
            content = ImageGrab.grabclipboard()
        except PermissionError as e:
            raise PermissionDeniedError("clipboard", str(e)) from e
        except OSError as e:
            # Clipboard busy while the snipping tool writes to it.
            logger.debug("Clipboard not readable yet: %s", e)
            return None
        return content if isinstance(content, Image.Image) else None

    def _save(self, image: Image.Image) -> Path:
        try:
            self._output_dir.mkdir(parents=True, exist_ok=True)
            path = unique_path(self._output_dir, "windows-snip")
            image.save(path, format="PNG")
        except OSError as e:
            raise CaptureFailedError(f"Failed to save snip: {e}", self._output_dir) from e
        logger.info("Snip captured from clipboard: %dx%d -> %s", image.width, image.height, path)
        return path


def _image_key(image: Image.Image | None) -> tuple[tuple[int, int], str, bytes] | None:
    if image is None:
        return None
    return image.size, image.mode, image.tobytes()
