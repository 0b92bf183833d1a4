"""Abstract base class for screenshot providers and the capture errors.

All screenshot implementations must conform to this interface, so the
region capture protocol can run against a real display backend or a
test double without changing the rest of the pipeline.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path

from rapidreporter.domain.models import Monitor

logger = logging.getLogger(__name__)


class ScreenshotProvider(ABC):
    """Abstract interface for enumerating monitors and grabbing full frames.

    Example usage::

        provider = MssScreenshotProvider(output_dir=Path("/tmp/shots"))
        monitors = await provider.list_monitors()
        path = await provider.capture_monitor(monitors[0].id)
    """

    @abstractmethod
    async def list_monitors(self) -> list[Monitor]:
        """Return the monitors that can be captured, in platform order.

        Raises:
            NoMonitorsAvailableError: If no display can be captured.
            PermissionDeniedError: If screen recording is not permitted.
        """
        ...

    @abstractmethod
    async def capture_monitor(self, monitor_id: int) -> Path:
        """Capture one monitor at full resolution and return the image path.

        The image is in physical pixels; callers scale logical coordinates
        by the device pixel ratio before cropping.

        Raises:
            CaptureFailedError: If the frame cannot be grabbed or saved.
            PermissionDeniedError: If screen recording is not permitted.
        """
        ...

    async def first_monitor(self) -> Monitor:
        """Convenience accessor for the primary (first listed) monitor."""
        monitors = await self.list_monitors()
        if not monitors:
            raise NoMonitorsAvailableError()
        return monitors[0]


class CaptureError(Exception):
    """Base class for failures in the capture pipeline."""


class PermissionDeniedError(CaptureError):
    """Raised when the OS refuses access to a capture resource."""

    def __init__(self, resource: str = "screen recording", message: str = "") -> None:
        super().__init__(message or f"Permission denied for {resource}")
        self.resource = resource


class NoMonitorsAvailableError(CaptureError):
    """Raised when there is no screenshotable monitor."""

    def __init__(self, message: str = "No screenshotable monitors available") -> None:
        super().__init__(message)


class CaptureFailedError(CaptureError):
    """Raised when grabbing, cropping, or saving an image fails."""

    def __init__(self, message: str, path: Path | str | None = None) -> None:
        super().__init__(message)
        self.path = Path(path) if path is not None else None


class CaptureStateError(CaptureError):
    """Raised for an event that is not allowed in the current capture state."""

    def __init__(self, state: str, event: str) -> None:
        super().__init__(f"Cannot handle '{event}' while {state}")
        self.state = state
        self.event = event
