"""The main actor of the region capture protocol.

Owns the session and turns a submitted selection into a cropped
screenshot note:

    list monitors -> resolve monitor -> capture frame -> crop -> add note

The actor is a small state machine. Every state change goes through
:data:`TRANSITIONS`; an event that has no entry for the current state
raises :class:`CaptureStateError`, which is what prevents a second
capture from starting while one is in flight.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Awaitable
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict

from rapidreporter.capture.base import (
    CaptureError,
    CaptureFailedError,
    CaptureStateError,
    ScreenshotProvider,
)
from rapidreporter.capture.crop import ImageCropper
from rapidreporter.capture.monitors import resolve_monitor
from rapidreporter.capture.snip import NativeSnipCapture
from rapidreporter.domain.models import Note, NoteType, RegionSelection, Session
from rapidreporter.region.messages import OverlayChannel, Selected
from rapidreporter.region.overlay import DEFAULT_MIN_DRAG_SIZE, RegionOverlay

logger = logging.getLogger(__name__)


class CaptureState(str, enum.Enum):
    IDLE = "idle"
    AWAITING_SELECTION = "awaiting_selection"
    CROPPING = "cropping"


TRANSITIONS: dict[tuple[CaptureState, str], CaptureState] = {
    (CaptureState.IDLE, "begin"): CaptureState.AWAITING_SELECTION,
    (CaptureState.IDLE, "capture"): CaptureState.CROPPING,
    (CaptureState.AWAITING_SELECTION, "selected"): CaptureState.CROPPING,
    (CaptureState.AWAITING_SELECTION, "cancelled"): CaptureState.IDLE,
    (CaptureState.CROPPING, "finished"): CaptureState.IDLE,
}


class CaptureResult(BaseModel):
    """Outcome of one capture attempt, reported back to the UI."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    status: Literal["captured", "cancelled", "failed"]
    note: Note | None = None
    error: CaptureError | None = None

    @property
    def ok(self) -> bool:
        return self.status == "captured"


class RegionCaptureController:
    """Drives region, full-frame, and native-snip captures for one session."""

    def __init__(
        self,
        session: Session,
        provider: ScreenshotProvider,
        cropper: ImageCropper | None = None,
        snipper: NativeSnipCapture | None = None,
        min_drag_size: int = DEFAULT_MIN_DRAG_SIZE,
    ) -> None:
        self._session = session
        self._provider = provider
        self._cropper = cropper or ImageCropper()
        self._snipper = snipper
        self._min_drag_size = min_drag_size
        self._state = CaptureState.IDLE
        self._channel: OverlayChannel | None = None
        self._overlay: RegionOverlay | None = None

    @property
    def state(self) -> CaptureState:
        return self._state

    @property
    def is_busy(self) -> bool:
        return self._state != CaptureState.IDLE

    @property
    def overlay(self) -> RegionOverlay | None:
        return self._overlay

    def _transition(self, event: str) -> CaptureState:
        target = TRANSITIONS.get((self._state, event))
        if target is None:
            raise CaptureStateError(self._state.value, event)
        logger.debug("Capture state %s --%s--> %s", self._state.value, event, target.value)
        self._state = target
        return target

    # ------------------------------------------------------------------
    # Region capture
    # ------------------------------------------------------------------

    def begin_region_capture(self, device_pixel_ratio: float = 1.0) -> RegionOverlay:
        """Open a new overlay gesture.

        Raises:
            CaptureStateError: If a capture is already in progress.
        """
        self._transition("begin")
        self._channel = OverlayChannel()
        self._overlay = RegionOverlay(
            self._channel,
            device_pixel_ratio=device_pixel_ratio,
            min_drag_size=self._min_drag_size,
        )
        logger.info("Region capture started")
        return self._overlay

    def cancel_region_capture(self) -> bool:
        """Cancel the open overlay. Returns False if there was nothing to cancel."""
        if self._state != CaptureState.AWAITING_SELECTION or self._overlay is None:
            return False
        return self._overlay.escape()

    async def wait_for_selection(self) -> CaptureResult:
        """Consume the overlay's message and run the crop pipeline.

        Raises:
            CaptureStateError: If no overlay is waiting for a selection.
        """
        if self._state != CaptureState.AWAITING_SELECTION or self._channel is None:
            raise CaptureStateError(self._state.value, "wait")

        message = await self._channel.receive()
        self._channel = None
        self._overlay = None

        if isinstance(message, Selected):
            self._transition("selected")
            return await self._run("Region capture", self._crop_selection(message.selection))

        self._transition("cancelled")
        logger.info("Region capture cancelled")
        return CaptureResult(status="cancelled")

    async def _crop_selection(self, selection: RegionSelection) -> Note:
        monitors = await self._provider.list_monitors()
        match = resolve_monitor(selection, monitors)
        frame = await self._provider.capture_monitor(match.monitor.id)
        rect = match.to_local(selection)
        cropped = await self._cropper.crop(frame, rect, selection.device_pixel_ratio)
        return self._session.add_note(
            Note(type=NoteType.SCREENSHOT, text=str(cropped.resolve()))
        )

    # ------------------------------------------------------------------
    # Full-frame and native captures
    # ------------------------------------------------------------------

    async def capture_screenshot(self, monitor_id: int | None = None) -> CaptureResult:
        """Capture a whole monitor (the first one by default) as a note.

        Raises:
            CaptureStateError: If a capture is already in progress.
        """
        self._transition("capture")
        return await self._run("Screenshot", self._capture_full(monitor_id))

    async def _capture_full(self, monitor_id: int | None) -> Note:
        if monitor_id is None:
            monitor_id = (await self._provider.first_monitor()).id
        frame = await self._provider.capture_monitor(monitor_id)
        return self._session.add_note(
            Note(type=NoteType.SCREENSHOT, text=str(frame.resolve()))
        )

    async def capture_native_snip(self) -> CaptureResult:
        """Use the OS snipping UI instead of the overlay.

        A timeout or user cancellation yields a ``cancelled`` result and
        adds no note.

        Raises:
            CaptureStateError: If a capture is already in progress.
        """
        self._transition("begin")
        if self._snipper is None:
            self._transition("cancelled")
            return CaptureResult(
                status="failed",
                error=CaptureFailedError("Native snipping is not configured"),
            )
        path = None
        try:
            path = await self._snipper.capture()
        except CaptureError as e:
            logger.error("Native snip failed: %s", e)
            return CaptureResult(status="failed", error=e)
        except Exception as e:
            logger.exception("Native snip failed")
            return CaptureResult(status="failed", error=CaptureFailedError(str(e)))
        finally:
            # Any exit without an image, cancellation included, returns to idle.
            if path is None:
                self._transition("cancelled")

        if path is None:
            logger.info("Native snip cancelled or timed out")
            return CaptureResult(status="cancelled")

        self._transition("selected")
        return await self._run("Native snip", self._add_snip(path))

    async def _add_snip(self, path: Path) -> Note:
        return self._session.add_note(Note(type=NoteType.SCREENSHOT, text=str(path.resolve())))

    async def _run(self, label: str, pipeline: Awaitable[Note]) -> CaptureResult:
        """Await a capture pipeline, always returning to idle.

        Task cancellation is not caught; the state still returns to idle.
        """
        try:
            note = await pipeline
        except CaptureError as e:
            logger.error("%s failed: %s", label, e)
            return CaptureResult(status="failed", error=e)
        except OSError as e:
            logger.error("%s failed: %s", label, e)
            return CaptureResult(
                status="failed", error=CaptureFailedError(str(e), e.filename)
            )
        except Exception as e:
            logger.exception("%s failed", label)
            return CaptureResult(status="failed", error=CaptureFailedError(str(e)))
        finally:
            self._transition("finished")
        logger.info("%s added note %s", label, note.id)
        return CaptureResult(status="captured", note=note)
