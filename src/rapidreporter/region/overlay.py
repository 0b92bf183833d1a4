"""The capture overlay actor.

Tracks one pointer-drag gesture on a full-screen transparent surface.
Positions are recorded both in overlay-local coordinates (for drawing
the rubber band) and in global desktop coordinates, because on
multi-monitor layouts the two differ. The submitted selection is always
global.
"""

from __future__ import annotations

import logging

from rapidreporter.domain.models import CropRect, RegionSelection
from rapidreporter.region.messages import Cancelled, OverlayChannel, Selected

logger = logging.getLogger(__name__)

Point = tuple[int, int]

DEFAULT_MIN_DRAG_SIZE = 5


def normalize_drag(start: Point, end: Point) -> tuple[int, int, int, int]:
    """Turn two drag corners into ``(left, top, width, height)``."""
    (x1, y1), (x2, y2) = start, end
    return min(x1, x2), min(y1, y2), abs(x2 - x1), abs(y2 - y1)


class RegionOverlay:
    """Turns pointer events into a single :class:`Selected` or :class:`Cancelled`.

    A drag smaller than ``min_drag_size`` in either dimension is treated
    as a stray click: nothing is sent and the overlay waits for another
    drag. Once a selection has been sent, or the overlay was cancelled,
    every further event is ignored.
    """

    def __init__(
        self,
        channel: OverlayChannel,
        device_pixel_ratio: float = 1.0,
        min_drag_size: int = DEFAULT_MIN_DRAG_SIZE,
    ) -> None:
        self._channel = channel
        self._device_pixel_ratio = device_pixel_ratio
        self._min_drag_size = min_drag_size
        self._start_local: Point | None = None
        self._start_global: Point | None = None
        self._current_local: Point | None = None
        self._closed = False

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def is_dragging(self) -> bool:
        return self._start_global is not None

    @property
    def current_rect(self) -> CropRect | None:
        """The rubber band in overlay-local coordinates, if a drag is active."""
        if self._start_local is None or self._current_local is None:
            return None
        left, top, width, height = normalize_drag(self._start_local, self._current_local)
        if width == 0 or height == 0:
            return None
        return CropRect(x=left, y=top, width=width, height=height)

    def pointer_down(self, local: Point, global_: Point) -> None:
        if self._closed:
            return
        self._start_local = local
        self._start_global = global_
        self._current_local = local

    def pointer_move(self, local: Point, global_: Point) -> None:
        if self._closed or self._start_global is None:
            return
        self._current_local = local

    def pointer_up(self, local: Point, global_: Point) -> RegionSelection | None:
        """Finish the drag and submit it if large enough.

        Returns:
            The submitted selection, or None if the event was ignored or
            the drag was discarded as noise.
        """
        if self._closed or self._start_global is None:
            return None

        left, top, width, height = normalize_drag(self._start_global, global_)
        self._reset_drag()

        if width < self._min_drag_size or height < self._min_drag_size:
            logger.debug("Ignoring %dx%d drag below %d", width, height, self._min_drag_size)
            return None

        selection = RegionSelection(
            x=left,
            y=top,
            width=width,
            height=height,
            device_pixel_ratio=self._device_pixel_ratio,
        )
        self._closed = True
        self._channel.send(Selected(selection=selection))
        logger.debug("Submitted selection %s", selection)
        return selection

    def escape(self) -> bool:
        """Cancel the overlay. Returns False if it was already closed."""
        if self._closed:
            return False
        self._reset_drag()
        self._closed = True
        self._channel.send(Cancelled())
        return True

    def _reset_drag(self) -> None:
        self._start_local = None
        self._start_global = None
        self._current_local = None
