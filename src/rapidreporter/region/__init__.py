"""Region capture protocol for rapidreporter.

The overlay actor turns a drag gesture into a global selection and
sends it over a typed channel; the controller consumes it, crops the
owning monitor's frame, and records a screenshot note.

Public API:
    RegionCaptureController -- Main actor state machine
    RegionOverlay -- Overlay actor
    OverlayChannel, Selected, Cancelled -- Channel and messages
"""

from rapidreporter.region.controller import (
    CaptureResult,
    CaptureState,
    RegionCaptureController,
)
from rapidreporter.region.messages import Cancelled, OverlayChannel, Selected
from rapidreporter.region.overlay import RegionOverlay

__all__ = [
    "Cancelled",
    "CaptureResult",
    "CaptureState",
    "OverlayChannel",
    "RegionCaptureController",
    "RegionOverlay",
    "Selected",
]
