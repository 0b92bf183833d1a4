"""Screen capture module for rapidreporter.

Provides monitor enumeration and full-frame capture, the monitor
resolver for global-desktop selections, and the crop operation. The
abstract base class allows alternative screenshot backends (including
test doubles).

Public API:
    ScreenshotProvider -- Abstract base class
    MssScreenshotProvider -- mss implementation
    NativeSnipCapture -- Windows Snipping Tool fallback
    ImageCropper -- Crops captured frames
    resolve_monitor -- Monitor Resolver
"""

from rapidreporter.capture.base import (
    CaptureError,
    CaptureFailedError,
    CaptureStateError,
    NoMonitorsAvailableError,
    PermissionDeniedError,
    ScreenshotProvider,
)
from rapidreporter.capture.monitors import resolve_monitor

__all__ = [
    "CaptureError",
    "CaptureFailedError",
    "CaptureStateError",
    "ImageCropper",
    "MssScreenshotProvider",
    "NativeSnipCapture",
    "NoMonitorsAvailableError",
    "PermissionDeniedError",
    "ScreenshotProvider",
    "resolve_monitor",
]


def __getattr__(name: str) -> type:
    """Lazy import for concrete implementations that require external deps."""
    if name == "MssScreenshotProvider":
        from rapidreporter.capture.mss_provider import MssScreenshotProvider
        return MssScreenshotProvider
    if name == "NativeSnipCapture":
        from rapidreporter.capture.snip import NativeSnipCapture
        return NativeSnipCapture
    if name == "ImageCropper":
        from rapidreporter.capture.crop import ImageCropper
        return ImageCropper
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
