"""Resolve which monitor owns a global-desktop selection."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from rapidreporter.capture.base import NoMonitorsAvailableError
from rapidreporter.domain.models import Monitor, MonitorMatch, RegionSelection

logger = logging.getLogger(__name__)


def resolve_monitor(
    selection: RegionSelection, monitors: Sequence[Monitor]
) -> MonitorMatch:
    """Find the monitor containing the selection's top-left corner.

    Monitors are assumed not to overlap, so the first one in the given
    order wins. When none contains the point (e.g. the drag started on a
    gap in the layout) the first monitor is used and ``matched`` is False.
    This fallback changes which pixels get cropped, so keep it as is.

    Raises:
        NoMonitorsAvailableError: If ``monitors`` is empty.
    """
    if not monitors:
        raise NoMonitorsAvailableError()

    for monitor in monitors:
        if monitor.contains(selection.x, selection.y):
            return MonitorMatch(monitor=monitor, origin_x=monitor.x, origin_y=monitor.y)

    fallback = monitors[0]
    logger.warning(
        "Selection at (%d, %d) is outside every monitor; falling back to monitor %d",
        selection.x, selection.y, fallback.id,
    )
    return MonitorMatch(
        monitor=fallback, origin_x=fallback.x, origin_y=fallback.y, matched=False
    )
