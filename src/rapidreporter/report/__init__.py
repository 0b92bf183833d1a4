"""Report rendering for rapidreporter.

Public API:
    render_session -- Session -> RenderedReport (pure)
    IconLibrary -- Icon source files for the report
"""

from rapidreporter.report.icons import ICON_TYPES, IconLibrary
from rapidreporter.report.renderer import pluralize, render_session

__all__ = ["ICON_TYPES", "IconLibrary", "pluralize", "render_session"]
