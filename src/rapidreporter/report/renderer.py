"""Markdown rendering of a session report.

Turns a :class:`Session` into Markdown text plus the list of asset
files the text references. Rendering is pure: no file is read or
written, and the same session always renders to the same bytes.

Layout::

    # Rapid Reporter Session
    - **Tester:** ...          (metadata header)
    ## Summary                 (only when an icon-backed type was used)
    ## Notes                   (chronological)
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from collections.abc import Mapping
from datetime import datetime
from pathlib import Path, PurePath

from rapidreporter.domain.models import (
    AssetKind,
    AssetLink,
    AssetRef,
    Note,
    NoteType,
    RenderedReport,
    Session,
)
from rapidreporter.report.icons import ICON_STYLES, icon_filename

logger = logging.getLogger(__name__)

REPORT_TITLE = "Rapid Reporter Session"
ICONS_DIR = "assets/icons"
SCREENSHOTS_DIR = "assets/screenshots"
SUMMARY_ICON_WIDTH = 50
NOTE_ICON_WIDTH = 25

# Summary order and singular/plural labels.
SUMMARY_LABELS: dict[NoteType, tuple[str, str]] = {
    NoteType.BUG: ("Bug", "Bugs"),
    NoteType.IDEA: ("Idea", "Ideas"),
    NoteType.OBSERVATION: ("Observation", "Observations"),
    NoteType.QUESTION: ("Question", "Questions"),
    NoteType.WARNING: ("Warning", "Warnings"),
}

_BACKTICK_RUN = re.compile(r"`+")
# Not allowed inside a ``<...>`` link destination.
_UNSAFE_NAME_CHARS = re.compile(r"[<>\r\n]")


def pluralize(count: int, note_type: NoteType) -> str:
    """Format ``count`` with the singular or plural label of ``note_type``."""
    singular, plural = SUMMARY_LABELS[note_type]
    return f"{count} {singular if count == 1 else plural}"


def summary_counts(notes: list[Note]) -> dict[NoteType, int]:
    """Count notes per summary type, in summary order (zeros included)."""
    counts = Counter(note.type for note in notes)
    return {t: counts.get(t, 0) for t in SUMMARY_LABELS}


def format_duration(duration_minutes: int | None) -> str:
    return "No limit" if duration_minutes is None else f"{duration_minutes} min"


def code_fence(text: str) -> str:
    """A backtick fence longer than any backtick run inside ``text``."""
    longest = max((len(m.group()) for m in _BACKTICK_RUN.finditer(text)), default=0)
    return "`" * max(3, longest + 1)


def _local(moment: datetime) -> datetime:
    return moment.astimezone() if moment.tzinfo is not None else moment


def _one_line(value: str) -> str:
    return " ".join(value.split())


class _ReportBuilder:
    """Accumulates Markdown blocks, the assets they reference, and where
    each asset link sits in the final text.

    Links created by :meth:`icon` or :meth:`screenshot` are located when
    the block holding them is added. They always precede any user text
    in their block, so the first occurrence after the previous link is
    the emitted one.
    """

    def __init__(self, icon_paths: Mapping[NoteType, Path]) -> None:
        self._icon_paths = icon_paths
        self._blocks: list[str] = []
        self._assets: list[AssetRef] = []
        self._links: list[AssetLink] = []
        self._pending: list[tuple[AssetKind, str, str]] = []
        self._offset = 0
        self._icons_used: set[NoteType] = set()
        self._screenshot_names: set[str] = set()

    def add(self, block: str) -> None:
        if self._blocks:
            self._offset += 2
        cursor = 0
        for kind, rel, element in self._pending:
            start = block.index(element, cursor)
            cursor = start + len(element)
            self._links.append(
                AssetLink(
                    kind=kind,
                    export_relative_path=rel,
                    start=self._offset + start,
                    end=self._offset + cursor,
                )
            )
        self._pending.clear()
        self._blocks.append(block)
        self._offset += len(block)

    def icon(self, note_type: NoteType, width: int) -> str:
        rel = f"{ICONS_DIR}/{icon_filename(note_type)}"
        if note_type not in self._icons_used:
            self._icons_used.add(note_type)
            self._assets.append(
                AssetRef(
                    kind=AssetKind.ICON,
                    source_path=self._icon_paths[note_type],
                    export_relative_path=rel,
                )
            )
        element = f'<img src="{rel}" width="{width}" valign="middle">'
        self._pending.append((AssetKind.ICON, rel, element))
        return element

    def screenshot(self, source: str, alt: str) -> str:
        """Register a screenshot and return its image link.

        The destination is wrapped in ``<...>`` so names with spaces or
        parentheses stay valid CommonMark.
        """
        raw_name = PurePath(source).name or "screenshot.png"
        name = self._unique_name(_UNSAFE_NAME_CHARS.sub("_", raw_name))
        rel = f"{SCREENSHOTS_DIR}/{name}"
        self._assets.append(
            AssetRef(kind=AssetKind.SCREENSHOT, source_path=Path(source), export_relative_path=rel)
        )
        element = f"![{alt}](<{rel}>)"
        self._pending.append((AssetKind.SCREENSHOT, rel, element))
        return element

    def _unique_name(self, name: str) -> str:
        stem, dot, suffix = name.rpartition(".")
        if not dot:
            stem, suffix = name, ""
        candidate = name
        counter = 2
        while candidate.lower() in self._screenshot_names:
            candidate = f"{stem}-{counter}{dot}{suffix}"
            counter += 1
        self._screenshot_names.add(candidate.lower())
        return candidate

    def build(self) -> RenderedReport:
        return RenderedReport(
            markdown="\n\n".join(self._blocks) + "\n",
            assets=self._assets,
            links=self._links,
        )


def render_header(session: Session) -> str:
    started = _local(session.started_at).strftime("%Y-%m-%d %H:%M")
    return "\n".join(
        [
            f"# {REPORT_TITLE}",
            "",
            f"- **Tester:** {_one_line(session.tester_name)}",
            f"- **Charter:** {_one_line(session.charter)}",
            f"- **Started:** {started}",
            f"- **Duration:** {format_duration(session.duration_minutes)}",
        ]
    )


def _render_summary(notes: list[Note], builder: _ReportBuilder) -> str | None:
    counts = summary_counts(notes)
    if not any(counts.values()):
        return None
    lines = ["## Summary"]
    for note_type, count in counts.items():
        if count > 0:
            lines.append("")
            lines.append(f"{builder.icon(note_type, SUMMARY_ICON_WIDTH)} {pluralize(count, note_type)}")
    return "\n".join(lines)


def _render_note(note: Note, builder: _ReportBuilder) -> str:
    time_label = _local(note.timestamp).strftime("%H:%M:%S")
    heading = f"**{note.type.label}** ({time_label})"

    if note.type == NoteType.SCREENSHOT:
        link = builder.screenshot(note.text, f"Screenshot {time_label}")
        return f"{heading}\n\n{link}"

    if note.type == NoteType.SNIPPET:
        fence = code_fence(note.text)
        body = note.text if note.text.endswith("\n") else note.text + "\n"
        return f"{heading}\n\n{fence}\n{body}{fence}"

    if note.type in ICON_STYLES:
        heading = f"{builder.icon(note.type, NOTE_ICON_WIDTH)} {heading}"
    # Trailing double space keeps the author's line breaks in Markdown.
    body = "  \n".join(line.rstrip() for line in note.text.strip().splitlines())
    return f"{heading}  \n{body}"


def render_session(session: Session, icon_paths: Mapping[NoteType, Path]) -> RenderedReport:
    """Render ``session`` to Markdown and collect the assets it references.

    ``session.notes`` is stored newest-first; the report lists notes in
    the order they were recorded.

    Args:
        session: The session to render.
        icon_paths: Source file for each icon-backed note type.
    """
    notes = session.chronological_notes()
    builder = _ReportBuilder(icon_paths)

    builder.add(render_header(session))
    summary = _render_summary(notes, builder)
    if summary is not None:
        builder.add(summary)

    builder.add("## Notes")
    for note in notes:
        builder.add(_render_note(note, builder))

    report = builder.build()
    logger.debug(
        "Rendered %d notes, %d assets (%d bytes)",
        len(notes), len(report.assets), len(report.markdown),
    )
    return report
