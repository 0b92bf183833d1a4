"""The ``export_session`` boundary used by the UI.

Renders a session, makes sure the icons it uses exist on disk, and
packages everything into a new export folder. The session itself is
never modified, so a failed export can simply be retried.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from rapidreporter.config.settings import ExportConfig
from rapidreporter.domain.models import AssetKind, ExportResult, NoteType, Session
from rapidreporter.export.packager import ExportIOError, ExportPackager
from rapidreporter.report.icons import IconLibrary
from rapidreporter.report.renderer import render_session

logger = logging.getLogger(__name__)


class SessionExporter:
    """Exports sessions into ``destination_root``."""

    def __init__(
        self,
        destination_root: Path | str,
        icons: IconLibrary,
        packager: ExportPackager | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._destination_root = Path(destination_root)
        self._icons = icons
        self._packager = packager or ExportPackager()
        self._clock = clock

    @classmethod
    def from_config(cls, config: ExportConfig) -> SessionExporter:
        icons = IconLibrary(config.icon_cache_dir, custom_dir=config.icon_dir)
        return cls(config.destination_root.expanduser(), icons)

    @property
    def destination_root(self) -> Path:
        return self._destination_root

    async def export_session(self, session: Session) -> ExportResult:
        """Write ``session`` as a Markdown report folder.

        Raises:
            ExportCollisionError: If this minute's export folder exists.
            ExportIOError: If icons, assets, or the report cannot be written.
        """
        report = render_session(session, self._icons.icon_paths())

        icon_types = [
            NoteType(Path(a.export_relative_path).stem)
            for a in report.assets_of(AssetKind.ICON)
        ]
        try:
            await self._icons.materialize(icon_types)
        except (OSError, ValueError) as e:
            raise ExportIOError(self._icons.path_for(icon_types[0]), "icons", str(e)) from e

        logger.info(
            "Exporting session '%s' (%d notes) to %s",
            session.charter, session.note_count, self._destination_root,
        )
        return await self._packager.package(
            report, self._destination_root, now=self._clock()
        )
