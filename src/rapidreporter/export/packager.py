"""Export packaging: write a report and its assets into a fresh folder.

Layout produced under the destination root::

    RapidReporter-YYYY-MM-DD-HHMM/
        RapidReporter-YYYY-MM-DD-HHMM.md
        assets/
            icons/
            screenshots/

An existing folder with the same name is never reused. On failure the
partially written folder is left in place and the error names the path
and the step that failed.
"""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path, PurePosixPath

from rapidreporter.domain.models import (
    AssetKind,
    AssetLink,
    AssetRef,
    ExportResult,
    RenderedReport,
)

logger = logging.getLogger(__name__)

FOLDER_PREFIX = "RapidReporter"

ASSET_SUBDIRS: dict[AssetKind, str] = {
    AssetKind.ICON: "assets/icons",
    AssetKind.SCREENSHOT: "assets/screenshots",
}


def export_folder_name(moment: datetime) -> str:
    """``RapidReporter-YYYY-MM-DD-HHMM`` for the given moment (24-hour clock)."""
    return f"{FOLDER_PREFIX}-{moment:%Y-%m-%d-%H%M}"


def rewrite_asset_links(
    markdown: str,
    links: Sequence[AssetLink],
    renamed: dict[str, str],
    missing: dict[str, Path],
) -> str:
    """Rewrite the asset links at ``links`` in one pass.

    Links in ``renamed`` are pointed at their new path; links in
    ``missing`` are replaced by a visible "not found" line naming the
    original file. Text outside the recorded link spans, including
    snippets and note text that happen to contain link syntax, is never
    touched.
    """
    if not renamed and not missing:
        return markdown

    parts: list[str] = []
    cursor = 0
    for link in sorted(links, key=lambda l: l.start):
        rel = link.export_relative_path
        if rel in missing:
            replacement = f"> Screenshot not found: `{missing[rel]}`"
        elif rel in renamed:
            replacement = markdown[link.start:link.end].replace(rel, renamed[rel], 1)
        else:
            continue
        parts.append(markdown[cursor:link.start])
        parts.append(replacement)
        cursor = link.end
    parts.append(markdown[cursor:])
    return "".join(parts)


class ExportPackager:
    """Materialises a rendered report as a self-contained export folder."""

    async def package(
        self,
        report: RenderedReport,
        destination_root: Path | str,
        now: datetime | None = None,
    ) -> ExportResult:
        """Create the export folder, copy assets, and write the Markdown.

        Args:
            report: Rendered Markdown, its assets, and where each asset
                link sits in the text.
            destination_root: Directory that receives the export folder.
            now: Export moment used for the folder name (default: now).

        Raises:
            ExportCollisionError: If the export folder already exists.
            ExportIOError: If a directory, copy, or write step fails.
        """
        moment = now or datetime.now()
        name = export_folder_name(moment)
        folder = Path(destination_root) / name
        loop = asyncio.get_event_loop()

        await loop.run_in_executor(None, self._create_layout, folder)

        taken: set[str] = set()
        seen: set[str] = set()
        renamed: dict[str, str] = {}
        missing: dict[str, Path] = {}
        copied = 0
        for asset in report.assets:
            if asset.export_relative_path in seen:
                continue
            seen.add(asset.export_relative_path)
            target = self._claim_target(asset, taken)
            found = await loop.run_in_executor(
                None, self._copy_asset, asset, folder / target
            )
            if not found:
                missing[asset.export_relative_path] = asset.source_path
                continue
            copied += 1
            if target != asset.export_relative_path:
                renamed[asset.export_relative_path] = target

        markdown = rewrite_asset_links(report.markdown, report.links, renamed, missing)
        markdown_path = folder / f"{name}.md"
        await loop.run_in_executor(None, self._write_markdown, markdown_path, markdown)

        logger.info(
            "Exported report to %s (%d assets, %d missing)",
            markdown_path, copied, len(missing),
        )
        return ExportResult(
            markdown_path=markdown_path,
            folder=folder,
            missing_assets=list(missing.values()),
        )

    def _create_layout(self, folder: Path) -> None:
        try:
            folder.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ExportIOError(folder.parent, "create", str(e)) from e
        try:
            folder.mkdir()
        except FileExistsError as e:
            raise ExportCollisionError(folder) from e
        except OSError as e:
            raise ExportIOError(folder, "create", str(e)) from e
        for subdir in ASSET_SUBDIRS.values():
            path = folder / subdir
            try:
                path.mkdir(parents=True)
            except OSError as e:
                raise ExportIOError(path, "create", str(e)) from e

    def _claim_target(self, asset: AssetRef, taken: set[str]) -> str:
        """Pick a folder-relative target that no other asset in this export uses.

        Names are compared case-insensitively so the export also works on
        case-insensitive file systems.
        """
        subdir = ASSET_SUBDIRS[asset.kind]
        filename = PurePosixPath(asset.export_relative_path).name
        stem, suffix = PurePosixPath(filename).stem, PurePosixPath(filename).suffix
        candidate = f"{subdir}/{filename}"
        counter = 2
        while candidate.lower() in taken:
            candidate = f"{subdir}/{stem}-{counter}{suffix}"
            counter += 1
        taken.add(candidate.lower())
        return candidate

    def _copy_asset(self, asset: AssetRef, dest: Path) -> bool:
        """Copy one asset. Returns False for a screenshot whose source is gone."""
        source = asset.source_path
        if not source.is_file():
            if asset.kind == AssetKind.SCREENSHOT:
                logger.warning("Screenshot file does not exist: %s", source)
                return False
            raise ExportIOError(source, "copy", "Icon file does not exist")
        try:
            shutil.copyfile(source, dest)
        except OSError as e:
            raise ExportIOError(dest, "copy", str(e)) from e
        return True

    def _write_markdown(self, path: Path, markdown: str) -> None:
        tmp_path = path.with_name(f".{path.name}.tmp")
        try:
            tmp_path.write_bytes(markdown.encode("utf-8"))
            os.replace(tmp_path, path)
        except OSError as e:
            raise ExportIOError(path, "write", str(e)) from e


class ExportError(Exception):
    """Base class for export failures."""


class ExportCollisionError(ExportError):
    """Raised when the export folder for this minute already exists."""

    def __init__(self, folder: Path) -> None:
        super().__init__(f"Export folder already exists: {folder}")
        self.folder = folder


class ExportIOError(ExportError):
    """Raised when creating, copying, or writing part of an export fails."""

    def __init__(self, path: Path, step: str, reason: str = "") -> None:
        message = f"Export {step} failed for {path}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.path = path
        self.step = step
