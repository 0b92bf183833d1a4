"""Tests for export folder packaging."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest

from rapidreporter.domain.models import AssetKind, AssetLink, AssetRef, RenderedReport
from rapidreporter.export.packager import (
    ExportCollisionError,
    ExportIOError,
    ExportPackager,
    export_folder_name,
    rewrite_asset_links,
)

EXPORT_MOMENT = datetime(2026, 2, 20, 18, 23, 45)
FOLDER = "RapidReporter-2026-02-20-1823"


@pytest.fixture
def packager() -> ExportPackager:
    return ExportPackager()


@pytest.fixture
def dest(tmp_path: Path) -> Path:
    return tmp_path / "Documents"


def _shot(source: Path, name: str | None = None) -> AssetRef:
    return AssetRef(
        kind=AssetKind.SCREENSHOT,
        source_path=source,
        export_relative_path=f"assets/screenshots/{name or source.name}",
    )


def _icon(source: Path, name: str = "bug.png") -> AssetRef:
    return AssetRef(
        kind=AssetKind.ICON, source_path=source, export_relative_path=f"assets/icons/{name}"
    )


def _image(asset: AssetRef, alt: str = "Screenshot") -> str:
    if asset.kind == AssetKind.ICON:
        return f'<img src="{asset.export_relative_path}" width="25" valign="middle">'
    return f"![{alt}](<{asset.export_relative_path}>)"


def _report(*parts: str | AssetRef) -> RenderedReport:
    """Join text and asset links into a report, recording each link's span."""
    markdown = ""
    assets: list[AssetRef] = []
    links: list[AssetLink] = []
    for part in parts:
        if isinstance(part, str):
            markdown += part
            continue
        element = _image(part)
        links.append(
            AssetLink(
                kind=part.kind,
                export_relative_path=part.export_relative_path,
                start=len(markdown),
                end=len(markdown) + len(element),
            )
        )
        assets.append(part)
        markdown += element
    return RenderedReport(markdown=markdown, assets=assets, links=links)


class TestFolderName:
    def test_uses_24_hour_clock(self) -> None:
        assert export_folder_name(datetime(2026, 2, 20, 6, 5)) == "RapidReporter-2026-02-20-0605"
        assert export_folder_name(EXPORT_MOMENT) == FOLDER


class TestRewriteLinks:
    def test_renamed_and_missing(self, tmp_path: Path) -> None:
        report = _report(
            _icon(tmp_path / "bug.png"),
            "\n",
            _shot(tmp_path / "a.png"),
            "\n",
            _shot(Path("/gone/b.png")),
            "\n",
        )
        result = rewrite_asset_links(
            report.markdown,
            report.links,
            renamed={"assets/icons/bug.png": "assets/icons/bug-2.png"},
            missing={"assets/screenshots/b.png": Path("/gone/b.png")},
        )
        assert 'src="assets/icons/bug-2.png"' in result
        assert "![Screenshot](<assets/screenshots/a.png>)" in result
        assert "> Screenshot not found: `/gone/b.png`" in result
        assert "b.png>)" not in result

    def test_swapped_names_do_not_chain(self, tmp_path: Path) -> None:
        report = _report(_shot(tmp_path / "a.png"), " ", _shot(tmp_path / "b.png"))
        result = rewrite_asset_links(
            report.markdown,
            report.links,
            renamed={
                "assets/screenshots/a.png": "assets/screenshots/b.png",
                "assets/screenshots/b.png": "assets/screenshots/c.png",
            },
            missing={},
        )
        assert result == (
            "![Screenshot](<assets/screenshots/b.png>) ![Screenshot](<assets/screenshots/c.png>)"
        )

    def test_text_outside_links_is_untouched(self, tmp_path: Path) -> None:
        snippet = "```\n![x](<assets/screenshots/gone.png>)\n```\n"
        report = _report(snippet, _shot(tmp_path / "gone.png"), "\n")
        result = rewrite_asset_links(
            report.markdown,
            report.links,
            renamed={},
            missing={"assets/screenshots/gone.png": tmp_path / "gone.png"},
        )
        assert result.startswith(snippet)
        assert result.count("Screenshot not found") == 1


class TestPackage:
    @pytest.mark.asyncio
    async def test_layout(
        self, packager: ExportPackager, dest: Path, screenshot_file: Path
    ) -> None:
        report = _report("# Report\n\n", _shot(screenshot_file), "\n")
        result = await packager.package(report, dest, now=EXPORT_MOMENT)

        assert result.folder == dest / FOLDER
        assert result.markdown_path == dest / FOLDER / f"{FOLDER}.md"
        assert result.missing_assets == []
        assert (result.folder / "assets" / "icons").is_dir()
        copied = result.folder / "assets" / "screenshots" / "shot-1.png"
        assert copied.read_bytes() == screenshot_file.read_bytes()
        assert result.markdown_path.read_text(encoding="utf-8") == report.markdown
        assert sorted(p.name for p in result.folder.iterdir()) == [f"{FOLDER}.md", "assets"]

    @pytest.mark.asyncio
    async def test_existing_folder_is_not_touched(
        self, packager: ExportPackager, dest: Path, screenshot_file: Path
    ) -> None:
        existing = dest / FOLDER
        existing.mkdir(parents=True)
        (existing / "notes.txt").write_text("keep me")

        with pytest.raises(ExportCollisionError) as exc_info:
            await packager.package(
                _report("# R\n", _shot(screenshot_file)), dest, now=EXPORT_MOMENT
            )

        assert exc_info.value.folder == existing
        assert [p.name for p in existing.iterdir()] == ["notes.txt"]
        assert (existing / "notes.txt").read_text() == "keep me"

    @pytest.mark.asyncio
    async def test_missing_screenshot_is_reported(
        self, packager: ExportPackager, dest: Path, tmp_path: Path
    ) -> None:
        gone = tmp_path / "gone.png"
        report = _report("**Screenshot** (18:01:00)\n\n", _shot(gone), "\n")

        result = await packager.package(report, dest, now=EXPORT_MOMENT)

        assert result.missing_assets == [gone]
        text = result.markdown_path.read_text(encoding="utf-8")
        assert f"> Screenshot not found: `{gone}`" in text
        assert "assets/screenshots/gone.png" not in text
        assert list((result.folder / "assets" / "screenshots").iterdir()) == []

    @pytest.mark.asyncio
    async def test_missing_screenshot_with_spaced_name(
        self, packager: ExportPackager, dest: Path, tmp_path: Path
    ) -> None:
        gone = tmp_path / "Screen Shot 2026-02-20 at 18.01.png"
        report = _report("**Screenshot** (18:01:00)\n\n", _shot(gone), "\n")

        result = await packager.package(report, dest, now=EXPORT_MOMENT)

        text = result.markdown_path.read_text(encoding="utf-8")
        assert "Screenshot not found" in text
        assert "assets/screenshots/Screen Shot" not in text
        assert result.missing_assets == [gone]

    @pytest.mark.asyncio
    async def test_snippet_text_stays_verbatim(
        self, packager: ExportPackager, dest: Path, tmp_path: Path
    ) -> None:
        gone = tmp_path / "gone.png"
        snippet = "````\n![x](assets/screenshots/gone.png)\n![y](<assets/screenshots/gone.png>)\n````\n\n"
        report = _report(snippet, _shot(gone), "\n")

        result = await packager.package(report, dest, now=EXPORT_MOMENT)

        text = result.markdown_path.read_text(encoding="utf-8")
        assert text.startswith(snippet)
        assert text.count("Screenshot not found") == 1

    @pytest.mark.asyncio
    async def test_case_collision_is_renamed(
        self, packager: ExportPackager, dest: Path, tmp_path: Path, screenshot_file: Path
    ) -> None:
        other = tmp_path / "other" / "Shot-1.png"
        other.parent.mkdir()
        other.write_bytes(b"second")
        report = _report(_shot(screenshot_file), "\n", _shot(other), "\n")

        result = await packager.package(report, dest, now=EXPORT_MOMENT)

        text = result.markdown_path.read_text(encoding="utf-8")
        assert "![Screenshot](<assets/screenshots/shot-1.png>)" in text
        assert "![Screenshot](<assets/screenshots/Shot-1-2.png>)" in text
        assert (result.folder / "assets" / "screenshots" / "Shot-1-2.png").read_bytes() == b"second"

    @pytest.mark.asyncio
    async def test_shared_asset_copied_once(
        self, packager: ExportPackager, dest: Path, tmp_path: Path
    ) -> None:
        icon = tmp_path / "bug.png"
        icon.write_bytes(b"icon")
        ref = _icon(icon)

        result = await packager.package(_report(ref, " x ", ref), dest, now=EXPORT_MOMENT)

        assert [p.name for p in (result.folder / "assets" / "icons").iterdir()] == ["bug.png"]

    @pytest.mark.asyncio
    async def test_missing_icon_is_an_error(
        self, packager: ExportPackager, dest: Path, tmp_path: Path
    ) -> None:
        report = _report(_icon(tmp_path / "nope.png"), "\n")
        with pytest.raises(ExportIOError) as exc_info:
            await packager.package(report, dest, now=EXPORT_MOMENT)
        assert exc_info.value.step == "copy"
        assert exc_info.value.path == tmp_path / "nope.png"

    @pytest.mark.asyncio
    async def test_unwritable_destination(
        self, packager: ExportPackager, tmp_path: Path
    ) -> None:
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        with pytest.raises(ExportIOError) as exc_info:
            await packager.package(_report("x\n"), blocker / "sub", now=EXPORT_MOMENT)
        assert exc_info.value.step == "create"
