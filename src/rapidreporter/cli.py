"""Command-line interface for rapidreporter.

Provides entry points for checking screen capture on this machine and
for rendering or exporting a session described in a YAML/JSON file.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="rapidreporter",
        description="Exploratory-testing session capture and export",
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Path to YAML configuration file (default: config/rapidreporter.yaml)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("monitors", help="List screenshotable monitors")

    capture_parser = subparsers.add_parser(
        "capture-test", help="Capture a monitor (optionally a region of it) and print the path"
    )
    capture_parser.add_argument(
        "--monitor", type=int, default=None,
        help="Monitor id to capture (default: first monitor)",
    )
    capture_parser.add_argument(
        "--region", type=int, nargs=4, metavar=("X", "Y", "W", "H"), default=None,
        help="Global desktop rectangle to crop instead of the full frame",
    )
    capture_parser.add_argument(
        "--dpr", type=float, default=1.0,
        help="Device pixel ratio of the region coordinates",
    )

    render_parser = subparsers.add_parser("render", help="Print the Markdown report of a session file")
    render_parser.add_argument("session_file", type=Path, help="YAML/JSON session file")

    export_parser = subparsers.add_parser("export", help="Export a session file as a report folder")
    export_parser.add_argument("session_file", type=Path, help="YAML/JSON session file")
    export_parser.add_argument(
        "--dest", type=Path, default=None,
        help="Destination root (default: export.destination_root from config)",
    )

    return parser.parse_args(argv)


def load_session_file(path: Path):
    """Load a Session from a YAML or JSON file (notes listed newest first)."""
    import yaml

    from rapidreporter.domain.models import Session

    with open(path) as f:
        data = yaml.safe_load(f) or {}
    return Session.model_validate(data)


async def _list_monitors(settings) -> None:
    from rapidreporter.capture.mss_provider import MssScreenshotProvider

    provider = MssScreenshotProvider(settings.capture.screenshot_dir)
    for monitor in await provider.list_monitors():
        print(
            f"[{monitor.id}] {monitor.width}x{monitor.height} "
            f"at ({monitor.x}, {monitor.y}) {monitor.name}"
        )


async def _capture_test(settings, args) -> None:
    """Capture a frame, or a region of it, and print where it was saved."""
    from rapidreporter.capture.crop import ImageCropper
    from rapidreporter.capture.monitors import resolve_monitor
    from rapidreporter.capture.mss_provider import MssScreenshotProvider
    from rapidreporter.domain.models import RegionSelection

    provider = MssScreenshotProvider(settings.capture.screenshot_dir)
    monitors = await provider.list_monitors()

    if args.region is None:
        monitor_id = args.monitor if args.monitor is not None else monitors[0].id
        path = await provider.capture_monitor(monitor_id)
        print(f"Saved monitor {monitor_id} to {path}")
        return

    x, y, w, h = args.region
    selection = RegionSelection(x=x, y=y, width=w, height=h, device_pixel_ratio=args.dpr)
    match = resolve_monitor(selection, monitors)
    if not match.matched:
        print(f"Region is outside every monitor; using monitor {match.monitor.id}")
    frame = await provider.capture_monitor(match.monitor.id)
    path = await ImageCropper().crop(frame, match.to_local(selection), selection.device_pixel_ratio)
    print(f"Saved region of monitor {match.monitor.id} to {path}")


async def _export(settings, args) -> None:
    from rapidreporter.export.exporter import SessionExporter

    session = load_session_file(args.session_file)
    if args.dest is not None:
        settings.export.destination_root = args.dest
    exporter = SessionExporter.from_config(settings.export)
    result = await exporter.export_session(session)
    print(f"Report written to {result.markdown_path}")
    for path in result.missing_assets:
        print(f"Missing screenshot: {path}")


def _render(settings, args) -> None:
    from rapidreporter.report.icons import IconLibrary
    from rapidreporter.report.renderer import render_session

    session = load_session_file(args.session_file)
    icons = IconLibrary(settings.export.icon_cache_dir, custom_dir=settings.export.icon_dir)
    sys.stdout.write(render_session(session, icons.icon_paths()).markdown)


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the rapidreporter CLI."""
    args = parse_args(argv)

    if args.command is None:
        parse_args(["--help"])
        return 0

    from pydantic import ValidationError

    from rapidreporter.capture.base import CaptureError
    from rapidreporter.config.settings import load_settings
    from rapidreporter.export.packager import ExportError
    from rapidreporter.utils.logging import setup_logging

    settings = load_settings(args.config)

    if args.verbose:
        settings.logging.level = "DEBUG"

    setup_logging(settings.logging)

    try:
        if args.command == "monitors":
            asyncio.run(_list_monitors(settings))

        elif args.command == "capture-test":
            logger.info("Running capture test")
            asyncio.run(_capture_test(settings, args))

        elif args.command == "render":
            _render(settings, args)

        elif args.command == "export":
            logger.info("Exporting %s", args.session_file)
            asyncio.run(_export(settings, args))

    except (CaptureError, ExportError) as e:
        logger.error("%s", e)
        return 1
    except (OSError, ValidationError) as e:
        logger.error("Invalid input: %s", e)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
