"""Tests for the command-line interface."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from rapidreporter.cli import load_session_file, main, parse_args
from rapidreporter.domain.models import NoteType

SESSION_YAML = """\
tester_name: Ada
charter: Explore the checkout flow
duration_minutes: 30
started_at: 2026-02-20T18:00:00
notes:
  - type: bug
    text: Total is wrong
    timestamp: 2026-02-20T18:05:00
  - type: test
    text: Added two items
    timestamp: 2026-02-20T18:01:00
"""


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "rapidreporter.yaml"
    path.write_text(
        "export:\n"
        f"  destination_root: {tmp_path / 'exports'}\n"
        f"  icon_cache_dir: {tmp_path / 'icons'}\n"
    )
    return path


@pytest.fixture
def session_file(tmp_path: Path) -> Path:
    path = tmp_path / "session.yaml"
    path.write_text(SESSION_YAML)
    return path


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    logger = logging.getLogger("rapidreporter")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


class TestParseArgs:
    def test_capture_test_region(self) -> None:
        args = parse_args(["capture-test", "--region", "10", "20", "30", "40", "--dpr", "2"])
        assert args.command == "capture-test"
        assert args.region == [10, 20, 30, 40]
        assert args.dpr == 2.0
        assert args.monitor is None

    def test_export_dest(self, tmp_path: Path) -> None:
        args = parse_args(["-v", "export", "s.yaml", "--dest", str(tmp_path)])
        assert args.verbose is True
        assert args.session_file == Path("s.yaml")
        assert args.dest == tmp_path


class TestLoadSessionFile:
    def test_notes_keep_file_order(self, session_file: Path) -> None:
        session = load_session_file(session_file)
        assert session.duration_minutes == 30
        assert [n.type for n in session.notes] == [NoteType.BUG, NoteType.TEST]
        assert session.chronological_notes()[0].text == "Added two items"


class TestMain:
    def test_render(self, config_file: Path, session_file: Path, capsys) -> None:
        assert main(["-c", str(config_file), "render", str(session_file)]) == 0
        out = capsys.readouterr().out
        assert out.startswith("# Rapid Reporter Session\n")
        assert "1 Bug" in out
        assert out.index("Added two items") < out.index("Total is wrong")

    def test_export(
        self, config_file: Path, session_file: Path, tmp_path: Path, capsys
    ) -> None:
        assert main(["-c", str(config_file), "export", str(session_file)]) == 0
        (folder,) = (tmp_path / "exports").iterdir()
        assert folder.name.startswith("RapidReporter-")
        assert (folder / "assets" / "icons" / "bug.png").is_file()
        assert "Report written to" in capsys.readouterr().out

    def test_export_dest_override(
        self, config_file: Path, session_file: Path, tmp_path: Path
    ) -> None:
        dest = tmp_path / "elsewhere"
        assert main(["-c", str(config_file), "export", str(session_file), "--dest", str(dest)]) == 0
        assert len(list(dest.iterdir())) == 1

    def test_invalid_session_file(self, config_file: Path, tmp_path: Path) -> None:
        bad = tmp_path / "bad.yaml"
        bad.write_text("tester_name: Ada\ncharter: ab\n")
        assert main(["-c", str(config_file), "render", str(bad)]) == 2

    def test_missing_session_file(self, config_file: Path, tmp_path: Path) -> None:
        assert main(["-c", str(config_file), "render", str(tmp_path / "nope.yaml")]) == 2

    def test_export_error_exit_code(
        self, config_file: Path, session_file: Path, tmp_path: Path
    ) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        assert main(
            ["-c", str(config_file), "export", str(session_file), "--dest", str(blocker / "x")]
        ) == 1
