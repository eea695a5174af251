"""Tests for the command line entrypoints."""

from pathlib import Path

import pytest

from seekcheck.cli.app import main
from seekcheck.cli.commands_check import CheckCommand, execute
from seekcheck.storage.reports import read_sweep_report

from conftest import IMAGE, MEDIA


@pytest.fixture
def single_config(tmp_path):
    module = tmp_path / "single_cfg.py"
    module.write_text(
        "from seekcheck.config.schema import HarnessConfig, OptionFlags\n"
        "CONFIG = HarnessConfig(sweep=[OptionFlags(trim_duration=True)])\n",
        encoding="utf-8",
    )
    return f"{module}:CONFIG"


def test_passing_run_writes_report(tmp_path, session_factory, single_config, capsys):
    report_path = tmp_path / "out" / "report.json"
    command = CheckCommand(
        media=Path(MEDIA),
        image=Path(IMAGE),
        config=single_config,
        report=report_path,
    )
    assert execute(command, session_factory=session_factory) == 0
    assert "All tests OK" in capsys.readouterr().out

    report = read_sweep_report(report_path)
    assert report["ok"] is True
    assert report["schema"] == "seekcheck-report/v1"
    assert report["checks"] == {"image": True, "unavailable_source": True, "next_frame": True}
    assert report["configurations"][0]["label"] == "test-video-trimdur"
    assert report["configurations"][0]["sequences_run"] == 325


def test_failing_run_exits_non_zero(session_factory, single_config, capsys):
    command = CheckCommand(media=Path(MEDIA), image=Path("missing.jpg"), config=single_config)
    assert execute(command, session_factory=session_factory) == 1
    assert "didn't get an image" in capsys.readouterr().err


def test_verbose_prints_sequence_labels(session_factory, single_config, capsys):
    command = CheckCommand(media=Path(MEDIA), image=Path(IMAGE), config=single_config, verbose=True)
    assert execute(command, session_factory=session_factory) == 0
    out = capsys.readouterr().out
    assert ":: test-video-trimdur-prefetch" in out
    assert ":: test-video-trimdur-prefetch-fetchinfo-start-middle-end" in out


def test_requires_two_positionals():
    with pytest.raises(SystemExit) as excinfo:
        main(["only-media.mkv"])
    assert excinfo.value.code != 0
