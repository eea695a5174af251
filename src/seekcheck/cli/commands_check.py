"""`seekcheck MEDIA IMAGE` command."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from rich.console import Console
from rich.table import Table
import tyro

from seekcheck.config.loader import load_harness_config
from seekcheck.config.profiles import apply_profile
from seekcheck.harness.executor import SequenceResult, SweepReport
from seekcheck.harness.smoke import HarnessResult, run_all
from seekcheck.observability.logging import configure_logging
from seekcheck.player.engine import create_player
from seekcheck.player.session import SessionFactory
from seekcheck.storage.reports import write_sweep_report


@dataclass(slots=True)
class CheckCommand:
    """Verify a player's seek and timestamp contract against synthetic media."""

    media: tyro.conf.Positional[Path]
    """Synthetic test video (see seekcheck-fixtures)."""
    image: tyro.conf.Positional[Path]
    """Still image used by the image check."""
    profile: str | None = None
    """Sweep profile (default, audio or full); overrides the config's sweep."""
    config: str | None = None
    """Harness config as module_or_path:attribute or a .json file."""
    report: Path | None = None
    """Write a JSON report to this path."""
    log_level: str = "WARNING"
    verbose: bool = False
    """Print every sequence label as it completes."""


def _summary_table(report: SweepReport) -> Table:
    table = Table(title=f"seekcheck {report.source}")
    table.add_column("configuration")
    table.add_column("sequences", justify="right")
    table.add_column("seconds", justify="right")
    table.add_column("result")
    for item in report.configurations:
        status = "[green]ok[/green]" if item.ok else f"[red]failed: {item.failure.label}[/red]"
        table.add_row(item.flags.label, str(item.sequences_run), f"{item.elapsed_s:.2f}", status)
    return table


def execute(command: CheckCommand, session_factory: SessionFactory = create_player) -> int:
    configure_logging(command.log_level)
    cfg = load_harness_config(command.config)
    if command.profile is not None:
        apply_profile(cfg, command.profile)

    out = Console()
    err = Console(stderr=True)

    def _progress(outcome: SequenceResult) -> None:
        if command.verbose or not outcome.ok:
            out.print(f":: {outcome.label}", highlight=False)

    result: HarnessResult = run_all(
        str(command.media),
        str(command.image),
        session_factory,
        config=cfg,
        on_sequence=_progress,
    )

    if result.report is not None:
        out.print(_summary_table(result.report))
    if command.report is not None and result.report is not None:
        write_sweep_report(command.report, result.report, checks=result.checks)

    if not result.ok:
        err.print(result.error or "test failed", highlight=False, markup=False)
        return 1
    out.print("All tests OK")
    return 0
