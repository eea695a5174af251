"""Tyro CLI application entrypoints."""

from __future__ import annotations

import sys

import tyro

from seekcheck.cli import commands_check, commands_fixtures
from seekcheck.errors import SeekcheckError


def main(argv: list[str] | None = None) -> int:
    """Parse `MEDIA IMAGE [options]` and run every check; return the exit code."""

    command = tyro.cli(commands_check.CheckCommand, args=argv)
    try:
        return commands_check.execute(command)
    except SeekcheckError as exc:
        print(f"test failed: {exc}", file=sys.stderr)
        return 1


def fixtures_main(argv: list[str] | None = None) -> int:
    """Parse `OUT_DIR [options]` and write the synthetic fixtures."""

    command = tyro.cli(commands_fixtures.FixturesCommand, args=argv)
    return commands_fixtures.execute(command)
