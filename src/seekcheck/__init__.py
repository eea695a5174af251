"""seekcheck package entrypoint."""

import sys

from seekcheck.cli.app import fixtures_main as _fixtures_main
from seekcheck.cli.app import main as _cli_main


def main() -> None:
    """Run the seekcheck CLI."""
    sys.exit(_cli_main())


def fixtures_main() -> None:
    """Run the fixture generator CLI."""
    sys.exit(_fixtures_main())
