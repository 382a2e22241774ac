"""
dh2e — command line tool for the DH2E rules engine.

Usage:
  dh2e [-v] <command> [options]

Commands:
  prepare   Runs a character's rule elements and shows the resulting Synthetics.
  roll      Rolls a d100 test, optionally for a character loaded from JSON.
  validate  Checks rule element sources (list, item or character JSON).
  dos       Computes Degrees of Success / Failure for a roll and a target.

Environment:
  DH2E_MODIFIER_CAP   clamp for resolved modifier totals (default 60)
"""

from __future__ import annotations

import argparse
import logging

from rich.console import Console
from rich.logging import RichHandler

from dh2e import __version__
from dh2e.commands import dos as cmd_dos
from dh2e.commands import prepare as cmd_prepare
from dh2e.commands import roll as cmd_roll
from dh2e.commands import validate as cmd_validate


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dh2e",
        description="DH2E rules engine — command line tool.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version", action="version", version=f"dh2e {__version__}"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Debug logging (preparation passes, check stages).",
    )

    subparsers = parser.add_subparsers(
        title="commands",
        metavar="<command>",
        dest="command",
    )
    subparsers.required = True

    cmd_prepare.add_parser(subparsers)
    cmd_roll.add_parser(subparsers)
    cmd_validate.add_parser(subparsers)
    cmd_dos.add_parser(subparsers)

    return parser


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)
    args.func(args)


if __name__ == "__main__":
    main()
