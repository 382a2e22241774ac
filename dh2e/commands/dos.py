"""Command: dh2e dos — Degrees of Success / Failure for a roll against a target."""

from __future__ import annotations

import argparse
import json

from rich.console import Console

from rule_engine import calculate_dos

console = Console(width=160)


def run(args: argparse.Namespace) -> None:
    try:
        result = calculate_dos(args.roll, args.target)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)

    if args.json_output:
        print(json.dumps({
            "roll": result.roll,
            "target": result.target,
            "success": result.success,
            "degrees": result.degrees,
        }))
        return

    style = "green" if result.success else "red"
    console.print(
        f"Roll [bold]{result.roll}[/bold] vs [bold]{result.target}[/bold]: "
        f"[{style}]{result.label}[/{style}]"
    )


def add_parser(subparsers: argparse._SubParsersAction) -> None:  # type: ignore[type-arg]
    p = subparsers.add_parser(
        "dos",
        help="Degrees of Success / Failure for a roll and a target.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
Tens-digit method: DoS = 1 + tens(target) - tens(roll), DoF the other way
round. A natural 1 always succeeds, a natural 100 always fails.

Examples:
  dh2e dos 23 45
  dh2e dos 100 95 --json-output
        """,
    )
    p.add_argument("roll", type=int, metavar="ROLL", help="d100 result (1–100).")
    p.add_argument("target", type=int, metavar="TARGET", help="Target number after modifiers.")
    p.add_argument(
        "--json-output",
        action="store_true",
        help="Print the result as JSON on stdout.",
    )
    p.set_defaults(func=run)
