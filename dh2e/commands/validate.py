"""Command: dh2e validate — static checks for rule element sources."""

from __future__ import annotations

import argparse
import dataclasses
import json
import pathlib
import sys
from typing import Any

from rich import box
from rich.console import Console
from rich.table import Table

from validator import RuleValidator, ValidationReport

console = Console(width=200)


def collect_sources(data: Any) -> list[tuple[str, Any]]:
    """
    (location, source) pairs from a list of sources, an item or a character.

      [ {...}, ... ]                    → "rules[i]"
      {"rules": [...]}                  → "<item name>.rules[i]"
      {"items": [{"rules": [...]}]}     → "<item name>.rules[i]"
      {"key": ...}                      → "source"
    """
    if isinstance(data, list):
        return [(f"rules[{i}]", s) for i, s in enumerate(data)]
    if isinstance(data, dict):
        if isinstance(data.get("items"), list):
            out: list[tuple[str, Any]] = []
            for item in data["items"]:
                out.extend(collect_sources(item))
            return out
        if isinstance(data.get("rules"), list):
            name = data.get("name", "item")
            return [(f"{name}.rules[{i}]", s) for i, s in enumerate(data["rules"])]
        if "key" in data:
            return [("source", data)]
    return []


def run(args: argparse.Namespace) -> None:
    path = pathlib.Path(args.file)
    if not path.exists():
        console.print(f"[red]No such file:[/red] {path}")
        raise SystemExit(1)

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        console.print(f"[red]JSON parse error:[/red] {exc}")
        raise SystemExit(1)

    sources = collect_sources(data)
    if not sources:
        console.print("[yellow]No rule element sources found.[/yellow]")
        return

    validator = RuleValidator(strict=args.strict)
    results: list[tuple[str, ValidationReport]] = [
        (location, validator.validate(source)) for location, source in sources
    ]
    n_invalid = sum(1 for _, r in results if not r.is_valid)

    if args.json_output:
        out = [
            {
                "location": location,
                "is_valid": report.is_valid,
                "errors": [dataclasses.asdict(e) for e in report.errors],
                "warnings": report.warnings,
            }
            for location, report in results
        ]
        print(json.dumps(out, ensure_ascii=False, indent=2, default=str))
    else:
        _print_results(results, n_invalid)

    if n_invalid:
        sys.exit(1)


def _print_results(results: list[tuple[str, ValidationReport]], n_invalid: int) -> None:
    errors = [(loc, e) for loc, r in results for e in r.errors]
    warnings = [(loc, w) for loc, r in results for w in r.warnings]

    if errors:
        table = Table(box=box.SIMPLE, show_header=True, header_style="bold")
        table.add_column("Location", style="cyan",   no_wrap=True)
        table.add_column("Code",     style="yellow", no_wrap=True)
        table.add_column("Path",     no_wrap=True)
        table.add_column("Message")
        table.add_column("Fix",      style="dim")
        for loc, e in errors:
            table.add_row(loc, e.code, e.path, e.message, e.expected_fix)
        console.print(table)

    if warnings:
        console.print("[yellow]Warnings:[/yellow]")
        for loc, w in warnings:
            console.print(f"  [yellow]·[/yellow] {loc}: {w}")

    total = len(results)
    if n_invalid:
        console.print(f"[red]INVALID[/red]  {n_invalid} of {total} rule elements have errors.")
    else:
        console.print(f"[green]OK[/green]  {total} rule elements valid.")


def add_parser(subparsers: argparse._SubParsersAction) -> None:  # type: ignore[type-arg]
    p = subparsers.add_parser(
        "validate",
        help="Checks rule element sources (list, item or character JSON).",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
Validates rule element sources (stages A–E):

  A  JSON Schema     (envelope: key, value, predicate, domain types)
  B  Key             (registered key; unknown keys warn, fail with --strict)
  C  Parameters      (required fields, enum values, transforms, choices)
  D  Predicates      (statement shape)
  E  Domains         (segments joined by ':' or '.')

Exits with status 1 when any source has errors.

Examples:
  dh2e validate content/acolyte.json
  dh2e validate rules.json --strict --json-output
        """,
    )
    p.add_argument("file", metavar="FILE", help="JSON: a list of sources, an item or a character.")
    p.add_argument("--strict", action="store_true", help="Treat unknown keys as errors.")
    p.add_argument("--json-output", action="store_true", help="Print the reports as JSON on stdout.")
    p.set_defaults(func=run)
