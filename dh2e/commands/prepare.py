"""Command: dh2e prepare — runs a character's rule elements and shows the Synthetics."""

from __future__ import annotations

import argparse
import dataclasses
import json
from typing import Any

from rich import box
from rich.console import Console
from rich.table import Table

from rule_engine import PreparationReport, prepare_character
from rule_model import Synthetics

from dh2e._env import load_character

console = Console(width=200)


def synthetics_to_dict(synthetics: Synthetics) -> dict[str, Any]:
    return {
        "roll_options": sorted(synthetics.roll_options),
        "modifiers": {
            domain: [
                {
                    "label": m.label,
                    "value": m.value,
                    "source": m.source,
                    "exclusion_group": m.exclusion_group,
                    "predicate": m.predicate.to_raw(),
                }
                for m in mods
            ]
            for domain, mods in sorted(synthetics.modifiers.items())
        },
        "dos_adjustments": [
            {"amount": a.amount, "predicate": a.predicate.to_raw(), "source": a.source}
            for a in synthetics.dos_adjustments
        ],
        "resistances": [
            {"damage_type": r.damage_type, "value": r.value, "mode": str(r.mode), "source": r.source}
            for r in synthetics.resistances
        ],
        "toughness_adjustments": [
            {"value": t.value, "mode": str(t.mode), "source": t.source}
            for t in synthetics.toughness_adjustments
        ],
        "dice_overrides": {
            domain: [{"mode": str(d.mode), "value": d.value, "source": d.source} for d in entries]
            for domain, entries in sorted(synthetics.dice_overrides.items())
        },
        "attribute_overrides": [
            {"domain": o.domain, "characteristic": o.characteristic, "source": o.source}
            for o in synthetics.attribute_overrides
        ],
        "fate_options": [
            {"slug": f.slug, "label": f.label, "effect": str(f.effect), "source": f.source}
            for f in synthetics.fate_options
        ],
    }


def _print_modifiers(synthetics: Synthetics) -> None:
    if not synthetics.modifiers:
        console.print("[yellow]No modifiers.[/yellow]")
        return

    table = Table(
        box=box.SIMPLE_HEAD,
        show_header=True,
        header_style="bold white",
        row_styles=["", "dim"],
    )
    table.add_column("DOMAIN",    no_wrap=True, style="cyan")
    table.add_column("LABEL",     no_wrap=True, style="bold")
    table.add_column("VALUE",     justify="right")
    table.add_column("SOURCE",    no_wrap=True)
    table.add_column("GROUP",     no_wrap=True)
    table.add_column("PREDICATE", max_width=60)

    for domain, mods in sorted(synthetics.modifiers.items()):
        for m in mods:
            style = "green" if m.is_bonus else ("red" if m.is_penalty else "")
            table.add_row(
                domain,
                m.label,
                f"[{style}]{m.value:+d}[/{style}]" if style else f"{m.value:+d}",
                m.source,
                m.exclusion_group or "",
                str(m.predicate),
            )
    console.print(table)


def _print_other(synthetics: Synthetics) -> None:
    if synthetics.roll_options:
        console.print("[bold]Roll options:[/bold] " + ", ".join(sorted(synthetics.roll_options)))
    for adj in synthetics.dos_adjustments:
        console.print(f"[bold]Degree adjustment:[/bold] {adj.amount:+d} when {adj.predicate} ({adj.source})")
    for r in synthetics.resistances:
        console.print(f"[bold]Resistance:[/bold] {r.damage_type} {r.mode} {r.value} ({r.source})")
    for t in synthetics.toughness_adjustments:
        console.print(f"[bold]Toughness:[/bold] {t.mode} {t.value} ({t.source})")
    for domain, entries in sorted(synthetics.dice_overrides.items()):
        for d in entries:
            value = f" {d.value}" if d.value is not None else ""
            console.print(f"[bold]Dice override:[/bold] {domain} {d.mode}{value} ({d.source})")
    for o in synthetics.attribute_overrides:
        console.print(f"[bold]Attribute override:[/bold] {o.domain} uses {o.characteristic} ({o.source})")
    for f in synthetics.fate_options:
        console.print(f"[bold]Fate option:[/bold] {f.label}, {f.effect} ({f.source})")


def _print_report(report: PreparationReport) -> None:
    console.print(f"  [dim]{report.applied} rule elements applied[/dim]")
    for issue in report.skipped:
        console.print(f"  [yellow]skipped[/yellow] {issue.item}: {issue.key} ({issue.message})")
    for issue in report.failed:
        console.print(f"  [red]failed[/red]  {issue.item}: {issue.key} ({issue.message})")


def run(args: argparse.Namespace) -> None:
    character = load_character(args.character)
    report = prepare_character(character)
    synthetics = character.synthetics

    if args.json_output:
        out = synthetics_to_dict(synthetics)
        out["report"] = {
            "applied": report.applied,
            "skipped": [dataclasses.asdict(i) for i in report.skipped],
            "failed": [dataclasses.asdict(i) for i in report.failed],
        }
        print(json.dumps(out, ensure_ascii=False, indent=2))
        return

    console.print(f"\n[bold]{character.name}[/bold] — {len(character.items)} items")
    _print_modifiers(synthetics)
    _print_other(synthetics)
    _print_report(report)
    console.print()


def add_parser(subparsers: argparse._SubParsersAction) -> None:  # type: ignore[type-arg]
    p = subparsers.add_parser(
        "prepare",
        help="Runs a character's rule elements and shows the resulting Synthetics.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
Loads a character from JSON, runs one data-preparation pass and lists the
modifiers, roll options and other effects its items produce.

Examples:
  dh2e prepare content/acolyte.json
  dh2e prepare content/acolyte.json --json-output
        """,
    )
    p.add_argument("character", metavar="CHARACTER_FILE", help="Character JSON file.")
    p.add_argument(
        "--json-output",
        action="store_true",
        help="Print the Synthetics as JSON on stdout.",
    )
    p.set_defaults(func=run)
