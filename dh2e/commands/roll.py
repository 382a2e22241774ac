"""Command: dh2e roll — a d100 test through the full check pipeline."""

from __future__ import annotations

import argparse
import asyncio
import json

from rich import box
from rich.console import Console
from rich.prompt import Confirm
from rich.table import Table

from rule_engine import (
    CheckContext,
    CheckEngine,
    CheckPrompt,
    CheckResult,
    Confirmation,
    D100,
    prepare_character,
)
from rule_model import Modifier

from dh2e._env import get_config, load_character

console = Console(width=160)


def parse_modifier(text: str) -> Modifier:
    """'Called Shot=-20' or 'Cover=-10@cover' → Modifier."""
    label, sep, rest = text.rpartition("=")
    if not sep or not label.strip():
        raise argparse.ArgumentTypeError(f"expected LABEL=VALUE[@GROUP], got {text!r}")
    value_txt, _, group = rest.partition("@")
    try:
        value = int(value_txt)
    except ValueError:
        raise argparse.ArgumentTypeError(f"modifier value must be an integer, got {value_txt!r}") from None
    return Modifier(label=label.strip(), value=value, exclusion_group=group or None, toggleable=True)


def _print_modifiers(modifiers, applied=None) -> None:
    table = Table(box=box.SIMPLE_HEAD, show_header=True, header_style="bold white")
    table.add_column("MODIFIER", no_wrap=True, style="bold")
    table.add_column("VALUE",    justify="right")
    table.add_column("SOURCE",   no_wrap=True)
    table.add_column("GROUP",    no_wrap=True)
    if applied is not None:
        table.add_column("APPLIED",  no_wrap=True)
    for m in modifiers:
        row = [m.label, f"{m.value:+d}", m.source, m.exclusion_group or ""]
        if applied is not None:
            row.append("[green]yes[/green]" if any(m is a for a in applied) else "[dim]no[/dim]")
        table.add_row(*row)
    console.print(table)


def _ask_terminal(prompt: CheckPrompt) -> Confirmation:
    console.print(f"\n[bold]{prompt.label}[/bold] — base target {prompt.base_target}")
    if prompt.modifiers:
        _print_modifiers(prompt.modifiers)
    for m in prompt.modifiers:
        if m.toggleable and not Confirm.ask(f"Apply {m.label} ({m.value:+d})?", default=m.enabled):
            m.enabled = False
    if not Confirm.ask("Roll?", default=True):
        return Confirmation(cancelled=True)
    return Confirmation()


async def _ask(prompt: CheckPrompt) -> Confirmation:
    # terminal prompts block; keep them off the event loop
    return await asyncio.to_thread(_ask_terminal, prompt)


def _result_to_dict(result: CheckResult) -> dict:
    return {
        "label": result.context.label,
        "domain": result.context.domain,
        "roll": result.roll,
        "target": result.target,
        "success": result.success,
        "degrees": result.degrees,
        "modifier_total": result.modifier_total,
        "applied_modifiers": [
            {"label": m.label, "value": m.value, "source": m.source} for m in result.applied_modifiers
        ],
        "dos_adjustments": [{"amount": a.amount, "source": a.source} for a in result.dos_adjustments],
        "threshold_met": result.threshold_met,
    }


def run(args: argparse.Namespace) -> None:
    config = get_config(args.cap)

    actor = None
    characteristic = args.characteristic
    if args.character:
        actor = load_character(args.character)
        prepare_character(actor)
        override = actor.synthetics.attribute_override(args.domain, args.option or ())
        if override is not None:
            characteristic = override

    if args.target is not None:
        base_target = args.target
    elif actor is not None and characteristic:
        base_target = actor.characteristic(characteristic)
    else:
        console.print("[red]Error:[/red] give --target, or --character with --characteristic.")
        raise SystemExit(1)

    context = CheckContext(
        actor=actor,
        base_target=base_target,
        label=args.label or f"{args.domain} test",
        domain=args.domain,
        characteristic=characteristic,
        modifiers=tuple(args.mod or ()),
        roll_options=frozenset(args.option or ()),
        skip_dialog=not args.confirm,
        dos_threshold=args.threshold,
    )
    engine = CheckEngine(
        config=config,
        dice=D100(seed=args.seed),
        confirm=_ask if args.confirm else None,
    )
    result = asyncio.run(engine.roll(context))

    if result is None:
        console.print("[yellow]Check cancelled.[/yellow]")
        return

    if args.json_output:
        print(json.dumps(_result_to_dict(result), ensure_ascii=False, indent=2))
        return

    style = "green" if result.success else "red"
    console.print(
        f"\n[bold]{context.label}[/bold]: rolled [bold]{result.roll}[/bold] vs "
        f"[bold]{result.target}[/bold] ({base_target} {result.modifier_total:+d}) → "
        f"[{style}]{result.dos.label}[/{style}]"
    )
    if result.applied_modifiers:
        _print_modifiers(result.applied_modifiers)
    for adj in result.dos_adjustments:
        console.print(f"  [dim]{adj.source}: {adj.amount:+d} degrees[/dim]")
    if result.threshold_met is not None:
        verdict = "[green]met[/green]" if result.threshold_met else "[red]not met[/red]"
        console.print(f"  Threshold {args.threshold} DoS: {verdict}")


def add_parser(subparsers: argparse._SubParsersAction) -> None:  # type: ignore[type-arg]
    p = subparsers.add_parser(
        "roll",
        help="Rolls a d100 test through the check pipeline.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
Rolls a d100 roll-under test. With --character the character's rule
elements contribute modifiers, roll options and degree adjustments for the
domain (and its two-segment parent).

Examples:
  dh2e roll characteristic:bs --target 40 --mod "Aim=10@aim"
  dh2e roll characteristic:bs --character content/acolyte.json --characteristic bs --option self:aim:full
  dh2e roll skill:stealth:sneak --target 35 --seed 7 --json-output
        """,
    )
    p.add_argument("domain", metavar="DOMAIN", help="Synthetics domain, e.g. characteristic:bs.")
    p.add_argument("--character", "-c", metavar="FILE", help="Character JSON file.")
    p.add_argument("--characteristic", metavar="KEY", help="Characteristic giving the base target (e.g. bs).")
    p.add_argument("--target", "-t", type=int, metavar="N", help="Base target; overrides the characteristic.")
    p.add_argument("--label", metavar="TEXT", help="Test label.")
    p.add_argument(
        "--mod", "-m",
        action="append",
        type=parse_modifier,
        metavar="LABEL=VALUE[@GROUP]",
        help="Extra modifier (repeatable).",
    )
    p.add_argument("--option", "-o", action="append", metavar="OPTION", help="Extra roll option (repeatable).")
    p.add_argument("--threshold", type=int, metavar="N", help="Minimum DoS required.")
    p.add_argument("--cap", type=int, metavar="N", help="Modifier cap (default: $DH2E_MODIFIER_CAP or 60).")
    p.add_argument("--seed", type=int, metavar="N", help="Seed for the d100.")
    p.add_argument("--confirm", action="store_true", help="Ask before rolling; toggleable modifiers can be switched off.")
    p.add_argument("--json-output", action="store_true", help="Print the result as JSON on stdout.")
    p.set_defaults(func=run)
