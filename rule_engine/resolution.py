"""
rule_engine/resolution.py — modifier pipeline.

  collect_modifiers    domain's own modifiers + two-segment parent's + context extras (cloned)
  apply_exclusion_groups
                       same-group, same-sign modifiers compete
  resolve_modifiers    enabled → predicate → exclusion groups → sum → clamp to ±cap
"""

from __future__ import annotations

from collections.abc import Iterable, Set
from dataclasses import dataclass

from rule_model import Modifier, Synthetics, parent_domain

from .config import DEFAULT_MODIFIER_CAP


@dataclass(frozen=True, slots=True)
class ModifierResolution:
    """
    - total:   clamped sum of the applied modifiers
    - applied: modifiers that survived filtering and exclusion groups
    - all:     the input list, unfiltered (for display and toggling)
    """
    total: int
    applied: tuple[Modifier, ...]
    all: tuple[Modifier, ...]


# ---------------------------------------------------------------------------
# Collection
# ---------------------------------------------------------------------------

def collect_modifiers(
    synthetics: Synthetics | None,
    domain: str,
    extra: Iterable[Modifier] = (),
) -> list[Modifier]:
    """
    Private clones of every modifier relevant to `domain`.

    Order: modifiers registered under the domain itself, then those of its
    two-segment parent ("skill:stealth" for "skill:stealth:sneak"), then the
    explicitly supplied extras. Inheritance never goes further than one level
    and never flows from child to parent.
    """
    collected: list[Modifier] = []
    if synthetics is not None:
        collected.extend(m.clone() for m in synthetics.modifiers.get(domain, []))
        parent = parent_domain(domain)
        if parent is not None:
            collected.extend(m.clone() for m in synthetics.modifiers.get(parent, []))
    collected.extend(m.clone() for m in extra)
    return collected


# ---------------------------------------------------------------------------
# Exclusion groups
# ---------------------------------------------------------------------------

def apply_exclusion_groups(modifiers: Iterable[Modifier]) -> list[Modifier]:
    """
    Collapses every exclusion group to at most one bonus and one penalty.

      - ungrouped modifiers pass through and stack
      - among a group's bonuses the highest wins, among its penalties the most
        negative; a bonus and a penalty of the same group both apply
      - equal candidates: the first in input order wins
      - zero-valued members neither compete nor survive, except that a group
        without any signed member keeps its first member

    Output order: ungrouped modifiers in input order, then each group (in order
    of first appearance) as bonus followed by penalty.
    """
    ungrouped: list[Modifier] = []
    groups: dict[str, list[Modifier]] = {}

    for mod in modifiers:
        if mod.exclusion_group:
            groups.setdefault(mod.exclusion_group, []).append(mod)
        else:
            ungrouped.append(mod)

    resolved = list(ungrouped)
    for members in groups.values():
        bonuses   = [m for m in members if m.is_bonus]
        penalties = [m for m in members if m.is_penalty]
        if bonuses:
            resolved.append(max(bonuses, key=lambda m: m.value))
        if penalties:
            resolved.append(min(penalties, key=lambda m: m.value))
        if not bonuses and not penalties:
            resolved.append(members[0])
    return resolved


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------

def clamp(value: int, cap: int) -> int:
    return max(-cap, min(cap, value))


def resolve_modifiers(
    modifiers: Iterable[Modifier],
    roll_options: Set[str] | Iterable[str],
    cap: int = DEFAULT_MODIFIER_CAP,
) -> ModifierResolution:
    all_mods = tuple(modifiers)
    options = roll_options if isinstance(roll_options, Set) else frozenset(roll_options)

    # 1–2. enabled + predicate
    applicable = [m for m in all_mods if m.enabled and m.predicate.test(options)]

    # 3. exclusion groups
    applied = apply_exclusion_groups(applicable)

    # 4. sum + clamp
    total = clamp(sum(m.value for m in applied), cap)

    return ModifierResolution(total=total, applied=tuple(applied), all=all_mods)
