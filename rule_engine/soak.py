"""
rule_engine/soak.py — damage soak from Synthetics.

  effectiveAP  = max(0, locationAP - penetration)
  damage       = raw damage after resistances (never below 0)
  wounds       = max(0, damage - effectiveAP - effectiveTB)
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass

from rule_model import (
    ResistanceEntry,
    ResistanceMode,
    ToughnessAdjustment,
    ToughnessMode,
)

ALL_DAMAGE_TYPES = "all"


@dataclass(frozen=True, slots=True)
class DamageResult:
    raw_damage: int
    resisted_damage: int
    armour_points: int
    penetration: int
    effective_ap: int
    toughness_bonus: int
    wounds_dealt: int


def effective_toughness_bonus(base_tb: int, adjustments: Iterable[ToughnessAdjustment]) -> int:
    """Adjustments apply in order; a multiplication floors its result."""
    tb: int | float = base_tb
    for adj in adjustments:
        if adj.mode == ToughnessMode.MULTIPLY:
            tb = math.floor(tb * adj.value)
        else:
            tb = tb + adj.value
    return int(tb)


def apply_resistances(
    damage: int,
    damage_type: str | None,
    resistances: Iterable[ResistanceEntry],
) -> int:
    for entry in resistances:
        if entry.damage_type != ALL_DAMAGE_TYPES and entry.damage_type != damage_type:
            continue
        if entry.mode == ResistanceMode.HALF:
            damage = damage // 2
        else:
            damage = damage - entry.value
        damage = max(0, damage)
    return damage


def calculate_damage(
    raw_damage: int,
    location_ap: int,
    penetration: int,
    toughness_bonus: int,
    *,
    damage_type: str | None = None,
    resistances: Iterable[ResistanceEntry] = (),
    toughness_adjustments: Iterable[ToughnessAdjustment] = (),
) -> DamageResult:
    resisted = apply_resistances(raw_damage, damage_type, resistances)
    tb = effective_toughness_bonus(toughness_bonus, toughness_adjustments)
    effective_ap = max(0, location_ap - penetration)
    return DamageResult(
        raw_damage=raw_damage,
        resisted_damage=resisted,
        armour_points=location_ap,
        penetration=penetration,
        effective_ap=effective_ap,
        toughness_bonus=tb,
        wounds_dealt=max(0, resisted - effective_ap - tb),
    )
