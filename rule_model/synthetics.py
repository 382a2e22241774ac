"""
Synthetics — per-character accumulator written by rule elements.

One instance per character per data-preparation pass. Never persisted and
never updated incrementally: the next pass replaces it wholesale.

Domains are namespaced strings, for example:
  "characteristic:ws"  — Weapon Skill tests
  "skill:athletics"    — Athletics tests
  "attack:melee"       — melee attack rolls
  "damage:ranged"      — ranged damage
  "armour:all"         — armour on every hit location
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import StrEnum

from .modifiers import Modifier
from .predicates import Predicate

# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class DiceOverrideMode(StrEnum):
    """How damage dice are altered (Tearing, Proven, Primitive)."""
    REROLL_LOWEST = "rerollLowest"
    MINIMUM_DIE   = "minimumDie"
    MAXIMIZE_DIE  = "maximizeDie"


class ResistanceMode(StrEnum):
    FLAT = "flat"   # subtract value
    HALF = "half"   # halve the damage


class ToughnessMode(StrEnum):
    ADD      = "add"
    MULTIPLY = "multiply"


class FateEffect(StrEnum):
    AUTO_SUCCEED   = "autoSucceed"
    BONUS_DAMAGE   = "bonusDamage"
    SUBSTITUTE_DOS = "substituteDos"
    GAIN_HATRED    = "gainHatred"


# ---------------------------------------------------------------------------
# Entries
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class DosAdjustment:
    """Post-roll change to Degrees of Success/Failure. Positive adds degrees."""
    amount: int
    predicate: Predicate
    source: str


@dataclass(slots=True)
class DiceOverrideEntry:
    mode: DiceOverrideMode
    source: str
    value: int | None = None  # e.g. the minimum for Proven(3)


@dataclass(slots=True)
class ResistanceEntry:
    damage_type: str          # "energy", "impact", ... or "all"
    value: int
    mode: ResistanceMode
    source: str


@dataclass(slots=True)
class ToughnessAdjustment:
    value: int | float
    mode: ToughnessMode
    source: str


@dataclass(slots=True)
class AttributeOverrideEntry:
    """Use another characteristic for tests in a domain (e.g. Int for initiative)."""
    domain: str
    characteristic: str
    predicate: Predicate
    source: str


@dataclass(slots=True)
class FateOptionEntry:
    slug: str
    label: str
    description: str
    effect: FateEffect
    source: str
    dos_characteristic: str | None = None


# ---------------------------------------------------------------------------
# Synthetics
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class Synthetics:
    roll_options: set[str] = field(default_factory=set)
    modifiers: dict[str, list[Modifier]] = field(default_factory=dict)
    dos_adjustments: list[DosAdjustment] = field(default_factory=list)
    resistances: list[ResistanceEntry] = field(default_factory=list)
    toughness_adjustments: list[ToughnessAdjustment] = field(default_factory=list)
    dice_overrides: dict[str, list[DiceOverrideEntry]] = field(default_factory=dict)
    attribute_overrides: list[AttributeOverrideEntry] = field(default_factory=list)
    fate_options: list[FateOptionEntry] = field(default_factory=list)

    def modifiers_for(self, domain: str) -> list[Modifier]:
        """Get-or-create the modifier list of a domain."""
        return self.modifiers.setdefault(domain, [])

    def dice_overrides_for(self, domain: str) -> list[DiceOverrideEntry]:
        """Get-or-create the dice override list of a domain."""
        return self.dice_overrides.setdefault(domain, [])

    def attribute_override(self, domain: str, roll_options: Iterable[str] = ()) -> str | None:
        """Characteristic of the first override for the domain whose predicate passes."""
        options = frozenset(roll_options) | self.roll_options
        for entry in self.attribute_overrides:
            if entry.domain == domain and entry.predicate.test(options):
                return entry.characteristic
        return None

    @property
    def modifier_count(self) -> int:
        return sum(len(mods) for mods in self.modifiers.values())
