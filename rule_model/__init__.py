"""
rule_model — value objects of the DH2E rules engine.

Usage:
  from rule_model import Predicate, Modifier, Synthetics, Item, Character, ...

Modules:
  common     — Value (FixedValue | FromItemRating), parse_value, resolve_value, domain helpers
  predicates — Predicate, PredicateStatement
  modifiers  — Modifier
  synthetics — Synthetics, DosAdjustment, DiceOverrideEntry, ResistanceEntry,
               ToughnessAdjustment, AttributeOverrideEntry, FateOptionEntry
  documents  — Item, Character (host document stand-ins)

Lifecycle:
  Character.prepare_data()
    → prepare_base_data()     fresh Synthetics
    → prepare_derived_data()  every owned item's rules write into Synthetics
"""

from .common import (
    RATING,
    FixedValue,
    FromItemRating,
    Value,
    parse_value,
    resolve_value,
    split_domain,
    parent_domain,
)
from .predicates import (
    PredicateStatement,
    Predicate,
)
from .modifiers import Modifier
from .synthetics import (
    DosAdjustment,
    DiceOverrideMode,
    DiceOverrideEntry,
    ResistanceMode,
    ResistanceEntry,
    ToughnessMode,
    ToughnessAdjustment,
    AttributeOverrideEntry,
    FateEffect,
    FateOptionEntry,
    Synthetics,
)
from .documents import Item, Character

__all__ = [
    # common
    "RATING",
    "FixedValue",
    "FromItemRating",
    "Value",
    "parse_value",
    "resolve_value",
    "split_domain",
    "parent_domain",
    # predicates
    "PredicateStatement",
    "Predicate",
    # modifiers
    "Modifier",
    # synthetics
    "DosAdjustment",
    "DiceOverrideMode",
    "DiceOverrideEntry",
    "ResistanceMode",
    "ResistanceEntry",
    "ToughnessMode",
    "ToughnessAdjustment",
    "AttributeOverrideEntry",
    "FateEffect",
    "FateOptionEntry",
    "Synthetics",
    # documents
    "Item",
    "Character",
]
