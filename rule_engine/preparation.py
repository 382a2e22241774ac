"""
rule_engine/preparation.py — the data-preparation pass.

A character's derived data is recomputed in two phases:
  1. prepare_base_data     — replace the Synthetics with an empty one
  2. prepare_derived_data  — instantiate every rule of every owned item and
                             let it write into the Synthetics

A failing rule element is logged and skipped; the remaining ones still run.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from rule_model import Character, Item, Synthetics

from .registry import RuleElementRegistry, default_registry

log = logging.getLogger(__name__)


@dataclass(slots=True)
class RuleIssue:
    item: str
    key: str
    message: str


@dataclass(slots=True)
class PreparationReport:
    """
    - applied: rule elements that wrote into the Synthetics
    - skipped: sources with an unknown key
    - failed:  sources whose parsing or application raised
    """
    applied: int = 0
    skipped: list[RuleIssue] = field(default_factory=list)
    failed: list[RuleIssue] = field(default_factory=list)


def apply_rule_elements(
    items: Iterable[Item],
    synthetics: Synthetics,
    registry: RuleElementRegistry | None = None,
) -> PreparationReport:
    """Runs every rule of every item against `synthetics`."""
    registry = registry if registry is not None else default_registry()
    report = PreparationReport()
    n_items = 0

    for item in items:
        n_items += 1
        rules = item.rules if isinstance(item.rules, list) else []
        for source in rules:
            key = str(source.get("key")) if isinstance(source, dict) else repr(source)
            try:
                element = registry.instantiate(source, item)
                if element is None:
                    report.skipped.append(RuleIssue(item.name, key, "unknown rule element key"))
                    continue
                element.on_prepare_data(synthetics)
            except Exception as e:
                log.warning("Error processing rule element %r on %r", key, item.name, exc_info=True)
                report.failed.append(RuleIssue(item.name, key, str(e)))
                continue
            report.applied += 1

    log.debug(
        "Prepared synthetics: %d items, %d rule elements applied, %d skipped, %d failed",
        n_items, report.applied, len(report.skipped), len(report.failed),
    )
    return report


def build_synthetics(
    items: Iterable[Item],
    registry: RuleElementRegistry | None = None,
) -> tuple[Synthetics, PreparationReport]:
    """Fresh Synthetics populated from `items`."""
    synthetics = Synthetics()
    report = apply_rule_elements(items, synthetics, registry)
    return synthetics, report


def prepare_base_data(character: Character) -> Synthetics:
    """Phase 1: a fresh, empty Synthetics; nothing of the previous pass survives."""
    character.synthetics = Synthetics()
    return character.synthetics


def prepare_derived_data(
    character: Character,
    registry: RuleElementRegistry | None = None,
) -> PreparationReport:
    """Phase 2: every owned item's rules write into the character's Synthetics."""
    return apply_rule_elements(character.items, character.synthetics, registry)


def prepare_character(
    character: Character,
    registry: RuleElementRegistry | None = None,
) -> PreparationReport:
    prepare_base_data(character)
    return prepare_derived_data(character, registry)
