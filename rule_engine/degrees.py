"""
rule_engine/degrees.py — Degrees of Success / Failure for d100 roll-under tests.

Tens-digit method:
  success (roll <= target):  DoS = 1 + floor(target / 10) - floor(roll / 10)
  failure (roll >  target):  DoF = 1 + floor(roll / 10) - floor(target / 10)

A natural 1 always succeeds and a natural 100 always fails, each with at
least one degree.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Set
from dataclasses import dataclass, replace

from rule_model import DosAdjustment

log = logging.getLogger(__name__)

NATURAL_SUCCESS = 1
NATURAL_FAILURE = 100


@dataclass(frozen=True, slots=True)
class DoSResult:
    success: bool
    degrees: int
    roll: int
    target: int

    @property
    def label(self) -> str:
        kind = "DoS" if self.success else "DoF"
        return f"{self.degrees} {kind}"


def calculate_dos(roll: int, target: int) -> DoSResult:
    if not 1 <= roll <= 100:
        raise ValueError(f"d100 roll must be between 1 and 100, got {roll}")

    if roll == NATURAL_SUCCESS:
        degrees = max(1, 1 + target // 10 - roll // 10)
        return DoSResult(True, degrees, roll, target)

    if roll == NATURAL_FAILURE:
        degrees = max(1, 1 + roll // 10 - target // 10)
        return DoSResult(False, degrees, roll, target)

    if roll <= target:
        return DoSResult(True, 1 + target // 10 - roll // 10, roll, target)

    return DoSResult(False, 1 + roll // 10 - target // 10, roll, target)


def apply_dos_adjustments(
    dos: DoSResult,
    adjustments: Iterable[DosAdjustment],
    roll_options: Set[str] | Iterable[str],
) -> tuple[DoSResult, list[DosAdjustment]]:
    """
    Adds the amount of every adjustment whose predicate passes.

    The result never goes below 0 degrees and never changes success into
    failure or the reverse.
    """
    options = roll_options if isinstance(roll_options, Set) else frozenset(roll_options)
    applied = [adj for adj in adjustments if adj.predicate.test(options)]
    if not applied:
        return dos, applied

    degrees = max(0, dos.degrees + sum(adj.amount for adj in applied))
    log.debug("Degree adjustments %s: %d → %d", [a.source for a in applied], dos.degrees, degrees)
    return replace(dos, degrees=degrees), applied
