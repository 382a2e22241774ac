"""
Modifier — a signed contribution to a d100 test.

Stacking model ("tagged stacking + exclusion groups"):
  - every modifier carries a source tag ("talent", "equipment", "condition", ...)
  - modifiers sharing an exclusion group compete: best bonus and worst penalty apply
  - ungrouped modifiers always stack
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .predicates import Predicate


@dataclass(slots=True)
class Modifier:
    """
    - label:           human-readable name, e.g. "Weapon Skill Advance"
    - value:           positive = bonus, negative = penalty
    - source:          provenance tag
    - exclusion_group: modifiers in the same group compete (None = always stacks)
    - predicate:       must pass against the roll options for the modifier to apply
    - enabled:         current toggle state
    - toggleable:      whether the confirmation step may switch it off
    """
    label: str
    value: int
    source: str = "situational"
    exclusion_group: str | None = None
    predicate: Predicate = field(default_factory=Predicate)
    enabled: bool = True
    toggleable: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.predicate, Predicate):
            self.predicate = Predicate.from_raw(self.predicate)
        if not self.exclusion_group:
            self.exclusion_group = None

    @property
    def is_bonus(self) -> bool:
        return self.value > 0

    @property
    def is_penalty(self) -> bool:
        return self.value < 0

    def clone(self) -> Modifier:
        """Independent copy; toggling the clone never touches the original."""
        return Modifier(
            label=self.label,
            value=self.value,
            source=self.source,
            exclusion_group=self.exclusion_group,
            predicate=Predicate.from_raw(self.predicate.to_raw()),
            enabled=self.enabled,
            toggleable=self.toggleable,
        )

    def __str__(self) -> str:
        group = f" [{self.exclusion_group}]" if self.exclusion_group else ""
        return f"{self.label} {self.value:+d}{group}"
