"""
Predicate — boolean expression over a set of roll options.

Statements:
  "self:aim:full"          atom, true when the option is present
  "not:flanked"            negated atom, true when the option is absent
  {"and": [stmt, ...]}     true when every sub-statement is true
  {"or":  [stmt, ...]}     true when any sub-statement is true

A predicate is a list of statements combined with AND. An empty predicate
always passes. Anything else (numbers, dicts with other keys, "and" holding a
non-list) is malformed and evaluates to False.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterable, Set
from dataclasses import dataclass, field
from typing import Any

log = logging.getLogger(__name__)

type PredicateStatement = str | dict[str, list[Any]]

NEGATION_PREFIX = "not:"


@dataclass(frozen=True, slots=True)
class Predicate:
    statements: tuple[PredicateStatement, ...] = field(default_factory=tuple)

    @classmethod
    def from_raw(cls, raw: object) -> Predicate:
        """
        Normalizes content data into a Predicate.

          None / missing     → empty predicate
          "atom"             → single-atom predicate
          [stmt, ...]        → used as-is
          {"and": [...]}     → single-statement predicate
        """
        if raw is None:
            return cls()
        if isinstance(raw, Predicate):
            return raw
        if isinstance(raw, (list, tuple)):
            return cls(tuple(copy.deepcopy(list(raw))))
        return cls((copy.deepcopy(raw),))

    @property
    def is_empty(self) -> bool:
        return len(self.statements) == 0

    def test(self, roll_options: Set[str] | Iterable[str]) -> bool:
        """True when every statement holds for the given roll options."""
        options = roll_options if isinstance(roll_options, Set) else frozenset(roll_options)
        return all(_test_statement(s, options) for s in self.statements)

    def to_raw(self) -> list[PredicateStatement]:
        """Deep copy of the statements, suitable for JSON output or cloning."""
        return copy.deepcopy(list(self.statements))

    def __str__(self) -> str:
        return " & ".join(_fmt_statement(s) for s in self.statements) or "(always)"


# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------

def _test_statement(statement: object, options: Set[str]) -> bool:
    if isinstance(statement, str):
        if statement.startswith(NEGATION_PREFIX):
            return statement[len(NEGATION_PREFIX):] not in options
        return statement in options

    if isinstance(statement, dict) and len(statement) == 1:
        (op, operands), = statement.items()
        if isinstance(operands, list):
            if op == "and":
                return all(_test_statement(s, options) for s in operands)
            if op == "or":
                return any(_test_statement(s, options) for s in operands)

    log.debug("Malformed predicate statement evaluates to False: %r", statement)
    return False


def _fmt_statement(statement: object) -> str:
    if isinstance(statement, dict) and len(statement) == 1:
        (op, operands), = statement.items()
        if isinstance(operands, list):
            joiner = " & " if op == "and" else " | "
            return "(" + joiner.join(_fmt_statement(s) for s in operands) + ")"
    return str(statement)
