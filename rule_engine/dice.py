"""rule_engine/dice.py — d100 sources for checks."""

from __future__ import annotations

import random
from typing import Protocol


class DiceSource(Protocol):
    async def roll_d100(self) -> int:
        """Uniform 1–100 inclusive."""
        ...


class D100:
    """
    d100 roller with its own RNG, so seeded instances never share state.

    Usage::

        dice = D100(seed=42)
        value = await dice.roll_d100()
    """

    def __init__(self, seed: int | None = None) -> None:
        self._rng = random.Random(seed)

    async def roll_d100(self) -> int:
        return self._rng.randint(1, 100)
