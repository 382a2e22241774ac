"""Shared fixtures: item / character factories and scripted dice."""

from __future__ import annotations

from collections.abc import Iterable

import pytest

from rule_model import Character, Item


class ScriptedDice:
    """DiceSource returning preset results in order."""

    def __init__(self, *results: int) -> None:
        self._results = list(results)
        self.calls = 0

    async def roll_d100(self) -> int:
        self.calls += 1
        return self._results.pop(0)


def make_item(name: str = "Talent", rules: Iterable[dict] = (), **kwargs) -> Item:
    return Item(id=name.lower().replace(" ", "-"), name=name, rules=list(rules), **kwargs)


def make_character(*items: Item, **characteristics: int) -> Character:
    return Character(
        id="acolyte",
        name="Acolyte",
        characteristics=characteristics or {"ws": 35, "bs": 40, "t": 38, "int": 45},
        items=list(items),
    )


@pytest.fixture
def item_factory():
    return make_item


@pytest.fixture
def character_factory():
    return make_character


@pytest.fixture
def dice():
    return ScriptedDice
