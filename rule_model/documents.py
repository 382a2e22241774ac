"""
Host documents — minimal stand-ins for the virtual tabletop's records.

Item owns the rule element sources declared by content; Character owns items
and, after a preparation pass, the Synthetics built from them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .synthetics import Synthetics


@dataclass(slots=True)
class Item:
    """
    - id, name, type: identity of the record ("talent", "trait", "condition", ...)
    - rating:         numeric rating attribute (Natural Armour (4) → 4); None if unrated
    - flags:          values stored out of band, e.g. ChoiceSet selections
    - rules:          raw RuleElementSource objects
    - parent:         owning character, set when the item is added to one
    """
    id: str
    name: str
    type: str = "talent"
    rating: int | None = None
    flags: dict[str, Any] = field(default_factory=dict)
    rules: list[dict[str, Any]] = field(default_factory=list)
    parent: Character | None = field(default=None, repr=False, compare=False)


@dataclass(slots=True)
class Character:
    id: str
    name: str
    characteristics: dict[str, int] = field(default_factory=dict)
    items: list[Item] = field(default_factory=list)
    system: dict[str, Any] = field(default_factory=dict)
    synthetics: Synthetics = field(default_factory=Synthetics, repr=False, compare=False)

    def __post_init__(self) -> None:
        for item in self.items:
            item.parent = self

    def add_item(self, item: Item) -> Item:
        item.parent = self
        self.items.append(item)
        return item

    def characteristic(self, key: str) -> int:
        return self.characteristics.get(key, 0)

    def characteristic_bonus(self, key: str) -> int:
        return self.characteristic(key) // 10

    # ------------------------------------------------------------------
    # Data lookup
    # ------------------------------------------------------------------

    def to_data(self) -> dict[str, Any]:
        """Read-only view addressed by ActorValue paths."""
        return {
            "id": self.id,
            "name": self.name,
            "system": self.system,
            "characteristics": {
                key: {"value": value, "bonus": value // 10}
                for key, value in self.characteristics.items()
            },
        }

    def resolve_path(self, path: str) -> Any:
        """'characteristics.ws.bonus' → 4. Missing segments resolve to None."""
        current: Any = self.to_data()
        for segment in path.split("."):
            if not isinstance(current, dict):
                return None
            current = current.get(segment)
        return current

    # ------------------------------------------------------------------
    # Preparation lifecycle
    # ------------------------------------------------------------------

    def prepare_data(self, registry=None) -> Synthetics:
        """Runs both preparation phases and returns the new Synthetics."""
        from rule_engine.preparation import prepare_base_data, prepare_derived_data

        prepare_base_data(self)
        prepare_derived_data(self, registry)
        return self.synthetics
