"""
rule_engine/registry.py — keyed factory from RuleElementSource to rule element.

Unknown keys yield None so content written for newer versions degrades to a
skipped effect instead of a failed preparation pass.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator

from rule_model import Item

from .elements import (
    ActorValue,
    AdjustDegree,
    AdjustToughness,
    AttributeOverride,
    ChoiceSet,
    CreationData,
    DiceOverride,
    FateOption,
    FlatModifier,
    GrantItem,
    Resistance,
    RollOption,
    RuleElement,
    RuleElementSource,
)

log = logging.getLogger(__name__)

type RuleElementFactory = Callable[[RuleElementSource, Item], RuleElement]

# Structured data for the character creation wizard; no runtime effect.
CREATION_KEYS: tuple[str, ...] = (
    "CreationBonus",
    "CreationFate",
    "CreationWounds",
    "CreationCorruption",
    "GrantAptitude",
    "Grant",
)


class RuleElementRegistry:
    """
    Key → factory map.

    Usage::

        registry = RuleElementRegistry.default()
        element  = registry.instantiate({"key": "RollOption", "option": "x"}, item)
        if element is not None:
            element.on_prepare_data(synthetics)
    """

    def __init__(self, factories: dict[str, RuleElementFactory] | None = None) -> None:
        self._factories: dict[str, RuleElementFactory] = dict(factories or {})

    @classmethod
    def default(cls) -> RuleElementRegistry:
        registry = cls()
        for variant in (
            FlatModifier,
            RollOption,
            DiceOverride,
            AdjustDegree,
            Resistance,
            AdjustToughness,
            GrantItem,
            ChoiceSet,
            ActorValue,
            AttributeOverride,
            FateOption,
        ):
            registry.register(variant.key, variant.from_source)
        for key in CREATION_KEYS:
            registry.register(key, CreationData.from_source)
        return registry

    # ------------------------------------------------------------------

    def register(self, key: str, factory: RuleElementFactory) -> None:
        if key in self._factories:
            raise ValueError(f"Rule element key already registered: {key!r}")
        self._factories[key] = factory

    def instantiate(self, source: RuleElementSource, item: Item) -> RuleElement | None:
        """
        Builds the rule element declared by `source`.

        Returns:
            The element, or None when the key is not registered.

        Raises:
            RuleElementError: when a known key carries unusable parameters.
        """
        key = source.get("key") if isinstance(source, dict) else None
        factory = self._factories.get(key) if isinstance(key, str) else None
        if factory is None:
            log.warning("Unknown rule element key %r on item %r", key, item.name)
            return None
        return factory(source, item)

    def __contains__(self, key: object) -> bool:
        return key in self._factories

    def __iter__(self) -> Iterator[str]:
        return iter(self._factories)

    def __len__(self) -> int:
        return len(self._factories)


_DEFAULT: RuleElementRegistry | None = None


def default_registry() -> RuleElementRegistry:
    """Shared registry with every built-in variant."""
    global _DEFAULT
    if _DEFAULT is None:
        _DEFAULT = RuleElementRegistry.default()
    return _DEFAULT


def instantiate_rule_element(
    source: RuleElementSource,
    item: Item,
    registry: RuleElementRegistry | None = None,
) -> RuleElement | None:
    if registry is None:
        registry = default_registry()
    return registry.instantiate(source, item)
