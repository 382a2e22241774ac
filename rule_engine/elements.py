"""
rule_engine/elements.py — rule element variants.

Each variant is a frozen record of its declared parameters plus the owning
item. `from_source` parses a content-declared RuleElementSource; `on_prepare_data`
writes into the character's Synthetics and reads nothing but the owning item
(and, for ActorValue, the item's character).

Example sources::

    {"key": "FlatModifier", "domain": "characteristic:bs", "value": 10,
     "label": "Marksman", "source": "talent", "predicate": ["self:aim:full"]}
    {"key": "FlatModifier", "domain": "armour:all", "value": "rating"}
    {"key": "RollOption", "option": "weapon:reliable"}
    {"key": "DiceOverride", "domain": "damage:melee", "mode": "rerollLowest", "label": "Tearing"}
    {"key": "AdjustDegree", "amount": 1, "predicate": ["self:aim:full"], "label": "Accurate"}
    {"key": "Resistance", "damageType": "energy", "value": 2, "mode": "flat"}
    {"key": "AdjustToughness", "value": "rating", "mode": "add", "label": "Daemonic"}
    {"key": "GrantItem", "uuid": "Compendium.dh2e-data.conditions.Item.stunned"}
    {"key": "ChoiceSet", "prompt": "Choose a weapon group", "flag": "weaponGroup",
     "choices": [{"value": "las", "label": "Las"}, {"value": "bolt", "label": "Bolt"}]}
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, ClassVar

from rule_model import (
    AttributeOverrideEntry,
    DiceOverrideEntry,
    DiceOverrideMode,
    DosAdjustment,
    FateEffect,
    FateOptionEntry,
    Item,
    Modifier,
    Predicate,
    ResistanceEntry,
    ResistanceMode,
    Synthetics,
    ToughnessAdjustment,
    ToughnessMode,
    Value,
    parse_value,
    resolve_value,
)

from .errors import RuleElementError

type RuleElementSource = dict[str, Any]

DEFAULT_MODIFIER_SOURCE = "rule-element"


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------

def _required_str(source: RuleElementSource, name: str) -> str:
    raw = source.get(name)
    if not isinstance(raw, str) or not raw:
        raise RuleElementError(f"{source.get('key')}: '{name}' must be a non-empty string, got {raw!r}")
    return raw


def _optional_str(source: RuleElementSource, name: str) -> str | None:
    raw = source.get(name)
    if raw is None:
        return None
    if not isinstance(raw, str):
        raise RuleElementError(f"{source.get('key')}: '{name}' must be a string, got {raw!r}")
    return raw or None


def _number(source: RuleElementSource, name: str, default: int | float | None = None) -> int | float:
    raw = source.get(name, default)
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise RuleElementError(f"{source.get('key')}: '{name}' must be a number, got {raw!r}")
    return raw


def _value(source: RuleElementSource, name: str = "value") -> Value:
    try:
        return parse_value(source.get(name))
    except ValueError as e:
        raise RuleElementError(f"{source.get('key')}: {e}") from None


def _enum[E](enum_cls: type[E], source: RuleElementSource, name: str, default: E) -> E:
    raw = source.get(name)
    if raw is None:
        return default
    try:
        return enum_cls(raw)  # type: ignore[call-arg]
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)  # type: ignore[attr-defined]
        raise RuleElementError(
            f"{source.get('key')}: '{name}' must be one of {allowed}, got {raw!r}"
        ) from None


def _label(source: RuleElementSource, item: Item) -> str:
    return _optional_str(source, "label") or item.name


# ---------------------------------------------------------------------------
# Variants
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class FlatModifier:
    """Adds a flat modifier to a domain."""
    key: ClassVar[str] = "FlatModifier"

    item: Item
    domain: str
    value: Value
    label: str
    source: str
    predicate: Predicate
    exclusion_group: str | None = None

    @classmethod
    def from_source(cls, source: RuleElementSource, item: Item) -> FlatModifier:
        return cls(
            item=item,
            domain=_required_str(source, "domain"),
            value=_value(source),
            label=_label(source, item),
            source=_optional_str(source, "source") or DEFAULT_MODIFIER_SOURCE,
            predicate=Predicate.from_raw(source.get("predicate")),
            exclusion_group=_optional_str(source, "exclusionGroup"),
        )

    def on_prepare_data(self, synthetics: Synthetics) -> None:
        synthetics.modifiers_for(self.domain).append(Modifier(
            label=self.label,
            value=int(resolve_value(self.value, self.item)),
            source=self.source,
            exclusion_group=self.exclusion_group,
            predicate=Predicate.from_raw(self.predicate.to_raw()),
        ))


@dataclass(frozen=True, slots=True)
class RollOption:
    """Adds a literal roll option, e.g. "weapon:reliable"."""
    key: ClassVar[str] = "RollOption"

    item: Item
    option: str

    @classmethod
    def from_source(cls, source: RuleElementSource, item: Item) -> RollOption:
        return cls(item=item, option=_required_str(source, "option"))

    def on_prepare_data(self, synthetics: Synthetics) -> None:
        synthetics.roll_options.add(self.option)


@dataclass(frozen=True, slots=True)
class DiceOverride:
    """Changes how damage dice behave for a domain (consumed by damage rolling)."""
    key: ClassVar[str] = "DiceOverride"

    item: Item
    domain: str
    mode: DiceOverrideMode
    label: str
    value: int | None = None

    @classmethod
    def from_source(cls, source: RuleElementSource, item: Item) -> DiceOverride:
        if source.get("mode") is None:
            raise RuleElementError("DiceOverride: 'mode' is required")
        value = source.get("value")
        return cls(
            item=item,
            domain=_required_str(source, "domain"),
            mode=_enum(DiceOverrideMode, source, "mode", DiceOverrideMode.REROLL_LOWEST),
            label=_label(source, item),
            value=int(_number(source, "value")) if value is not None else None,
        )

    def on_prepare_data(self, synthetics: Synthetics) -> None:
        synthetics.dice_overrides_for(self.domain).append(
            DiceOverrideEntry(mode=self.mode, source=self.label, value=self.value)
        )


@dataclass(frozen=True, slots=True)
class AdjustDegree:
    """Adds (or, when negative, removes) degrees after the roll."""
    key: ClassVar[str] = "AdjustDegree"

    item: Item
    amount: int
    predicate: Predicate
    label: str

    @classmethod
    def from_source(cls, source: RuleElementSource, item: Item) -> AdjustDegree:
        return cls(
            item=item,
            amount=int(_number(source, "amount")),
            predicate=Predicate.from_raw(source.get("predicate")),
            label=_label(source, item),
        )

    def on_prepare_data(self, synthetics: Synthetics) -> None:
        synthetics.dos_adjustments.append(DosAdjustment(
            amount=self.amount,
            predicate=Predicate.from_raw(self.predicate.to_raw()),
            source=self.label,
        ))


@dataclass(frozen=True, slots=True)
class Resistance:
    """Damage reduction against one damage type ("all" matches every type)."""
    key: ClassVar[str] = "Resistance"

    item: Item
    damage_type: str
    value: Value
    mode: ResistanceMode
    label: str

    @classmethod
    def from_source(cls, source: RuleElementSource, item: Item) -> Resistance:
        return cls(
            item=item,
            damage_type=_required_str(source, "damageType"),
            value=_value(source) if source.get("value") is not None else parse_value(0),
            mode=_enum(ResistanceMode, source, "mode", ResistanceMode.FLAT),
            label=_label(source, item),
        )

    def on_prepare_data(self, synthetics: Synthetics) -> None:
        synthetics.resistances.append(ResistanceEntry(
            damage_type=self.damage_type,
            value=int(resolve_value(self.value, self.item)),
            mode=self.mode,
            source=self.label,
        ))


@dataclass(frozen=True, slots=True)
class AdjustToughness:
    """Changes the effective Toughness Bonus used to soak damage."""
    key: ClassVar[str] = "AdjustToughness"

    item: Item
    value: Value
    mode: ToughnessMode
    label: str

    @classmethod
    def from_source(cls, source: RuleElementSource, item: Item) -> AdjustToughness:
        return cls(
            item=item,
            value=_value(source),
            mode=_enum(ToughnessMode, source, "mode", ToughnessMode.ADD),
            label=_label(source, item),
        )

    def on_prepare_data(self, synthetics: Synthetics) -> None:
        synthetics.toughness_adjustments.append(ToughnessAdjustment(
            value=resolve_value(self.value, self.item),
            mode=self.mode,
            source=self.label,
        ))


@dataclass(frozen=True, slots=True)
class GrantItem:
    """
    Grants another item when the owner is added to a character.

    Granting creates documents asynchronously and belongs to the host's item
    lifecycle, so preparation does nothing.
    """
    key: ClassVar[str] = "GrantItem"

    item: Item
    uuid: str | None
    cascade_delete: bool = True

    @classmethod
    def from_source(cls, source: RuleElementSource, item: Item) -> GrantItem:
        return cls(
            item=item,
            uuid=_optional_str(source, "uuid"),
            cascade_delete=source.get("cascadeDelete") is not False,
        )

    def on_prepare_data(self, synthetics: Synthetics) -> None:
        pass


@dataclass(frozen=True, slots=True)
class ChoiceOption:
    value: str
    label: str


@dataclass(frozen=True, slots=True)
class ChoiceSet:
    """
    Exposes a stored selection as the roll option "choice:<flag>:<value>".

    The selection itself is made when the item is created and stored in the
    item's flags under `flag`; without one, preparation does nothing.
    """
    key: ClassVar[str] = "ChoiceSet"

    item: Item
    prompt: str
    choices: tuple[ChoiceOption, ...]
    flag: str

    @classmethod
    def from_source(cls, source: RuleElementSource, item: Item) -> ChoiceSet:
        raw_choices = source.get("choices") or []
        if not isinstance(raw_choices, list):
            raise RuleElementError(f"ChoiceSet: 'choices' must be a list, got {raw_choices!r}")
        choices: list[ChoiceOption] = []
        for raw in raw_choices:
            if isinstance(raw, str):
                choices.append(ChoiceOption(value=raw, label=raw))
            elif isinstance(raw, dict) and isinstance(raw.get("value"), str):
                choices.append(ChoiceOption(value=raw["value"], label=str(raw.get("label", raw["value"]))))
            else:
                raise RuleElementError(f"ChoiceSet: invalid choice {raw!r}")
        return cls(
            item=item,
            prompt=_optional_str(source, "prompt") or "",
            choices=tuple(choices),
            flag=_required_str(source, "flag"),
        )

    @property
    def selection(self) -> str | None:
        chosen = self.item.flags.get(self.flag)
        if chosen is None or chosen == "":
            return None
        return str(chosen)

    def on_prepare_data(self, synthetics: Synthetics) -> None:
        chosen = self.selection
        if chosen is not None:
            synthetics.roll_options.add(f"choice:{self.flag}:{chosen}")


@dataclass(frozen=True, slots=True)
class ActorValue:
    """
    Adds a modifier whose value is read from the owning character's data.

    Paths address Character.to_data(), e.g. "characteristics.ws.bonus" or
    "system.psyRating". Transforms: identity, half-ceil, half-floor, negate,
    multiply:<factor>.
    """
    key: ClassVar[str] = "ActorValue"

    item: Item
    domain: str
    path: str
    transform: str
    label: str
    source: str
    predicate: Predicate
    exclusion_group: str | None = None

    @classmethod
    def from_source(cls, source: RuleElementSource, item: Item) -> ActorValue:
        return cls(
            item=item,
            domain=_required_str(source, "domain"),
            path=_required_str(source, "path"),
            transform=_optional_str(source, "transform") or "identity",
            label=_label(source, item),
            source=_optional_str(source, "source") or DEFAULT_MODIFIER_SOURCE,
            predicate=Predicate.from_raw(source.get("predicate")),
            exclusion_group=_optional_str(source, "exclusionGroup"),
        )

    def on_prepare_data(self, synthetics: Synthetics) -> None:
        character = self.item.parent
        if character is None:
            return
        raw = character.resolve_path(self.path)
        if isinstance(raw, bool) or not isinstance(raw, (int, float)):
            return
        synthetics.modifiers_for(self.domain).append(Modifier(
            label=self.label,
            value=apply_transform(raw, self.transform),
            source=self.source,
            exclusion_group=self.exclusion_group,
            predicate=Predicate.from_raw(self.predicate.to_raw()),
        ))


def apply_transform(value: int | float, transform: str) -> int:
    match transform:
        case "half-ceil":
            return math.ceil(value / 2)
        case "half-floor":
            return math.floor(value / 2)
        case "negate":
            return int(-value)
        case str() if transform.startswith("multiply:"):
            try:
                factor = float(transform.removeprefix("multiply:"))
            except ValueError:
                return int(value)
            return math.floor(value * factor)
        case _:
            return int(value)


@dataclass(frozen=True, slots=True)
class AttributeOverride:
    """Tests in `domain` use `characteristic` instead (Constant Vigilance: Int for initiative)."""
    key: ClassVar[str] = "AttributeOverride"

    item: Item
    domain: str
    characteristic: str
    predicate: Predicate
    label: str

    @classmethod
    def from_source(cls, source: RuleElementSource, item: Item) -> AttributeOverride:
        return cls(
            item=item,
            domain=_required_str(source, "domain"),
            characteristic=_required_str(source, "characteristic"),
            predicate=Predicate.from_raw(source.get("predicate")),
            label=_label(source, item),
        )

    def on_prepare_data(self, synthetics: Synthetics) -> None:
        synthetics.attribute_overrides.append(AttributeOverrideEntry(
            domain=self.domain,
            characteristic=self.characteristic,
            predicate=Predicate.from_raw(self.predicate.to_raw()),
            source=self.label,
        ))


@dataclass(frozen=True, slots=True)
class FateOption:
    """Offers an extra way to spend a Fate point (role abilities)."""
    key: ClassVar[str] = "FateOption"

    item: Item
    slug: str
    effect: FateEffect
    label: str
    description: str
    dos_characteristic: str | None = None

    @classmethod
    def from_source(cls, source: RuleElementSource, item: Item) -> FateOption:
        slug = _required_str(source, "slug")
        if source.get("effectType") is None:
            raise RuleElementError("FateOption: 'effectType' is required")
        return cls(
            item=item,
            slug=slug,
            effect=_enum(FateEffect, source, "effectType", FateEffect.AUTO_SUCCEED),
            label=_optional_str(source, "label") or slug,
            description=_optional_str(source, "description") or "",
            dos_characteristic=_optional_str(source, "dosCharacteristic"),
        )

    def on_prepare_data(self, synthetics: Synthetics) -> None:
        synthetics.fate_options.append(FateOptionEntry(
            slug=self.slug,
            label=self.label,
            description=self.description,
            effect=self.effect,
            source=self.item.name,
            dos_characteristic=self.dos_characteristic,
        ))


@dataclass(frozen=True, slots=True)
class CreationData:
    """Character-creation grants (CreationBonus, GrantAptitude, ...); read by the creation wizard."""
    key: ClassVar[str] = "CreationData"

    item: Item
    source_key: str

    @classmethod
    def from_source(cls, source: RuleElementSource, item: Item) -> CreationData:
        return cls(item=item, source_key=str(source.get("key")))

    def on_prepare_data(self, synthetics: Synthetics) -> None:
        pass


type RuleElement = (
    FlatModifier
    | RollOption
    | DiceOverride
    | AdjustDegree
    | Resistance
    | AdjustToughness
    | GrantItem
    | ChoiceSet
    | ActorValue
    | AttributeOverride
    | FateOption
    | CreationData
)
