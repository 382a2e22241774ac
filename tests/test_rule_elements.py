import pytest

from conftest import make_character, make_item
from rule_engine import (
    ActorValue,
    CreationData,
    FlatModifier,
    RuleElementError,
    RuleElementRegistry,
    default_registry,
    instantiate_rule_element,
)
from rule_engine.elements import apply_transform
from rule_model import (
    DiceOverrideMode,
    FateEffect,
    FixedValue,
    FromItemRating,
    ResistanceMode,
    Synthetics,
    ToughnessMode,
    parse_value,
    resolve_value,
)


def prepared(source, item=None):
    item = item or make_item("Source Item")
    synthetics = Synthetics()
    element = instantiate_rule_element(source, item)
    assert element is not None
    element.on_prepare_data(synthetics)
    return synthetics


# ---------------------------------------------------------------------------
# Values
# ---------------------------------------------------------------------------

def test_parse_value():
    assert parse_value(5) == FixedValue(5)
    assert parse_value(-2.5) == FixedValue(-2.5)
    assert parse_value("rating") == FromItemRating()
    for bad in (True, "5", None, [1]):
        with pytest.raises(ValueError):
            parse_value(bad)


def test_rating_resolves_against_item():
    assert resolve_value(FromItemRating(), make_item(rating=4)) == 4
    assert resolve_value(FromItemRating(), make_item()) == 0
    assert resolve_value(FromItemRating(), None) == 0
    assert resolve_value(FixedValue(3), None) == 3


# ---------------------------------------------------------------------------
# FlatModifier
# ---------------------------------------------------------------------------

def test_flat_modifier():
    s = prepared({
        "key": "FlatModifier", "domain": "characteristic:bs", "value": 10,
        "label": "Marksman", "source": "talent", "predicate": ["self:aim:full"],
        "exclusionGroup": "aim",
    })
    (mod,) = s.modifiers["characteristic:bs"]
    assert mod.label == "Marksman"
    assert mod.value == 10
    assert mod.source == "talent"
    assert mod.exclusion_group == "aim"
    assert mod.predicate.test({"self:aim:full"})
    assert not mod.predicate.test(set())


def test_flat_modifier_defaults():
    s = prepared({"key": "FlatModifier", "domain": "characteristic:ws", "value": -5}, make_item("Fear"))
    (mod,) = s.modifiers["characteristic:ws"]
    assert mod.label == "Fear"
    assert mod.source == "rule-element"
    assert mod.exclusion_group is None
    assert mod.predicate.is_empty


def test_flat_modifier_rating():
    s = prepared({"key": "FlatModifier", "domain": "armour:all", "value": "rating"},
                 make_item("Natural Armour", rating=4))
    assert s.modifiers["armour:all"][0].value == 4


def test_flat_modifier_rating_without_rating_is_zero():
    s = prepared({"key": "FlatModifier", "domain": "armour:all", "value": "rating"})
    assert s.modifiers["armour:all"][0].value == 0


@pytest.mark.parametrize("source", [
    {"key": "FlatModifier", "value": 10},
    {"key": "FlatModifier", "domain": "", "value": 10},
    {"key": "FlatModifier", "domain": "characteristic:bs"},
    {"key": "FlatModifier", "domain": "characteristic:bs", "value": "ten"},
    {"key": "FlatModifier", "domain": "characteristic:bs", "value": True},
])
def test_flat_modifier_invalid(source):
    with pytest.raises(RuleElementError):
        instantiate_rule_element(source, make_item())


def test_predicate_is_copied_per_preparation():
    item = make_item(rules=[])
    element = FlatModifier.from_source(
        {"key": "FlatModifier", "domain": "d", "value": 1, "predicate": ["a"]}, item,
    )
    s1, s2 = Synthetics(), Synthetics()
    element.on_prepare_data(s1)
    element.on_prepare_data(s2)
    assert s1.modifiers["d"][0].predicate == s2.modifiers["d"][0].predicate
    assert s1.modifiers["d"][0] is not s2.modifiers["d"][0]


# ---------------------------------------------------------------------------
# Other variants
# ---------------------------------------------------------------------------

def test_roll_option():
    s = prepared({"key": "RollOption", "option": "weapon:reliable"})
    assert s.roll_options == {"weapon:reliable"}


def test_dice_override():
    s = prepared({"key": "DiceOverride", "domain": "damage:melee", "mode": "minimumDie", "value": 3, "label": "Proven"})
    (entry,) = s.dice_overrides["damage:melee"]
    assert entry.mode is DiceOverrideMode.MINIMUM_DIE
    assert entry.value == 3
    assert entry.source == "Proven"


def test_dice_override_requires_mode():
    with pytest.raises(RuleElementError):
        instantiate_rule_element({"key": "DiceOverride", "domain": "damage:melee"}, make_item())
    with pytest.raises(RuleElementError):
        instantiate_rule_element({"key": "DiceOverride", "domain": "damage:melee", "mode": "explode"}, make_item())


def test_adjust_degree():
    s = prepared({"key": "AdjustDegree", "amount": 1, "predicate": ["self:aim:full"], "label": "Accurate"})
    (adj,) = s.dos_adjustments
    assert adj.amount == 1
    assert adj.source == "Accurate"
    assert adj.predicate.test({"self:aim:full"})


def test_resistance():
    s = prepared({"key": "Resistance", "damageType": "energy", "value": "rating", "mode": "flat"},
                 make_item("Warded", rating=3))
    (entry,) = s.resistances
    assert (entry.damage_type, entry.value, entry.mode) == ("energy", 3, ResistanceMode.FLAT)


def test_resistance_defaults():
    s = prepared({"key": "Resistance", "damageType": "fire", "mode": "half"})
    assert s.resistances[0].value == 0
    assert s.resistances[0].mode is ResistanceMode.HALF


def test_adjust_toughness():
    s = prepared({"key": "AdjustToughness", "value": "rating", "label": "Daemonic"}, make_item(rating=2))
    (adj,) = s.toughness_adjustments
    assert adj.value == 2
    assert adj.mode is ToughnessMode.ADD


def test_grant_item_and_creation_keys_do_nothing():
    s = prepared({"key": "GrantItem", "uuid": "Compendium.x.y"})
    s2 = prepared({"key": "CreationBonus", "characteristic": "ws", "value": 5})
    for synthetics in (s, s2):
        assert synthetics == Synthetics()


def test_grant_item_cascade_delete():
    element = instantiate_rule_element({"key": "GrantItem", "uuid": "x", "cascadeDelete": False}, make_item())
    assert element.cascade_delete is False
    assert instantiate_rule_element({"key": "GrantItem"}, make_item()).cascade_delete is True


def test_creation_data_keeps_key():
    element = instantiate_rule_element({"key": "GrantAptitude", "aptitude": "Finesse"}, make_item())
    assert isinstance(element, CreationData)
    assert element.source_key == "GrantAptitude"


def test_choice_set_with_selection():
    item = make_item("Weapon Training", flags={"weaponGroup": "las"})
    s = prepared({"key": "ChoiceSet", "flag": "weaponGroup", "choices": ["las", {"value": "bolt"}]}, item)
    assert s.roll_options == {"choice:weaponGroup:las"}


def test_choice_set_without_selection():
    s = prepared({"key": "ChoiceSet", "flag": "weaponGroup", "choices": ["las"]})
    assert s.roll_options == set()


def test_choice_set_invalid_choice():
    with pytest.raises(RuleElementError):
        instantiate_rule_element({"key": "ChoiceSet", "flag": "f", "choices": [1]}, make_item())


def test_actor_value_reads_character_data():
    item = make_item("Unnatural Toughness")
    make_character(item, t=42)
    s = prepared({"key": "ActorValue", "domain": "armour:all", "path": "characteristics.t.bonus",
                  "transform": "half-ceil"}, item)
    assert s.modifiers["armour:all"][0].value == 2


def test_actor_value_without_character_or_number_adds_nothing():
    s = prepared({"key": "ActorValue", "domain": "d", "path": "characteristics.t.bonus"})
    assert s.modifiers == {}
    item = make_item()
    make_character(item)
    s = prepared({"key": "ActorValue", "domain": "d", "path": "system.missing"}, item)
    assert s.modifiers == {}


@pytest.mark.parametrize(("value", "transform", "expected"), [
    (5, "identity", 5),
    (5, "half-ceil", 3),
    (5, "half-floor", 2),
    (5, "negate", -5),
    (5, "multiply:2", 10),
    (5, "multiply:0.5", 2),
    (5, "multiply:abc", 5),
])
def test_apply_transform(value, transform, expected):
    assert apply_transform(value, transform) == expected


def test_attribute_override():
    s = prepared({"key": "AttributeOverride", "domain": "initiative", "characteristic": "int"})
    assert s.attribute_override("initiative") == "int"
    assert s.attribute_override("characteristic:ag") is None


def test_attribute_override_predicate():
    s = prepared({"key": "AttributeOverride", "domain": "initiative", "characteristic": "per",
                  "predicate": ["ambush"]})
    assert s.attribute_override("initiative") is None
    assert s.attribute_override("initiative", ["ambush"]) == "per"


def test_fate_option():
    s = prepared({"key": "FateOption", "slug": "seeker", "effectType": "substituteDos",
                  "dosCharacteristic": "per"}, make_item("Seeker"))
    (opt,) = s.fate_options
    assert opt.effect is FateEffect.SUBSTITUTE_DOS
    assert opt.label == "seeker"
    assert opt.source == "Seeker"
    assert opt.dos_characteristic == "per"


def test_fate_option_requires_effect():
    with pytest.raises(RuleElementError):
        instantiate_rule_element({"key": "FateOption", "slug": "x"}, make_item())


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

def test_unknown_key_returns_none(caplog):
    assert instantiate_rule_element({"key": "Teleport"}, make_item()) is None
    assert instantiate_rule_element({"value": 1}, make_item()) is None
    assert "Teleport" in caplog.text


def test_default_registry_contents():
    registry = default_registry()
    for key in ("FlatModifier", "RollOption", "DiceOverride", "AdjustDegree", "Resistance",
                "AdjustToughness", "GrantItem", "ChoiceSet", "ActorValue", "AttributeOverride",
                "FateOption", "CreationBonus", "GrantAptitude"):
        assert key in registry
    assert default_registry() is registry


def test_register_custom_and_duplicate():
    registry = RuleElementRegistry()
    registry.register("ActorValue", ActorValue.from_source)
    assert len(registry) == 1
    assert list(registry) == ["ActorValue"]
    with pytest.raises(ValueError):
        registry.register("ActorValue", ActorValue.from_source)
    assert registry.instantiate({"key": "FlatModifier", "domain": "d", "value": 1}, make_item()) is None
