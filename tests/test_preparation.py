from conftest import make_character, make_item
from rule_engine import build_synthetics, prepare_character
from rule_engine.preparation import prepare_base_data


def marksman():
    return make_item("Marksman", rules=[
        {"key": "FlatModifier", "domain": "characteristic:bs", "value": 10, "predicate": ["self:aim:full"]},
    ])


def test_prepare_collects_from_every_item():
    character = make_character(
        marksman(),
        make_item("Reliable", rules=[{"key": "RollOption", "option": "weapon:reliable"}]),
    )
    report = prepare_character(character)
    assert report.applied == 2
    assert character.synthetics.modifier_count == 1
    assert character.synthetics.roll_options == {"weapon:reliable"}


def test_unknown_key_is_skipped_and_others_apply():
    character = make_character(
        make_item("Odd", rules=[
            {"key": "Teleport", "range": 10},
            {"key": "RollOption", "option": "odd"},
        ]),
    )
    report = prepare_character(character)
    assert report.applied == 1
    assert [(i.item, i.key) for i in report.skipped] == [("Odd", "Teleport")]
    assert report.failed == []
    assert character.synthetics.roll_options == {"odd"}


def test_failing_rule_element_is_isolated(caplog):
    character = make_character(
        make_item("Broken", rules=[
            {"key": "FlatModifier", "domain": "characteristic:bs"},
            {"key": "FlatModifier", "domain": "characteristic:bs", "value": 5},
        ]),
        marksman(),
    )
    report = prepare_character(character)
    assert report.applied == 2
    assert len(report.failed) == 1
    assert report.failed[0].item == "Broken"
    assert [m.value for m in character.synthetics.modifiers["characteristic:bs"]] == [5, 10]
    assert "Broken" in caplog.text


def test_non_dict_rule_source_is_skipped():
    character = make_character(make_item("Weird", rules=["FlatModifier", None]))
    report = prepare_character(character)
    assert report.applied == 0
    assert len(report.skipped) == 2


def test_each_pass_starts_from_fresh_synthetics():
    item = marksman()
    character = make_character(item)
    first = character.prepare_data()
    second = character.prepare_data()
    assert first is not second
    assert second.modifier_count == 1

    item.rules.clear()
    assert character.prepare_data().modifier_count == 0


def test_prepare_base_data_resets():
    character = make_character(marksman())
    prepare_character(character)
    prepare_base_data(character)
    assert character.synthetics.modifiers == {}


def test_build_synthetics_without_character():
    synthetics, report = build_synthetics([marksman()])
    assert report.applied == 1
    assert synthetics.modifiers["characteristic:bs"][0].label == "Marksman"


def test_item_without_rules():
    character = make_character(make_item("Plain"))
    report = prepare_character(character)
    assert report.applied == 0
    assert character.synthetics.modifier_count == 0


def test_empty_custom_registry_is_used_as_given():
    from rule_engine import RuleElementRegistry

    item = make_item("Reliable", rules=[{"key": "RollOption", "option": "x"}])
    synthetics, report = build_synthetics([item], RuleElementRegistry())
    assert synthetics.roll_options == set()
    assert report.applied == 0
    assert [(i.item, i.key) for i in report.skipped] == [("Reliable", "RollOption")]


def test_instantiate_with_empty_registry_returns_none():
    from rule_engine import RuleElementRegistry, instantiate_rule_element

    item = make_item(rules=[])
    assert instantiate_rule_element({"key": "RollOption", "option": "x"}, item, RuleElementRegistry()) is None
