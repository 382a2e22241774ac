import pytest

from validator import ErrorCode, RuleValidator, normalize_source


@pytest.fixture
def validator():
    return RuleValidator()


def codes(report):
    return [e.code for e in report.errors]


def test_valid_flat_modifier(validator):
    report = validator.validate({
        "key": "FlatModifier", "domain": "characteristic:bs", "value": 10,
        "predicate": ["self:aim:full", {"or": ["a", "not:b"]}],
    })
    assert report.is_valid
    assert report.errors == []
    assert report.normalized_source["source"] == "rule-element"


def test_schema_stage_fails_fast(validator):
    report = validator.validate({"domain": "characteristic:bs", "value": 10})
    assert codes(report) == [ErrorCode.SCHEMA_VIOLATION]
    assert report.normalized_source is None


def test_schema_rejects_bad_value(validator):
    report = validator.validate({"key": "FlatModifier", "domain": "d", "value": "ten"})
    assert not report.is_valid
    assert report.errors[0].path == "/value"


def test_schema_rejects_non_object(validator):
    assert codes(validator.validate(["FlatModifier"])) == [ErrorCode.SCHEMA_VIOLATION]


def test_unknown_key_warns(validator):
    report = validator.validate({"key": "Teleport"})
    assert report.is_valid
    assert report.warnings


def test_unknown_key_strict():
    report = RuleValidator(strict=True).validate({"key": "Teleport"})
    assert codes(report) == [ErrorCode.KEY_UNKNOWN]


def test_missing_required_field(validator):
    report = validator.validate({"key": "FlatModifier", "domain": "characteristic:bs"})
    assert codes(report) == [ErrorCode.FIELD_MISSING]
    assert report.errors[0].path == "/value"


def test_enum_value(validator):
    report = validator.validate({"key": "DiceOverride", "domain": "damage:melee", "mode": "explode"})
    assert codes(report) == [ErrorCode.ENUM_VALUE_INVALID]
    assert "rerollLowest" in report.errors[0].details["allowed"]


def test_field_type(validator):
    report = validator.validate({"key": "AdjustDegree", "amount": "one"})
    assert codes(report) == [ErrorCode.FIELD_TYPE]


def test_transform(validator):
    ok = validator.validate({"key": "ActorValue", "domain": "d", "path": "characteristics.t.bonus",
                             "transform": "multiply:2"})
    bad = validator.validate({"key": "ActorValue", "domain": "d", "path": "p", "transform": "square"})
    assert ok.is_valid
    assert codes(bad) == [ErrorCode.VALUE_INVALID]


def test_choices(validator):
    report = validator.validate({"key": "ChoiceSet", "flag": "f", "choices": ["a", {"value": "b"}, 3]})
    assert codes(report) == [ErrorCode.CHOICE_INVALID]
    assert report.errors[0].path == "/choices/2"


def test_creation_keys_have_no_field_checks(validator):
    assert validator.validate({"key": "CreationBonus", "anything": 1}).is_valid


@pytest.mark.parametrize(("predicate", "path"), [
    ([42], "/predicate/0"),
    (["a", {"xor": ["b"]}], "/predicate/1"),
    ([{"and": ["a", ""]}], "/predicate/0/and/1"),
    ([{"or": "a"}], "/predicate/0"),
])
def test_malformed_predicate(validator, predicate, path):
    report = validator.validate({"key": "FlatModifier", "domain": "d", "value": 1, "predicate": predicate})
    assert codes(report) == [ErrorCode.PREDICATE_MALFORMED]
    assert report.errors[0].path == path


@pytest.mark.parametrize("domain", ["skill::stealth", ":bs", "characteristic:", "a b"])
def test_malformed_domain(validator, domain):
    report = validator.validate({"key": "FlatModifier", "domain": domain, "value": 1})
    assert codes(report) == [ErrorCode.DOMAIN_MALFORMED]


@pytest.mark.parametrize("domain", ["characteristic:bs", "skill:stealth:sneak", "characteristic.ws", "initiative"])
def test_valid_domain(validator, domain):
    assert validator.validate({"key": "FlatModifier", "domain": domain, "value": 1}).is_valid


def test_validate_rules(validator):
    reports = validator.validate_rules([
        {"key": "RollOption", "option": "x"},
        {"key": "RollOption"},
    ])
    assert [r.is_valid for r in reports] == [True, False]


def test_normalize_source_defaults():
    src = {"key": "Resistance", "damageType": "fire", "label": " Warded "}
    out = normalize_source(src)
    assert out == {"key": "Resistance", "damageType": "fire", "label": "Warded", "mode": "flat", "value": 0}
    assert src == {"key": "Resistance", "damageType": "fire", "label": " Warded "}


def test_normalize_predicate():
    assert normalize_source({"key": "FlatModifier", "predicate": "a"})["predicate"] == ["a"]
    assert normalize_source({"key": "AdjustDegree"})["predicate"] == []
    assert "predicate" not in normalize_source({"key": "RollOption"})


def test_empty_custom_registry_knows_no_keys():
    from rule_engine import RuleElementRegistry

    report = RuleValidator(registry=RuleElementRegistry(), strict=True).validate({"key": "RollOption", "option": "x"})
    assert codes(report) == [ErrorCode.KEY_UNKNOWN]
