import json
import pathlib

import pytest

from rule_engine import ContentLoadError, character_from_dict, item_from_dict, load_character_json

CONTENT = pathlib.Path(__file__).resolve().parent.parent / "content"


def test_item_from_dict():
    item = item_from_dict({"name": "Natural Armour", "type": "trait", "rating": 4,
                           "rules": [{"key": "FlatModifier", "domain": "armour:all", "value": "rating"}]})
    assert item.id == "Natural Armour"
    assert item.type == "trait"
    assert item.rating == 4
    assert len(item.rules) == 1


def test_item_rating_must_be_int():
    assert item_from_dict({"name": "x", "rating": "4"}).rating is None
    assert item_from_dict({"name": "x", "rating": True}).rating is None


@pytest.mark.parametrize("raw", [[], {"name": "x", "rules": {}}])
def test_item_invalid(raw):
    with pytest.raises(ContentLoadError):
        item_from_dict(raw)


def test_character_from_dict_sets_parents():
    character = character_from_dict({
        "name": "Vex",
        "characteristics": {"bs": "42"},
        "items": [{"name": "Marksman"}],
    })
    assert character.characteristic("bs") == 42
    assert character.characteristic_bonus("bs") == 4
    assert character.items[0].parent is character


@pytest.mark.parametrize("raw", [
    "Vex",
    {"characteristics": ["bs"]},
    {"items": {"name": "Marksman"}},
    {"characteristics": {"bs": "high"}},
])
def test_character_invalid(raw):
    with pytest.raises(ContentLoadError):
        character_from_dict(raw)


def test_load_character_json(tmp_path):
    path = tmp_path / "c.json"
    path.write_text(json.dumps({"name": "Vex", "characteristics": {"ws": 30}}), encoding="utf-8")
    assert load_character_json(path).name == "Vex"


def test_load_character_json_errors(tmp_path):
    with pytest.raises(ContentLoadError):
        load_character_json(tmp_path / "missing.json")
    broken = tmp_path / "broken.json"
    broken.write_text("{", encoding="utf-8")
    with pytest.raises(ContentLoadError):
        load_character_json(broken)


def test_sample_character_prepares():
    character = load_character_json(CONTENT / "acolyte.json")
    synthetics = character.prepare_data()
    assert "choice:weaponGroup:las" in synthetics.roll_options
    assert synthetics.modifiers["armour:all"][0].value == 2
    assert synthetics.attribute_override("initiative") == "int"


def test_resolve_path():
    character = character_from_dict({"name": "Vex", "characteristics": {"wp": 41}, "system": {"psyRating": 3}})
    assert character.resolve_path("characteristics.wp.bonus") == 4
    assert character.resolve_path("system.psyRating") == 3
    assert character.resolve_path("system.psyRating.deeper") is None
    assert character.resolve_path("nothing.here") is None
