"""
rule_engine/loader.py — characters and items from JSON.

Public API:
  load_character_json(path)  -> Character
  character_from_dict(raw)   -> Character
  item_from_dict(raw)        -> Item
"""

from __future__ import annotations

import json
import pathlib
from typing import Any

from rule_model import Character, Item

from .errors import ContentLoadError


def item_from_dict(raw: dict[str, Any]) -> Item:
    if not isinstance(raw, dict):
        raise ContentLoadError(f"Item must be an object, got {type(raw).__name__}")
    name = str(raw.get("name", ""))
    rules = raw.get("rules", [])
    if not isinstance(rules, list):
        raise ContentLoadError(f"Item {name!r}: 'rules' must be a list")
    rating = raw.get("rating")
    return Item(
        id=str(raw.get("id") or name),
        name=name,
        type=str(raw.get("type", "talent")),
        rating=rating if isinstance(rating, int) and not isinstance(rating, bool) else None,
        flags=dict(raw.get("flags") or {}),
        rules=list(rules),
    )


def character_from_dict(raw: dict[str, Any]) -> Character:
    """
    Expected format::

        {
            "id": "acolyte-1",
            "name": "Interrogator Vex",
            "characteristics": {"ws": 35, "bs": 42, "t": 38},
            "system": {"psyRating": 2},
            "items": [
                {"name": "Marksman", "type": "talent",
                 "rules": [{"key": "FlatModifier", "domain": "characteristic:bs", "value": 10}]}
            ]
        }
    """
    if not isinstance(raw, dict):
        raise ContentLoadError(f"Character must be an object, got {type(raw).__name__}")
    characteristics = raw.get("characteristics") or {}
    if not isinstance(characteristics, dict):
        raise ContentLoadError("'characteristics' must be an object")
    items = raw.get("items") or []
    if not isinstance(items, list):
        raise ContentLoadError("'items' must be a list")

    name = str(raw.get("name", ""))
    try:
        values = {str(k): int(v) for k, v in characteristics.items()}
    except (TypeError, ValueError) as e:
        raise ContentLoadError(f"Character {name!r}: non-numeric characteristic ({e})") from e

    return Character(
        id=str(raw.get("id") or name),
        name=name,
        characteristics=values,
        items=[item_from_dict(i) for i in items],
        system=dict(raw.get("system") or {}),
    )


def load_character_json(path: pathlib.Path) -> Character:
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ContentLoadError(f"Cannot read {path}: {e}") from e
    return character_from_dict(raw)
