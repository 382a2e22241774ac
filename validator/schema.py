"""
validator/schema.py — JSON Schema (draft 2020-12) of a RuleElementSource.

Only the shared envelope is described here. Per-key parameters are checked by
RuleValidator stage C, predicate statements by stage D.
"""

from __future__ import annotations

from typing import Any

RULE_ELEMENT_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "RuleElementSource",
    "type": "object",
    "required": ["key"],
    "properties": {
        "key":            {"type": "string", "minLength": 1},
        "domain":         {"type": "string"},
        "label":          {"type": "string"},
        "source":         {"type": "string"},
        "exclusionGroup": {"type": "string"},
        "value": {
            "oneOf": [
                {"type": "number"},
                {"const": "rating"},
            ],
        },
        "predicate": {"type": ["array", "string", "object"]},
    },
    "additionalProperties": True,
}
