"""
validator/normalizer.py — rule element source normalization.

normalize_source():
  - Returns a deep copy with the defaults the engine would apply filled in.
  - Never changes meaning: a string predicate becomes a one-statement list,
    omitted modes become their default mode.
"""

from __future__ import annotations

import copy
from typing import Any

# key → {field: default}
_DEFAULTS: dict[str, dict[str, Any]] = {
    "FlatModifier":    {"source": "rule-element"},
    "ActorValue":      {"source": "rule-element", "transform": "identity"},
    "Resistance":      {"mode": "flat", "value": 0},
    "AdjustToughness": {"mode": "add"},
    "GrantItem":       {"cascadeDelete": True},
}

# Keys whose predicate is consulted by the engine.
_PREDICATED = ("FlatModifier", "ActorValue", "AdjustDegree", "AttributeOverride")


def normalize_source(source: dict[str, Any]) -> dict[str, Any]:
    """
    Deep copy of `source` with defaults filled in.

    Changes:
      - per-key defaults (mode, source, transform, cascadeDelete)
      - predicate          → [] when absent, [stmt] for a single statement
      - label / prompt     → strip()
    """
    source = copy.deepcopy(source)
    key = source.get("key")

    for name, default in _DEFAULTS.get(key, {}).items():
        if source.get(name) is None:
            source[name] = default

    if key in _PREDICATED:
        predicate = source.get("predicate")
        if predicate is None:
            source["predicate"] = []
        elif not isinstance(predicate, list):
            source["predicate"] = [predicate]

    for name in ("label", "prompt"):
        if isinstance(source.get(name), str):
            source[name] = source[name].strip()

    return source
