"""
Shared primitive types used by modifiers, synthetics and rule elements.

Value — numeric parameter of a rule element:
  FixedValue(amount)   a literal number from content
  FromItemRating()     the content sentinel "rating", read from the owning item
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .documents import Item

# ---------------------------------------------------------------------------
# Value
# ---------------------------------------------------------------------------

# Content sentinel: take the number from the owning item's rating attribute.
RATING = "rating"


@dataclass(frozen=True, slots=True)
class FixedValue:
    """A literal number declared by content."""
    amount: int | float


@dataclass(frozen=True, slots=True)
class FromItemRating:
    """Resolved against the owning item's rating (0 when the item has none)."""


type Value = FixedValue | FromItemRating


def parse_value(raw: object) -> Value:
    """
    Turns a content value into a Value.

    Accepts ints, floats and the string "rating". Booleans are rejected even
    though they are ints in Python.

    Raises:
        ValueError: for anything else.
    """
    if isinstance(raw, bool):
        raise ValueError(f"Expected a number or {RATING!r}, got boolean {raw!r}")
    if isinstance(raw, (int, float)):
        return FixedValue(raw)
    if raw == RATING:
        return FromItemRating()
    raise ValueError(f"Expected a number or {RATING!r}, got {raw!r}")


def resolve_value(value: Value, item: Item | None) -> int | float:
    match value:
        case FixedValue(amount=amount):
            return amount
        case FromItemRating():
            rating = getattr(item, "rating", None)
            return rating if isinstance(rating, (int, float)) else 0
    raise TypeError(f"Unknown value type: {value!r}")


# ---------------------------------------------------------------------------
# Domains
# ---------------------------------------------------------------------------

# Domains are hierarchical: "skill:stealth:sneak", "characteristic.bs".
_DOMAIN_SEP = re.compile(r"[:.]")


def split_domain(domain: str) -> list[str]:
    """'skill:stealth:sneak' → ['skill', 'stealth', 'sneak']."""
    return _DOMAIN_SEP.split(domain) if domain else []


def parent_domain(domain: str) -> str | None:
    """
    Two-segment parent of a domain with three or more segments.

    'skill:stealth:sneak' → 'skill:stealth'
    'skill:stealth'       → None (inheritance goes one level only)

    The parent keeps the separators of the original string.
    """
    seps = list(_DOMAIN_SEP.finditer(domain))
    if len(seps) < 2:
        return None
    return domain[:seps[1].start()]
