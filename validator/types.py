"""
validator/types.py — error codes and report structures.

ValidationError — one problem with a code, a JSON Pointer path, a message
    and a short instruction for the content author.
ValidationReport — outcome for one rule element source: is_valid, errors,
    warnings and the normalized source.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Stable validator error codes (stages A–E)."""

    # A — JSON Schema
    SCHEMA_VIOLATION   = "E_SCHEMA_VIOLATION"

    # B — key
    KEY_UNKNOWN        = "E_KEY_UNKNOWN"

    # C — variant parameters
    FIELD_MISSING      = "E_FIELD_MISSING"
    FIELD_TYPE         = "E_FIELD_TYPE"
    VALUE_INVALID      = "E_VALUE_INVALID"
    ENUM_VALUE_INVALID = "E_ENUM_VALUE_INVALID"
    CHOICE_INVALID     = "E_CHOICE_INVALID"

    # D — predicates
    PREDICATE_MALFORMED = "E_PREDICATE_MALFORMED"

    # E — domains
    DOMAIN_MALFORMED   = "E_DOMAIN_MALFORMED"


@dataclass(slots=True)
class ValidationError:
    """
    One validation problem.

    - code:         stable identifier of the problem class (ErrorCode)
    - path:         JSON Pointer into the source, e.g. "/predicate/0"
    - message:      readable description
    - expected_fix: short mechanical fix instruction
    - details:      optional extra data
    """

    code: ErrorCode
    path: str
    message: str
    expected_fix: str
    details: dict[str, Any] | None = None


@dataclass(slots=True)
class ValidationReport:
    """
    - is_valid:          True when there are no errors (warnings do not count)
    - errors:            ValidationError list
    - warnings:          readable warnings (str)
    - normalized_source: the source with defaults filled in
                         (None when the schema stage failed)
    """

    is_valid: bool
    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    normalized_source: dict[str, Any] | None = None
