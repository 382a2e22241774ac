"""
validator/rule_validator.py — static checks for rule element sources.

RuleValidator.validate(source) -> ValidationReport

Stages:
  A — JSON Schema        (jsonschema, Draft 2020-12 envelope)
  B — key                (registered key; unknown keys warn, or fail in strict mode)
  C — parameters         (required fields, types, enum values, transforms, choices)
  D — predicates         (statement shape, recursively)
  E — domains            (non-empty segments separated by ':' or '.')

The engine itself never rejects content: an unknown key is skipped and a
malformed predicate evaluates to False. These checks catch such content
before it reaches a character sheet.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Any

import jsonschema

from rule_engine import CREATION_KEYS, RuleElementRegistry, default_registry
from rule_model import DiceOverrideMode, FateEffect, ResistanceMode, ToughnessMode

from .normalizer import normalize_source
from .schema import RULE_ELEMENT_SCHEMA
from .types import ErrorCode, ValidationError, ValidationReport

# "characteristic:bs", "skill:stealth:sneak", "characteristic.ws"
_DOMAIN_RE = re.compile(r"^[A-Za-z0-9_*-]+(?:[:.][A-Za-z0-9_*-]+)*$")

_TRANSFORM_RE = re.compile(r"^(identity|half-ceil|half-floor|negate|multiply:-?\d+(?:\.\d+)?)$")

# Error limit; later stages are skipped once it is reached
MAX_ERRORS = 20

# field kinds: str, value, number, bool, choices, transform, or a tuple of enum values
_ENUMS: dict[str, tuple[str, ...]] = {
    "diceMode":       tuple(m.value for m in DiceOverrideMode),
    "resistanceMode": tuple(m.value for m in ResistanceMode),
    "toughnessMode":  tuple(m.value for m in ToughnessMode),
    "fateEffect":     tuple(m.value for m in FateEffect),
}

# key → [(field, kind, required)]
FIELD_SPECS: dict[str, list[tuple[str, str, bool]]] = {
    "FlatModifier": [
        ("domain", "str", True),
        ("value", "value", True),
        ("exclusionGroup", "str", False),
    ],
    "RollOption": [
        ("option", "str", True),
    ],
    "DiceOverride": [
        ("domain", "str", True),
        ("mode", "diceMode", True),
        ("value", "number", False),
    ],
    "AdjustDegree": [
        ("amount", "number", True),
    ],
    "Resistance": [
        ("damageType", "str", True),
        ("value", "value", False),
        ("mode", "resistanceMode", False),
    ],
    "AdjustToughness": [
        ("value", "value", True),
        ("mode", "toughnessMode", False),
    ],
    "GrantItem": [
        ("uuid", "str", False),
        ("cascadeDelete", "bool", False),
    ],
    "ChoiceSet": [
        ("flag", "str", True),
        ("prompt", "str", False),
        ("choices", "choices", False),
    ],
    "ActorValue": [
        ("domain", "str", True),
        ("path", "str", True),
        ("transform", "transform", False),
        ("exclusionGroup", "str", False),
    ],
    "AttributeOverride": [
        ("domain", "str", True),
        ("characteristic", "str", True),
    ],
    "FateOption": [
        ("slug", "str", True),
        ("effectType", "fateEffect", True),
        ("description", "str", False),
        ("dosCharacteristic", "str", False),
    ],
}

# Fields holding a domain, checked by stage E
_DOMAIN_FIELDS = ("domain",)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _kind_ok(raw: Any, kind: str) -> bool:
    match kind:
        case "str":
            return isinstance(raw, str) and raw != ""
        case "number":
            return isinstance(raw, (int, float)) and not isinstance(raw, bool)
        case "value":
            return (isinstance(raw, (int, float)) and not isinstance(raw, bool)) or raw == "rating"
        case "bool":
            return isinstance(raw, bool)
        case "choices":
            return isinstance(raw, list)
        case "transform":
            return isinstance(raw, str)
    return isinstance(raw, str)


def _describe(kind: str) -> str:
    return {
        "str": "a non-empty string",
        "number": "a number",
        "value": "a number or \"rating\"",
        "bool": "a boolean",
        "choices": "a list",
        "transform": "a string",
    }.get(kind, "a string")


# ---------------------------------------------------------------------------
# RuleValidator
# ---------------------------------------------------------------------------

class RuleValidator:
    """
    Validator for RuleElementSource objects.

    Usage:
        validator = RuleValidator()
        report    = validator.validate({"key": "FlatModifier", "domain": "characteristic:bs", "value": 10})
        if not report.is_valid:
            for e in report.errors:
                print(e.code, e.path, e.message)
    """

    def __init__(
        self,
        registry: RuleElementRegistry | None = None,
        schema: dict[str, Any] | None = None,
        strict: bool = False,
    ) -> None:
        self._registry = registry if registry is not None else default_registry()
        self._schema   = schema if schema is not None else RULE_ELEMENT_SCHEMA
        self._strict   = strict

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def validate(self, source: Any) -> ValidationReport:
        errors: list[ValidationError] = []
        warnings: list[str] = []

        # A — JSON Schema (fail-fast: later stages assume the envelope)
        self._stage_schema(source, errors)
        if errors:
            return ValidationReport(is_valid=False, errors=errors, warnings=warnings)

        normalized = normalize_source(source)

        # B — key
        known = self._stage_key(normalized, errors, warnings)

        # C — parameters
        if known and len(errors) < MAX_ERRORS:
            self._stage_fields(normalized, errors)

        # D — predicates
        if len(errors) < MAX_ERRORS:
            self._stage_predicate(normalized, errors)

        # E — domains
        if len(errors) < MAX_ERRORS:
            self._stage_domains(normalized, errors)

        return ValidationReport(
            is_valid=len(errors) == 0,
            errors=errors,
            warnings=warnings,
            normalized_source=normalized,
        )

    def validate_rules(self, rules: Iterable[Any]) -> list[ValidationReport]:
        """One report per source, in order."""
        return [self.validate(source) for source in rules]

    # ------------------------------------------------------------------
    # Stage A — JSON Schema
    # ------------------------------------------------------------------

    def _stage_schema(self, source: Any, errors: list[ValidationError]) -> None:
        validator = jsonschema.Draft202012Validator(self._schema)
        for e in sorted(validator.iter_errors(source), key=lambda e: [str(p) for p in e.absolute_path]):
            path = (
                "/" + "/".join(str(p) for p in e.absolute_path)
                if e.absolute_path
                else "/"
            )
            errors.append(ValidationError(
                code=ErrorCode.SCHEMA_VIOLATION,
                path=path,
                message=e.message,
                expected_fix=f"Fix the JSON Schema violation at {path}.",
            ))

    # ------------------------------------------------------------------
    # Stage B — key
    # ------------------------------------------------------------------

    def _stage_key(
        self,
        source: dict,
        errors: list[ValidationError],
        warnings: list[str],
    ) -> bool:
        key = source["key"]
        if key in self._registry:
            return True

        if self._strict:
            errors.append(ValidationError(
                code=ErrorCode.KEY_UNKNOWN,
                path="/key",
                message=f"Rule element key '{key}' is not registered.",
                expected_fix="Use a registered key or register a factory for it.",
                details={"key": key},
            ))
        else:
            warnings.append(f"Unknown rule element key '{key}'; the engine will skip it.")
        return False

    # ------------------------------------------------------------------
    # Stage C — parameters
    # ------------------------------------------------------------------

    def _stage_fields(self, source: dict, errors: list[ValidationError]) -> None:
        key = source["key"]
        if key in CREATION_KEYS:
            return

        for name, kind, required in FIELD_SPECS.get(key, []):
            raw = source.get(name)
            path = f"/{name}"

            if raw is None:
                if required:
                    errors.append(ValidationError(
                        code=ErrorCode.FIELD_MISSING,
                        path=path,
                        message=f"{key} requires '{name}'.",
                        expected_fix=f"Add '{name}' ({_describe(kind)}).",
                        details={"key": key, "field": name},
                    ))
                continue

            if kind in _ENUMS:
                allowed = _ENUMS[kind]
                if raw not in allowed:
                    errors.append(ValidationError(
                        code=ErrorCode.ENUM_VALUE_INVALID,
                        path=path,
                        message=f"{key}: '{name}' must be one of {', '.join(allowed)}, got {raw!r}.",
                        expected_fix=f"Use one of: {list(allowed)}.",
                        details={"allowed": list(allowed), "got": raw},
                    ))
                continue

            if not _kind_ok(raw, kind):
                errors.append(ValidationError(
                    code=ErrorCode.FIELD_TYPE,
                    path=path,
                    message=f"{key}: '{name}' must be {_describe(kind)}, got {raw!r}.",
                    expected_fix=f"Change '{name}' to {_describe(kind)}.",
                    details={"field": name, "got": raw},
                ))
                continue

            if kind == "transform" and not _TRANSFORM_RE.match(raw):
                errors.append(ValidationError(
                    code=ErrorCode.VALUE_INVALID,
                    path=path,
                    message=f"{key}: unknown transform {raw!r}.",
                    expected_fix="Use identity, half-ceil, half-floor, negate or multiply:<factor>.",
                    details={"got": raw},
                ))
            elif kind == "choices":
                self._check_choices(raw, path, errors)

    def _check_choices(self, choices: list, path: str, errors: list[ValidationError]) -> None:
        for i, choice in enumerate(choices):
            if isinstance(choice, str):
                continue
            if isinstance(choice, dict) and isinstance(choice.get("value"), str):
                continue
            errors.append(ValidationError(
                code=ErrorCode.CHOICE_INVALID,
                path=f"{path}/{i}",
                message=f"Choice {i} must be a string or an object with a string 'value'.",
                expected_fix='Write the choice as "value" or {"value": ..., "label": ...}.',
                details={"got": choice},
            ))

    # ------------------------------------------------------------------
    # Stage D — predicates
    # ------------------------------------------------------------------

    def _stage_predicate(self, source: dict, errors: list[ValidationError]) -> None:
        predicate = source.get("predicate")
        if predicate is None:
            return
        statements = predicate if isinstance(predicate, list) else [predicate]
        for i, statement in enumerate(statements):
            self._check_statement(statement, f"/predicate/{i}", errors)

    def _check_statement(self, statement: Any, path: str, errors: list[ValidationError]) -> None:
        if isinstance(statement, str):
            if statement.strip() and statement != "not:":
                return
            problem = "an empty roll option"
        elif isinstance(statement, dict):
            if len(statement) == 1:
                (op, operands), = statement.items()
                if op in ("and", "or") and isinstance(operands, list):
                    for j, sub in enumerate(operands):
                        self._check_statement(sub, f"{path}/{op}/{j}", errors)
                    return
            problem = f"an object with keys {sorted(statement)}"
        else:
            problem = f"a {type(statement).__name__}"

        errors.append(ValidationError(
            code=ErrorCode.PREDICATE_MALFORMED,
            path=path,
            message=f"Predicate statement is {problem}; it would always evaluate to False.",
            expected_fix='Use "option", "not:option", {"and": [...]} or {"or": [...]}.',
            details={"statement": statement},
        ))

    # ------------------------------------------------------------------
    # Stage E — domains
    # ------------------------------------------------------------------

    def _stage_domains(self, source: dict, errors: list[ValidationError]) -> None:
        for name in _DOMAIN_FIELDS:
            domain = source.get(name)
            if not isinstance(domain, str) or not domain:
                continue
            if not _DOMAIN_RE.match(domain):
                errors.append(ValidationError(
                    code=ErrorCode.DOMAIN_MALFORMED,
                    path=f"/{name}",
                    message=f"Domain {domain!r} has an empty or invalid segment.",
                    expected_fix="Write domains as segments joined by ':' or '.', e.g. 'skill:stealth:sneak'.",
                    details={"domain": domain},
                ))
