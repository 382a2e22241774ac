"""
validator — static checks for rule element sources.

Public interface:
    RuleValidator  — main validator (stages A–E)
    ValidationReport, ValidationError, ErrorCode — report types
    RULE_ELEMENT_SCHEMA — JSON Schema of the shared envelope
    normalize_source — defaults as the engine applies them

Typical use:
    from validator import RuleValidator

    validator = RuleValidator()
    for report in validator.validate_rules(item["rules"]):
        if not report.is_valid:
            for e in report.errors:
                print(e.code, e.path, e.message)
"""

from .types import ErrorCode, ValidationError, ValidationReport
from .schema import RULE_ELEMENT_SCHEMA
from .normalizer import normalize_source
from .rule_validator import FIELD_SPECS, RuleValidator

__all__ = [
    "ErrorCode",
    "ValidationError",
    "ValidationReport",
    "RULE_ELEMENT_SCHEMA",
    "normalize_source",
    "FIELD_SPECS",
    "RuleValidator",
]
