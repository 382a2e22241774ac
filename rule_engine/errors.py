"""rule_engine/errors.py — exception hierarchy of the rules engine."""

from __future__ import annotations


class RuleEngineError(Exception):
    """Base exception for rules engine errors."""


class RuleElementError(RuleEngineError, ValueError):
    """A rule element source carries parameters the engine cannot use."""


class ContentLoadError(RuleEngineError):
    """Character or content JSON could not be read."""


class ConfigError(RuleEngineError, ValueError):
    """Invalid configuration value."""
