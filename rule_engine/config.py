"""rule_engine/config.py — deployment settings, configured through environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass

from .errors import ConfigError

DEFAULT_MODIFIER_CAP = 60

CAP_ENV_VAR = "DH2E_MODIFIER_CAP"


@dataclass(frozen=True, slots=True)
class EngineConfig:
    """
    - modifier_cap: resolved modifier totals are clamped to [-cap, +cap]
    """
    modifier_cap: int = DEFAULT_MODIFIER_CAP

    def __post_init__(self) -> None:
        if isinstance(self.modifier_cap, bool) or not isinstance(self.modifier_cap, int):
            raise ConfigError(f"modifier_cap must be an integer, got {self.modifier_cap!r}")
        if self.modifier_cap < 0:
            raise ConfigError(f"modifier_cap must not be negative, got {self.modifier_cap}")

    @classmethod
    def from_env(cls) -> EngineConfig:
        raw = os.getenv(CAP_ENV_VAR, str(DEFAULT_MODIFIER_CAP))
        try:
            cap = int(raw)
        except ValueError:
            raise ConfigError(f"{CAP_ENV_VAR} must be an integer, got {raw!r}") from None
        return cls(modifier_cap=cap)
