"""Shared CLI plumbing: engine configuration from the environment and character loading."""

from __future__ import annotations

import pathlib

from rich.console import Console

from rule_engine import ConfigError, ContentLoadError, EngineConfig, load_character_json
from rule_model import Character

console = Console(stderr=True)


def get_config(cap: int | None = None) -> EngineConfig:
    """EngineConfig from DH2E_MODIFIER_CAP; an explicit --cap wins."""
    try:
        if cap is not None:
            return EngineConfig(modifier_cap=cap)
        return EngineConfig.from_env()
    except ConfigError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise SystemExit(1)


def load_character(path: str) -> Character:
    char_path = pathlib.Path(path)
    if not char_path.exists():
        console.print(f"[red]No such character file:[/red] {char_path}")
        raise SystemExit(1)
    try:
        return load_character_json(char_path)
    except ContentLoadError as e:
        console.print(f"[red]Cannot load character:[/red] {e}")
        raise SystemExit(1)
