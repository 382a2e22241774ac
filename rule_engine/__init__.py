"""
rule_engine — rule elements, Synthetics preparation and the d100 check pipeline.

Public API:
  RuleElementRegistry / instantiate_rule_element(source, item)  → RuleElement | None
  prepare_character(character)              → PreparationReport (Synthetics rebuilt)
  build_synthetics(items)                   → (Synthetics, PreparationReport)
  apply_exclusion_groups(modifiers)         → list[Modifier]
  resolve_modifiers(modifiers, options, cap) → ModifierResolution
  collect_modifiers(synthetics, domain, extra) → list[Modifier]
  calculate_dos(roll, target)               → DoSResult
  apply_dos_adjustments(dos, adjustments, options) → (DoSResult, applied)
  CheckEngine.roll(context) / roll(context) → CheckResult | None   (async)
  calculate_damage(...)                     → DamageResult
  load_character_json(path)                 → Character
  EngineConfig                              configuration (DH2E_MODIFIER_CAP)
"""

from .errors import RuleEngineError, RuleElementError, ContentLoadError, ConfigError
from .config import EngineConfig, DEFAULT_MODIFIER_CAP
from .elements import (
    RuleElement,
    RuleElementSource,
    FlatModifier,
    RollOption,
    DiceOverride,
    AdjustDegree,
    Resistance,
    AdjustToughness,
    GrantItem,
    ChoiceOption,
    ChoiceSet,
    ActorValue,
    AttributeOverride,
    FateOption,
    CreationData,
)
from .registry import (
    CREATION_KEYS,
    RuleElementRegistry,
    default_registry,
    instantiate_rule_element,
)
from .preparation import (
    PreparationReport,
    RuleIssue,
    apply_rule_elements,
    build_synthetics,
    prepare_base_data,
    prepare_derived_data,
    prepare_character,
)
from .resolution import (
    ModifierResolution,
    apply_exclusion_groups,
    collect_modifiers,
    resolve_modifiers,
)
from .degrees import DoSResult, calculate_dos, apply_dos_adjustments
from .dice import D100, DiceSource
from .check import (
    CheckStage,
    CheckContext,
    CheckResult,
    CheckPrompt,
    Confirmation,
    CheckEngine,
    build_roll_options,
    roll,
)
from .soak import (
    DamageResult,
    apply_resistances,
    calculate_damage,
    effective_toughness_bonus,
)
from .loader import character_from_dict, item_from_dict, load_character_json

__all__ = [
    # errors
    "RuleEngineError",
    "RuleElementError",
    "ContentLoadError",
    "ConfigError",
    # config
    "EngineConfig",
    "DEFAULT_MODIFIER_CAP",
    # elements
    "RuleElement",
    "RuleElementSource",
    "FlatModifier",
    "RollOption",
    "DiceOverride",
    "AdjustDegree",
    "Resistance",
    "AdjustToughness",
    "GrantItem",
    "ChoiceOption",
    "ChoiceSet",
    "ActorValue",
    "AttributeOverride",
    "FateOption",
    "CreationData",
    # registry
    "CREATION_KEYS",
    "RuleElementRegistry",
    "default_registry",
    "instantiate_rule_element",
    # preparation
    "PreparationReport",
    "RuleIssue",
    "apply_rule_elements",
    "build_synthetics",
    "prepare_base_data",
    "prepare_derived_data",
    "prepare_character",
    # resolution
    "ModifierResolution",
    "apply_exclusion_groups",
    "collect_modifiers",
    "resolve_modifiers",
    # degrees
    "DoSResult",
    "calculate_dos",
    "apply_dos_adjustments",
    # dice
    "D100",
    "DiceSource",
    # check
    "CheckStage",
    "CheckContext",
    "CheckResult",
    "CheckPrompt",
    "Confirmation",
    "CheckEngine",
    "build_roll_options",
    "roll",
    # soak
    "DamageResult",
    "apply_resistances",
    "calculate_damage",
    "effective_toughness_bonus",
    # loader
    "character_from_dict",
    "item_from_dict",
    "load_character_json",
]
