"""
rule_engine/check.py — the d100 roll-under check.

Flow of CheckEngine.roll(context):
  collecting             modifiers from the actor's Synthetics (domain + parent
                         domain) and the context, cloned; roll options from the
                         Synthetics, the context, "self:check" and
                         "self:characteristic:<key>"
  awaiting-confirmation  optional: an external collaborator may toggle modifiers,
                         add one more, or cancel (→ None, nothing else happens)
  rolled                 modifiers resolved, target = max(1, base + total), d100 rolled
  adjusted               DoS/DoF computed, gated degree adjustments applied
  finalized              result handed to the result consumer and returned
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from enum import StrEnum

from rule_model import Character, DosAdjustment, Modifier

from .config import EngineConfig
from .degrees import DoSResult, apply_dos_adjustments, calculate_dos
from .dice import D100, DiceSource
from .resolution import collect_modifiers, resolve_modifiers

log = logging.getLogger(__name__)


class CheckStage(StrEnum):
    COLLECTING            = "collecting"
    AWAITING_CONFIRMATION = "awaiting-confirmation"
    ROLLED                = "rolled"
    ADJUSTED              = "adjusted"
    FINALIZED             = "finalized"


# ---------------------------------------------------------------------------
# Context / result
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class CheckContext:
    """
    Input of one test.

    - actor:          character whose Synthetics contribute (None for a bare test)
    - base_target:    target number before modifiers
    - label:          e.g. "Ballistic Skill Test"
    - domain:         Synthetics key, e.g. "characteristic:bs", "skill:stealth:sneak"
    - characteristic: adds the roll option "self:characteristic:<key>"
    - modifiers:      extra modifiers supplied by the caller
    - roll_options:   extra roll options for predicate matching
    - skip_dialog:    roll without the confirmation step
    - dos_threshold:  minimum DoS requested by the GM
    """
    actor: Character | None
    base_target: int
    label: str
    domain: str
    characteristic: str | None = None
    modifiers: tuple[Modifier, ...] = ()
    roll_options: frozenset[str] = frozenset()
    skip_dialog: bool = False
    dos_threshold: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "modifiers", tuple(self.modifiers))
        object.__setattr__(self, "roll_options", frozenset(self.roll_options))


@dataclass(frozen=True, slots=True)
class CheckResult:
    roll: int
    target: int
    dos: DoSResult
    applied_modifiers: tuple[Modifier, ...]
    modifier_total: int
    context: CheckContext
    dos_adjustments: tuple[DosAdjustment, ...] = ()
    roll_options: frozenset[str] = frozenset()

    @property
    def success(self) -> bool:
        return self.dos.success

    @property
    def degrees(self) -> int:
        return self.dos.degrees

    @property
    def threshold_met(self) -> bool | None:
        threshold = self.context.dos_threshold
        if threshold is None:
            return None
        return self.dos.success and self.dos.degrees >= threshold


# ---------------------------------------------------------------------------
# Confirmation step
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class CheckPrompt:
    """What the confirmation collaborator sees. `modifiers` are private clones."""
    label: str
    base_target: int
    modifiers: tuple[Modifier, ...]
    roll_options: frozenset[str]


@dataclass(frozen=True, slots=True)
class Confirmation:
    """
    Answer of the confirmation collaborator.

    - cancelled:      abort; the check returns None
    - modifiers:      replacement modifier list (None keeps the prompt's list,
                      including any toggles made on its clones)
    - extra_modifier: one additional modifier, e.g. Called Shot −20
    """
    cancelled: bool = False
    modifiers: tuple[Modifier, ...] | None = None
    extra_modifier: Modifier | None = None


type ConfirmHandler = Callable[[CheckPrompt], Awaitable[Confirmation | None]]
type ResultHandler = Callable[[CheckResult], Awaitable[None]]


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class CheckEngine:
    """
    Usage::

        engine = CheckEngine(config=EngineConfig.from_env(), dice=D100(seed=7))
        result = await engine.roll(CheckContext(actor, 45, "BS Test", "characteristic:bs"))
    """
    config: EngineConfig = field(default_factory=EngineConfig)
    dice: DiceSource = field(default_factory=D100)
    confirm: ConfirmHandler | None = None
    publish: ResultHandler | None = None

    async def roll(self, context: CheckContext) -> CheckResult | None:
        synthetics = context.actor.synthetics if context.actor is not None else None

        # collecting
        modifiers = collect_modifiers(synthetics, context.domain, context.modifiers)
        roll_options = build_roll_options(context, synthetics.roll_options if synthetics else ())
        log.debug("%s: %s, %d modifiers", context.label, CheckStage.COLLECTING, len(modifiers))

        # awaiting-confirmation
        if not context.skip_dialog and self.confirm is not None:
            log.debug("%s: %s", context.label, CheckStage.AWAITING_CONFIRMATION)
            prompt = CheckPrompt(
                label=context.label,
                base_target=context.base_target,
                modifiers=tuple(modifiers),
                roll_options=roll_options,
            )
            confirmation = await self.confirm(prompt)
            if confirmation is None or confirmation.cancelled:
                log.info("%s: cancelled at confirmation", context.label)
                return None
            modifiers = list(prompt.modifiers if confirmation.modifiers is None else confirmation.modifiers)
            if confirmation.extra_modifier is not None:
                modifiers.append(confirmation.extra_modifier)

        # rolled
        resolution = resolve_modifiers(modifiers, roll_options, self.config.modifier_cap)
        target = max(1, context.base_target + resolution.total)
        d100 = await self.dice.roll_d100()
        log.debug("%s: %s, d100 = %d vs target %d", context.label, CheckStage.ROLLED, d100, target)

        # adjusted
        dos = calculate_dos(d100, target)
        dos, adjustments = apply_dos_adjustments(
            dos, synthetics.dos_adjustments if synthetics else (), roll_options,
        )
        log.debug("%s: %s, %d degree adjustments", context.label, CheckStage.ADJUSTED, len(adjustments))

        # finalized
        result = CheckResult(
            roll=d100,
            target=target,
            dos=dos,
            applied_modifiers=resolution.applied,
            modifier_total=resolution.total,
            context=context,
            dos_adjustments=tuple(adjustments),
            roll_options=roll_options,
        )
        log.debug(
            "%s: %s, roll %d vs %d → %s", context.label, CheckStage.FINALIZED, d100, target, dos.label,
        )
        if self.publish is not None:
            await self.publish(result)
        return result


def build_roll_options(context: CheckContext, synthetic_options: Iterable[str] = ()) -> frozenset[str]:
    options = set(synthetic_options) | context.roll_options
    if context.characteristic:
        options.add(f"self:characteristic:{context.characteristic}")
    options.add("self:check")
    return frozenset(options)


async def roll(
    context: CheckContext,
    *,
    config: EngineConfig | None = None,
    dice: DiceSource | None = None,
    confirm: ConfirmHandler | None = None,
    publish: ResultHandler | None = None,
) -> CheckResult | None:
    """One-shot check with an ad-hoc engine."""
    engine = CheckEngine(
        config=config or EngineConfig(),
        dice=dice or D100(),
        confirm=confirm,
        publish=publish,
    )
    return await engine.roll(context)
