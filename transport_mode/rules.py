"""
Priority-ordered detection rules.

A rule is a small value: a name, a unique integer priority, and two plain
functions. `can_apply` decides whether the rule is relevant for a fix pair
and `detect` returns a ModeResult or None to abstain. The engine tries the
override rules from highest to lowest priority and falls back to the
speed-bracket baseline, which always produces a mode.

Rules:
- highway_override (100): on a motorway -> car
- train_station (97): at a train station, any speed -> train
- airport (96): at an airport at airplane speed -> airplane
- speed_bracket (0): first configured bracket containing the speed
"""

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

from .context import DetectionContext, ModeResult
from .modes import DetectionReason, TransportMode
from .settings import DetectionSettings, settings as default_settings

logger = logging.getLogger(__name__)


HIGHWAY_OVERRIDE = 'highway_override'
TRAIN_STATION = 'train_station'
AIRPORT = 'airport'
SPEED_BRACKET = 'speed_bracket'


@dataclass(frozen=True)
class Rule:
    """A detection rule."""
    name: str
    priority: int  # higher runs first
    can_apply: Callable[[DetectionContext], bool]
    detect: Callable[[DetectionContext], Optional[ModeResult]]


def highway_override_rule() -> Rule:
    """Motorways are driven, whatever else is going on."""

    def detect(ctx: DetectionContext) -> ModeResult:
        reason = f"On highway/motorway at {ctx.speed_kmh:.1f} km/h"
        if ctx.in_train_journey:
            reason += ", ending train journey"
        return ModeResult(
            mode=TransportMode.CAR,
            reason=reason,
            confidence=0.95,
            code=DetectionReason.HIGHWAY_OR_MOTORWAY,
            rule=HIGHWAY_OVERRIDE,
        )

    return Rule(
        name=HIGHWAY_OVERRIDE,
        priority=100,
        can_apply=lambda ctx: ctx.signal.is_highway,
        detect=detect,
    )


def train_station_rule(cfg: DetectionSettings) -> Rule:
    """
    Being at a train station implies train, independent of speed.

    Confidence is highest at platform speed (a train passing through or
    pulling out), a bit lower while boarding or alighting, and lowest when
    standing still on the platform.
    """

    def detect(ctx: DetectionContext) -> ModeResult:
        station = ctx.signal.station_name or "unnamed station"
        if ctx.speed_kmh >= cfg.platform_speed_kmh:
            confidence = 0.9
            reason = f"At train station ({station}) at platform speed"
        elif ctx.speed_kmh >= cfg.boarding_speed_kmh:
            confidence = 0.85
            reason = f"At train station ({station}), boarding or alighting"
        else:
            confidence = 0.75
            reason = f"At train station ({station}), waiting"
        return ModeResult(
            mode=TransportMode.TRAIN,
            reason=reason,
            confidence=confidence,
            code=DetectionReason.TRAIN_STATION_AND_SPEED,
            rule=TRAIN_STATION,
        )

    return Rule(
        name=TRAIN_STATION,
        priority=97,
        can_apply=lambda ctx: ctx.signal.is_train_station,
        detect=detect,
    )


def airport_rule(cfg: DetectionSettings) -> Rule:
    """At an airport and fast enough to be taking off or landing."""

    def detect(ctx: DetectionContext) -> ModeResult:
        airport = ctx.signal.airport_name or "unnamed airport"
        return ModeResult(
            mode=TransportMode.AIRPLANE,
            reason=f"At airport ({airport}) at {ctx.speed_kmh:.0f} km/h",
            confidence=0.9,
            code=DetectionReason.AIRPORT_AND_PLANE_SPEED,
            rule=AIRPORT,
        )

    return Rule(
        name=AIRPORT,
        priority=96,
        can_apply=lambda ctx: ctx.signal.is_airport and ctx.speed_kmh >= cfg.airport_speed_kmh,
        detect=detect,
    )


def speed_bracket_rule(cfg: DetectionSettings) -> Rule:
    """
    Baseline: map the current speed onto the configured bracket table.

    A valid non-negative speed that falls outside every bracket is treated
    as car so that speed data always yields a mode.
    """

    def detect(ctx: DetectionContext) -> ModeResult:
        speed = ctx.speed_kmh
        for bracket in cfg.speed_brackets:
            if bracket.contains(speed):
                return ModeResult(
                    mode=bracket.mode,
                    reason=f"Speed {speed:.1f} km/h in {bracket.mode.value} range",
                    confidence=0.6,
                    code=DetectionReason.SPEED_BRACKET_MATCH,
                    rule=SPEED_BRACKET,
                )
        if speed >= 0:
            return ModeResult(
                mode=TransportMode.CAR,
                reason=f"Speed {speed:.1f} km/h outside configured brackets, assumed car",
                confidence=0.4,
                code=DetectionReason.DEFAULT,
                rule=SPEED_BRACKET,
            )
        return ModeResult(
            mode=TransportMode.UNKNOWN,
            reason="No usable speed",
            code=DetectionReason.DEFAULT,
            rule=SPEED_BRACKET,
        )

    return Rule(
        name=SPEED_BRACKET,
        priority=0,
        can_apply=lambda ctx: True,
        detect=detect,
    )


def default_rules(cfg: Optional[DetectionSettings] = None) -> List[Rule]:
    """The standard override rules (without the baseline)."""
    cfg = cfg or default_settings
    return [
        highway_override_rule(),
        train_station_rule(cfg),
        airport_rule(cfg),
    ]


class RuleEngine:
    """
    Evaluates rules in descending priority; the first result wins.

    Rules that apply but abstain (detect returns None) are skipped. When no
    override produces a result, the baseline rule decides.
    """

    def __init__(self, rules: Iterable[Rule], baseline: Rule):
        self.rules = sorted(rules, key=lambda r: r.priority, reverse=True)
        self.baseline = baseline

        priorities = [r.priority for r in self.rules] + [baseline.priority]
        if len(priorities) != len(set(priorities)):
            raise ValueError(f"Rule priorities must be unique, got {sorted(priorities)}")

    def applicable_rules(self, ctx: DetectionContext) -> List[Rule]:
        """Rules whose can_apply is true for this context (for debugging)."""
        return [rule for rule in self.rules if rule.can_apply(ctx)]

    def evaluate(self, ctx: DetectionContext) -> ModeResult:
        for rule in self.rules:
            if not rule.can_apply(ctx):
                continue
            result = rule.detect(ctx)
            if result is not None:
                logger.debug(f"Rule {rule.name} selected {result.mode.value}")
                return result
        return self.baseline.detect(ctx)
