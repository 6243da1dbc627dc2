"""
Signal Detector

Turns a (previous, current) pair of indicator values into trigger events
for one alert rule.

The detector keeps no history: callers pass both values every time, so the
same rule can be evaluated concurrently against different snapshots.
Cooldowns, hysteresis and de-duplication across calls belong to the
notification side (see services/alerts/evaluator.py).
"""

import logging
from typing import Optional, Sequence

from indicharts.schemas.alerts import AlertMode, AlertRuleConfig, TriggerEvent, TriggerType
from indicharts.schemas.indicators import IndicatorPoint
from indicharts.services.signals.zones import classify

logger = logging.getLogger(__name__)


# =============================================================================
# PREDICATES
# =============================================================================


def crossed_up(previous: float, current: float, level: float) -> bool:
    return previous <= level and current > level


def crossed_down(previous: float, current: float, level: float) -> bool:
    return previous >= level and current < level


def _inside(value: float, lower: float, upper: float) -> bool:
    return lower <= value <= upper


def entered_zone(previous: float, current: float, lower: float, upper: float) -> bool:
    """Previous strictly outside [lower, upper], current inside (bounds included)."""
    return not _inside(previous, lower, upper) and _inside(current, lower, upper)


def exited_zone(previous: float, current: float, lower: float, upper: float) -> bool:
    """Previous inside [lower, upper] (bounds included), current strictly outside."""
    return _inside(previous, lower, upper) and not _inside(current, lower, upper)


# =============================================================================
# DETECTION
# =============================================================================


def _zone_bounds(levels: Sequence[float]) -> Optional[tuple[float, float]]:
    if len(levels) < 2:
        return None
    lower, upper = sorted(levels[:2])
    return lower, upper


def detect(
    rule: AlertRuleConfig,
    previous: float,
    current: float,
    timestamp: int,
) -> list[TriggerEvent]:
    """
    Evaluate one step of an alert rule.

    Cross mode checks every level independently, so one step can yield
    several events. Enter/exit modes need two levels and yield at most one
    event; with fewer levels they yield nothing.
    """
    name = rule.indicator.short_name
    zone = classify(current, rule.levels)
    common = {
        "timestamp": timestamp,
        "indicator_value": current,
        "zone": zone,
        "indicator": rule.indicator,
        "rule_id": rule.id,
        "symbol": rule.symbol or None,
    }

    if rule.mode == AlertMode.CROSS:
        events = []
        for level in rule.levels:
            if crossed_up(previous, current, level):
                events.append(
                    TriggerEvent(
                        type=TriggerType.CROSS_UP,
                        level=level,
                        message=f"{name} crossed level {level:g} upward ({current:.1f})",
                        **common,
                    )
                )
            if crossed_down(previous, current, level):
                events.append(
                    TriggerEvent(
                        type=TriggerType.CROSS_DOWN,
                        level=level,
                        message=f"{name} crossed level {level:g} downward ({current:.1f})",
                        **common,
                    )
                )
        return events

    bounds = _zone_bounds(rule.levels)
    if bounds is None:
        logger.debug(f"Rule {rule.id}: {rule.mode.value} mode needs two levels, got {rule.levels}")
        return []
    lower, upper = bounds

    if rule.mode == AlertMode.ENTER and entered_zone(previous, current, lower, upper):
        return [
            TriggerEvent(
                type=TriggerType.ENTER_ZONE,
                level=upper,
                lower=lower,
                upper=upper,
                message=f"{name} entered zone {lower:g}-{upper:g} ({current:.1f})",
                **common,
            )
        ]

    if rule.mode == AlertMode.EXIT and exited_zone(previous, current, lower, upper):
        return [
            TriggerEvent(
                type=TriggerType.EXIT_ZONE,
                level=upper,
                lower=lower,
                upper=upper,
                message=f"{name} exited zone {lower:g}-{upper:g} ({current:.1f})",
                **common,
            )
        ]

    return []


def detect_series(
    rule: AlertRuleConfig, points: Sequence[IndicatorPoint]
) -> list[TriggerEvent]:
    """Run the detector over every consecutive pair of a history (chart markers)."""
    events = []
    for previous, current in zip(points, points[1:]):
        events.extend(detect(rule, previous.value, current.value, current.timestamp))
    return events
