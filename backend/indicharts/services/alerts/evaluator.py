"""
Alert Evaluator

Checks one alert rule against a fresh candle history:

    1. compute the rule's indicator history
    2. previous value = value stored in AlertState, else second-to-last point
    3. run the signal detector on (previous, latest)
    4. hold triggers back while the rule's cooldown is running
    5. hand back a new AlertState (the input state is never modified)
"""

import logging
import time
from typing import Optional

from indicharts.core.config import settings
from indicharts.schemas.alerts import AlertRuleConfig, AlertState, RuleEvaluation
from indicharts.schemas.indicators import ComputeStatus
from indicharts.services.indicators import IndicatorService, get_indicator_service
from indicharts.services.indicators.interface import CandleInput
from indicharts.services.signals import classify, detect

logger = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


def cooldown_elapsed(rule: AlertRuleConfig, state: AlertState, at_ms: int) -> bool:
    """True when the rule has never fired or its cooldown has run out."""
    if state.last_fire_ts is None:
        return True
    cooldown_sec = (
        rule.cooldown_sec if rule.cooldown_sec is not None else settings.default_cooldown_sec
    )
    return at_ms - state.last_fire_ts >= cooldown_sec * 1000


class AlertEvaluator:
    """Evaluates alert rules; all state comes in and goes out as values."""

    def __init__(self, indicator_service: Optional[IndicatorService] = None):
        self._indicators = indicator_service or get_indicator_service()

    def evaluate(
        self,
        rule: AlertRuleConfig,
        candles: CandleInput,
        state: Optional[AlertState] = None,
        at_ms: Optional[int] = None,
    ) -> RuleEvaluation:
        state = state or AlertState(rule_id=rule.id)
        at_ms = at_ms if at_ms is not None else now_ms()

        if not rule.active:
            return self._skipped(rule, state, "inactive")

        series = self._indicators.compute_history(
            candles, rule.indicator, rule.period, rule.indicator_params
        )
        if len(series.points) < 2:
            logger.info(
                f"Rule {rule.id}: not enough indicator data (size={len(series.points)})"
            )
            return self._skipped(rule, state, ComputeStatus.INSUFFICIENT_DATA.value)

        latest = series.points[-1]
        current = latest.value
        previous = (
            state.last_indicator_value
            if state.last_indicator_value is not None
            else series.points[-2].value
        )
        logger.debug(
            f"Rule {rule.id} ({rule.symbol} {rule.timeframe.value}) "
            f"{rule.indicator.short_name}={current:.2f}, previous={previous:.2f}, "
            f"levels={rule.levels}, mode={rule.mode.value}"
        )

        triggers = detect(rule, previous, current, latest.timestamp)
        updates = {
            "last_indicator_value": current,
            "last_bar_ts": latest.timestamp,
            "indicator_state": latest.state,
        }

        fired = []
        suppressed = 0
        if triggers:
            if cooldown_elapsed(rule, state, at_ms):
                fired = triggers
                updates["last_fire_ts"] = at_ms
                updates["last_side"] = classify(current, rule.levels)
                logger.info(f"Rule {rule.id}: {len(fired)} trigger(s) fired")
            else:
                suppressed = len(triggers)
                logger.info(f"Rule {rule.id}: {suppressed} trigger(s) held back by cooldown")

        return RuleEvaluation(
            rule_id=rule.id,
            symbol=rule.symbol,
            timeframe=rule.timeframe,
            triggers=fired,
            suppressed=suppressed,
            state=state.model_copy(update=updates),
            indicator_value=current,
        )

    @staticmethod
    def _skipped(rule: AlertRuleConfig, state: AlertState, reason: str) -> RuleEvaluation:
        return RuleEvaluation(
            rule_id=rule.id,
            symbol=rule.symbol,
            timeframe=rule.timeframe,
            state=state,
            skipped_reason=reason,
        )
