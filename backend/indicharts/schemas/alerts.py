"""
CONTRACT 3: Signal Detection & Alerting

Input: AlertRuleConfig + consecutive indicator values
Output: TriggerEvent

Rules are owned by the alert rule store; the engine only reads them.
Trigger events are consumed by the notification dispatcher and are not
persisted here. AlertState is threaded through by the caller.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from indicharts.schemas.indicators import IndicatorKind, RsiState, Zone
from indicharts.schemas.market import Timeframe


# =============================================================================
# ENUMS
# =============================================================================


class AlertMode(str, Enum):
    CROSS = "cross"
    ENTER = "enter"
    EXIT = "exit"


class TriggerType(str, Enum):
    CROSS_UP = "cross_up"
    CROSS_DOWN = "cross_down"
    ENTER_ZONE = "enter_zone"
    EXIT_ZONE = "exit_zone"


# =============================================================================
# INPUT: AlertRuleConfig
# =============================================================================


class AlertRuleConfig(BaseModel):
    """
    Alert rule as stored by the rule store.

    levels: one or more thresholds for cross mode, [lower, upper] for
    enter/exit mode.
    """

    model_config = ConfigDict(frozen=True)

    id: int = 0
    user_id: Optional[str] = None
    symbol: str = ""
    timeframe: Timeframe = Timeframe.M15
    indicator: IndicatorKind = IndicatorKind.RSI
    period: Optional[int] = Field(default=None, ge=1)
    indicator_params: Optional[dict[str, Any]] = None
    levels: list[float] = Field(default_factory=list)
    mode: AlertMode = AlertMode.CROSS
    cooldown_sec: Optional[int] = Field(
        default=None, ge=0, description="Seconds between fires; server default when unset"
    )
    active: bool = True
    description: Optional[str] = None

    @field_validator("indicator", mode="before")
    @classmethod
    def _parse_indicator(cls, value: Any) -> IndicatorKind:
        return IndicatorKind.parse(value)

    @field_validator("timeframe", mode="before")
    @classmethod
    def _parse_timeframe(cls, value: Any) -> Timeframe:
        return Timeframe.parse(value)

    @field_validator("mode", mode="before")
    @classmethod
    def _parse_mode(cls, value: Any) -> Any:
        return value.lower() if isinstance(value, str) else value


# =============================================================================
# OUTPUT: TriggerEvent
# =============================================================================


class TriggerEvent(BaseModel):
    """
    A detected level cross or zone transition.

    `level` is the crossed level for cross events and the upper bound for
    zone events; `lower`/`upper` are only set for zone events.
    """

    model_config = ConfigDict(frozen=True)

    type: TriggerType
    level: float
    lower: Optional[float] = None
    upper: Optional[float] = None
    timestamp: int
    indicator_value: float
    zone: Zone
    indicator: Optional[IndicatorKind] = None
    rule_id: Optional[int] = None
    symbol: Optional[str] = None
    message: str = ""


# =============================================================================
# CARRIED STATE: AlertState
# =============================================================================


class AlertState(BaseModel):
    """Per-rule state between evaluations. Returned fresh, never mutated."""

    model_config = ConfigDict(frozen=True)

    rule_id: int = 0
    last_indicator_value: Optional[float] = None
    last_bar_ts: Optional[int] = None
    last_fire_ts: Optional[int] = None
    last_side: Optional[Zone] = None
    indicator_state: Optional[RsiState] = None


# =============================================================================
# API: Alert checks
# =============================================================================


class AlertCheckItem(BaseModel):
    """One rule with the candles and state to evaluate it against."""

    rule: AlertRuleConfig
    candles: list[dict[str, Any]]
    state: Optional[AlertState] = None


class AlertCheckRequest(BaseModel):
    items: list[AlertCheckItem] = Field(..., min_length=1)
    now_ms: Optional[int] = Field(
        default=None, description="Evaluation time; server clock when unset"
    )


class RuleEvaluation(BaseModel):
    """Outcome of evaluating one rule."""

    rule_id: int
    symbol: str
    timeframe: Timeframe
    triggers: list[TriggerEvent] = Field(default_factory=list)
    suppressed: int = Field(default=0, description="Triggers held back by cooldown")
    state: AlertState
    indicator_value: Optional[float] = None
    skipped_reason: Optional[str] = None


class RuleError(BaseModel):
    """A rule that could not be evaluated. `index` is its position in the request."""

    index: int
    rule_id: int
    message: str


class AlertCheckResult(BaseModel):
    evaluations: list[RuleEvaluation] = Field(default_factory=list)
    errors: list[RuleError] = Field(default_factory=list)

    @property
    def triggers(self) -> list[TriggerEvent]:
        return [t for e in self.evaluations for t in e.triggers]

    def by_symbol_timeframe(self) -> dict[str, list[RuleEvaluation]]:
        """Evaluations grouped by "SYMBOL|timeframe"."""
        grouped: dict[str, list[RuleEvaluation]] = {}
        for evaluation in self.evaluations:
            key = f"{evaluation.symbol}|{evaluation.timeframe.value}"
            grouped.setdefault(key, []).append(evaluation)
        return grouped


class LevelValidationResponse(BaseModel):
    valid: bool
    problems: list[str] = Field(default_factory=list)
