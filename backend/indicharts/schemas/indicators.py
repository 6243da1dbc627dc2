"""
CONTRACT 2: Indicator Engine

Input: CandleSeries (+ indicator kind and parameters)
Output: IndicatorSeries / IncrementalResult

This module defines the indicator kinds, their parameters and the uniform
result shapes returned by the facade. All math lives in
services/indicators/calculations.py.
"""

from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from indicharts.services.base import UnsupportedOperationError


# =============================================================================
# ENUMS
# =============================================================================


class IndicatorKind(str, Enum):
    RSI = "rsi"
    STOCHASTIC = "stoch"
    WILLIAMS_R = "williams"

    @classmethod
    def parse(cls, value: Union[str, "IndicatorKind"]) -> "IndicatorKind":
        """Accept stored names and UI aliases ('wpr', 'stochastic', 'RSI')."""
        if isinstance(value, IndicatorKind):
            return value
        key = str(value).strip().lower()
        if key in _KIND_ALIASES:
            return _KIND_ALIASES[key]
        raise ValueError(f"Unknown indicator kind: {value!r}")

    @property
    def short_name(self) -> str:
        return _KIND_META[self]["short_name"]

    @property
    def display_name(self) -> str:
        return _KIND_META[self]["display_name"]

    @property
    def default_period(self) -> int:
        return _KIND_META[self]["default_period"]

    @property
    def default_levels(self) -> list[float]:
        return list(_KIND_META[self]["default_levels"])

    @property
    def preset_params(self) -> dict[str, int]:
        """Extra parameters the app preselects when creating a chart or alert."""
        return dict(_KIND_META[self]["preset_params"])

    @property
    def level_range(self) -> tuple[float, float]:
        """Inclusive range a configured alert level must fall in."""
        return _KIND_META[self]["level_range"]

    @property
    def supports_incremental(self) -> bool:
        return self is IndicatorKind.RSI


_KIND_ALIASES = {
    "rsi": IndicatorKind.RSI,
    "stoch": IndicatorKind.STOCHASTIC,
    "stochastic": IndicatorKind.STOCHASTIC,
    "williams": IndicatorKind.WILLIAMS_R,
    "wpr": IndicatorKind.WILLIAMS_R,
    "williams_r": IndicatorKind.WILLIAMS_R,
}

_KIND_META: dict[IndicatorKind, dict[str, Any]] = {
    IndicatorKind.RSI: {
        "short_name": "RSI",
        "display_name": "RSI (Relative Strength Index)",
        "default_period": 14,
        "default_levels": (30.0, 70.0),
        "preset_params": {},
        "level_range": (1.0, 99.0),
    },
    IndicatorKind.STOCHASTIC: {
        "short_name": "STOCH",
        "display_name": "Stochastic Oscillator",
        "default_period": 6,  # %K period (Yahoo Finance default)
        "default_levels": (20.0, 80.0),
        "preset_params": {"slowPeriod": 3, "dPeriod": 6, "smoothPeriod": 3},
        "level_range": (1.0, 99.0),
    },
    IndicatorKind.WILLIAMS_R: {
        "short_name": "WPR",
        "display_name": "Williams %R",
        "default_period": 14,
        "default_levels": (-80.0, -20.0),
        "preset_params": {},
        "level_range": (-99.0, -1.0),
    },
}


class ComputeStatus(str, Enum):
    OK = "ok"
    INSUFFICIENT_DATA = "insufficient_data"
    UNSUPPORTED = "unsupported"


class Zone(str, Enum):
    BELOW = "below"
    BETWEEN = "between"
    ABOVE = "above"


# =============================================================================
# CARRIED STATE
# =============================================================================


class RsiState(BaseModel):
    """Wilder averages carried between RSI steps. Passed by value, never mutated."""

    model_config = ConfigDict(frozen=True)

    average_gain: float = Field(..., ge=0)
    average_loss: float = Field(..., ge=0)


# =============================================================================
# PARAMETERS
# =============================================================================


class RsiParams(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal[IndicatorKind.RSI] = IndicatorKind.RSI
    period: int = Field(default=14, ge=1)


class StochasticParams(BaseModel):
    """
    Stochastic parameters.

    slow_period smooths raw %K (Slow Stochastic); smooth_period smooths %D.
    Either is inactive when unset or <= 1.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal[IndicatorKind.STOCHASTIC] = IndicatorKind.STOCHASTIC
    k_period: int = Field(default=6, ge=1)
    d_period: int = Field(default=3, ge=1)
    slow_period: Optional[int] = Field(default=None, ge=1)
    smooth_period: Optional[int] = Field(default=None, ge=1)


class WilliamsParams(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal[IndicatorKind.WILLIAMS_R] = IndicatorKind.WILLIAMS_R
    period: int = Field(default=14, ge=1)


IndicatorParams = Annotated[
    Union[RsiParams, StochasticParams, WilliamsParams],
    Field(discriminator="kind"),
]


# =============================================================================
# OUTPUT: Points and Series
# =============================================================================


class IndicatorPoint(BaseModel):
    """
    One indicator value, aligned to exactly one input candle.

    `state` is set for RSI only. `k` is the displayed %K for Stochastic,
    where `value` is %D.
    """

    model_config = ConfigDict(frozen=True)

    timestamp: int
    value: float
    close: float
    state: Optional[RsiState] = None
    k: Optional[float] = None


class IndicatorSeries(BaseModel):
    """Full-history result. `first_index` is the candle index of points[0]."""

    kind: IndicatorKind
    status: ComputeStatus
    first_index: Optional[int] = None
    points: list[IndicatorPoint] = Field(default_factory=list)

    @property
    def values(self) -> list[float]:
        return [p.value for p in self.points]

    @property
    def last_state(self) -> Optional[RsiState]:
        return self.points[-1].state if self.points else None


class IncrementalResult(BaseModel):
    """Single-step result of the live-update path."""

    kind: IndicatorKind
    status: ComputeStatus
    point: Optional[IndicatorPoint] = None

    def raise_for_status(self) -> IndicatorPoint:
        """Return the point, raising when the kind cannot be computed incrementally."""
        if self.status == ComputeStatus.UNSUPPORTED:
            raise UnsupportedOperationError(
                "IndicatorService",
                f"{self.kind.short_name} cannot be calculated incrementally; "
                "use compute_history instead",
                {"kind": self.kind.value},
            )
        return self.point


# =============================================================================
# API: Requests and Responses
# =============================================================================


class IndicatorRequest(BaseModel):
    """
    Request for a full indicator history.
    Sent by: Chart screen / home-screen widget refresh
    Received by: Indicator Service

    Candles are raw rows so that malformed ones are dropped instead of
    failing the whole request.
    """

    candles: list[dict[str, Any]] = Field(..., description="OHLCV rows, oldest first")
    kind: IndicatorKind = IndicatorKind.RSI
    period: Optional[int] = Field(default=None, ge=1)
    params: Optional[dict[str, Any]] = Field(
        default=None, description="Kind-specific extras, e.g. {'dPeriod': 3}"
    )
    levels: Optional[list[float]] = Field(
        default=None, max_length=2, description="Zone levels; kind defaults when unset"
    )
    sparkline_points: Optional[int] = Field(default=None, ge=1)

    @field_validator("kind", mode="before")
    @classmethod
    def _parse_kind(cls, value: Any) -> IndicatorKind:
        return IndicatorKind.parse(value)


class IndicatorHistoryResponse(BaseModel):
    """Indicator history with zones for the chart renderer."""

    series: IndicatorSeries
    levels: list[float]
    zones: list[Zone]
    sparkline: list[float]
    candles_used: int


class IncrementalRequest(BaseModel):
    """One new candle close plus the state carried from the previous step."""

    current_close: float
    previous_close: float
    state: Optional[RsiState] = None
    kind: IndicatorKind = IndicatorKind.RSI
    period: Optional[int] = Field(default=None, ge=1)
    timestamp: int = 0
    params: Optional[dict[str, Any]] = None

    @field_validator("kind", mode="before")
    @classmethod
    def _parse_kind(cls, value: Any) -> IndicatorKind:
        return IndicatorKind.parse(value)


class IndicatorKindInfo(BaseModel):
    """Metadata for the indicator picker."""

    kind: IndicatorKind
    short_name: str
    display_name: str
    default_period: int
    default_levels: list[float]
    preset_params: dict[str, int]
    level_range: tuple[float, float]
    supports_incremental: bool
