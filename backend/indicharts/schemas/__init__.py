"""
IndiCharts Schema Contracts

This module defines all contracts between engine components and the
collaborators around them (candle provider, rule store, notification
dispatcher, chart renderer).
"""

from indicharts.schemas.market import (
    Candle,
    CandleSeries,
    Timeframe,
)
from indicharts.schemas.indicators import (
    IndicatorKind,
    ComputeStatus,
    Zone,
    RsiState,
    RsiParams,
    StochasticParams,
    WilliamsParams,
    IndicatorParams,
    IndicatorPoint,
    IndicatorSeries,
    IncrementalResult,
    IndicatorRequest,
    IndicatorHistoryResponse,
    IncrementalRequest,
)
from indicharts.schemas.alerts import (
    AlertMode,
    TriggerType,
    AlertRuleConfig,
    TriggerEvent,
    AlertState,
    AlertCheckRequest,
    AlertCheckResult,
    RuleError,
)

__all__ = [
    # Market
    "Candle",
    "CandleSeries",
    "Timeframe",
    # Indicators
    "IndicatorKind",
    "ComputeStatus",
    "Zone",
    "RsiState",
    "RsiParams",
    "StochasticParams",
    "WilliamsParams",
    "IndicatorParams",
    "IndicatorPoint",
    "IndicatorSeries",
    "IncrementalResult",
    "IndicatorRequest",
    "IndicatorHistoryResponse",
    "IncrementalRequest",
    # Alerts
    "AlertMode",
    "TriggerType",
    "AlertRuleConfig",
    "TriggerEvent",
    "AlertState",
    "AlertCheckRequest",
    "AlertCheckResult",
    "RuleError",
]
