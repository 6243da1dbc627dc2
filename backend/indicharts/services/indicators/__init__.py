"""
Indicator Engine Service

CONTRACT:
    Input:  CandleSeries (or raw OHLCV rows) + indicator kind and parameters
    Output: IndicatorSeries / IncrementalResult

RESPONSIBILITIES:
    - Calculate RSI (Wilder), Stochastic (%K/%D, slow and smoothed variants)
      and Williams %R over candle histories
    - Align every value to exactly one input candle
    - Advance RSI one candle at a time from carried state
    - Report insufficient data and unsupported incremental updates as
      statuses, never as exceptions

PURE PYTHON - No I/O.
Uses NumPy for calculations.
All math is deterministic and reproducible.
"""

from indicharts.services.indicators.interface import IndicatorServiceInterface
from indicharts.services.indicators.service import (
    IndicatorService,
    build_params,
    get_indicator_service,
)

__all__ = [
    "IndicatorServiceInterface",
    "IndicatorService",
    "build_params",
    "get_indicator_service",
]
