"""
Indicator Engine Service Interface

Defines the contract for the indicator calculation layer.
"""

from abc import abstractmethod
from typing import Any, Iterable, Optional, Union

from indicharts.services.base import BaseService
from indicharts.schemas.market import Candle, CandleSeries
from indicharts.schemas.indicators import (
    IndicatorKind,
    IndicatorRequest,
    IndicatorHistoryResponse,
    IndicatorSeries,
    IncrementalResult,
    RsiState,
)

CandleInput = Union[CandleSeries, Iterable[Union[Candle, dict[str, Any]]]]


class IndicatorServiceInterface(BaseService[IndicatorRequest, IndicatorHistoryResponse]):
    """
    Indicator Engine Service Contract.

    INPUT: IndicatorRequest
        - candles: raw OHLCV rows, oldest first
        - kind / period / params: which indicator to compute
        - levels: zone thresholds for classification

    OUTPUT: IndicatorHistoryResponse
        - series: aligned IndicatorPoints (empty when data is insufficient)
        - zones: Zone of every point
        - sparkline: most recent values for widgets

    Two entry points back every consumer:
        compute_history      full recompute (chart, alert checks)
        compute_incremental  one new candle + carried state (live updates)

    Neither raises for "not enough candles" or "incremental not supported";
    both are reported through ComputeStatus.
    """

    @property
    def name(self) -> str:
        return "IndicatorService"

    @abstractmethod
    async def execute(self, input_data: IndicatorRequest) -> IndicatorHistoryResponse:
        """Calculate indicator history, zones and sparkline for a request."""
        pass

    @abstractmethod
    def compute_history(
        self,
        candles: CandleInput,
        kind: Union[IndicatorKind, str],
        period: Optional[int] = None,
        extra_params: Optional[dict[str, Any]] = None,
    ) -> IndicatorSeries:
        """
        Calculate the full indicator series for a candle history.

        Args:
            candles: CandleSeries or raw rows (malformed rows are dropped)
            kind: Indicator kind or one of its aliases
            period: Main period; the kind's default when None
            extra_params: Kind-specific extras (Stochastic dPeriod etc.)

        Returns:
            IndicatorSeries with status OK or INSUFFICIENT_DATA
        """
        pass

    @abstractmethod
    def compute_incremental(
        self,
        current_close: float,
        previous_close: float,
        prior_state: Optional[Union[RsiState, dict[str, float]]],
        kind: Union[IndicatorKind, str],
        period: Optional[int] = None,
        timestamp: int = 0,
        extra_params: Optional[dict[str, Any]] = None,
    ) -> IncrementalResult:
        """
        Advance an indicator by one candle.

        Returns:
            IncrementalResult with status OK, or UNSUPPORTED for kinds that
            need the full trailing window (callers fall back to compute_history)
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Indicator service is always healthy (pure computation)."""
        pass
