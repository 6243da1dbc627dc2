"""
Indicator Engine Service Implementation

Single dispatch point between callers and the indicator kernels.
Pure Python/NumPy calculations, no I/O.
"""

import logging
from typing import Any, Optional, Union, assert_never

from pydantic import ValidationError as PydanticValidationError

from indicharts.core.config import settings
from indicharts.schemas.market import CandleSeries
from indicharts.schemas.indicators import (
    ComputeStatus,
    IndicatorHistoryResponse,
    IndicatorKind,
    IndicatorParams,
    IndicatorPoint,
    IndicatorRequest,
    IndicatorSeries,
    IncrementalResult,
    RsiParams,
    RsiState,
    StochasticParams,
    WilliamsParams,
)
from indicharts.services.base import ValidationError
from indicharts.services.indicators.interface import CandleInput, IndicatorServiceInterface
from indicharts.services.indicators.calculations import (
    rsi_series,
    rsi_first_index,
    rsi_incremental,
    stochastic_series,
    williams_r_series,
    williams_first_index,
    sparkline,
)
from indicharts.services.signals.zones import classify_series

logger = logging.getLogger(__name__)

# Used when a Stochastic request carries no %D period
DEFAULT_STOCH_D_PERIOD = 3

_STOCH_KEYS = {
    "d_period": ("dPeriod", "d_period"),
    "slow_period": ("slowPeriod", "slow_period"),
    "smooth_period": ("smoothPeriod", "smooth_period"),
}


def _first_present(params: dict[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        if params.get(key) is not None:
            return params[key]
    return None


def build_params(
    kind: IndicatorKind,
    period: Optional[int] = None,
    extra_params: Optional[dict[str, Any]] = None,
) -> Union[RsiParams, StochasticParams, WilliamsParams]:
    """
    Turn (kind, period, extras) into validated kernel parameters.

    Missing values fall back to the kind's defaults. Invalid values raise
    ValidationError.
    """
    extra_params = extra_params or {}
    period = period if period is not None else kind.default_period

    try:
        if kind is IndicatorKind.RSI:
            return RsiParams(period=period)
        if kind is IndicatorKind.STOCHASTIC:
            d_period = _first_present(extra_params, _STOCH_KEYS["d_period"])
            return StochasticParams(
                k_period=period,
                d_period=d_period if d_period is not None else DEFAULT_STOCH_D_PERIOD,
                slow_period=_first_present(extra_params, _STOCH_KEYS["slow_period"]),
                smooth_period=_first_present(extra_params, _STOCH_KEYS["smooth_period"]),
            )
        if kind is IndicatorKind.WILLIAMS_R:
            return WilliamsParams(period=period)
    except PydanticValidationError as e:
        raise ValidationError(
            "IndicatorService",
            f"Invalid parameters for {kind.short_name}",
            {"errors": e.errors(include_url=False, include_context=False)},
        ) from e

    raise ValidationError("IndicatorService", f"Unknown indicator kind: {kind}")


def parse_kind(kind: Union[IndicatorKind, str]) -> IndicatorKind:
    try:
        return IndicatorKind.parse(kind)
    except ValueError as e:
        raise ValidationError("IndicatorService", str(e), {"kind": str(kind)}) from e


def _as_series(candles: CandleInput) -> CandleSeries:
    if isinstance(candles, CandleSeries):
        return candles
    return CandleSeries.from_rows(candles)


class IndicatorService(IndicatorServiceInterface):
    """
    Indicator Engine Service.

    Selects the kernel for an indicator kind and normalizes its output into
    IndicatorPoints. Stateless: RSI state is handed back to the caller.
    """

    @property
    def name(self) -> str:
        return "IndicatorService"

    async def execute(self, input_data: IndicatorRequest) -> IndicatorHistoryResponse:
        """Calculate history, zones and sparkline for a request."""
        series = CandleSeries.from_rows(input_data.candles).tail(settings.max_candles)
        history = self.compute_history(
            series, input_data.kind, input_data.period, input_data.params
        )

        levels = (
            input_data.levels
            if input_data.levels is not None
            else input_data.kind.default_levels
        )
        max_points = input_data.sparkline_points or settings.sparkline_points

        return IndicatorHistoryResponse(
            series=history,
            levels=levels,
            zones=classify_series(history.points, levels),
            sparkline=sparkline(history.values, max_points),
            candles_used=len(series),
        )

    def compute_history(
        self,
        candles: CandleInput,
        kind: Union[IndicatorKind, str],
        period: Optional[int] = None,
        extra_params: Optional[dict[str, Any]] = None,
    ) -> IndicatorSeries:
        """Calculate the full indicator series for a candle history."""
        kind = parse_kind(kind)
        params = build_params(kind, period, extra_params)
        series = _as_series(candles)

        first_index, points = self._dispatch_history(series, params)

        if not points:
            logger.debug(
                f"{kind.short_name}: insufficient data ({len(series)} candles, "
                f"first value needs index {first_index})"
            )
            return IndicatorSeries(kind=kind, status=ComputeStatus.INSUFFICIENT_DATA)

        return IndicatorSeries(
            kind=kind,
            status=ComputeStatus.OK,
            first_index=first_index,
            points=points,
        )

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
        """Advance an indicator by one candle, or report UNSUPPORTED."""
        kind = parse_kind(kind)
        if not kind.supports_incremental:
            logger.debug(f"{kind.short_name}: incremental update not supported")
            return IncrementalResult(kind=kind, status=ComputeStatus.UNSUPPORTED)

        params = build_params(kind, period, extra_params)

        match params:
            case RsiParams():
                if isinstance(prior_state, dict):
                    prior_state = RsiState.model_validate(prior_state)
                value, state = rsi_incremental(
                    current_close, previous_close, prior_state, params.period
                )
                point = IndicatorPoint(
                    timestamp=timestamp,
                    value=value,
                    close=current_close,
                    state=state,
                )
                return IncrementalResult(kind=kind, status=ComputeStatus.OK, point=point)
            case StochasticParams() | WilliamsParams():
                return IncrementalResult(kind=kind, status=ComputeStatus.UNSUPPORTED)
            case _:
                assert_never(params)

    def _dispatch_history(
        self, series: CandleSeries, params: IndicatorParams
    ) -> tuple[int, list[IndicatorPoint]]:
        match params:
            case RsiParams():
                return self._rsi_points(series, params)
            case StochasticParams():
                return self._stochastic_points(series, params)
            case WilliamsParams():
                return self._williams_points(series, params)
            case _:
                assert_never(params)

    def _rsi_points(
        self, series: CandleSeries, params: RsiParams
    ) -> tuple[int, list[IndicatorPoint]]:
        first_index = rsi_first_index(params.period)
        result = rsi_series(series.closes, params.period)

        points = []
        for i, (value, state) in enumerate(zip(result.values, result.states)):
            candle = series.candles[first_index + i]
            points.append(
                IndicatorPoint(
                    timestamp=candle.timestamp,
                    value=float(value),
                    close=candle.close,
                    state=state,
                )
            )
        return first_index, points

    def _stochastic_points(
        self, series: CandleSeries, params: StochasticParams
    ) -> tuple[int, list[IndicatorPoint]]:
        result = stochastic_series(
            series.highs,
            series.lows,
            series.closes,
            k_period=params.k_period,
            d_period=params.d_period,
            slow_period=params.slow_period,
            smooth_period=params.smooth_period,
        )

        points = []
        for i, (k, d) in enumerate(zip(result.k, result.d)):
            candle = series.candles[result.first_index + i]
            points.append(
                IndicatorPoint(
                    timestamp=candle.timestamp,
                    value=float(d),
                    close=candle.close,
                    k=float(k),
                )
            )
        return result.first_index, points

    def _williams_points(
        self, series: CandleSeries, params: WilliamsParams
    ) -> tuple[int, list[IndicatorPoint]]:
        first_index = williams_first_index(params.period)
        values = williams_r_series(series.highs, series.lows, series.closes, params.period)

        points = []
        for i, value in enumerate(values):
            candle = series.candles[first_index + i]
            points.append(
                IndicatorPoint(
                    timestamp=candle.timestamp,
                    value=float(value),
                    close=candle.close,
                )
            )
        return first_index, points

    async def health_check(self) -> bool:
        """Indicator service is always healthy (pure computation)."""
        return True


# Singleton instance
_service_instance: Optional[IndicatorService] = None


def get_indicator_service() -> IndicatorService:
    """Get or create indicator service instance."""
    global _service_instance
    if _service_instance is None:
        _service_instance = IndicatorService()
    return _service_instance
