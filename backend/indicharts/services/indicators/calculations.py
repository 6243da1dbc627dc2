"""
Technical Indicator Calculations

Pure Python/NumPy implementations of the oscillators behind charts and alerts.
All math is deterministic; kernels never hold state between calls.

Every kernel returns a compact series (no NaN padding). The candle index of
the first output value is given by the matching *_first_index() function and
each later value advances the candle index by one.
"""

from dataclasses import dataclass, field
from typing import Optional

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from indicharts.schemas.indicators import RsiState


@dataclass
class RsiSeries:
    """RSI values and the Wilder state after each step."""

    values: np.ndarray
    states: list[RsiState] = field(default_factory=list)


@dataclass
class StochasticSeries:
    """
    Stochastic output.

    `d` is the signal line (the value used for zones and alerts); `k` is the
    displayed %K aligned to the same candles.
    """

    k: np.ndarray
    d: np.ndarray
    first_index: int


def _check_period(name: str, period: int) -> None:
    if period < 1:
        raise ValueError(f"{name} must be >= 1, got {period}")


# =============================================================================
# MOVING AVERAGES
# =============================================================================


def simple_moving_average(data: np.ndarray, width: int) -> np.ndarray:
    """Simple Moving Average over full windows only (length N - width + 1)."""
    _check_period("width", width)
    data = np.asarray(data, dtype=float)
    if len(data) < width:
        return np.empty(0)

    result = np.empty(len(data) - width + 1)
    for i in range(width - 1, len(data)):
        result[i - width + 1] = np.mean(data[i - width + 1 : i + 1])
    return result


def _window_extremes(
    highs: np.ndarray, lows: np.ndarray, period: int
) -> tuple[np.ndarray, np.ndarray]:
    """Highest high and lowest low of each trailing window of `period` bars."""
    highest_high = sliding_window_view(highs, period).max(axis=1)
    lowest_low = sliding_window_view(lows, period).min(axis=1)
    return highest_high, lowest_low


# =============================================================================
# RSI (Wilder)
# =============================================================================


def rsi_first_index(period: int) -> int:
    """Candle index of the first RSI value (the seed value)."""
    return period


def _split_change(change: float) -> tuple[float, float]:
    gain = change if change > 0 else 0.0
    loss = -change if change < 0 else 0.0
    return gain, loss


def wilder_step(state: RsiState, gain: float, loss: float, period: int) -> RsiState:
    """One step of Wilder smoothing. Returns a fresh state."""
    return RsiState(
        average_gain=(state.average_gain * (period - 1) + gain) / period,
        average_loss=(state.average_loss * (period - 1) + loss) / period,
    )


def rsi_from_state(state: RsiState) -> float:
    if state.average_loss == 0:
        return 100.0
    rs = state.average_gain / state.average_loss
    value = 100 - (100 / (1 + rs))
    return min(100.0, max(0.0, value))


def rsi_series(closes: np.ndarray, period: int = 14) -> RsiSeries:
    """
    Relative Strength Index with Wilder smoothing.

    Requires len(closes) >= period + 1, otherwise the series is empty.
    Value i belongs to candle period + i; value 0 comes from the seed
    averages over the first `period` changes.
    """
    _check_period("period", period)
    closes = [float(c) for c in np.asarray(closes, dtype=float)]
    if len(closes) < period + 1:
        return RsiSeries(values=np.empty(0))

    # Seed
    gain_sum = 0.0
    loss_sum = 0.0
    for i in range(1, period + 1):
        gain, loss = _split_change(closes[i] - closes[i - 1])
        gain_sum += gain
        loss_sum += loss

    state = RsiState(average_gain=gain_sum / period, average_loss=loss_sum / period)
    states = [state]

    for i in range(period + 1, len(closes)):
        gain, loss = _split_change(closes[i] - closes[i - 1])
        state = wilder_step(state, gain, loss, period)
        states.append(state)

    values = np.array([rsi_from_state(s) for s in states])
    return RsiSeries(values=values, states=states)


def rsi_incremental(
    current_close: float,
    previous_close: float,
    prior_state: Optional[RsiState],
    period: int = 14,
) -> tuple[float, RsiState]:
    """
    Advance RSI by one candle.

    Without a prior state the averages are seeded from this single change
    (not averaged over `period`). The live path always continues from a
    state produced by rsi_series, so this seed only matters for callers
    starting from nothing.
    """
    _check_period("period", period)
    gain, loss = _split_change(float(current_close) - float(previous_close))

    if prior_state is None:
        state = RsiState(average_gain=gain, average_loss=loss)
    else:
        state = wilder_step(prior_state, gain, loss, period)

    return rsi_from_state(state), state


# =============================================================================
# STOCHASTIC
# =============================================================================


def _is_active(period: Optional[int]) -> bool:
    return period is not None and period > 1


def stochastic_first_index(
    k_period: int,
    d_period: int,
    slow_period: Optional[int] = None,
    smooth_period: Optional[int] = None,
) -> int:
    """
    Candle index of the first Stochastic output.

    k_period + slow_offset + d_period - 2 + smooth_offset, where each offset
    is (width - 1) when that smoothing stage is active and 0 otherwise.
    """
    slow_offset = slow_period - 1 if _is_active(slow_period) else 0
    smooth_offset = smooth_period - 1 if _is_active(smooth_period) else 0
    return k_period + slow_offset + d_period - 2 + smooth_offset


def raw_stochastic_k(
    highs: np.ndarray,
    lows: np.ndarray,
    closes: np.ndarray,
    k_period: int = 14,
) -> np.ndarray:
    """
    Fast %K over trailing windows of `k_period` bars.

    Value i belongs to candle k_period - 1 + i. A flat window (highest high
    equals lowest low) yields 50.
    """
    _check_period("k_period", k_period)
    highs = np.asarray(highs, dtype=float)
    lows = np.asarray(lows, dtype=float)
    closes = np.asarray(closes, dtype=float)
    if len(highs) != len(lows) or len(highs) != len(closes):
        return np.empty(0)
    if len(closes) < k_period:
        return np.empty(0)

    highest_high, lowest_low = _window_extremes(highs, lows, k_period)
    span = highest_high - lowest_low
    window_closes = closes[k_period - 1 :]

    with np.errstate(divide="ignore", invalid="ignore"):
        k = np.where(span == 0, 50.0, (window_closes - lowest_low) / span * 100.0)

    return np.clip(k, 0.0, 100.0)


def stochastic_series(
    highs: np.ndarray,
    lows: np.ndarray,
    closes: np.ndarray,
    k_period: int = 14,
    d_period: int = 3,
    slow_period: Optional[int] = None,
    smooth_period: Optional[int] = None,
) -> StochasticSeries:
    """
    Stochastic Oscillator: fast %K -> optional slow %K -> %D -> optional %D smoothing.

    Output i belongs to candle stochastic_first_index(...) + i. The series is
    empty when there are not enough candles for every active stage.
    """
    _check_period("k_period", k_period)
    _check_period("d_period", d_period)
    first_index = stochastic_first_index(k_period, d_period, slow_period, smooth_period)
    empty = StochasticSeries(k=np.empty(0), d=np.empty(0), first_index=first_index)

    n = len(closes)
    if len(highs) != n or len(lows) != n or n < first_index + 1:
        return empty

    k_line = raw_stochastic_k(highs, lows, closes, k_period)
    if _is_active(slow_period):
        k_line = simple_moving_average(k_line, slow_period)

    d_line = simple_moving_average(k_line, d_period)
    smooth_offset = 0
    if _is_active(smooth_period):
        d_line = simple_moving_average(d_line, smooth_period)
        smooth_offset = smooth_period - 1

    # %K shown next to each %D value: skip the bars consumed by %D and its smoothing
    k_offset = d_period - 1 + smooth_offset
    k_display = k_line[k_offset : k_offset + len(d_line)]

    return StochasticSeries(
        k=np.clip(k_display, 0.0, 100.0),
        d=np.clip(d_line, 0.0, 100.0),
        first_index=first_index,
    )


# =============================================================================
# WILLIAMS %R
# =============================================================================


def williams_first_index(period: int) -> int:
    """Candle index of the first Williams %R value."""
    return period - 1


def williams_r_series(
    highs: np.ndarray, lows: np.ndarray, closes: np.ndarray, period: int = 14
) -> np.ndarray:
    """
    Williams %R in [-100, 0].

    Value i belongs to candle period - 1 + i. A flat window yields -50.
    """
    _check_period("period", period)
    highs = np.asarray(highs, dtype=float)
    lows = np.asarray(lows, dtype=float)
    closes = np.asarray(closes, dtype=float)
    if len(highs) != len(lows) or len(highs) != len(closes):
        return np.empty(0)
    if len(closes) < period:
        return np.empty(0)

    highest_high, lowest_low = _window_extremes(highs, lows, period)
    span = highest_high - lowest_low
    window_closes = closes[period - 1 :]

    with np.errstate(divide="ignore", invalid="ignore"):
        result = np.where(span == 0, -50.0, (highest_high - window_closes) / span * -100.0)

    return np.clip(result, -100.0, 0.0)


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def sparkline(values: list[float], max_points: int) -> list[float]:
    """Most recent `max_points` values rounded for display, for home-screen widgets."""
    if max_points <= 0:
        return []
    return [normalize_value(v) for v in values[-max_points:]]


def normalize_value(value: float) -> float:
    """Round to one decimal place for display."""
    return round(value * 10) / 10
