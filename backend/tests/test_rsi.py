"""
Tests for Wilder RSI: batch series, incremental steps and their agreement.
"""

import numpy as np
import pytest

from indicharts.schemas.indicators import RsiState
from indicharts.services.indicators.calculations import (
    rsi_first_index,
    rsi_from_state,
    rsi_incremental,
    rsi_series,
    wilder_step,
)


def test_known_values_period_two():
    # changes: +1, -0.5, +1
    result = rsi_series(np.array([10.0, 11.0, 10.5, 11.5]), period=2)

    assert len(result.values) == 2
    # seed: AU = 0.5, AD = 0.25 -> RS = 2
    assert result.values[0] == pytest.approx(200 / 3)
    # step: AU = 0.75, AD = 0.125 -> RS = 6
    assert result.values[1] == pytest.approx(100 - 100 / 7)
    assert result.states[0] == RsiState(average_gain=0.5, average_loss=0.25)
    assert result.states[1] == RsiState(average_gain=0.75, average_loss=0.125)


def test_too_few_closes_gives_empty_series():
    result = rsi_series(np.arange(100.0, 110.0), period=14)

    assert len(result.values) == 0
    assert result.states == []


def test_first_value_is_emitted_at_period_index():
    closes = np.arange(100.0, 115.0)  # exactly period + 1 closes
    result = rsi_series(closes, period=14)

    assert rsi_first_index(14) == 14
    assert len(result.values) == 1
    assert len(result.states) == 1


def test_series_length_matches_candles_after_first_index(wavy_series):
    result = rsi_series(wavy_series.closes, period=14)

    assert len(result.values) == len(wavy_series) - rsi_first_index(14)
    assert len(result.states) == len(result.values)


def test_monotonic_rise_pins_rsi_at_100():
    result = rsi_series(np.arange(100.0, 120.0), period=14)

    assert len(result.values) == 6
    assert np.all(result.values <= 100.0)
    assert np.all(result.values == 100.0)


def test_rise_after_one_dip_climbs_strictly_toward_100():
    closes = np.array([100.0, 99.0] + [100.0 + i for i in range(18)])
    values = rsi_series(closes, period=14).values

    assert len(values) == 6
    assert np.all(np.diff(values) > 0)
    assert np.all(values < 100.0)
    assert values[0] == pytest.approx(100 - 100 / 14)


def test_monotonic_fall_pins_rsi_at_0():
    values = rsi_series(np.arange(119.0, 99.0, -1.0), period=14).values

    assert len(values) == 6
    assert np.all(values == 0.0)


def test_fall_after_one_bump_drops_strictly_toward_0():
    closes = np.array([100.0, 101.0] + [100.0 - i for i in range(18)])
    values = rsi_series(closes, period=14).values

    assert np.all(np.diff(values) < 0)
    assert np.all(values > 0.0)


def test_values_stay_in_range(wavy_series):
    values = rsi_series(wavy_series.closes, period=14).values

    assert np.all(values >= 0.0)
    assert np.all(values <= 100.0)


def test_flat_closes_give_100():
    # no losses at all: RS is undefined and RSI reports 100
    values = rsi_series(np.full(20, 50.0), period=14).values

    assert np.all(values == 100.0)


def test_rsi_from_state_without_losses():
    assert rsi_from_state(RsiState(average_gain=0.0, average_loss=0.0)) == 100.0
    assert rsi_from_state(RsiState(average_gain=0.0, average_loss=1.0)) == 0.0


def test_wilder_step_returns_new_state():
    state = RsiState(average_gain=1.0, average_loss=0.5)
    stepped = wilder_step(state, 2.0, 0.0, 14)

    assert stepped is not state
    assert state == RsiState(average_gain=1.0, average_loss=0.5)
    assert stepped.average_gain == pytest.approx((1.0 * 13 + 2.0) / 14)
    assert stepped.average_loss == pytest.approx(0.5 * 13 / 14)


@pytest.mark.parametrize("period", [2, 5, 14])
def test_incremental_continuation_matches_batch(wavy_series, period):
    closes = wavy_series.closes
    batch = rsi_series(closes, period=period)
    first = rsi_first_index(period)

    state = batch.states[0]
    for i in range(first + 1, len(closes)):
        value, state = rsi_incremental(closes[i], closes[i - 1], state, period)
        j = i - first
        assert value == pytest.approx(batch.values[j], abs=1e-9)
        assert state == batch.states[j]


def test_incremental_without_state_seeds_from_single_change():
    value, state = rsi_incremental(101.0, 100.0, None, 14)

    assert state == RsiState(average_gain=1.0, average_loss=0.0)
    assert value == 100.0

    value, state = rsi_incremental(99.0, 100.0, None, 14)
    assert state == RsiState(average_gain=0.0, average_loss=1.0)
    assert value == 0.0


@pytest.mark.parametrize("period", [0, -3])
def test_invalid_period_raises(period):
    with pytest.raises(ValueError):
        rsi_series(np.arange(100.0, 130.0), period=period)
    with pytest.raises(ValueError):
        rsi_incremental(1.0, 2.0, None, period)
