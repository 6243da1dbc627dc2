"""
Tests for candle validation and series construction.
"""

import math

import pytest
from pydantic import ValidationError

from indicharts.schemas.market import Candle, CandleSeries, Timeframe

from conftest import make_rows


def test_candle_rejects_high_below_low():
    with pytest.raises(ValidationError):
        Candle(timestamp=1, open=10, high=9, low=11, close=10)


@pytest.mark.parametrize("field", ["open", "high", "low", "close"])
def test_candle_rejects_non_finite_prices(field):
    row = {"timestamp": 1, "open": 10.0, "high": 11.0, "low": 9.0, "close": 10.0}
    row[field] = math.nan
    with pytest.raises(ValidationError):
        Candle.model_validate(row)


def test_candle_is_frozen():
    candle = Candle(timestamp=1, open=10, high=11, low=9, close=10)
    with pytest.raises(ValidationError):
        candle.close = 12


def test_from_rows_drops_bad_rows_and_keeps_order():
    rows = make_rows([100, 101, 102, 103, 104])
    bad = [
        {"timestamp": rows[1]["timestamp"] + 1, "open": 1, "high": 1, "low": 2, "close": 1},
        {"timestamp": rows[1]["timestamp"] + 2, "open": 1, "high": 1, "low": -1, "close": 1},
        {"timestamp": rows[1]["timestamp"] + 3, "close": 5},
        {**rows[1], "close": float("inf")},
    ]
    duplicate = dict(rows[3])
    out_of_order = dict(rows[0])

    series = CandleSeries.from_rows(
        rows[:2] + bad + rows[2:4] + [duplicate, out_of_order] + rows[4:]
    )

    assert [c.timestamp for c in series.candles] == [r["timestamp"] for r in rows]
    assert series.closes.tolist() == [100.0, 101.0, 102.0, 103.0, 104.0]


def test_repeated_last_candle_keeps_the_later_row(caplog):
    rows = make_rows([100, 101])
    rows.append({"timestamp": rows[-1]["timestamp"], "open": 1, "high": 2, "low": 1, "close": 1})

    with caplog.at_level("WARNING", logger="indicharts.schemas.market"):
        series = CandleSeries.from_rows(rows)

    assert len(series) == 2
    assert series.closes.tolist() == [100.0, 1.0]
    assert "duplicate" in caplog.text


def test_one_far_future_row_costs_only_that_row(caplog):
    rows = make_rows(range(100, 130))
    wild = {**rows[2], "timestamp": rows[2]["timestamp"] * 10}

    with caplog.at_level("WARNING", logger="indicharts.schemas.market"):
        series = CandleSeries.from_rows(rows[:3] + [wild] + rows[3:])

    assert len(series) == 30
    assert series.timestamps.tolist() == [r["timestamp"] for r in rows]
    assert "out-of-order candle at row 3" in caplog.text


def test_one_stale_row_costs_only_that_row():
    rows = make_rows(range(100, 130))
    stale = {**rows[20], "timestamp": rows[0]["timestamp"] - 1}

    series = CandleSeries.from_rows(rows[:20] + [stale] + rows[20:])

    assert series.timestamps.tolist() == [r["timestamp"] for r in rows]


def test_numpy_views_and_tail():
    series = CandleSeries.from_rows(make_rows([100, 101, 102], spread=0.5))

    assert series.highs.tolist() == [100.5, 101.5, 102.5]
    assert series.lows.tolist() == [99.5, 100.5, 101.5]
    assert len(series.timestamps) == 3

    tail = series.tail(2)
    assert tail.closes.tolist() == [101.0, 102.0]
    assert series.tail(10) == series
    assert len(series.tail(0)) == 0
    assert len(series.tail(-1)) == 0


def test_empty_rows():
    series = CandleSeries.from_rows([])

    assert len(series) == 0
    assert len(series.closes) == 0


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("15m", Timeframe.M15),
        ("1H", Timeframe.H1),
        ("60m", Timeframe.H1),
        (" 1d ", Timeframe.D1),
        ("1wk", Timeframe.W1),
        (Timeframe.H4, Timeframe.H4),
    ],
)
def test_timeframe_parse(raw, expected):
    assert Timeframe.parse(raw) == expected


def test_timeframe_parse_rejects_unknown():
    with pytest.raises(ValueError):
        Timeframe.parse("7m")
