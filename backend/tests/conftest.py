"""
Shared fixtures for engine tests.
"""

import numpy as np
import pytest

from indicharts.schemas.market import CandleSeries
from indicharts.services.indicators import IndicatorService

START_TS = 1_700_000_000_000
STEP_MS = 60_000


def make_rows(closes, spread=1.0, start_ts=START_TS, step=STEP_MS):
    """Candle rows around the given closes; spread=0 gives flat candles."""
    rows = []
    for i, close in enumerate(closes):
        close = float(close)
        rows.append(
            {
                "timestamp": start_ts + i * step,
                "open": close,
                "high": close + spread,
                "low": close - spread,
                "close": close,
                "volume": 1000.0,
            }
        )
    return rows


def make_ohlc_rows(highs, lows, closes, start_ts=START_TS, step=STEP_MS):
    return [
        {
            "timestamp": start_ts + i * step,
            "open": float(c),
            "high": float(h),
            "low": float(l),
            "close": float(c),
            "volume": 0.0,
        }
        for i, (h, l, c) in enumerate(zip(highs, lows, closes))
    ]


@pytest.fixture
def wavy_rows():
    """200 reproducible candles of a random walk around 100."""
    rng = np.random.default_rng(42)
    closes = 100 + np.cumsum(rng.normal(0, 1, 200))
    highs = closes + rng.uniform(0.1, 2.0, 200)
    lows = closes - rng.uniform(0.1, 2.0, 200)
    return make_ohlc_rows(highs, lows, closes)


@pytest.fixture
def wavy_series(wavy_rows):
    return CandleSeries.from_rows(wavy_rows)


@pytest.fixture
def rising_rows():
    """Closes 100, 101, ..., 119."""
    return make_rows(range(100, 120))


@pytest.fixture
def service():
    return IndicatorService()
