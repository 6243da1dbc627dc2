"""
CONTRACT 1: Candle Input

Input: raw OHLCV rows from the candle provider (Yahoo / Binance workers)
Output: CandleSeries

Candles are validated one row at a time. Malformed rows are dropped and
logged; a single bad row never aborts the whole series.
"""

import logging
from bisect import bisect_left
from enum import Enum
from typing import Any, Iterable, Union

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

logger = logging.getLogger(__name__)


# =============================================================================
# ENUMS
# =============================================================================


class Timeframe(str, Enum):
    """Candle interval an alert rule or chart is computed on."""

    M1 = "1m"
    M5 = "5m"
    M15 = "15m"
    M30 = "30m"
    H1 = "1h"
    H4 = "4h"
    D1 = "1d"
    W1 = "1w"

    @classmethod
    def parse(cls, value: Union[str, "Timeframe"]) -> "Timeframe":
        """Accept stored names in any case plus provider spellings ('60m', '1wk')."""
        if isinstance(value, Timeframe):
            return value
        key = str(value).strip().lower()
        key = _TIMEFRAME_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"Unknown timeframe: {value!r}") from None


_TIMEFRAME_ALIASES = {
    "1min": "1m",
    "5min": "5m",
    "15min": "15m",
    "30min": "30m",
    "60m": "1h",
    "240m": "4h",
    "1day": "1d",
    "1wk": "1w",
}


# =============================================================================
# CANDLES
# =============================================================================


class Candle(BaseModel):
    """Single candlestick. Timestamp is epoch milliseconds."""

    model_config = ConfigDict(frozen=True)

    timestamp: int
    open: float = Field(..., allow_inf_nan=False)
    high: float = Field(..., gt=0, allow_inf_nan=False)
    low: float = Field(..., gt=0, allow_inf_nan=False)
    close: float = Field(..., allow_inf_nan=False)
    volume: float = Field(default=0.0, ge=0, allow_inf_nan=False)

    @model_validator(mode="after")
    def _check_range(self) -> "Candle":
        if self.high < self.low:
            raise ValueError(f"high {self.high} below low {self.low}")
        return self


class CandleSeries(BaseModel):
    """
    Validated, time-ordered candles. Index 0 is the oldest candle.

    Immutable once built; kernels read it through the numpy views below.
    """

    model_config = ConfigDict(frozen=True)

    candles: tuple[Candle, ...] = ()

    @classmethod
    def from_rows(cls, rows: Iterable[Union[Candle, dict[str, Any]]]) -> "CandleSeries":
        """
        Build a series from raw rows.

        Rows that fail validation are skipped. Of the remaining rows, the
        longest run with strictly increasing timestamps is kept, so a single
        row with a wild timestamp costs only that row. Rows sharing a timestamp
        keep one of them; a repeated last candle keeps the later row (the live
        candle replaces its snapshot).
        """
        valid: list[tuple[int, Candle]] = []
        for index, row in enumerate(rows):
            try:
                candle = row if isinstance(row, Candle) else Candle.model_validate(row)
            except ValidationError as e:
                logger.warning(f"Dropping malformed candle at row {index}: {e.error_count()} error(s)")
                continue
            valid.append((index, candle))

        keep = _increasing_run(valid)
        kept_timestamps = {valid[i][1].timestamp for i in keep}
        for position, (index, candle) in enumerate(valid):
            if position in keep:
                continue
            if candle.timestamp in kept_timestamps:
                logger.warning(
                    f"Dropping duplicate candle at row {index}: "
                    f"ts={candle.timestamp} already present"
                )
            else:
                logger.warning(f"Dropping out-of-order candle at row {index}: ts={candle.timestamp}")

        kept = [valid[i][1] for i in sorted(keep)]
        dropped = len(valid) - len(kept)
        if dropped:
            logger.debug(f"CandleSeries: kept {len(kept)} valid rows, dropped {dropped}")

        return cls(candles=tuple(kept))

    def __len__(self) -> int:
        return len(self.candles)

    def tail(self, count: int) -> "CandleSeries":
        """Most recent `count` candles."""
        if count <= 0:
            return CandleSeries()
        if count >= len(self.candles):
            return self
        return CandleSeries(candles=self.candles[-count:])

    @property
    def timestamps(self) -> np.ndarray:
        return np.array([c.timestamp for c in self.candles], dtype=np.int64)

    @property
    def highs(self) -> np.ndarray:
        return np.array([c.high for c in self.candles], dtype=float)

    @property
    def lows(self) -> np.ndarray:
        return np.array([c.low for c in self.candles], dtype=float)

    @property
    def closes(self) -> np.ndarray:
        return np.array([c.close for c in self.candles], dtype=float)


def _increasing_run(candles: list[tuple[int, Candle]]) -> set[int]:
    """
    Positions of the longest subsequence with strictly increasing timestamps.

    Patience method: tails[k] holds the position ending the best run of
    length k + 1. Equal timestamps replace the earlier tail, so a repeated
    last candle resolves to the later row.
    """
    tails: list[int] = []
    tail_timestamps: list[int] = []
    previous: list[int] = []

    for position, (_, candle) in enumerate(candles):
        slot = bisect_left(tail_timestamps, candle.timestamp)
        previous.append(tails[slot - 1] if slot > 0 else -1)
        if slot == len(tails):
            tails.append(position)
            tail_timestamps.append(candle.timestamp)
        else:
            tails[slot] = position
            tail_timestamps[slot] = candle.timestamp

    keep = set()
    position = tails[-1] if tails else -1
    while position >= 0:
        keep.add(position)
        position = previous[position]
    return keep
