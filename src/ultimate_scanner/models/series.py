"""
Price series models.

These models represent raw OHLCV data as returned by a data provider.
Bars are kept in time-ascending order (oldest first) and consumed exactly
as received: no resampling, no gap filling.
"""

from datetime import datetime, timezone
from typing import Optional, Sequence

import pandas as pd
from pydantic import BaseModel, field_validator


class OHLCV(BaseModel):
    """Single OHLCV bar."""

    timestamp: datetime
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0


class OHLCVSeries(BaseModel):
    """Time series of OHLCV bars for a symbol."""

    symbol: str
    resolution: str  # "D", "W", "M"
    bars: list[OHLCV]

    @field_validator("bars")
    @classmethod
    def sort_ascending(cls, v: list[OHLCV]) -> list[OHLCV]:
        """Keep bars oldest first."""
        return sorted(v, key=lambda bar: bar.timestamp)

    @classmethod
    def from_columns(
        cls,
        symbol: str,
        resolution: str,
        timestamp: Sequence[int | float | datetime],
        open: Sequence[float],
        high: Sequence[float],
        low: Sequence[float],
        close: Sequence[float],
        volume: Optional[Sequence[float]] = None,
    ) -> "OHLCVSeries":
        """
        Build a series from parallel column arrays.

        Integer or float timestamps are interpreted as UNIX seconds (UTC).

        Raises:
            ValueError: if the columns have different lengths
        """
        columns = [timestamp, open, high, low, close]
        if volume is not None:
            columns.append(volume)
        lengths = {len(col) for col in columns}
        if len(lengths) > 1:
            raise ValueError(f"Column length mismatch for {symbol}: {sorted(lengths)}")

        bars = []
        for i, ts in enumerate(timestamp):
            if not isinstance(ts, datetime):
                ts = datetime.fromtimestamp(ts, tz=timezone.utc)
            bars.append(
                OHLCV(
                    timestamp=ts,
                    open=open[i],
                    high=high[i],
                    low=low[i],
                    close=close[i],
                    volume=volume[i] if volume is not None else 0.0,
                )
            )

        return cls(symbol=symbol, resolution=resolution, bars=bars)

    @property
    def is_empty(self) -> bool:
        return len(self.bars) == 0

    def __len__(self) -> int:
        return len(self.bars)

    @property
    def opens(self) -> list[float]:
        return [bar.open for bar in self.bars]

    @property
    def highs(self) -> list[float]:
        return [bar.high for bar in self.bars]

    @property
    def lows(self) -> list[float]:
        return [bar.low for bar in self.bars]

    @property
    def closes(self) -> list[float]:
        return [bar.close for bar in self.bars]

    @property
    def volumes(self) -> list[float]:
        return [bar.volume for bar in self.bars]

    def most_recent(self) -> Optional[OHLCV]:
        """Return most recent bar or None if empty."""
        return self.bars[-1] if self.bars else None


class StockInput(BaseModel):
    """Per-symbol price columns consumed by a tier scan."""

    symbol: str
    close: list[float]
    high: list[float]
    low: list[float]

    @classmethod
    def from_series(cls, series: OHLCVSeries) -> "StockInput":
        return cls(
            symbol=series.symbol,
            close=series.closes,
            high=series.highs,
            low=series.lows,
        )


def series_to_dataframe(series: OHLCVSeries) -> pd.DataFrame:
    """
    Column view of a series for display.

    Bars are already oldest first, so the frame keeps their order; the index
    is a DatetimeIndex named "timestamp".
    """
    index = pd.DatetimeIndex([bar.timestamp for bar in series.bars], name="timestamp")
    return pd.DataFrame(
        {
            "open": series.opens,
            "high": series.highs,
            "low": series.lows,
            "close": series.closes,
            "volume": series.volumes,
        },
        index=index,
        dtype=float,
    )
