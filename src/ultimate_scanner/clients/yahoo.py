"""
Yahoo Finance provider backed by yfinance.

No API key required. yfinance is synchronous, so history downloads run in a
worker thread to keep the event loop free for the rest of the batch.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Callable

import pandas as pd
import yfinance as yf

from ultimate_scanner.clients.base import InvalidResponseError, NoDataError
from ultimate_scanner.models.series import OHLCV, OHLCVSeries

logger = logging.getLogger(__name__)

# Resolution letters to yfinance interval notation
YAHOO_INTERVALS = {
    "D": "1d",
    "W": "1wk",
    "M": "1mo",
}

_PRICE_COLUMNS = ["Open", "High", "Low", "Close"]


class YahooProvider:
    """
    yfinance client as a keyless data source.

    Note: yfinance is not async, so this wraps sync calls.
    """

    name = "yahoo"

    def __init__(self, ticker_factory: Callable[[str], Any] = yf.Ticker):
        self._ticker_factory = ticker_factory

    async def __aenter__(self) -> "YahooProvider":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Nothing to release; present for interface parity."""
        return None

    async def fetch_series(
        self,
        symbol: str,
        resolution: str,
        from_time: datetime,
        to_time: datetime,
    ) -> OHLCVSeries:
        """
        Fetch OHLCV history for a symbol.

        Raises:
            InvalidResponseError: unsupported resolution or missing columns
            NoDataError: yfinance returned no rows
        """
        interval = YAHOO_INTERVALS.get(resolution)
        if interval is None:
            raise InvalidResponseError(f"Unsupported resolution for Yahoo: {resolution!r}")

        logger.debug(f"Fetching {interval} history for {symbol} from Yahoo")
        df = await asyncio.to_thread(self._history, symbol, interval, from_time, to_time)

        if df is None or df.empty:
            raise NoDataError(f"No data available for {symbol}")

        bars = self._df_to_bars(symbol, df)
        if not bars:
            raise NoDataError(f"No complete bars available for {symbol}")

        return OHLCVSeries(symbol=symbol, resolution=resolution, bars=bars)

    def _history(
        self,
        symbol: str,
        interval: str,
        from_time: datetime,
        to_time: datetime,
    ) -> pd.DataFrame:
        ticker = self._ticker_factory(symbol)
        return ticker.history(start=from_time, end=to_time, interval=interval)

    def _df_to_bars(self, symbol: str, df: pd.DataFrame) -> list[OHLCV]:
        """Convert a yfinance history frame to bars, skipping incomplete rows."""
        missing = [col for col in _PRICE_COLUMNS if col not in df.columns]
        if missing:
            raise InvalidResponseError(f"Yahoo history for {symbol} lacks columns {missing}")

        complete = df.dropna(subset=_PRICE_COLUMNS)
        if len(complete) < len(df):
            logger.debug(f"{symbol}: dropped {len(df) - len(complete)} incomplete rows")

        bars = []
        for idx, row in complete.iterrows():
            timestamp = idx.to_pydatetime() if hasattr(idx, "to_pydatetime") else idx
            volume = row.get("Volume", 0.0)
            bars.append(
                OHLCV(
                    timestamp=timestamp,
                    open=float(row["Open"]),
                    high=float(row["High"]),
                    low=float(row["Low"]),
                    close=float(row["Close"]),
                    volume=0.0 if pd.isna(volume) else float(volume),
                )
            )

        return bars
