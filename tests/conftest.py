"""Pytest configuration and fixtures."""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest

from ultimate_scanner.models.series import OHLCV, OHLCVSeries, StockInput

START = datetime(2026, 1, 2, tzinfo=timezone.utc)


def make_stock(symbol: str, closes: list[float], spread: float = 0.5) -> StockInput:
    """Stock with symmetric high/low around each close."""
    return StockInput(
        symbol=symbol,
        close=list(closes),
        high=[c + spread for c in closes],
        low=[c - spread for c in closes],
    )


def make_series(symbol: str, closes: list[float], spread: float = 0.5) -> OHLCVSeries:
    """Daily series with symmetric high/low around each close."""
    bars = [
        OHLCV(
            timestamp=START + timedelta(days=i),
            open=c,
            high=c + spread,
            low=c - spread,
            close=c,
            volume=1_000_000,
        )
        for i, c in enumerate(closes)
    ]
    return OHLCVSeries(symbol=symbol, resolution="D", bars=bars)


def declining_closes(count: int = 60, start: float = 100.0) -> list[float]:
    """Straight-line decline of 1.0 per bar."""
    return [start - i for i in range(count)]


class FakeProvider:
    """In-memory provider recording calls and concurrency."""

    name = "fake"

    def __init__(
        self,
        data: dict[str, OHLCVSeries],
        failing: Optional[set[str]] = None,
    ):
        self.data = data
        self.failing = failing or set()
        self.calls: list[tuple[str, str, datetime, datetime]] = []
        self.events: list[tuple[str, str]] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.closed = False

    async def fetch_series(self, symbol, resolution, from_time, to_time) -> OHLCVSeries:
        self.calls.append((symbol, resolution, from_time, to_time))
        self.events.append(("start", symbol))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            # Let sibling fetches start so overlap is observable
            await asyncio.sleep(0)
            await asyncio.sleep(0)
            if symbol in self.failing:
                raise RuntimeError(f"boom for {symbol}")
            if symbol not in self.data:
                raise KeyError(symbol)
            return self.data[symbol]
        finally:
            self.in_flight -= 1
            self.events.append(("end", symbol))

    async def close(self) -> None:
        self.closed = True


class RecordingSleep:
    """Stand-in for asyncio.sleep that records requested delays."""

    def __init__(self, on_sleep=None):
        self.delays: list[float] = []
        self.on_sleep = on_sleep

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        if self.on_sleep is not None:
            self.on_sleep(len(self.delays))


@pytest.fixture
def decline_then_uptick() -> list[float]:
    """Long decline, then one bar up by 1.0: histogram turns up below zero, trend stays red."""
    return declining_closes() + [42.0]


@pytest.fixture
def decline_then_jump() -> list[float]:
    """Long decline, then a +6 bar: flips Supertrend green, close still below the range midpoint."""
    return declining_closes() + [47.0]


@pytest.fixture
def decline_then_surge() -> list[float]:
    """Long decline, then a +14 bar: green trend, MACD below zero, momentum above zero."""
    return declining_closes() + [55.0]


@pytest.fixture
def rise_then_dip() -> list[float]:
    """Steady rise, then two down bars: MACD above zero, histogram falling."""
    closes = [50.0 + i for i in range(60)]
    return closes + [closes[-1] - 1.0, closes[-1] - 2.0]


@pytest.fixture
def short_closes() -> list[float]:
    """Too short for MACD (needs 34 closes)."""
    return [10.0 + i * 0.1 for i in range(20)]
