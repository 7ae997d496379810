"""
Batch retrieval of price series across a symbol universe.

The universe is split into consecutive fixed-size windows. Each window's
symbols are fetched concurrently (never more than batch_size at once), the
whole window is awaited, and a fixed delay separates windows to respect
provider rate limits. A failing symbol is logged and left out; it never
aborts the batch. A missing API key is not a per-symbol failure: it
propagates to the caller. There is no retry and no backoff beyond the
fixed delay.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, Iterator, NamedTuple, Optional, Sequence

from pydantic import BaseModel, Field

from ultimate_scanner.clients.base import MissingCredentialError, SeriesProvider
from ultimate_scanner.models.series import OHLCVSeries

logger = logging.getLogger(__name__)


class BatchSettings(BaseModel):
    """Window size and inter-window pause for one provider."""

    batch_size: int = Field(default=5, ge=1)
    delay_seconds: float = Field(default=1.0, ge=0)


@dataclass
class BatchFetchResult:
    """Outcome of a batch fetch."""

    series: dict[str, OHLCVSeries] = field(default_factory=dict)
    failures: dict[str, str] = field(default_factory=dict)
    cancelled: bool = False

    @property
    def fetched_count(self) -> int:
        return len(self.series)


class _FetchOutcome(NamedTuple):
    symbol: str
    series: Optional[OHLCVSeries]
    error: Optional[str]


def partition(symbols: Sequence[str], size: int) -> Iterator[list[str]]:
    """Yield consecutive windows of at most `size` symbols, in order."""
    if size < 1:
        raise ValueError(f"window size must be >= 1, got {size}")
    for start in range(0, len(symbols), size):
        yield list(symbols[start:start + size])


async def fetch_series_batch(
    provider: SeriesProvider,
    symbols: Sequence[str],
    resolution: str,
    lookback_days: int,
    settings: BatchSettings,
    *,
    now: Optional[datetime] = None,
    cancel_event: Optional[asyncio.Event] = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> BatchFetchResult:
    """
    Fetch series for every symbol, window by window.

    Args:
        provider: Data provider
        symbols: Symbol universe, in the order results should keep
        resolution: Bar resolution ("D", "W", "M")
        lookback_days: Days of history ending at `now`
        settings: Window size and inter-window delay
        now: End of the time range (defaults to the current UTC time)
        cancel_event: When set, no further window or pending fetch starts
        sleep: Awaitable used for the inter-window pause

    Returns:
        BatchFetchResult whose `series` holds only the symbols that fetched
        successfully, in universe order

    Raises:
        MissingCredentialError: the provider has no API key configured
    """
    resolution = getattr(resolution, "value", resolution)
    to_time = now or datetime.now(timezone.utc)
    from_time = to_time - timedelta(days=lookback_days)

    windows = list(partition(symbols, settings.batch_size))
    semaphore = asyncio.Semaphore(settings.batch_size)
    result = BatchFetchResult()

    def is_cancelled() -> bool:
        return cancel_event is not None and cancel_event.is_set()

    async def fetch_one(symbol: str) -> Optional[_FetchOutcome]:
        async with semaphore:
            if is_cancelled():
                return None
            try:
                series = await provider.fetch_series(symbol, resolution, from_time, to_time)
            except MissingCredentialError:
                raise
            except Exception as e:
                logger.warning(f"Error fetching candle data for {symbol}: {e}")
                return _FetchOutcome(symbol, None, f"{type(e).__name__}: {e}")
        return _FetchOutcome(symbol, series, None)

    logger.debug(
        f"Fetching {len(symbols)} symbols from {provider.name} in {len(windows)} "
        f"windows of {settings.batch_size}"
    )

    for number, window in enumerate(windows, start=1):
        if is_cancelled():
            logger.info(f"Batch cancelled before window {number}/{len(windows)}")
            result.cancelled = True
            break

        outcomes = await asyncio.gather(*(fetch_one(symbol) for symbol in window))

        # Merge after the whole window has completed
        for outcome in outcomes:
            if outcome is None:
                result.cancelled = True
            elif outcome.error is None:
                result.series[outcome.symbol] = outcome.series
            else:
                result.failures[outcome.symbol] = outcome.error

        logger.debug(
            f"Window {number}/{len(windows)} done: "
            f"{len(result.series)} fetched, {len(result.failures)} failed"
        )

        if number < len(windows) and not is_cancelled():
            await sleep(settings.delay_seconds)

    return result
