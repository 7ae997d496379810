"""
Provider interface and error hierarchy.

A provider returns one OHLCV series per call. The core never depends on a
concrete data source; anything shaped like SeriesProvider will do.
"""

from datetime import datetime
from typing import Protocol, runtime_checkable

from ultimate_scanner.models.series import OHLCVSeries


class ProviderError(Exception):
    """Base exception for data provider errors."""

    pass


class MissingCredentialError(ProviderError):
    """Raised when a keyed provider has no API key configured."""

    pass


class NoDataError(ProviderError):
    """Raised when the provider reports no data for a symbol."""

    pass


class RateLimitError(ProviderError):
    """Raised when the provider rejects a request for exceeding its rate limit."""

    pass


class InvalidResponseError(ProviderError):
    """Raised when the provider returns unexpected data."""

    pass


@runtime_checkable
class SeriesProvider(Protocol):
    """Anything that can fetch an OHLCV series for one symbol."""

    name: str

    async def fetch_series(
        self,
        symbol: str,
        resolution: str,
        from_time: datetime,
        to_time: datetime,
    ) -> OHLCVSeries:
        ...

    async def close(self) -> None:
        ...
