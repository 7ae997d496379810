"""Data providers for OHLCV series."""

from ultimate_scanner.clients.base import (
    InvalidResponseError,
    MissingCredentialError,
    NoDataError,
    ProviderError,
    RateLimitError,
    SeriesProvider,
)
from ultimate_scanner.clients.finnhub import FinnhubProvider
from ultimate_scanner.clients.yahoo import YahooProvider

__all__ = [
    "InvalidResponseError",
    "MissingCredentialError",
    "NoDataError",
    "ProviderError",
    "RateLimitError",
    "SeriesProvider",
    "FinnhubProvider",
    "YahooProvider",
]
