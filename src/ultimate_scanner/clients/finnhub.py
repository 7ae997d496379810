"""
Finnhub API client.

Fetches daily/weekly/monthly candles from the /stock/candle endpoint.
Requires an API key; the key is passed in explicitly, never read from
global state.
"""

import logging
from datetime import datetime
from typing import Any, Optional

import httpx

from ultimate_scanner.clients.base import (
    InvalidResponseError,
    MissingCredentialError,
    NoDataError,
    ProviderError,
    RateLimitError,
)
from ultimate_scanner.models.series import OHLCVSeries

logger = logging.getLogger(__name__)


class FinnhubProvider:
    """
    Async client for Finnhub candle data.

    Usage:
        async with FinnhubProvider(api_key="KEY") as provider:
            series = await provider.fetch_series("AAPL", "D", start, end)
    """

    name = "finnhub"
    BASE_URL = "https://finnhub.io/api/v1"

    def __init__(
        self,
        api_key: str,
        base_url: str = BASE_URL,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> "FinnhubProvider":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP client if this provider created it."""
        if self._client and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def _request(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        """Make an authenticated GET request and decode the JSON body."""
        if not self.api_key:
            raise MissingCredentialError(
                "API key not configured. Set a Finnhub API key or switch to the "
                "Yahoo Finance data source."
            )

        if not self._client:
            self._client = httpx.AsyncClient(timeout=self.timeout)
            self._owns_client = True

        params = {**params, "token": self.api_key}
        response = await self._client.get(f"{self.base_url}{path}", params=params)

        if response.status_code == 429:
            raise RateLimitError(f"Finnhub rate limit exceeded for {params.get('symbol')}")
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ProviderError(f"Finnhub HTTP {response.status_code}: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise InvalidResponseError(f"Finnhub returned non-JSON body: {e}") from e

        if not isinstance(data, dict):
            raise InvalidResponseError(f"Unexpected Finnhub payload: {type(data).__name__}")
        if "error" in data:
            raise InvalidResponseError(data["error"])

        return data

    async def fetch_series(
        self,
        symbol: str,
        resolution: str,
        from_time: datetime,
        to_time: datetime,
    ) -> OHLCVSeries:
        """
        Fetch candles for a symbol.

        Args:
            symbol: Stock symbol
            resolution: "D", "W" or "M"
            from_time: Start of the range
            to_time: End of the range

        Returns:
            OHLCVSeries in chronological order.

        Raises:
            MissingCredentialError: no API key configured
            NoDataError: Finnhub reported no data for the symbol
            RateLimitError: HTTP 429
            InvalidResponseError: payload missing candle columns
        """
        logger.debug(f"Fetching {resolution} candles for {symbol} from Finnhub")
        data = await self._request(
            "/stock/candle",
            {
                "symbol": symbol,
                "resolution": resolution,
                "from": int(from_time.timestamp()),
                "to": int(to_time.timestamp()),
            },
        )

        if data.get("s") == "no_data":
            raise NoDataError(f"No data available for {symbol}")

        try:
            return OHLCVSeries.from_columns(
                symbol=symbol,
                resolution=resolution,
                timestamp=data["t"],
                open=data["o"],
                high=data["h"],
                low=data["l"],
                close=data["c"],
                volume=data.get("v"),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidResponseError(f"Malformed candle payload for {symbol}: {e}") from e
