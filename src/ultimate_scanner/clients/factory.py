"""Provider construction from configuration."""

from typing import Optional

from ultimate_scanner.clients.base import SeriesProvider
from ultimate_scanner.clients.finnhub import FinnhubProvider
from ultimate_scanner.clients.yahoo import YahooProvider
from ultimate_scanner.config import DataSource, ScannerConfig
from ultimate_scanner.ingest.batch import BatchSettings


def build_provider(
    config: ScannerConfig,
    source: Optional[DataSource] = None,
) -> SeriesProvider:
    """
    Create the provider for `source` (or the configured data source).

    Finnhub is built even without a key; the missing credential surfaces as
    MissingCredentialError on the first fetch.
    """
    source = source or config.resolved_data_source
    if source == "finnhub":
        return FinnhubProvider(
            api_key=config.finnhub_api_key,
            base_url=config.finnhub_base_url,
            timeout=config.request_timeout_seconds,
        )
    if source == "yahoo":
        return YahooProvider()
    raise ValueError(f"Unknown data source: {source!r}")


def batch_settings_for(config: ScannerConfig, source: DataSource) -> BatchSettings:
    """Window size and delay for a provider; rate-limited providers get smaller windows."""
    if source == "finnhub":
        return BatchSettings(
            batch_size=config.finnhub_batch_size,
            delay_seconds=config.finnhub_batch_delay_seconds,
        )
    return BatchSettings(
        batch_size=config.yahoo_batch_size,
        delay_seconds=config.yahoo_batch_delay_seconds,
    )
