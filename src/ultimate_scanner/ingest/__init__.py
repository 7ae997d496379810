"""
Data ingestion module.

Batch retrieval of price series and watchlist loading.
"""

from ultimate_scanner.ingest.batch import (
    BatchFetchResult,
    BatchSettings,
    fetch_series_batch,
    partition,
)
from ultimate_scanner.ingest.watchlist import (
    load_watchlist,
    parse_tradingview_watchlist,
)

__all__ = [
    "BatchFetchResult",
    "BatchSettings",
    "fetch_series_batch",
    "partition",
    "load_watchlist",
    "parse_tradingview_watchlist",
]
