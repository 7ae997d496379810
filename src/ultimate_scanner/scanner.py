"""Scan orchestrator: fetch a universe, apply a tier, deliver the report."""

import asyncio
import logging
from datetime import datetime
from typing import Optional, Sequence

from ultimate_scanner.clients.base import SeriesProvider
from ultimate_scanner.ingest.batch import BatchSettings, fetch_series_batch
from ultimate_scanner.models.scan import Resolution, ScanReport, ScanRequest, ScanTier
from ultimate_scanner.models.series import StockInput
from ultimate_scanner.notifications import ScanSink
from ultimate_scanner.scanning.tiers import IndicatorParams, evaluate_universe

logger = logging.getLogger(__name__)


class Scanner:
    """
    Runs scan tiers across a symbol universe.

    The pipeline for one scan:
    1. Batch retrieval of per-symbol series from the provider
    2. Indicator calculation and tier criteria per symbol
    3. Report (ordered matches + symbols actually scanned) to each sink

    Usage:
        async with Scanner(provider, BatchSettings(batch_size=5)) as scanner:
            report = await scanner.run(ScanRequest(symbols=["AAPL"], tier="combo"))
    """

    def __init__(
        self,
        provider: SeriesProvider,
        batch_settings: BatchSettings,
        params: Optional[IndicatorParams] = None,
        sinks: Sequence[ScanSink] = (),
    ):
        self.provider = provider
        self.batch_settings = batch_settings
        self.params = params or IndicatorParams()
        self.sinks = list(sinks)

    async def close(self):
        """Clean up resources."""
        await self.provider.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def run(
        self,
        request: ScanRequest,
        *,
        cancel_event: Optional[asyncio.Event] = None,
        now: Optional[datetime] = None,
    ) -> ScanReport:
        """
        Perform a complete scan.

        Args:
            request: Universe, resolution, lookback and tier
            cancel_event: Stops retrieval between windows when set
            now: End of the lookback range (defaults to current time)

        Returns:
            ScanReport with matches in universe order
        """
        logger.info(
            f"Starting {request.tier.value} scan of {len(request.symbols)} symbols "
            f"via {self.provider.name}"
        )

        fetched = await fetch_series_batch(
            self.provider,
            request.symbols,
            request.resolution.value,
            request.lookback_days,
            self.batch_settings,
            now=now,
            cancel_event=cancel_event,
        )

        stocks = [StockInput.from_series(series) for series in fetched.series.values()]
        evaluations = evaluate_universe(request.tier, stocks, self.params)

        report = ScanReport(
            tier=request.tier,
            matched=[e.symbol for e in evaluations if e.matched],
            total_scanned=len(stocks),
            evaluations=evaluations,
            failed_symbols=list(fetched.failures),
            cancelled=fetched.cancelled,
        )

        logger.info(
            f"Scan complete: {report.match_count} matched, "
            f"{report.total_scanned} scanned, "
            f"{len(report.failed_symbols)} failed, "
            f"{len(report.insufficient_data)} with insufficient data"
        )

        for sink in self.sinks:
            await sink.publish(report)

        return report

    async def scan_symbols(
        self,
        symbols: Sequence[str],
        tier: ScanTier = ScanTier.BASIC,
        resolution: Resolution = Resolution.DAILY,
        lookback_days: int = 100,
    ) -> ScanReport:
        """Convenience wrapper building the ScanRequest."""
        request = ScanRequest(
            symbols=list(symbols),
            tier=tier,
            resolution=resolution,
            lookback_days=lookback_days,
        )
        return await self.run(request)
