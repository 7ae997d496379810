"""
Scan result sinks.

A sink receives the finished ScanReport: the full ordered match list and the
exact number of symbols scanned. Display caps (first 20 plus "N more") are
applied here, never in the scan itself.
"""

import logging
from datetime import datetime, timezone
from typing import Optional, Protocol, Sequence

import httpx

from ultimate_scanner.models.scan import ScanReport

logger = logging.getLogger(__name__)

DEFAULT_DISPLAY_LIMIT = 20


class ScanSink(Protocol):
    """Receives finished scan reports."""

    async def publish(self, report: ScanReport) -> None:
        ...


def format_match_list(symbols: Sequence[str], limit: int = DEFAULT_DISPLAY_LIMIT) -> str:
    """Comma-joined symbols, truncated to `limit` with an 'and N more...' suffix."""
    if not symbols:
        return ""

    text = ", ".join(symbols[:limit])
    if len(symbols) > limit:
        text += f" and {len(symbols) - limit} more..."
    return text


def summarize_report(report: ScanReport) -> str:
    """One-line summary of matches versus symbols scanned."""
    if report.matched:
        return (
            f"Found {report.match_count} stocks matching your criteria "
            f"out of {report.total_scanned} scanned."
        )
    return f"No stocks matched your criteria out of {report.total_scanned} scanned."


class CollectingSink:
    """In-memory sink that keeps every report it receives."""

    def __init__(self):
        self.reports: list[ScanReport] = []

    async def publish(self, report: ScanReport) -> None:
        self.reports.append(report)

    @property
    def last(self) -> Optional[ScanReport]:
        return self.reports[-1] if self.reports else None


class DiscordWebhookSink:
    """
    Posts scan results to a Discord webhook as an embed.

    Delivery problems are logged and reported through send()'s return value;
    they never fail the scan.
    """

    EMBED_COLOR = 0x00FF00
    FOOTER = "Ultimate Stock Scanner"

    def __init__(
        self,
        webhook_url: str,
        display_limit: int = DEFAULT_DISPLAY_LIMIT,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.webhook_url = webhook_url
        self.display_limit = display_limit
        self.timeout = timeout
        self._client = client

    def build_payload(self, report: ScanReport) -> dict:
        """Discord message body for a report."""
        scan_name = report.tier.display_name
        fields = []
        if report.matched:
            fields.append({
                "name": "Matching Stocks",
                "value": format_match_list(report.matched, self.display_limit),
            })

        return {
            "content": f"{scan_name} Scan Results Alert",
            "embeds": [
                {
                    "title": f"{scan_name} Scan Results",
                    "description": summarize_report(report),
                    "color": self.EMBED_COLOR,
                    "fields": fields,
                    "footer": {"text": self.FOOTER},
                    "timestamp": datetime.now(timezone.utc).isoformat(),
                }
            ],
        }

    async def send(self, report: ScanReport) -> bool:
        """
        Post the report.

        Returns:
            True if Discord accepted the message
        """
        if not self.webhook_url:
            logger.debug("Discord alert skipped: no webhook configured")
            return False

        payload = self.build_payload(report)
        try:
            if self._client is not None:
                response = await self._client.post(self.webhook_url, json=payload)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(self.webhook_url, json=payload)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Error sending alert to Discord: {e}")
            return False

        return True

    async def publish(self, report: ScanReport) -> None:
        await self.send(report)
