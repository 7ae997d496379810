"""Tests for scan result sinks."""

import asyncio
import json

import httpx
import pytest

from ultimate_scanner.models.scan import ScanReport, ScanTier
from ultimate_scanner.notifications import (
    CollectingSink,
    DiscordWebhookSink,
    format_match_list,
    summarize_report,
)

WEBHOOK = "https://discord.example/api/webhooks/1/abc"


def make_report(matched, total=100, tier=ScanTier.COMBO) -> ScanReport:
    return ScanReport(tier=tier, matched=list(matched), total_scanned=total)


class TestFormatting:
    """Tests for the text shown to users."""

    def test_short_list(self):
        assert format_match_list(["AAPL", "MSFT"]) == "AAPL, MSFT"

    def test_truncated_list(self):
        symbols = [f"S{i}" for i in range(25)]

        text = format_match_list(symbols)

        assert text.startswith("S0, S1, ")
        assert text.endswith("S19 and 5 more...")
        assert "S20" not in text

    def test_exact_limit_not_truncated(self):
        symbols = [f"S{i}" for i in range(20)]

        assert "more" not in format_match_list(symbols)

    def test_custom_limit(self):
        assert format_match_list(["A", "B", "C"], limit=1) == "A and 2 more..."

    def test_empty(self):
        assert format_match_list([]) == ""

    def test_summary_with_matches(self):
        report = make_report([f"S{i}" for i in range(25)], total=480)

        # Counts are exact, only the symbol list is capped
        assert summarize_report(report) == "Found 25 stocks matching your criteria out of 480 scanned."

    def test_summary_without_matches(self):
        assert summarize_report(make_report([], total=12)) == (
            "No stocks matched your criteria out of 12 scanned."
        )


class TestCollectingSink:
    def test_collects(self):
        sink = CollectingSink()
        report = make_report(["AAPL"])

        assert sink.last is None
        asyncio.run(sink.publish(report))

        assert sink.reports == [report]
        assert sink.last is report


class TestDiscordWebhookSink:
    """Tests for Discord webhook delivery."""

    def test_payload(self):
        sink = DiscordWebhookSink(WEBHOOK)
        report = make_report(["AAPL", "AMD"], total=50, tier=ScanTier.BELOW_ZERO)

        payload = sink.build_payload(report)

        assert payload["content"] == "MACD Below Zero Scan Results Alert"
        embed = payload["embeds"][0]
        assert embed["title"] == "MACD Below Zero Scan Results"
        assert embed["description"] == "Found 2 stocks matching your criteria out of 50 scanned."
        assert embed["color"] == 0x00FF00
        assert embed["fields"] == [{"name": "Matching Stocks", "value": "AAPL, AMD"}]
        assert embed["footer"] == {"text": "Ultimate Stock Scanner"}

    def test_payload_without_matches(self):
        payload = DiscordWebhookSink(WEBHOOK).build_payload(make_report([]))

        assert payload["embeds"][0]["fields"] == []

    def test_send_posts_json(self):
        received = []

        def handler(request: httpx.Request) -> httpx.Response:
            received.append(request)
            return httpx.Response(204)

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        sink = DiscordWebhookSink(WEBHOOK, display_limit=1, client=client)

        assert asyncio.run(sink.send(make_report(["AAPL", "MSFT"]))) is True

        assert str(received[0].url) == WEBHOOK
        body = json.loads(received[0].content)
        assert body["embeds"][0]["fields"][0]["value"] == "AAPL and 1 more..."

    def test_http_failure_is_logged_not_raised(self, caplog):
        client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(500)))
        sink = DiscordWebhookSink(WEBHOOK, client=client)

        assert asyncio.run(sink.send(make_report(["AAPL"]))) is False
        assert "Error sending alert to Discord" in caplog.text

    def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        sink = DiscordWebhookSink(WEBHOOK, client=client)

        asyncio.run(sink.publish(make_report(["AAPL"])))

    @pytest.mark.parametrize("url", ["", None])
    def test_no_webhook(self, url):
        assert asyncio.run(DiscordWebhookSink(url).send(make_report(["AAPL"]))) is False
