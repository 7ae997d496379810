"""Tests for windowed batch retrieval."""

import asyncio
import logging
from datetime import datetime, timedelta, timezone

import pytest

from ultimate_scanner.clients.base import MissingCredentialError
from ultimate_scanner.ingest.batch import BatchSettings, fetch_series_batch, partition
from ultimate_scanner.models.scan import Resolution

from conftest import FakeProvider, RecordingSleep, declining_closes, make_series

NOW = datetime(2026, 3, 1, 21, 0, tzinfo=timezone.utc)


def provider_for(symbols, failing=None) -> FakeProvider:
    data = {s: make_series(s, declining_closes(40)) for s in symbols}
    return FakeProvider(data, failing=failing)


def run_batch(provider, symbols, settings, **kwargs):
    kwargs.setdefault("sleep", RecordingSleep())
    kwargs.setdefault("now", NOW)
    return asyncio.run(
        fetch_series_batch(provider, symbols, "D", 30, settings, **kwargs)
    )


class TestPartition:
    def test_windows_in_order(self):
        assert list(partition(["A", "B", "C", "D", "E"], 2)) == [["A", "B"], ["C", "D"], ["E"]]

    def test_exact_multiple(self):
        assert list(partition(["A", "B", "C", "D"], 2)) == [["A", "B"], ["C", "D"]]

    def test_empty(self):
        assert list(partition([], 3)) == []

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            list(partition(["A"], 0))


class TestFetchSeriesBatch:
    """Tests for fetch_series_batch."""

    def test_failure_does_not_abort(self, caplog):
        """A failing symbol is logged and left out of the result."""
        provider = provider_for(["AAA"], failing={"BBB"})

        with caplog.at_level(logging.WARNING):
            result = run_batch(provider, ["AAA", "BBB"], BatchSettings(batch_size=2))

        assert set(result.series) == {"AAA"}
        assert result.fetched_count == 1
        assert result.failures["BBB"] == "RuntimeError: boom for BBB"
        assert "Error fetching candle data for BBB" in caplog.text

    def test_missing_data_is_a_failure(self):
        provider = provider_for(["AAA"])

        result = run_batch(provider, ["AAA", "ZZZ"], BatchSettings(batch_size=5))

        assert list(result.series) == ["AAA"]
        assert "ZZZ" in result.failures

    def test_result_keeps_universe_order(self):
        symbols = ["MSFT", "AAPL", "TSLA", "AMD", "NVDA", "META", "GOOG"]
        provider = provider_for(symbols, failing={"AMD"})

        result = run_batch(provider, symbols, BatchSettings(batch_size=3))

        assert list(result.series) == ["MSFT", "AAPL", "TSLA", "NVDA", "META", "GOOG"]

    @pytest.mark.parametrize("batch_size", [1, 2, 5])
    def test_concurrency_bounded(self, batch_size):
        """Never more than batch_size fetches in flight."""
        symbols = [f"S{i}" for i in range(12)]
        provider = provider_for(symbols)

        run_batch(provider, symbols, BatchSettings(batch_size=batch_size))

        assert provider.max_in_flight == batch_size
        assert len(provider.calls) == 12

    def test_windows_run_sequentially(self):
        """Every fetch of a window ends before the next window starts."""
        symbols = ["A", "B", "C", "D", "E"]
        provider = provider_for(symbols)

        run_batch(provider, symbols, BatchSettings(batch_size=2))

        position = {event: i for i, event in enumerate(provider.events)}
        for window, following in [(["A", "B"], ["C", "D"]), (["C", "D"], ["E"])]:
            last_end = max(position[("end", s)] for s in window)
            first_start = min(position[("start", s)] for s in following)
            assert last_end < first_start

    def test_delay_between_windows_only(self):
        """Windows - 1 pauses, none after the last window."""
        symbols = [f"S{i}" for i in range(7)]
        sleep = RecordingSleep()

        run_batch(provider_for(symbols), symbols, BatchSettings(batch_size=3, delay_seconds=1.5), sleep=sleep)

        assert sleep.delays == [1.5, 1.5]

    def test_single_window_never_sleeps(self):
        sleep = RecordingSleep()

        run_batch(provider_for(["A", "B"]), ["A", "B"], BatchSettings(batch_size=5), sleep=sleep)

        assert sleep.delays == []

    def test_time_range(self):
        """Range ends at `now` and spans lookback_days."""
        provider = provider_for(["A"])

        run_batch(provider, ["A"], BatchSettings())

        symbol, resolution, from_time, to_time = provider.calls[0]
        assert symbol == "A"
        assert resolution == "D"
        assert to_time == NOW
        assert to_time - from_time == timedelta(days=30)

    def test_resolution_enum_passed_as_code(self):
        provider = provider_for(["A"])

        asyncio.run(
            fetch_series_batch(
                provider, ["A"], Resolution.WEEKLY, 30, BatchSettings(), now=NOW, sleep=RecordingSleep()
            )
        )

        assert provider.calls[0][1] == "W"

    def test_empty_universe(self):
        provider = provider_for([])

        result = run_batch(provider, [], BatchSettings())

        assert result.fetched_count == 0
        assert provider.calls == []


class TestCancellation:
    """Tests for cooperative cancellation."""

    def test_cancel_between_windows(self):
        """Cancelling during the pause stops the next window from starting."""
        symbols = ["A", "B", "C", "D", "E", "F"]
        provider = provider_for(symbols)
        event = asyncio.Event()
        sleep = RecordingSleep(on_sleep=lambda count: event.set())

        result = run_batch(provider, symbols, BatchSettings(batch_size=2), cancel_event=event, sleep=sleep)

        assert list(result.series) == ["A", "B"]
        assert result.cancelled
        assert [call[0] for call in provider.calls] == ["A", "B"]
        assert sleep.delays == [1.0]

    def test_cancel_before_start(self):
        provider = provider_for(["A", "B"])
        event = asyncio.Event()
        event.set()

        result = run_batch(provider, ["A", "B"], BatchSettings(), cancel_event=event)

        assert result.cancelled
        assert result.fetched_count == 0
        assert provider.calls == []

    def test_no_cancel(self):
        provider = provider_for(["A", "B", "C"])

        result = run_batch(provider, ["A", "B", "C"], BatchSettings(batch_size=1), cancel_event=asyncio.Event())

        assert not result.cancelled
        assert result.fetched_count == 3


class TestMissingCredential:
    """A missing API key is a precondition failure, not a per-symbol one."""

    class KeylessProvider(FakeProvider):
        async def fetch_series(self, symbol, resolution, from_time, to_time):
            self.calls.append((symbol, resolution, from_time, to_time))
            raise MissingCredentialError("API key not configured")

    def test_propagates_to_caller(self):
        provider = self.KeylessProvider({})

        with pytest.raises(MissingCredentialError):
            run_batch(provider, ["AAA", "BBB"], BatchSettings(batch_size=2))

    def test_stops_before_next_window(self):
        sleep = RecordingSleep()
        provider = self.KeylessProvider({})

        with pytest.raises(MissingCredentialError):
            run_batch(provider, ["A", "B", "C", "D"], BatchSettings(batch_size=2), sleep=sleep)

        assert {call[0] for call in provider.calls} <= {"A", "B"}
        assert sleep.delays == []
