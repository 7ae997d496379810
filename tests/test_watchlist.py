"""Tests for TradingView watchlist parsing."""

from ultimate_scanner.ingest.watchlist import load_watchlist, parse_tradingview_watchlist


class TestParseWatchlist:
    """Tests for parse_tradingview_watchlist."""

    def test_exchange_prefixes_removed(self):
        assert parse_tradingview_watchlist("NASDAQ:AAPL,NYSE:IBM,AMEX:SPY") == ["AAPL", "IBM", "SPY"]

    def test_section_headers_skipped(self):
        content = "###Tech,NASDAQ:MSFT,NASDAQ:NVDA,###Energy,NYSE:XOM"

        assert parse_tradingview_watchlist(content) == ["MSFT", "NVDA", "XOM"]

    def test_newlines_and_whitespace(self):
        content = "NASDAQ:AAPL\n  NYSE:IBM ,\r\nTSLA\n\n"

        assert parse_tradingview_watchlist(content) == ["AAPL", "IBM", "TSLA"]

    def test_duplicates_keep_first_position(self):
        content = "NASDAQ:AAPL,NYSE:IBM,BATS:AAPL"

        assert parse_tradingview_watchlist(content) == ["AAPL", "IBM"]

    def test_continuous_futures_suffix(self):
        assert parse_tradingview_watchlist("CME_MINI:ES1!,NASDAQ:QQQ") == ["ES1", "QQQ"]

    def test_empty(self):
        assert parse_tradingview_watchlist("") == []
        assert parse_tradingview_watchlist(" , ,\n") == []


def test_load_watchlist(tmp_path):
    path = tmp_path / "watchlist.txt"
    path.write_text("###Core,NASDAQ:AAPL,NYSE:KO\n", encoding="utf-8")

    assert load_watchlist(path) == ["AAPL", "KO"]
    assert load_watchlist(str(path)) == ["AAPL", "KO"]
