"""
TradingView watchlist parsing.

TradingView exports are comma-separated, with optional exchange prefixes
(``NASDAQ:AAPL``) and ``###Section`` headers.
"""

import logging
import re
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)

_SEPARATORS = re.compile(r"[,\r\n]+")


def parse_tradingview_watchlist(content: str) -> list[str]:
    """
    Extract symbols from a TradingView watchlist export.

    Args:
        content: Raw file contents

    Returns:
        Unique symbols in first-seen order, exchange prefixes and section
        headers removed
    """
    symbols: dict[str, None] = {}

    for entry in _SEPARATORS.split(content):
        # Keep everything after the last ':' (exchange prefix)
        symbol = entry.rsplit(":", 1)[-1].strip()
        if not symbol or symbol.startswith("###"):
            continue
        # Continuous futures end with '!'
        if symbol.endswith("!"):
            symbol = symbol[:-1]
        if symbol:
            symbols.setdefault(symbol, None)

    return list(symbols)


def load_watchlist(path: Union[str, Path]) -> list[str]:
    """Read and parse a watchlist file."""
    text = Path(path).read_text(encoding="utf-8")
    symbols = parse_tradingview_watchlist(text)
    logger.info(f"Loaded {len(symbols)} symbols from {path}")
    return symbols
