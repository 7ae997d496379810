"""
Technical analysis module.

Provides indicator calculations and the criteria used by the scan tiers.
"""

from ultimate_scanner.technicals.criteria import (
    histogram_rising,
    histogram_rising_below_zero,
    last_index,
    momentum_below_zero,
    trend_green,
)
from ultimate_scanner.technicals.indicators import (
    DOWNTREND,
    UPTREND,
    MACDResult,
    SqueezeResult,
    SupertrendResult,
    SupertrendState,
    atr,
    compute_macd,
    compute_squeeze,
    compute_supertrend,
    ema,
    latest_value,
    rolling_stdev,
    sma,
    true_range,
)

__all__ = [
    # Indicator dataclasses
    "MACDResult",
    "SqueezeResult",
    "SupertrendResult",
    "SupertrendState",
    "UPTREND",
    "DOWNTREND",
    # Indicator functions
    "atr",
    "compute_macd",
    "compute_squeeze",
    "compute_supertrend",
    "ema",
    "latest_value",
    "rolling_stdev",
    "sma",
    "true_range",
    # Criteria
    "histogram_rising",
    "histogram_rising_below_zero",
    "last_index",
    "momentum_below_zero",
    "trend_green",
]
