"""
Boolean criteria evaluated at a single index of an indicator series.

Every predicate fails closed: an index outside the series returns False
instead of raising, so symbols with short history simply do not match.
"""

from typing import Sized

import numpy as np

from ultimate_scanner.technicals.indicators import UPTREND


def last_index(series: Sized) -> int:
    """Index of the most recent value; -1 ("before start") when empty."""
    return len(series) - 1


def histogram_rising(histogram: np.ndarray, index: int) -> bool:
    """MACD histogram higher than on the previous bar."""
    if index <= 0 or index >= len(histogram):
        return False

    return bool(histogram[index] > histogram[index - 1])


def histogram_rising_below_zero(
    histogram: np.ndarray, macd_line: np.ndarray, index: int
) -> bool:
    """Histogram rising while the MACD line is still below zero."""
    if not histogram_rising(histogram, index) or index >= len(macd_line):
        return False

    return bool(macd_line[index] < 0)


def trend_green(trend: np.ndarray, index: int) -> bool:
    """Supertrend in an uptrend at this bar."""
    if index < 0 or index >= len(trend):
        return False

    return bool(trend[index] == UPTREND)


def momentum_below_zero(momentum: np.ndarray, index: int) -> bool:
    """
    Squeeze momentum histogram below zero.

    Only the momentum sign is checked; the is_squeezing flag is not consulted.
    """
    if index < 0 or index >= len(momentum):
        return False

    return bool(momentum[index] < 0)
