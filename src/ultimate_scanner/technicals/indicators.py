"""
Technical indicator calculations using numpy.

All functions are pure and stateless - they take price columns and return
indicator arrays. An indicator series is always shorter than its input by a
fixed warm-up count; consumers index from the end (the last element is "as of
the most recent bar"). Insufficient data yields an empty array, never an error.
"""

from dataclasses import dataclass, field
from typing import Optional, Sequence, Union

import numpy as np
import pandas as pd
from numpy.lib.stride_tricks import sliding_window_view

ArrayLike = Union[Sequence[float], np.ndarray, pd.Series]


def _as_array(values: ArrayLike) -> np.ndarray:
    return np.asarray(values, dtype=float).ravel()


def _check_period(period: int, name: str = "period") -> None:
    if period < 1:
        raise ValueError(f"{name} must be >= 1, got {period}")


def _empty() -> np.ndarray:
    return np.empty(0, dtype=float)


def _hlc_arrays(
    high: ArrayLike, low: ArrayLike, close: ArrayLike
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    h, l, c = _as_array(high), _as_array(low), _as_array(close)
    if not (len(h) == len(l) == len(c)):
        raise ValueError(
            f"high/low/close length mismatch: {len(h)}/{len(l)}/{len(c)}"
        )
    return h, l, c


def latest_value(values: ArrayLike) -> Optional[float]:
    """Most recent value of an indicator series, or None if empty."""
    if len(values) == 0:
        return None
    return float(values[-1])


# -----------------------------------------------------------------------------
# Primitives - SMA / EMA / ATR
# -----------------------------------------------------------------------------


def sma(values: ArrayLike, period: int) -> np.ndarray:
    """
    Simple moving average.

    Args:
        values: Input series, oldest first
        period: Window length

    Returns:
        Array of length len(values) - period + 1, or empty if the input is
        shorter than the period
    """
    _check_period(period)
    arr = _as_array(values)
    if len(arr) < period:
        return _empty()

    return sliding_window_view(arr, period).mean(axis=1)


def ema(values: ArrayLike, period: int) -> np.ndarray:
    """
    Exponential moving average seeded with the SMA of the first window.

    ema[0] = mean(values[:period])
    ema[i] = (values[i + period - 1] - ema[i-1]) * 2 / (period + 1) + ema[i-1]

    Returns:
        Array of length len(values) - period + 1, or empty
    """
    _check_period(period)
    arr = _as_array(values)
    if len(arr) < period:
        return _empty()

    multiplier = 2.0 / (period + 1)
    result = np.empty(len(arr) - period + 1, dtype=float)
    result[0] = arr[:period].mean()
    for i, price in enumerate(arr[period:], start=1):
        result[i] = (price - result[i - 1]) * multiplier + result[i - 1]

    return result


def rolling_stdev(values: ArrayLike, period: int) -> np.ndarray:
    """Population standard deviation per window, aligned with sma()."""
    _check_period(period)
    arr = _as_array(values)
    if len(arr) < period:
        return _empty()

    return sliding_window_view(arr, period).std(axis=1)


def true_range(high: ArrayLike, low: ArrayLike, close: ArrayLike) -> np.ndarray:
    """
    Per-bar true range.

    The first bar has no previous close, so TR[0] = high[0] - low[0].
    Every later bar uses max(high-low, |high-prev_close|, |low-prev_close|).
    """
    h, l, c = _hlc_arrays(high, low, close)
    if len(h) == 0:
        return _empty()

    tr = h - l
    prev_close = c[:-1]
    tr[1:] = np.maximum.reduce([
        h[1:] - l[1:],
        np.abs(h[1:] - prev_close),
        np.abs(l[1:] - prev_close),
    ])
    return tr


def atr(
    high: ArrayLike,
    low: ArrayLike,
    close: ArrayLike,
    period: int = 14,
) -> np.ndarray:
    """
    Average True Range as the simple average of true range.

    Args:
        high: High prices
        low: Low prices
        close: Close prices
        period: ATR period (default 14)

    Returns:
        Array of length len(close) - period + 1, or empty
    """
    _check_period(period)
    return sma(true_range(high, low, close), period)


# -----------------------------------------------------------------------------
# MACD - Moving Average Convergence Divergence
# -----------------------------------------------------------------------------


@dataclass
class MACDResult:
    """
    MACD series aligned index-for-index.

    macd_line[i], signal_line[i] and histogram[i] all describe the same bar.
    The first value corresponds to input bar `warmup`.
    """

    macd_line: np.ndarray
    signal_line: np.ndarray
    histogram: np.ndarray
    fast: int = 12
    slow: int = 26
    signal: int = 9

    @property
    def warmup(self) -> int:
        """Number of leading input bars without a histogram value."""
        return self.slow + self.signal - 2

    @property
    def is_empty(self) -> bool:
        return len(self.histogram) == 0


def compute_macd(
    close: ArrayLike,
    fast: int = 12,
    slow: int = 26,
    signal: int = 9,
) -> MACDResult:
    """
    Compute MACD line, signal line and histogram.

    The fast EMA has a shorter warm-up than the slow EMA, so its first
    slow - fast values are dropped before subtracting. The histogram only
    exists where the signal line does, so the exported MACD line is trimmed
    by signal - 1 to line up with it.

    Args:
        close: Close prices, oldest first
        fast: Fast EMA period (default 12)
        slow: Slow EMA period (default 26)
        signal: Signal line period (default 9)

    Returns:
        MACDResult; all arrays are empty when fewer than slow + signal - 1
        closes are available
    """
    _check_period(fast, "fast")
    _check_period(slow, "slow")
    _check_period(signal, "signal")
    if fast >= slow:
        raise ValueError(f"fast period ({fast}) must be shorter than slow ({slow})")

    empty = MACDResult(_empty(), _empty(), _empty(), fast, slow, signal)

    slow_ema = ema(close, slow)
    if len(slow_ema) == 0:
        return empty

    fast_ema = ema(close, fast)[slow - fast:]
    macd_line = fast_ema - slow_ema

    signal_line = ema(macd_line, signal)
    if len(signal_line) == 0:
        return empty

    aligned_line = macd_line[signal - 1:]
    histogram = aligned_line - signal_line

    return MACDResult(
        macd_line=aligned_line,
        signal_line=signal_line,
        histogram=histogram,
        fast=fast,
        slow=slow,
        signal=signal,
    )


# -----------------------------------------------------------------------------
# Supertrend
# -----------------------------------------------------------------------------


UPTREND = 1
DOWNTREND = -1


@dataclass(frozen=True)
class SupertrendState:
    """Recurrence state carried from one bar to the next."""

    final_upper: float
    final_lower: float
    trend: int


def _seed_state(
    basic_upper: float, basic_lower: float, close: float, hl2: float
) -> SupertrendState:
    # The first trend compares close to the bar midpoint, not to a band.
    trend = UPTREND if close > hl2 else DOWNTREND
    return SupertrendState(basic_upper, basic_lower, trend)


def _step_state(
    state: SupertrendState,
    basic_upper: float,
    basic_lower: float,
    close: float,
    prev_close: float,
) -> SupertrendState:
    if basic_upper < state.final_upper or prev_close > state.final_upper:
        final_upper = basic_upper
    else:
        final_upper = state.final_upper

    if basic_lower > state.final_lower or prev_close < state.final_lower:
        final_lower = basic_lower
    else:
        final_lower = state.final_lower

    trend = state.trend
    if trend == UPTREND and close < final_lower:
        trend = DOWNTREND
    elif trend == DOWNTREND and close > final_upper:
        trend = UPTREND

    return SupertrendState(final_upper, final_lower, trend)


@dataclass
class SupertrendResult:
    """
    Supertrend bands and trend, aligned with the raw OHLC input.

    The first `warmup` entries of every array are zero placeholders.
    """

    trend: np.ndarray
    upper_band: np.ndarray
    lower_band: np.ndarray
    period: int = 10
    multiplier: float = 3.0
    final_state: Optional[SupertrendState] = field(default=None, repr=False)

    @property
    def warmup(self) -> int:
        return self.period - 1

    @property
    def is_empty(self) -> bool:
        return len(self.trend) == 0

    def is_green(self, index: int) -> bool:
        """Uptrend at `index`; False for padding or out-of-range indices."""
        if index < 0 or index >= len(self.trend):
            return False
        return bool(self.trend[index] == UPTREND)


def compute_supertrend(
    high: ArrayLike,
    low: ArrayLike,
    close: ArrayLike,
    period: int = 10,
    multiplier: float = 3.0,
) -> SupertrendResult:
    """
    Compute the Supertrend indicator.

    Bands start from hl2 +/- multiplier * ATR and are then ratcheted by the
    usual final-band rules. The trend is sticky: it only flips when the close
    crosses the opposite final band.

    Args:
        high: High prices
        low: Low prices
        close: Close prices
        period: ATR period (default 10)
        multiplier: Band multiplier (default 3)

    Returns:
        SupertrendResult; arrays are empty when fewer than `period` bars exist
    """
    h, l, c = _hlc_arrays(high, low, close)
    atr_values = atr(h, l, c, period)
    if len(atr_values) == 0:
        return SupertrendResult(
            np.empty(0, dtype=int), _empty(), _empty(), period, multiplier
        )

    padding = period - 1
    hl2 = (h[padding:] + l[padding:]) / 2
    basic_upper = hl2 + multiplier * atr_values
    basic_lower = hl2 - multiplier * atr_values

    trend = np.zeros(len(c), dtype=int)
    upper_band = np.zeros(len(c), dtype=float)
    lower_band = np.zeros(len(c), dtype=float)

    state: Optional[SupertrendState] = None
    for i in range(len(atr_values)):
        idx = i + padding
        if state is None:
            state = _seed_state(basic_upper[i], basic_lower[i], c[idx], hl2[i])
        else:
            state = _step_state(
                state, basic_upper[i], basic_lower[i], c[idx], c[idx - 1]
            )
        trend[idx] = state.trend
        upper_band[idx] = state.final_upper
        lower_band[idx] = state.final_lower

    return SupertrendResult(
        trend=trend,
        upper_band=upper_band,
        lower_band=lower_band,
        period=period,
        multiplier=multiplier,
        final_state=state,
    )


# -----------------------------------------------------------------------------
# Squeeze / momentum oscillator
# -----------------------------------------------------------------------------


@dataclass
class SqueezeResult:
    """Bollinger/Keltner squeeze flags and midpoint momentum."""

    momentum: np.ndarray
    is_squeezing: np.ndarray
    bb_upper: np.ndarray
    bb_lower: np.ndarray
    kc_upper: np.ndarray
    kc_lower: np.ndarray
    period: int = 20

    @property
    def warmup(self) -> int:
        return self.period - 1

    @property
    def is_empty(self) -> bool:
        return len(self.momentum) == 0


def compute_squeeze(
    high: ArrayLike,
    low: ArrayLike,
    close: ArrayLike,
    period: int = 20,
    bb_mult: float = 2.0,
    kc_mult: float = 1.5,
) -> SqueezeResult:
    """
    Compute the squeeze flag and momentum histogram.

    A bar is squeezing when the Bollinger Bands sit strictly inside the
    Keltner Channels. Momentum is the distance of the close from the midpoint
    of the window's highest high and lowest low; it is not a regression slope.

    Args:
        high: High prices
        low: Low prices
        close: Close prices
        period: Window for SMA, stdev, ATR and the high/low range (default 20)
        bb_mult: Bollinger standard deviation multiplier (default 2)
        kc_mult: Keltner ATR multiplier (default 1.5)

    Returns:
        SqueezeResult with arrays of length len(close) - period + 1, or empty
    """
    h, l, c = _hlc_arrays(high, low, close)
    basis = sma(c, period)
    if len(basis) == 0:
        return SqueezeResult(
            _empty(), np.empty(0, dtype=bool), _empty(), _empty(), _empty(), _empty(), period
        )

    deviation = rolling_stdev(c, period)
    range_atr = atr(h, l, c, period)

    bb_upper = basis + bb_mult * deviation
    bb_lower = basis - bb_mult * deviation
    kc_upper = basis + kc_mult * range_atr
    kc_lower = basis - kc_mult * range_atr
    is_squeezing = (bb_lower > kc_lower) & (bb_upper < kc_upper)

    highest_high = sliding_window_view(h, period).max(axis=1)
    lowest_low = sliding_window_view(l, period).min(axis=1)
    momentum = c[period - 1:] - (highest_high + lowest_low) / 2

    return SqueezeResult(
        momentum=momentum,
        is_squeezing=is_squeezing,
        bb_upper=bb_upper,
        bb_lower=bb_lower,
        kc_upper=kc_upper,
        kc_lower=kc_lower,
        period=period,
    )
