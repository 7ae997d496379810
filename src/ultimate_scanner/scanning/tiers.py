"""
Scan tiers: ordered conjunctions of criteria applied to a symbol universe.

Each tier evaluates its criteria at the last index of the indicator series
computed from one symbol's own close/high/low columns. Tiers narrow:
every ultimate match is a combo match, and every combo match is a
below-zero match. The basic tier omits the below-zero constraint.
"""

import logging
from functools import cached_property
from typing import Callable, Iterable, Optional

from pydantic import BaseModel, Field, model_validator

from ultimate_scanner.models.scan import EvaluationStatus, ScanTier, SymbolEvaluation
from ultimate_scanner.models.series import StockInput
from ultimate_scanner.technicals.criteria import (
    histogram_rising,
    histogram_rising_below_zero,
    last_index,
    momentum_below_zero,
    trend_green,
)
from ultimate_scanner.technicals.indicators import (
    MACDResult,
    SqueezeResult,
    SupertrendResult,
    compute_macd,
    compute_squeeze,
    compute_supertrend,
)

logger = logging.getLogger(__name__)


class IndicatorParams(BaseModel):
    """Indicator parameters shared by all tiers."""

    macd_fast: int = Field(default=12, ge=1)
    macd_slow: int = Field(default=26, ge=2)
    macd_signal: int = Field(default=9, ge=1)
    supertrend_period: int = Field(default=10, ge=1)
    supertrend_multiplier: float = Field(default=3.0, gt=0)
    squeeze_period: int = Field(default=20, ge=1)
    squeeze_bb_mult: float = Field(default=2.0, gt=0)
    squeeze_kc_mult: float = Field(default=1.5, gt=0)

    @model_validator(mode="after")
    def check_macd_periods(self) -> "IndicatorParams":
        """The fast EMA must be shorter than the slow one."""
        if self.macd_fast >= self.macd_slow:
            raise ValueError(
                f"macd_fast ({self.macd_fast}) must be shorter than macd_slow ({self.macd_slow})"
            )
        return self


class IndicatorSnapshot:
    """
    Indicators for one symbol, computed on first access.

    Tiers that stop at a failing MACD check never pay for Supertrend or
    squeeze calculations.
    """

    def __init__(self, stock: StockInput, params: IndicatorParams):
        self.stock = stock
        self.params = params

    @classmethod
    def from_stock(
        cls, stock: StockInput, params: Optional[IndicatorParams] = None
    ) -> "IndicatorSnapshot":
        return cls(stock, params or IndicatorParams())

    @cached_property
    def macd(self) -> MACDResult:
        p = self.params
        return compute_macd(self.stock.close, p.macd_fast, p.macd_slow, p.macd_signal)

    @cached_property
    def supertrend(self) -> SupertrendResult:
        p = self.params
        return compute_supertrend(
            self.stock.high,
            self.stock.low,
            self.stock.close,
            period=p.supertrend_period,
            multiplier=p.supertrend_multiplier,
        )

    @cached_property
    def squeeze(self) -> SqueezeResult:
        p = self.params
        return compute_squeeze(
            self.stock.high,
            self.stock.low,
            self.stock.close,
            period=p.squeeze_period,
            bb_mult=p.squeeze_bb_mult,
            kc_mult=p.squeeze_kc_mult,
        )


# A check returns None when the indicator it needs has too little history.
CriterionCheck = Callable[[IndicatorSnapshot], Optional[bool]]


def _check_histogram_rising(snapshot: IndicatorSnapshot) -> Optional[bool]:
    histogram = snapshot.macd.histogram
    if len(histogram) < 2:
        return None
    return histogram_rising(histogram, last_index(histogram))


def _check_histogram_rising_below_zero(snapshot: IndicatorSnapshot) -> Optional[bool]:
    macd = snapshot.macd
    if len(macd.histogram) < 2:
        return None
    return histogram_rising_below_zero(
        macd.histogram, macd.macd_line, last_index(macd.histogram)
    )


def _check_trend_green(snapshot: IndicatorSnapshot) -> Optional[bool]:
    trend = snapshot.supertrend.trend
    if len(trend) == 0:
        return None
    return trend_green(trend, last_index(trend))


def _check_momentum_below_zero(snapshot: IndicatorSnapshot) -> Optional[bool]:
    momentum = snapshot.squeeze.momentum
    if len(momentum) == 0:
        return None
    return momentum_below_zero(momentum, last_index(momentum))


CRITERIA: dict[str, CriterionCheck] = {
    "histogram_rising": _check_histogram_rising,
    "histogram_rising_below_zero": _check_histogram_rising_below_zero,
    "trend_green": _check_trend_green,
    "momentum_below_zero": _check_momentum_below_zero,
}

TIER_CRITERIA: dict[ScanTier, tuple[str, ...]] = {
    ScanTier.BASIC: ("histogram_rising",),
    ScanTier.BELOW_ZERO: ("histogram_rising_below_zero",),
    ScanTier.COMBO: ("histogram_rising_below_zero", "trend_green"),
    ScanTier.ULTIMATE: (
        "histogram_rising_below_zero",
        "trend_green",
        "momentum_below_zero",
    ),
}


def evaluate_stock(
    tier: ScanTier,
    stock: StockInput,
    params: Optional[IndicatorParams] = None,
) -> SymbolEvaluation:
    """
    Evaluate one symbol against a tier.

    Criteria run in tier order and stop at the first one that fails or
    lacks data.

    Args:
        tier: Scan tier to apply
        stock: Symbol with close/high/low columns, oldest first
        params: Indicator parameters (defaults if omitted)

    Returns:
        SymbolEvaluation tagged MATCHED, NOT_MATCHED or INSUFFICIENT_DATA
    """
    snapshot = IndicatorSnapshot.from_stock(stock, params)

    for name in TIER_CRITERIA[tier]:
        outcome = CRITERIA[name](snapshot)
        if outcome is None:
            logger.debug(f"{stock.symbol}: insufficient data for {name}")
            return SymbolEvaluation(
                symbol=stock.symbol,
                status=EvaluationStatus.INSUFFICIENT_DATA,
                failed_criterion=name,
            )
        if not outcome:
            return SymbolEvaluation(
                symbol=stock.symbol,
                status=EvaluationStatus.NOT_MATCHED,
                failed_criterion=name,
            )

    return SymbolEvaluation(symbol=stock.symbol, status=EvaluationStatus.MATCHED)


def evaluate_universe(
    tier: ScanTier,
    stocks: Iterable[StockInput],
    params: Optional[IndicatorParams] = None,
) -> list[SymbolEvaluation]:
    """Evaluate every symbol, preserving input order."""
    params = params or IndicatorParams()
    return [evaluate_stock(tier, stock, params) for stock in stocks]


def scan(
    tier: ScanTier,
    stocks: Iterable[StockInput],
    params: Optional[IndicatorParams] = None,
) -> list[str]:
    """Symbols matching the tier, in input order."""
    return [e.symbol for e in evaluate_universe(tier, stocks, params) if e.matched]


def scan_basic(stocks: Iterable[StockInput], params: Optional[IndicatorParams] = None) -> list[str]:
    return scan(ScanTier.BASIC, stocks, params)


def scan_below_zero(stocks: Iterable[StockInput], params: Optional[IndicatorParams] = None) -> list[str]:
    return scan(ScanTier.BELOW_ZERO, stocks, params)


def scan_combo(stocks: Iterable[StockInput], params: Optional[IndicatorParams] = None) -> list[str]:
    return scan(ScanTier.COMBO, stocks, params)


def scan_ultimate(stocks: Iterable[StockInput], params: Optional[IndicatorParams] = None) -> list[str]:
    return scan(ScanTier.ULTIMATE, stocks, params)
