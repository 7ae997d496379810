"""
Scan request, tier and result models.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class ScanTier(str, Enum):
    """Named scans, from loosest to strictest."""

    BASIC = "basic"
    BELOW_ZERO = "below_zero"
    COMBO = "combo"
    ULTIMATE = "ultimate"

    @property
    def display_name(self) -> str:
        return _TIER_DISPLAY_NAMES[self]

    @property
    def description(self) -> str:
        return _TIER_DESCRIPTIONS[self]


_TIER_DISPLAY_NAMES = {
    ScanTier.BASIC: "MACD",
    ScanTier.BELOW_ZERO: "MACD Below Zero",
    ScanTier.COMBO: "Combo",
    ScanTier.ULTIMATE: "Ultimate",
}

_TIER_DESCRIPTIONS = {
    ScanTier.BASIC: "MACD histogram higher than the previous candle.",
    ScanTier.BELOW_ZERO: (
        "MACD histogram higher than the previous candle with the MACD line below zero."
    ),
    ScanTier.COMBO: "MACD below-zero scan plus Supertrend green.",
    ScanTier.ULTIMATE: "Combo scan plus squeeze momentum below zero.",
}


class Resolution(str, Enum):
    """Bar resolutions understood by the providers."""

    DAILY = "D"
    WEEKLY = "W"
    MONTHLY = "M"


class ScanRequest(BaseModel):
    """A scan over a symbol universe."""

    symbols: list[str]
    resolution: Resolution = Resolution.DAILY
    lookback_days: int = Field(default=100, ge=1)
    tier: ScanTier = ScanTier.BASIC

    @field_validator("symbols")
    @classmethod
    def normalize_symbols(cls, v: list[str]) -> list[str]:
        """Uppercase, strip and de-duplicate, keeping first occurrence."""
        seen: dict[str, None] = {}
        for symbol in v:
            cleaned = symbol.strip().upper()
            if cleaned:
                seen.setdefault(cleaned, None)
        if not seen:
            raise ValueError("symbol universe is empty")
        return list(seen)


class EvaluationStatus(str, Enum):
    """Outcome of evaluating one symbol against a tier."""

    MATCHED = "matched"
    NOT_MATCHED = "not_matched"
    INSUFFICIENT_DATA = "insufficient_data"


class SymbolEvaluation(BaseModel):
    """Tier outcome for a single symbol."""

    symbol: str
    status: EvaluationStatus
    failed_criterion: Optional[str] = Field(
        default=None, description="First criterion that failed or lacked data"
    )

    @property
    def matched(self) -> bool:
        return self.status == EvaluationStatus.MATCHED


class ScanReport(BaseModel):
    """Result delivered to scan sinks."""

    tier: ScanTier
    matched: list[str]
    total_scanned: int
    evaluations: list[SymbolEvaluation] = Field(default_factory=list)
    failed_symbols: list[str] = Field(default_factory=list)
    cancelled: bool = False

    @property
    def match_count(self) -> int:
        return len(self.matched)

    @property
    def insufficient_data(self) -> list[str]:
        return [
            e.symbol
            for e in self.evaluations
            if e.status == EvaluationStatus.INSUFFICIENT_DATA
        ]
