"""Scan tiers applied across a symbol universe."""

from ultimate_scanner.scanning.tiers import (
    CRITERIA,
    TIER_CRITERIA,
    IndicatorParams,
    IndicatorSnapshot,
    evaluate_stock,
    evaluate_universe,
    scan,
    scan_basic,
    scan_below_zero,
    scan_combo,
    scan_ultimate,
)

__all__ = [
    "CRITERIA",
    "TIER_CRITERIA",
    "IndicatorParams",
    "IndicatorSnapshot",
    "evaluate_stock",
    "evaluate_universe",
    "scan",
    "scan_basic",
    "scan_below_zero",
    "scan_combo",
    "scan_ultimate",
]
