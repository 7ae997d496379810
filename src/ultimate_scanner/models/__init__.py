"""Data models for the ultimate scanner."""

from ultimate_scanner.models.scan import (
    EvaluationStatus,
    Resolution,
    ScanReport,
    ScanRequest,
    ScanTier,
    SymbolEvaluation,
)
from ultimate_scanner.models.series import (
    OHLCV,
    OHLCVSeries,
    StockInput,
    series_to_dataframe,
)

__all__ = [
    # Series models
    "OHLCV",
    "OHLCVSeries",
    "StockInput",
    "series_to_dataframe",
    # Scan models
    "EvaluationStatus",
    "Resolution",
    "ScanReport",
    "ScanRequest",
    "ScanTier",
    "SymbolEvaluation",
]
