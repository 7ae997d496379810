"""Ultimate Scanner - MACD, Supertrend and squeeze scans across a symbol universe."""

from .config import ScannerConfig, get_config
from .ingest.batch import BatchFetchResult, BatchSettings, fetch_series_batch
from .models import (
    OHLCV,
    EvaluationStatus,
    OHLCVSeries,
    Resolution,
    ScanReport,
    ScanRequest,
    ScanTier,
    StockInput,
    SymbolEvaluation,
)
from .scanner import Scanner
from .scanning.tiers import IndicatorParams, evaluate_stock, scan

__version__ = "0.1.0"

__all__ = [
    "Scanner",
    "ScannerConfig",
    "get_config",
    "BatchFetchResult",
    "BatchSettings",
    "fetch_series_batch",
    "IndicatorParams",
    "evaluate_stock",
    "scan",
    "OHLCV",
    "OHLCVSeries",
    "StockInput",
    "EvaluationStatus",
    "Resolution",
    "ScanReport",
    "ScanRequest",
    "ScanTier",
    "SymbolEvaluation",
]
