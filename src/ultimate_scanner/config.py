"""Configuration management for the ultimate scanner.

Settings load from environment variables (prefix ``ULTIMATE_SCANNER_``) and an
optional ``.env`` file. Only the CLI reads them; providers, the batch
orchestrator and the scanner receive values explicitly.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ultimate_scanner.scanning.tiers import IndicatorParams

DataSource = Literal["finnhub", "yahoo"]


class ScannerConfig(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="ULTIMATE_SCANNER_",
        case_sensitive=False,
        extra="ignore",
    )

    # Data source
    finnhub_api_key: str = Field(
        default="",
        description="Finnhub API key",
    )
    data_source: Optional[DataSource] = Field(
        default=None,
        description="finnhub or yahoo; defaults to finnhub when a key is set",
    )
    finnhub_base_url: str = Field(default="https://finnhub.io/api/v1")
    request_timeout_seconds: float = Field(default=30.0, gt=0)

    # Batch pacing (per provider)
    finnhub_batch_size: int = Field(
        default=5,
        ge=1,
        description="Concurrent fetches per window (Finnhub free tier is strict)",
    )
    finnhub_batch_delay_seconds: float = Field(
        default=1.0,
        ge=0,
        description="Pause between Finnhub windows",
    )
    yahoo_batch_size: int = Field(default=10, ge=1)
    yahoo_batch_delay_seconds: float = Field(default=0.5, ge=0)

    # Scan defaults
    default_lookback_days: int = Field(default=100, ge=1)
    default_resolution: Literal["D", "W", "M"] = Field(default="D")

    # Indicator parameters
    macd_fast: int = Field(default=12, ge=1)
    macd_slow: int = Field(default=26, ge=2)
    macd_signal: int = Field(default=9, ge=1)
    supertrend_period: int = Field(default=10, ge=1)
    supertrend_multiplier: float = Field(default=3.0, gt=0)
    squeeze_period: int = Field(default=20, ge=1)
    squeeze_bb_mult: float = Field(default=2.0, gt=0)
    squeeze_kc_mult: float = Field(default=1.5, gt=0)

    # Alerts
    discord_webhook_url: str = Field(default="")
    discord_alerts_enabled: bool = Field(default=False)
    display_limit: int = Field(
        default=20,
        ge=1,
        description="Max symbols listed in summaries before '+N more'",
    )

    # Logging
    log_level: str = Field(default="WARNING")
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    @model_validator(mode="after")
    def check_macd_periods(self) -> "ScannerConfig":
        if self.macd_fast >= self.macd_slow:
            raise ValueError(
                f"macd_fast ({self.macd_fast}) must be shorter than macd_slow ({self.macd_slow})"
            )
        return self

    @property
    def resolved_data_source(self) -> DataSource:
        """Explicit data_source, else finnhub when a key is configured."""
        if self.data_source:
            return self.data_source
        return "finnhub" if self.finnhub_api_key else "yahoo"

    def indicator_params(self) -> IndicatorParams:
        return IndicatorParams(
            macd_fast=self.macd_fast,
            macd_slow=self.macd_slow,
            macd_signal=self.macd_signal,
            supertrend_period=self.supertrend_period,
            supertrend_multiplier=self.supertrend_multiplier,
            squeeze_period=self.squeeze_period,
            squeeze_bb_mult=self.squeeze_bb_mult,
            squeeze_kc_mult=self.squeeze_kc_mult,
        )


@lru_cache
def get_config() -> ScannerConfig:
    """Get cached configuration instance."""
    return ScannerConfig()
