"""Engine configuration schema and validation."""

import logging
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from oddsengine.models import (
    DEFAULT_DEVIG_METHODS,
    SHARP_PRESETS,
    ComparisonMode,
    DevigMethod,
    EVCase,
)


class EngineConfig(BaseSettings):
    """Engine configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    env: Literal["dev", "staging", "prod"] = Field(
        default="dev",
        description="Application environment",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    devig_methods: list[DevigMethod] = Field(
        default=list(DEFAULT_DEVIG_METHODS),
        min_length=1,
        description="De-vig methods evaluated when the caller selects none",
    )
    devig_max_iter: int = Field(
        default=200,
        ge=10,
        le=10000,
        description="Iteration bound for power/probit root finding",
    )
    devig_tolerance: float = Field(
        default=1e-9,
        gt=0.0,
        le=1e-6,
        description="Convergence tolerance for power/probit root finding",
    )
    devig_fallback: bool = Field(
        default=True,
        description="Substitute multiplicative fair probabilities when a method fails",
    )
    sharp_preset: str = Field(
        default="market_average",
        description="Sharp reference preset used to build fair probabilities",
    )
    ev_case: EVCase = Field(
        default=EVCase.WORST,
        description="Aggregate EV surfaced by default (worst = conservative)",
    )
    min_ev: float = Field(
        default=0.0,
        description="Minimum EV percent for an opportunity to pass the filter",
    )
    max_ev: float = Field(
        default=20.0,
        description="Maximum EV percent; higher values are treated as data errors",
    )
    comparison_mode: ComparisonMode = Field(
        default=ComparisonMode.AVERAGE,
        description="Baseline used for the price improvement percentage",
    )
    comparison_book: str | None = Field(
        default=None,
        description="Reference book for 'book' comparison mode",
    )
    min_books_per_side: int = Field(
        default=2,
        ge=1,
        le=50,
        description="Minimum quoting books before a comparison baseline is produced",
    )
    bankroll: float = Field(
        default=1000.0,
        description="Default bankroll for stake recommendations",
    )
    kelly_percent: float = Field(
        default=25.0,
        gt=0.0,
        le=100.0,
        description="Fractional Kelly throttle (25 = quarter Kelly)",
    )
    boost_percent: float = Field(
        default=0.0,
        ge=0.0,
        le=500.0,
        description="Promotional profit boost percent",
    )
    min_edge_pct: float = Field(
        default=0.0,
        ge=0.0,
        description="User filter for the matrix edge strip (the 5% floor always applies)",
    )

    @field_validator("sharp_preset")
    @classmethod
    def validate_sharp_preset(cls, v: str) -> str:
        """Ensure the preset is known."""
        if v not in SHARP_PRESETS:
            raise ValueError(f"Unknown sharp preset: {v}")
        return v

    @field_validator("max_ev")
    @classmethod
    def validate_max_ev(cls, v: float, info) -> float:
        """Ensure max_ev >= min_ev."""
        if "min_ev" in info.data and v < info.data["min_ev"]:
            raise ValueError("max_ev must be >= min_ev")
        return v


_config: EngineConfig | None = None


def get_config() -> EngineConfig:
    """Get or create the singleton EngineConfig instance."""
    global _config
    if _config is None:
        _config = EngineConfig()
    return _config


def configure_logging(config: EngineConfig | None = None) -> None:
    """Configure root logging and the package logger level from config."""
    config = config or get_config()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logging.getLogger("oddsengine").setLevel(config.log_level)
