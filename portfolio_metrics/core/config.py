"""
Settings and environment management for the portfolio metrics engine.

This module provides centralized configuration using pydantic-settings, which
loads values from environment variables (prefixed ``PORTFOLIO_METRICS_``) and
an optional ``.env`` file.

Key Features:
- Environment variable validation and type coercion
- Dashboard thresholds with defaults that match the client dashboard
- Singleton pattern via @lru_cache for efficient access

Threshold Defaults:
- healthy_min_score: 70 (score at or above is Healthy)
- warning_min_score: 40 (score at or above, below healthy, is Warning)
- health_min_sample: 5 (roster size below which the distribution is flagged)
- mrr_min_sample: 2 (roster size below which the MRR trend is flagged)
- mrr_trend_band_percent: 2.0 (growth inside +/- band is "flat")
- renewal_soon_days: 30 (days until renewal below which it is expiring soon)
- renewal_quarter_days: 90 (days until renewal below which it is due this quarter)
- at_risk_health_threshold: 50 (portfolio totals count scores below as at risk)
- upcoming_renewal_days: 90 (look-ahead window for the upcoming renewals list)
- unlock_coverage_threshold: 0.5 (share of clients needed to unlock analytics)

Usage:
    from portfolio_metrics.core.config import get_settings

    settings = get_settings()
    threshold = settings.healthy_min_score
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Engine settings loaded from environment variables.

    Every field can be overridden with ``PORTFOLIO_METRICS_<FIELD_NAME>``,
    e.g. ``PORTFOLIO_METRICS_HEALTH_MIN_SAMPLE=10``.

    Attributes:
        healthy_min_score: Lower bound (inclusive) of the Healthy band.
        warning_min_score: Lower bound (inclusive) of the Warning band.
        health_min_sample: Minimum roster size for a displayable distribution.
        mrr_min_sample: Minimum roster size for a displayable MRR trend.
        mrr_trend_band_percent: Half-width of the "flat" growth band.
        renewal_soon_days: Upper bound (exclusive) of the Expiring Soon bucket.
        renewal_quarter_days: Upper bound (exclusive) of the Due This Quarter bucket.
        at_risk_health_threshold: Health score below which a client is at risk.
        upcoming_renewal_days: Default look-ahead for upcoming renewals.
        unlock_coverage_threshold: Fraction of clients that must carry the
            fields of an analytics group before it is unlocked.
        log_level: Level applied by configure_logging().
    """

    model_config = SettingsConfigDict(
        env_prefix='PORTFOLIO_METRICS_',
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore',
        case_sensitive=False,
    )

    # =========================================================================
    # Health Distribution
    # =========================================================================

    healthy_min_score: float = Field(default=70.0, ge=0, le=100)
    warning_min_score: float = Field(default=40.0, ge=0, le=100)
    health_min_sample: int = Field(default=5, ge=0)

    # =========================================================================
    # MRR Trend
    # =========================================================================

    mrr_min_sample: int = Field(default=2, ge=0)
    mrr_trend_band_percent: float = Field(default=2.0, ge=0)

    # =========================================================================
    # Renewal Pipeline
    # Boundaries are inclusive-lower on the next bucket: 30 days is
    # "due this quarter", 90 days is a "future renewal".
    # =========================================================================

    renewal_soon_days: int = Field(default=30, ge=0)
    renewal_quarter_days: int = Field(default=90, ge=0)

    # =========================================================================
    # Portfolio Summary
    # =========================================================================

    at_risk_health_threshold: float = Field(default=50.0, ge=0, le=100)
    upcoming_renewal_days: int = Field(default=90, ge=0)
    unlock_coverage_threshold: float = Field(default=0.5, ge=0, le=1)

    log_level: str = 'INFO'


@lru_cache()
def get_settings() -> Settings:
    """
    Get the engine settings singleton.

    Returns:
        Settings: The cached settings instance.

    Raises:
        pydantic.ValidationError: If an environment override has an invalid
            value (e.g. a negative sample size).

    Note:
        To refresh settings in tests, clear the cache:
        >>> get_settings.cache_clear()
    """
    return Settings()
