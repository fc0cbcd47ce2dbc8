"""
MRR Trend Service

Compares the roster's current monthly recurring revenue against the prior
period's aggregate MRR supplied by the historical data source, and classifies
the trend direction.

Formulas:
- currentMRR    = sum(mrr) over clients whose subscription is active
- growth        = currentMRR - previousMRR
- growthPercent = growth / previousMRR x 100 (0 when previousMRR is 0)
- trend         = up if growthPercent > band, down if < -band, else flat
                  (band defaults to 2.0 percent)
- avgMRR        = currentMRR / total clients (0 for an empty roster)

Historical Data:
    The engine never estimates the prior period. When no prior-period value
    is available, or the supplied value is negative or non-finite, the bundle
    is flagged ``incomplete`` and the growth fields keep their guarded
    defaults (0, flat).

Sample Policy:
    Rosters below ``mrr_min_sample`` (default 2) are flagged
    ``insufficientSample``; values are still computed.
"""

import logging
import math
from typing import Optional, Sequence

from portfolio_metrics.core.config import Settings, get_settings
from portfolio_metrics.models import (
    CalculatorName,
    ClientRecord,
    HistoricalSeries,
    MRRTrend,
    TrendDirection,
)
from portfolio_metrics.services.revenue import recurring_revenue
from portfolio_metrics.services.validation import check_mrr, partition_valid_records

logger = logging.getLogger(__name__)


def previous_period_mrr_from_series(series: Optional[HistoricalSeries]) -> Optional[float]:
    """
    Pick the previous-period MRR from a historical series.

    The two most recent points (by period) are consumed: the newest is the
    current period as booked by the history source, the one before it is
    the previous period.

    Args:
        series: Historical MRR series, or None when the source supplied none.

    Returns:
        Previous-period aggregate MRR, or None when fewer than two points
        are available.
    """
    if series is None or len(series.points) < 2:
        return None
    ordered = sorted(series.points, key=lambda p: p.period)
    return float(ordered[-2].mrr)


def classify_trend(growth_percent: float, settings: Optional[Settings] = None) -> TrendDirection:
    """Classify growth against the symmetric flat band (band edges are flat)."""
    settings = settings or get_settings()
    band = settings.mrr_trend_band_percent
    if growth_percent > band:
        return TrendDirection.UP
    if growth_percent < -band:
        return TrendDirection.DOWN
    return TrendDirection.FLAT


def calculate_mrr_trend(
    clients: Sequence[ClientRecord],
    previous_period_mrr: Optional[float],
    *,
    strict: bool = False,
    settings: Optional[Settings] = None,
) -> MRRTrend:
    """
    Compute current MRR and its growth against the previous period.

    Args:
        clients: Client roster snapshot.
        previous_period_mrr: Aggregate MRR of the previous period, or None
            when the historical source has no value.
        strict: Raise InvalidRecordError on negative MRR instead of reporting
            and excluding the record.
        settings: Threshold source; defaults to get_settings().

    Returns:
        MRRTrend bundle.

    Example:
        >>> trend = calculate_mrr_trend(clients_totalling_11000, 10000.0)
        >>> trend.growthPercent, trend.trend
        (10.0, <TrendDirection.UP: 'up'>)
    """
    settings = settings or get_settings()
    valid, issues = partition_valid_records(
        clients,
        checks=(check_mrr,),
        calculator=CalculatorName.MRR_TREND,
        strict=strict,
    )

    total = len(valid)
    current_mrr = sum(recurring_revenue(c) for c in valid)
    avg_mrr = current_mrr / total if total > 0 else 0.0
    insufficient = total < settings.mrr_min_sample

    if previous_period_mrr is None:
        logger.info("No previous-period MRR supplied; MRR trend is incomplete")
    elif not (math.isfinite(previous_period_mrr) and previous_period_mrr >= 0):
        logger.warning(
            f"Ignoring malformed previous-period MRR {previous_period_mrr!r}; "
            f"MRR trend is incomplete"
        )
        previous_period_mrr = None

    if previous_period_mrr is None:
        return MRRTrend(
            currentMRR=current_mrr,
            avgMRR=avg_mrr,
            totalClients=total,
            insufficientSample=insufficient,
            incomplete=True,
            issues=tuple(issues),
        )

    previous_mrr = float(previous_period_mrr)
    growth = current_mrr - previous_mrr
    growth_percent = growth * 100 / previous_mrr if previous_mrr > 0 else 0.0

    return MRRTrend(
        currentMRR=current_mrr,
        previousMRR=previous_mrr,
        growth=growth,
        growthPercent=growth_percent,
        trend=classify_trend(growth_percent, settings),
        avgMRR=avg_mrr,
        totalClients=total,
        insufficientSample=insufficient,
        incomplete=False,
        issues=tuple(issues),
    )
