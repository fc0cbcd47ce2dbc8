"""
Health Distribution Service

Buckets the client roster into three disjoint health bands and computes the
average health score.

Bands (default thresholds, configurable via Settings):
- healthy: score >= 70
- warning: 40 <= score < 70
- critical: score < 40

A missing health score counts as 0 (critical). Percentages are returned
unrounded; callers choose display precision.

Sample Policy:
    Distributions over fewer than ``health_min_sample`` (default 5) clients
    are flagged ``insufficientSample`` so the presentation layer can show a
    placeholder. The raw numbers are still returned.

Invalid Records:
    Scores outside [0, 100] are reported as RecordIssues and the record is
    left out of every count, including ``total``.
"""

import logging
from typing import Optional, Sequence

import numpy as np

from portfolio_metrics.core.config import Settings, get_settings
from portfolio_metrics.models import (
    BucketStat,
    CalculatorName,
    ClientRecord,
    HealthBand,
    HealthDistribution,
)
from portfolio_metrics.services.validation import (
    check_health_score,
    health_score,
    partition_valid_records,
    percentage,
)

logger = logging.getLogger(__name__)


def classify_health_band(score: float, settings: Optional[Settings] = None) -> HealthBand:
    """
    Map a health score to its band.

    Args:
        score: Health score (0 for missing).
        settings: Threshold source; defaults to get_settings().

    Returns:
        HealthBand for the score.
    """
    settings = settings or get_settings()
    if score >= settings.healthy_min_score:
        return HealthBand.HEALTHY
    if score >= settings.warning_min_score:
        return HealthBand.WARNING
    return HealthBand.CRITICAL


def calculate_health_distribution(
    clients: Sequence[ClientRecord],
    *,
    strict: bool = False,
    settings: Optional[Settings] = None,
) -> HealthDistribution:
    """
    Compute the health band distribution for a roster.

    Args:
        clients: Client roster snapshot.
        strict: Raise InvalidRecordError on an out-of-range score instead of
            reporting and excluding it.
        settings: Threshold source; defaults to get_settings().

    Returns:
        HealthDistribution with counts, unrounded percentages, average score,
        total, the insufficient-sample flag and any record issues.

    Example:
        >>> dist = calculate_health_distribution(clients)
        >>> dist.healthy.count + dist.warning.count + dist.critical.count == dist.total
        True
    """
    settings = settings or get_settings()
    valid, issues = partition_valid_records(
        clients,
        checks=(check_health_score,),
        calculator=CalculatorName.HEALTH_DISTRIBUTION,
        strict=strict,
    )

    total = len(valid)
    insufficient = total < settings.health_min_sample

    if total == 0:
        return HealthDistribution(
            insufficientSample=insufficient,
            issues=tuple(issues),
        )

    scores = np.array([health_score(c) for c in valid], dtype=float)

    healthy_count = int(np.count_nonzero(scores >= settings.healthy_min_score))
    warning_count = int(np.count_nonzero(
        (scores >= settings.warning_min_score) & (scores < settings.healthy_min_score)
    ))
    critical_count = total - healthy_count - warning_count

    if insufficient:
        logger.info(
            f"Health distribution over {total} clients is below the "
            f"display threshold of {settings.health_min_sample}"
        )

    return HealthDistribution(
        healthy=BucketStat(count=healthy_count, percentage=percentage(healthy_count, total)),
        warning=BucketStat(count=warning_count, percentage=percentage(warning_count, total)),
        critical=BucketStat(count=critical_count, percentage=percentage(critical_count, total)),
        avgHealth=float(np.mean(scores)),
        total=total,
        insufficientSample=insufficient,
        issues=tuple(issues),
    )
