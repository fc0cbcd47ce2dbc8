"""
Net Promoter Score Service

Classifies raw 0-10 survey responses and computes the NPS.

Categories:
- promoter: score >= 9
- passive: 7 <= score <= 8
- detractor: score <= 6

Formula:
    NPS = round_half_away_from_zero((promoters - detractors) / total x 100)

Labels:
    >= 70 Excellent, >= 50 Great, >= 30 Good, >= 0 Needs Work, else Critical

Zero responses yield score 0 / "Needs Work". A missing response list (None)
yields the same defaults flagged ``incomplete``. Responses outside [0, 10]
are reported as RecordIssues and excluded.
"""

import logging
import math
from numbers import Real
from typing import Iterable, List, Optional

from portfolio_metrics.core.errors import InvalidRecordError
from portfolio_metrics.models import (
    BucketStat,
    CalculatorName,
    NPSCategory,
    NPSLabel,
    NPSResult,
    RecordIssue,
    ScoreSeverity,
)
from portfolio_metrics.services.validation import percentage, round_half_away_from_zero

logger = logging.getLogger(__name__)

PROMOTER_MIN_SCORE = 9
PASSIVE_MIN_SCORE = 7

# Checked top-down; first threshold the score reaches wins
NPS_LABEL_THRESHOLDS = (
    (70, NPSLabel.EXCELLENT),
    (50, NPSLabel.GREAT),
    (30, NPSLabel.GOOD),
    (0, NPSLabel.NEEDS_WORK),
)


def classify_response(score: float) -> NPSCategory:
    if score >= PROMOTER_MIN_SCORE:
        return NPSCategory.PROMOTER
    if score >= PASSIVE_MIN_SCORE:
        return NPSCategory.PASSIVE
    return NPSCategory.DETRACTOR


def get_nps_label(score: float) -> NPSLabel:
    for threshold, label in NPS_LABEL_THRESHOLDS:
        if score >= threshold:
            return label
    return NPSLabel.CRITICAL


def get_nps_severity(score: float) -> ScoreSeverity:
    if score >= 50:
        return ScoreSeverity.SUCCESS
    if score >= 0:
        return ScoreSeverity.WARNING
    return ScoreSeverity.DANGER


def _is_valid_response(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    return math.isfinite(value) and 0 <= value <= 10


def calculate_nps(
    responses: Optional[Iterable[float]],
    *,
    strict: bool = False,
) -> NPSResult:
    """
    Compute the Net Promoter Score from raw survey responses.

    Args:
        responses: Scores on the 0-10 scale, or None when the survey source
            supplied nothing.
        strict: Raise InvalidRecordError on an out-of-range response instead
            of reporting and excluding it.

    Returns:
        NPSResult bundle.

    Example:
        >>> result = calculate_nps([10] * 45 + [8] * 40 + [3] * 15)
        >>> result.score, result.label
        (30, <NPSLabel.GOOD: 'Good'>)
    """
    if responses is None:
        logger.info("No survey responses supplied; NPS is incomplete")
        return NPSResult(incomplete=True)

    issues: List[RecordIssue] = []
    counts = {category: 0 for category in NPSCategory}

    for index, value in enumerate(responses):
        if not _is_valid_response(value):
            issue = RecordIssue(
                calculator=CalculatorName.NPS,
                recordId=None,
                index=index,
                field='response',
                value=value,
                message='survey response must be a number between 0 and 10',
            )
            if strict:
                raise InvalidRecordError(issue)
            logger.warning(f"nps: excluding response at index {index}: {value!r}")
            issues.append(issue)
            continue
        counts[classify_response(value)] += 1

    total = sum(counts.values())
    promoters = counts[NPSCategory.PROMOTER]
    passives = counts[NPSCategory.PASSIVE]
    detractors = counts[NPSCategory.DETRACTOR]

    if total == 0:
        return NPSResult(issues=tuple(issues))

    score = round_half_away_from_zero((promoters - detractors) * 100 / total)

    return NPSResult(
        promoters=BucketStat(count=promoters, percentage=percentage(promoters, total)),
        passives=BucketStat(count=passives, percentage=percentage(passives, total)),
        detractors=BucketStat(count=detractors, percentage=percentage(detractors, total)),
        totalResponses=total,
        score=score,
        label=get_nps_label(score),
        category=get_nps_severity(score),
        incomplete=False,
        issues=tuple(issues),
    )
