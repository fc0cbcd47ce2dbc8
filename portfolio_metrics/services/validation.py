"""
Client Record Validation Service

Shared record accessors and InvalidRecord checks used by every calculator.

A record that fails a check is reported as a RecordIssue and excluded from the
calculator that ran the check. It is never clamped into range. With ``strict=True`` the
first failure raises InvalidRecordError instead.

Checks:
- health.score must lie in [0, 100] (a missing score is valid and counts as 0)
- mrr must be a finite number >= 0
- oneTimeRevenue must be a finite number >= 0
- contract.value, when present, must be a finite number >= 0
"""

import logging
import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Callable, List, Optional, Sequence, Tuple

from portfolio_metrics.core.errors import InvalidRecordError
from portfolio_metrics.models import CalculatorName, ClientRecord, RecordIssue, SubscriptionStatus

logger = logging.getLogger(__name__)

# (field path, offending value, message) or None when the record passes
CheckFailure = Optional[Tuple[str, Any, str]]
RecordCheck = Callable[[ClientRecord], CheckFailure]


# =============================================================================
# Record Accessors
# =============================================================================


def health_score(client: ClientRecord) -> float:
    """Health score with missing treated as 0."""
    if client.health is None or client.health.score is None:
        return 0.0
    return float(client.health.score)


def is_active(client: ClientRecord) -> bool:
    return (
        client.subscription is not None
        and client.subscription.status == SubscriptionStatus.ACTIVE
    )


def contract_value(client: ClientRecord) -> float:
    if client.contract is None or client.contract.value is None:
        return 0.0
    return float(client.contract.value)


def percentage(count: int, total: int) -> float:
    """count / total x 100, unrounded; 0 when total is 0."""
    if total <= 0:
        return 0.0
    return count / total * 100


def round_half_away_from_zero(value: float) -> int:
    """
    Round to the nearest integer, ties away from zero.

    Python's built-in round() uses banker's rounding (round(30.5) == 30);
    NPS scores use the conventional rule instead (30.5 -> 31, -30.5 -> -31).
    """
    return int(Decimal(str(float(value))).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


# =============================================================================
# Checks
# =============================================================================


def check_health_score(client: ClientRecord) -> CheckFailure:
    if client.health is None or client.health.score is None:
        return None
    score = client.health.score
    if not (0 <= score <= 100):
        return ('health.score', score, 'health score must be between 0 and 100')
    return None


def _check_non_negative(field_path: str, value: Optional[float]) -> CheckFailure:
    if value is None:
        return None
    if not math.isfinite(value) or value < 0:
        return (field_path, value, f'{field_path} must be a non-negative number')
    return None


def check_mrr(client: ClientRecord) -> CheckFailure:
    return _check_non_negative('mrr', client.mrr)


def check_one_time_revenue(client: ClientRecord) -> CheckFailure:
    return _check_non_negative('oneTimeRevenue', client.oneTimeRevenue)


def check_contract_value(client: ClientRecord) -> CheckFailure:
    value = client.contract.value if client.contract is not None else None
    return _check_non_negative('contract.value', value)


ALL_CHECKS: Tuple[RecordCheck, ...] = (
    check_health_score,
    check_mrr,
    check_one_time_revenue,
    check_contract_value,
)


# =============================================================================
# Public API
# =============================================================================


def validate_client_record(
    client: ClientRecord,
    index: int = 0,
    calculator: CalculatorName = CalculatorName.INGESTION,
    checks: Sequence[RecordCheck] = ALL_CHECKS,
) -> List[RecordIssue]:
    """
    Run range checks against a single record.

    Args:
        client: The record to check.
        index: Position of the record in its roster (reported in issues).
        calculator: Calculator to attribute the issues to.
        checks: Checks to run; defaults to every check.

    Returns:
        One RecordIssue per failed check; empty when the record is valid.
    """
    issues: List[RecordIssue] = []
    for check in checks:
        failure = check(client)
        if failure is None:
            continue
        field_path, value, message = failure
        issues.append(RecordIssue(
            calculator=calculator,
            recordId=client.id,
            index=index,
            field=field_path,
            value=value,
            message=message,
        ))
    return issues


def partition_valid_records(
    clients: Sequence[ClientRecord],
    checks: Sequence[RecordCheck],
    calculator: CalculatorName,
    strict: bool = False,
) -> Tuple[List[ClientRecord], List[RecordIssue]]:
    """
    Split a roster into records that pass ``checks`` and the issues found.

    Args:
        clients: Roster in its original order.
        checks: Checks the calculator depends on.
        calculator: Calculator name used in the reported issues.
        strict: Raise InvalidRecordError on the first failure instead of
            collecting it.

    Returns:
        Tuple of (valid records in original order, issues).

    Raises:
        InvalidRecordError: In strict mode, for the first invalid record.
    """
    valid: List[ClientRecord] = []
    issues: List[RecordIssue] = []

    for index, client in enumerate(clients):
        record_issues = validate_client_record(client, index, calculator, checks)
        if not record_issues:
            valid.append(client)
            continue
        if strict:
            raise InvalidRecordError(record_issues[0])
        for issue in record_issues:
            logger.warning(
                f"{calculator.value}: excluding record {issue.recordId!r} "
                f"at index {index}: {issue.field}={issue.value!r} ({issue.message})"
            )
        issues.extend(record_issues)

    return valid, issues
