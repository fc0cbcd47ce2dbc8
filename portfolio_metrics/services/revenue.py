"""
Revenue Composition Service

Splits the roster's current-period revenue into recurring and one-time parts.

Formulas:
- monthlyRecurring = sum(mrr) over clients with an active subscription
- oneTimeRevenue   = sum(oneTimeRevenue) over all clients
- totalRevenue     = monthlyRecurring + oneTimeRevenue
- recurringShare   = monthlyRecurring / totalRevenue x 100 (0 when total is 0)
- oneTimeShare     = oneTimeRevenue / totalRevenue x 100 (0 when total is 0)
- avgDealSize      = totalRevenue / max(total, 1)

All figures are derived from the roster alone.
"""

from typing import Sequence

from portfolio_metrics.models import CalculatorName, ClientRecord, RevenueMetrics
from portfolio_metrics.services.validation import (
    check_mrr,
    check_one_time_revenue,
    is_active,
    partition_valid_records,
)


def recurring_revenue(client: ClientRecord) -> float:
    """MRR counted toward revenue: the billed MRR when active, else 0."""
    return float(client.mrr) if is_active(client) else 0.0


def analyze_revenue(
    clients: Sequence[ClientRecord],
    *,
    strict: bool = False,
) -> RevenueMetrics:
    """
    Compute revenue composition for a roster.

    Args:
        clients: Client roster snapshot.
        strict: Raise InvalidRecordError on negative revenue instead of
            reporting and excluding the record.

    Returns:
        RevenueMetrics bundle. ``avgDealSize`` floors its divisor at 1, so an
        empty roster yields 0.
    """
    valid, issues = partition_valid_records(
        clients,
        checks=(check_mrr, check_one_time_revenue),
        calculator=CalculatorName.REVENUE,
        strict=strict,
    )

    monthly_recurring = sum(recurring_revenue(c) for c in valid)
    one_time = sum(float(c.oneTimeRevenue) for c in valid)
    total_revenue = monthly_recurring + one_time

    if total_revenue > 0:
        recurring_share = monthly_recurring / total_revenue * 100
        one_time_share = one_time / total_revenue * 100
    else:
        recurring_share = 0.0
        one_time_share = 0.0

    return RevenueMetrics(
        totalRevenue=total_revenue,
        monthlyRecurring=monthly_recurring,
        oneTimeRevenue=one_time,
        recurringShare=recurring_share,
        oneTimeShare=one_time_share,
        avgDealSize=total_revenue / max(len(valid), 1),
        total=len(valid),
        issues=tuple(issues),
    )
