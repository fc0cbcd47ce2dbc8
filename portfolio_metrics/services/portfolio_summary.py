"""
Portfolio Summary Service

Headline KPIs and list views that sit next to the metric bundles on the
client dashboard:

- calculate_portfolio_totals: total clients, at-risk count, total MRR,
  average health (stats row)
- calculate_churn_risk: clients grouped by churn risk with follow-up actions
- find_upcoming_renewals: renewals due within a look-ahead window
- determine_unlocked_analytics: analytics groups whose required fields are
  carried by enough of the roster

Like the calculators, every function here is a pure function of its inputs.
"""

from datetime import date, timedelta
from typing import List, Optional, Sequence, Set

from portfolio_metrics.core.config import Settings, get_settings
from portfolio_metrics.models import (
    ActionPriority,
    AnalyticsGroup,
    ChurnAction,
    ChurnRisk,
    ChurnRiskSummary,
    ClientRecord,
    PortfolioTotals,
    UpcomingRenewal,
)
from portfolio_metrics.services.validation import (
    contract_value,
    health_score,
    percentage,
    round_half_away_from_zero,
)

HIGH_RISK_LEVELS = {ChurnRisk.HIGH, ChurnRisk.CRITICAL}
MEDIUM_RISK_LEVELS = {ChurnRisk.MEDIUM, ChurnRisk.MODERATE}

# A medium-priority review action is suggested above this many medium-risk clients
MEDIUM_RISK_ACTION_MIN = 2


def _churn_risk(client: ClientRecord) -> Optional[ChurnRisk]:
    return client.churn.risk if client.churn is not None else None


def _renewal_date(client: ClientRecord) -> Optional[date]:
    return client.renewal.date if client.renewal is not None else None


# =============================================================================
# Stats Row
# =============================================================================


def calculate_portfolio_totals(
    clients: Sequence[ClientRecord],
    settings: Optional[Settings] = None,
) -> PortfolioTotals:
    """
    Compute the dashboard's headline totals.

    - atRisk: churn risk high/critical OR health score below the at-risk
      threshold (default 50; a missing score counts as 0)
    - totalMRR: sum of billed MRR across all clients
    - avgHealth: mean of the positive health scores, rounded to a whole
      number; 0 when no client has a positive score

    Args:
        clients: Client roster snapshot.
        settings: Threshold source; defaults to get_settings().

    Returns:
        PortfolioTotals; all zero for an empty roster.
    """
    settings = settings or get_settings()
    if not clients:
        return PortfolioTotals()

    at_risk = sum(
        1 for c in clients
        if _churn_risk(c) in HIGH_RISK_LEVELS
        or health_score(c) < settings.at_risk_health_threshold
    )
    total_mrr = sum(float(c.mrr or 0) for c in clients)

    positive_scores = [s for s in (health_score(c) for c in clients) if s > 0]
    avg_health = (
        round_half_away_from_zero(sum(positive_scores) / len(positive_scores))
        if positive_scores
        else 0
    )

    return PortfolioTotals(
        totalClients=len(clients),
        atRisk=at_risk,
        totalMRR=total_mrr,
        avgHealth=avg_health,
    )


def calculate_churn_risk(clients: Sequence[ClientRecord]) -> ChurnRiskSummary:
    """
    Group clients by churn risk and suggest follow-up actions.

    high = high + critical, medium = medium + moderate. Clients with no
    assessed risk fall in none of the groups but still count toward the
    risk score denominator.
    """
    if not clients:
        return ChurnRiskSummary()

    high = tuple(c.id for c in clients if _churn_risk(c) in HIGH_RISK_LEVELS)
    medium = tuple(c.id for c in clients if _churn_risk(c) in MEDIUM_RISK_LEVELS)
    low = tuple(c.id for c in clients if _churn_risk(c) == ChurnRisk.LOW)
    total_at_risk = len(high) + len(medium)

    actions: List[ChurnAction] = []
    if high:
        actions.append(ChurnAction(
            priority=ActionPriority.HIGH,
            text=f"{len(high)} clients need immediate attention",
            count=len(high),
        ))
    if len(medium) > MEDIUM_RISK_ACTION_MIN:
        actions.append(ChurnAction(
            priority=ActionPriority.MEDIUM,
            text=f"Review {len(medium)} at-risk clients",
            count=len(medium),
        ))

    return ChurnRiskSummary(
        high=high,
        medium=medium,
        low=low,
        totalAtRisk=total_at_risk,
        riskScore=percentage(total_at_risk, len(clients)),
        actions=tuple(actions),
    )


# =============================================================================
# Upcoming Renewals
# =============================================================================


def find_upcoming_renewals(
    clients: Sequence[ClientRecord],
    as_of: date,
    days: Optional[int] = None,
    limit: Optional[int] = None,
) -> List[UpcomingRenewal]:
    """
    List renewals falling within ``[as_of, as_of + days]``, soonest first.

    Args:
        clients: Client roster snapshot.
        as_of: Reference date.
        days: Look-ahead window; defaults to Settings.upcoming_renewal_days.
        limit: Maximum rows to return; None or non-positive returns all.

    Returns:
        UpcomingRenewal rows sorted by renewal date (ties keep roster order).
    """
    if days is None:
        days = get_settings().upcoming_renewal_days
    horizon = as_of + timedelta(days=days)

    rows: List[UpcomingRenewal] = []
    for client in clients:
        renewal_date = _renewal_date(client)
        if renewal_date is None or not (as_of <= renewal_date <= horizon):
            continue
        risk = _churn_risk(client)
        rows.append(UpcomingRenewal(
            id=client.id,
            companyName=client.company.name if client.company else None,
            renewalDate=renewal_date,
            contractValue=contract_value(client),
            mrr=float(client.mrr or 0),
            healthScore=health_score(client),
            churnRisk=risk.value if risk is not None else "unknown",
            contactName=client.contact.name if client.contact else None,
            csmOwner=client.csm.owner if client.csm else None,
            daysUntilRenewal=(renewal_date - as_of).days,
        ))

    rows.sort(key=lambda row: row.renewalDate)

    if limit is not None and limit > 0:
        return rows[:limit]
    return rows


# =============================================================================
# Analytics Unlock Matrix
# =============================================================================


def _has_revenue_fields(c: ClientRecord) -> bool:
    return 'mrr' in c.model_fields_set and _renewal_date(c) is not None


def _has_retention_fields(c: ClientRecord) -> bool:
    return c.subscribedMonths is not None and _renewal_date(c) is not None


def _has_health_fields(c: ClientRecord) -> bool:
    return (
        c.health is not None and c.health.score is not None
        and c.usage is not None and c.usage.last30d is not None
    )


def _has_satisfaction_fields(c: ClientRecord) -> bool:
    return c.nps is not None and c.nps.score is not None and bool(c.nps.comment)


def _has_contract_fields(c: ClientRecord) -> bool:
    return (
        _renewal_date(c) is not None
        and c.contract is not None and c.contract.value is not None
        and _churn_risk(c) is not None
    )


UNLOCK_REQUIREMENTS = (
    (AnalyticsGroup.REVENUE_ANALYTICS, _has_revenue_fields),
    (AnalyticsGroup.RETENTION_ANALYSIS, _has_retention_fields),
    (AnalyticsGroup.HEALTH_MONITORING, _has_health_fields),
    (AnalyticsGroup.SATISFACTION_TRACKING, _has_satisfaction_fields),
    (AnalyticsGroup.CONTRACT_MANAGEMENT, _has_contract_fields),
)


def determine_unlocked_analytics(
    clients: Sequence[ClientRecord],
    settings: Optional[Settings] = None,
) -> Set[AnalyticsGroup]:
    """
    Decide which analytics groups the roster has enough data for.

    A group is unlocked when the share of clients carrying all of its
    required fields reaches ``unlock_coverage_threshold`` (default 0.5).

    Returns:
        Set of unlocked groups; empty for an empty roster.
    """
    settings = settings or get_settings()
    if not clients:
        return set()

    unlocked: Set[AnalyticsGroup] = set()
    for group, has_fields in UNLOCK_REQUIREMENTS:
        ready = sum(1 for c in clients if has_fields(c))
        if ready / len(clients) >= settings.unlock_coverage_threshold:
            unlocked.add(group)
    return unlocked
