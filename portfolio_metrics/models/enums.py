"""
Enumeration definitions for the portfolio metrics engine.

All enums inherit from both `str` and `Enum` so pydantic models serialize them
as their plain string values and accept the raw strings found in client
exports (e.g. ``"active"``, ``"high"``).
"""

from enum import Enum


class SubscriptionStatus(str, Enum):
    """
    Billing state of a client's subscription.

    Only ACTIVE subscriptions contribute recurring revenue to MRR figures.
    """
    ACTIVE = "active"
    INACTIVE = "inactive"
    TRIAL = "trial"
    SUSPENDED = "suspended"
    CANCELLED = "cancelled"


class ChurnRisk(str, Enum):
    """
    Externally assessed churn risk for a client account.

    - low: No action needed
    - medium / moderate: Review soon (the two spellings occur in exports)
    - high / critical: Needs immediate attention
    """
    LOW = "low"
    MEDIUM = "medium"
    MODERATE = "moderate"
    HIGH = "high"
    CRITICAL = "critical"


class HealthBand(str, Enum):
    """Disjoint health score bands used by the health distribution."""
    HEALTHY = "healthy"
    WARNING = "warning"
    CRITICAL = "critical"


class TrendDirection(str, Enum):
    """
    Direction of period-over-period MRR growth.

    - up: growth above the flat band
    - down: growth below the negative flat band
    - flat: growth within the band (inclusive)
    """
    UP = "up"
    DOWN = "down"
    FLAT = "flat"


class NPSCategory(str, Enum):
    """Survey response category on the 0-10 promoter scale."""
    PROMOTER = "promoter"
    PASSIVE = "passive"
    DETRACTOR = "detractor"


class NPSLabel(str, Enum):
    """
    Qualitative label for a Net Promoter Score.

    - Excellent: score >= 70
    - Great: score >= 50
    - Good: score >= 30
    - Needs Work: score >= 0
    - Critical: score < 0
    """
    EXCELLENT = "Excellent"
    GREAT = "Great"
    GOOD = "Good"
    NEEDS_WORK = "Needs Work"
    CRITICAL = "Critical"


class ScoreSeverity(str, Enum):
    """Display severity for a Net Promoter Score."""
    SUCCESS = "success"
    WARNING = "warning"
    DANGER = "danger"


class RenewalBucket(str, Enum):
    """
    Contract renewal pipeline stage.

    Negotiation status takes precedence over the renewal date. Clients that
    are neither negotiating nor carry a renewal date are UNSCHEDULED.
    """
    ACTIVE_NEGOTIATIONS = "activeNegotiations"
    EXPIRING_SOON = "expiringSoon"
    DUE_THIS_QUARTER = "dueThisQuarter"
    FUTURE_RENEWALS = "futureRenewals"
    UNSCHEDULED = "unscheduled"


class DashboardMetric(str, Enum):
    """Metric bundles the aggregator can compute for a dashboard view."""
    HEALTH = "health"
    REVENUE = "revenue"
    MRR_TREND = "mrrTrend"
    NPS = "nps"
    PIPELINE = "pipeline"


class CalculatorName(str, Enum):
    """Identifies which calculator reported a RecordIssue."""
    HEALTH_DISTRIBUTION = "health_distribution"
    REVENUE = "revenue"
    MRR_TREND = "mrr_trend"
    NPS = "nps"
    RENEWAL_PIPELINE = "renewal_pipeline"
    INGESTION = "ingestion"


class ActionPriority(str, Enum):
    """Priority of a churn-risk follow-up action."""
    HIGH = "high"
    MEDIUM = "medium"


class AnalyticsGroup(str, Enum):
    """
    Dashboard analytics groups gated on data availability.

    Required fields per group:
    - Revenue Analytics: mrr + renewal.date
    - Retention Analysis: subscribedMonths + renewal.date
    - Health Monitoring: health.score + usage.last30d
    - Satisfaction Tracking: nps.score + nps.comment
    - Contract Management: renewal.date + contract.value + churn.risk
    """
    REVENUE_ANALYTICS = "Revenue Analytics"
    RETENTION_ANALYSIS = "Retention Analysis"
    HEALTH_MONITORING = "Health Monitoring"
    SATISFACTION_TRACKING = "Satisfaction Tracking"
    CONTRACT_MANAGEMENT = "Contract Management"
