"""
Pydantic models for the portfolio metrics engine.

This module defines the engine's input shapes (client roster, historical MRR
series) and output shapes (one immutable MetricBundle per calculator, plus the
aggregated dashboard result and the supplementary portfolio summaries).

Field names follow the dashboard's canonical client shape (camelCase, nested
``health.score``, ``renewal.date`` and so on), so a canonical client dict
validates directly into a ClientRecord.

Input models carry no range constraints: a record with a health
score of 150 or a negative MRR still loads, and the calculators report it as
an InvalidRecord issue instead of rejecting the whole roster.

All models use Pydantic v2 syntax.
"""

from datetime import date as DateType
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, ConfigDict

from portfolio_metrics.models.enums import (
    ActionPriority,
    CalculatorName,
    ChurnRisk,
    NPSLabel,
    ScoreSeverity,
    SubscriptionStatus,
    TrendDirection,
)


# =============================================================================
# Client Roster Models (input, read-only to the engine)
# =============================================================================


class HealthInfo(BaseModel):
    """Externally computed 0-100 account health indicator."""
    model_config = ConfigDict(frozen=True, extra='ignore')

    score: Optional[float] = Field(
        default=None,
        description="Health score in [0, 100]; missing counts as 0"
    )


class SubscriptionInfo(BaseModel):
    """Billing subscription state."""
    model_config = ConfigDict(frozen=True, extra='ignore')

    status: Optional[SubscriptionStatus] = Field(
        default=None,
        description="Subscription status; only 'active' contributes MRR"
    )


class RenewalInfo(BaseModel):
    """Next contract renewal and its negotiation state."""
    model_config = ConfigDict(frozen=True, extra='ignore')

    date: Optional[DateType] = Field(
        default=None,
        description="Next renewal or review date"
    )
    inNegotiation: bool = Field(
        default=False,
        description="Renewal is under active negotiation"
    )


class ContractInfo(BaseModel):
    """Contract terms."""
    model_config = ConfigDict(frozen=True, extra='ignore')

    value: Optional[float] = Field(
        default=None,
        description="Total contract value"
    )
    startDate: Optional[DateType] = None
    endDate: Optional[DateType] = None


class ChurnInfo(BaseModel):
    """Externally assessed churn risk."""
    model_config = ConfigDict(frozen=True, extra='ignore')

    risk: Optional[ChurnRisk] = None


class CompanyInfo(BaseModel):
    model_config = ConfigDict(frozen=True, extra='ignore')

    name: Optional[str] = None


class ContactInfo(BaseModel):
    model_config = ConfigDict(frozen=True, extra='ignore')

    name: Optional[str] = None
    email: Optional[str] = None


class CsmInfo(BaseModel):
    model_config = ConfigDict(frozen=True, extra='ignore')

    owner: Optional[str] = None


class UsageInfo(BaseModel):
    model_config = ConfigDict(frozen=True, extra='ignore')

    last30d: Optional[float] = Field(
        default=None,
        description="Product usage percentage over the last 30 days"
    )


class NPSInfo(BaseModel):
    """Latest survey answer recorded against the client."""
    model_config = ConfigDict(frozen=True, extra='ignore')

    score: Optional[float] = None
    comment: Optional[str] = None


class ClientRecord(BaseModel):
    """
    A single client account snapshot.

    Only ``id`` is required. Every other field is optional so partially
    populated exports still load; calculators apply their own defaults
    (missing health score counts as 0, missing contract value as 0).
    """
    model_config = ConfigDict(
        frozen=True,
        extra='ignore',
        str_strip_whitespace=True,
        json_schema_extra={
            "example": {
                "id": "acme-001",
                "company": {"name": "Acme Corp"},
                "health": {"score": 82},
                "subscription": {"status": "active"},
                "mrr": 4500.0,
                "oneTimeRevenue": 1200.0,
                "renewal": {"date": "2026-12-01", "inNegotiation": False},
                "contract": {"value": 54000.0},
                "churn": {"risk": "low"},
            }
        }
    )

    id: str = Field(..., min_length=1, description="Opaque unique client identifier")
    company: Optional[CompanyInfo] = None
    contact: Optional[ContactInfo] = None
    csm: Optional[CsmInfo] = None
    health: Optional[HealthInfo] = None
    subscription: Optional[SubscriptionInfo] = None
    mrr: float = Field(
        default=0.0,
        description="Monthly recurring revenue currently billed"
    )
    oneTimeRevenue: float = Field(
        default=0.0,
        description="Non-recurring revenue booked in the current period"
    )
    ltv: Optional[float] = None
    subscribedMonths: Optional[int] = None
    renewal: Optional[RenewalInfo] = None
    contract: Optional[ContractInfo] = None
    churn: Optional[ChurnInfo] = None
    usage: Optional[UsageInfo] = None
    nps: Optional[NPSInfo] = None


class MRRSnapshot(BaseModel):
    """Aggregate MRR booked for one period."""
    model_config = ConfigDict(frozen=True)

    period: DateType = Field(..., description="Period stamp (e.g. first day of month)")
    mrr: float = Field(..., ge=0, description="Aggregate MRR for the period")


class HistoricalSeries(BaseModel):
    """
    Period-stamped aggregate MRR history supplied by the historical source.

    Points may arrive in any order; consumers sort by period.
    """
    model_config = ConfigDict(frozen=True)

    points: Tuple[MRRSnapshot, ...] = Field(default_factory=tuple)


# =============================================================================
# Error Reporting Models
# =============================================================================


class RecordIssue(BaseModel):
    """
    An InvalidRecord problem found by a calculator.

    The offending record is excluded from that calculator's bundle; it is
    never clamped into range.
    """
    model_config = ConfigDict(frozen=True)

    calculator: CalculatorName
    recordId: Optional[str] = Field(
        default=None,
        description="Client id, or None for survey responses"
    )
    index: Optional[int] = Field(
        default=None,
        description="Position in the input sequence; None for file-level problems"
    )
    field: str = Field(..., description="Dotted path of the invalid field")
    value: Any = None
    message: str


# =============================================================================
# Metric Bundles (output, one per calculator)
# =============================================================================


class BucketStat(BaseModel):
    """Count and unrounded percentage for one bucket of a distribution."""
    model_config = ConfigDict(frozen=True)

    count: int = 0
    percentage: float = 0.0


class HealthDistribution(BaseModel):
    """
    Health score distribution across the roster.

    ``insufficientSample`` is set when the roster is below the display
    threshold; the raw numbers are still populated.
    """
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "healthy": {"count": 6, "percentage": 60.0},
                "warning": {"count": 3, "percentage": 30.0},
                "critical": {"count": 1, "percentage": 10.0},
                "avgHealth": 68.4,
                "total": 10,
                "insufficientSample": False,
                "issues": []
            }
        }
    )

    healthy: BucketStat = Field(default_factory=BucketStat)
    warning: BucketStat = Field(default_factory=BucketStat)
    critical: BucketStat = Field(default_factory=BucketStat)
    avgHealth: float = 0.0
    total: int = 0
    insufficientSample: bool = True
    issues: Tuple[RecordIssue, ...] = Field(default_factory=tuple)


class RevenueMetrics(BaseModel):
    """Recurring versus one-time revenue composition."""
    model_config = ConfigDict(frozen=True)

    totalRevenue: float = 0.0
    monthlyRecurring: float = Field(
        default=0.0,
        description="Revenue attributable to active recurring billing"
    )
    oneTimeRevenue: float = Field(
        default=0.0,
        description="Remainder of total revenue (non-recurring)"
    )
    recurringShare: float = Field(
        default=0.0,
        description="monthlyRecurring as a percentage of totalRevenue"
    )
    oneTimeShare: float = 0.0
    avgDealSize: float = 0.0
    total: int = 0
    issues: Tuple[RecordIssue, ...] = Field(default_factory=tuple)


class MRRTrend(BaseModel):
    """
    Current versus prior-period recurring revenue.

    ``incomplete`` is set when no prior-period value was supplied; growth
    fields then hold their guarded defaults.
    """
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "currentMRR": 11000.0,
                "previousMRR": 10000.0,
                "growth": 1000.0,
                "growthPercent": 10.0,
                "trend": "up",
                "avgMRR": 1100.0,
                "totalClients": 10,
                "insufficientSample": False,
                "incomplete": False,
                "issues": []
            }
        }
    )

    currentMRR: float = 0.0
    previousMRR: float = 0.0
    growth: float = 0.0
    growthPercent: float = 0.0
    trend: TrendDirection = TrendDirection.FLAT
    avgMRR: float = 0.0
    totalClients: int = 0
    insufficientSample: bool = True
    incomplete: bool = False
    issues: Tuple[RecordIssue, ...] = Field(default_factory=tuple)


class NPSResult(BaseModel):
    """Net Promoter Score and its category breakdown."""
    model_config = ConfigDict(frozen=True)

    promoters: BucketStat = Field(default_factory=BucketStat)
    passives: BucketStat = Field(default_factory=BucketStat)
    detractors: BucketStat = Field(default_factory=BucketStat)
    totalResponses: int = 0
    score: int = 0
    label: NPSLabel = NPSLabel.NEEDS_WORK
    category: ScoreSeverity = ScoreSeverity.WARNING
    incomplete: bool = False
    issues: Tuple[RecordIssue, ...] = Field(default_factory=tuple)


class PipelineBucket(BaseModel):
    """Clients in one renewal pipeline stage."""
    model_config = ConfigDict(frozen=True)

    count: int = 0
    percentage: float = 0.0
    value: float = Field(default=0.0, description="Sum of contract value")
    clientIds: Tuple[str, ...] = Field(default_factory=tuple)


class RenewalPipeline(BaseModel):
    """Renewal urgency staging of the roster as of a given date."""
    model_config = ConfigDict(frozen=True)

    activeNegotiations: PipelineBucket = Field(default_factory=PipelineBucket)
    expiringSoon: PipelineBucket = Field(default_factory=PipelineBucket)
    dueThisQuarter: PipelineBucket = Field(default_factory=PipelineBucket)
    futureRenewals: PipelineBucket = Field(default_factory=PipelineBucket)
    unscheduled: PipelineBucket = Field(default_factory=PipelineBucket)
    totalPipelineValue: float = Field(
        default=0.0,
        description="Contract value across every non-negotiation bucket"
    )
    total: int = 0
    asOf: DateType
    issues: Tuple[RecordIssue, ...] = Field(default_factory=tuple)


class DashboardMetrics(BaseModel):
    """
    Combined result of the aggregator.

    Bundles that were not requested for the active view are None.
    ``issues`` concatenates every calculator's InvalidRecord issues.
    """
    model_config = ConfigDict(frozen=True)

    health: Optional[HealthDistribution] = None
    revenue: Optional[RevenueMetrics] = None
    mrrTrend: Optional[MRRTrend] = None
    nps: Optional[NPSResult] = None
    pipeline: Optional[RenewalPipeline] = None
    issues: Tuple[RecordIssue, ...] = Field(default_factory=tuple)


# =============================================================================
# Portfolio Summary Models
# =============================================================================


class PortfolioTotals(BaseModel):
    """Headline KPIs for the stats row."""
    model_config = ConfigDict(frozen=True)

    totalClients: int = 0
    atRisk: int = 0
    totalMRR: float = 0.0
    avgHealth: int = 0


class ChurnAction(BaseModel):
    model_config = ConfigDict(frozen=True)

    priority: ActionPriority
    text: str
    count: int


class ChurnRiskSummary(BaseModel):
    """Clients grouped by churn risk with follow-up actions."""
    model_config = ConfigDict(frozen=True)

    high: Tuple[str, ...] = Field(default_factory=tuple)
    medium: Tuple[str, ...] = Field(default_factory=tuple)
    low: Tuple[str, ...] = Field(default_factory=tuple)
    totalAtRisk: int = 0
    riskScore: float = 0.0
    actions: Tuple[ChurnAction, ...] = Field(default_factory=tuple)


class UpcomingRenewal(BaseModel):
    """One row of the upcoming renewals list."""
    model_config = ConfigDict(frozen=True)

    id: str
    companyName: Optional[str] = None
    renewalDate: DateType
    contractValue: float = 0.0
    mrr: float = 0.0
    healthScore: float = 0.0
    churnRisk: str = "unknown"
    contactName: Optional[str] = None
    csmOwner: Optional[str] = None
    daysUntilRenewal: int


# =============================================================================
# Ingestion Models
# =============================================================================


class FieldPresence(BaseModel):
    """Which canonical fields a dataset carries (checked on its first row)."""
    hasAll: bool
    missing: List[str] = Field(default_factory=list)
    available: List[str] = Field(default_factory=list)


class ValidationResult(BaseModel):
    """Outcome of validating one legacy client dict."""
    isValid: bool
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


class InvalidLegacyClient(BaseModel):
    index: int
    client: Any = None
    errors: List[str] = Field(default_factory=list)


class ValidationStats(BaseModel):
    total: int = 0
    valid: int = 0
    invalid: int = 0


class BatchValidationResult(BaseModel):
    """Outcome of validating a list of legacy client dicts."""
    isValid: bool
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    validClients: List[Dict[str, Any]] = Field(default_factory=list)
    invalidClients: List[InvalidLegacyClient] = Field(default_factory=list)
    stats: ValidationStats = Field(default_factory=ValidationStats)


class RosterLoadResult(BaseModel):
    """Client records built from an export plus the rows that failed."""
    records: List[ClientRecord] = Field(default_factory=list)
    issues: List[RecordIssue] = Field(default_factory=list)
