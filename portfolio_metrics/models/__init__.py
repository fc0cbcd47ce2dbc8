"""
Package initialization file for the engine's data models.

Re-exports all pydantic schemas and enumerations from schemas.py and enums.py
so other modules can import them from portfolio_metrics.models directly.

Usage:
    from portfolio_metrics.models import (
        ClientRecord,
        HealthDistribution,
        TrendDirection,
        # ... etc
    )
"""

# =============================================================================
# Enums
# =============================================================================

from portfolio_metrics.models.enums import (
    SubscriptionStatus,
    ChurnRisk,
    HealthBand,
    TrendDirection,
    NPSCategory,
    NPSLabel,
    ScoreSeverity,
    RenewalBucket,
    DashboardMetric,
    CalculatorName,
    ActionPriority,
    AnalyticsGroup,
)


# =============================================================================
# Schemas
# =============================================================================

from portfolio_metrics.models.schemas import (
    # -------------------------------------------------------------------------
    # Client roster (input)
    # -------------------------------------------------------------------------
    HealthInfo,
    SubscriptionInfo,
    RenewalInfo,
    ContractInfo,
    ChurnInfo,
    CompanyInfo,
    ContactInfo,
    CsmInfo,
    UsageInfo,
    NPSInfo,
    ClientRecord,
    MRRSnapshot,
    HistoricalSeries,

    # -------------------------------------------------------------------------
    # Error reporting
    # -------------------------------------------------------------------------
    RecordIssue,

    # -------------------------------------------------------------------------
    # Metric bundles (output)
    # -------------------------------------------------------------------------
    BucketStat,
    HealthDistribution,
    RevenueMetrics,
    MRRTrend,
    NPSResult,
    PipelineBucket,
    RenewalPipeline,
    DashboardMetrics,

    # -------------------------------------------------------------------------
    # Portfolio summary
    # -------------------------------------------------------------------------
    PortfolioTotals,
    ChurnAction,
    ChurnRiskSummary,
    UpcomingRenewal,

    # -------------------------------------------------------------------------
    # Ingestion
    # -------------------------------------------------------------------------
    FieldPresence,
    ValidationResult,
    InvalidLegacyClient,
    ValidationStats,
    BatchValidationResult,
    RosterLoadResult,
)


__all__ = [
    # Enums
    'SubscriptionStatus',
    'ChurnRisk',
    'HealthBand',
    'TrendDirection',
    'NPSCategory',
    'NPSLabel',
    'ScoreSeverity',
    'RenewalBucket',
    'DashboardMetric',
    'CalculatorName',
    'ActionPriority',
    'AnalyticsGroup',
    # Client roster
    'HealthInfo',
    'SubscriptionInfo',
    'RenewalInfo',
    'ContractInfo',
    'ChurnInfo',
    'CompanyInfo',
    'ContactInfo',
    'CsmInfo',
    'UsageInfo',
    'NPSInfo',
    'ClientRecord',
    'MRRSnapshot',
    'HistoricalSeries',
    # Error reporting
    'RecordIssue',
    # Metric bundles
    'BucketStat',
    'HealthDistribution',
    'RevenueMetrics',
    'MRRTrend',
    'NPSResult',
    'PipelineBucket',
    'RenewalPipeline',
    'DashboardMetrics',
    # Portfolio summary
    'PortfolioTotals',
    'ChurnAction',
    'ChurnRiskSummary',
    'UpcomingRenewal',
    # Ingestion
    'FieldPresence',
    'ValidationResult',
    'InvalidLegacyClient',
    'ValidationStats',
    'BatchValidationResult',
    'RosterLoadResult',
]
