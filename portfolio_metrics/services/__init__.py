"""
Portfolio Metrics Services Module

Business logic for the client dashboard metrics engine. Every service is a
stateless set of pure functions over an immutable client roster snapshot.

Services:
- validation: Shared record accessors and InvalidRecord checks
- health_distribution: Healthy / warning / critical health banding
- revenue: Recurring versus one-time revenue composition
- mrr_trend: Current versus prior-period MRR and trend direction
- nps: Net Promoter Score from raw 0-10 survey responses
- renewal_pipeline: Renewal urgency staging as of a reference date
- aggregator: Single query surface combining the calculators
- portfolio_summary: Stats row, churn risk groups, upcoming renewals,
  analytics unlock matrix
- ingestion: Client export (CSV / DataFrame) loading and legacy validation
"""

# =============================================================================
# Validation Exports
# =============================================================================

from portfolio_metrics.services.validation import (
    ALL_CHECKS,
    contract_value,
    health_score,
    is_active,
    partition_valid_records,
    percentage,
    round_half_away_from_zero,
    validate_client_record,
)

# =============================================================================
# Calculator Exports
# One pure calculator per dashboard metric bundle
# =============================================================================

from portfolio_metrics.services.health_distribution import (
    calculate_health_distribution,
    classify_health_band,
)
from portfolio_metrics.services.revenue import (
    analyze_revenue,
    recurring_revenue,
)
from portfolio_metrics.services.mrr_trend import (
    calculate_mrr_trend,
    classify_trend,
    previous_period_mrr_from_series,
)
from portfolio_metrics.services.nps import (
    calculate_nps,
    classify_response,
    get_nps_label,
    get_nps_severity,
)
from portfolio_metrics.services.renewal_pipeline import (
    classify_renewal,
    classify_renewal_pipeline,
    days_until_renewal,
)

# =============================================================================
# Aggregator Exports
# =============================================================================

from portfolio_metrics.services.aggregator import (
    compute_dashboard_metrics,
    compute_dashboard_metrics_async,
)

# =============================================================================
# Portfolio Summary Exports
# =============================================================================

from portfolio_metrics.services.portfolio_summary import (
    calculate_churn_risk,
    calculate_portfolio_totals,
    determine_unlocked_analytics,
    find_upcoming_renewals,
)

# =============================================================================
# Ingestion Exports
# =============================================================================

from portfolio_metrics.services.ingestion import (
    CANONICAL_FIELDS,
    LEGACY_MAPPING_TABLE,
    check_field_presence,
    get_suggested_mapping,
    load_roster_csv,
    records_from_dataframe,
    sanitize_legacy_client,
    suggest_field_mapping,
    transform_to_canonical,
    validate_legacy_client,
    validate_legacy_clients,
)

__all__ = [
    # Validation
    'ALL_CHECKS',
    'contract_value',
    'health_score',
    'is_active',
    'partition_valid_records',
    'percentage',
    'round_half_away_from_zero',
    'validate_client_record',
    # Calculators
    'calculate_health_distribution',
    'classify_health_band',
    'analyze_revenue',
    'recurring_revenue',
    'calculate_mrr_trend',
    'classify_trend',
    'previous_period_mrr_from_series',
    'calculate_nps',
    'classify_response',
    'get_nps_label',
    'get_nps_severity',
    'classify_renewal',
    'classify_renewal_pipeline',
    'days_until_renewal',
    # Aggregator
    'compute_dashboard_metrics',
    'compute_dashboard_metrics_async',
    # Portfolio summary
    'calculate_churn_risk',
    'calculate_portfolio_totals',
    'determine_unlocked_analytics',
    'find_upcoming_renewals',
    # Ingestion
    'CANONICAL_FIELDS',
    'LEGACY_MAPPING_TABLE',
    'check_field_presence',
    'get_suggested_mapping',
    'load_roster_csv',
    'records_from_dataframe',
    'sanitize_legacy_client',
    'suggest_field_mapping',
    'transform_to_canonical',
    'validate_legacy_client',
    'validate_legacy_clients',
]
