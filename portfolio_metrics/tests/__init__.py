"""
Test package for the portfolio metrics engine.

Test modules:
- test_validation: Record accessors, range checks, strict mode
- test_health_distribution: Health banding and sample flags
- test_revenue: Revenue composition and share guards
- test_mrr_trend: Growth, trend band, incomplete history
- test_nps: NPS scoring, labels, rounding
- test_renewal_pipeline: Bucket boundaries and negotiation precedence
- test_aggregator: Combined results, sync/async equivalence
- test_portfolio_summary: Stats row, churn groups, renewals, unlocks
- test_ingestion: CSV/DataFrame loading and legacy validation
- test_config: Settings defaults, overrides, logging setup
"""
