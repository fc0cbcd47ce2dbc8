"""
Test Module for Portfolio Summary Services.

Validates:
- Stats row totals (at-risk rule, total MRR, rounded average health)
- Churn risk grouping and follow-up actions
- Upcoming renewals window, ordering and limit
- Analytics unlock coverage rule
"""

from datetime import date, timedelta

import pytest

from portfolio_metrics.core.config import Settings
from portfolio_metrics.models import ActionPriority, AnalyticsGroup
from portfolio_metrics.services.portfolio_summary import (
    calculate_churn_risk,
    calculate_portfolio_totals,
    determine_unlocked_analytics,
    find_upcoming_renewals,
)
from portfolio_metrics.tests.conftest import assert_close, make_client


class TestPortfolioTotals:

    def test_sample_roster(self, sample_roster, settings):
        totals = calculate_portfolio_totals(sample_roster, settings)
        assert totals.totalClients == 10
        assert totals.atRisk == 2
        assert_close(totals.totalMRR, 11800.0)
        assert totals.avgHealth == 66

    def test_low_health_counts_at_risk(self, settings):
        totals = calculate_portfolio_totals(
            [make_client('c1', health=49, churn='low'), make_client('c2', health=50, churn='low')],
            settings,
        )
        assert totals.atRisk == 1

    def test_missing_scores_excluded_from_average(self, settings):
        totals = calculate_portfolio_totals(
            [make_client('c1', health=80), make_client('c2')], settings
        )
        assert totals.avgHealth == 80
        assert totals.atRisk == 1

    def test_empty_roster(self, settings):
        totals = calculate_portfolio_totals([], settings)
        assert totals.totalClients == 0
        assert totals.avgHealth == 0


class TestChurnRisk:

    def test_sample_roster(self, sample_roster):
        summary = calculate_churn_risk(sample_roster)
        assert summary.high == ('c09', 'c10')
        assert summary.medium == ('c04', 'c07', 'c08')
        assert summary.low == ('c01', 'c02', 'c03', 'c05', 'c06')
        assert summary.totalAtRisk == 5
        assert_close(summary.riskScore, 50.0)
        assert [a.priority for a in summary.actions] == [ActionPriority.HIGH, ActionPriority.MEDIUM]
        assert summary.actions[0].text == '2 clients need immediate attention'
        assert summary.actions[1].text == 'Review 3 at-risk clients'

    def test_moderate_groups_with_medium(self):
        summary = calculate_churn_risk([make_client('c1', churn='moderate')])
        assert summary.medium == ('c1',)

    @pytest.mark.boundary
    def test_medium_action_needs_more_than_two(self):
        two = [make_client(f'c{i}', churn='medium') for i in range(2)]
        assert calculate_churn_risk(two).actions == ()

    def test_empty_roster(self):
        summary = calculate_churn_risk([])
        assert summary.totalAtRisk == 0
        assert summary.riskScore == 0.0


class TestUpcomingRenewals:

    def test_sorted_within_window(self, sample_roster, as_of):
        rows = find_upcoming_renewals(sample_roster, as_of, days=90)
        assert [r.id for r in rows] == ['c04', 'c01', 'c10', 'c09', 'c02', 'c05']
        assert rows[0].daysUntilRenewal == 4
        assert rows[1].companyName == 'Acme'
        assert rows[2].churnRisk == 'critical'

    def test_overdue_excluded(self, sample_roster, as_of):
        ids = [r.id for r in find_upcoming_renewals(sample_roster, as_of, days=90)]
        assert 'c08' not in ids

    @pytest.mark.boundary
    def test_window_inclusive(self, as_of):
        clients = [
            make_client('edge', renewal=as_of + timedelta(days=30)),
            make_client('out', renewal=as_of + timedelta(days=31)),
            make_client('today', renewal=as_of),
        ]
        rows = find_upcoming_renewals(clients, as_of, days=30)
        assert [r.id for r in rows] == ['today', 'edge']

    def test_limit(self, sample_roster, as_of):
        rows = find_upcoming_renewals(sample_roster, as_of, days=90, limit=2)
        assert [r.id for r in rows] == ['c04', 'c01']

    def test_missing_churn_risk_is_unknown(self, as_of):
        rows = find_upcoming_renewals([make_client('c1', renewal=as_of)], as_of, days=10)
        assert rows[0].churnRisk == 'unknown'


class TestUnlockedAnalytics:

    def test_sample_roster(self, sample_roster, settings):
        unlocked = determine_unlocked_analytics(sample_roster, settings)
        assert unlocked == {AnalyticsGroup.REVENUE_ANALYTICS, AnalyticsGroup.CONTRACT_MANAGEMENT}

    def test_health_monitoring_needs_usage(self, settings):
        clients = [make_client('c1', health=80, usage={'last30d': 55})]
        assert AnalyticsGroup.HEALTH_MONITORING in determine_unlocked_analytics(clients, settings)

    def test_defaulted_mrr_does_not_unlock_revenue(self, settings):
        clients = [make_client('c1', renewal=date(2026, 12, 1))]
        assert AnalyticsGroup.REVENUE_ANALYTICS not in determine_unlocked_analytics(clients, settings)

    @pytest.mark.boundary
    def test_coverage_threshold(self):
        clients = [
            make_client('c1', subscribedMonths=12, renewal=date(2026, 12, 1)),
            make_client('c2'),
        ]
        half = Settings(_env_file=None, unlock_coverage_threshold=0.5)
        most = Settings(_env_file=None, unlock_coverage_threshold=0.6)
        assert AnalyticsGroup.RETENTION_ANALYSIS in determine_unlocked_analytics(clients, half)
        assert AnalyticsGroup.RETENTION_ANALYSIS not in determine_unlocked_analytics(clients, most)

    def test_empty_roster(self, settings):
        assert determine_unlocked_analytics([], settings) == set()
