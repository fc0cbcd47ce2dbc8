"""
Test Module for Revenue Analysis.

Validates:
- Only active subscriptions contribute recurring revenue
- Shares guard a zero total
- avgDealSize floors its divisor at 1
- Negative revenue excluded and reported
"""

import pytest

from portfolio_metrics.core.errors import InvalidRecordError
from portfolio_metrics.services.revenue import analyze_revenue, recurring_revenue
from portfolio_metrics.tests.conftest import assert_close, make_client


class TestRecurringRevenue:

    def test_active_client_counts_mrr(self):
        assert recurring_revenue(make_client('c1', mrr=500)) == 500.0

    @pytest.mark.parametrize('status', ['trial', 'suspended', 'cancelled', 'inactive', None])
    def test_non_active_client_counts_zero(self, status):
        assert recurring_revenue(make_client('c1', status=status, mrr=500)) == 0.0


class TestAnalyzeRevenue:
    """Tests for analyze_revenue."""

    def test_sample_roster(self, sample_roster):
        result = analyze_revenue(sample_roster)

        assert_close(result.monthlyRecurring, 11000.0)
        assert_close(result.oneTimeRevenue, 2000.0)
        assert_close(result.totalRevenue, 13000.0)
        assert_close(result.recurringShare, 11000 / 13000 * 100)
        assert_close(result.oneTimeShare, 2000 / 13000 * 100)
        assert_close(result.avgDealSize, 1300.0)
        assert result.total == 10

    def test_shares_sum_to_hundred(self, sample_roster):
        result = analyze_revenue(sample_roster)
        assert_close(result.recurringShare + result.oneTimeShare, 100.0)

    def test_zero_revenue_shares_are_zero(self):
        result = analyze_revenue([make_client('c1', status='trial', mrr=100)])
        assert result.totalRevenue == 0.0
        assert result.recurringShare == 0.0
        assert result.oneTimeShare == 0.0

    def test_empty_roster(self):
        result = analyze_revenue([])
        assert result.totalRevenue == 0.0
        assert result.avgDealSize == 0.0
        assert result.total == 0

    def test_negative_one_time_revenue_excluded(self):
        clients = [make_client('ok', mrr=1000), make_client('bad', mrr=500, one_time=-10)]
        result = analyze_revenue(clients)
        assert_close(result.monthlyRecurring, 1000.0)
        assert result.total == 1
        assert [i.field for i in result.issues] == ['oneTimeRevenue']

    def test_strict_raises(self):
        with pytest.raises(InvalidRecordError):
            analyze_revenue([make_client('bad', mrr=-1)], strict=True)
