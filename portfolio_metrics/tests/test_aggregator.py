"""
Test Module for the Dashboard Metrics Aggregator.

Validates:
- All bundles computed by default; unrequested bundles are None
- Issues from every calculator concatenated in a fixed order
- Empty roster yields a fully defaulted result without raising
- Missing collaborator data flags bundles incomplete
- Idempotence over the same snapshot
- Async variant returns a result equal to the sync variant
"""

from datetime import date

import pytest

from portfolio_metrics.models import CalculatorName, DashboardMetric, TrendDirection
from portfolio_metrics.services.aggregator import (
    compute_dashboard_metrics,
    compute_dashboard_metrics_async,
)
from portfolio_metrics.tests.conftest import assert_close, make_client


@pytest.mark.integration
class TestComputeDashboardMetrics:
    """Tests for the synchronous aggregator."""

    def test_full_dashboard(self, sample_roster, historical_series, survey_responses, as_of, settings):
        metrics = compute_dashboard_metrics(
            sample_roster,
            historical_series=historical_series,
            responses=survey_responses,
            as_of=as_of,
            settings=settings,
        )

        assert metrics.health.healthy.count == 6
        assert_close(metrics.revenue.monthlyRecurring, 11000.0)
        assert_close(metrics.mrrTrend.growthPercent, 10.0)
        assert metrics.mrrTrend.trend == TrendDirection.UP
        assert metrics.nps.score == 30
        assert metrics.pipeline.total == 10
        assert metrics.issues == ()

    def test_subset_of_metrics(self, sample_roster, settings):
        metrics = compute_dashboard_metrics(
            sample_roster,
            metrics=[DashboardMetric.REVENUE, DashboardMetric.MRR_TREND],
            settings=settings,
        )
        assert metrics.revenue is not None
        assert metrics.mrrTrend is not None
        assert metrics.health is None
        assert metrics.nps is None
        assert metrics.pipeline is None

    def test_metric_names_accepted_as_strings(self, sample_roster, settings):
        metrics = compute_dashboard_metrics(sample_roster, metrics=['health'], settings=settings)
        assert metrics.health is not None
        assert metrics.revenue is None

    def test_empty_roster(self, as_of, settings):
        metrics = compute_dashboard_metrics([], as_of=as_of, settings=settings)

        assert metrics.health.total == 0
        assert metrics.revenue.totalRevenue == 0.0
        assert metrics.mrrTrend.currentMRR == 0.0
        assert metrics.pipeline.total == 0
        assert metrics.issues == ()

    def test_missing_collaborator_data_is_incomplete(self, sample_roster, as_of, settings):
        metrics = compute_dashboard_metrics(sample_roster, as_of=as_of, settings=settings)
        assert metrics.mrrTrend.incomplete is True
        assert metrics.nps.incomplete is True

    def test_issues_concatenated_in_calculator_order(self, as_of, settings):
        clients = [
            make_client('ok', health=80, mrr=100, contract_value=10),
            make_client('bad', health=150, mrr=-1, contract_value=-5),
        ]
        metrics = compute_dashboard_metrics(
            clients, responses=[10, 42], as_of=as_of, settings=settings
        )
        assert [i.calculator for i in metrics.issues] == [
            CalculatorName.HEALTH_DISTRIBUTION,
            CalculatorName.REVENUE,
            CalculatorName.MRR_TREND,
            CalculatorName.NPS,
            CalculatorName.RENEWAL_PIPELINE,
        ]
        assert metrics.health.total == 1

    def test_idempotent(self, sample_roster, historical_series, survey_responses, as_of, settings):
        kwargs = dict(
            historical_series=historical_series,
            responses=survey_responses,
            as_of=as_of,
            settings=settings,
        )
        first = compute_dashboard_metrics(sample_roster, **kwargs)
        second = compute_dashboard_metrics(sample_roster, **kwargs)
        assert first == second

    def test_responses_generator_consumed_once(self, sample_roster, as_of, settings):
        metrics = compute_dashboard_metrics(
            sample_roster, responses=(s for s in [10, 9, 0]), as_of=as_of, settings=settings
        )
        assert metrics.nps.totalResponses == 3

    def test_as_of_defaults_to_today(self, sample_roster, settings):
        metrics = compute_dashboard_metrics(
            sample_roster, metrics=[DashboardMetric.PIPELINE], settings=settings
        )
        assert metrics.pipeline.asOf == date.today()


@pytest.mark.integration
class TestComputeDashboardMetricsAsync:
    """Tests for the concurrent aggregator."""

    @pytest.mark.asyncio
    async def test_async_equals_sync(self, sample_roster, historical_series, survey_responses, as_of, settings):
        kwargs = dict(
            historical_series=historical_series,
            responses=survey_responses,
            as_of=as_of,
            settings=settings,
        )
        sync_result = compute_dashboard_metrics(sample_roster, **kwargs)
        async_result = await compute_dashboard_metrics_async(sample_roster, **kwargs)
        assert async_result == sync_result

    @pytest.mark.asyncio
    async def test_async_subset(self, sample_roster, settings):
        result = await compute_dashboard_metrics_async(
            sample_roster, metrics=[DashboardMetric.NPS], settings=settings
        )
        assert result.nps.incomplete is True
        assert result.health is None

    @pytest.mark.asyncio
    async def test_async_empty_roster(self, as_of, settings):
        result = await compute_dashboard_metrics_async([], as_of=as_of, settings=settings)
        assert result.health.total == 0
        assert result.issues == ()
