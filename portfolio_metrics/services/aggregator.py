"""
Dashboard Metrics Aggregator

Single query surface for the presentation layer. Runs the calculators needed
by the active dashboard view over one roster snapshot and returns a combined
DashboardMetrics result.

Contract:
- Pure function of its inputs; every call recomputes from scratch.
- Calculators are independent: none reads another's output, none mutates
  the roster, so they can run in any order or concurrently.
- Calculators run in collection mode. InvalidRecord issues from every
  calculator are concatenated into ``DashboardMetrics.issues`` alongside
  whatever bundles were computed; the aggregator itself never raises for
  empty or malformed input.
- Missing collaborator data (historical series, survey responses) yields
  bundles flagged ``incomplete`` rather than a failure.

Usage:
    from portfolio_metrics.services.aggregator import compute_dashboard_metrics

    metrics = compute_dashboard_metrics(
        clients,
        historical_series=series,
        responses=[9, 10, 7, 3],
        as_of=date(2026, 10, 1),
    )

    # Only what the revenue view renders
    metrics = compute_dashboard_metrics(
        clients, metrics=[DashboardMetric.REVENUE, DashboardMetric.MRR_TREND]
    )
"""

import asyncio
import logging
from datetime import date
from functools import partial
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from portfolio_metrics.core.config import Settings, get_settings
from portfolio_metrics.models import (
    ClientRecord,
    DashboardMetric,
    DashboardMetrics,
    HistoricalSeries,
    RecordIssue,
)
from portfolio_metrics.services.health_distribution import calculate_health_distribution
from portfolio_metrics.services.mrr_trend import calculate_mrr_trend, previous_period_mrr_from_series
from portfolio_metrics.services.nps import calculate_nps
from portfolio_metrics.services.renewal_pipeline import classify_renewal_pipeline
from portfolio_metrics.services.revenue import analyze_revenue

logger = logging.getLogger(__name__)

ALL_METRICS: tuple = tuple(DashboardMetric)


def _build_jobs(
    clients: Sequence[ClientRecord],
    historical_series: Optional[HistoricalSeries],
    responses: Optional[Iterable[float]],
    as_of: Optional[date],
    metrics: Optional[Iterable[DashboardMetric]],
    settings: Settings,
) -> Dict[DashboardMetric, Callable[[], Any]]:
    """Bind each requested calculator to its inputs as a zero-arg callable."""
    requested = set(ALL_METRICS if metrics is None else (DashboardMetric(m) for m in metrics))
    # Snapshot once so every calculator sees the same roster and responses
    roster = tuple(clients)
    survey = None if responses is None else tuple(responses)

    jobs: Dict[DashboardMetric, Callable[[], Any]] = {}
    if DashboardMetric.HEALTH in requested:
        jobs[DashboardMetric.HEALTH] = partial(
            calculate_health_distribution, roster, settings=settings
        )
    if DashboardMetric.REVENUE in requested:
        jobs[DashboardMetric.REVENUE] = partial(analyze_revenue, roster)
    if DashboardMetric.MRR_TREND in requested:
        jobs[DashboardMetric.MRR_TREND] = partial(
            calculate_mrr_trend,
            roster,
            previous_period_mrr_from_series(historical_series),
            settings=settings,
        )
    if DashboardMetric.NPS in requested:
        jobs[DashboardMetric.NPS] = partial(calculate_nps, survey)
    if DashboardMetric.PIPELINE in requested:
        jobs[DashboardMetric.PIPELINE] = partial(
            classify_renewal_pipeline,
            roster,
            as_of or date.today(),
            settings=settings,
        )
    return jobs


def _assemble(results: Dict[DashboardMetric, Any]) -> DashboardMetrics:
    """Combine calculator bundles and concatenate their issues in a fixed order."""
    issues: List[RecordIssue] = []
    for metric in ALL_METRICS:
        bundle = results.get(metric)
        if bundle is not None:
            issues.extend(bundle.issues)

    if issues:
        logger.warning(f"Dashboard metrics computed with {len(issues)} invalid record issue(s)")

    return DashboardMetrics(
        health=results.get(DashboardMetric.HEALTH),
        revenue=results.get(DashboardMetric.REVENUE),
        mrrTrend=results.get(DashboardMetric.MRR_TREND),
        nps=results.get(DashboardMetric.NPS),
        pipeline=results.get(DashboardMetric.PIPELINE),
        issues=tuple(issues),
    )


def compute_dashboard_metrics(
    clients: Sequence[ClientRecord],
    historical_series: Optional[HistoricalSeries] = None,
    responses: Optional[Iterable[float]] = None,
    *,
    as_of: Optional[date] = None,
    metrics: Optional[Iterable[DashboardMetric]] = None,
    settings: Optional[Settings] = None,
) -> DashboardMetrics:
    """
    Compute dashboard metric bundles sequentially.

    This is the reference behaviour; compute_dashboard_metrics_async returns
    an equal result.

    Args:
        clients: Client roster snapshot.
        historical_series: Aggregate MRR history; None marks the MRR trend
            incomplete.
        responses: Raw 0-10 survey scores; None marks the NPS incomplete.
        as_of: Reference date for the renewal pipeline (defaults to today).
        metrics: Bundles to compute for the active view (defaults to all).
            Bundles not requested are None in the result.
        settings: Threshold source; defaults to get_settings().

    Returns:
        DashboardMetrics with the requested bundles and all record issues.
    """
    settings = settings or get_settings()
    jobs = _build_jobs(clients, historical_series, responses, as_of, metrics, settings)
    results = {metric: job() for metric, job in jobs.items()}
    return _assemble(results)


async def compute_dashboard_metrics_async(
    clients: Sequence[ClientRecord],
    historical_series: Optional[HistoricalSeries] = None,
    responses: Optional[Iterable[float]] = None,
    *,
    as_of: Optional[date] = None,
    metrics: Optional[Iterable[DashboardMetric]] = None,
    settings: Optional[Settings] = None,
) -> DashboardMetrics:
    """
    Compute dashboard metric bundles with each calculator in a worker thread.

    Intended for large rosters inside async hosts. Arguments and result are
    identical to compute_dashboard_metrics.
    """
    settings = settings or get_settings()
    jobs = _build_jobs(clients, historical_series, responses, as_of, metrics, settings)
    bundles = await asyncio.gather(*(asyncio.to_thread(job) for job in jobs.values()))
    return _assemble(dict(zip(jobs.keys(), bundles)))
