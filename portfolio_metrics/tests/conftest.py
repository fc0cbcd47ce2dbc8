"""
Pytest Configuration and Shared Fixtures for Portfolio Metrics Tests.

This module provides fixtures and configuration for all engine tests:
- Custom markers (slow, integration, boundary)
- A default Settings fixture isolated from the environment
- A ``make_client`` factory building ClientRecords from flat keyword arguments
- Sample rosters, historical MRR series and survey responses
- An ``assert_close`` helper for float comparisons

Dependencies:
- pytest
- pytest-asyncio (aggregator async tests)
- pandas (ingestion tests)
"""

from datetime import date
from typing import Any, Dict, List, Optional

import pandas as pd
import pytest

from portfolio_metrics.core.config import Settings, get_settings
from portfolio_metrics.models import ClientRecord, HistoricalSeries, MRRSnapshot


# ============================================================
# PYTEST HOOKS
# ============================================================

def pytest_configure(config) -> None:
    """
    Register custom pytest markers.

    - slow: Marks tests as slow (deselect with -m "not slow")
    - integration: Marks tests that exercise several services together
    - boundary: Marks threshold boundary tests
    """
    config.addinivalue_line(
        'markers',
        'slow: marks tests as slow (deselect with -m "not slow")'
    )
    config.addinivalue_line(
        'markers',
        'integration: marks tests that exercise several services together'
    )
    config.addinivalue_line(
        'markers',
        'boundary: marks threshold boundary tests'
    )


# ============================================================
# SETTINGS FIXTURES
# ============================================================

@pytest.fixture
def settings() -> Settings:
    """
    Default engine settings, ignoring any ``.env`` file.

    Clears the get_settings() cache before and after the test so overrides
    made through environment variables never leak between tests.
    """
    get_settings.cache_clear()
    yield Settings(_env_file=None)
    get_settings.cache_clear()


# ============================================================
# CLIENT FACTORIES
# ============================================================

def make_client(
    client_id: str,
    *,
    health: Optional[float] = None,
    status: Optional[str] = 'active',
    mrr: Optional[float] = None,
    one_time: Optional[float] = None,
    renewal: Optional[date] = None,
    negotiating: bool = False,
    contract_value: Optional[float] = None,
    churn: Optional[str] = None,
    company: Optional[str] = None,
    **extra: Any,
) -> ClientRecord:
    """
    Build a ClientRecord from flat keyword arguments.

    Fields left as None are omitted, so ClientRecord defaults apply and
    ``model_fields_set`` reflects only what the test supplied.

    Usage:
        client = make_client('c1', health=82, mrr=1000, renewal=date(2026, 11, 1))
    """
    data: Dict[str, Any] = {'id': client_id}
    if health is not None:
        data['health'] = {'score': health}
    if status is not None:
        data['subscription'] = {'status': status}
    if mrr is not None:
        data['mrr'] = mrr
    if one_time is not None:
        data['oneTimeRevenue'] = one_time
    if renewal is not None or negotiating:
        data['renewal'] = {'date': renewal, 'inNegotiation': negotiating}
    if contract_value is not None:
        data['contract'] = {'value': contract_value}
    if churn is not None:
        data['churn'] = {'risk': churn}
    if company is not None:
        data['company'] = {'name': company}
    data.update(extra)
    return ClientRecord.model_validate(data)


@pytest.fixture
def as_of() -> date:
    """Fixed reference date for renewal tests."""
    return date(2026, 10, 1)


@pytest.fixture
def sample_roster(as_of: date) -> List[ClientRecord]:
    """
    Ten-client roster covering every health band and renewal bucket.

    Health: 6 healthy (>= 70), 3 warning (40-69), 1 critical (< 40).
    Active MRR totals 11000; one cancelled client carries MRR that is
    not recurring revenue.
    """
    return [
        make_client('c01', health=95, mrr=2000, renewal=date(2026, 10, 11),
                    contract_value=24000, churn='low', company='Acme'),
        make_client('c02', health=88, mrr=1500, renewal=date(2026, 11, 15),
                    contract_value=18000, churn='low', company='Globex'),
        make_client('c03', health=80, mrr=1500, renewal=date(2027, 3, 1),
                    contract_value=18000, churn='low', company='Initech'),
        make_client('c04', health=75, mrr=1000, negotiating=True,
                    renewal=date(2026, 10, 5), contract_value=12000,
                    churn='medium', company='Umbrella'),
        make_client('c05', health=72, mrr=1000, renewal=date(2026, 12, 1),
                    contract_value=12000, churn='low', company='Hooli'),
        make_client('c06', health=70, mrr=1000, renewal=date(2027, 6, 1),
                    contract_value=12000, churn='low', company='Stark'),
        make_client('c07', health=65, mrr=1000, one_time=500,
                    contract_value=12000, churn='medium', company='Wayne'),
        make_client('c08', health=50, mrr=1000, renewal=date(2026, 9, 20),
                    contract_value=12000, churn='medium', company='Wonka'),
        make_client('c09', health=40, mrr=1000, one_time=1500,
                    renewal=date(2026, 10, 31), contract_value=12000,
                    churn='high', company='Tyrell'),
        make_client('c10', health=20, status='cancelled', mrr=800,
                    renewal=date(2026, 10, 20), churn='critical', company='Cyberdyne'),
    ]


@pytest.fixture
def historical_series() -> HistoricalSeries:
    """Three monthly points, deliberately out of order; previous period is 10000."""
    return HistoricalSeries(points=(
        MRRSnapshot(period=date(2026, 9, 1), mrr=10000),
        MRRSnapshot(period=date(2026, 10, 1), mrr=11000),
        MRRSnapshot(period=date(2026, 8, 1), mrr=9500),
    ))


@pytest.fixture
def survey_responses() -> List[int]:
    """100 responses: 45 promoters, 40 passives, 15 detractors (NPS 30)."""
    return [10] * 30 + [9] * 15 + [8] * 25 + [7] * 15 + [5] * 10 + [0] * 5


@pytest.fixture
def legacy_export_df() -> pd.DataFrame:
    """Client export using legacy snake_case column names."""
    return pd.DataFrame({
        'client_id': ['L-1', 'L-2', 'L-3'],
        'company_name': ['Acme', 'Globex', 'Initech'],
        'contact_email': ['ops@acme.test', 'cs@globex.test', None],
        'health_score': [82, 45, 30],
        'subscription_status': ['Active', 'active', 'TRIAL'],
        'mrr': [1200.0, 800.0, 0.0],
        'renewal_date': ['2026-11-01', '2027-02-15', None],
        'churn_risk': ['low', 'High', 'medium'],
    })


# ============================================================
# ASSERTION HELPERS
# ============================================================

def assert_close(
    actual: float,
    expected: float,
    tolerance: float = 0.001
) -> None:
    """
    Assert two floats are close within tolerance.

    Raises:
        AssertionError: If values differ by more than tolerance
    """
    assert abs(actual - expected) <= tolerance, (
        f"{actual} not close to {expected} within tolerance {tolerance}"
    )
