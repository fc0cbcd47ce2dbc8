"""
Renewal Pipeline Service

Stages every client by contract-renewal urgency as of a reference date.

Classification Order:
1. activeNegotiations: renewal.inNegotiation is set (date is ignored)
2. unscheduled: no renewal date on record
3. By days until renewal, half-open with inclusive lower bounds:
   - expiringSoon: days < 30 (overdue renewals included)
   - dueThisQuarter: 30 <= days < 90
   - futureRenewals: days >= 90

Every client lands in exactly one bucket. ``totalPipelineValue`` sums
contract value over every client outside activeNegotiations. A missing
contract value counts as 0; a negative one is an InvalidRecord.
"""

from datetime import date
from typing import Dict, List, Optional, Sequence

from portfolio_metrics.core.config import Settings, get_settings
from portfolio_metrics.models import (
    CalculatorName,
    ClientRecord,
    PipelineBucket,
    RenewalBucket,
    RenewalPipeline,
)
from portfolio_metrics.services.validation import (
    check_contract_value,
    contract_value,
    partition_valid_records,
    percentage,
)


def days_until_renewal(client: ClientRecord, as_of: date) -> Optional[int]:
    """Whole days from ``as_of`` to the renewal date; negative when overdue."""
    if client.renewal is None or client.renewal.date is None:
        return None
    return (client.renewal.date - as_of).days


def classify_renewal(
    client: ClientRecord,
    as_of: date,
    settings: Optional[Settings] = None,
) -> RenewalBucket:
    """
    Assign a single client to its pipeline bucket.

    Args:
        client: Client record.
        as_of: Reference date for days-until-renewal.
        settings: Threshold source; defaults to get_settings().

    Returns:
        The RenewalBucket for the client.
    """
    settings = settings or get_settings()

    if client.renewal is not None and client.renewal.inNegotiation:
        return RenewalBucket.ACTIVE_NEGOTIATIONS

    days = days_until_renewal(client, as_of)
    if days is None:
        return RenewalBucket.UNSCHEDULED
    if days < settings.renewal_soon_days:
        return RenewalBucket.EXPIRING_SOON
    if days < settings.renewal_quarter_days:
        return RenewalBucket.DUE_THIS_QUARTER
    return RenewalBucket.FUTURE_RENEWALS


def classify_renewal_pipeline(
    clients: Sequence[ClientRecord],
    as_of: date,
    *,
    strict: bool = False,
    settings: Optional[Settings] = None,
) -> RenewalPipeline:
    """
    Build the renewal pipeline for a roster.

    Args:
        clients: Client roster snapshot.
        as_of: Reference date. Passed explicitly so repeated calls over the
            same snapshot are reproducible.
        strict: Raise InvalidRecordError on a negative contract value instead
            of reporting and excluding the record.
        settings: Threshold source; defaults to get_settings().

    Returns:
        RenewalPipeline with one PipelineBucket per stage.
    """
    settings = settings or get_settings()
    valid, issues = partition_valid_records(
        clients,
        checks=(check_contract_value,),
        calculator=CalculatorName.RENEWAL_PIPELINE,
        strict=strict,
    )

    members: Dict[RenewalBucket, List[ClientRecord]] = {bucket: [] for bucket in RenewalBucket}
    for client in valid:
        members[classify_renewal(client, as_of, settings)].append(client)

    total = len(valid)
    buckets = {
        bucket: PipelineBucket(
            count=len(group),
            percentage=percentage(len(group), total),
            value=sum(contract_value(c) for c in group),
            clientIds=tuple(c.id for c in group),
        )
        for bucket, group in members.items()
    }

    total_pipeline_value = sum(
        stage.value
        for bucket, stage in buckets.items()
        if bucket != RenewalBucket.ACTIVE_NEGOTIATIONS
    )

    return RenewalPipeline(
        activeNegotiations=buckets[RenewalBucket.ACTIVE_NEGOTIATIONS],
        expiringSoon=buckets[RenewalBucket.EXPIRING_SOON],
        dueThisQuarter=buckets[RenewalBucket.DUE_THIS_QUARTER],
        futureRenewals=buckets[RenewalBucket.FUTURE_RENEWALS],
        unscheduled=buckets[RenewalBucket.UNSCHEDULED],
        totalPipelineValue=total_pipeline_value,
        total=total,
        asOf=as_of,
        issues=tuple(issues),
    )
