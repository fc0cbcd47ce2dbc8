"""
Client Roster Ingestion Service

Turns client exports (CSV files or pandas DataFrames with legacy column
names) into canonical ClientRecord objects the calculators consume, and
validates legacy client dicts before import.

Key Features:
- Legacy column name -> canonical field path suggestions
- Dotted-path transform into the nested canonical client shape
- Per-row record construction with failures reported, not raised
- Legacy client validation (ranges, dates, enums, completeness warnings)
- Legacy client sanitization (null removal, numeric coercion, trimming)

Canonical field paths use dots for nesting, e.g. ``renewal.date`` becomes
``{"renewal": {"date": ...}}`` before pydantic validation.
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence
import io
import logging
import re

import numpy as np
import pandas as pd
from pydantic import ValidationError as PydanticValidationError

from portfolio_metrics.models import (
    BatchValidationResult,
    CalculatorName,
    ClientRecord,
    FieldPresence,
    InvalidLegacyClient,
    RecordIssue,
    RosterLoadResult,
    ValidationResult,
    ValidationStats,
)

# Configure module logger
logger = logging.getLogger(__name__)

# =============================================================================
# CONSTANTS - Canonical Fields
# =============================================================================

CANONICAL_FIELDS: List[str] = [
    'id',
    'company.name',
    'contact.name',
    'contact.email',
    'contract.startDate',
    'contract.endDate',
    'contract.value',
    'renewal.date',
    'renewal.inNegotiation',
    'mrr',
    'oneTimeRevenue',
    'ltv',
    'subscribedMonths',
    'health.score',
    'subscription.status',
    'churn.risk',
    'nps.score',
    'nps.comment',
    'usage.last30d',
    'csm.owner',
]

# Canonical fields an import must map before the dashboard is useful
REQUIRED_CANONICAL_FIELDS: List[str] = [
    'company.name',
    'contact.name',
    'contact.email',
    'contract.startDate',
    'contract.endDate',
    'renewal.date',
    'mrr',
]

# Values lowercased before validation so "Active" / "HIGH" match the enums
LOWERCASE_FIELDS: List[str] = ['subscription.status', 'churn.risk']

# Parsed with pandas so non-ISO export dates ("11/01/2026") load
DATE_FIELDS: List[str] = ['renewal.date', 'contract.startDate', 'contract.endDate']

# =============================================================================
# CONSTANTS - Legacy -> Canonical Mapping Suggestions
# =============================================================================

LEGACY_MAPPING_TABLE: Dict[str, str] = {
    # Client identification
    'client_id': 'id',
    'id': 'id',
    'account_id': 'id',
    'customer_id': 'id',
    'external_id': 'id',

    # Company identification
    'client_name': 'company.name',
    'company_name': 'company.name',
    'account_name': 'company.name',
    'organization': 'company.name',
    'company': 'company.name',
    'client': 'company.name',

    # Contact information
    'contact_name': 'contact.name',
    'contact': 'contact.name',
    'name': 'contact.name',
    'primary_contact': 'contact.name',
    'rep': 'contact.name',

    'contact_email': 'contact.email',
    'email': 'contact.email',
    'primary_email': 'contact.email',
    'contact_mail': 'contact.email',

    # Contract
    'contract_start_date': 'contract.startDate',
    'start_date': 'contract.startDate',
    'contract_start': 'contract.startDate',
    'subscription_start': 'contract.startDate',

    'contract_end_date': 'contract.endDate',
    'end_date': 'contract.endDate',
    'contract_end': 'contract.endDate',
    'expiry_date': 'contract.endDate',
    'subscription_end': 'contract.endDate',

    'contract_value': 'contract.value',
    'acv': 'contract.value',
    'annual_contract_value': 'contract.value',

    # Renewal
    'renewal_date': 'renewal.date',
    'next_renewal': 'renewal.date',
    'renewal': 'renewal.date',
    'review_date': 'renewal.date',

    'in_negotiation': 'renewal.inNegotiation',
    'negotiating': 'renewal.inNegotiation',
    'renewal_in_negotiation': 'renewal.inNegotiation',

    # Revenue
    'mrr': 'mrr',
    'monthly_recurring_revenue': 'mrr',
    'monthly_revenue': 'mrr',
    'revenue': 'mrr',
    'monthly_value': 'mrr',

    'one_time_revenue': 'oneTimeRevenue',
    'onetime_revenue': 'oneTimeRevenue',
    'services_revenue': 'oneTimeRevenue',

    # Lifetime value
    'ltv': 'ltv',
    'lifetime_value': 'ltv',
    'customer_lifetime_value': 'ltv',
    'total_value': 'ltv',
    'clv': 'ltv',

    # Subscription
    'subscribed_months': 'subscribedMonths',
    'tenure': 'subscribedMonths',
    'months_subscribed': 'subscribedMonths',
    'subscription_months': 'subscribedMonths',
    'months': 'subscribedMonths',

    'subscription_status': 'subscription.status',
    'status': 'subscription.status',

    # Health, risk and satisfaction
    'health_score': 'health.score',
    'health': 'health.score',
    'churn_risk': 'churn.risk',
    'risk': 'churn.risk',
    'nps_score': 'nps.score',
    'nps': 'nps.score',
    'nps_comment': 'nps.comment',
    'usage_30d': 'usage.last30d',
    'usage_last_30d': 'usage.last30d',

    # Ownership
    'csm_owner': 'csm.owner',
    'csm': 'csm.owner',
    'account_manager': 'csm.owner',
}

# =============================================================================
# CONSTANTS - Legacy Validation
# =============================================================================

LEGACY_NUMERIC_FIELDS: List[str] = [
    'health_score', 'mrr', 'usage_30d', 'nps_score', 'contract_value', 'ltv',
]
LEGACY_STRING_FIELDS: List[str] = [
    'company_name', 'client_name', 'churn_risk', 'subscription_status',
]
LEGACY_DATE_FIELDS: List[str] = [
    'renewal_date', 'contract_start_date', 'contract_end_date',
]

# (field, lower bound, upper bound or None, message)
LEGACY_RANGE_RULES = [
    ('health_score', 0, 100, 'health_score must be a number between 0 and 100'),
    ('mrr', 0, None, 'mrr must be a non-negative number'),
    ('usage_30d', 0, 100, 'usage_30d must be a number between 0 and 100'),
    ('nps_score', 0, 10, 'nps_score must be a number between 0 and 10'),
    ('contract_value', 0, None, 'contract_value must be a non-negative number'),
]

VALID_CHURN_RISKS: List[str] = ['low', 'medium', 'high', 'critical']
VALID_SUBSCRIPTION_STATUSES: List[str] = ['active', 'trial', 'suspended', 'cancelled']
VALID_MOMENTUM: List[str] = ['up', 'down', 'stable']

EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')


# =============================================================================
# MAPPING FUNCTIONS
# =============================================================================

def get_suggested_mapping(legacy_field: str) -> Optional[str]:
    """
    Suggest the canonical field path for a legacy column name.

    Args:
        legacy_field: Column name as found in the export.

    Returns:
        Canonical dotted path, or None when there is no suggestion.
    """
    return LEGACY_MAPPING_TABLE.get(str(legacy_field).strip().lower())


def suggest_field_mapping(columns: Iterable[str]) -> Dict[str, str]:
    """
    Build a column -> canonical path mapping for every recognised column.

    When several columns map to the same canonical path the first one wins.
    """
    mappings: Dict[str, str] = {}
    claimed = set()
    for column in columns:
        target = get_suggested_mapping(column)
        if target is None or target in claimed:
            continue
        mappings[column] = target
        claimed.add(target)
    return mappings


def _has_nested_field(record: Mapping[str, Any], field_path: str) -> bool:
    current: Any = record
    for key in field_path.split('.'):
        if not isinstance(current, Mapping) or current.get(key) is None:
            return False
        current = current[key]
    return True


def check_field_presence(
    required_fields: Sequence[str],
    dataset: Sequence[Mapping[str, Any]],
) -> FieldPresence:
    """
    Check which canonical fields a dataset carries, using its first record.

    Args:
        required_fields: Canonical dotted paths to look for.
        dataset: Canonical (nested) client dicts.

    Returns:
        FieldPresence; an empty dataset reports every field missing.
    """
    if not dataset:
        return FieldPresence(hasAll=False, missing=list(required_fields), available=[])

    sample = dataset[0]
    available = [f for f in required_fields if _has_nested_field(sample, f)]
    missing = [f for f in required_fields if f not in available]
    return FieldPresence(hasAll=not missing, missing=missing, available=available)


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ''
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _to_python(value: Any) -> Any:
    """Unwrap numpy scalars so pydantic sees plain Python values."""
    if isinstance(value, np.generic):
        return value.item()
    return value


def _format_id(value: Any) -> str:
    """Stringify an id; integral floats (NaN-upcast int columns) lose the ".0"."""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def _parse_date(value: Any) -> Any:
    """
    Parse an export date to ``datetime.date``.

    Unparseable values are returned unchanged so record validation reports
    them against the row.
    """
    parsed = pd.to_datetime(value, errors='coerce')
    if pd.isna(parsed):
        return value
    return parsed.date()


def _set_nested_field(target: Dict[str, Any], field_path: str, value: Any) -> None:
    keys = field_path.split('.')
    current = target
    for key in keys[:-1]:
        if not isinstance(current.get(key), dict):
            current[key] = {}
        current = current[key]
    current[keys[-1]] = value


def transform_to_canonical(
    rows: Iterable[Mapping[str, Any]],
    mappings: Mapping[str, str],
) -> List[Dict[str, Any]]:
    """
    Convert flat export rows into nested canonical client dicts.

    Blank, None and NaN cells are skipped so the model defaults apply.

    Args:
        rows: Flat rows keyed by export column name.
        mappings: Export column -> canonical dotted path.

    Returns:
        One canonical dict per row, in input order.
    """
    canonical_rows: List[Dict[str, Any]] = []
    for row in rows:
        canonical: Dict[str, Any] = {}
        for source_field, target_field in mappings.items():
            value = row.get(source_field)
            if _is_blank(value):
                continue
            value = _to_python(value)
            if target_field == 'id':
                value = _format_id(value)
            elif target_field in DATE_FIELDS:
                value = _parse_date(value)
            elif target_field in LOWERCASE_FIELDS and isinstance(value, str):
                value = value.strip().lower()
            _set_nested_field(canonical, target_field, value)
        canonical_rows.append(canonical)
    return canonical_rows


# =============================================================================
# RECORD CONSTRUCTION
# =============================================================================

def _issue_from_validation_error(
    exc: PydanticValidationError,
    canonical: Mapping[str, Any],
    index: int,
) -> RecordIssue:
    first = exc.errors()[0]
    return RecordIssue(
        calculator=CalculatorName.INGESTION,
        recordId=canonical.get('id'),
        index=index,
        field='.'.join(str(part) for part in first.get('loc', ())) or 'record',
        value=first.get('input'),
        message=first.get('msg', str(exc)),
    )


def records_from_dataframe(
    df: pd.DataFrame,
    mappings: Optional[Mapping[str, str]] = None,
) -> RosterLoadResult:
    """
    Build ClientRecords from a client export DataFrame.

    Args:
        df: Export with one client per row.
        mappings: Column -> canonical path; defaults to suggest_field_mapping
            over the DataFrame's columns.

    Returns:
        RosterLoadResult with the records that validated and one RecordIssue
        per row that did not (row index is 0-based).
    """
    if mappings is None:
        mappings = suggest_field_mapping(df.columns)
        logger.info(f"Using suggested mappings for {len(mappings)} of {len(df.columns)} columns")

    canonical_rows = transform_to_canonical(df.to_dict(orient='records'), mappings)

    records: List[ClientRecord] = []
    issues: List[RecordIssue] = []
    for index, canonical in enumerate(canonical_rows):
        try:
            records.append(ClientRecord.model_validate(canonical))
        except PydanticValidationError as e:
            issue = _issue_from_validation_error(e, canonical, index)
            logger.warning(f"Skipping row {index}: {issue.field}: {issue.message}")
            issues.append(issue)

    logger.info(f"Loaded {len(records)} client records ({len(issues)} rows rejected)")
    return RosterLoadResult(records=records, issues=issues)


def load_roster_csv(
    content: bytes,
    mappings: Optional[Mapping[str, str]] = None,
) -> RosterLoadResult:
    """
    Parse a CSV client export and build ClientRecords.

    All cells are read as strings; pydantic coerces them to the field types.
    Parse failures and empty files are reported as a single file-level
    RecordIssue rather than raised.

    Args:
        content: Raw CSV bytes (UTF-8).
        mappings: Column -> canonical path; defaults to suggestions.

    Returns:
        RosterLoadResult.
    """
    try:
        df = pd.read_csv(io.BytesIO(content), dtype=str)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        logger.warning(f"Failed to parse client CSV: {e}")
        return RosterLoadResult(issues=[RecordIssue(
            calculator=CalculatorName.INGESTION,
            field='file',
            message=f'Failed to parse CSV file: {e}',
        )])

    if df.empty:
        return RosterLoadResult(issues=[RecordIssue(
            calculator=CalculatorName.INGESTION,
            field='file',
            message='CSV file is empty or contains no data rows',
        )])

    logger.info(f"Parsed CSV with {len(df)} rows and {len(df.columns)} columns")
    return records_from_dataframe(df, mappings)


# =============================================================================
# LEGACY CLIENT VALIDATION
# =============================================================================

def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float, np.number)) and not isinstance(value, bool)


def _is_valid_date(value: Any) -> bool:
    return not pd.isna(pd.to_datetime(value, errors='coerce'))


def validate_legacy_client(client: Any) -> ValidationResult:
    """
    Validate a single legacy client dict before import.

    Errors make the record invalid; warnings flag incomplete or suspicious
    data that still imports.

    Args:
        client: Legacy (flat, snake_case) client dict.

    Returns:
        ValidationResult.
    """
    errors: List[str] = []
    warnings: List[str] = []

    if not isinstance(client, Mapping):
        return ValidationResult(isValid=False, errors=['Client data must be an object'])

    client_id = client.get('id')
    if not client_id or not isinstance(client_id, str):
        errors.append('Client ID is required and must be a string')

    if not client.get('company_name') and not client.get('client_name'):
        errors.append('Either company_name or client_name is required')

    # Numeric ranges
    for field_name, low, high, message in LEGACY_RANGE_RULES:
        if field_name not in client:
            continue
        value = client[field_name]
        if not _is_number(value) or value < low or (high is not None and value > high):
            errors.append(message)

    # Dates
    for field_name in LEGACY_DATE_FIELDS:
        if field_name in client and not _is_valid_date(client[field_name]):
            errors.append(f'{field_name} must be a valid date')

    # Enums
    if 'churn_risk' in client and client['churn_risk'] not in VALID_CHURN_RISKS:
        errors.append(f"churn_risk must be one of: {', '.join(VALID_CHURN_RISKS)}")

    if 'subscription_status' in client and client['subscription_status'] not in VALID_SUBSCRIPTION_STATUSES:
        errors.append(
            f"subscription_status must be one of: {', '.join(VALID_SUBSCRIPTION_STATUSES)}"
        )

    for field_name in ('call_momentum', 'login_momentum'):
        if field_name in client and client[field_name] not in VALID_MOMENTUM:
            warnings.append(f"{field_name} should be one of: {', '.join(VALID_MOMENTUM)}")

    if 'contact_email' in client:
        email = client['contact_email']
        if not isinstance(email, str) or not EMAIL_PATTERN.match(email):
            warnings.append('contact_email should be a valid email address')

    # Completeness
    if not client.get('mrr') and not client.get('contract_value'):
        warnings.append('Neither MRR nor contract_value provided - revenue analytics may be limited')

    if not client.get('health_score'):
        warnings.append('No health_score provided - health monitoring will be unavailable')

    if not client.get('renewal_date'):
        warnings.append('No renewal_date provided - renewal tracking will be unavailable')

    return ValidationResult(isValid=not errors, errors=errors, warnings=warnings)


def validate_legacy_clients(clients: Any) -> BatchValidationResult:
    """
    Validate a list of legacy client dicts.

    Error and warning messages are prefixed with the 1-based client number.
    """
    if not isinstance(clients, (list, tuple)):
        return BatchValidationResult(
            isValid=False,
            errors=['Input must be an array of client objects'],
        )

    valid_clients: List[Dict[str, Any]] = []
    invalid_clients: List[InvalidLegacyClient] = []
    all_errors: List[str] = []
    all_warnings: List[str] = []

    for index, client in enumerate(clients):
        result = validate_legacy_client(client)
        if result.isValid:
            valid_clients.append(dict(client))
        else:
            invalid_clients.append(InvalidLegacyClient(
                index=index,
                client=client,
                errors=result.errors,
            ))
            all_errors.extend(f'Client {index + 1}: {error}' for error in result.errors)
        all_warnings.extend(f'Client {index + 1}: {warning}' for warning in result.warnings)

    return BatchValidationResult(
        isValid=not invalid_clients,
        errors=all_errors,
        warnings=all_warnings,
        validClients=valid_clients,
        invalidClients=invalid_clients,
        stats=ValidationStats(
            total=len(clients),
            valid=len(valid_clients),
            invalid=len(invalid_clients),
        ),
    )


def sanitize_legacy_client(client: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Return a cleaned copy of a legacy client dict.

    - Drops None / NaN values
    - Converts numeric strings in numeric fields to floats
    - Trims whitespace on name, risk and status fields
    - Trims and lowercases contact_email
    """
    sanitized = {key: value for key, value in client.items() if not _is_blank_value(value)}

    for field_name in LEGACY_NUMERIC_FIELDS:
        value = sanitized.get(field_name)
        if isinstance(value, str):
            number = pd.to_numeric(value.strip(), errors='coerce')
            if not pd.isna(number):
                sanitized[field_name] = float(number)

    for field_name in LEGACY_STRING_FIELDS:
        if isinstance(sanitized.get(field_name), str):
            sanitized[field_name] = sanitized[field_name].strip()

    if isinstance(sanitized.get('contact_email'), str):
        sanitized['contact_email'] = sanitized['contact_email'].strip().lower()

    return sanitized


def _is_blank_value(value: Any) -> bool:
    """None or NaN; empty strings are kept (unlike _is_blank)."""
    if value is None:
        return True
    return isinstance(value, float) and np.isnan(value)


__all__ = [
    'CANONICAL_FIELDS',
    'REQUIRED_CANONICAL_FIELDS',
    'LEGACY_MAPPING_TABLE',
    'get_suggested_mapping',
    'suggest_field_mapping',
    'check_field_presence',
    'transform_to_canonical',
    'records_from_dataframe',
    'load_roster_csv',
    'validate_legacy_client',
    'validate_legacy_clients',
    'sanitize_legacy_client',
]
