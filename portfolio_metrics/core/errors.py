"""
Exception types raised by the metrics calculators.

Calculators normally collect InvalidRecord problems as RecordIssue entries on
their bundle. When called with ``strict=True`` they raise InvalidRecordError
on the first malformed record instead.
"""

from portfolio_metrics.models.schemas import RecordIssue


class InvalidRecordError(ValueError):
    """
    A client record (or survey response) failed range validation.

    Attributes:
        issue: The RecordIssue describing the offending field and value.
    """

    def __init__(self, issue: RecordIssue):
        self.issue = issue
        super().__init__(
            f"{issue.calculator.value}: record {issue.recordId!r} "
            f"(index {issue.index}) has invalid {issue.field}: {issue.message}"
        )
