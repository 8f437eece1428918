"""
app/importers/report.py

Aggregates validated rows into the per-file import report.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence

from app.domain.plan_import import ImportResult, ParsedActivity, RowStatus


def build_import_result(activities: Sequence[ParsedActivity], file_type: str) -> ImportResult:
    counts = Counter(activity.status for activity in activities)
    return ImportResult(
        total_rows=len(activities),
        valid_rows=counts[RowStatus.VALID],
        warning_rows=counts[RowStatus.WARNING],
        error_rows=counts[RowStatus.ERROR],
        file_type=file_type,
        activities=list(activities),
    )
