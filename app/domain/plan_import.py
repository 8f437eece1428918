"""
app/domain/plan_import.py

Domain models used by the plan import flow.
"""

from __future__ import annotations

from dataclasses import dataclass, field

PLAN_COLUMNS: tuple[str, ...] = (
    "project_code",
    "area_name",
    "system_name",
    "activity_code",
    "activity_name",
    "unit",
    "boq_qty",
    "weight",
)


class RowStatus:
    VALID = "valid"
    WARNING = "warning"
    ERROR = "error"


class PlanFileType:
    CSV = "CSV"
    XER = "Primavera P6 (.xer)"
    PROJECT_XML = "Microsoft Project (.xml)"
    MPP = "Microsoft Project (.mpp)"


@dataclass(frozen=True)
class CandidateRow:
    """
    Normalized field tuple extracted by a format parser, not yet validated.
    """

    project_code: str = ""
    area_name: str = ""
    system_name: str = ""
    activity_code: str = ""
    activity_name: str = ""
    unit: str = ""
    boq_qty: float = 0.0
    weight: float = 0.0


@dataclass(frozen=True)
class ParsedActivity:
    """
    One source row after validation.
    """

    project_code: str
    area_name: str
    system_name: str
    activity_code: str
    activity_name: str
    unit: str
    boq_qty: float
    weight: float
    status: str
    error_message: str | None = None

    @property
    def is_valid(self) -> bool:
        return self.status == RowStatus.VALID


@dataclass(frozen=True)
class ImportResult:
    """
    Per-file parse report handed to the review step.
    """

    total_rows: int
    valid_rows: int
    warning_rows: int
    error_rows: int
    file_type: str
    activities: list[ParsedActivity] = field(default_factory=list)

    def valid_activities(self) -> list[ParsedActivity]:
        return [activity for activity in self.activities if activity.is_valid]


class CommitOutcome:
    INSERTED = "inserted"
    UPDATED = "updated"
    ALREADY_EXISTS = "already_exists"
    DUPLICATE_IN_FILE = "duplicate_in_file"
    NOT_VALID = "not_valid"


@dataclass(frozen=True)
class CommitRowResult:
    """
    Outcome of one attempted activity insert.
    """

    activity_code: str
    outcome: str
    message: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.outcome in {CommitOutcome.INSERTED, CommitOutcome.UPDATED}


@dataclass(frozen=True)
class CommitSummary:
    """
    End-of-commit summary for one project.
    """

    project_code: str
    duplicate_policy: str
    inserted: int
    updated: int
    skipped: int
    rows: list[CommitRowResult] = field(default_factory=list)
