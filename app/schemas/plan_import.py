"""
app/schemas/plan_import.py

Request and response schemas for the plan import endpoints.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from app.domain.plan_import import CommitSummary, ImportResult, ParsedActivity


class ParsedActivityResponse(BaseModel):
    """
    One parsed row as shown on the review screen.
    """

    project_code: str
    area_name: str
    system_name: str
    activity_code: str
    activity_name: str
    unit: str
    boq_qty: float
    weight: float
    status: Literal["valid", "warning", "error"]
    error_message: str | None = None

    @classmethod
    def from_domain(cls, activity: ParsedActivity) -> "ParsedActivityResponse":
        return cls(
            project_code=activity.project_code,
            area_name=activity.area_name,
            system_name=activity.system_name,
            activity_code=activity.activity_code,
            activity_name=activity.activity_name,
            unit=activity.unit,
            boq_qty=activity.boq_qty,
            weight=activity.weight,
            status=activity.status,
            error_message=activity.error_message,
        )

    def to_domain(self) -> ParsedActivity:
        return ParsedActivity(
            project_code=self.project_code,
            area_name=self.area_name,
            system_name=self.system_name,
            activity_code=self.activity_code,
            activity_name=self.activity_name,
            unit=self.unit,
            boq_qty=self.boq_qty,
            weight=self.weight,
            status=self.status,
            error_message=self.error_message,
        )


class ImportResultResponse(BaseModel):
    """
    Parse report for one uploaded file; counts use camelCase on the wire.
    """

    model_config = ConfigDict(populate_by_name=True)

    total_rows: int = Field(..., ge=0, alias="totalRows")
    valid_rows: int = Field(..., ge=0, alias="validRows")
    warning_rows: int = Field(..., ge=0, alias="warningRows")
    error_rows: int = Field(..., ge=0, alias="errorRows")
    activities: list[ParsedActivityResponse] = Field(default_factory=list)
    file_type: str = Field(..., alias="fileType")

    @classmethod
    def from_domain(cls, result: ImportResult) -> "ImportResultResponse":
        return cls(
            total_rows=result.total_rows,
            valid_rows=result.valid_rows,
            warning_rows=result.warning_rows,
            error_rows=result.error_rows,
            activities=[ParsedActivityResponse.from_domain(activity) for activity in result.activities],
            file_type=result.file_type,
        )


class CommitRequest(BaseModel):
    """
    Reviewed rows to persist; the project is inferred from the rows when omitted.
    """

    project_code: str | None = None
    created_by: str | None = Field(default=None, max_length=255)
    activities: list[ParsedActivityResponse] = Field(default_factory=list)


class CommitRowResponse(BaseModel):
    activity_code: str
    outcome: str
    message: str | None = None


class CommitSummaryResponse(BaseModel):
    """
    API response model for one commit.
    """

    project_code: str
    duplicate_policy: str
    inserted: int = Field(..., ge=0)
    updated: int = Field(..., ge=0)
    skipped: int = Field(..., ge=0)
    rows: list[CommitRowResponse] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, summary: CommitSummary) -> "CommitSummaryResponse":
        return cls(
            project_code=summary.project_code,
            duplicate_policy=summary.duplicate_policy,
            inserted=summary.inserted,
            updated=summary.updated,
            skipped=summary.skipped,
            rows=[
                CommitRowResponse(
                    activity_code=row.activity_code,
                    outcome=row.outcome,
                    message=row.message,
                )
                for row in summary.rows
            ],
        )


class ErrorResponse(BaseModel):
    """
    Body of every request-level failure.
    """

    error: str
    details: str
