"""
app/importers/mpp_rejector.py

Binary Microsoft Project (.mpp) files are not decoded; the upload yields one
explanatory error row so the review screen still has something to show.
"""

from __future__ import annotations

from app.domain.plan_import import ImportResult, ParsedActivity, PlanFileType, RowStatus

MPP_CONVERSION_MESSAGE = (
    "Binary .mpp files cannot be imported. Save the plan as Microsoft Project "
    "XML (.xml) and upload that file instead."
)


def reject_mpp() -> ImportResult:
    """
    The synthetic row is listed in activities but not counted in total_rows.
    """

    placeholder = ParsedActivity(
        project_code="",
        area_name="",
        system_name="",
        activity_code="",
        activity_name="",
        unit="",
        boq_qty=0.0,
        weight=0.0,
        status=RowStatus.ERROR,
        error_message=MPP_CONVERSION_MESSAGE,
    )
    return ImportResult(
        total_rows=0,
        valid_rows=0,
        warning_rows=0,
        error_rows=1,
        file_type=PlanFileType.MPP,
        activities=[placeholder],
    )
