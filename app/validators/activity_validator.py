"""
app/validators/activity_validator.py

Row-level validation applied uniformly to candidates from every plan format.
"""

from __future__ import annotations

import math

from app.domain.plan_import import CandidateRow, ParsedActivity, RowStatus

MISSING_CODE_OR_NAME = "Activity code and name are required."
NON_POSITIVE_QUANTITY = "BOQ quantity must be greater than zero."
NON_POSITIVE_WEIGHT = "Weight must be greater than zero."


class ActivityRowValidator:
    """
    Assigns a status to one candidate row; the first failing rule wins.

    Status depends only on the row's own fields, so rows can be validated
    in any order.
    """

    def validate(self, candidate: CandidateRow) -> ParsedActivity:
        activity_code = candidate.activity_code.strip()
        activity_name = candidate.activity_name.strip()
        boq_qty = self._finite(candidate.boq_qty)
        weight = self._finite(candidate.weight)

        status, message = self._classify(
            activity_code=activity_code,
            activity_name=activity_name,
            boq_qty=boq_qty,
            weight=weight,
        )
        return ParsedActivity(
            project_code=candidate.project_code.strip(),
            area_name=candidate.area_name.strip(),
            system_name=candidate.system_name.strip(),
            activity_code=activity_code,
            activity_name=activity_name,
            unit=candidate.unit.strip(),
            boq_qty=boq_qty,
            weight=weight,
            status=status,
            error_message=message,
        )

    def validate_all(self, candidates: list[CandidateRow]) -> list[ParsedActivity]:
        return [self.validate(candidate) for candidate in candidates]

    @staticmethod
    def _classify(
        *,
        activity_code: str,
        activity_name: str,
        boq_qty: float,
        weight: float,
    ) -> tuple[str, str | None]:
        if not activity_code or not activity_name:
            return RowStatus.ERROR, MISSING_CODE_OR_NAME
        if boq_qty <= 0:
            return RowStatus.WARNING, NON_POSITIVE_QUANTITY
        if weight <= 0:
            return RowStatus.WARNING, NON_POSITIVE_WEIGHT
        return RowStatus.VALID, None

    @staticmethod
    def _finite(value: float) -> float:
        try:
            number = float(value)
        except (TypeError, ValueError):
            return 0.0
        return number if math.isfinite(number) else 0.0
