"""
app/repositories/activity_repository.py

Persistence layer for committed plan activities.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Sequence
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Protocol

from sqlalchemy import literal_column, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.orm import Session

from app.domain.plan_import import ParsedActivity
from db.base import utc_now
from db.models.activity import ACTIVITY_CODE_CONSTRAINT, Activity
from db.models.project import Project

_DEFAULT_BATCH_SIZE = 500

ON_CONFLICT_NOTHING = "nothing"
ON_CONFLICT_UPDATE = "update"

_UPSERT_COLUMNS = ("name", "unit", "boq_qty", "weight", "area_name", "system_name", "is_active")


# Domain field -> Activity column; the column types carry the storage limits.
_TEXT_COLUMNS = (
    ("activity_code", "code", "Activity code"),
    ("activity_name", "name", "Activity name"),
    ("unit", "unit", "Unit"),
    ("area_name", "area_name", "Area name"),
    ("system_name", "system_name", "System name"),
)
_NUMERIC_COLUMNS = (
    ("boq_qty", "boq_qty", "Quantity"),
    ("weight", "weight", "Weight"),
)


def storage_limit_problem(activity: ParsedActivity) -> str | None:
    """
    Return a message when ``activity`` does not fit the activities table.

    String lengths come from the String(n) columns; numeric magnitudes from
    Numeric(precision, scale), after rounding to the column scale the way
    PostgreSQL does on insert.
    """

    columns = Activity.__table__.c

    for field, column, label in _TEXT_COLUMNS:
        limit = columns[column].type.length
        value = getattr(activity, field) or ""
        if limit is not None and len(value) > limit:
            return f"{label} exceeds {limit} characters."

    for field, column, label in _NUMERIC_COLUMNS:
        precision, scale = columns[column].type.precision, columns[column].type.scale
        bound = Decimal(10) ** (precision - scale)
        value = Decimal(str(getattr(activity, field)))
        if not value.is_finite():
            return f"{label} must be a finite number."
        if abs(value) >= bound or abs(value.quantize(Decimal(1).scaleb(-scale), rounding=ROUND_HALF_UP)) >= bound:
            return f"{label} must be less than {bound:,}."

    return None


class ActivityStore(Protocol):
    """
    Storage capabilities the commit flow needs from the project data store.
    """

    def find_project_id(self, project_code: str) -> uuid.UUID | None:
        ...

    def list_activity_codes(
        self,
        project_id: uuid.UUID,
        codes: Iterable[str] | None = None,
    ) -> set[str]:
        ...

    def insert_activities(
        self,
        project_id: uuid.UUID,
        activities: Sequence[ParsedActivity],
        *,
        on_conflict: str,
        created_by: str | None = None,
        batch_size: int = _DEFAULT_BATCH_SIZE,
    ) -> dict[str, bool]:
        """
        Write rows; return {code: True if inserted, False if updated}.

        Codes missing from the result hit the unique constraint and were
        left untouched.
        """
        ...

    def commit(self) -> None:
        ...

    def rollback(self) -> None:
        ...


class ActivityRepository:
    """
    SQLAlchemy implementation of ActivityStore for PostgreSQL.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def find_project_id(self, project_code: str) -> uuid.UUID | None:
        stmt = select(Project.id).where(Project.code == project_code)
        return self._session.scalars(stmt).first()

    def list_activity_codes(
        self,
        project_id: uuid.UUID,
        codes: Iterable[str] | None = None,
    ) -> set[str]:
        stmt = select(Activity.code).where(Activity.project_id == project_id)
        if codes is not None:
            wanted = list(codes)
            if not wanted:
                return set()
            stmt = stmt.where(Activity.code.in_(wanted))
        return set(self._session.scalars(stmt).all())

    def insert_activities(
        self,
        project_id: uuid.UUID,
        activities: Sequence[ParsedActivity],
        *,
        on_conflict: str,
        created_by: str | None = None,
        batch_size: int = _DEFAULT_BATCH_SIZE,
    ) -> dict[str, bool]:
        if not activities:
            return {}

        payloads = [self._to_payload(project_id, activity, created_by) for activity in activities]
        size = max(1, batch_size)
        written: dict[str, bool] = {}

        for start in range(0, len(payloads), size):
            chunk = payloads[start : start + size]
            stmt = insert(Activity).values(chunk)
            if on_conflict == ON_CONFLICT_UPDATE:
                stmt = stmt.on_conflict_do_update(
                    constraint=ACTIVITY_CODE_CONSTRAINT,
                    set_={
                        **{column: stmt.excluded[column] for column in _UPSERT_COLUMNS},
                        "updated_at": utc_now(),
                    },
                )
            else:
                stmt = stmt.on_conflict_do_nothing(constraint=ACTIVITY_CODE_CONSTRAINT)

            # xmax is 0 only for freshly inserted tuples.
            stmt = stmt.returning(Activity.code, literal_column("(xmax = 0)").label("inserted"))
            for code, inserted in self._session.execute(stmt).all():
                written[code] = bool(inserted)

        return written

    def commit(self) -> None:
        self._session.commit()

    def rollback(self) -> None:
        self._session.rollback()

    @staticmethod
    def _to_payload(
        project_id: uuid.UUID,
        activity: ParsedActivity,
        created_by: str | None,
    ) -> dict[str, Any]:
        return {
            "id": uuid.uuid4(),
            "project_id": project_id,
            "code": activity.activity_code,
            "name": activity.activity_name,
            "unit": activity.unit,
            "boq_qty": Decimal(str(activity.boq_qty)),
            "weight": Decimal(str(activity.weight)),
            "area_name": activity.area_name or None,
            "system_name": activity.system_name or None,
            "is_active": True,
            "created_by": created_by,
        }
