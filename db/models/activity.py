"""
db/models/activity.py

Activity model: durable unit of schedulable work inside a project.

Rows are created by committing the valid subset of a plan import; the
(project_id, code) pair is unique so concurrent commits cannot duplicate codes.
"""

import uuid
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, Index, Numeric, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, TimestampMixin

if TYPE_CHECKING:
    from db.models.project import Project

ACTIVITY_CODE_CONSTRAINT = "uq_activities_project_code"


class Activity(Base, TimestampMixin):
    __tablename__ = "activities"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    project_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
    )
    code: Mapped[str] = mapped_column(String(64), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    unit: Mapped[str] = mapped_column(String(32), nullable=False)
    boq_qty: Mapped[Decimal] = mapped_column(
        Numeric(18, 4),
        nullable=False,
        comment="Budgeted quantity in the activity unit",
    )
    weight: Mapped[Decimal] = mapped_column(
        Numeric(12, 6),
        nullable=False,
        comment="Relative weighting for progress aggregation",
    )
    area_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    system_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_by: Mapped[str | None] = mapped_column(String(255), nullable=True)

    project: Mapped["Project"] = relationship("Project", back_populates="activities")

    __table_args__ = (
        UniqueConstraint("project_id", "code", name=ACTIVITY_CODE_CONSTRAINT),
        Index("ix_activities_project_id", "project_id"),
    )

    def __repr__(self) -> str:
        return f"<Activity id={self.id} project_id={self.project_id} code={self.code!r}>"
