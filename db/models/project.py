"""
db/models/project.py

Project model: the construction project that owns imported activities.
"""

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import Index, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, TimestampMixin

if TYPE_CHECKING:
    from db.models.activity import Activity


class Project(Base, TimestampMixin):
    """
    A tracked project, addressed by its short business code (e.g. FP01).
    """

    __tablename__ = "projects"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    code: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        unique=True,
        comment="Business identifier used by plan files",
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[str | None] = mapped_column(String(32), nullable=True)

    activities: Mapped[list["Activity"]] = relationship(
        "Activity",
        back_populates="project",
        cascade="all, delete-orphan",
        lazy="select",
    )

    __table_args__ = (Index("ix_projects_status", "status"),)

    def __repr__(self) -> str:
        return f"<Project id={self.id} code={self.code!r}>"
