"""SQLAlchemy ORM model for the exam_schedules table."""

from __future__ import annotations

import uuid
from datetime import date, datetime, time
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Date, ForeignKey, Time, UniqueConstraint, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.base import Base

if TYPE_CHECKING:
    from src.models.department import Department
    from src.models.subject import Subject


class ExamSchedule(Base):
    """One scheduling commitment per (subject, department) pair.

    Rows are created the first time a department schedules its subject and
    updated in place afterwards.  Rows created by a shared-subject fan-out
    record the department whose action created them in
    ``priority_department_id``.

    Attributes:
        id: Auto-incrementing primary key.
        subject_id: Scheduled subject.
        department_id: Department owning this commitment.
        exam_date: Exam date.
        exam_time: Optional exam start time.
        assigned_by: User who made the assignment.
        is_shared: Whether the row is part of a cross-department schedule.
        priority_department_id: Acting department of a fan-out, else ``None``.
        created_at: Timestamp of record creation.
        updated_at: Timestamp of last update.
    """

    __tablename__ = "exam_schedules"
    __table_args__ = (UniqueConstraint("subject_id", "department_id"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    subject_id: Mapped[int] = mapped_column(
        ForeignKey("subjects.id", ondelete="RESTRICT"), nullable=False
    )
    department_id: Mapped[int] = mapped_column(
        ForeignKey("departments.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    exam_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    exam_time: Mapped[time | None] = mapped_column(Time, nullable=True)
    assigned_by: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    is_shared: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    priority_department_id: Mapped[int | None] = mapped_column(
        ForeignKey("departments.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        nullable=False, server_default=text("CURRENT_TIMESTAMP")
    )
    updated_at: Mapped[datetime] = mapped_column(
        nullable=False, server_default=text("CURRENT_TIMESTAMP")
    )

    subject: Mapped[Subject] = relationship("Subject", back_populates="schedules")
    department: Mapped[Department] = relationship(
        "Department", foreign_keys=[department_id]
    )
    priority_department: Mapped[Department | None] = relationship(
        "Department", foreign_keys=[priority_department_id]
    )

    def __repr__(self) -> str:
        return (
            f"<ExamSchedule(id={self.id}, subject_id={self.subject_id}, "
            f"department_id={self.department_id}, date={self.exam_date})>"
        )
