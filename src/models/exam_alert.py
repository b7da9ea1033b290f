"""SQLAlchemy ORM model for the exam_alerts table."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from sqlalchemy import Date, Integer, String, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import Base


class ExamAlert(Base):
    """Administrator-defined window exams must be scheduled within.

    Attributes:
        id: Auto-incrementing primary key.
        title: Display title.
        exam_type: e.g. ``"Internal Assessment-II"``.
        academic_year_label: e.g. ``"2025-26"``.
        start_date: First schedulable date.
        end_date: Last schedulable date.
        booking_deadline: Date after which teachers should stop booking.
        year: Target year of study.
        semester: Target semester.
        departments: Target department codes; empty means every department.
        status: ``active`` or ``closed``.
        created_by: Email of the administrator who created it.
        created_at: Timestamp of record creation.
    """

    __tablename__ = "exam_alerts"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    exam_type: Mapped[str | None] = mapped_column(String(60), nullable=True)
    academic_year_label: Mapped[str | None] = mapped_column(String(20), nullable=True)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    booking_deadline: Mapped[date | None] = mapped_column(Date, nullable=True)
    year: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    semester: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    departments: Mapped[list[Any]] = mapped_column(JSONB, nullable=False, default=list)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="active", index=True
    )
    created_by: Mapped[str | None] = mapped_column(String(200), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        nullable=False, server_default=text("CURRENT_TIMESTAMP")
    )

    def covers(self, day: date, department_code: str | None = None) -> bool:
        """Return True when *day* lies in the window and the department is targeted."""
        if self.status != "active":
            return False
        if not (self.start_date <= day <= self.end_date):
            return False
        if self.departments and department_code is not None:
            return department_code.upper() in {str(d).upper() for d in self.departments}
        return True

    def __repr__(self) -> str:
        return f"<ExamAlert(id={self.id}, {self.start_date}..{self.end_date})>"
