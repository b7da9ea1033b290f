"""SQLAlchemy ORM model for the subjects table."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, List

from sqlalchemy import Boolean, ForeignKey, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from src.models.base import Base
from src.naming import clean, name_key

if TYPE_CHECKING:
    from src.models.department import Department
    from src.models.exam_schedule import ExamSchedule


class Subject(Base):
    """Canonical subject taught by one department.

    Subjects taught by several departments under the same name are "shared";
    they are correlated by ``name_key`` rather than by a foreign key.

    Attributes:
        id: Auto-incrementing primary key.
        subject_code: Unique subject code (e.g. ``"CS301"``).
        subject_name: Display name.
        name_key: Normalised ``subject_name``.
        department_id: Owning department.
        academic_year: Year of study (1-4), when known.
        semester: Semester number, when known.
        is_shared: Whether the subject is scheduled across departments.
        shared_subject_code: Code used to correlate shared instances.
        created_at: Timestamp of record creation.
    """

    __tablename__ = "subjects"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    subject_code: Mapped[str] = mapped_column(String(30), nullable=False, unique=True)
    subject_name: Mapped[str] = mapped_column(String(200), nullable=False)
    name_key: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    department_id: Mapped[int] = mapped_column(
        ForeignKey("departments.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    academic_year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    semester: Mapped[int | None] = mapped_column(Integer, nullable=True)
    is_shared: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    shared_subject_code: Mapped[str | None] = mapped_column(String(30), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        nullable=False, server_default=text("CURRENT_TIMESTAMP")
    )

    department: Mapped[Department] = relationship("Department")
    schedules: Mapped[List[ExamSchedule]] = relationship(
        "ExamSchedule", back_populates="subject"
    )

    @validates("subject_name")
    def _sync_name_key(self, _key: str, value: str) -> str:
        value = clean(value)
        self.name_key = name_key(value)
        return value

    @validates("subject_code")
    def _clean_code(self, _key: str, value: str) -> str:
        return clean(value)

    def __repr__(self) -> str:
        return f"<Subject(id={self.id}, code='{self.subject_code}')>"
