"""Data access for the scheduling core.

Every read the conflict checker, schedule committer, subject resolver and
notifier perform goes through :class:`ScheduleRepository`, so the decision
logic never builds SQL itself.  Schedule reads are returned as flat
:class:`ScheduleRow` snapshots joined to their subject and departments.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import date, time

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from src.models.department import Department
from src.models.exam_alert import ExamAlert
from src.models.exam_schedule import ExamSchedule
from src.models.notification import Notification
from src.models.staff import Staff
from src.models.subject import Subject

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScheduleRow:
    """Read-only snapshot of one exam schedule joined to subject and department.

    Attributes:
        schedule_id: Primary key of the ``exam_schedules`` row.
        subject_id: Scheduled subject.
        subject_name: Subject display name.
        subject_code: Subject code.
        subject_key: Normalised subject name.
        academic_year: Subject's year of study.
        department_id: Department owning the row.
        department_name: That department's display name.
        department_code: That department's code.
        exam_date: Scheduled date.
        exam_time: Scheduled time, if any.
        assigned_by: User who assigned it.
        is_shared: Whether the row belongs to a cross-department schedule.
        priority_department_id: Acting department of the fan-out that created it.
        priority_department_name: Display name of that department.
    """

    schedule_id: int
    subject_id: int
    subject_name: str
    subject_code: str
    subject_key: str
    academic_year: int | None
    department_id: int
    department_name: str
    department_code: str
    exam_date: date
    exam_time: time | None
    assigned_by: uuid.UUID | None
    is_shared: bool
    priority_department_id: int | None
    priority_department_name: str | None

    @property
    def set_by_department(self) -> str:
        """Department whose action fixed this row's date."""
        return self.priority_department_name or self.department_name


class ScheduleRepository:
    """SQLAlchemy implementation of the scheduling store.

    Args:
        session: Request- or worker-scoped async session.  The repository
            flushes but never commits; the owner of the session decides when
            the unit of work ends.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    # ------------------------------------------------------------------
    # Plain lookups
    # ------------------------------------------------------------------

    async def get_staff(self, staff_id: int) -> Staff | None:
        return await self._session.get(Staff, staff_id)

    async def get_subject(self, subject_id: int) -> Subject | None:
        return await self._session.get(Subject, subject_id)

    async def get_department(self, department_id: int) -> Department | None:
        return await self._session.get(Department, department_id)

    async def get_department_by_key(self, key: str) -> Department | None:
        stmt = select(Department).where(Department.name_key == key)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_departments(self) -> list[Department]:
        result = await self._session.execute(select(Department).order_by(Department.code))
        return list(result.scalars().all())

    # ------------------------------------------------------------------
    # Schedule snapshots
    # ------------------------------------------------------------------

    def _row_query(self):
        priority = aliased(Department)
        stmt = (
            select(ExamSchedule, Subject, Department, priority.name)
            .join(Subject, ExamSchedule.subject_id == Subject.id)
            .join(Department, ExamSchedule.department_id == Department.id)
            .outerjoin(priority, ExamSchedule.priority_department_id == priority.id)
        )
        return stmt

    @staticmethod
    def _to_row(
        schedule: ExamSchedule,
        subject: Subject,
        department: Department,
        priority_name: str | None,
    ) -> ScheduleRow:
        return ScheduleRow(
            schedule_id=schedule.id,
            subject_id=subject.id,
            subject_name=subject.subject_name,
            subject_code=subject.subject_code,
            subject_key=subject.name_key,
            academic_year=subject.academic_year,
            department_id=department.id,
            department_name=department.name,
            department_code=department.code,
            exam_date=schedule.exam_date,
            exam_time=schedule.exam_time,
            assigned_by=schedule.assigned_by,
            is_shared=schedule.is_shared,
            priority_department_id=schedule.priority_department_id,
            priority_department_name=priority_name,
        )

    async def _fetch_rows(self, stmt) -> list[ScheduleRow]:
        result = await self._session.execute(stmt)
        return [self._to_row(*row) for row in result.all()]

    async def schedules_on_date(self, exam_date: date) -> list[ScheduleRow]:
        stmt = (
            self._row_query()
            .where(ExamSchedule.exam_date == exam_date)
            .order_by(ExamSchedule.id)
        )
        return await self._fetch_rows(stmt)

    async def schedules_for_subject(self, subject_key: str) -> list[ScheduleRow]:
        """All schedules whose subject carries *subject_key*, oldest first."""
        stmt = (
            self._row_query()
            .where(Subject.name_key == subject_key)
            .order_by(ExamSchedule.created_at, ExamSchedule.id)
        )
        return await self._fetch_rows(stmt)

    async def all_schedules(self, academic_year: int | None = None) -> list[ScheduleRow]:
        stmt = self._row_query()
        if academic_year is not None:
            stmt = stmt.where(Subject.academic_year == academic_year)
        stmt = stmt.order_by(
            ExamSchedule.exam_date, ExamSchedule.exam_time, ExamSchedule.id
        )
        return await self._fetch_rows(stmt)

    async def schedules_for_department(self, department_id: int) -> list[ScheduleRow]:
        stmt = (
            self._row_query()
            .where(ExamSchedule.department_id == department_id)
            .order_by(ExamSchedule.exam_date, ExamSchedule.id)
        )
        return await self._fetch_rows(stmt)

    # ------------------------------------------------------------------
    # Subjects
    # ------------------------------------------------------------------

    async def find_subject_by_code(self, subject_code: str) -> Subject | None:
        stmt = select(Subject).where(Subject.subject_code == subject_code)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def insert_subject(self, subject: Subject) -> Subject:
        """Insert *subject* inside a savepoint.

        Raises:
            sqlalchemy.exc.IntegrityError: If the subject code already exists.
                The savepoint is rolled back; the outer transaction survives.
        """
        async with self._session.begin_nested():
            self._session.add(subject)
            await self._session.flush()
        return subject

    async def subjects_sharing_name(
        self, subject_key: str, exclude_department_id: int
    ) -> list[Subject]:
        stmt = (
            select(Subject)
            .where(
                Subject.name_key == subject_key,
                Subject.department_id != exclude_department_id,
            )
            .order_by(Subject.id)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    # ------------------------------------------------------------------
    # Schedules (write path)
    # ------------------------------------------------------------------

    async def find_schedule(
        self, subject_id: int, department_id: int
    ) -> ExamSchedule | None:
        stmt = select(ExamSchedule).where(
            ExamSchedule.subject_id == subject_id,
            ExamSchedule.department_id == department_id,
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def add_schedule(self, schedule: ExamSchedule) -> ExamSchedule:
        self._session.add(schedule)
        await self._session.flush()
        return schedule

    async def flush(self) -> None:
        await self._session.flush()

    # ------------------------------------------------------------------
    # Alerts and notifications
    # ------------------------------------------------------------------

    async def active_alerts_covering(self, day: date) -> list[ExamAlert]:
        stmt = select(ExamAlert).where(
            ExamAlert.status == "active",
            ExamAlert.start_date <= day,
            ExamAlert.end_date >= day,
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def staff_teaching_subject(
        self, subject_key: str, exclude_department_id: int
    ) -> list[Staff]:
        stmt = (
            select(Staff)
            .where(
                Staff.subject_key == subject_key,
                Staff.department_id != exclude_department_id,
            )
            .order_by(Staff.id)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def add_notification(self, notification: Notification) -> Notification:
        self._session.add(notification)
        await self._session.flush()
        return notification
