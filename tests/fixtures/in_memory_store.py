"""In-memory stand-in for :class:`~src.services.schedule_repository.ScheduleRepository`.

Holds real ORM instances in dicts and hands out integer ids, so the conflict
checker, committer, resolver and notifier can be exercised without a
database.  Seeding helpers (``add_department``, ``add_subject``, ...) build
the fixtures each scenario needs.
"""

from __future__ import annotations

import itertools
from collections import Counter
from contextlib import asynccontextmanager
from datetime import date, datetime, time, timedelta
from typing import AsyncIterator

from sqlalchemy.exc import IntegrityError

from src.models.department import Department
from src.models.exam_alert import ExamAlert
from src.models.exam_schedule import ExamSchedule
from src.models.notification import Notification
from src.models.staff import Staff
from src.models.subject import Subject
from src.services.schedule_repository import ScheduleRow

_EPOCH = datetime(2025, 1, 1, 9, 0, 0)


class InMemoryScheduleStore:
    """Dict-backed repository with the same async interface as the SQL one.

    Attributes:
        concurrent_subject: When set, the next ``insert_subject`` call first
            stores this subject (as if another request won the race) and then
            raises ``IntegrityError``.
        fail_notifications: Make ``add_notification`` raise.
        calls: How many times each repository method was called.
    """

    def __init__(self) -> None:
        self.departments: dict[int, Department] = {}
        self.subjects: dict[int, Subject] = {}
        self.staff: dict[int, Staff] = {}
        self.schedules: dict[int, ExamSchedule] = {}
        self.alerts: list[ExamAlert] = []
        self.notifications: list[Notification] = []
        self.concurrent_subject: Subject | None = None
        self.fail_notifications = False
        self.calls: Counter[str] = Counter()
        self._ids = itertools.count(1)
        self._tick = itertools.count()

    # ------------------------------------------------------------------
    # Seeding
    # ------------------------------------------------------------------

    def _stamp(self, obj) -> None:
        obj.id = next(self._ids)
        obj.created_at = _EPOCH + timedelta(seconds=next(self._tick))

    def add_department(self, code: str, name: str) -> Department:
        department = Department(code=code, name=name)
        self._stamp(department)
        self.departments[department.id] = department
        return department

    def add_subject(
        self,
        code: str,
        name: str,
        department: Department,
        academic_year: int | None = None,
        is_shared: bool = False,
    ) -> Subject:
        subject = Subject(
            subject_code=code,
            subject_name=name,
            department_id=department.id,
            academic_year=academic_year,
            is_shared=is_shared,
        )
        self._stamp(subject)
        self.subjects[subject.id] = subject
        return subject

    def add_staff(
        self,
        name: str,
        department: Department,
        subject_name: str | None = None,
        subject_code: str | None = None,
        email: str | None = None,
    ) -> Staff:
        staff = Staff(
            name=name,
            email=email or f"{name.lower().replace(' ', '.')}@example.edu",
            role_title="Teacher",
            department_id=department.id,
            subject_name=subject_name,
            subject_code=subject_code,
        )
        self._stamp(staff)
        self.staff[staff.id] = staff
        return staff

    def add_alert(
        self,
        start: date,
        end: date,
        departments: list[str] | None = None,
        status: str = "active",
    ) -> ExamAlert:
        alert = ExamAlert(
            title="Internal Assessment-II - 2025-26",
            start_date=start,
            end_date=end,
            departments=list(departments or []),
            status=status,
            year=2,
            semester=4,
        )
        self._stamp(alert)
        self.alerts.append(alert)
        return alert

    def seed_schedule(
        self,
        subject: Subject,
        department: Department,
        day: date,
        priority: Department | None = None,
        exam_time: time | None = None,
    ) -> ExamSchedule:
        schedule = ExamSchedule(
            subject_id=subject.id,
            department_id=department.id,
            exam_date=day,
            exam_time=exam_time,
            is_shared=priority is not None,
            priority_department_id=priority.id if priority else None,
        )
        self._store_schedule(schedule)
        return schedule

    def _store_schedule(self, schedule: ExamSchedule) -> None:
        self._stamp(schedule)
        schedule.updated_at = schedule.created_at
        if schedule.is_shared is None:
            schedule.is_shared = False
        self.schedules[schedule.id] = schedule

    @asynccontextmanager
    async def scope(self) -> AsyncIterator["InMemoryScheduleStore"]:
        """Repository scope for :class:`SharedSubjectNotifier`."""
        yield self

    # ------------------------------------------------------------------
    # Queries used by assertions
    # ------------------------------------------------------------------

    def rows_for(self, subject_name: str) -> list[ExamSchedule]:
        key = " ".join(subject_name.split()).casefold()
        return [
            s for s in self.schedules.values()
            if self.subjects[s.subject_id].name_key == key
        ]

    def subjects_with_code(self, code: str) -> list[Subject]:
        return [s for s in self.subjects.values() if s.subject_code == code]

    # ------------------------------------------------------------------
    # Repository interface
    # ------------------------------------------------------------------

    def _to_row(self, schedule: ExamSchedule) -> ScheduleRow:
        subject = self.subjects[schedule.subject_id]
        department = self.departments[schedule.department_id]
        priority = self.departments.get(schedule.priority_department_id)
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
            is_shared=bool(schedule.is_shared),
            priority_department_id=schedule.priority_department_id,
            priority_department_name=priority.name if priority else None,
        )

    async def get_staff(self, staff_id: int) -> Staff | None:
        return self.staff.get(staff_id)

    async def get_subject(self, subject_id: int) -> Subject | None:
        return self.subjects.get(subject_id)

    async def get_department(self, department_id: int) -> Department | None:
        return self.departments.get(department_id)

    async def get_department_by_key(self, key: str) -> Department | None:
        return next((d for d in self.departments.values() if d.name_key == key), None)

    async def list_departments(self) -> list[Department]:
        return sorted(self.departments.values(), key=lambda d: d.code)

    async def schedules_on_date(self, exam_date: date) -> list[ScheduleRow]:
        self.calls["schedules_on_date"] += 1
        return [
            self._to_row(s)
            for s in sorted(self.schedules.values(), key=lambda s: s.id)
            if s.exam_date == exam_date
        ]

    async def schedules_for_subject(self, subject_key: str) -> list[ScheduleRow]:
        rows = [
            s for s in self.schedules.values()
            if self.subjects[s.subject_id].name_key == subject_key
        ]
        rows.sort(key=lambda s: (s.created_at, s.id))
        return [self._to_row(s) for s in rows]

    async def all_schedules(self, academic_year: int | None = None) -> list[ScheduleRow]:
        rows = [
            self._to_row(s) for s in self.schedules.values()
            if academic_year is None
            or self.subjects[s.subject_id].academic_year == academic_year
        ]
        rows.sort(key=lambda r: (r.exam_date, r.exam_time or time.min, r.schedule_id))
        return rows

    async def schedules_for_department(self, department_id: int) -> list[ScheduleRow]:
        rows = [
            self._to_row(s) for s in self.schedules.values()
            if s.department_id == department_id
        ]
        rows.sort(key=lambda r: (r.exam_date, r.schedule_id))
        return rows

    async def find_subject_by_code(self, subject_code: str) -> Subject | None:
        self.calls["find_subject_by_code"] += 1
        return next(
            (s for s in self.subjects.values() if s.subject_code == subject_code), None
        )

    async def insert_subject(self, subject: Subject) -> Subject:
        self.calls["insert_subject"] += 1
        if self.concurrent_subject is not None:
            winner, self.concurrent_subject = self.concurrent_subject, None
            self._stamp(winner)
            self.subjects[winner.id] = winner
        if any(s.subject_code == subject.subject_code for s in self.subjects.values()):
            raise IntegrityError(
                "INSERT INTO subjects", {}, Exception("duplicate key value")
            )
        self._stamp(subject)
        self.subjects[subject.id] = subject
        return subject

    async def subjects_sharing_name(
        self, subject_key: str, exclude_department_id: int
    ) -> list[Subject]:
        return sorted(
            (
                s for s in self.subjects.values()
                if s.name_key == subject_key and s.department_id != exclude_department_id
            ),
            key=lambda s: s.id,
        )

    async def find_schedule(self, subject_id: int, department_id: int) -> ExamSchedule | None:
        return next(
            (
                s for s in self.schedules.values()
                if s.subject_id == subject_id and s.department_id == department_id
            ),
            None,
        )

    async def add_schedule(self, schedule: ExamSchedule) -> ExamSchedule:
        if await self.find_schedule(schedule.subject_id, schedule.department_id):
            raise IntegrityError(
                "INSERT INTO exam_schedules", {}, Exception("duplicate key value")
            )
        self._store_schedule(schedule)
        return schedule

    async def flush(self) -> None:
        self.calls["flush"] += 1

    async def active_alerts_covering(self, day: date) -> list[ExamAlert]:
        return [
            a for a in self.alerts
            if a.status == "active" and a.start_date <= day <= a.end_date
        ]

    async def staff_teaching_subject(
        self, subject_key: str, exclude_department_id: int
    ) -> list[Staff]:
        return sorted(
            (
                s for s in self.staff.values()
                if s.subject_key == subject_key and s.department_id != exclude_department_id
            ),
            key=lambda s: s.id,
        )

    async def add_notification(self, notification: Notification) -> Notification:
        if self.fail_notifications:
            raise RuntimeError("notifications table unavailable")
        self._stamp(notification)
        notification.is_read = False
        self.notifications.append(notification)
        return notification
