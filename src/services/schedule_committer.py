"""Commit a proposed exam date for every department teaching a subject.

Pipeline (one call of :meth:`ScheduleCommitter.commit`):

1. Resolve the :data:`ScheduleTarget` to a subject identity and the acting
   department.
2. Re-check that the acting department has no other exam that day.
3. Enforce the date already pinned by another department for a shared
   subject.
4. Staff path: find-or-create the canonical subject by code.
5. Staff path: collect every other department teaching a subject of the same
   name and check each is free that day.
6. Upsert one row per (subject, department).

No lock is taken.  Steps 2-3 re-read state just before writing, which narrows
but does not close the window between a check and the write; the unique
constraints on ``subject_code`` and ``(subject_id, department_id)`` are the
last line of defence.  Nothing is committed here: the caller owns the
transaction and publishes :attr:`CommitResult.event` only after it commits.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from typing import Iterable, Union

from src.exceptions import ConflictError, NotFoundError, ValidationError
from src.models.department import Department
from src.models.exam_schedule import ExamSchedule
from src.models.staff import Staff
from src.models.subject import Subject
from src.services.conflict_checker import find_pinning_schedule, find_same_day_clash
from src.services.schedule_repository import ScheduleRepository, ScheduleRow
from src.services.subject_resolver import SubjectIdentityResolver

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StaffDeclared:
    """Schedule the subject a staff member has declared."""

    staff_id: int


@dataclass(frozen=True)
class Canonical:
    """Schedule an existing canonical subject row."""

    subject_id: int


ScheduleTarget = Union[StaffDeclared, Canonical]


# ---------------------------------------------------------------------------
# Outputs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SharedSubjectScheduled:
    """Outbound event: a department scheduled a subject other departments may teach."""

    subject_name: str
    exam_date: date
    acting_department_id: int
    acting_department_name: str


@dataclass
class UpsertOutcome:
    schedule: ExamSchedule
    created: bool


@dataclass
class CommitResult:
    """Everything a successful commit wrote.

    Attributes:
        subject: Canonical subject of the acting department.
        acting_department: Department whose request this was.
        exam_date: Committed date.
        exam_time: Committed time, if any.
        outcomes: One entry per upserted row, acting department first.
        event: Notification event to publish after the transaction commits.
    """

    subject: Subject
    acting_department: Department
    exam_date: date
    exam_time: time | None
    outcomes: list[UpsertOutcome] = field(default_factory=list)
    event: SharedSubjectScheduled | None = None

    @property
    def created_count(self) -> int:
        return sum(1 for o in self.outcomes if o.created)


@dataclass
class _ResolvedTarget:
    acting_department: Department
    subject_name: str
    subject_key: str
    staff: Staff | None = None
    subject: Subject | None = None


@dataclass
class _PlannedRow:
    subject_id: int
    department_id: int
    priority_department_id: int | None


# ---------------------------------------------------------------------------
# Committer
# ---------------------------------------------------------------------------


class ScheduleCommitter:
    """Validate and write one proposed exam date.

    Args:
        repository: Store to read from and write through.
        resolver: Subject identity resolver; built on *repository* if omitted.
        allowed_times: Time slots a proposed time must match.  ``None``
            accepts any time.
    """

    def __init__(
        self,
        repository: ScheduleRepository,
        resolver: SubjectIdentityResolver | None = None,
        allowed_times: Iterable[time] | None = None,
    ) -> None:
        self._repository = repository
        self._resolver = resolver or SubjectIdentityResolver(repository)
        self._allowed_times = set(allowed_times) if allowed_times is not None else None

    async def commit(
        self,
        target: ScheduleTarget,
        proposed_date: date,
        proposed_time: time | None = None,
        assigned_by: uuid.UUID | None = None,
    ) -> CommitResult:
        """Commit *proposed_date* for *target* and every affected department.

        Raises:
            NotFoundError: Staff, subject or department missing.
            ValidationError: Staff without a declared subject, a declared
                code owned by another department, or a time outside the
                configured slots.
            ConflictError: Same-department clash or a shared-subject date
                mismatch.
        """
        resolved = await self._resolve_target(target)
        acting = resolved.acting_department
        self._check_time(proposed_time)

        # Step 2: one exam per department per day.
        rows_on_date = await self._repository.schedules_on_date(proposed_date)
        clash = find_same_day_clash(rows_on_date, acting.id, resolved.subject_key)
        if clash is not None:
            raise ConflictError(
                f"{acting.name} department already has an exam scheduled on this "
                f"date ({proposed_date.isoformat()}: {clash.subject_name} "
                f"{clash.subject_code})",
                department=acting.name,
            )

        # Step 3: shared subjects share one date.
        rows_for_subject = await self._repository.schedules_for_subject(
            resolved.subject_key
        )
        # Only the staff path rewrites rows fanned out from this department.
        pin = find_pinning_schedule(
            rows_for_subject,
            acting.id,
            proposed_date,
            moves_fanned_out_rows=resolved.staff is not None,
        )
        if pin is not None:
            holder = (
                pin.department_name
                if pin.priority_department_id == acting.id
                else pin.set_by_department
            )
            raise ConflictError(
                f'"{pin.subject_name}" is a shared subject already scheduled on '
                f"{pin.exam_date.isoformat()} for {holder}. "
                f"Resubmit using {pin.exam_date.isoformat()}.",
                pinned_date=pin.exam_date,
                department=holder,
            )

        # Steps 4-5 (staff path only).
        plan: list[_PlannedRow]
        if resolved.staff is not None:
            subject = await self._resolver.resolve_for_staff(resolved.staff)
            if subject.department_id != acting.id:
                raise ValidationError(
                    f"Subject code {subject.subject_code} belongs to another "
                    f"department; {resolved.staff.name} must declare "
                    f"{acting.name}'s own code for {resolved.subject_name}",
                    field="subject_code",
                )
            plan = await self._plan_fan_out(
                subject, acting, resolved.subject_key, rows_on_date
            )
        else:
            subject = resolved.subject
            plan = [_PlannedRow(subject.id, acting.id, None)]

        shared = len(plan) > 1 or subject.is_shared

        # Step 6.
        result = CommitResult(
            subject=subject,
            acting_department=acting,
            exam_date=proposed_date,
            exam_time=proposed_time,
        )
        for planned in plan:
            outcome = await self._upsert(
                planned,
                exam_date=proposed_date,
                exam_time=proposed_time,
                assigned_by=assigned_by,
                is_shared=shared,
            )
            result.outcomes.append(outcome)

        if resolved.staff is not None:
            result.event = SharedSubjectScheduled(
                subject_name=subject.subject_name,
                exam_date=proposed_date,
                acting_department_id=acting.id,
                acting_department_name=acting.name,
            )

        logger.info(
            "Scheduled %s (%s) on %s for %s: %d row(s), %d created",
            subject.subject_name,
            subject.subject_code,
            proposed_date,
            acting.name,
            len(result.outcomes),
            result.created_count,
        )
        return result

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    async def _resolve_target(self, target: ScheduleTarget) -> _ResolvedTarget:
        if isinstance(target, StaffDeclared):
            staff = await self._repository.get_staff(target.staff_id)
            if staff is None:
                raise NotFoundError("staff", target.staff_id)
            if not staff.has_declared_subject:
                raise ValidationError(
                    f"Staff member {staff.name} has no declared subject "
                    "(subject name and code are required)",
                    field="subject",
                )
            department = await self._repository.get_department(staff.department_id)
            if department is None:
                raise NotFoundError("department", staff.department_id)
            return _ResolvedTarget(
                acting_department=department,
                subject_name=staff.subject_name,
                subject_key=staff.subject_key,
                staff=staff,
            )

        if isinstance(target, Canonical):
            subject = await self._repository.get_subject(target.subject_id)
            if subject is None:
                raise NotFoundError("subject", target.subject_id)
            department = await self._repository.get_department(subject.department_id)
            if department is None:
                raise NotFoundError("department", subject.department_id)
            return _ResolvedTarget(
                acting_department=department,
                subject_name=subject.subject_name,
                subject_key=subject.name_key,
                subject=subject,
            )

        raise TypeError(f"Unsupported schedule target: {target!r}")

    def _check_time(self, proposed_time: time | None) -> None:
        if proposed_time is None or self._allowed_times is None:
            return
        if proposed_time.replace(second=0, microsecond=0) not in self._allowed_times:
            slots = ", ".join(t.strftime("%H:%M") for t in sorted(self._allowed_times))
            raise ValidationError(
                f"Exam time {proposed_time.strftime('%H:%M')} is not an available "
                f"slot ({slots})",
                field="exam_time",
            )

    async def _plan_fan_out(
        self,
        subject: Subject,
        acting: Department,
        subject_key: str,
        rows_on_date: Iterable[ScheduleRow],
    ) -> list[_PlannedRow]:
        plan = [_PlannedRow(subject.id, acting.id, None)]
        seen_departments = {acting.id}

        others = await self._repository.subjects_sharing_name(subject_key, acting.id)
        for other in others:
            if other.id == subject.id or other.department_id in seen_departments:
                continue
            clash = find_same_day_clash(rows_on_date, other.department_id, subject_key)
            if clash is not None:
                raise ConflictError(
                    f"{clash.department_name} department, which also teaches "
                    f'"{subject.subject_name}", already has an exam scheduled on '
                    f"this date ({clash.subject_name} {clash.subject_code})",
                    department=clash.department_name,
                )
            seen_departments.add(other.department_id)
            plan.append(_PlannedRow(other.id, other.department_id, acting.id))
        return plan

    async def _upsert(
        self,
        planned: _PlannedRow,
        *,
        exam_date: date,
        exam_time: time | None,
        assigned_by: uuid.UUID | None,
        is_shared: bool,
    ) -> UpsertOutcome:
        existing = await self._repository.find_schedule(
            planned.subject_id, planned.department_id
        )
        if existing is not None:
            # Confirming an unchanged date leaves the row's setter as is.
            if existing.exam_date != exam_date:
                existing.priority_department_id = planned.priority_department_id
            existing.exam_date = exam_date
            existing.exam_time = exam_time
            existing.assigned_by = assigned_by
            existing.is_shared = existing.is_shared or is_shared
            existing.updated_at = datetime.now(timezone.utc).replace(tzinfo=None)
            await self._repository.flush()
            return UpsertOutcome(schedule=existing, created=False)

        schedule = ExamSchedule(
            subject_id=planned.subject_id,
            department_id=planned.department_id,
            exam_date=exam_date,
            exam_time=exam_time,
            assigned_by=assigned_by,
            is_shared=is_shared,
            priority_department_id=planned.priority_department_id,
        )
        await self._repository.add_schedule(schedule)
        return UpsertOutcome(schedule=schedule, created=True)
