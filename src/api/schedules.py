"""
Scheduling API endpoints — conflict check, commit and schedule listings.

Provides:
    POST /schedules/check       — classify a proposed (department, date, subject).
    POST /schedules             — commit a date for a staff member's declared
                                  subject or an existing subject.
    GET  /schedules             — every scheduled exam, optionally by year.
    GET  /schedules/mine        — the current user's department's exams.
    GET  /schedules/time-slots  — configured exam start times.

A commit runs in the request's transaction.  The shared-subject notice is
published to the dispatcher only after that transaction has committed.
"""

from __future__ import annotations

import logging
import uuid
from datetime import time
from typing import Any

from fastapi import APIRouter, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import (
    CurrentUserDep,
    DBDep,
    DispatcherDep,
    RepositoryDep,
    SettingsDep,
)
from src.exceptions import ConflictError, NotFoundError, PermissionDeniedError
from src.models.audit_log import AuditLog
from src.models.department import Department
from src.models.user import User
from src.schemas.schedule import (
    ConflictCheckRequest,
    ConflictCheckResponse,
    ScheduleCommitRequest,
    ScheduleCommitResponse,
    ScheduledExam,
    ScheduledExamList,
    ScheduledRowOut,
    TimeSlotsResponse,
)
from src.services.alert_window import ensure_within_alert_window
from src.services.conflict_checker import ConflictChecker
from src.services.schedule_committer import (
    Canonical,
    ScheduleCommitter,
    ScheduleTarget,
    StaffDeclared,
)
from src.services.schedule_repository import ScheduleRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/schedules", tags=["schedules"])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _parse_time_slots(slots: list[str]) -> list[time]:
    return [time.fromisoformat(slot) for slot in slots]


async def _write_audit_log(
    db: AsyncSession,
    actor_id: uuid.UUID | None,
    event_type: str,
    event_details: dict[str, Any],
    severity: str = "info",
) -> None:
    """Add an entry to the audit log (flushed with the surrounding unit of work)."""
    db.add(
        AuditLog(
            actor_id=actor_id,
            event_type=event_type,
            event_details=event_details,
            severity=severity,
        )
    )


async def _acting_department(
    repository: ScheduleRepository, target: ScheduleTarget, user: User
) -> Department:
    """Return the department acting for *target*, enforcing teacher scope.

    Administrators may schedule any target.  A teacher may schedule only
    their own staff record, or a subject belonging to their department.

    Raises:
        NotFoundError: Staff, subject or department missing.
        PermissionDeniedError: Teacher acting outside their scope.
    """
    if isinstance(target, StaffDeclared):
        staff = await repository.get_staff(target.staff_id)
        if staff is None:
            raise NotFoundError("staff", target.staff_id)
        if not user.is_admin and user.staff_id != staff.id:
            raise PermissionDeniedError(
                "Teachers may only schedule their own subject", role=user.role
            )
        department_id = staff.department_id
    else:
        subject = await repository.get_subject(target.subject_id)
        if subject is None:
            raise NotFoundError("subject", target.subject_id)
        if not user.is_admin and user.department_id != subject.department_id:
            raise PermissionDeniedError(
                "Teachers may only schedule subjects of their own department",
                role=user.role,
            )
        department_id = subject.department_id

    department = await repository.get_department(department_id)
    if department is None:
        raise NotFoundError("department", department_id)
    return department


def _describe(target: ScheduleTarget) -> dict[str, Any]:
    if isinstance(target, Canonical):
        return {"kind": "subject", "subject_id": target.subject_id}
    return {"kind": "staff", "staff_id": target.staff_id}


# ---------------------------------------------------------------------------
# POST /schedules/check
# ---------------------------------------------------------------------------


@router.post(
    "/check",
    response_model=ConflictCheckResponse,
    summary="Check a proposed exam date for conflicts",
    responses={404: {"description": "Department not found"}},
)
async def check_conflict(
    payload: ConflictCheckRequest,
    repository: RepositoryDep,
    _user: CurrentUserDep,
) -> ConflictCheckResponse:
    """Classify the proposal as ``ok``, ``conflict`` or ``info``.

    Only ``conflict`` blocks submission.  ``info`` reports the date already
    fixed for a shared subject.
    """
    result = await ConflictChecker(repository).check_conflict(
        payload.department, payload.exam_date, payload.subject_name
    )
    return ConflictCheckResponse(
        status=result.status.value,
        message=result.message,
        can_submit=result.can_submit,
        pinned_date=result.pinned_date,
        pinned_department=result.pinned_department,
    )


# ---------------------------------------------------------------------------
# POST /schedules
# ---------------------------------------------------------------------------


@router.post(
    "",
    response_model=ScheduleCommitResponse,
    status_code=status.HTTP_200_OK,
    summary="Commit an exam date",
    responses={
        403: {"description": "Target outside the teacher's scope"},
        404: {"description": "Staff, subject or department not found"},
        409: {"description": "Same-day clash or shared-subject date mismatch"},
        422: {"description": "Missing declared subject, bad time slot or outside exam window"},
    },
)
async def commit_schedule(
    payload: ScheduleCommitRequest,
    db: DBDep,
    repository: RepositoryDep,
    settings: SettingsDep,
    dispatcher: DispatcherDep,
    user: CurrentUserDep,
) -> ScheduleCommitResponse:
    """
    Commit a date for the target and every department sharing its subject.

    Pipeline:
    1. Resolve the acting department and check the caller may act for it.
    2. Check the date lies inside an active exam alert window (when enabled).
    3. Run the schedule committer (conflict re-check, subject resolution,
       fan-out, upserts).
    4. Write the audit log entry and commit the transaction.
    5. Publish the shared-subject event to the notification dispatcher.
    """
    target = payload.target.to_target()

    # ----------------------------------------------------------------
    # Steps 1-2
    # ----------------------------------------------------------------
    department = await _acting_department(repository, target, user)
    if settings.require_alert_window:
        await ensure_within_alert_window(repository, payload.exam_date, department)

    # ----------------------------------------------------------------
    # Step 3
    # ----------------------------------------------------------------
    committer = ScheduleCommitter(
        repository, allowed_times=_parse_time_slots(settings.exam_time_slots)
    )
    try:
        result = await committer.commit(
            target,
            payload.exam_date,
            payload.exam_time,
            assigned_by=user.id,
        )
    except ConflictError as exc:
        # Rollback expires loaded instances; read everything needed first.
        actor_id = user.id
        details = {
            "target": _describe(target),
            "department": department.name,
            "exam_date": payload.exam_date.isoformat(),
            "reason": str(exc),
            "pinned_date": exc.pinned_date.isoformat() if exc.pinned_date else None,
        }
        await db.rollback()
        await _write_audit_log(
            db,
            actor_id=actor_id,
            event_type="exam_schedule_rejected",
            event_details=details,
            severity="warning",
        )
        await db.commit()
        raise

    # ----------------------------------------------------------------
    # Step 4
    # ----------------------------------------------------------------
    await _write_audit_log(
        db,
        actor_id=user.id,
        event_type="exam_scheduled",
        event_details={
            "target": _describe(target),
            "subject_code": result.subject.subject_code,
            "department": result.acting_department.name,
            "exam_date": result.exam_date.isoformat(),
            "rows": len(result.outcomes),
            "created": result.created_count,
        },
    )
    await db.commit()

    # ----------------------------------------------------------------
    # Step 5
    # ----------------------------------------------------------------
    queued = False
    if result.event is not None and dispatcher is not None:
        queued = dispatcher.publish(result.event)

    return ScheduleCommitResponse(
        subject_id=result.subject.id,
        subject_code=result.subject.subject_code,
        subject_name=result.subject.subject_name,
        department=result.acting_department.name,
        exam_date=result.exam_date,
        exam_time=result.exam_time,
        is_shared=any(o.schedule.is_shared for o in result.outcomes),
        rows=[
            ScheduledRowOut(
                schedule_id=o.schedule.id,
                department_id=o.schedule.department_id,
                created=o.created,
            )
            for o in result.outcomes
        ],
        created_count=result.created_count,
        notification_queued=queued,
    )


# ---------------------------------------------------------------------------
# Listings
# ---------------------------------------------------------------------------


@router.get("", response_model=ScheduledExamList, summary="List scheduled exams")
async def list_schedules(
    repository: RepositoryDep,
    _user: CurrentUserDep,
    academic_year: int | None = Query(default=None, ge=1, le=4),
) -> ScheduledExamList:
    rows = await repository.all_schedules(academic_year)
    return ScheduledExamList(
        schedules=[ScheduledExam.from_row(r) for r in rows], total=len(rows)
    )


@router.get(
    "/mine",
    response_model=ScheduledExamList,
    summary="Scheduled exams of the current user's department",
)
async def my_schedules(repository: RepositoryDep, user: CurrentUserDep) -> ScheduledExamList:
    department_id = user.department_id
    if department_id is None and user.staff_id is not None:
        staff = await repository.get_staff(user.staff_id)
        department_id = staff.department_id if staff is not None else None
    if department_id is None:
        return ScheduledExamList(schedules=[], total=0)
    rows = await repository.schedules_for_department(department_id)
    return ScheduledExamList(
        schedules=[ScheduledExam.from_row(r) for r in rows], total=len(rows)
    )


@router.get(
    "/time-slots", response_model=TimeSlotsResponse, summary="Available exam start times"
)
async def time_slots(settings: SettingsDep, _user: CurrentUserDep) -> TimeSlotsResponse:
    return TimeSlotsResponse(time_slots=list(settings.exam_time_slots))
