"""Pydantic v2 schemas for conflict checks, schedule commits and listings."""

from __future__ import annotations

import uuid
from datetime import date, time
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from src.services.schedule_committer import Canonical, ScheduleTarget, StaffDeclared
from src.services.schedule_repository import ScheduleRow

# ---------------------------------------------------------------------------
# Conflict check
# ---------------------------------------------------------------------------


class ConflictCheckRequest(BaseModel):
    """Request payload for POST /schedules/check.

    Attributes:
        department: Department name as shown in the scheduling dialog.
        exam_date: Candidate date.
        subject_name: Subject being scheduled.
    """

    model_config = ConfigDict(strict=False, populate_by_name=True)

    department: str = Field(..., min_length=1)
    exam_date: date
    subject_name: str = Field(..., min_length=1)


class ConflictCheckResponse(BaseModel):
    """Response for POST /schedules/check.

    ``can_submit`` is ``False`` only for a hard conflict; an ``info`` result
    still allows submission (with the pinned date).
    """

    status: str = Field(..., pattern=r"^(ok|conflict|info)$")
    message: str | None = None
    can_submit: bool
    pinned_date: date | None = None
    pinned_department: str | None = None


# ---------------------------------------------------------------------------
# Commit
# ---------------------------------------------------------------------------


class StaffTargetIn(BaseModel):
    kind: Literal["staff"]
    staff_id: int = Field(..., gt=0)

    def to_target(self) -> ScheduleTarget:
        return StaffDeclared(staff_id=self.staff_id)


class SubjectTargetIn(BaseModel):
    kind: Literal["subject"]
    subject_id: int = Field(..., gt=0)

    def to_target(self) -> ScheduleTarget:
        return Canonical(subject_id=self.subject_id)


ScheduleTargetIn = Annotated[
    Union[StaffTargetIn, SubjectTargetIn], Field(discriminator="kind")
]


class ScheduleCommitRequest(BaseModel):
    """Request payload for POST /schedules.

    Attributes:
        target: ``{"kind": "staff", "staff_id": ...}`` to schedule a staff
            member's declared subject, or ``{"kind": "subject",
            "subject_id": ...}`` for an existing subject.
        exam_date: Proposed date.
        exam_time: Optional start time; must be one of the configured slots.
    """

    model_config = ConfigDict(strict=False, populate_by_name=True)

    target: ScheduleTargetIn
    exam_date: date
    exam_time: time | None = None


class ScheduledRowOut(BaseModel):
    schedule_id: int
    department_id: int
    created: bool


class ScheduleCommitResponse(BaseModel):
    """Response for POST /schedules.

    Attributes:
        subject_id: Canonical subject scheduled for the acting department.
        rows: One entry per written row, acting department first.
        created_count: How many rows were inserted rather than updated.
        notification_queued: Whether a shared-subject notice was queued.
    """

    subject_id: int
    subject_code: str
    subject_name: str
    department: str
    exam_date: date
    exam_time: time | None = None
    is_shared: bool
    rows: list[ScheduledRowOut]
    created_count: int
    notification_queued: bool = False


# ---------------------------------------------------------------------------
# Listings
# ---------------------------------------------------------------------------


class ScheduledExam(BaseModel):
    """One row of GET /schedules."""

    id: int
    subject_id: int
    subject_name: str
    subject_code: str
    department: str
    department_code: str
    exam_date: date
    exam_time: time | None = None
    assigned_by: uuid.UUID | None = None
    is_shared: bool
    priority_department: str | None = None

    @classmethod
    def from_row(cls, row: ScheduleRow) -> "ScheduledExam":
        return cls(
            id=row.schedule_id,
            subject_id=row.subject_id,
            subject_name=row.subject_name,
            subject_code=row.subject_code,
            department=row.department_name,
            department_code=row.department_code,
            exam_date=row.exam_date,
            exam_time=row.exam_time,
            assigned_by=row.assigned_by,
            is_shared=row.is_shared,
            priority_department=row.priority_department_name,
        )


class ScheduledExamList(BaseModel):
    schedules: list[ScheduledExam]
    total: int


class TimeSlotsResponse(BaseModel):
    time_slots: list[str]
