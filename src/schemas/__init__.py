"""Pydantic v2 request/response schemas for the exam scheduling API."""

from src.schemas.auth import (
    LoginRequest,
    NotificationList,
    NotificationOut,
    TokenResponse,
    UserOut,
)
from src.schemas.directory import (
    DepartmentCreate,
    DepartmentOut,
    DepartmentUpdate,
    StaffCreate,
    StaffOut,
    StaffUpdate,
    SubjectCreate,
    SubjectOut,
    SubjectUpdate,
)
from src.schemas.exam_alert import (
    AvailableDatesResponse,
    ExamAlertCreate,
    ExamAlertOut,
    ExamAlertUpdate,
)
from src.schemas.schedule import (
    ConflictCheckRequest,
    ConflictCheckResponse,
    ScheduleCommitRequest,
    ScheduleCommitResponse,
    ScheduledExam,
    ScheduledExamList,
    ScheduledRowOut,
    ScheduleTargetIn,
    StaffTargetIn,
    SubjectTargetIn,
    TimeSlotsResponse,
)

__all__ = [
    "LoginRequest",
    "TokenResponse",
    "UserOut",
    "NotificationOut",
    "NotificationList",
    "DepartmentCreate",
    "DepartmentUpdate",
    "DepartmentOut",
    "SubjectCreate",
    "SubjectUpdate",
    "SubjectOut",
    "StaffCreate",
    "StaffUpdate",
    "StaffOut",
    "ExamAlertCreate",
    "ExamAlertUpdate",
    "ExamAlertOut",
    "AvailableDatesResponse",
    "ConflictCheckRequest",
    "ConflictCheckResponse",
    "StaffTargetIn",
    "SubjectTargetIn",
    "ScheduleTargetIn",
    "ScheduleCommitRequest",
    "ScheduleCommitResponse",
    "ScheduledRowOut",
    "ScheduledExam",
    "ScheduledExamList",
    "TimeSlotsResponse",
]
