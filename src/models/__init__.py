"""SQLAlchemy ORM models for the exam scheduling backend."""

from src.models.audit_log import AuditLog
from src.models.base import Base
from src.models.department import Department
from src.models.exam_alert import ExamAlert
from src.models.exam_schedule import ExamSchedule
from src.models.notification import Notification
from src.models.staff import Staff
from src.models.subject import Subject
from src.models.user import User

__all__ = [
    "Base",
    "Department",
    "Subject",
    "Staff",
    "User",
    "ExamSchedule",
    "ExamAlert",
    "Notification",
    "AuditLog",
]
