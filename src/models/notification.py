"""SQLAlchemy ORM model for the notifications table."""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import Boolean, Date, ForeignKey, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import Base


class Notification(Base):
    """Inbox entry telling a staff member that a shared subject was scheduled.

    Attributes:
        id: Auto-incrementing primary key.
        staff_id: Recipient staff member.
        title: Short headline.
        message: Full text.
        subject_name: Subject that was scheduled.
        exam_date: Date it was scheduled on.
        acting_department_id: Department whose action triggered the notice.
        is_read: Whether the recipient has opened it.
        created_at: Timestamp of record creation.
    """

    __tablename__ = "notifications"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    staff_id: Mapped[int] = mapped_column(
        ForeignKey("staff.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    subject_name: Mapped[str] = mapped_column(String(200), nullable=False)
    exam_date: Mapped[date] = mapped_column(Date, nullable=False)
    acting_department_id: Mapped[int | None] = mapped_column(
        ForeignKey("departments.id", ondelete="SET NULL"), nullable=True
    )
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        nullable=False, server_default=text("CURRENT_TIMESTAMP")
    )

    def __repr__(self) -> str:
        return f"<Notification(id={self.id}, staff_id={self.staff_id})>"
