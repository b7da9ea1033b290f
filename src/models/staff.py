"""SQLAlchemy ORM model for the staff table."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, String, text
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from src.models.base import Base
from src.naming import clean, name_key

if TYPE_CHECKING:
    from src.models.department import Department


class Staff(Base):
    """Staff member with an informally declared subject.

    ``subject_name``/``subject_code`` form a lightweight subject reference
    that exists before any canonical :class:`Subject` row does.  The
    scheduling service reconciles the two by subject code.

    Attributes:
        id: Auto-incrementing primary key.
        name: Full name.
        email: Unique contact email.
        phone: Optional phone number.
        role_title: ``"Teacher"`` or ``"Administrator"``.
        department_id: Department the staff member belongs to.
        subject_name: Declared subject name (may be empty).
        subject_code: Declared subject code (may be empty).
        subject_key: Normalised ``subject_name``; ``None`` when undeclared.
        created_at: Timestamp of record creation.
    """

    __tablename__ = "staff"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    email: Mapped[str] = mapped_column(String(200), nullable=False, unique=True)
    phone: Mapped[str | None] = mapped_column(String(30), nullable=True)
    role_title: Mapped[str] = mapped_column(String(30), nullable=False, default="Teacher")
    department_id: Mapped[int] = mapped_column(
        ForeignKey("departments.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    subject_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    subject_code: Mapped[str | None] = mapped_column(String(30), nullable=True)
    subject_key: Mapped[str | None] = mapped_column(
        String(200), nullable=True, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        nullable=False, server_default=text("CURRENT_TIMESTAMP")
    )

    department: Mapped[Department] = relationship("Department")

    @validates("subject_name")
    def _sync_subject_key(self, _key: str, value: str | None) -> str | None:
        value = clean(value) or None
        self.subject_key = name_key(value) or None
        return value

    @validates("subject_code")
    def _clean_code(self, _key: str, value: str | None) -> str | None:
        return clean(value) or None

    @property
    def has_declared_subject(self) -> bool:
        return bool(self.subject_name and self.subject_code)

    def __repr__(self) -> str:
        return f"<Staff(id={self.id}, email='{self.email}')>"
