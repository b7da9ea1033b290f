"""SQLAlchemy ORM model for the departments table."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import String, text
from sqlalchemy.orm import Mapped, mapped_column, validates

from src.models.base import Base
from src.naming import clean, name_key


class Department(Base):
    """Academic department (CSE, IT, ECE, ...).

    Attributes:
        id: Auto-incrementing primary key.
        code: Short unique code printed as a circular column header.
        name: Display name, e.g. ``"Computer Science"``.
        name_key: Normalised ``name`` used for every name-based lookup.
        created_at: Timestamp of record creation.
    """

    __tablename__ = "departments"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    code: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    name_key: Mapped[str] = mapped_column(
        String(120), nullable=False, unique=True, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        nullable=False, server_default=text("CURRENT_TIMESTAMP")
    )

    @validates("name")
    def _sync_name_key(self, _key: str, value: str) -> str:
        value = clean(value)
        self.name_key = name_key(value)
        return value

    @validates("code")
    def _normalise_code(self, _key: str, value: str) -> str:
        return clean(value).upper()

    def __repr__(self) -> str:
        return f"<Department(id={self.id}, code='{self.code}')>"
