"""Pydantic v2 schemas for login, the current user and notifications."""

from __future__ import annotations

import uuid
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field


class LoginRequest(BaseModel):
    model_config = ConfigDict(strict=False, populate_by_name=True)

    email: str = Field(..., min_length=3, max_length=200)
    password: str = Field(..., min_length=1)


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    email: str
    name: str
    role: str
    department_id: int | None = None
    staff_id: int | None = None


class TokenResponse(BaseModel):
    """Response for POST /auth/login.

    Attributes:
        access_token: Bearer JWT for the ``Authorization`` header.
        token_type: Always ``"bearer"``.
        user: The authenticated user.
    """

    access_token: str
    token_type: str = "bearer"
    user: UserOut


class NotificationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    message: str
    subject_name: str
    exam_date: date
    is_read: bool
    created_at: datetime | None = None


class NotificationList(BaseModel):
    notifications: list[NotificationOut]
    unread: int
