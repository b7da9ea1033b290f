"""Notification inbox routes.

Provides:
    GET  /notifications                         — current user's notices, newest first.
    POST /notifications/{notification_id}/read  — mark one as read.
"""

import logging

from fastapi import APIRouter, Query
from sqlalchemy import select

from src.api.dependencies import CurrentUserDep, DBDep
from src.exceptions import NotFoundError, PermissionDeniedError
from src.models.notification import Notification
from src.schemas.auth import NotificationList, NotificationOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=NotificationList, summary="List my notifications")
async def list_notifications(
    db: DBDep,
    user: CurrentUserDep,
    unread_only: bool = Query(default=False),
) -> NotificationList:
    if user.staff_id is None:
        return NotificationList(notifications=[], unread=0)

    stmt = select(Notification).where(Notification.staff_id == user.staff_id)
    if unread_only:
        stmt = stmt.where(Notification.is_read.is_(False))
    stmt = stmt.order_by(Notification.created_at.desc(), Notification.id.desc())
    notices = list((await db.execute(stmt)).scalars().all())
    return NotificationList(
        notifications=[NotificationOut.model_validate(n) for n in notices],
        unread=sum(1 for n in notices if not n.is_read),
    )


@router.post(
    "/{notification_id}/read",
    response_model=NotificationOut,
    summary="Mark a notification as read",
    responses={404: {"description": "Notification not found"}},
)
async def mark_read(notification_id: int, db: DBDep, user: CurrentUserDep) -> NotificationOut:
    notice = await db.get(Notification, notification_id)
    if notice is None:
        raise NotFoundError("notification", notification_id)
    if notice.staff_id != user.staff_id:
        raise PermissionDeniedError("Not your notification", role=user.role)
    notice.is_read = True
    await db.flush()
    return NotificationOut.model_validate(notice)
