"""Exam alert routes.

Provides:
    GET   /exam-alerts                             — list (newest first).
    POST  /exam-alerts                             — create (admin).
    PATCH /exam-alerts/{alert_id}                  — update or close (admin).
    GET   /exam-alerts/{alert_id}/available-dates  — weekdays in the window.
"""

import logging

from fastapi import APIRouter, Query, status
from sqlalchemy import select

from src.api.dependencies import AdminDep, CurrentUserDep, DBDep
from src.exceptions import NotFoundError, ValidationError
from src.models.exam_alert import ExamAlert
from src.schemas.exam_alert import (
    AvailableDatesResponse,
    ExamAlertCreate,
    ExamAlertOut,
    ExamAlertUpdate,
)
from src.services.alert_window import available_dates

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/exam-alerts", tags=["exam-alerts"])


async def _get_or_404(db: DBDep, alert_id: int) -> ExamAlert:
    alert = await db.get(ExamAlert, alert_id)
    if alert is None:
        raise NotFoundError("exam alert", alert_id)
    return alert


@router.get("", response_model=list[ExamAlertOut], summary="List exam alerts")
async def list_alerts(
    db: DBDep,
    _user: CurrentUserDep,
    active_only: bool = Query(default=False, description="Only return active alerts"),
) -> list[ExamAlertOut]:
    stmt = select(ExamAlert)
    if active_only:
        stmt = stmt.where(ExamAlert.status == "active")
    stmt = stmt.order_by(ExamAlert.start_date.desc(), ExamAlert.id.desc())
    result = await db.execute(stmt)
    return [ExamAlertOut.model_validate(a) for a in result.scalars().all()]


@router.post(
    "",
    response_model=ExamAlertOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create an exam alert",
)
async def create_alert(payload: ExamAlertCreate, db: DBDep, admin: AdminDep) -> ExamAlertOut:
    alert = ExamAlert(
        title=payload.resolved_title(),
        exam_type=payload.exam_type,
        academic_year_label=payload.academic_year_label,
        start_date=payload.start_date,
        end_date=payload.end_date,
        booking_deadline=payload.booking_deadline,
        year=payload.year,
        semester=payload.semester,
        departments=[code.strip().upper() for code in payload.departments],
        status="active",
        created_by=admin.email,
    )
    db.add(alert)
    await db.flush()
    logger.info(
        "Created exam alert %r (%s..%s)", alert.title, alert.start_date, alert.end_date
    )
    return ExamAlertOut.model_validate(alert)


@router.patch(
    "/{alert_id}",
    response_model=ExamAlertOut,
    summary="Update an exam alert",
    responses={404: {"description": "Alert not found"}},
)
async def update_alert(
    alert_id: int, payload: ExamAlertUpdate, db: DBDep, _admin: AdminDep
) -> ExamAlertOut:
    alert = await _get_or_404(db, alert_id)
    changes = payload.model_dump(exclude_unset=True)
    start = changes.get("start_date", alert.start_date)
    end = changes.get("end_date", alert.end_date)
    if end < start:
        raise ValidationError("end_date must be on or after start_date", field="end_date")
    if "departments" in changes and changes["departments"] is not None:
        changes["departments"] = [c.strip().upper() for c in changes["departments"]]
    for attr, value in changes.items():
        setattr(alert, attr, value)
    await db.flush()
    return ExamAlertOut.model_validate(alert)


@router.get(
    "/{alert_id}/available-dates",
    response_model=AvailableDatesResponse,
    summary="Weekdays a teacher may pick within an alert window",
    responses={404: {"description": "Alert not found"}},
)
async def alert_available_dates(
    alert_id: int, db: DBDep, _user: CurrentUserDep
) -> AvailableDatesResponse:
    alert = await _get_or_404(db, alert_id)
    dates = available_dates(alert.start_date, alert.end_date)
    return AvailableDatesResponse(alert_id=alert.id, dates=dates, count=len(dates))
