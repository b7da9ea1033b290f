"""Exam alert windows: which dates may be scheduled at all."""

from __future__ import annotations

import logging
from datetime import date, timedelta

from src.exceptions import ValidationError
from src.models.department import Department
from src.models.exam_alert import ExamAlert
from src.services.schedule_repository import ScheduleRepository

logger = logging.getLogger(__name__)


async def ensure_within_alert_window(
    repository: ScheduleRepository, day: date, department: Department
) -> ExamAlert:
    """Return the active alert covering *day* for *department*.

    Raises:
        ValidationError: If no active alert window contains the date.
    """
    alerts = await repository.active_alerts_covering(day)
    for alert in alerts:
        if alert.covers(day, department.code):
            return alert
    logger.info("Date %s outside every active exam window for %s", day, department.code)
    raise ValidationError(
        f"{day.isoformat()} is outside every active examination window for "
        f"{department.name}",
        field="exam_date",
    )


def available_dates(start: date, end: date) -> list[date]:
    """Weekdays from *start* to *end* inclusive."""
    days: list[date] = []
    current = start
    while current <= end:
        if current.weekday() < 5:
            days.append(current)
        current += timedelta(days=1)
    return days
