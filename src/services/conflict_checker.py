"""Conflict detection for proposed exam dates.

Two invariants govern every schedule:

* a department sits at most one exam per day;
* every department teaching a shared subject sits it on the same date.

:func:`find_same_day_clash` and :func:`find_pinning_schedule` decide each
rule over a read snapshot and are reused by the schedule committer.
:class:`ConflictChecker` answers the pre-submission question shown in the
scheduling dialog: blocked, informational notice, or clear.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Iterable

from src.exceptions import NotFoundError
from src.naming import name_key
from src.services.schedule_repository import ScheduleRepository, ScheduleRow

logger = logging.getLogger(__name__)


class ConflictStatus(str, Enum):
    OK = "ok"
    CONFLICT = "conflict"
    INFO = "info"


@dataclass
class ConflictCheckResult:
    """Outcome of a pre-submission conflict check.

    Attributes:
        status: ``ok``, ``conflict`` (hard, blocks submission) or ``info``.
        message: Text shown to the user, prefixed ``Conflict:`` or ``Info:``.
        pinned_date: Date already fixed for the shared subject (``info`` only).
        pinned_department: Department that fixed it.
    """

    status: ConflictStatus
    message: str | None = None
    pinned_date: date | None = None
    pinned_department: str | None = None

    @property
    def can_submit(self) -> bool:
        return self.status is not ConflictStatus.CONFLICT


def find_same_day_clash(
    rows_on_date: Iterable[ScheduleRow], department_id: int, subject_key: str
) -> ScheduleRow | None:
    """Return an existing exam of *department_id* on the same day, if any.

    A row for the same subject is the schedule being re-committed, not a
    clash.
    """
    for row in rows_on_date:
        if row.department_id == department_id and row.subject_key != subject_key:
            return row
    return None


def find_pinning_schedule(
    rows_for_subject: Iterable[ScheduleRow],
    acting_department_id: int,
    proposed_date: date,
    moves_fanned_out_rows: bool = True,
) -> ScheduleRow | None:
    """Return the earliest schedule that pins the subject to another date.

    Only dates set by another department pin: the acting department's own
    rows move with it.  Rows fanned out from its earlier action move too,
    but only when *moves_fanned_out_rows* says this commit rewrites them;
    otherwise they pin like any other department's row.
    """
    for row in rows_for_subject:
        if row.department_id == acting_department_id:
            continue
        if moves_fanned_out_rows and row.priority_department_id == acting_department_id:
            continue
        if row.exam_date != proposed_date:
            return row
    return None


class ConflictChecker:
    """Read-only pre-submission check.

    Args:
        repository: Store to read schedules from.
    """

    def __init__(self, repository: ScheduleRepository) -> None:
        self._repository = repository

    async def check_conflict(
        self, department_name: str, candidate_date: date, subject_name: str
    ) -> ConflictCheckResult:
        """Classify a proposed (department, date, subject) assignment.

        Raises:
            NotFoundError: If *department_name* matches no department.
        """
        department = await self._repository.get_department_by_key(
            name_key(department_name)
        )
        if department is None:
            raise NotFoundError("department", department_name)

        subject_key = name_key(subject_name)
        rows_on_date = await self._repository.schedules_on_date(candidate_date)
        clash = find_same_day_clash(rows_on_date, department.id, subject_key)
        if clash is not None:
            logger.info(
                "Conflict check: %s already sits %s on %s",
                department.name,
                clash.subject_code,
                candidate_date,
            )
            return ConflictCheckResult(
                status=ConflictStatus.CONFLICT,
                message=(
                    f"Conflict: Another exam is already scheduled for "
                    f"{department.name} department on this date."
                ),
            )

        rows_for_subject = await self._repository.schedules_for_subject(subject_key)
        pin = find_pinning_schedule(rows_for_subject, department.id, candidate_date)
        if pin is not None:
            return ConflictCheckResult(
                status=ConflictStatus.INFO,
                message=(
                    f'Info: Same subject "{pin.subject_name}" is already scheduled '
                    f"for {pin.set_by_department} on {pin.exam_date.isoformat()}. "
                    "This is a shared subject - all departments teaching this "
                    "subject must schedule on the same date."
                ),
                pinned_date=pin.exam_date,
                pinned_department=pin.set_by_department,
            )

        return ConflictCheckResult(status=ConflictStatus.OK)
