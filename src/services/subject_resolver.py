"""Reconcile staff-declared subjects with canonical subject rows.

A staff member declares a subject informally (name + code) long before an
administrator creates a :class:`Subject` for it.  The first time that
subject is scheduled, :class:`SubjectIdentityResolver` finds the canonical
row by code or creates one.  The unique constraint on ``subject_code`` makes
creation safe under concurrent callers: a duplicate-key failure means another
request created the row first, so the resolver looks it up once more.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from src.exceptions import ValidationError
from src.models.staff import Staff
from src.models.subject import Subject
from src.services.schedule_repository import ScheduleRepository

logger = logging.getLogger(__name__)


class SubjectIdentityResolver:
    """Return a stable canonical subject for a subject code.

    Args:
        repository: Store used for lookups and inserts.
    """

    def __init__(self, repository: ScheduleRepository) -> None:
        self._repository = repository

    async def resolve(
        self,
        *,
        subject_code: str,
        subject_name: str,
        department_id: int,
        academic_year: int | None = None,
    ) -> Subject:
        """Find the subject with *subject_code*, creating it on first use.

        A created subject is marked shared and records its code as the
        shared subject code.

        Raises:
            ValidationError: If the code or name is empty.
            IntegrityError: If the insert fails and the retry lookup still
                finds nothing (a constraint other than the code was violated).
        """
        if not subject_code or not subject_name:
            raise ValidationError(
                "Subject code and name are required to resolve a subject",
                field="subject_code",
            )

        existing = await self._repository.find_subject_by_code(subject_code)
        if existing is not None:
            return existing

        candidate = Subject(
            subject_code=subject_code,
            subject_name=subject_name,
            department_id=department_id,
            academic_year=academic_year,
            is_shared=True,
            shared_subject_code=subject_code,
        )
        try:
            created = await self._repository.insert_subject(candidate)
        except IntegrityError:
            logger.info(
                "Subject %s was created concurrently; retrying as lookup",
                subject_code,
            )
            existing = await self._repository.find_subject_by_code(subject_code)
            if existing is None:
                raise
            return existing

        logger.info(
            "Created canonical subject id=%s code=%s for department_id=%s",
            created.id,
            subject_code,
            department_id,
        )
        return created

    async def resolve_for_staff(self, staff: Staff) -> Subject:
        """Resolve the subject a staff member has declared."""
        return await self.resolve(
            subject_code=staff.subject_code or "",
            subject_name=staff.subject_name or "",
            department_id=staff.department_id,
        )
