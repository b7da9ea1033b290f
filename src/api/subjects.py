"""Subject routes.

Provides:
    GET    /subjects               — list with scheduling status; filter by
                                     department and year.
    GET    /subjects/{subject_id}  — one subject.
    POST   /subjects               — create (admin).
    PATCH  /subjects/{subject_id}  — update (admin).
    DELETE /subjects/{subject_id}  — delete (admin); refused while any exam
                                     schedule references the subject.
"""

import logging

from fastapi import APIRouter, Query, Response, status
from sqlalchemy import func, select

from src.api.dependencies import AdminDep, CurrentUserDep, DBDep
from src.exceptions import ConflictError, NotFoundError
from src.models.department import Department
from src.models.exam_schedule import ExamSchedule
from src.models.subject import Subject
from src.schemas.directory import SubjectCreate, SubjectOut, SubjectUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/subjects", tags=["subjects"])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _to_out(subject: Subject, scheduled: dict) -> SubjectOut:
    out = SubjectOut.model_validate(subject)
    exam_date = scheduled.get(subject.id)
    if exam_date is not None:
        out.status = "scheduled"
        out.scheduled_date = exam_date
    return out


async def _scheduled_dates(db: DBDep, subject_ids: list[int]) -> dict:
    """Map subject id to its exam date in the owning department."""
    if not subject_ids:
        return {}
    stmt = (
        select(ExamSchedule.subject_id, ExamSchedule.exam_date)
        .join(Subject, ExamSchedule.subject_id == Subject.id)
        .where(
            ExamSchedule.subject_id.in_(subject_ids),
            ExamSchedule.department_id == Subject.department_id,
        )
    )
    result = await db.execute(stmt)
    return {subject_id: exam_date for subject_id, exam_date in result.all()}


async def _get_or_404(db: DBDep, subject_id: int) -> Subject:
    subject = await db.get(Subject, subject_id)
    if subject is None:
        raise NotFoundError("subject", subject_id)
    return subject


async def _ensure_code_free(db: DBDep, code: str, exclude_id: int | None = None) -> None:
    stmt = select(Subject).where(Subject.subject_code == code.strip())
    existing = (await db.execute(stmt)).scalar_one_or_none()
    if existing is not None and existing.id != exclude_id:
        raise ConflictError(f"Subject code {existing.subject_code} already exists")


async def _ensure_department(db: DBDep, department_id: int) -> None:
    if await db.get(Department, department_id) is None:
        raise NotFoundError("department", department_id)


# ---------------------------------------------------------------------------
# Route handlers
# ---------------------------------------------------------------------------


@router.get("", response_model=list[SubjectOut], summary="List subjects")
async def list_subjects(
    db: DBDep,
    _user: CurrentUserDep,
    department_id: int | None = Query(default=None, gt=0),
    academic_year: int | None = Query(default=None, ge=1, le=4),
) -> list[SubjectOut]:
    """List subjects with ``pending``/``scheduled`` status.

    Args:
        department_id: Restrict to one department's subjects.
        academic_year: Restrict to one year of study.
    """
    stmt = select(Subject)
    if department_id is not None:
        stmt = stmt.where(Subject.department_id == department_id)
    if academic_year is not None:
        stmt = stmt.where(Subject.academic_year == academic_year)
    stmt = stmt.order_by(Subject.academic_year, Subject.subject_code)

    subjects = list((await db.execute(stmt)).scalars().all())
    scheduled = await _scheduled_dates(db, [s.id for s in subjects])
    return [_to_out(s, scheduled) for s in subjects]


@router.get(
    "/{subject_id}",
    response_model=SubjectOut,
    summary="Get a subject",
    responses={404: {"description": "Subject not found"}},
)
async def get_subject(subject_id: int, db: DBDep, _user: CurrentUserDep) -> SubjectOut:
    subject = await _get_or_404(db, subject_id)
    return _to_out(subject, await _scheduled_dates(db, [subject.id]))


@router.post(
    "",
    response_model=SubjectOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create a subject",
    responses={409: {"description": "Subject code already exists"}},
)
async def create_subject(payload: SubjectCreate, db: DBDep, _admin: AdminDep) -> SubjectOut:
    await _ensure_department(db, payload.department_id)
    await _ensure_code_free(db, payload.subject_code)
    subject = Subject(**payload.model_dump())
    db.add(subject)
    await db.flush()
    logger.info("Created subject %s (%s)", subject.subject_code, subject.subject_name)
    return _to_out(subject, {})


@router.patch(
    "/{subject_id}",
    response_model=SubjectOut,
    summary="Update a subject",
    responses={404: {"description": "Subject not found"}},
)
async def update_subject(
    subject_id: int, payload: SubjectUpdate, db: DBDep, _admin: AdminDep
) -> SubjectOut:
    subject = await _get_or_404(db, subject_id)
    changes = payload.model_dump(exclude_unset=True)
    if "department_id" in changes:
        await _ensure_department(db, changes["department_id"])
    if "subject_code" in changes:
        await _ensure_code_free(db, changes["subject_code"], exclude_id=subject_id)
    for attr, value in changes.items():
        setattr(subject, attr, value)
    await db.flush()
    return _to_out(subject, await _scheduled_dates(db, [subject.id]))


@router.delete(
    "/{subject_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a subject",
    responses={
        404: {"description": "Subject not found"},
        409: {"description": "Subject still has exam schedules"},
    },
)
async def delete_subject(subject_id: int, db: DBDep, _admin: AdminDep) -> Response:
    subject = await _get_or_404(db, subject_id)
    stmt = select(func.count()).select_from(ExamSchedule).where(
        ExamSchedule.subject_id == subject_id
    )
    references = (await db.execute(stmt)).scalar_one()
    if references:
        raise ConflictError(
            f"Subject {subject.subject_code} has {references} exam schedule(s); "
            "remove them before deleting the subject"
        )
    await db.delete(subject)
    await db.flush()
    logger.info("Deleted subject %s", subject.subject_code)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
