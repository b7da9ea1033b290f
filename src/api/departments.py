"""Department routes.

Provides:
    GET   /departments                  — list departments ordered by code.
    POST  /departments                  — create (admin).
    PATCH /departments/{department_id}  — rename or recode (admin).

Names are unique ignoring case and spacing; a duplicate is a 409.
"""

import logging

from fastapi import APIRouter, status
from sqlalchemy import select

from src.api.dependencies import AdminDep, CurrentUserDep, DBDep
from src.exceptions import ConflictError, NotFoundError
from src.models.department import Department
from src.naming import clean, name_key
from src.schemas.directory import DepartmentCreate, DepartmentOut, DepartmentUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/departments", tags=["departments"])


async def _ensure_unique(
    db: DBDep, *, code: str | None, name: str | None, exclude_id: int | None = None
) -> None:
    if code is not None:
        stmt = select(Department).where(Department.code == clean(code).upper())
        existing = (await db.execute(stmt)).scalar_one_or_none()
        if existing is not None and existing.id != exclude_id:
            raise ConflictError(f"Department code {existing.code} already exists")
    if name is not None:
        stmt = select(Department).where(Department.name_key == name_key(name))
        existing = (await db.execute(stmt)).scalar_one_or_none()
        if existing is not None and existing.id != exclude_id:
            raise ConflictError(f"Department {existing.name} already exists")


@router.get("", response_model=list[DepartmentOut], summary="List departments")
async def list_departments(db: DBDep, _user: CurrentUserDep) -> list[DepartmentOut]:
    result = await db.execute(select(Department).order_by(Department.code))
    return [DepartmentOut.model_validate(d) for d in result.scalars().all()]


@router.post(
    "",
    response_model=DepartmentOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create a department",
    responses={409: {"description": "Code or name already in use"}},
)
async def create_department(
    payload: DepartmentCreate, db: DBDep, _admin: AdminDep
) -> DepartmentOut:
    await _ensure_unique(db, code=payload.code, name=payload.name)
    department = Department(code=payload.code, name=payload.name)
    db.add(department)
    await db.flush()
    logger.info("Created department %s (%s)", department.code, department.name)
    return DepartmentOut.model_validate(department)


@router.patch(
    "/{department_id}",
    response_model=DepartmentOut,
    summary="Update a department",
    responses={404: {"description": "Department not found"}},
)
async def update_department(
    department_id: int, payload: DepartmentUpdate, db: DBDep, _admin: AdminDep
) -> DepartmentOut:
    department = await db.get(Department, department_id)
    if department is None:
        raise NotFoundError("department", department_id)
    await _ensure_unique(
        db, code=payload.code, name=payload.name, exclude_id=department_id
    )
    for attr, value in payload.model_dump(exclude_unset=True).items():
        setattr(department, attr, value)
    await db.flush()
    return DepartmentOut.model_validate(department)
