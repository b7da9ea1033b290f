"""Staff routes (admin only).

Provides:
    GET    /staff             — list, optionally searched by name, email or
                                department name.
    POST   /staff             — create.
    PATCH  /staff/{staff_id}  — update.
    DELETE /staff/{staff_id}  — delete.
"""

import logging

from fastapi import APIRouter, Query, Response, status
from sqlalchemy import or_, select

from src.api.dependencies import AdminDep, DBDep
from src.exceptions import ConflictError, NotFoundError
from src.models.department import Department
from src.models.staff import Staff
from src.schemas.directory import StaffCreate, StaffOut, StaffUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/staff", tags=["staff"])


async def _get_or_404(db: DBDep, staff_id: int) -> Staff:
    staff = await db.get(Staff, staff_id)
    if staff is None:
        raise NotFoundError("staff", staff_id)
    return staff


async def _ensure_email_free(db: DBDep, email: str, exclude_id: int | None = None) -> None:
    stmt = select(Staff).where(Staff.email == email.strip().lower())
    existing = (await db.execute(stmt)).scalar_one_or_none()
    if existing is not None and existing.id != exclude_id:
        raise ConflictError(f"A staff member with email {existing.email} already exists")


@router.get("", response_model=list[StaffOut], summary="List staff")
async def list_staff(
    db: DBDep,
    _admin: AdminDep,
    search: str | None = Query(
        default=None, description="Match against name, email or department name"
    ),
    department_id: int | None = Query(default=None, gt=0),
) -> list[StaffOut]:
    stmt = select(Staff).join(Department, Staff.department_id == Department.id)
    if department_id is not None:
        stmt = stmt.where(Staff.department_id == department_id)
    if search:
        pattern = f"%{search.strip()}%"
        stmt = stmt.where(
            or_(
                Staff.name.ilike(pattern),
                Staff.email.ilike(pattern),
                Department.name.ilike(pattern),
            )
        )
    stmt = stmt.order_by(Staff.name)
    result = await db.execute(stmt)
    return [StaffOut.model_validate(s) for s in result.scalars().all()]


@router.post(
    "",
    response_model=StaffOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create a staff member",
    responses={409: {"description": "Email already in use"}},
)
async def create_staff(payload: StaffCreate, db: DBDep, _admin: AdminDep) -> StaffOut:
    if await db.get(Department, payload.department_id) is None:
        raise NotFoundError("department", payload.department_id)
    await _ensure_email_free(db, payload.email)
    data = payload.model_dump()
    data["email"] = data["email"].strip().lower()
    staff = Staff(**data)
    db.add(staff)
    await db.flush()
    logger.info("Created staff %s (department_id=%s)", staff.email, staff.department_id)
    return StaffOut.model_validate(staff)


@router.patch(
    "/{staff_id}",
    response_model=StaffOut,
    summary="Update a staff member",
    responses={404: {"description": "Staff member not found"}},
)
async def update_staff(
    staff_id: int, payload: StaffUpdate, db: DBDep, _admin: AdminDep
) -> StaffOut:
    staff = await _get_or_404(db, staff_id)
    changes = payload.model_dump(exclude_unset=True)
    if "department_id" in changes and await db.get(Department, changes["department_id"]) is None:
        raise NotFoundError("department", changes["department_id"])
    if "email" in changes:
        changes["email"] = changes["email"].strip().lower()
        await _ensure_email_free(db, changes["email"], exclude_id=staff_id)
    for attr, value in changes.items():
        setattr(staff, attr, value)
    await db.flush()
    return StaffOut.model_validate(staff)


@router.delete(
    "/{staff_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a staff member",
    responses={404: {"description": "Staff member not found"}},
)
async def delete_staff(staff_id: int, db: DBDep, _admin: AdminDep) -> Response:
    staff = await _get_or_404(db, staff_id)
    await db.delete(staff)
    await db.flush()
    logger.info("Deleted staff %s", staff.email)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
