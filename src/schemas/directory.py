"""Pydantic v2 schemas for departments, subjects and staff."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Departments
# ---------------------------------------------------------------------------


class DepartmentCreate(BaseModel):
    """Request payload for POST /departments.

    Attributes:
        code: Short code used as the circular column header (e.g. ``CSE``).
        name: Display name; must be unique ignoring case and spacing.
    """

    model_config = ConfigDict(strict=False, populate_by_name=True)

    code: str = Field(..., min_length=1, max_length=20)
    name: str = Field(..., min_length=1, max_length=120)


class DepartmentUpdate(BaseModel):
    model_config = ConfigDict(strict=False, populate_by_name=True)

    code: str | None = Field(default=None, min_length=1, max_length=20)
    name: str | None = Field(default=None, min_length=1, max_length=120)


class DepartmentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    code: str
    name: str


# ---------------------------------------------------------------------------
# Subjects
# ---------------------------------------------------------------------------


class SubjectCreate(BaseModel):
    """Request payload for POST /subjects.

    Attributes:
        subject_code: Unique subject code.
        subject_name: Display name.
        department_id: Owning department.
        academic_year: Year of study (1-4).
        semester: Semester number (1-8).
        is_shared: Whether the subject is taught by several departments.
        shared_subject_code: Code correlating shared instances.
    """

    model_config = ConfigDict(strict=False, populate_by_name=True)

    subject_code: str = Field(..., min_length=1, max_length=30)
    subject_name: str = Field(..., min_length=1, max_length=200)
    department_id: int = Field(..., gt=0)
    academic_year: int | None = Field(default=None, ge=1, le=4)
    semester: int | None = Field(default=None, ge=1, le=8)
    is_shared: bool = False
    shared_subject_code: str | None = Field(default=None, max_length=30)


class SubjectUpdate(BaseModel):
    model_config = ConfigDict(strict=False, populate_by_name=True)

    subject_code: str | None = Field(default=None, min_length=1, max_length=30)
    subject_name: str | None = Field(default=None, min_length=1, max_length=200)
    department_id: int | None = Field(default=None, gt=0)
    academic_year: int | None = Field(default=None, ge=1, le=4)
    semester: int | None = Field(default=None, ge=1, le=8)
    is_shared: bool | None = None
    shared_subject_code: str | None = Field(default=None, max_length=30)


class SubjectOut(BaseModel):
    """Subject with its scheduling status for the acting department.

    Attributes:
        status: ``scheduled`` once the subject has an exam date, else
            ``pending``.
        scheduled_date: The exam date, when scheduled.
    """

    model_config = ConfigDict(from_attributes=True)

    id: int
    subject_code: str
    subject_name: str
    department_id: int
    academic_year: int | None = None
    semester: int | None = None
    is_shared: bool = False
    shared_subject_code: str | None = None
    status: str = Field(default="pending", pattern=r"^(pending|scheduled)$")
    scheduled_date: date | None = None


# ---------------------------------------------------------------------------
# Staff
# ---------------------------------------------------------------------------


class StaffCreate(BaseModel):
    """Request payload for POST /staff.

    ``subject_name`` and ``subject_code`` may be left empty; a staff member
    without both cannot schedule through the staff path.
    """

    model_config = ConfigDict(strict=False, populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=120)
    email: str = Field(..., min_length=3, max_length=200)
    phone: str | None = Field(default=None, max_length=30)
    role_title: str = Field(default="Teacher", max_length=30)
    department_id: int = Field(..., gt=0)
    subject_name: str | None = Field(default=None, max_length=200)
    subject_code: str | None = Field(default=None, max_length=30)


class StaffUpdate(BaseModel):
    model_config = ConfigDict(strict=False, populate_by_name=True)

    name: str | None = Field(default=None, min_length=1, max_length=120)
    email: str | None = Field(default=None, min_length=3, max_length=200)
    phone: str | None = Field(default=None, max_length=30)
    role_title: str | None = Field(default=None, max_length=30)
    department_id: int | None = Field(default=None, gt=0)
    subject_name: str | None = Field(default=None, max_length=200)
    subject_code: str | None = Field(default=None, max_length=30)


class StaffOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    phone: str | None = None
    role_title: str
    department_id: int
    subject_name: str | None = None
    subject_code: str | None = None
