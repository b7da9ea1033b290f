"""Pydantic v2 schemas for exam alert windows."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ExamAlertCreate(BaseModel):
    """Request payload for POST /exam-alerts.

    Attributes:
        title: Display title; defaults to ``"<exam_type> - <academic_year_label>"``.
        exam_type: e.g. ``"Internal Assessment-II"``.
        academic_year_label: e.g. ``"2025-26"``.
        start_date: First schedulable date.
        end_date: Last schedulable date; must not precede ``start_date``.
        booking_deadline: Optional date teachers should book by.
        year: Target year of study.
        semester: Target semester.
        departments: Target department codes; empty targets every department.
    """

    model_config = ConfigDict(strict=False, populate_by_name=True)

    title: str | None = Field(default=None, max_length=200)
    exam_type: str | None = Field(default=None, max_length=60)
    academic_year_label: str | None = Field(default=None, max_length=20)
    start_date: date
    end_date: date
    booking_deadline: date | None = None
    year: int = Field(default=1, ge=1, le=4)
    semester: int = Field(default=1, ge=1, le=8)
    departments: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_window(self) -> "ExamAlertCreate":
        if self.end_date < self.start_date:
            raise ValueError("end_date must be on or after start_date")
        return self

    def resolved_title(self) -> str:
        if self.title:
            return self.title
        parts = [p for p in (self.exam_type, self.academic_year_label) if p]
        return " - ".join(parts) or "Examination"


class ExamAlertUpdate(BaseModel):
    model_config = ConfigDict(strict=False, populate_by_name=True)

    title: str | None = Field(default=None, max_length=200)
    exam_type: str | None = Field(default=None, max_length=60)
    academic_year_label: str | None = Field(default=None, max_length=20)
    start_date: date | None = None
    end_date: date | None = None
    booking_deadline: date | None = None
    year: int | None = Field(default=None, ge=1, le=4)
    semester: int | None = Field(default=None, ge=1, le=8)
    departments: list[str] | None = None
    status: str | None = Field(default=None, pattern=r"^(active|closed)$")


class ExamAlertOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    exam_type: str | None = None
    academic_year_label: str | None = None
    start_date: date
    end_date: date
    booking_deadline: date | None = None
    year: int
    semester: int
    departments: list[str] = Field(default_factory=list)
    status: str
    created_by: str | None = None


class AvailableDatesResponse(BaseModel):
    """Response for GET /exam-alerts/{alert_id}/available-dates."""

    alert_id: int
    dates: list[date]
    count: int
