"""Examination circular content, shared by the PDF and DOCX renderers.

The circular's timetable has one column per department (by code) and one row
per weekday, from two days before the first scheduled exam to two days after
the last.  When nothing is scheduled the default February window is used so
an empty template can still be printed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Iterable

from src.config import Settings
from src.exceptions import ValidationError
from src.models.department import Department
from src.services.alert_window import available_dates
from src.services.schedule_repository import ScheduleRow

EXAM_TYPE_LABELS: dict[str, str] = {
    "IA1": "Internal Assessment-I",
    "IA2": "Internal Assessment-II",
    "IA3": "Internal Assessment-III",
    "Model": "Model Examination",
    "End-Semester": "End Semester Examination",
}

YEAR_LABELS: dict[int, str] = {2: "II Year", 3: "III Year", 4: "IV Year"}

# Semester sat by each year in the even half of the academic year.
YEAR_SEMESTERS: dict[int, int] = {2: 4, 3: 6, 4: 8}

DEFAULT_WINDOW = (date(2025, 2, 4), date(2025, 2, 28))
WINDOW_PADDING = timedelta(days=2)

# Subject names are cut to this many characters inside timetable cells.
CELL_NAME_CHARS = 8


@dataclass
class CircularCell:
    subject_code: str
    subject_name: str
    exam_time: str


@dataclass
class CircularRow:
    day: date
    cells: dict[str, CircularCell] = field(default_factory=dict)

    @property
    def label(self) -> str:
        return self.day.strftime("%d/%m/%Y")


@dataclass
class CircularContent:
    """Everything printed on the circular, independent of output format."""

    institution_name: str
    institution_status: str
    office_title: str
    reference: str
    issued_on: date
    exam_type_label: str
    year_label: str
    body: str
    department_codes: list[str]
    rows: list[CircularRow]
    notes: list[str]
    copy_to: list[str]
    signatory_name: str
    signatory_title: str
    institution_address: str
    generated_at: datetime

    @property
    def subject_line(self) -> str:
        return f"Sub: {self.exam_type_label} - {self.year_label} Students"

    @property
    def filename_stem(self) -> str:
        stem = f"{self.exam_type_label}_{self.year_label}_{self.issued_on.isoformat()}"
        return "".join(c if c.isalnum() or c in "-_" else "_" for c in stem)


def exam_type_label(exam_type: str) -> str:
    try:
        return EXAM_TYPE_LABELS[exam_type]
    except KeyError:
        raise ValidationError(
            f"Unknown exam type {exam_type!r}; expected one of "
            f"{', '.join(EXAM_TYPE_LABELS)}",
            field="exam_type",
        ) from None


def year_label(year: int) -> str:
    try:
        return YEAR_LABELS[year]
    except KeyError:
        raise ValidationError(
            f"Unknown year {year}; expected one of {sorted(YEAR_LABELS)}",
            field="year",
        ) from None


def build_timetable_rows(
    schedules: Iterable[ScheduleRow], department_codes: list[str]
) -> list[CircularRow]:
    """Lay scheduled exams out as weekday rows × department columns."""
    schedules = list(schedules)
    if schedules:
        dates = sorted(s.exam_date for s in schedules)
        start, end = dates[0] - WINDOW_PADDING, dates[-1] + WINDOW_PADDING
    else:
        start, end = DEFAULT_WINDOW

    by_day: dict[date, dict[str, CircularCell]] = {}
    for row in schedules:
        if row.department_code not in department_codes:
            continue
        cells = by_day.setdefault(row.exam_date, {})
        # First row per department-day wins; there is only one by invariant.
        cells.setdefault(
            row.department_code,
            CircularCell(
                subject_code=row.subject_code,
                subject_name=row.subject_name[:CELL_NAME_CHARS],
                exam_time=row.exam_time.strftime("%H:%M") if row.exam_time else "",
            ),
        )

    return [CircularRow(day=d, cells=by_day.get(d, {})) for d in available_dates(start, end)]


def build_circular(
    schedules: Iterable[ScheduleRow],
    departments: Iterable[Department],
    *,
    exam_type: str,
    year: int,
    settings: Settings,
    now: datetime | None = None,
) -> CircularContent:
    """Assemble the circular for *exam_type* and *year*."""
    now = now or datetime.now()
    type_text = exam_type_label(exam_type)
    year_text = year_label(year)
    codes = [d.code for d in departments]
    rows = build_timetable_rows(schedules, codes)

    first_exam = next((r.day for r in rows if r.cells), None)
    commencement = (
        first_exam.strftime("%d.%m.%Y") if first_exam else settings.circular_commencement
    )
    body = (
        f"The {type_text.lower()} for {year_text.lower()} students will commence "
        f"from {commencement} onwards. The marks secured in this examination will "
        "be considered for internal evaluation. All students are hereby informed "
        "to prepare for the examinations as per the schedule given below."
    )

    return CircularContent(
        institution_name=settings.institution_name,
        institution_status=settings.institution_status,
        office_title=settings.office_title,
        reference=settings.circular_reference,
        issued_on=now.date(),
        exam_type_label=type_text,
        year_label=year_text,
        body=body,
        department_codes=codes,
        rows=rows,
        notes=list(settings.circular_notes),
        copy_to=list(settings.circular_copy_to),
        signatory_name=settings.signatory_name,
        signatory_title=settings.signatory_title,
        institution_address=settings.institution_address,
        generated_at=now,
    )
