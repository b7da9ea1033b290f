"""Examination circular download.

Provides:
    GET /circulars/exam-timetable?format=pdf|docx&year=&exam_type=

Builds the department-by-date timetable from the scheduled exams of one year
of study and returns it as a PDF or DOCX attachment (admin only).
"""

import logging

from fastapi import APIRouter, Query
from fastapi.responses import Response

from src.api.dependencies import AdminDep, RepositoryDep, SettingsDep
from src.services.circular import build_circular
from src.services.circular_docx import CircularDocxGenerator
from src.services.circular_pdf import CircularPdfGenerator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/circulars", tags=["circulars"])

# Singleton renderers
_pdf_generator = CircularPdfGenerator()
_docx_generator = CircularDocxGenerator()

_MEDIA_TYPES = {
    "pdf": "application/pdf",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}


@router.get(
    "/exam-timetable",
    summary="Download the examination circular",
    responses={
        200: {
            "content": {media: {} for media in _MEDIA_TYPES.values()},
            "description": "Circular file download",
        },
        422: {"description": "Unknown exam type or year"},
    },
)
async def exam_timetable(
    repository: RepositoryDep,
    settings: SettingsDep,
    _admin: AdminDep,
    format: str = Query(default="pdf", pattern=r"^(pdf|docx)$"),
    year: int = Query(default=2, description="Year of study (2, 3 or 4)"),
    exam_type: str = Query(default="IA2", description="IA1, IA2, IA3, Model or End-Semester"),
) -> Response:
    """
    Render the circular for *exam_type* and *year*.

    Returns the file bytes with a ``Content-Disposition`` attachment header.
    """
    schedules = await repository.all_schedules(academic_year=year)
    departments = await repository.list_departments()
    content = build_circular(
        schedules, departments, exam_type=exam_type, year=year, settings=settings
    )

    if format == "docx":
        data = _docx_generator.generate(content)
    else:
        data = _pdf_generator.generate(content)

    filename = f"{content.filename_stem}.{format}"
    logger.info(
        "Circular %s rendered: %d exam(s), %d bytes", filename, len(schedules), len(data)
    )
    return Response(
        content=data,
        media_type=_MEDIA_TYPES[format],
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
