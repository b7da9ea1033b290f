"""
DOCX renderer for the examination circular.

Produces an editable copy of the same circular the PDF renderer prints, for
offices that amend the wording before issuing it.  Uses python-docx.
"""

import io
import logging

from docx import Document
from docx.enum.table import WD_TABLE_ALIGNMENT
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Pt, RGBColor

from src.services.circular import CircularContent

logger = logging.getLogger(__name__)

TITLE_COLOR = RGBColor(0x00, 0x00, 0x8B)
FOOTER_COLOR = RGBColor(0x80, 0x80, 0x80)


def _add_centered(doc: Document, text: str, size: int, bold: bool = False,
                  color: RGBColor | None = None) -> None:
    """Add a centred single-run paragraph."""
    para = doc.add_paragraph()
    para.alignment = WD_ALIGN_PARAGRAPH.CENTER
    run = para.add_run(text)
    run.bold = bold
    run.font.size = Pt(size)
    if color is not None:
        run.font.color.rgb = color


def _add_numbered(doc: Document, items: list[str]) -> None:
    for i, item in enumerate(items, start=1):
        para = doc.add_paragraph(f"{i}. {item}")
        para.paragraph_format.space_after = Pt(2)


class CircularDocxGenerator:
    """Render :class:`CircularContent` to DOCX bytes."""

    def generate(self, content: CircularContent) -> bytes:
        try:
            doc = Document()
            self._set_document_defaults(doc)
            self._add_letterhead(doc, content)
            self._add_circular_text(doc, content)
            self._add_timetable(doc, content)
            self._add_notes(doc, content)
            self._add_signature(doc, content)
            _add_centered(
                doc,
                f"Generated on: {content.generated_at.strftime('%d/%m/%Y, %H:%M:%S')}",
                8,
                color=FOOTER_COLOR,
            )

            buffer = io.BytesIO()
            doc.save(buffer)
            buffer.seek(0)
            return buffer.read()

        except Exception as exc:
            logger.error("Circular DOCX generation failed: %s", exc)
            raise RuntimeError(f"Circular DOCX generation failed: {exc}") from exc

    def _set_document_defaults(self, doc: Document) -> None:
        font = doc.styles["Normal"].font
        font.name = "Calibri"
        font.size = Pt(11)

    def _add_letterhead(self, doc: Document, content: CircularContent) -> None:
        _add_centered(doc, content.institution_name, 18, bold=True, color=TITLE_COLOR)
        _add_centered(doc, content.institution_status, 12)
        _add_centered(doc, content.office_title, 14, bold=True)

        ref = doc.add_paragraph()
        ref.add_run(content.reference).font.size = Pt(10)
        ref.add_run("\t\t\t\t")
        ref.add_run(content.issued_on.strftime("%d/%m/%Y")).font.size = Pt(10)

    def _add_circular_text(self, doc: Document, content: CircularContent) -> None:
        _add_centered(doc, "CIRCULAR", 16, bold=True)
        subject = doc.add_paragraph()
        run = subject.add_run(content.subject_line)
        run.bold = True
        run.font.size = Pt(12)
        doc.add_paragraph(content.body)
        _add_centered(doc, "EXAMINATION SCHEDULE", 12, bold=True)

    def _add_timetable(self, doc: Document, content: CircularContent) -> None:
        """Date column plus one column per department code."""
        codes = content.department_codes
        table = doc.add_table(rows=1, cols=len(codes) + 1)
        table.style = "Table Grid"
        table.alignment = WD_TABLE_ALIGNMENT.CENTER

        header = table.rows[0].cells
        header[0].text = "DATE"
        for i, code in enumerate(codes, start=1):
            header[i].text = code
        for cell in header:
            for run in cell.paragraphs[0].runs:
                run.bold = True
                run.font.size = Pt(8)

        for row in content.rows:
            cells = table.add_row().cells
            cells[0].text = row.label
            for i, code in enumerate(codes, start=1):
                entry = row.cells.get(code)
                if entry is None:
                    cells[i].text = "-"
                    continue
                lines = [entry.subject_code, entry.subject_name]
                if entry.exam_time:
                    lines.append(entry.exam_time)
                cells[i].text = "\n".join(lines)
            for cell in cells:
                for para in cell.paragraphs:
                    for run in para.runs:
                        run.font.size = Pt(7)

    def _add_notes(self, doc: Document, content: CircularContent) -> None:
        doc.add_paragraph("")
        doc.add_paragraph().add_run("IMPORTANT NOTES:").bold = True
        _add_numbered(doc, content.notes)
        doc.add_paragraph().add_run("Copy to:").bold = True
        _add_numbered(doc, content.copy_to)

    def _add_signature(self, doc: Document, content: CircularContent) -> None:
        doc.add_paragraph("")
        for text, bold, size in (
            (content.signatory_name, True, 12),
            (content.signatory_title, True, 10),
            (f"{content.institution_name} {content.institution_status.upper()}", False, 9),
            (content.institution_address, False, 9),
        ):
            para = doc.add_paragraph()
            para.alignment = WD_ALIGN_PARAGRAPH.RIGHT
            run = para.add_run(text)
            run.bold = bold
            run.font.size = Pt(size)
