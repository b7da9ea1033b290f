"""
PDF renderer for the examination circular.

Uses reportlab's platypus layer: letterhead, circular text, the
department-by-date timetable, notes, copy-to list and signature block, with a
"generated on" footer drawn on every page.
"""

import io
import logging
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_LEFT, TA_RIGHT
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import (
    KeepTogether,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from src.services.circular import CircularContent

logger = logging.getLogger(__name__)

TITLE_BLUE = colors.HexColor("#00008B")
HEADER_FILL = colors.HexColor("#F0F0F0")
BORDER = colors.HexColor("#444444")

# Departments beyond this many switch the page to landscape.
_PORTRAIT_MAX_DEPARTMENTS = 6


def _style(name: str, bold: bool = False, **kw) -> ParagraphStyle:
    return ParagraphStyle(
        name,
        parent=getSampleStyleSheet()["Normal"],
        fontName="Helvetica-Bold" if bold else "Helvetica",
        **kw,
    )


class CircularPdfGenerator:
    """Render :class:`CircularContent` to PDF bytes."""

    def generate(self, content: CircularContent) -> bytes:
        try:
            pagesize = (
                landscape(A4)
                if len(content.department_codes) > _PORTRAIT_MAX_DEPARTMENTS
                else A4
            )
            buffer = io.BytesIO()
            doc = SimpleDocTemplate(
                buffer,
                pagesize=pagesize,
                leftMargin=2 * cm,
                rightMargin=2 * cm,
                topMargin=1.5 * cm,
                bottomMargin=2 * cm,
                title=content.subject_line,
            )
            story = []
            story += self._letterhead(content)
            story += self._circular_text(content)
            story.append(self._timetable(content, doc.width))
            story += self._notes(content)
            story.append(self._signature(content))

            footer = f"Generated on: {content.generated_at.strftime('%d/%m/%Y, %H:%M:%S')}"

            def _draw_footer(canvas, _doc) -> None:
                canvas.saveState()
                canvas.setFont("Helvetica", 8)
                canvas.setFillColor(colors.grey)
                canvas.drawCentredString(pagesize[0] / 2, 1 * cm, footer)
                canvas.restoreState()

            doc.build(story, onFirstPage=_draw_footer, onLaterPages=_draw_footer)
            return buffer.getvalue()
        except Exception as exc:
            logger.error("Circular PDF generation failed: %s", exc)
            raise RuntimeError(f"Circular PDF generation failed: {exc}") from exc

    def _letterhead(self, content: CircularContent) -> list:
        story = [
            Paragraph(
                content.institution_name,
                _style("Inst", bold=True, fontSize=18, leading=22,
                       textColor=TITLE_BLUE, alignment=TA_CENTER),
            ),
            Paragraph(
                content.institution_status,
                _style("Status", fontSize=12, leading=15, alignment=TA_CENTER),
            ),
            Paragraph(
                content.office_title,
                _style("Office", bold=True, fontSize=14, leading=18, alignment=TA_CENTER),
            ),
            Spacer(1, 0.4 * cm),
        ]
        ref_row = Table(
            [[
                Paragraph(content.reference, _style("Ref", fontSize=10, alignment=TA_LEFT)),
                Paragraph(
                    content.issued_on.strftime("%d/%m/%Y"),
                    _style("Date", fontSize=10, alignment=TA_RIGHT),
                ),
            ]],
            colWidths=["50%", "50%"],
        )
        story.append(ref_row)
        story.append(Spacer(1, 0.4 * cm))
        return story

    def _circular_text(self, content: CircularContent) -> list:
        return [
            Paragraph("CIRCULAR", _style("Circ", bold=True, fontSize=16, leading=20,
                                         alignment=TA_CENTER)),
            Spacer(1, 0.3 * cm),
            Paragraph(content.subject_line, _style("Sub", bold=True, fontSize=12)),
            Spacer(1, 0.2 * cm),
            Paragraph(content.body, _style("Body", fontSize=11, leading=15)),
            Spacer(1, 0.4 * cm),
            Paragraph("EXAMINATION SCHEDULE", _style("Sched", bold=True, fontSize=12,
                                                    alignment=TA_CENTER)),
            Spacer(1, 0.2 * cm),
        ]

    def _timetable(self, content: CircularContent, width: float) -> Table:
        head = _style("TH", bold=True, fontSize=8, alignment=TA_CENTER)
        cell = _style("TD", fontSize=7, leading=9, alignment=TA_LEFT)

        date_width = 2.5 * cm
        dept_count = max(len(content.department_codes), 1)
        dept_width = (width - date_width) / dept_count

        data = [[Paragraph("DATE", head)] + [
            Paragraph(code, head) for code in content.department_codes
        ]]
        for row in content.rows:
            line = [Paragraph(row.label, cell)]
            for code in content.department_codes:
                entry = row.cells.get(code)
                if entry is None:
                    line.append(Paragraph("-", cell))
                    continue
                text = f"{escape(entry.subject_code)}<br/>{escape(entry.subject_name)}"
                if entry.exam_time:
                    text += f"<br/>{entry.exam_time}"
                line.append(Paragraph(text, cell))
            data.append(line)

        table = Table(
            data,
            colWidths=[date_width] + [dept_width] * dept_count,
            repeatRows=1,
        )
        table.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), HEADER_FILL),
            ("BOX", (0, 0), (-1, -1), 0.5, BORDER),
            ("INNERGRID", (0, 0), (-1, -1), 0.3, BORDER),
            ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
            ("TOPPADDING", (0, 0), (-1, -1), 3),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 3),
        ]))
        return table

    def _notes(self, content: CircularContent) -> list:
        body = _style("Note", fontSize=10, leading=13)
        story = [Spacer(1, 0.6 * cm), Paragraph("IMPORTANT NOTES:", _style("NH", bold=True, fontSize=11))]
        story += [Paragraph(f"{i}. {note}", body) for i, note in enumerate(content.notes, start=1)]
        story += [Spacer(1, 0.4 * cm), Paragraph("Copy to:", _style("CH", bold=True, fontSize=10))]
        story += [
            Paragraph(f"{i}. {item}", _style(f"Copy{i}", fontSize=10, leftIndent=0.5 * cm))
            for i, item in enumerate(content.copy_to, start=1)
        ]
        return story

    def _signature(self, content: CircularContent) -> KeepTogether:
        right = dict(alignment=TA_RIGHT)
        return KeepTogether([
            Spacer(1, 1.2 * cm),
            Paragraph(content.signatory_name, _style("SigN", bold=True, fontSize=12, **right)),
            Paragraph(content.signatory_title, _style("SigT", bold=True, fontSize=10, **right)),
            Paragraph(
                f"{content.institution_name} {content.institution_status.upper()}",
                _style("SigI", fontSize=9, **right),
            ),
            Paragraph(content.institution_address, _style("SigA", fontSize=9, **right)),
        ])
