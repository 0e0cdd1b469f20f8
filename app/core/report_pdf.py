# app/core/report_pdf.py
import io
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from app.services.hour_aggregator import CompletionStatus

_STATUS_LABEL = {
    CompletionStatus.COMPLETE: "Complete",
    CompletionStatus.IN_PROGRESS: "In progress",
}


def _hours(value: float) -> str:
    return f"{value:g}h"


def _student_block(entry: dict, required: int, styles) -> list:
    s = entry["student"]
    status = CompletionStatus(entry["status"])

    flow = [
        Paragraph(f"<b>{escape(s.name)}</b> (CPF: {escape(s.cpf)})", styles["Heading4"]),
        Paragraph(
            f"Course: {escape(s.course or '-')} &nbsp;&nbsp; Class: {escape(s.class_name or '-')} &nbsp;&nbsp; "
            f"Total: {_hours(entry['valid_total_hours'])} / {required}h &nbsp;&nbsp; "
            f"Status: {_STATUS_LABEL[status]}",
            styles["Normal"],
        ),
        Spacer(1, 2 * mm),
    ]

    data = [["Type", "Hours", "Date"]]
    for act in entry["activities"]:
        data.append([act["category"], _hours(act["hours"]), act["occurred_on"].strftime("%d/%m/%Y")])
    if len(data) == 1:
        data.append(["No activities logged", "", ""])

    table = Table(data, colWidths=[80 * mm, 30 * mm, 40 * mm], repeatRows=1)
    table.setStyle(
        TableStyle([
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#eef2ff")),
            ("LINEBELOW", (0, 0), (-1, 0), 0.5, colors.grey),
            ("FONTSIZE", (0, 0), (-1, -1), 9),
            ("ALIGN", (1, 1), (1, -1), "RIGHT"),
        ])
    )
    flow += [table, Spacer(1, 6 * mm)]
    return flow


def build_list_report_pdf(report: dict) -> bytes:
    """Renders the list report (see report_controller.build_list_report) as A4 PDF bytes."""
    buf = io.BytesIO()
    doc = SimpleDocTemplate(
        buf,
        pagesize=A4,
        leftMargin=18 * mm,
        rightMargin=18 * mm,
        topMargin=18 * mm,
        bottomMargin=18 * mm,
        title=f"Report - {report['student_list'].title}",
    )
    styles = getSampleStyleSheet()
    student_list = report["student_list"]

    story = [
        Paragraph("Complementary Activities Report", styles["Title"]),
        Paragraph(f"List: {escape(student_list.title)}", styles["Heading2"]),
        Paragraph(
            f"Total hours required: {student_list.total_hours_required}h &nbsp;&nbsp; "
            f"Max hours per type: {student_list.max_hours_per_category}h &nbsp;&nbsp; "
            f"Students: {student_list.student_count}",
            styles["Normal"],
        ),
        Paragraph(f"Generated at {report['generated_at'].strftime('%d/%m/%Y %H:%M')} UTC", styles["Italic"]),
        Spacer(1, 8 * mm),
    ]

    for entry in report["students"]:
        story += _student_block(entry, student_list.total_hours_required, styles)

    doc.build(story)
    return buf.getvalue()
