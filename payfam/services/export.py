"""Spreadsheet and PDF rendering of monthly reports.

Both renderers take the dict produced by services.reports.monthly_report (or
member_statement) and return the file as bytes.
"""

import calendar
from io import BytesIO
from typing import Dict
from xml.sax.saxutils import escape

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from payfam.core.config import settings

HEADERS = ["Member Name", "Amount Due", "Amount Paid", "Status", "Payment Date"]

STATUS_LABELS = {
    "paid": "Paid",
    "partial": "Partial",
    "overdue": "Overdue",
    "due": "Unpaid",
}

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
PDF_MEDIA_TYPE = "application/pdf"


def period_label(report: Dict) -> str:
    if report.get("month"):
        return f"{calendar.month_name[report['month']]} {report['year']}"
    return str(report["year"])


def report_filename(report: Dict, extension: str) -> str:
    label = period_label(report).replace(" ", "_")
    return f"{settings.ORGANIZATION_NAME}_Report_{label}.{extension}"


def _status_label(status: str) -> str:
    return STATUS_LABELS.get(status, status.title())


def _paid_on_label(paid_on) -> str:
    return paid_on.isoformat() if paid_on else "N/A"


def render_xlsx(report: Dict) -> bytes:
    """One sheet: a row per member, then the three summary totals."""
    wb = Workbook()
    sheet = wb.active
    sheet.title = period_label(report)[:31]

    for col, header in enumerate(HEADERS, 1):
        cell = sheet.cell(row=1, column=col, value=header)
        cell.font = Font(bold=True)
        cell.fill = PatternFill(start_color="CCCCCC", end_color="CCCCCC", fill_type="solid")

    row = 2
    for item in report["rows"]:
        sheet.cell(row=row, column=1, value=item["member_name"])
        sheet.cell(row=row, column=2, value=float(item["amount_due"]))
        sheet.cell(row=row, column=3, value=float(item["amount_paid"]))
        sheet.cell(row=row, column=4, value=_status_label(item["status"]))
        sheet.cell(row=row, column=5, value=_paid_on_label(item["paid_on"]))
        row += 1

    row += 1
    sheet.cell(row=row, column=1, value="SUMMARY").font = Font(bold=True)
    summary_items = [
        ("Total Paid", 3, report["total_paid"]),
        ("Total Unpaid", 2, report["total_unpaid"]),
        ("Total Overdue", 2, report["total_overdue"]),
    ]
    for label, column, value in summary_items:
        row += 1
        sheet.cell(row=row, column=1, value=label).font = Font(bold=True)
        sheet.cell(row=row, column=column, value=float(value))

    sheet.column_dimensions["A"].width = 30
    for letter in ("B", "C", "D", "E"):
        sheet.column_dimensions[letter].width = 16

    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def render_pdf(report: Dict, title: str = None) -> bytes:
    """Title, a grid table of rows and a summary block."""
    buffer = BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=A4)
    styles = getSampleStyleSheet()
    currency = settings.CURRENCY_LABEL

    story = [
        Paragraph(escape(title or f"Monthly Report - {period_label(report)}"), styles["Heading1"]),
        Spacer(1, 12),
    ]

    table_data = [HEADERS]
    for item in report["rows"]:
        table_data.append([
            item["member_name"],
            f"{currency} {item['amount_due']:,.2f}",
            f"{currency} {item['amount_paid']:,.2f}",
            _status_label(item["status"]),
            _paid_on_label(item["paid_on"]),
        ])

    table = Table(table_data, repeatRows=1)
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#4F46E5")),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 9),
        ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
    ]))
    story.append(table)
    story.append(Spacer(1, 18))

    story.append(Paragraph("Summary:", styles["Heading3"]))
    story.append(Paragraph(f"Total Paid: {currency} {report['total_paid']:,.2f}", styles["Normal"]))
    story.append(Paragraph(f"Total Unpaid: {currency} {report['total_unpaid']:,.2f}", styles["Normal"]))
    story.append(Paragraph(f"Total Overdue: {currency} {report['total_overdue']:,.2f}", styles["Normal"]))

    doc.build(story)
    return buffer.getvalue()
