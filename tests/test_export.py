from datetime import date
from decimal import Decimal
from io import BytesIO

from openpyxl import load_workbook

from payfam.services.export import HEADERS, period_label, render_pdf, render_xlsx, report_filename

REPORT = {
    "month": 1,
    "year": 2025,
    "rows": [
        {"member_name": "Ahmed Khan", "amount_due": Decimal("5000"), "amount_paid": Decimal("5000"),
         "status": "paid", "paid_on": date(2025, 1, 2)},
        {"member_name": "Sara Malik", "amount_due": Decimal("1000"), "amount_paid": Decimal("400"),
         "status": "overdue", "paid_on": None},
    ],
    "total_paid": Decimal("5400"),
    "total_unpaid": Decimal("0"),
    "total_overdue": Decimal("600"),
}


def test_period_label_and_filename():
    assert period_label(REPORT) == "January 2025"
    assert report_filename(REPORT, "xlsx") == "PayFam_Report_January_2025.xlsx"
    assert period_label({"month": None, "year": 2025}) == "2025"


def test_render_xlsx():
    sheet = load_workbook(BytesIO(render_xlsx(REPORT))).active

    assert [cell.value for cell in sheet[1]] == HEADERS
    assert [cell.value for cell in sheet[2]] == ["Ahmed Khan", 5000, 5000, "Paid", "2025-01-02"]
    assert sheet["E3"].value == "N/A"
    assert sheet["A5"].value == "SUMMARY"
    assert sheet["C6"].value == 5400
    assert sheet["B8"].value == 600


def test_render_pdf():
    content = render_pdf(REPORT, title="Report <January> & more")
    assert content.startswith(b"%PDF")
