from datetime import date
from decimal import Decimal

from payfam.services.ledger import record_payment
from payfam.services.member import toggle_member_active
from payfam.services.reports import (
    dashboard_summary,
    get_member_totals,
    get_period_totals,
    member_statement,
    member_year_grid,
    members_with_totals,
    monthly_report,
)


def _ledger(db, make_member):
    ahmed = make_member(name="Ahmed Khan", phone_number="+923001234567", monthly_fee=Decimal("5000"))
    bilal = make_member(name="Bilal Hussain", phone_number="+923011234567", monthly_fee=Decimal("3000"))
    sara = make_member(name="Sara Malik", phone_number="+923021234567", monthly_fee=Decimal("1000"))

    record_payment(db, ahmed.id, Decimal("5000"), date(2025, 1, 2), today=date(2025, 1, 2))
    record_payment(db, bilal.id, Decimal("1000"), date(2025, 1, 3), today=date(2025, 1, 3))
    record_payment(db, sara.id, Decimal("400"), date(2025, 1, 4), today=date(2025, 1, 4))
    record_payment(db, ahmed.id, Decimal("2000"), date(2025, 2, 1), today=date(2025, 2, 1))
    return ahmed, bilal, sara


def test_member_totals(db, make_member):
    ahmed, bilal, _ = _ledger(db, make_member)

    assert get_member_totals(db, ahmed.id) == {"total_paid": Decimal("7000"), "total_due": Decimal("3000")}
    assert get_member_totals(db, bilal.id) == {"total_paid": Decimal("1000"), "total_due": Decimal("2000")}


def test_period_totals_before_due_date(db, make_member):
    _ledger(db, make_member)

    totals = get_period_totals(db, 1, 2025, today=date(2025, 1, 4))
    assert totals["total_collected"] == Decimal("6400")
    assert totals["total_outstanding"] == Decimal("2600")
    assert totals["overdue_count"] == 0


def test_period_totals_after_due_date(db, make_member):
    _ledger(db, make_member)

    totals = get_period_totals(db, 1, 2025, today=date(2025, 1, 10))
    assert totals["total_outstanding"] == Decimal("2600")
    assert totals["overdue_count"] == 2


def test_monthly_report_rows_and_totals(db, make_member):
    _ledger(db, make_member)

    report = monthly_report(db, 1, 2025, today=date(2025, 1, 10))

    assert [row["member_name"] for row in report["rows"]] == ["Ahmed Khan", "Bilal Hussain", "Sara Malik"]
    assert [row["status"] for row in report["rows"]] == ["paid", "overdue", "overdue"]
    assert report["rows"][0]["paid_on"] == date(2025, 1, 2)
    assert report["total_paid"] == Decimal("6400")
    assert report["total_unpaid"] == Decimal("0")
    assert report["total_overdue"] == Decimal("2600")


def test_monthly_report_empty_period(db):
    report = monthly_report(db, 7, 2025)
    assert report["rows"] == []
    assert report["total_paid"] == Decimal("0")


def test_year_grid_has_twelve_slots(db, make_member):
    ahmed, _, _ = _ledger(db, make_member)

    grid = member_year_grid(db, ahmed.id, 2025, today=date(2025, 2, 3))

    assert len(grid) == 12
    assert grid[0]["status"] == "paid"
    assert grid[1]["status"] == "partial"
    assert all(slot["status"] == "not_due" and slot["due_id"] is None for slot in grid[2:])


def test_members_with_totals(db, make_member):
    ahmed, bilal, sara = _ledger(db, make_member)
    extra = make_member(name="Usman Ali", phone_number="+923031234567")

    rows = {row["member"].id: row for row in members_with_totals(db, [ahmed, bilal, sara, extra])}

    assert rows[ahmed.id]["total_paid"] == Decimal("7000")
    assert rows[sara.id]["total_due"] == Decimal("600")
    assert rows[extra.id]["total_paid"] == Decimal("0")


def test_dashboard_summary(db, make_member):
    _, bilal, _ = _ledger(db, make_member)
    toggle_member_active(db, bilal.id)

    summary = dashboard_summary(db, today=date(2025, 1, 10))

    assert summary["total_members"] == 3
    assert summary["active_members"] == 2
    assert summary["current_period"]["month"] == 1
    assert summary["current_period"]["total_collected"] == Decimal("6400")


def test_member_statement(db, make_member):
    ahmed, _, _ = _ledger(db, make_member)

    statement = member_statement(db, ahmed, 2025, today=date(2025, 2, 10))

    assert len(statement["rows"]) == 2
    assert statement["month"] is None
    assert statement["total_paid"] == Decimal("7000")
    assert statement["total_overdue"] == Decimal("3000")
