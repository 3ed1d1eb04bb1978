"""Read-only rollups over monthly dues.

Nothing here writes. Statuses are re-derived from the stored amounts and the
reporting date rather than read from the status column.
"""

import calendar
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from payfam.models.member import Member
from payfam.models.payment import DueStatus, MonthlyDue
from payfam.services.ledger import ZERO, effective_status

OUTSTANDING_STATUSES = (DueStatus.DUE, DueStatus.PARTIAL, DueStatus.OVERDUE)


def member_totals(dues: Iterable[MonthlyDue]) -> Dict[str, Decimal]:
    """
    Lifetime totals for one member's dues.

    total_due is amount_due - amount_paid summed over all dues, so it goes
    negative when the member has overpaid.
    """
    dues = list(dues)
    total_paid = sum((Decimal(d.amount_paid) for d in dues), ZERO)
    total_due = sum((Decimal(d.amount_due) - Decimal(d.amount_paid) for d in dues), ZERO)
    return {"total_paid": total_paid, "total_due": total_due}


def get_member_totals(db: Session, member_id: UUID) -> Dict[str, Decimal]:
    dues = db.query(MonthlyDue).filter(MonthlyDue.member_id == member_id).all()
    return member_totals(dues)


def period_totals(dues: Iterable[MonthlyDue], today: Optional[date] = None) -> Dict:
    """Organization-wide totals for the dues of one period."""
    today = today or date.today()
    total_collected = ZERO
    total_outstanding = ZERO
    overdue_count = 0
    for due in dues:
        status = effective_status(due, today)
        total_collected += Decimal(due.amount_paid)
        if status in OUTSTANDING_STATUSES:
            total_outstanding += Decimal(due.amount_due) - Decimal(due.amount_paid)
        if status == DueStatus.OVERDUE:
            overdue_count += 1
    return {
        "total_collected": total_collected,
        "total_outstanding": total_outstanding,
        "overdue_count": overdue_count,
    }


def _period_dues(db: Session, month: int, year: int) -> List[MonthlyDue]:
    return db.query(MonthlyDue).join(Member, MonthlyDue.member_id == Member.id).filter(
        MonthlyDue.month == month,
        MonthlyDue.year == year
    ).order_by(Member.name).all()


def get_period_totals(db: Session, month: int, year: int, today: Optional[date] = None) -> Dict:
    totals = period_totals(_period_dues(db, month, year), today)
    totals.update({"month": month, "year": year})
    return totals


def monthly_report(db: Session, month: int, year: int, today: Optional[date] = None) -> Dict:
    """
    Rows and totals for the monthly report export.

    Each row is (member name, amount_due, amount_paid, status, paid_on).
    total_paid is everything collected in the period; total_unpaid and
    total_overdue are the outstanding balances of dues that are still open
    before and after their due date respectively.
    """
    today = today or date.today()
    rows = []
    total_paid = ZERO
    total_unpaid = ZERO
    total_overdue = ZERO

    for due in _period_dues(db, month, year):
        status = effective_status(due, today)
        outstanding = Decimal(due.amount_due) - Decimal(due.amount_paid)
        total_paid += Decimal(due.amount_paid)
        if status in (DueStatus.DUE, DueStatus.PARTIAL):
            total_unpaid += outstanding
        elif status == DueStatus.OVERDUE:
            total_overdue += outstanding

        rows.append({
            "member_name": due.member.name,
            "amount_due": Decimal(due.amount_due),
            "amount_paid": Decimal(due.amount_paid),
            "status": status.value,
            "paid_on": due.paid_on,
        })

    return {
        "month": month,
        "year": year,
        "rows": rows,
        "total_paid": total_paid,
        "total_unpaid": total_unpaid,
        "total_overdue": total_overdue,
    }


def member_statement(db: Session, member: Member, year: int, today: Optional[date] = None) -> Dict:
    """A member's dues for one year in the same shape as the monthly report."""
    today = today or date.today()
    dues = db.query(MonthlyDue).filter(
        MonthlyDue.member_id == member.id,
        MonthlyDue.year == year
    ).order_by(MonthlyDue.month).all()

    rows = []
    total_overdue = ZERO
    for due in dues:
        status = effective_status(due, today)
        if status == DueStatus.OVERDUE:
            total_overdue += Decimal(due.amount_due) - Decimal(due.amount_paid)
        rows.append({
            "member_name": f"{member.name} ({calendar.month_abbr[due.month]})",
            "amount_due": Decimal(due.amount_due),
            "amount_paid": Decimal(due.amount_paid),
            "status": status.value,
            "paid_on": due.paid_on,
        })

    totals = member_totals(dues)
    return {
        "month": None,
        "year": year,
        "rows": rows,
        "total_paid": totals["total_paid"],
        "total_unpaid": totals["total_due"],
        "total_overdue": total_overdue,
    }


def member_year_grid(db: Session, member_id: UUID, year: int, today: Optional[date] = None) -> List[Dict]:
    """Twelve slots for the year; months without a due record are 'not_due'."""
    today = today or date.today()
    dues = {
        d.month: d for d in db.query(MonthlyDue).filter(
            MonthlyDue.member_id == member_id,
            MonthlyDue.year == year
        ).all()
    }
    grid = []
    for month in range(1, 13):
        due = dues.get(month)
        grid.append({
            "month": month,
            "month_name": calendar.month_name[month],
            "due_id": due.id if due else None,
            "amount_due": Decimal(due.amount_due) if due else None,
            "amount_paid": Decimal(due.amount_paid) if due else None,
            "status": effective_status(due, today).value if due else "not_due",
            "paid_on": due.paid_on if due else None,
        })
    return grid


def members_with_totals(db: Session, members: List[Member]) -> List[Dict]:
    """Pair each member with lifetime paid/outstanding totals (one grouped query)."""
    sums = db.query(
        MonthlyDue.member_id,
        func.coalesce(func.sum(MonthlyDue.amount_paid), 0),
        func.coalesce(func.sum(MonthlyDue.amount_due - MonthlyDue.amount_paid), 0),
    ).group_by(MonthlyDue.member_id).all()
    by_member = {member_id: (Decimal(str(paid)), Decimal(str(due))) for member_id, paid, due in sums}

    result = []
    for member in members:
        total_paid, total_due = by_member.get(member.id, (ZERO, ZERO))
        result.append({"member": member, "total_paid": total_paid, "total_due": total_due})
    return result


def dashboard_summary(db: Session, today: Optional[date] = None) -> Dict:
    """Organization dashboard: member counts plus the current month's totals."""
    today = today or date.today()
    total_members = db.query(func.count(Member.id)).scalar() or 0
    active_members = db.query(func.count(Member.id)).filter(Member.active.is_(True)).scalar() or 0
    current = get_period_totals(db, today.month, today.year, today)
    return {
        "total_members": total_members,
        "active_members": active_members,
        "current_period": current,
    }
