from pydantic import BaseModel
from typing import List, Optional
from datetime import date
from decimal import Decimal
from uuid import UUID


class PeriodTotals(BaseModel):
    month: int
    year: int
    total_collected: Decimal
    total_outstanding: Decimal
    overdue_count: int


class DashboardResponse(BaseModel):
    total_members: int
    active_members: int
    current_period: PeriodTotals


class ReportRow(BaseModel):
    member_name: str
    amount_due: Decimal
    amount_paid: Decimal
    status: str
    paid_on: Optional[date] = None


class MonthlyReportResponse(BaseModel):
    month: Optional[int] = None
    year: int
    rows: List[ReportRow]
    total_paid: Decimal
    total_unpaid: Decimal
    total_overdue: Decimal


class YearGridSlot(BaseModel):
    month: int
    month_name: str
    due_id: Optional[UUID] = None
    amount_due: Optional[Decimal] = None
    amount_paid: Optional[Decimal] = None
    status: str
    paid_on: Optional[date] = None


class MemberTotals(BaseModel):
    total_paid: Decimal
    total_due: Decimal
