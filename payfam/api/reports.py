from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session
from payfam.db.base import get_db
from payfam.core.audit import record_audit
from payfam.core.dependencies import require_staff
from payfam.models.user import User
from payfam.schemas.report import DashboardResponse, MonthlyReportResponse
from payfam.services.export import render_pdf, render_xlsx, report_filename, PDF_MEDIA_TYPE, XLSX_MEDIA_TYPE
from payfam.services.reports import dashboard_summary, monthly_report
from typing import Optional
from datetime import date

router = APIRouter(prefix="/api/reports", tags=["reports"])


def _period(month: Optional[int], year: Optional[int]):
    today = date.today()
    return month or today.month, year or today.year


@router.get("/dashboard", response_model=DashboardResponse)
def get_dashboard(
    current_user: User = Depends(require_staff),
    db: Session = Depends(get_db)
):
    """Member counts and the current month's collection totals."""
    return dashboard_summary(db)


@router.get("/monthly", response_model=MonthlyReportResponse)
def get_monthly_report(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=1900, le=2100),
    current_user: User = Depends(require_staff),
    db: Session = Depends(get_db)
):
    month, year = _period(month, year)
    return monthly_report(db, month, year)


@router.get("/monthly/export")
def export_monthly_report(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=1900, le=2100),
    format: str = Query("xlsx", pattern="^(xlsx|pdf)$"),
    current_user: User = Depends(require_staff),
    db: Session = Depends(get_db)
):
    """Download the monthly report as an Excel workbook or a PDF."""
    month, year = _period(month, year)
    report = monthly_report(db, month, year)
    if format == "pdf":
        content, media_type = render_pdf(report), PDF_MEDIA_TYPE
    else:
        content, media_type = render_xlsx(report), XLSX_MEDIA_TYPE

    record_audit(current_user, "Report exported", f"period={month:02d}/{year} format={format}")
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{report_filename(report, format)}"'}
    )
