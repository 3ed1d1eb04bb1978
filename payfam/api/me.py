from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session
from payfam.db.base import get_db
from payfam.core.dependencies import get_current_active_user
from payfam.models.user import User
from payfam.schemas.member import MemberResponse
from payfam.schemas.payment import DueResponse
from payfam.services.export import render_pdf, report_filename, PDF_MEDIA_TYPE
from payfam.services.ledger import list_member_dues
from payfam.services.member import get_member_by_user_id
from payfam.services.reports import get_member_totals, member_statement
from typing import Optional
from datetime import date

router = APIRouter(prefix="/api/me", tags=["me"])


def _own_member(db: Session, user: User):
    member = get_member_by_user_id(db, user.id)
    if not member:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No member record is linked to this account"
        )
    return member


@router.get("/dashboard")
def get_my_dashboard(
    year: Optional[int] = Query(None, ge=1900, le=2100),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """The caller's member profile, dues for the year and lifetime totals."""
    member = _own_member(db, current_user)
    today = date.today()
    year = year or today.year
    return {
        "member": MemberResponse.model_validate(member),
        "year": year,
        "dues": [DueResponse.from_due(due, today) for due in list_member_dues(db, member.id, year)],
        "totals": get_member_totals(db, member.id),
    }


@router.get("/statement")
def get_my_statement(
    year: Optional[int] = Query(None, ge=1900, le=2100),
    format: str = Query("pdf", pattern="^pdf$"),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Yearly payment statement as a PDF."""
    member = _own_member(db, current_user)
    report = member_statement(db, member, year or date.today().year)
    content = render_pdf(report, title=f"Payment Statement - {member.name} - {report['year']}")
    return Response(
        content=content,
        media_type=PDF_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{report_filename(report, format)}"'}
    )
