from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from payfam.db.base import get_db
from payfam.core.audit import record_audit
from payfam.core.dependencies import get_current_active_user, require_staff, require_admin, ensure_member_visible
from payfam.core.exceptions import NotFoundError
from payfam.models.user import User
from payfam.schemas.member import MemberCreate, MemberUpdate, MemberResponse, MemberWithTotals, MemberDeleteResponse
from payfam.schemas.payment import DueResponse, MessageLinkResponse
from payfam.schemas.report import YearGridSlot
from payfam.services import member as member_service
from payfam.services.ledger import get_due, list_member_dues
from payfam.services.messaging import create_due_reminder
from payfam.services.reports import member_year_grid, members_with_totals
from typing import List, Optional
from uuid import UUID
from datetime import date

router = APIRouter(prefix="/api/members", tags=["members"])


@router.get("", response_model=List[MemberWithTotals])
def list_members(
    search: Optional[str] = Query(None, description="Match on name or phone number"),
    active: Optional[bool] = None,
    current_user: User = Depends(require_staff),
    db: Session = Depends(get_db)
):
    """List members with their lifetime paid and outstanding totals."""
    members = member_service.list_members(db, search=search, active=active)
    return [
        MemberWithTotals(
            **MemberResponse.model_validate(item["member"]).model_dump(),
            total_paid=item["total_paid"],
            total_due=item["total_due"]
        )
        for item in members_with_totals(db, members)
    ]


@router.post("", response_model=MemberResponse, status_code=status.HTTP_201_CREATED)
def create_member(
    member_data: MemberCreate,
    current_user: User = Depends(require_staff),
    db: Session = Depends(get_db)
):
    member = member_service.create_member(db, **member_data.model_dump())
    record_audit(current_user, "Member created", f"member_id={member.id} name={member.name}")
    return member


@router.get("/{member_id}", response_model=MemberResponse)
def get_member(
    member_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    member = member_service.get_member(db, member_id)
    ensure_member_visible(current_user, member)
    return member


@router.put("/{member_id}", response_model=MemberResponse)
def update_member(
    member_id: UUID,
    member_data: MemberUpdate,
    current_user: User = Depends(require_staff),
    db: Session = Depends(get_db)
):
    """Update only the fields sent in the request."""
    return member_service.update_member(db, member_id, **member_data.model_dump(exclude_unset=True))


@router.post("/{member_id}/toggle-active", response_model=MemberResponse)
def toggle_active(
    member_id: UUID,
    current_user: User = Depends(require_staff),
    db: Session = Depends(get_db)
):
    member = member_service.toggle_member_active(db, member_id)
    record_audit(current_user, "Member status changed", f"member_id={member.id} active={member.active}")
    return member


@router.delete("/{member_id}", response_model=MemberDeleteResponse)
def delete_member(
    member_id: UUID,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Delete a member along with all of its dues, payments and message logs."""
    removed = member_service.delete_member(db, member_id)
    record_audit(
        current_user, "Member deleted",
        f"member_id={member_id} transactions={removed['transactions']} dues={removed['monthly_dues']}"
    )
    return MemberDeleteResponse(message="Member deleted", **removed)


@router.get("/{member_id}/dues", response_model=List[DueResponse])
def get_member_dues(
    member_id: UUID,
    year: Optional[int] = Query(None, ge=1900, le=2100),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    member = member_service.get_member(db, member_id)
    ensure_member_visible(current_user, member)
    today = date.today()
    return [DueResponse.from_due(due, today) for due in list_member_dues(db, member.id, year)]


@router.get("/{member_id}/year-grid", response_model=List[YearGridSlot])
def get_year_grid(
    member_id: UUID,
    year: Optional[int] = Query(None, ge=1900, le=2100),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Twelve monthly slots for the year."""
    member = member_service.get_member(db, member_id)
    ensure_member_visible(current_user, member)
    return member_year_grid(db, member.id, year or date.today().year)


@router.get("/{member_id}/dues/{due_id}/reminder", response_model=MessageLinkResponse)
def get_due_reminder(
    member_id: UUID,
    due_id: UUID,
    current_user: User = Depends(require_staff),
    db: Session = Depends(get_db)
):
    """Generate a WhatsApp reminder link for one of the member's dues."""
    due = get_due(db, due_id)
    if due.member_id != member_id:
        raise NotFoundError("Monthly due not found for this member")
    return create_due_reminder(db, due.id, created_by=current_user.id)
