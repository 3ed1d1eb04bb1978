import logging
import re
from datetime import date
from decimal import Decimal, InvalidOperation
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from payfam.core.config import settings
from payfam.core.exceptions import ConstraintViolation, NotFoundError, ValidationError
from payfam.db.base import atomic
from payfam.models.member import Member
from payfam.models.message import MessageLog
from payfam.models.payment import MonthlyDue, PaymentTransaction
from payfam.models.user import User
from uuid import UUID
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

MEMBER_FIELDS = (
    "name",
    "father_name",
    "phone_number",
    "alternate_phone",
    "email",
    "address",
    "monthly_fee",
    "membership_type",
    "active",
    "joining_date",
    "notes",
    "user_id",
)


def validate_phone_number(phone: str, field: str = "phone_number") -> str:
    """Check a phone number against the configured pattern (e.g. +92XXXXXXXXXX)."""
    phone = (phone or "").strip()
    if not re.match(settings.PHONE_NUMBER_PATTERN, phone):
        raise ValidationError(f"Invalid {field} '{phone}'. Expected format matching {settings.PHONE_NUMBER_PATTERN}")
    return phone


def _clean_member_fields(fields: Dict, creating: bool) -> Dict:
    unknown = set(fields) - set(MEMBER_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown member fields: {', '.join(sorted(unknown))}")

    cleaned = dict(fields)

    if creating or "name" in cleaned:
        name = (cleaned.get("name") or "").strip()
        if not 2 <= len(name) <= 100:
            raise ValidationError("Name must be between 2 and 100 characters")
        cleaned["name"] = name

    if creating or "phone_number" in cleaned:
        cleaned["phone_number"] = validate_phone_number(cleaned.get("phone_number"))

    if cleaned.get("alternate_phone"):
        cleaned["alternate_phone"] = validate_phone_number(cleaned["alternate_phone"], "alternate_phone")
    elif "alternate_phone" in cleaned:
        cleaned["alternate_phone"] = None

    if creating or "monthly_fee" in cleaned:
        try:
            fee = Decimal(str(cleaned.get("monthly_fee"))).quantize(Decimal("0.01"))
        except (InvalidOperation, ValueError, TypeError):
            raise ValidationError("Monthly fee is required")
        if fee < 0:
            raise ValidationError("Monthly fee cannot be negative")
        cleaned["monthly_fee"] = fee

    if "address" in cleaned and cleaned["address"] and len(cleaned["address"]) > 500:
        raise ValidationError("Address must be at most 500 characters")
    if "notes" in cleaned and cleaned["notes"] and len(cleaned["notes"]) > 1000:
        raise ValidationError("Notes must be at most 1000 characters")

    for optional in ("father_name", "email", "address", "notes"):
        if optional in cleaned and not cleaned[optional]:
            cleaned[optional] = None

    if creating:
        cleaned["membership_type"] = (cleaned.get("membership_type") or "regular").strip()
        cleaned.setdefault("active", True)
        if cleaned.get("joining_date") is None:
            cleaned["joining_date"] = date.today()

    return cleaned


def create_member(db: Session, **fields) -> Member:
    """Create a member (active unless stated otherwise)."""
    cleaned = _clean_member_fields(fields, creating=True)
    member = Member(**cleaned)
    with atomic(db, "creating a member"):
        db.add(member)
    db.refresh(member)
    logger.info(f"Created member {member.id} ({member.name}) with monthly fee {member.monthly_fee}")
    return member


def get_member(db: Session, member_id: UUID) -> Member:
    member = db.query(Member).filter(Member.id == member_id).first()
    if not member:
        raise NotFoundError("Member not found")
    return member


def get_member_by_user_id(db: Session, user_id: UUID) -> Optional[Member]:
    """Get the member linked to a login user."""
    return db.query(Member).filter(Member.user_id == user_id).first()


def list_members(
    db: Session,
    search: str = None,
    active: Optional[bool] = None
) -> List[Member]:
    """List members by name, optionally filtered by name/phone and active flag."""
    query = db.query(Member)
    if search and search.strip():
        like = f"%{search.strip()}%"
        query = query.filter(or_(Member.name.ilike(like), Member.phone_number.ilike(like)))
    if active is not None:
        query = query.filter(Member.active == active)
    return query.order_by(Member.name).all()


def update_member(db: Session, member_id: UUID, **fields) -> Member:
    """Update member details. Existing dues keep the fee they were created with."""
    member = get_member(db, member_id)
    cleaned = _clean_member_fields(fields, creating=False)

    if cleaned.get("user_id") is not None:
        user = db.query(User).filter(User.id == cleaned["user_id"]).first()
        if not user:
            raise NotFoundError("User not found")

    try:
        with atomic(db, "updating a member"):
            for key, value in cleaned.items():
                setattr(member, key, value)
    except IntegrityError:
        raise ConstraintViolation("That user is already linked to another member")
    db.refresh(member)
    return member


def toggle_member_active(db: Session, member_id: UUID) -> Member:
    """Toggle member between active and inactive."""
    member = get_member(db, member_id)
    with atomic(db, "toggling member status"):
        member.active = not member.active
    db.refresh(member)
    logger.info(f"Member {member.id} is now {'active' if member.active else 'inactive'}")
    return member


def delete_member(db: Session, member_id: UUID) -> Dict[str, int]:
    """
    Delete a member and everything that references it.

    Ledger rows, monthly dues, message logs and finally the member row are
    removed in that order inside one transaction; if any step fails nothing
    is deleted.
    """
    member = get_member(db, member_id)
    member_name = member.name

    with atomic(db, "deleting a member"):
        transactions = db.query(PaymentTransaction).filter(
            PaymentTransaction.member_id == member.id
        ).delete()
        dues = db.query(MonthlyDue).filter(
            MonthlyDue.member_id == member.id
        ).delete()
        messages = db.query(MessageLog).filter(
            MessageLog.member_id == member.id
        ).delete()
        db.query(Member).filter(Member.id == member_id).delete()

    logger.warning(
        f"Deleted member {member_id} ({member_name}): "
        f"{transactions} transactions, {dues} dues, {messages} message logs"
    )
    return {"transactions": transactions, "monthly_dues": dues, "message_logs": messages}
