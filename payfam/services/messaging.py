import calendar
import logging
import re
from datetime import date
from decimal import Decimal
from typing import Dict, Optional
from urllib.parse import quote
from uuid import UUID

from sqlalchemy.orm import Session

from payfam.core.config import settings
from payfam.core.exceptions import ValidationError
from payfam.db.base import atomic
from payfam.models.member import Member
from payfam.models.message import MessageLog, MessageType
from payfam.models.payment import DueStatus, MonthlyDue, PaymentTransaction
from payfam.services.ledger import effective_status, get_due

logger = logging.getLogger(__name__)


def _money(amount) -> str:
    value = Decimal(str(amount or 0))
    if value == value.to_integral_value():
        return f"{settings.CURRENCY_LABEL} {value:,.0f}"
    return f"{settings.CURRENCY_LABEL} {value:,.2f}"


def build_whatsapp_link(phone_number: str, message: str) -> str:
    """Deep link that opens WhatsApp with the message pre-filled."""
    digits = re.sub(r"[^0-9]", "", phone_number or "")
    if not digits:
        raise ValidationError("A phone number is required to build a WhatsApp link")
    return f"{settings.WHATSAPP_BASE_URL}/{digits}?text={quote(message, safe='')}"


def reminder_message(member_name: str, due: MonthlyDue, status: DueStatus) -> str:
    """Reminder text for a due, worded for its status."""
    period = f"{calendar.month_name[due.month]} {due.year}"

    if status == DueStatus.PAID:
        return (
            f"Dear {member_name},\n\n"
            f"Your payment for {period} has been received.\n\n"
            f"Amount Paid: {_money(due.amount_paid)}\n"
            f"Paid On: {due.paid_on or 'N/A'}\n\n"
            f"Thank you!"
        )
    if status == DueStatus.PARTIAL:
        outstanding = Decimal(due.amount_due) - Decimal(due.amount_paid)
        return (
            f"Dear {member_name},\n\n"
            f"Partial payment received for {period}.\n\n"
            f"Amount Due: {_money(due.amount_due)}\n"
            f"Amount Paid: {_money(due.amount_paid)}\n"
            f"Outstanding: {_money(outstanding)}\n"
            f"Due Date: {due.due_date}\n\n"
            f"Please pay the remaining amount."
        )
    if status == DueStatus.OVERDUE:
        outstanding = Decimal(due.amount_due) - Decimal(due.amount_paid)
        return (
            f"Dear {member_name},\n\n"
            f"OVERDUE PAYMENT REMINDER\n\n"
            f"Your payment for {period} is overdue.\n\n"
            f"Amount Due: {_money(outstanding)}\n"
            f"Due Date: {due.due_date}\n\n"
            f"Please make payment at your earliest convenience."
        )
    return (
        f"Dear {member_name},\n\n"
        f"Payment reminder for {period}.\n\n"
        f"Amount Due: {_money(due.amount_due)}\n"
        f"Due Date: {due.due_date}\n\n"
        f"Please make payment before the due date."
    )


def receipt_message(member_name: str, transaction: PaymentTransaction) -> str:
    method = transaction.method.value if transaction.method else "cash"
    return (
        f"*PAYMENT RECEIPT*\n\n"
        f"Receipt No: {transaction.receipt_number}\n"
        f"Member: {member_name}\n"
        f"Amount Paid: {_money(transaction.amount)}\n"
        f"Payment Date: {transaction.payment_date}\n"
        f"Payment Method: {method}\n"
        f"Reference: {transaction.reference or 'N/A'}\n\n"
        f"Thank you for your payment!"
    )


def _log_message(
    db: Session,
    member: Member,
    message_type: MessageType,
    message: str,
    link: str,
    monthly_due_id: UUID = None,
    created_by: UUID = None
) -> MessageLog:
    entry = MessageLog(
        member_id=member.id,
        monthly_due_id=monthly_due_id,
        phone_number=member.phone_number,
        message_type=message_type.value,
        message_content=message,
        link=link,
        created_by=created_by
    )
    with atomic(db, "logging a message"):
        db.add(entry)
    return entry


def create_due_reminder(
    db: Session,
    due_id: UUID,
    created_by: UUID = None,
    today: Optional[date] = None
) -> Dict:
    """Build (and log) the WhatsApp reminder for a due."""
    due = get_due(db, due_id)
    member = due.member
    status = effective_status(due, today)
    message = reminder_message(member.name, due, status)
    link = build_whatsapp_link(member.phone_number, message)
    _log_message(db, member, MessageType.REMINDER, message, link, due.id, created_by)
    logger.info(f"Generated {status.value} reminder for member {member.id} due {due.id}")
    return {"member_id": member.id, "status": status.value, "message": message, "link": link}


def create_payment_receipt(
    db: Session,
    transaction: PaymentTransaction,
    created_by: UUID = None
) -> Dict:
    """Build (and log) the WhatsApp receipt for a recorded payment."""
    member = transaction.member
    message = receipt_message(member.name, transaction)
    link = build_whatsapp_link(member.phone_number, message)
    _log_message(db, member, MessageType.RECEIPT, message, link, transaction.monthly_due_id, created_by)
    return {"member_id": member.id, "message": message, "link": link}
