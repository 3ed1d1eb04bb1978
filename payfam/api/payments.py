from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from payfam.db.base import get_db
from payfam.core.audit import record_audit
from payfam.core.dependencies import get_current_active_user, require_staff, require_admin, ensure_member_visible
from payfam.models.user import User
from payfam.schemas.payment import (
    PaymentCreate, PaymentRecordedResponse, TransactionResponse, DueResponse, MessageLinkResponse, RefreshResponse
)
from payfam.services.ledger import (
    record_payment, reverse_payment, refresh_due_statuses, get_due, list_due_transactions
)
from payfam.services.messaging import create_payment_receipt
from typing import List
from uuid import UUID
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/payments", tags=["payments"])


@router.post("", response_model=PaymentRecordedResponse, status_code=status.HTTP_201_CREATED)
def create_payment(
    payment: PaymentCreate,
    current_user: User = Depends(require_staff),
    db: Session = Depends(get_db)
):
    """
    Record a payment for a member.

    The month it settles is monthly_due_id when given, otherwise the month
    of payment_date; that monthly due is created on first payment. Returns the ledger row, the updated due and a
    WhatsApp receipt link.
    """
    transaction = record_payment(
        db,
        member_id=payment.member_id,
        amount=payment.amount,
        payment_date=payment.payment_date,
        method=payment.method,
        reference=payment.reference,
        notes=payment.notes,
        recorded_by=current_user.id,
        monthly_due_id=payment.monthly_due_id
    )
    record_audit(
        current_user, "Payment recorded",
        f"receipt={transaction.receipt_number} member_id={transaction.member_id} amount={transaction.amount}"
    )
    receipt = create_payment_receipt(db, transaction, created_by=current_user.id)
    return PaymentRecordedResponse(
        transaction=TransactionResponse.model_validate(transaction),
        due=DueResponse.from_due(transaction.monthly_due),
        receipt=MessageLinkResponse(**receipt)
    )


@router.get("/dues/{due_id}", response_model=DueResponse)
def get_monthly_due(
    due_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    due = get_due(db, due_id)
    ensure_member_visible(current_user, due.member)
    return DueResponse.from_due(due)


@router.get("/dues/{due_id}/transactions", response_model=List[TransactionResponse])
def get_due_transactions(
    due_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Ledger rows funding a due, oldest first."""
    due = get_due(db, due_id)
    ensure_member_visible(current_user, due.member)
    return list_due_transactions(db, due.id)


@router.delete("/transactions/{transaction_id}", response_model=DueResponse)
def delete_transaction(
    transaction_id: UUID,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Reverse a payment recorded in error. Returns the recomputed due."""
    due = reverse_payment(db, transaction_id)
    record_audit(current_user, "Payment reversed", f"transaction_id={transaction_id} due_id={due.id}")
    return DueResponse.from_due(due)


@router.post("/dues/refresh", response_model=RefreshResponse)
def refresh_statuses(
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Write derived statuses back to every stored due."""
    updated = refresh_due_statuses(db)
    record_audit(current_user, "Due statuses refreshed", f"updated={updated}")
    return RefreshResponse(updated=updated)
