"""Monthly dues ledger.

Every change to what a member has paid goes through this module: a payment is
appended to (or reversed from) the ledger and the owning MonthlyDue is
recomputed from its ledger rows in the same database transaction.
"""

import calendar
import logging
import secrets
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from payfam.core.config import settings
from payfam.core.exceptions import ConstraintViolation, NotFoundError, ValidationError
from payfam.db.base import atomic
from payfam.models.member import Member
from payfam.models.payment import DueStatus, MonthlyDue, PaymentMethod, PaymentTransaction

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")


def derive_status(
    amount_due: Decimal,
    amount_paid: Decimal,
    due_date: date,
    today: date
) -> DueStatus:
    """Status of a due as a pure function of its amounts and dates.

    Paying more than amount_due counts as paid; the excess is not carried
    anywhere.
    """
    amount_due = Decimal(amount_due or 0)
    amount_paid = Decimal(amount_paid or 0)

    if amount_paid >= amount_due:
        return DueStatus.PAID
    if today > due_date:
        return DueStatus.OVERDUE
    if amount_paid > 0:
        return DueStatus.PARTIAL
    return DueStatus.DUE


def effective_status(due: MonthlyDue, today: Optional[date] = None) -> DueStatus:
    """Status of a stored due as of today, ignoring the persisted column."""
    return derive_status(due.amount_due, due.amount_paid, due.due_date, today or date.today())


def completion_date(amount_due: Decimal, transactions: Iterable[PaymentTransaction]) -> Optional[date]:
    """Payment date of the transaction that brought the running total up to amount_due."""
    running = ZERO
    for tx in sorted(transactions, key=lambda t: t.payment_date):
        running += Decimal(tx.amount)
        if running >= amount_due:
            return tx.payment_date
    return None


def period_due_date(year: int, month: int, day: Optional[int] = None) -> date:
    """Due date for a period: the configured day, clamped to the month length."""
    day = day or settings.DUE_DAY_OF_MONTH
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day, last_day))


def generate_receipt_number(payment_date: date) -> str:
    """Receipt number: RCP-20250105-9F2A41C7"""
    return f"RCP-{payment_date:%Y%m%d}-{secrets.token_hex(4).upper()}"


def _find_due(db: Session, member_id: UUID, month: int, year: int) -> Optional[MonthlyDue]:
    return db.query(MonthlyDue).filter(
        MonthlyDue.member_id == member_id,
        MonthlyDue.month == month,
        MonthlyDue.year == year
    ).first()


def _active_member(db: Session, member_id: UUID) -> Member:
    member = db.query(Member).filter(Member.id == member_id).first()
    if not member:
        raise NotFoundError("Member not found")
    if not member.active:
        raise ValidationError("Member is inactive; payments cannot be recorded")
    return member


def resolve_due_period(
    db: Session,
    member_id: UUID,
    payment_date: date
) -> MonthlyDue:
    """Find or create the member's MonthlyDue for the month of payment_date.

    The insert runs in a savepoint against the unique (member, month, year)
    constraint. If another request created the row first, the savepoint is
    rolled back and the existing row is reused.
    """
    member = _active_member(db, member_id)

    month, year = payment_date.month, payment_date.year
    due = _find_due(db, member.id, month, year)
    if due is not None:
        return due

    due = MonthlyDue(
        member_id=member.id,
        month=month,
        year=year,
        amount_due=member.monthly_fee or ZERO,
        amount_paid=ZERO,
        due_date=period_due_date(year, month),
        status=DueStatus.DUE
    )
    try:
        with db.begin_nested():
            db.add(due)
            db.flush()
    except IntegrityError:
        logger.info(f"MonthlyDue for member {member.id} {month:02d}/{year} already exists, reusing it")
        existing = _find_due(db, member.id, month, year)
        if existing is None:
            raise ConstraintViolation(f"Could not create or find the due for {month:02d}/{year}")
        return existing

    logger.info(f"Created MonthlyDue {due.id} for member {member.id} {month:02d}/{year} (amount_due={due.amount_due})")
    return due


def lock_member_due(db: Session, member_id: UUID, due_id: UUID) -> MonthlyDue:
    """Load an existing due for update, checking it belongs to the member.

    Used when a payment settles a specific (usually earlier) month rather
    than the month of its payment date.
    """
    member = _active_member(db, member_id)
    due = db.query(MonthlyDue).filter(MonthlyDue.id == due_id).with_for_update().first()
    if not due:
        raise NotFoundError("Monthly due not found")
    if due.member_id != member.id:
        raise ValidationError("Monthly due does not belong to this member")
    return due


def recompute_due(db: Session, due: MonthlyDue, today: Optional[date] = None) -> MonthlyDue:
    """Recompute amount_paid, status and paid_on from the due's ledger rows.

    Does not commit; callers run it inside the transaction that changed the
    ledger.
    """
    today = today or date.today()
    db.flush()
    transactions = db.query(PaymentTransaction).filter(
        PaymentTransaction.monthly_due_id == due.id
    ).order_by(PaymentTransaction.payment_date).all()

    amount_paid = sum((Decimal(tx.amount) for tx in transactions), ZERO)
    status = derive_status(due.amount_due, amount_paid, due.due_date, today)

    due.amount_paid = amount_paid
    due.status = status
    due.paid_on = completion_date(Decimal(due.amount_due), transactions) if status == DueStatus.PAID else None
    db.flush()
    return due


def _parse_amount(amount) -> Decimal:
    try:
        value = Decimal(str(amount)).quantize(Decimal("0.01"))
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError(f"Invalid amount: {amount!r}")
    if value <= 0:
        raise ValidationError("Amount must be greater than zero")
    return value


def _parse_method(method) -> PaymentMethod:
    if isinstance(method, PaymentMethod):
        return method
    try:
        return PaymentMethod(str(method).strip().lower())
    except ValueError:
        allowed = ", ".join(m.value for m in PaymentMethod)
        raise ValidationError(f"Invalid payment method '{method}'. Expected one of: {allowed}")


def record_payment(
    db: Session,
    member_id: UUID,
    amount,
    payment_date: date,
    method=PaymentMethod.CASH,
    reference: str = None,
    notes: str = None,
    recorded_by: UUID = None,
    today: Optional[date] = None,
    monthly_due_id: UUID = None
) -> PaymentTransaction:
    """
    Append a payment to the ledger and update its monthly due.

    With monthly_due_id the payment settles that due (e.g. a late payment for
    an earlier month); otherwise the due is resolved (or created) from the
    payment date. The ledger insert and the due recompute are committed
    together.
    """
    value = _parse_amount(amount)
    payment_method = _parse_method(method)
    if payment_date is None:
        raise ValidationError("Payment date is required")
    if reference and len(reference) > 100:
        raise ValidationError("Reference must be at most 100 characters")
    if notes and len(notes) > 500:
        raise ValidationError("Notes must be at most 500 characters")

    with atomic(db, "recording a payment"):
        if monthly_due_id is not None:
            due = lock_member_due(db, member_id, monthly_due_id)
        else:
            due = resolve_due_period(db, member_id, payment_date)
        transaction = PaymentTransaction(
            monthly_due_id=due.id,
            member_id=due.member_id,
            amount=value,
            payment_date=payment_date,
            method=payment_method,
            reference=reference or None,
            notes=notes or None,
            receipt_number=generate_receipt_number(payment_date),
            recorded_by=recorded_by
        )
        db.add(transaction)
        db.flush()
        recompute_due(db, due, today)

    db.refresh(transaction)
    logger.info(
        f"Recorded payment {transaction.receipt_number} of {value} for member {member_id} "
        f"({due.month:02d}/{due.year}): paid={due.amount_paid} status={due.status.value}"
    )
    return transaction


def reverse_payment(
    db: Session,
    transaction_id: UUID,
    today: Optional[date] = None
) -> MonthlyDue:
    """Remove a ledger row recorded in error and recompute its due."""
    transaction = db.query(PaymentTransaction).filter(PaymentTransaction.id == transaction_id).first()
    if not transaction:
        raise NotFoundError("Payment transaction not found")
    receipt_number, amount = transaction.receipt_number, transaction.amount

    with atomic(db, "reversing a payment"):
        due = db.query(MonthlyDue).filter(MonthlyDue.id == transaction.monthly_due_id).first()
        db.delete(transaction)
        db.flush()
        recompute_due(db, due, today)

    db.refresh(due)
    logger.warning(
        f"Reversed payment {receipt_number} ({amount}) on due {due.id}: "
        f"paid={due.amount_paid} status={due.status.value}"
    )
    return due


def refresh_due_statuses(db: Session, today: Optional[date] = None) -> int:
    """Recompute every stored due from its ledger; return how many changed.

    Statuses drift as due dates pass (due -> overdue); this writes the
    derived values back so the stored column matches what reads report.
    """
    today = today or date.today()
    changed = 0
    with atomic(db, "refreshing due statuses"):
        for due in db.query(MonthlyDue).all():
            before = (due.amount_paid, due.status, due.paid_on)
            recompute_due(db, due, today)
            if (due.amount_paid, due.status, due.paid_on) != before:
                changed += 1
    logger.info(f"Refreshed due statuses: {changed} updated")
    return changed


def get_due(db: Session, due_id: UUID) -> MonthlyDue:
    due = db.query(MonthlyDue).filter(MonthlyDue.id == due_id).first()
    if not due:
        raise NotFoundError("Monthly due not found")
    return due


def get_transaction(db: Session, transaction_id: UUID) -> PaymentTransaction:
    transaction = db.query(PaymentTransaction).filter(PaymentTransaction.id == transaction_id).first()
    if not transaction:
        raise NotFoundError("Payment transaction not found")
    return transaction


def list_member_dues(db: Session, member_id: UUID, year: Optional[int] = None) -> List[MonthlyDue]:
    query = db.query(MonthlyDue).filter(MonthlyDue.member_id == member_id)
    if year is not None:
        query = query.filter(MonthlyDue.year == year)
    return query.order_by(MonthlyDue.year, MonthlyDue.month).all()


def list_due_transactions(db: Session, due_id: UUID) -> List[PaymentTransaction]:
    return db.query(PaymentTransaction).filter(
        PaymentTransaction.monthly_due_id == due_id
    ).order_by(PaymentTransaction.payment_date, PaymentTransaction.created_at).all()
