from sqlalchemy import Column, String, ForeignKey, Date, DateTime, Integer, Numeric, Enum as SQLEnum, Text, UniqueConstraint, CheckConstraint, Uuid, text, func
from sqlalchemy.orm import relationship
import uuid
from payfam.db.base import Base
import enum
from decimal import Decimal


class DueStatus(str, enum.Enum):
    """Payment state of a monthly due relative to its due date."""
    DUE = "due"
    PARTIAL = "partial"
    PAID = "paid"
    OVERDUE = "overdue"


class PaymentMethod(str, enum.Enum):
    """How a payment was made."""
    CASH = "cash"
    BANK_TRANSFER = "bank_transfer"
    CHEQUE = "cheque"
    ONLINE = "online"


class MonthlyDue(Base):
    """One member's obligation for one calendar month.

    amount_paid, status and paid_on are maintained by the ledger service only;
    they always reflect the sum of the linked payment transactions.
    """
    __tablename__ = "monthly_due"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    member_id = Column(Uuid(as_uuid=True), ForeignKey("member.id"), nullable=False, index=True)
    month = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)
    amount_due = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    amount_paid = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    status = Column(SQLEnum(DueStatus, native_enum=False, values_callable=lambda obj: [e.value for e in obj]), default=DueStatus.DUE, nullable=False)
    due_date = Column(Date, nullable=False)
    paid_on = Column(Date, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP"))
    updated_at = Column(DateTime, nullable=True, onupdate=func.now())

    # Relationships
    member = relationship("Member", back_populates="monthly_dues")
    transactions = relationship("PaymentTransaction", back_populates="monthly_due", order_by="PaymentTransaction.payment_date")

    __table_args__ = (
        UniqueConstraint("member_id", "month", "year", name="uq_monthly_due_member_period"),
        CheckConstraint("month BETWEEN 1 AND 12", name="ck_monthly_due_month"),
    )


class PaymentTransaction(Base):
    """Immutable ledger entry funding a monthly due."""
    __tablename__ = "payment_transaction"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    monthly_due_id = Column(Uuid(as_uuid=True), ForeignKey("monthly_due.id"), nullable=False, index=True)
    member_id = Column(Uuid(as_uuid=True), ForeignKey("member.id"), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    payment_date = Column(Date, nullable=False)
    method = Column(SQLEnum(PaymentMethod, native_enum=False, values_callable=lambda obj: [e.value for e in obj]), default=PaymentMethod.CASH, nullable=False)
    reference = Column(String(100), nullable=True)
    notes = Column(Text, nullable=True)
    receipt_number = Column(String(40), nullable=False, unique=True, index=True)
    recorded_by = Column(Uuid(as_uuid=True), ForeignKey("user.id"), nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP"))

    # Relationships
    monthly_due = relationship("MonthlyDue", back_populates="transactions")
    member = relationship("Member", back_populates="transactions")

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_payment_transaction_amount_positive"),
    )
