from sqlalchemy import Column, String, ForeignKey, Date, DateTime, Boolean, Numeric, Text, Uuid, text, func
from sqlalchemy.orm import relationship
import uuid
from payfam.db.base import Base
from decimal import Decimal
from datetime import date


class Member(Base):
    """Member with a recurring monthly fee."""
    __tablename__ = "member"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("user.id"), nullable=True, unique=True, index=True)
    name = Column(String(100), nullable=False, index=True)
    father_name = Column(String(100), nullable=True)
    phone_number = Column(String(20), nullable=False)
    alternate_phone = Column(String(20), nullable=True)
    email = Column(String(255), nullable=True)
    address = Column(Text, nullable=True)
    monthly_fee = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    membership_type = Column(String(50), nullable=False, default="regular")
    active = Column(Boolean, nullable=False, default=True)
    joining_date = Column(Date, nullable=False, default=date.today)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP"))
    updated_at = Column(DateTime, nullable=True, onupdate=func.now())

    # Relationships
    user = relationship("User", back_populates="member")
    monthly_dues = relationship("MonthlyDue", back_populates="member", order_by="MonthlyDue.due_date")
    transactions = relationship("PaymentTransaction", back_populates="member")
    message_logs = relationship("MessageLog", back_populates="member")
