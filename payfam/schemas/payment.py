from pydantic import BaseModel, Field
from typing import Optional
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID
from payfam.models.payment import PaymentMethod
from payfam.services.ledger import effective_status


class PaymentCreate(BaseModel):
    """Schema for recording a payment against a member."""
    member_id: UUID
    amount: Decimal = Field(..., gt=0)
    payment_date: date = Field(..., description="Determines which month the payment settles")
    method: PaymentMethod = PaymentMethod.CASH
    reference: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = Field(None, max_length=500)
    monthly_due_id: Optional[UUID] = Field(None, description="Settle this existing due instead of the payment month")


class TransactionResponse(BaseModel):
    id: UUID
    monthly_due_id: UUID
    member_id: UUID
    amount: Decimal
    payment_date: date
    method: PaymentMethod
    reference: Optional[str] = None
    notes: Optional[str] = None
    receipt_number: str
    recorded_by: Optional[UUID] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DueResponse(BaseModel):
    id: UUID
    member_id: UUID
    month: int
    year: int
    amount_due: Decimal
    amount_paid: Decimal
    status: str
    due_date: date
    paid_on: Optional[date] = None
    notes: Optional[str] = None

    @classmethod
    def from_due(cls, due, today: date = None):
        """Serialize a due with its status derived as of today."""
        return cls(
            id=due.id,
            member_id=due.member_id,
            month=due.month,
            year=due.year,
            amount_due=due.amount_due,
            amount_paid=due.amount_paid,
            status=effective_status(due, today).value,
            due_date=due.due_date,
            paid_on=due.paid_on,
            notes=due.notes
        )

    class Config:
        from_attributes = True


class MessageLinkResponse(BaseModel):
    member_id: UUID
    message: str
    link: str
    status: Optional[str] = None


class PaymentRecordedResponse(BaseModel):
    transaction: TransactionResponse
    due: DueResponse
    receipt: MessageLinkResponse


class RefreshResponse(BaseModel):
    updated: int
