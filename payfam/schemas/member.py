from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID


class MemberCreate(BaseModel):
    """Schema for creating a member."""
    name: str = Field(..., min_length=2, max_length=100)
    father_name: Optional[str] = Field(None, max_length=100)
    phone_number: str = Field(..., description="Primary phone, e.g. +923001234567")
    alternate_phone: Optional[str] = None
    email: Optional[EmailStr] = None
    address: Optional[str] = Field(None, max_length=500)
    monthly_fee: Decimal = Field(..., ge=0, description="Amount due each month")
    membership_type: Optional[str] = Field("regular", max_length=50)
    active: bool = True
    joining_date: Optional[date] = None
    notes: Optional[str] = Field(None, max_length=1000)


class MemberUpdate(BaseModel):
    """Schema for updating a member. Only provided fields are changed."""
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    father_name: Optional[str] = Field(None, max_length=100)
    phone_number: Optional[str] = None
    alternate_phone: Optional[str] = None
    email: Optional[EmailStr] = None
    address: Optional[str] = Field(None, max_length=500)
    monthly_fee: Optional[Decimal] = Field(None, ge=0)
    membership_type: Optional[str] = Field(None, max_length=50)
    active: Optional[bool] = None
    joining_date: Optional[date] = None
    notes: Optional[str] = Field(None, max_length=1000)
    user_id: Optional[UUID] = Field(None, description="Link the member to a login user")


class MemberResponse(BaseModel):
    id: UUID
    user_id: Optional[UUID] = None
    name: str
    father_name: Optional[str] = None
    phone_number: str
    alternate_phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    monthly_fee: Decimal
    membership_type: str
    active: bool
    joining_date: Optional[date] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class MemberWithTotals(MemberResponse):
    total_paid: Decimal
    total_due: Decimal


class MemberDeleteResponse(BaseModel):
    message: str
    transactions: int
    monthly_dues: int
    message_logs: int
