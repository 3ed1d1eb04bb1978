from pydantic import BaseModel, EmailStr
from typing import Optional
from uuid import UUID


class UserRegister(BaseModel):
    email: EmailStr
    password: str
    full_name: Optional[str] = None
    phone_number: Optional[str] = None


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserResponse(BaseModel):
    id: UUID
    email: str
    full_name: Optional[str] = None
    phone_number: Optional[str] = None
    role: str
    is_active: bool
    member_id: Optional[UUID] = None

    @classmethod
    def from_orm(cls, obj):
        """Convert ORM object to response model."""
        return cls(
            id=obj.id,
            email=obj.email,
            full_name=obj.full_name,
            phone_number=obj.phone_number,
            role=obj.role.value,
            is_active=obj.is_active,
            member_id=obj.member.id if obj.member else None
        )

    class Config:
        from_attributes = True
