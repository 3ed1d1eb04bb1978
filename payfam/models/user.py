from sqlalchemy import Column, String, Boolean, DateTime, Enum as SQLEnum, Uuid, text
from sqlalchemy.orm import relationship
import uuid
from payfam.db.base import Base
import enum


class UserRoleEnum(str, enum.Enum):
    """Login role."""
    ADMIN = "admin"
    MANAGER = "manager"
    MEMBER = "member"


class User(Base):
    """Login identity. Members reach their own dues through Member.user_id."""
    __tablename__ = "user"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String(255), nullable=False, unique=True, index=True)
    full_name = Column(String(100), nullable=True)
    phone_number = Column(String(20), nullable=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(SQLEnum(UserRoleEnum, native_enum=False, values_callable=lambda obj: [e.value for e in obj]), default=UserRoleEnum.MEMBER, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP"))

    # Relationships
    member = relationship("Member", back_populates="user", uselist=False)
