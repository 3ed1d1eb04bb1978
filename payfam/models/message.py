from sqlalchemy import Column, String, ForeignKey, DateTime, Text, Uuid, text
from sqlalchemy.orm import relationship
import uuid
from payfam.db.base import Base
import enum


class MessageType(str, enum.Enum):
    """Kind of WhatsApp message generated for a member."""
    REMINDER = "reminder"
    RECEIPT = "receipt"


class MessageLog(Base):
    """Record of a WhatsApp deep link generated for a member."""
    __tablename__ = "message_log"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    member_id = Column(Uuid(as_uuid=True), ForeignKey("member.id"), nullable=False, index=True)
    monthly_due_id = Column(Uuid(as_uuid=True), nullable=True)  # No FK: the member cascade removes dues before logs
    phone_number = Column(String(20), nullable=False)
    message_type = Column(String(20), nullable=False)
    message_content = Column(Text, nullable=False)
    link = Column(Text, nullable=False)
    status = Column(String(20), nullable=False, default="generated")
    created_by = Column(Uuid(as_uuid=True), ForeignKey("user.id"), nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP"))

    # Relationships
    member = relationship("Member", back_populates="message_logs")
