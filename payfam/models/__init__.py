from payfam.db.base import Base

# Import all models so Alembic can detect them
from payfam.models.user import User, UserRoleEnum
from payfam.models.member import Member
from payfam.models.payment import (
    DueStatus,
    PaymentMethod,
    MonthlyDue,
    PaymentTransaction,
)
from payfam.models.message import MessageLog, MessageType

__all__ = [
    "Base",
    "User",
    "UserRoleEnum",
    "Member",
    "DueStatus",
    "PaymentMethod",
    "MonthlyDue",
    "PaymentTransaction",
    "MessageLog",
    "MessageType",
]
