import logging
from datetime import timedelta
from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from payfam.core.config import settings
from payfam.core.exceptions import ConstraintViolation, ValidationError
from payfam.core.security import verify_password, get_password_hash, create_access_token
from payfam.db.base import atomic
from payfam.models.member import Member
from payfam.models.user import User, UserRoleEnum

logger = logging.getLogger(__name__)


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    """
    Authenticate user by email and password.

    Returns:
        User object if authentication succeeds, None otherwise
    """
    user = db.query(User).filter(User.email == email.strip().lower()).first()
    if not user:
        logger.debug(f"User not found: {email}")
        return None

    if not verify_password(password, user.password_hash):
        logger.debug(f"Password verification failed for user: {email}")
        return None

    if not user.is_active:
        logger.debug(f"User {email} is disabled, login denied")
        return None

    logger.debug(f"Authentication successful for user: {email}")
    return user


def create_user(
    db: Session,
    email: str,
    password: str,
    full_name: str = None,
    phone_number: str = None,
    role: UserRoleEnum = UserRoleEnum.MEMBER
) -> User:
    """
    Create a login user.

    A new member-role user is linked to the unclaimed Member with the same
    email, so members see their own dues right after signing up.
    """
    email = email.strip().lower()
    if len(password or "") < 6:
        raise ValidationError("Password must be at least 6 characters")

    existing_user = db.query(User).filter(User.email == email).first()
    if existing_user:
        logger.warning(f"Registration attempt with existing email: {email}")
        raise ValidationError("Email already registered")

    user = User(
        email=email,
        password_hash=get_password_hash(password),
        full_name=full_name,
        phone_number=phone_number,
        role=role,
        is_active=True
    )
    try:
        with atomic(db, "creating a user"):
            db.add(user)
            db.flush()
            if role == UserRoleEnum.MEMBER:
                member = db.query(Member).filter(
                    Member.email == email,
                    Member.user_id.is_(None)
                ).first()
                if member:
                    member.user_id = user.id
                    logger.info(f"Linked user {user.id} to member {member.id}")
    except IntegrityError as e:
        logger.error(f"IntegrityError creating user: {e}", exc_info=True)
        raise ConstraintViolation("Email already registered")

    db.refresh(user)
    logger.info(f"Created {role.value} user {user.id} ({email})")
    return user


def create_access_token_for_user(user: User) -> str:
    """Create access token for user."""
    access_token_expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    return create_access_token(
        data={"sub": str(user.id), "role": user.role.value},
        expires_delta=access_token_expires
    )
