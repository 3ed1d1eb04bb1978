from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from payfam.db.base import get_db
from payfam.models.user import User, UserRoleEnum
from payfam.models.member import Member
from payfam.core.security import decode_access_token
import uuid

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db)
) -> User:
    """Get current authenticated user from JWT token."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = decode_access_token(token)
    if payload is None:
        raise credentials_exception

    user_id_str: str = payload.get("sub")
    if user_id_str is None:
        raise credentials_exception

    # Convert string UUID to UUID object
    try:
        user_id = uuid.UUID(user_id_str)
    except (ValueError, TypeError):
        raise credentials_exception

    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise credentials_exception

    return user


async def get_current_active_user(
    current_user: User = Depends(get_current_user)
) -> User:
    """Get current active user."""
    if current_user.is_active is not True:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is disabled"
        )
    return current_user


def has_role(user: User, *roles: UserRoleEnum) -> bool:
    """Check if user holds any of the given roles."""
    return user.role in roles


def require_any_role(*roles: UserRoleEnum):
    """Dependency factory for requiring any of the specified roles."""
    async def role_checker(
        current_user: User = Depends(get_current_active_user)
    ) -> User:
        if not has_role(current_user, *roles):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"User does not have any of the required roles: {', '.join(r.value for r in roles)}"
            )
        return current_user
    return role_checker


# Role-specific dependencies
require_admin = require_any_role(UserRoleEnum.ADMIN)
require_staff = require_any_role(UserRoleEnum.ADMIN, UserRoleEnum.MANAGER)


def ensure_member_visible(user: User, member: Member) -> None:
    """Members may only read their own rows; staff read everything."""
    if has_role(user, UserRoleEnum.ADMIN, UserRoleEnum.MANAGER):
        return
    if member.user_id is None or member.user_id != user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You don't have permission to view this member"
        )
