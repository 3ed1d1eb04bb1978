from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from payfam.db.base import get_db
from payfam.schemas.auth import UserRegister, UserLogin, Token, UserResponse
from payfam.services.auth import authenticate_user, create_user, create_access_token_for_user
from payfam.core.audit import record_audit
from payfam.core.dependencies import get_current_active_user
from payfam.models.user import User
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(user_data: UserRegister, db: Session = Depends(get_db)):
    """Register a member login. Links to the member record with the same email, if any."""
    logger.info(f"Registration request for {user_data.email}")
    user = create_user(
        db=db,
        email=user_data.email,
        password=user_data.password,
        full_name=user_data.full_name,
        phone_number=user_data.phone_number
    )
    return UserResponse.from_orm(user)


@router.post("/login", response_model=Token)
def login(credentials: UserLogin, db: Session = Depends(get_db)):
    """Login and get JWT token."""
    user = authenticate_user(db, credentials.email, credentials.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password"
        )

    access_token = create_access_token_for_user(user)
    record_audit(user, "Login", f"email={user.email}")
    return {"access_token": access_token, "token_type": "bearer"}


@router.get("/me", response_model=UserResponse)
def get_current_user_info(current_user: User = Depends(get_current_active_user)):
    """Get current user information."""
    return UserResponse.from_orm(current_user)
