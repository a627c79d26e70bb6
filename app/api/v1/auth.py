from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
import logging

from app.config.database import get_db
from app.core.auth.service import AuthService
from app.core.auth.schemas import (
    UserLogin, UserRegisterRequest, TokenResponse, UserResponse, PermissionsResponse
)
from app.core.auth.dependencies import get_current_user, PERMISSIONS
from app.core.exceptions import ConflictError, ForbiddenError, UnauthenticatedError, ValidationError
from app.shared.database.models import User, UserRole

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(
    request: UserRegisterRequest,
    db: Session = Depends(get_db)
):
    """
    Create a student or worker account

    Students must provide their L number; it links the account to the
    packages checked in under that number.
    """
    email = request.email.strip().lower()
    username = email.split('@')[0]
    is_student = request.user_type == UserRole.STUDENT.value
    l_number = request.l_number.strip() if request.l_number else None

    if is_student and not l_number:
        raise ValidationError("L number is required for students")

    if db.query(User).filter(User.email == email).first():
        raise ConflictError("Email already registered")

    if db.query(User).filter(User.username == username).first():
        raise ConflictError("Username already registered")

    if l_number and db.query(User).filter(User.l_number == l_number).first():
        raise ConflictError("L number already registered")

    user = User(
        username=username,
        email=email,
        password_hash=AuthService.get_password_hash(request.password),
        role=request.user_type,
        full_name=request.full_name,
        l_number=l_number,
        is_active=True
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Account already registered")
    db.refresh(user)

    logger.info(f"👤 Registered {user.role} account {user.username}")

    access_token = AuthService.create_access_token(data=AuthService.build_token_data(user))
    return TokenResponse(access_token=access_token, user=UserResponse.model_validate(user))

@router.post("/login", response_model=TokenResponse)
async def login(
    user_login: UserLogin,
    db: Session = Depends(get_db)
):
    """
    Exchange email + password for a bearer token

    **Body:**
    ```json
        {
            "email": "worker@mailroom.edu",
            "password": "worker123",
            "user_type": "worker"
        }
    ```
    """
    user = db.query(User).filter(User.email == user_login.email.strip().lower()).first()

    if not user or not AuthService.verify_password(user_login.password, user.password_hash):
        raise UnauthenticatedError("Invalid email or password")

    if user.role != user_login.user_type:
        raise UnauthenticatedError("Invalid user type for this account")

    if not user.is_active:
        raise ForbiddenError("Inactive user")

    access_token = AuthService.create_access_token(data=AuthService.build_token_data(user))
    return TokenResponse(access_token=access_token, user=UserResponse.model_validate(user))

@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    current_user: User = Depends(get_current_user)
):
    """Current user from the bearer token"""
    return current_user

@router.get("/permissions", response_model=PermissionsResponse)
async def check_permissions(
    current_user: User = Depends(get_current_user)
):
    """What the current role may do, for the front end to hide controls"""
    return PermissionsResponse(
        role=current_user.role,
        permissions=PERMISSIONS.get(current_user.role, {})
    )
