from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session
from typing import Dict, List, Optional

from app.config.database import get_db
from app.core.exceptions import UnauthenticatedError, ForbiddenError
from app.shared.database.models import User, UserRole
from app.core.auth.service import AuthService
from app.core.auth.schemas import TokenPayload

security = HTTPBearer(auto_error=False)

# Role x resource x operation. Anything not listed is denied.
PERMISSIONS: Dict[str, Dict[str, List[str]]] = {
    UserRole.WORKER.value: {
        "packages": ["create", "read_all", "read_own", "update", "delete", "checkout", "notify"],
        "recipients": ["create", "read", "update", "delete"],
        "tracking": ["validate", "status", "check_format"],
        "audit": ["read"],
    },
    UserRole.STUDENT.value: {
        "packages": ["read_own"],
        "tracking": ["check_format"],
    },
}


def is_allowed(role: str, resource: str, operation: str) -> bool:
    """Look up one cell of the permission matrix"""
    return operation in PERMISSIONS.get(role, {}).get(resource, [])


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """Resolve the user behind the bearer token"""

    if credentials is None:
        raise UnauthenticatedError("Access token required")

    payload = AuthService.verify_token(credentials.credentials)
    if payload is None:
        raise UnauthenticatedError("Invalid or expired token")

    try:
        claims = TokenPayload(**payload)
    except PydanticValidationError:
        raise UnauthenticatedError("Invalid token payload")

    user = db.query(User).filter(User.id == claims.user_id).first()

    if user is None:
        raise UnauthenticatedError("User not found")

    if not user.is_active:
        raise UnauthenticatedError("Inactive user")

    return user

def require_permission(resource: str, operation: str):
    """Factory for a dependency gated on the permission matrix"""
    def permission_checker(current_user: User = Depends(get_current_user)) -> User:
        if not is_allowed(current_user.role, resource, operation):
            raise ForbiddenError(
                f"Role '{current_user.role}' cannot {operation} {resource}"
            )
        return current_user
    return permission_checker
