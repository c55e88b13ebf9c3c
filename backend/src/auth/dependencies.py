"""FastAPI dependencies for authentication and authorization.

This module provides dependency injection functions for:
- Extracting and validating JWT access tokens from requests
- Loading the current authenticated user
- Requiring a verified email address
- Enforcing global role-based access control (RBAC)

Usage:
    @router.get("/protected")
    def protected_endpoint(user: CurrentUser):
        return {"message": f"Hello {user.display_name}"}

    @router.get("/admin-only")
    def admin_endpoint(user: User = Depends(require_role(UserRole.PLATFORM_ADMIN))):
        return {"message": "Admin access granted"}
"""

from typing import Annotated, Callable, Optional
from uuid import UUID

import jwt
from fastapi import Depends, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from database import get_db
from errors import ApiError
from models.user import User, UserRole
from .jwt import decode_access_token


# auto_error=False so a missing header surfaces as our own 401 envelope
security = HTTPBearer(auto_error=False)


def _unauthorized(message: str) -> ApiError:
    return ApiError(status.HTTP_401_UNAUTHORIZED, "unauthorized", message)


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """Extract and validate the bearer token, returning the authenticated user.

    This dependency:
    1. Extracts Bearer token from Authorization header
    2. Validates token signature, type and expiration
    3. Loads user from database
    4. Checks user is active

    Raises:
        ApiError 401: If token is missing or invalid, or the user is missing or not active
    """
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise _unauthorized("Missing bearer token.")

    try:
        payload = decode_access_token(credentials.credentials)
        user_id = UUID(payload["sub"])
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Access token has expired.")
    except (jwt.InvalidTokenError, KeyError, ValueError):
        raise _unauthorized("Invalid access token.")

    user = db.query(User).filter(User.id == user_id).first()
    if not user or not user.is_active:
        raise _unauthorized("User is not active.")

    request.state.user_id = str(user.id)
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]


def require_verified_email(current_user: CurrentUser) -> User:
    """Reject users who have not confirmed their email address.

    Raises:
        ApiError 403 email_verification_required
    """
    if current_user.email_verified_at is None:
        raise ApiError(
            status.HTTP_403_FORBIDDEN,
            "email_verification_required",
            "Verify your email address to continue.",
        )
    return current_user


VerifiedUser = Annotated[User, Depends(require_verified_email)]


def require_role(*allowed_roles: UserRole) -> Callable:
    """Create a dependency that requires one of the given global roles.

    Builds on require_verified_email, so role-gated routes also require a
    verified account.

    Example:
        @router.get("/admin/metrics")
        def metrics(admin: User = Depends(require_role(UserRole.PLATFORM_ADMIN))):
            ...

    Raises:
        ApiError 403 forbidden: If the user's role is not in the allow-list
    """
    allowed = {role.value for role in allowed_roles}

    def role_dependency(current_user: VerifiedUser) -> User:
        if current_user.role not in allowed:
            raise ApiError(
                status.HTTP_403_FORBIDDEN,
                "forbidden",
                "You are not allowed to perform this action.",
            )
        return current_user

    return role_dependency


PlatformAdmin = Annotated[User, Depends(require_role(UserRole.PLATFORM_ADMIN))]
