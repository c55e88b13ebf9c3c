"""JWT token generation and validation

Access and refresh tokens are signed with separate secrets so a leaked
refresh secret cannot mint access tokens and vice versa.

Access token claims:
- sub: User ID as UUID string
- email: User's email address
- role: Global user role (platform_admin | tenant_owner | tenant_admin |
  tenant_guide | visitor)
- type: "access"
- iat / exp: Issued at / expiry (iat + JWT_ACCESS_TTL)

Refresh token claims:
- sub, email
- type: "refresh"
- jti: Random ID, makes every refresh token unique even within one second
- iat / exp: Issued at / expiry (iat + JWT_REFRESH_TTL_DAYS)

Refresh tokens are additionally tracked server-side by sha256 hash so they
can be rotated and revoked.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict
from uuid import UUID, uuid4

import jwt

from config import get_settings

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


def create_access_token(user_id: UUID, email: str, role: str) -> str:
    """Create a signed access token for an authenticated user.

    Args:
        user_id: User's UUID
        email: User's email address
        role: User's global role

    Returns:
        str: Signed JWT token
    """
    settings = get_settings()
    now = datetime.now(timezone.utc)
    expiration = now + timedelta(seconds=settings.access_token_ttl_seconds)

    payload = {
        'sub': str(user_id),
        'email': email,
        'role': role,
        'type': ACCESS_TOKEN_TYPE,
        'iat': int(now.timestamp()),
        'exp': int(expiration.timestamp()),
    }

    return jwt.encode(payload, settings.JWT_ACCESS_SECRET, algorithm=settings.JWT_ALGORITHM)


def create_refresh_token(user_id: UUID, email: str) -> str:
    """Create a signed refresh token.

    Returns:
        str: Signed JWT token
    """
    settings = get_settings()
    now = datetime.now(timezone.utc)
    expiration = now + timedelta(days=settings.JWT_REFRESH_TTL_DAYS)

    payload = {
        'sub': str(user_id),
        'email': email,
        'type': REFRESH_TOKEN_TYPE,
        'jti': uuid4().hex,
        'iat': int(now.timestamp()),
        'exp': int(expiration.timestamp()),
    }

    return jwt.encode(payload, settings.JWT_REFRESH_SECRET, algorithm=settings.JWT_ALGORITHM)


def refresh_token_expires_at() -> datetime:
    """Expiry timestamp to persist alongside a newly issued refresh token."""
    return datetime.now(timezone.utc) + timedelta(days=get_settings().JWT_REFRESH_TTL_DAYS)


def _decode(token: str, secret: str, expected_type: str) -> Dict[str, Any]:
    settings = get_settings()
    payload = jwt.decode(
        token,
        secret,
        algorithms=[settings.JWT_ALGORITHM],
        options={"require": ["sub", "exp", "iat"]},
    )
    if payload.get("type") != expected_type:
        raise jwt.InvalidTokenError(f"Expected {expected_type} token")
    return payload


def decode_access_token(token: str) -> Dict[str, Any]:
    """Decode and validate an access token.

    Raises:
        jwt.ExpiredSignatureError: If token has expired
        jwt.InvalidTokenError: If token is invalid, tampered or of the wrong type
    """
    return _decode(token, get_settings().JWT_ACCESS_SECRET, ACCESS_TOKEN_TYPE)


def decode_refresh_token(token: str) -> Dict[str, Any]:
    """Decode and validate a refresh token.

    Raises:
        jwt.ExpiredSignatureError: If token has expired
        jwt.InvalidTokenError: If token is invalid, tampered or of the wrong type
    """
    return _decode(token, get_settings().JWT_REFRESH_SECRET, REFRESH_TOKEN_TYPE)
