"""Session issuing shared by login, registration and token refresh."""

from fastapi import Request
from sqlalchemy.orm import Session

from audit.service import get_client_ip, get_user_agent
from config import get_settings
from models.auth_token import RefreshToken
from models.user import User
from .jwt import create_access_token, create_refresh_token, refresh_token_expires_at
from .schemas import SessionUser, TokenPair
from .tokens import sha256_hex


def issue_session(db: Session, user: User, request: Request) -> tuple[SessionUser, TokenPair]:
    """Mint an access/refresh token pair and persist the refresh token hash.

    The caller owns the transaction and must commit.
    """
    access_token = create_access_token(user.id, user.email, user.role)
    refresh_token = create_refresh_token(user.id, user.email)

    db.add(RefreshToken(
        user_id=user.id,
        token_hash=sha256_hex(refresh_token),
        expires_at=refresh_token_expires_at(),
        ip_address=get_client_ip(request),
        user_agent=get_user_agent(request),
    ))

    return (
        SessionUser(id=user.id, email=user.email, role=user.role),
        TokenPair(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=get_settings().access_token_ttl_seconds,
        ),
    )
