"""Authentication endpoints for the UAE Trails API

Provides registration, login, refresh-token rotation, logout, email
verification, password reset and the current user lookup.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Annotated
from uuid import UUID

import jwt
from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from audit.service import log_from_request
from config import get_settings
from database import get_db
from errors import ApiError
from models.auth_token import EmailVerificationToken, PasswordResetToken, RefreshToken
from models.tenant import OrganizerApplication, TenantType
from models.user import Profile, User, UserRole
from observability.metrics import auth_events_total
from schemas.common import MessageResponse
from .dependencies import CurrentUser
from .jwt import decode_refresh_token
from .password import hash_password, verify_password
from .rate_limit import check_rate_limit, rate_limiter
from .schemas import (
    ForgotPasswordRequest,
    ForgotPasswordResponse,
    LoginRequest,
    LoginResponse,
    MeResponse,
    RefreshRequest,
    RegisterRequest,
    RegisterResponse,
    ResetPasswordRequest,
    SessionResponse,
    VerifyEmailRequest,
)
from .service import issue_session
from .tokens import random_token, sha256_hex, slugify

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])

EMAIL_VERIFICATION_TTL = timedelta(hours=24)
PASSWORD_RESET_TTL = timedelta(hours=1)


def _invalid_refresh_token() -> ApiError:
    return ApiError(
        status.HTTP_401_UNAUTHORIZED,
        "invalid_refresh_token",
        "Refresh token is invalid or expired.",
    )


@router.post(
    "/register",
    response_model=RegisterResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
def register(
    body: RegisterRequest,
    request: Request,
    db: Annotated[Session, Depends(get_db)],
):
    """Create a visitor account and start a session.

    Every account starts as a visitor with an unverified email. Company and
    guide sign-ups also file an organizer application; the organizer role is
    granted only when a platform admin approves it.

    Raises:
        ApiError 409 email_taken: If the email is already registered
    """
    if db.query(User).filter(User.email == body.email).first():
        raise ApiError(status.HTTP_409_CONFLICT, "email_taken", "Email is already registered.")

    user = User(
        email=body.email,
        password_hash=hash_password(body.password),
        role=UserRole.VISITOR.value,
    )
    user.profile = Profile(display_name=body.display_name)
    db.add(user)
    db.flush()

    verification = EmailVerificationToken(
        user_id=user.id,
        token=random_token(),
        expires_at=datetime.now(timezone.utc) + EMAIL_VERIFICATION_TTL,
    )
    db.add(verification)

    if body.account_type != "visitor":
        requested_name = body.organization_name or body.display_name
        db.add(OrganizerApplication(
            applicant_id=user.id,
            requested_name=requested_name,
            requested_slug=slugify(requested_name),
            requested_type=(
                TenantType.COMPANY.value if body.account_type == "company"
                else TenantType.GUIDE_OWNED.value
            ),
        ))

    session_user, tokens = issue_session(db, user, request)
    db.commit()

    auth_events_total.labels("register").inc()
    logger.info("User registered", extra={"user_id": user.id})

    return RegisterResponse(
        user=session_user,
        tokens=tokens,
        requires_email_verification=True,
        verification_token=None if get_settings().is_production else verification.token,
    )


@router.post("/login", response_model=LoginResponse)
def login(
    body: LoginRequest,
    request: Request,
    db: Annotated[Session, Depends(get_db)],
    _: None = Depends(check_rate_limit),
):
    """Authenticate with email and password.

    Security measures:
    - Rate limiting and lockout (Redis backed, when configured)
    - Generic error message for unknown email and wrong password
    - Failed and successful logins are written to the audit log
    - Suspended accounts are rejected

    Raises:
        ApiError 401 invalid_credentials
        ApiError 403 account_suspended
        ApiError 429 rate_limited
    """
    user = db.query(User).filter(User.email == body.email).first()

    if not user or not verify_password(body.password, user.password_hash):
        log_from_request(
            db=db,
            request=request,
            action="auth.login_failed",
            actor_id=user.id if user else None,
            entity_type="user",
            entity_id=user.id if user else None,
            metadata={"email": body.email, "reason": "invalid_credentials"},
        )
        db.commit()
        rate_limiter.record_failed_login(body.email, request)
        auth_events_total.labels("login_failed").inc()
        raise ApiError(status.HTTP_401_UNAUTHORIZED, "invalid_credentials", "Invalid email or password.")

    if not user.is_active:
        auth_events_total.labels("login_failed").inc()
        raise ApiError(status.HTTP_403_FORBIDDEN, "account_suspended", "Account is suspended.")

    user.last_login_at = datetime.now(timezone.utc)
    rate_limiter.clear_failed_attempts(body.email)
    log_from_request(
        db=db,
        request=request,
        action="auth.login_success",
        actor_id=user.id,
        entity_type="user",
        entity_id=user.id,
    )
    session_user, tokens = issue_session(db, user, request)
    db.commit()

    auth_events_total.labels("login_success").inc()

    return LoginResponse(
        user=session_user,
        tokens=tokens,
        email_verified=user.email_verified_at is not None,
    )


@router.post("/refresh", response_model=SessionResponse)
def refresh(
    body: RefreshRequest,
    request: Request,
    db: Annotated[Session, Depends(get_db)],
):
    """Rotate a refresh token.

    The presented token must verify, be on record for the same user, and be
    neither revoked nor expired. It is revoked and a new pair is issued.

    Raises:
        ApiError 401 invalid_refresh_token
    """
    try:
        payload = decode_refresh_token(body.refresh_token)
        user_id = UUID(payload["sub"])
    except (jwt.InvalidTokenError, KeyError, ValueError):
        raise _invalid_refresh_token()

    now = datetime.now(timezone.utc)
    stored = db.query(RefreshToken).filter(
        RefreshToken.token_hash == sha256_hex(body.refresh_token),
        RefreshToken.user_id == user_id,
        RefreshToken.revoked_at.is_(None),
        RefreshToken.expires_at > now,
    ).first()
    if not stored:
        raise _invalid_refresh_token()

    user = db.get(User, user_id)
    if not user or not user.is_active:
        raise _invalid_refresh_token()

    stored.revoked_at = now
    session_user, tokens = issue_session(db, user, request)
    db.commit()

    auth_events_total.labels("refresh").inc()
    return SessionResponse(user=session_user, tokens=tokens)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(
    body: RefreshRequest,
    db: Annotated[Session, Depends(get_db)],
):
    """Revoke a refresh token. Unknown tokens are ignored."""
    db.query(RefreshToken).filter(
        RefreshToken.token_hash == sha256_hex(body.refresh_token),
        RefreshToken.revoked_at.is_(None),
    ).update({RefreshToken.revoked_at: datetime.now(timezone.utc)})
    db.commit()

    auth_events_total.labels("logout").inc()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/verify-email", response_model=MessageResponse)
def verify_email(
    body: VerifyEmailRequest,
    db: Annotated[Session, Depends(get_db)],
):
    """Consume an email verification token.

    Raises:
        ApiError 400 invalid_token: If the token is unknown, used or expired
    """
    now = datetime.now(timezone.utc)
    record = db.query(EmailVerificationToken).filter(
        EmailVerificationToken.token == body.token,
        EmailVerificationToken.used_at.is_(None),
        EmailVerificationToken.expires_at > now,
    ).first()
    if not record:
        raise ApiError(status.HTTP_400_BAD_REQUEST, "invalid_token", "Verification token is invalid or expired.")

    record.used_at = now
    user = db.get(User, record.user_id)
    user.email_verified_at = now
    db.commit()

    return MessageResponse(message="Email verified successfully.")


@router.post("/forgot-password", response_model=ForgotPasswordResponse, response_model_exclude_none=True)
def forgot_password(
    body: ForgotPasswordRequest,
    db: Annotated[Session, Depends(get_db)],
):
    """Start a password reset.

    Always answers with the same message so the endpoint cannot be used to
    discover registered emails.
    """
    reset_token = None
    user = db.query(User).filter(User.email == body.email).first()
    if user:
        record = PasswordResetToken(
            user_id=user.id,
            token=random_token(),
            expires_at=datetime.now(timezone.utc) + PASSWORD_RESET_TTL,
        )
        db.add(record)
        db.commit()
        reset_token = record.token

    return ForgotPasswordResponse(
        message="If the account exists, a password reset link has been sent.",
        reset_token=None if get_settings().is_production else reset_token,
    )


@router.post("/reset-password", response_model=MessageResponse)
def reset_password(
    body: ResetPasswordRequest,
    request: Request,
    db: Annotated[Session, Depends(get_db)],
):
    """Set a new password with a reset token and revoke all sessions.

    Raises:
        ApiError 400 invalid_token: If the token is unknown, used or expired
    """
    now = datetime.now(timezone.utc)
    record = db.query(PasswordResetToken).filter(
        PasswordResetToken.token == body.token,
        PasswordResetToken.used_at.is_(None),
        PasswordResetToken.expires_at > now,
    ).first()
    if not record:
        raise ApiError(status.HTTP_400_BAD_REQUEST, "invalid_token", "Reset token is invalid or expired.")

    user = db.get(User, record.user_id)
    user.password_hash = hash_password(body.password)
    record.used_at = now
    db.query(RefreshToken).filter(
        RefreshToken.user_id == user.id,
        RefreshToken.revoked_at.is_(None),
    ).update({RefreshToken.revoked_at: now})
    log_from_request(
        db=db,
        request=request,
        action="auth.password_reset",
        actor_id=user.id,
        entity_type="user",
        entity_id=user.id,
    )
    db.commit()

    auth_events_total.labels("password_reset").inc()
    return MessageResponse(message="Password updated successfully.")


@router.get("/me", response_model=MeResponse)
def get_me(current_user: CurrentUser):
    """Get current authenticated user information."""
    return MeResponse(
        id=current_user.id,
        email=current_user.email,
        role=current_user.role,
        status=current_user.status,
        display_name=current_user.display_name,
        email_verified=current_user.email_verified_at is not None,
        email_verified_at=current_user.email_verified_at,
        last_login_at=current_user.last_login_at,
        created_at=current_user.created_at,
    )
