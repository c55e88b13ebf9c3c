"""Refresh, email verification and password reset token models.

Refresh tokens are stored only as sha256 hashes. Verification and reset
tokens are single use: ``used_at`` is set on consumption.
"""

from sqlalchemy import Column, Text, ForeignKey, DateTime, Index, Uuid

from .base import Base, uuid_pk, created_at_column


class RefreshToken(Base):
    __tablename__ = "refresh_token"

    id = uuid_pk()
    user_id = Column(Uuid(as_uuid=True), ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    token_hash = Column(Text, nullable=False, unique=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    revoked_at = Column(DateTime(timezone=True), nullable=True)
    ip_address = Column(Text, nullable=True)
    user_agent = Column(Text, nullable=True)
    created_at = created_at_column()

    __table_args__ = (
        Index("ix_refresh_token_user_id", "user_id"),
    )


class EmailVerificationToken(Base):
    __tablename__ = "email_verification_token"

    id = uuid_pk()
    user_id = Column(Uuid(as_uuid=True), ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    token = Column(Text, nullable=False, unique=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    used_at = Column(DateTime(timezone=True), nullable=True)
    created_at = created_at_column()


class PasswordResetToken(Base):
    __tablename__ = "password_reset_token"

    id = uuid_pk()
    user_id = Column(Uuid(as_uuid=True), ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    token = Column(Text, nullable=False, unique=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    used_at = Column(DateTime(timezone=True), nullable=True)
    created_at = created_at_column()
