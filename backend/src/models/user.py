"""User and Profile SQLAlchemy models"""

import re
from enum import Enum

from sqlalchemy import Column, Text, ForeignKey, CheckConstraint, DateTime, Uuid
from sqlalchemy.orm import relationship, validates

from .base import Base, uuid_pk, created_at_column, updated_at_column


class UserRole(str, Enum):
    """Global user roles. Values are stored as TEXT and must match exactly."""
    PLATFORM_ADMIN = "platform_admin"
    TENANT_OWNER = "tenant_owner"
    TENANT_ADMIN = "tenant_admin"
    TENANT_GUIDE = "tenant_guide"
    VISITOR = "visitor"


class UserStatus(str, Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"


class User(Base):
    """User model representing authenticated accounts.

    The global role decides which route groups a user may reach. Tenant scoped
    permissions live on TenantMembership. Passwords are hashed using Argon2id.
    """
    __tablename__ = "user"

    id = uuid_pk()
    email = Column(Text, nullable=False, unique=True)
    password_hash = Column(Text, nullable=False)
    role = Column(Text, nullable=False, default=UserRole.VISITOR.value)
    status = Column(Text, nullable=False, default=UserStatus.ACTIVE.value)
    email_verified_at = Column(DateTime(timezone=True), nullable=True)
    last_login_at = Column(DateTime(timezone=True), nullable=True)
    created_at = created_at_column()
    updated_at = updated_at_column()

    profile = relationship("Profile", back_populates="user", uselist=False, lazy="joined")
    memberships = relationship("TenantMembership", back_populates="user")

    __table_args__ = (
        CheckConstraint(
            "role IN ('platform_admin', 'tenant_owner', 'tenant_admin', 'tenant_guide', 'visitor')",
            name='ck_user_role'
        ),
        CheckConstraint(
            "status IN ('active', 'suspended')",
            name='ck_user_status'
        ),
    )

    @validates('email')
    def validate_email(self, key, value):
        """Basic email format validation"""
        if not re.match(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$', value):
            raise ValueError("Invalid email format")
        return value.lower()

    @property
    def display_name(self) -> str:
        if self.profile and self.profile.display_name:
            return self.profile.display_name
        return self.email.split("@")[0]

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE.value


class Profile(Base):
    """Public-facing profile data, one per user."""
    __tablename__ = "profile"

    id = uuid_pk()
    user_id = Column(Uuid(as_uuid=True), ForeignKey("user.id", ondelete="CASCADE"), nullable=False, unique=True)
    display_name = Column(Text, nullable=False)
    phone = Column(Text, nullable=True)
    bio = Column(Text, nullable=True)
    avatar_url = Column(Text, nullable=True)
    created_at = created_at_column()
    updated_at = updated_at_column()

    user = relationship("User", back_populates="profile")
