"""Tenant, membership and organizer application models"""

from enum import Enum

from sqlalchemy import Column, Text, ForeignKey, CheckConstraint, UniqueConstraint, DateTime, Index, Uuid
from sqlalchemy.orm import relationship

from .base import Base, uuid_pk, created_at_column, updated_at_column


class TenantType(str, Enum):
    COMPANY = "company"
    GUIDE_OWNED = "guide_owned"


class TenantStatus(str, Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"


class MembershipRole(str, Enum):
    """Tenant scoped roles, independent of the user's global role."""
    TENANT_OWNER = "tenant_owner"
    TENANT_ADMIN = "tenant_admin"
    TENANT_GUIDE = "tenant_guide"


class ApplicationStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Tenant(Base):
    """An organizer account: a tour company or an independent guide."""
    __tablename__ = "tenant"

    id = uuid_pk()
    name = Column(Text, nullable=False)
    slug = Column(Text, nullable=False, unique=True)
    type = Column(Text, nullable=False)
    status = Column(Text, nullable=False, default=TenantStatus.ACTIVE.value)
    owner_id = Column(Uuid(as_uuid=True), ForeignKey("user.id", ondelete="SET NULL"), nullable=True)
    created_at = created_at_column()
    updated_at = updated_at_column()

    memberships = relationship("TenantMembership", back_populates="tenant", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("type IN ('company', 'guide_owned')", name='ck_tenant_type'),
        CheckConstraint("status IN ('active', 'suspended')", name='ck_tenant_status'),
    )

    @property
    def is_active(self) -> bool:
        return self.status == TenantStatus.ACTIVE.value


class TenantMembership(Base):
    """Links a user to a tenant with a membership role.

    At most one membership exists per (tenant, user) pair.
    """
    __tablename__ = "tenant_membership"

    id = uuid_pk()
    tenant_id = Column(Uuid(as_uuid=True), ForeignKey("tenant.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    role = Column(Text, nullable=False)
    created_at = created_at_column()
    updated_at = updated_at_column()

    tenant = relationship("Tenant", back_populates="memberships")
    user = relationship("User", back_populates="memberships")

    __table_args__ = (
        UniqueConstraint("tenant_id", "user_id", name="uq_tenant_membership_tenant_user"),
        CheckConstraint(
            "role IN ('tenant_owner', 'tenant_admin', 'tenant_guide')",
            name='ck_tenant_membership_role'
        ),
        Index("ix_tenant_membership_user_id", "user_id"),
    )


class OrganizerApplication(Base):
    """Request by a registered user to operate as an organizer."""
    __tablename__ = "organizer_application"

    id = uuid_pk()
    applicant_id = Column(Uuid(as_uuid=True), ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    requested_name = Column(Text, nullable=False)
    requested_slug = Column(Text, nullable=False)
    requested_type = Column(Text, nullable=False)
    requested_tenant_id = Column(Uuid(as_uuid=True), ForeignKey("tenant.id", ondelete="SET NULL"), nullable=True)
    status = Column(Text, nullable=False, default=ApplicationStatus.PENDING.value)
    reviewer_id = Column(Uuid(as_uuid=True), ForeignKey("user.id", ondelete="SET NULL"), nullable=True)
    reviewer_note = Column(Text, nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = created_at_column()
    updated_at = updated_at_column()

    applicant = relationship("User", foreign_keys=[applicant_id])

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')",
            name='ck_organizer_application_status'
        ),
        CheckConstraint(
            "requested_type IN ('company', 'guide_owned')",
            name='ck_organizer_application_type'
        ),
    )
