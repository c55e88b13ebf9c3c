"""AuditLog SQLAlchemy model"""

from sqlalchemy import Column, Text, ForeignKey, Index, Uuid
from sqlalchemy.orm import relationship

from .base import Base, PortableJSONB, uuid_pk, created_at_column


class AuditLog(Base):
    """AuditLog model for immutable security event logging.

    Records all security-relevant and administrative events.
    Entries are append-only and should never be updated or deleted.
    Platform-level events carry no tenant_id.
    """
    __tablename__ = "audit_log"
    __table_args__ = (
        Index("ix_audit_log_tenant_id", "tenant_id"),
        Index("ix_audit_log_tenant_id_created_at", "tenant_id", "created_at"),
        Index("ix_audit_log_action", "action"),
    )

    id = uuid_pk()
    tenant_id = Column(Uuid(as_uuid=True), ForeignKey("tenant.id", ondelete="SET NULL"), nullable=True)
    actor_id = Column(Uuid(as_uuid=True), ForeignKey("user.id", ondelete="SET NULL"), nullable=True)
    action = Column(Text, nullable=False)
    entity_type = Column(Text, nullable=True)
    entity_id = Column(Text, nullable=True)
    metadata_json = Column(PortableJSONB, nullable=True)
    ip_address = Column(Text, nullable=True)
    user_agent = Column(Text, nullable=True)
    created_at = created_at_column()

    actor = relationship("User")
