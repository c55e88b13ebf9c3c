"""Notification SQLAlchemy model"""

from enum import Enum

from sqlalchemy import Column, Text, Boolean, ForeignKey, CheckConstraint, Index, Uuid

from .base import Base, PortableJSONB, uuid_pk, created_at_column


class NotificationType(str, Enum):
    REQUEST_UPDATE = "request_update"
    SYSTEM = "system"
    EVENT = "event"


class Notification(Base):
    """In-app message for a user, e.g. a join request decision."""
    __tablename__ = "notification"

    id = uuid_pk()
    user_id = Column(Uuid(as_uuid=True), ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    title = Column(Text, nullable=False)
    body = Column(Text, nullable=False)
    type = Column(Text, nullable=False, default=NotificationType.SYSTEM.value)
    is_read = Column(Boolean, nullable=False, default=False)
    meta = Column(PortableJSONB, nullable=True)
    created_at = created_at_column()

    __table_args__ = (
        CheckConstraint(
            "type IN ('request_update', 'system', 'event')",
            name='ck_notification_type'
        ),
        Index("ix_notification_user_id_created_at", "user_id", "created_at"),
    )
