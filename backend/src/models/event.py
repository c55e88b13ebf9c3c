"""Event, join request and participant models"""

from enum import Enum

from sqlalchemy import (
    Column, Text, Integer, ForeignKey, CheckConstraint, UniqueConstraint, DateTime, Index, Uuid,
)
from sqlalchemy.orm import relationship

from .base import Base, PortableJSONB, uuid_pk, created_at_column, updated_at_column


class EventStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    CANCELLED = "cancelled"
    SUSPENDED = "suspended"


class RequestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class Event(Base):
    """A dated outing at a location, owned by one tenant.

    Capacity is enforced against the number of EventParticipant rows, which
    only exist for approved join requests.
    """
    __tablename__ = "event"

    id = uuid_pk()
    tenant_id = Column(Uuid(as_uuid=True), ForeignKey("tenant.id", ondelete="CASCADE"), nullable=False)
    location_id = Column(Uuid(as_uuid=True), ForeignKey("location.id", ondelete="RESTRICT"), nullable=False)
    created_by_id = Column(Uuid(as_uuid=True), ForeignKey("user.id", ondelete="RESTRICT"), nullable=False)
    guide_id = Column(Uuid(as_uuid=True), ForeignKey("user.id", ondelete="SET NULL"), nullable=True)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    start_at = Column(DateTime(timezone=True), nullable=False)
    end_at = Column(DateTime(timezone=True), nullable=True)
    meeting_point = Column(Text, nullable=True)
    itinerary = Column(PortableJSONB, nullable=False, default=list)
    requirements = Column(PortableJSONB, nullable=False, default=list)
    price_aed = Column(Integer, nullable=False, default=0)
    capacity = Column(Integer, nullable=False)
    status = Column(Text, nullable=False, default=EventStatus.DRAFT.value)
    published_at = Column(DateTime(timezone=True), nullable=True)
    created_at = created_at_column()
    updated_at = updated_at_column()

    tenant = relationship("Tenant")
    location = relationship("Location")
    guide = relationship("User", foreign_keys=[guide_id])
    participants = relationship("EventParticipant", back_populates="event", cascade="all, delete-orphan")
    requests = relationship("EventRequest", back_populates="event", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint(
            "status IN ('draft', 'published', 'cancelled', 'suspended')",
            name='ck_event_status'
        ),
        CheckConstraint("capacity > 0", name='ck_event_capacity'),
        CheckConstraint("price_aed >= 0", name='ck_event_price'),
        Index("ix_event_tenant_id_start_at", "tenant_id", "start_at"),
        Index("ix_event_status_start_at", "status", "start_at"),
    )


class EventRequest(Base):
    """A visitor's request to join an event. One per (event, user)."""
    __tablename__ = "event_request"

    id = uuid_pk()
    event_id = Column(Uuid(as_uuid=True), ForeignKey("event.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    status = Column(Text, nullable=False, default=RequestStatus.PENDING.value)
    note = Column(Text, nullable=True)
    organizer_note = Column(Text, nullable=True)
    reviewed_by_id = Column(Uuid(as_uuid=True), ForeignKey("user.id", ondelete="SET NULL"), nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = created_at_column()
    updated_at = updated_at_column()

    event = relationship("Event", back_populates="requests")
    user = relationship("User", foreign_keys=[user_id])

    __table_args__ = (
        UniqueConstraint("event_id", "user_id", name="uq_event_request_event_user"),
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected', 'cancelled')",
            name='ck_event_request_status'
        ),
    )


class EventParticipant(Base):
    """A confirmed seat on an event, created when a request is approved."""
    __tablename__ = "event_participant"

    id = uuid_pk()
    event_id = Column(Uuid(as_uuid=True), ForeignKey("event.id", ondelete="CASCADE"), nullable=False)
    request_id = Column(Uuid(as_uuid=True), ForeignKey("event_request.id", ondelete="CASCADE"), nullable=False, unique=True)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    approved_by_id = Column(Uuid(as_uuid=True), ForeignKey("user.id", ondelete="SET NULL"), nullable=True)
    created_at = created_at_column()

    event = relationship("Event", back_populates="participants")
    user = relationship("User", foreign_keys=[user_id])

    __table_args__ = (
        Index("ix_event_participant_event_id", "event_id"),
    )
