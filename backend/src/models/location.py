"""Location SQLAlchemy model"""

from enum import Enum

from sqlalchemy import Column, Text, Integer, Boolean, Float, CheckConstraint, Index

from .base import Base, PortableJSONB, uuid_pk, created_at_column, updated_at_column


class ActivityType(str, Enum):
    HIKING = "hiking"
    CAMPING = "camping"


class Difficulty(str, Enum):
    EASY = "easy"
    MODERATE = "moderate"
    HARD = "hard"


class Accessibility(str, Enum):
    CAR_ACCESSIBLE = "car-accessible"
    REMOTE = "remote"


class LocationStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    INACTIVE = "inactive"


class Location(Base):
    """A curated trail or campsite. Only platform admins create locations."""
    __tablename__ = "location"

    id = uuid_pk()
    name = Column(Text, nullable=False)
    region = Column(Text, nullable=False)
    activity_type = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    difficulty = Column(Text, nullable=False)
    season = Column(PortableJSONB, nullable=False, default=list)
    child_friendly = Column(Boolean, nullable=False, default=False)
    max_group_size = Column(Integer, nullable=False)
    accessibility = Column(Text, nullable=False)
    images = Column(PortableJSONB, nullable=False, default=list)
    featured = Column(Boolean, nullable=False, default=False)
    status = Column(Text, nullable=False, default=LocationStatus.ACTIVE.value)
    distance = Column(Text, nullable=True)
    duration = Column(Text, nullable=True)
    elevation = Column(Text, nullable=True)
    camping_type = Column(Text, nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    highlights = Column(PortableJSONB, nullable=False, default=list)
    created_at = created_at_column()
    updated_at = updated_at_column()

    __table_args__ = (
        CheckConstraint("activity_type IN ('hiking', 'camping')", name='ck_location_activity_type'),
        CheckConstraint("difficulty IN ('easy', 'moderate', 'hard')", name='ck_location_difficulty'),
        CheckConstraint("accessibility IN ('car-accessible', 'remote')", name='ck_location_accessibility'),
        CheckConstraint("status IN ('draft', 'active', 'inactive')", name='ck_location_status'),
        CheckConstraint("max_group_size > 0", name='ck_location_max_group_size'),
        Index("ix_location_status_featured", "status", "featured"),
    )

    @property
    def is_active(self) -> bool:
        return self.status == LocationStatus.ACTIVE.value
