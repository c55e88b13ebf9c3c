"""Pydantic schemas for locations, events and join requests.

EventResponse and LocationResponse are also returned by the organizer and
admin routers.
"""

from datetime import datetime
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import Field

from schemas.common import ApiModel


class LocationResponse(ApiModel):
    id: UUID
    name: str
    region: str
    activity_type: Literal["hiking", "camping"]
    description: str
    difficulty: Literal["easy", "moderate", "hard"]
    season: List[str] = Field(default_factory=list)
    child_friendly: bool
    max_group_size: int
    accessibility: Literal["car-accessible", "remote"]
    images: List[str] = Field(default_factory=list)
    featured: bool
    status: Literal["draft", "active", "inactive"]
    distance: Optional[str] = None
    duration: Optional[str] = None
    elevation: Optional[str] = None
    camping_type: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    highlights: List[str] = Field(default_factory=list)


class EventResponse(ApiModel):
    """Event as shown in listings.

    date/time are the UTC start, formatted YYYY-MM-DD and HH:MM.
    slotsAvailable is never negative.
    """
    id: UUID
    tenant_id: UUID
    location_id: UUID
    location_name: str
    activity_type: str
    title: str
    date: str
    time: str
    price: int
    slots_total: int
    slots_available: int
    status: str
    meeting_point: Optional[str] = None
    itinerary: List[str] = Field(default_factory=list)
    requirements: List[str] = Field(default_factory=list)
    organizer_name: str
    organizer_avatar: Optional[str] = None


class ParticipantSummary(ApiModel):
    id: UUID
    name: str
    avatar: Optional[str] = None


class EventDetailResponse(EventResponse):
    description: str
    end_date: Optional[str] = None
    end_time: Optional[str] = None
    participants: List[ParticipantSummary] = Field(default_factory=list)
    location: LocationResponse


class JoinRequestCreate(ApiModel):
    note: Optional[str] = Field(None, max_length=300)


class JoinRequestResponse(ApiModel):
    id: UUID
    event_id: UUID
    user_id: UUID
    status: str
    note: Optional[str] = None
    organizer_note: Optional[str] = None
    created_at: datetime
    updated_at: datetime
