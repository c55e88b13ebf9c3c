"""Pydantic schemas for organizer endpoints (tenant scoped)."""

from datetime import datetime
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import EmailStr, Field, field_validator

from schemas.common import ApiModel

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
TIME_PATTERN = r"^\d{2}:\d{2}$"


class EventCreate(ApiModel):
    """Create an event. date/time are interpreted as UTC."""
    location_id: UUID
    title: str = Field(..., min_length=4, max_length=120)
    description: str = Field(..., min_length=20)
    date: str = Field(..., pattern=DATE_PATTERN)
    time: str = Field(..., pattern=TIME_PATTERN)
    end_date: Optional[str] = Field(None, pattern=DATE_PATTERN)
    end_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    meeting_point: Optional[str] = Field(None, max_length=200)
    itinerary: List[str] = Field(default_factory=list)
    requirements: List[str] = Field(default_factory=list)
    price: int = Field(0, ge=0)
    capacity: int = Field(..., gt=0)
    guide_id: Optional[UUID] = None


class EventUpdate(ApiModel):
    """Partial event update. The start moves only when both date and time are sent."""
    location_id: Optional[UUID] = None
    title: Optional[str] = Field(None, min_length=4, max_length=120)
    description: Optional[str] = Field(None, min_length=20)
    date: Optional[str] = Field(None, pattern=DATE_PATTERN)
    time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    end_date: Optional[str] = Field(None, pattern=DATE_PATTERN)
    end_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    meeting_point: Optional[str] = Field(None, max_length=200)
    itinerary: Optional[List[str]] = None
    requirements: Optional[List[str]] = None
    price: Optional[int] = Field(None, ge=0)
    capacity: Optional[int] = Field(None, gt=0)
    guide_id: Optional[UUID] = None


class PublishResponse(ApiModel):
    message: str
    event_id: UUID


class RequestUser(ApiModel):
    id: UUID
    email: str
    display_name: str


class RequestEvent(ApiModel):
    id: UUID
    title: str
    location_name: str
    start_at: datetime


class OrganizerRequestResponse(ApiModel):
    id: UUID
    status: str
    note: Optional[str] = None
    organizer_note: Optional[str] = None
    created_at: datetime
    user: RequestUser
    event: RequestEvent


class RequestDecision(ApiModel):
    status: Literal["approved", "rejected"]
    organizer_note: Optional[str] = Field(None, max_length=300)


class TeamMemberCreate(ApiModel):
    email: EmailStr
    display_name: Optional[str] = Field(None, min_length=2, max_length=80)
    role: Literal["tenant_admin", "tenant_guide"]

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()


class TeamMemberUpdate(ApiModel):
    role: Literal["tenant_admin", "tenant_guide"]


class TeamMemberResponse(ApiModel):
    id: UUID
    user_id: UUID
    email: str
    display_name: str
    role: str
    created_at: Optional[datetime] = None


class TeamRoleResponse(ApiModel):
    id: UUID
    role: str
