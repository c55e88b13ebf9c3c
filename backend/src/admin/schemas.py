"""Pydantic schemas for platform admin endpoints."""

from datetime import datetime
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import Field, HttpUrl

from schemas.common import ApiModel

DEFAULT_DIFFICULTY = "moderate"
DEFAULT_ACCESSIBILITY = "car-accessible"
DEFAULT_MAX_GROUP_SIZE = 20


class LocationCreate(ApiModel):
    name: str = Field(..., min_length=2)
    region: str = Field(..., min_length=2)
    activity_type: Literal["hiking", "camping"]
    description: str = Field(..., min_length=20)
    difficulty: Literal["easy", "moderate", "hard"] = DEFAULT_DIFFICULTY
    season: List[str] = Field(..., min_length=1)
    child_friendly: bool = False
    max_group_size: int = Field(DEFAULT_MAX_GROUP_SIZE, gt=0)
    accessibility: Literal["car-accessible", "remote"] = DEFAULT_ACCESSIBILITY
    images: List[HttpUrl] = Field(default_factory=list)
    featured: bool = False
    status: Literal["active", "inactive"] = "active"
    distance: Optional[str] = None
    duration: Optional[str] = None
    elevation: Optional[str] = None
    camping_type: Optional[Literal["self-guided", "operator-led"]] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    highlights: List[str] = Field(default_factory=list)


class LocationUpdate(ApiModel):
    """Partial location update. Omitted fields are left unchanged."""
    name: Optional[str] = Field(None, min_length=2)
    region: Optional[str] = Field(None, min_length=2)
    activity_type: Optional[Literal["hiking", "camping"]] = None
    description: Optional[str] = Field(None, min_length=20)
    difficulty: Optional[Literal["easy", "moderate", "hard"]] = None
    season: Optional[List[str]] = Field(None, min_length=1)
    child_friendly: Optional[bool] = None
    max_group_size: Optional[int] = Field(None, gt=0)
    accessibility: Optional[Literal["car-accessible", "remote"]] = None
    images: Optional[List[HttpUrl]] = None
    featured: Optional[bool] = None
    status: Optional[Literal["active", "inactive"]] = None
    distance: Optional[str] = None
    duration: Optional[str] = None
    elevation: Optional[str] = None
    camping_type: Optional[Literal["self-guided", "operator-led"]] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    highlights: Optional[List[str]] = None


class ApplicationResponse(ApiModel):
    id: UUID
    applicant_id: UUID
    applicant_email: str
    applicant_name: str
    requested_name: str
    requested_type: str
    requested_slug: str
    requested_tenant_id: Optional[UUID] = None
    status: str
    reviewer_note: Optional[str] = None
    created_at: datetime


class ApplicationDecision(ApiModel):
    status: Literal["approved", "rejected"]
    reviewer_note: Optional[str] = Field(None, max_length=300)


class EventModeration(ApiModel):
    action: Literal["suspend", "unsuspend"]


class PlatformMetrics(ApiModel):
    tenants: int
    events: int
    pending_applications: int
    pending_requests: int
