"""Pydantic schemas for the current user's own resources (/me)."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field, HttpUrl

from schemas.common import ApiModel


class ProfileResponse(ApiModel):
    id: UUID
    email: str
    role: str
    display_name: Optional[str] = None
    phone: Optional[str] = None
    bio: Optional[str] = None
    avatar_url: Optional[str] = None


class ProfileUpdate(ApiModel):
    """Partial profile update. Omitted fields are left unchanged."""
    display_name: Optional[str] = Field(None, min_length=2, max_length=80)
    phone: Optional[str] = Field(None, max_length=30)
    bio: Optional[str] = Field(None, max_length=400)
    avatar_url: Optional[HttpUrl] = None


class RequestEventSummary(ApiModel):
    id: UUID
    title: str
    location_name: str
    date: str
    time: str


class MyRequestResponse(ApiModel):
    id: UUID
    status: str
    note: Optional[str] = None
    organizer_note: Optional[str] = None
    created_at: datetime
    event: RequestEventSummary


class NotificationResponse(ApiModel):
    id: UUID
    title: str
    body: str
    type: str
    is_read: bool
    created_at: datetime


class MyTenantResponse(ApiModel):
    tenant_id: UUID
    tenant_name: str
    tenant_slug: str
    tenant_type: str
    membership_role: str
