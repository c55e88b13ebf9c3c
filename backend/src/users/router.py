"""Endpoints for the authenticated user's own data.

All routes require a verified account and only ever read or write rows
belonging to the caller.
"""

from typing import Annotated, List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session, joinedload

from auth.dependencies import VerifiedUser
from catalog.mappers import format_date, format_time, to_event_responses
from catalog.schemas import EventResponse
from database import get_db
from models.event import Event, EventParticipant, EventRequest
from models.notification import Notification
from models.tenant import Tenant, TenantMembership, TenantStatus
from models.user import Profile, User
from schemas.common import DataResponse
from .schemas import (
    MyRequestResponse,
    MyTenantResponse,
    NotificationResponse,
    ProfileResponse,
    ProfileUpdate,
    RequestEventSummary,
)

router = APIRouter(prefix="/me", tags=["Me"])

NOTIFICATION_LIMIT = 50


def _profile_response(user: User) -> ProfileResponse:
    profile = user.profile
    return ProfileResponse(
        id=user.id,
        email=user.email,
        role=user.role,
        display_name=profile.display_name if profile else None,
        phone=profile.phone if profile else None,
        bio=profile.bio if profile else None,
        avatar_url=profile.avatar_url if profile else None,
    )


@router.get("/requests", response_model=DataResponse[List[MyRequestResponse]])
def list_my_requests(
    current_user: VerifiedUser,
    db: Annotated[Session, Depends(get_db)],
):
    """The caller's join requests, newest first."""
    requests = (
        db.query(EventRequest)
        .options(joinedload(EventRequest.event).joinedload(Event.location))
        .filter(EventRequest.user_id == current_user.id)
        .order_by(EventRequest.created_at.desc())
        .all()
    )
    return DataResponse(data=[
        MyRequestResponse(
            id=item.id,
            status=item.status,
            note=item.note,
            organizer_note=item.organizer_note,
            created_at=item.created_at,
            event=RequestEventSummary(
                id=item.event.id,
                title=item.event.title,
                location_name=item.event.location.name,
                date=format_date(item.event.start_at),
                time=format_time(item.event.start_at),
            ),
        )
        for item in requests
    ])


@router.get("/trips", response_model=DataResponse[List[EventResponse]])
def list_my_trips(
    current_user: VerifiedUser,
    db: Annotated[Session, Depends(get_db)],
):
    """Events the caller holds an approved seat on, most recently approved first."""
    events = (
        db.query(Event)
        .join(EventParticipant, EventParticipant.event_id == Event.id)
        .options(
            joinedload(Event.location),
            joinedload(Event.tenant),
            joinedload(Event.guide).joinedload(User.profile),
        )
        .filter(EventParticipant.user_id == current_user.id)
        .order_by(EventParticipant.created_at.desc())
        .all()
    )
    return DataResponse(data=to_event_responses(db, events))


@router.get("/profile", response_model=DataResponse[ProfileResponse])
def get_my_profile(current_user: VerifiedUser):
    return DataResponse(data=_profile_response(current_user))


@router.patch("/profile", response_model=DataResponse[ProfileResponse])
def update_my_profile(
    body: ProfileUpdate,
    current_user: VerifiedUser,
    db: Annotated[Session, Depends(get_db)],
):
    """Update profile fields, creating the profile row if it is missing."""
    changes = body.model_dump(exclude_unset=True)
    if "avatar_url" in changes and changes["avatar_url"] is not None:
        changes["avatar_url"] = str(changes["avatar_url"])

    profile = current_user.profile
    if profile is None:
        profile = Profile(
            user_id=current_user.id,
            display_name=changes.get("display_name") or current_user.display_name,
        )
        db.add(profile)
        current_user.profile = profile

    for field, value in changes.items():
        if field == "display_name" and value is None:
            continue
        setattr(profile, field, value)

    db.commit()
    db.refresh(current_user)
    return DataResponse(data=_profile_response(current_user))


@router.get("/notifications", response_model=DataResponse[List[NotificationResponse]])
def list_my_notifications(
    current_user: VerifiedUser,
    db: Annotated[Session, Depends(get_db)],
):
    """The latest notifications for the caller."""
    notifications = (
        db.query(Notification)
        .filter(Notification.user_id == current_user.id)
        .order_by(Notification.created_at.desc())
        .limit(NOTIFICATION_LIMIT)
        .all()
    )
    return DataResponse(data=[NotificationResponse.model_validate(item) for item in notifications])


@router.get("/tenants", response_model=DataResponse[List[MyTenantResponse]])
def list_my_tenants(
    current_user: VerifiedUser,
    db: Annotated[Session, Depends(get_db)],
):
    """Active tenants the caller is a member of, oldest membership first."""
    memberships = (
        db.query(TenantMembership)
        .join(Tenant, TenantMembership.tenant_id == Tenant.id)
        .filter(
            TenantMembership.user_id == current_user.id,
            Tenant.status == TenantStatus.ACTIVE.value,
        )
        .order_by(TenantMembership.created_at.asc())
        .all()
    )
    return DataResponse(data=[
        MyTenantResponse(
            tenant_id=membership.tenant_id,
            tenant_name=membership.tenant.name,
            tenant_slug=membership.tenant.slug,
            tenant_type=membership.tenant.type,
            membership_role=membership.role,
        )
        for membership in memberships
    ])
