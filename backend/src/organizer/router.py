"""Organizer endpoints.

Every route runs inside a tenant context resolved from the x-tenant-id
header. Queries are always filtered by that tenant, so rows of other tenants
answer 404 rather than 403.
"""

import logging
from datetime import datetime, timezone
from typing import Annotated, List
from uuid import UUID

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session, joinedload

from audit.service import log_from_request
from auth.password import hash_password
from auth.roles import REASSIGNABLE_ROLES
from auth.tokens import random_token
from catalog.mappers import count_participants, to_event_response, to_event_responses
from catalog.schemas import EventResponse
from database import get_db
from domain.capacity import assert_capacity_available
from errors import ApiError
from models.event import Event, EventParticipant, EventRequest, EventStatus, RequestStatus
from models.location import Location, LocationStatus
from models.notification import Notification, NotificationType
from models.tenant import MembershipRole, Tenant, TenantMembership, TenantType
from models.user import Profile, User, UserRole
from observability.metrics import join_requests_total
from schemas.common import DataResponse, MessageResponse
from tenancy.dependencies import TeamManagerScope, TenantScope
from .schemas import (
    EventCreate,
    EventUpdate,
    OrganizerRequestResponse,
    PublishResponse,
    RequestDecision,
    RequestEvent,
    RequestUser,
    TeamMemberCreate,
    TeamMemberResponse,
    TeamMemberUpdate,
    TeamRoleResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/organizer", tags=["Organizer"])


def parse_utc(date: str, time: str) -> datetime:
    """Combine YYYY-MM-DD and HH:MM into an aware UTC datetime."""
    try:
        return datetime.strptime(f"{date}T{time}", "%Y-%m-%dT%H:%M").replace(tzinfo=timezone.utc)
    except ValueError:
        raise ApiError(status.HTTP_400_BAD_REQUEST, "validation_error", "Invalid date or time.")


def _global_role_for(membership_role: str) -> str:
    if membership_role == MembershipRole.TENANT_ADMIN.value:
        return UserRole.TENANT_ADMIN.value
    return UserRole.TENANT_GUIDE.value


def _load_event(db: Session, tenant_id: UUID, event_id: UUID) -> Event:
    event = (
        db.query(Event)
        .options(joinedload(Event.location), joinedload(Event.tenant))
        .filter(Event.id == event_id, Event.tenant_id == tenant_id)
        .first()
    )
    if not event:
        raise ApiError(status.HTTP_404_NOT_FOUND, "event_not_found", "Event not found.")
    return event


def _check_location(db: Session, location_id: UUID) -> None:
    location = db.get(Location, location_id)
    if not location or location.status != LocationStatus.ACTIVE.value:
        raise ApiError(status.HTTP_400_BAD_REQUEST, "invalid_location", "Location must exist and be active.")


def _check_guide(db: Session, tenant_id: UUID, guide_id: UUID) -> None:
    membership = db.query(TenantMembership).filter(
        TenantMembership.tenant_id == tenant_id,
        TenantMembership.user_id == guide_id,
    ).first()
    if not membership:
        raise ApiError(status.HTTP_400_BAD_REQUEST, "invalid_guide", "Guide must belong to this tenant.")


def _event_payload(db: Session, event: Event) -> EventResponse:
    return to_event_response(event, count_participants(db, event.id))


# Events

@router.get("/events", response_model=DataResponse[List[EventResponse]])
def list_tenant_events(
    ctx: TenantScope,
    db: Annotated[Session, Depends(get_db)],
):
    """All events of the tenant in any status, soonest first."""
    events = (
        db.query(Event)
        .options(
            joinedload(Event.location),
            joinedload(Event.tenant),
            joinedload(Event.guide).joinedload(User.profile),
        )
        .filter(Event.tenant_id == ctx.tenant_id)
        .order_by(Event.start_at.asc())
        .all()
    )
    return DataResponse(data=to_event_responses(db, events))


@router.post(
    "/events",
    response_model=DataResponse[EventResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_event(
    body: EventCreate,
    request: Request,
    ctx: TenantScope,
    db: Annotated[Session, Depends(get_db)],
):
    """Create a draft event.

    The guide defaults to the caller. Without endDate and endTime the event
    has no end.

    Raises:
        ApiError 400 invalid_location: Location missing or not active
        ApiError 400 invalid_guide: Guide has no membership in this tenant
    """
    _check_location(db, body.location_id)
    if body.guide_id:
        _check_guide(db, ctx.tenant_id, body.guide_id)

    event = Event(
        tenant_id=ctx.tenant_id,
        location_id=body.location_id,
        created_by_id=ctx.user.id,
        guide_id=body.guide_id or ctx.user.id,
        title=body.title,
        description=body.description,
        start_at=parse_utc(body.date, body.time),
        end_at=parse_utc(body.end_date, body.end_time) if body.end_date and body.end_time else None,
        meeting_point=body.meeting_point,
        itinerary=body.itinerary,
        requirements=body.requirements,
        price_aed=body.price,
        capacity=body.capacity,
        status=EventStatus.DRAFT.value,
    )
    db.add(event)
    db.flush()

    log_from_request(
        db=db,
        request=request,
        action="event.create",
        actor_id=ctx.user.id,
        entity_type="event",
        entity_id=event.id,
        tenant_id=ctx.tenant_id,
    )
    db.commit()
    db.refresh(event)

    logger.info(f"Event {event.id} created", extra={"tenant_id": ctx.tenant_id, "user_id": ctx.user.id})
    return DataResponse(data=_event_payload(db, event))


@router.patch("/events/{event_id}", response_model=DataResponse[EventResponse])
def update_event(
    event_id: UUID,
    body: EventUpdate,
    request: Request,
    ctx: TenantScope,
    db: Annotated[Session, Depends(get_db)],
):
    """Partially update an event of this tenant.

    Raises:
        ApiError 404 event_not_found
        ApiError 400 invalid_location, invalid_guide
    """
    event = _load_event(db, ctx.tenant_id, event_id)
    changes = body.model_dump(exclude_unset=True)

    if changes.get("location_id"):
        _check_location(db, changes["location_id"])
        event.location_id = changes["location_id"]
    if changes.get("guide_id"):
        _check_guide(db, ctx.tenant_id, changes["guide_id"])
        event.guide_id = changes["guide_id"]

    if body.date and body.time:
        event.start_at = parse_utc(body.date, body.time)
    if body.end_date and body.end_time:
        event.end_at = parse_utc(body.end_date, body.end_time)

    simple_fields = {
        "title": "title",
        "description": "description",
        "meeting_point": "meeting_point",
        "itinerary": "itinerary",
        "requirements": "requirements",
        "price": "price_aed",
        "capacity": "capacity",
    }
    for field, column in simple_fields.items():
        if changes.get(field) is not None:
            setattr(event, column, changes[field])

    log_from_request(
        db=db,
        request=request,
        action="event.update",
        actor_id=ctx.user.id,
        entity_type="event",
        entity_id=event.id,
        tenant_id=ctx.tenant_id,
    )
    db.commit()
    db.refresh(event)
    return DataResponse(data=_event_payload(db, event))


@router.delete("/events/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
def cancel_event(
    event_id: UUID,
    request: Request,
    ctx: TenantScope,
    db: Annotated[Session, Depends(get_db)],
):
    """Cancel an event. The row is kept so requests and audit history stay intact."""
    event = _load_event(db, ctx.tenant_id, event_id)
    event.status = EventStatus.CANCELLED.value
    log_from_request(
        db=db,
        request=request,
        action="event.cancel",
        actor_id=ctx.user.id,
        entity_type="event",
        entity_id=event.id,
        tenant_id=ctx.tenant_id,
    )
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/events/{event_id}/publish", response_model=PublishResponse)
def publish_event(
    event_id: UUID,
    request: Request,
    ctx: TenantScope,
    db: Annotated[Session, Depends(get_db)],
):
    event = _load_event(db, ctx.tenant_id, event_id)
    event.status = EventStatus.PUBLISHED.value
    event.published_at = datetime.now(timezone.utc)
    log_from_request(
        db=db,
        request=request,
        action="event.publish",
        actor_id=ctx.user.id,
        entity_type="event",
        entity_id=event.id,
        tenant_id=ctx.tenant_id,
    )
    db.commit()
    return PublishResponse(message="Event published.", event_id=event.id)


# Join requests

@router.get("/requests", response_model=DataResponse[List[OrganizerRequestResponse]])
def list_tenant_requests(
    ctx: TenantScope,
    db: Annotated[Session, Depends(get_db)],
):
    """Join requests on the tenant's events, newest first."""
    requests = (
        db.query(EventRequest)
        .join(Event, EventRequest.event_id == Event.id)
        .options(
            joinedload(EventRequest.event).joinedload(Event.location),
            joinedload(EventRequest.user).joinedload(User.profile),
        )
        .filter(Event.tenant_id == ctx.tenant_id)
        .order_by(EventRequest.created_at.desc())
        .all()
    )
    return DataResponse(data=[
        OrganizerRequestResponse(
            id=item.id,
            status=item.status,
            note=item.note,
            organizer_note=item.organizer_note,
            created_at=item.created_at,
            user=RequestUser(
                id=item.user.id,
                email=item.user.email,
                display_name=item.user.display_name,
            ),
            event=RequestEvent(
                id=item.event.id,
                title=item.event.title,
                location_name=item.event.location.name,
                start_at=item.event.start_at,
            ),
        )
        for item in requests
    ])


@router.patch("/requests/{request_id}", response_model=MessageResponse)
def decide_request(
    request_id: UUID,
    body: RequestDecision,
    request: Request,
    ctx: TenantScope,
    db: Annotated[Session, Depends(get_db)],
):
    """Approve or reject a pending join request.

    Approval re-reads the event under a row lock, requires it to be
    published and to have a free seat, then creates the participant. Both
    outcomes notify the requester.

    Raises:
        ApiError 404 request_not_found
        ApiError 400 request_finalized: Request is no longer pending
        ApiError 400 event_not_publishable: Event is not published
        ApiError 400 event_full: Capacity reached
    """
    join_request = (
        db.query(EventRequest)
        .join(Event, EventRequest.event_id == Event.id)
        .filter(EventRequest.id == request_id, Event.tenant_id == ctx.tenant_id)
        .first()
    )
    if not join_request:
        raise ApiError(status.HTTP_404_NOT_FOUND, "request_not_found", "Join request not found.")
    if join_request.status != RequestStatus.PENDING.value:
        raise ApiError(status.HTTP_400_BAD_REQUEST, "request_finalized", "Only pending requests can be processed.")

    now = datetime.now(timezone.utc)
    meta = {"eventId": str(join_request.event_id), "requestId": str(join_request.id)}

    if body.status == RequestStatus.APPROVED.value:
        event = db.query(Event).filter(Event.id == join_request.event_id).with_for_update().first()
        if not event or event.status != EventStatus.PUBLISHED.value:
            raise ApiError(
                status.HTTP_400_BAD_REQUEST,
                "event_not_publishable",
                "Event must be published before approval.",
            )
        try:
            assert_capacity_available(event.capacity, count_participants(db, event.id))
        except ApiError:
            join_requests_total.labels("rejected_full").inc()
            raise

        db.add(EventParticipant(
            event_id=event.id,
            request_id=join_request.id,
            user_id=join_request.user_id,
            approved_by_id=ctx.user.id,
        ))
        notification = Notification(
            user_id=join_request.user_id,
            title="Join request approved",
            body="Your request was approved. You are now confirmed for the event.",
            type=NotificationType.REQUEST_UPDATE.value,
            meta=meta,
        )
    else:
        notification = Notification(
            user_id=join_request.user_id,
            title="Join request rejected",
            body=body.organizer_note or "Your request could not be approved at this time.",
            type=NotificationType.REQUEST_UPDATE.value,
            meta=meta,
        )

    join_request.status = body.status
    join_request.organizer_note = body.organizer_note
    join_request.reviewed_by_id = ctx.user.id
    join_request.reviewed_at = now
    db.add(notification)

    log_from_request(
        db=db,
        request=request,
        action=f"request.{body.status}",
        actor_id=ctx.user.id,
        entity_type="event_request",
        entity_id=join_request.id,
        tenant_id=ctx.tenant_id,
    )
    db.commit()

    join_requests_total.labels(body.status).inc()
    logger.info(
        f"Join request {join_request.id} {body.status}",
        extra={"tenant_id": ctx.tenant_id, "user_id": ctx.user.id},
    )
    return MessageResponse(message=f"Request {body.status}.")


# Team

@router.get("/team", response_model=DataResponse[List[TeamMemberResponse]])
def list_team(
    ctx: TenantScope,
    db: Annotated[Session, Depends(get_db)],
):
    memberships = (
        db.query(TenantMembership)
        .options(joinedload(TenantMembership.user).joinedload(User.profile))
        .filter(TenantMembership.tenant_id == ctx.tenant_id)
        .order_by(TenantMembership.created_at.asc())
        .all()
    )
    return DataResponse(data=[
        TeamMemberResponse(
            id=membership.id,
            user_id=membership.user_id,
            email=membership.user.email,
            display_name=membership.user.display_name,
            role=membership.role,
            created_at=membership.created_at,
        )
        for membership in memberships
    ])


@router.post(
    "/team",
    response_model=DataResponse[TeamMemberResponse],
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
def upsert_team_member(
    body: TeamMemberCreate,
    request: Request,
    ctx: TeamManagerScope,
    db: Annotated[Session, Depends(get_db)],
):
    """Add a user to the team or change their membership role.

    Unknown emails get a new account with a random temporary password; the
    person sets their own password through the reset flow. A guide can be a
    member of at most one company tenant.

    Raises:
        ApiError 400 guide_tenant_conflict
    """
    tenant = db.get(Tenant, ctx.tenant_id)
    if not tenant:
        raise ApiError(status.HTTP_404_NOT_FOUND, "tenant_not_found", "Tenant not found.")

    user = db.query(User).filter(User.email == body.email).first()
    if not user:
        user = User(
            email=body.email,
            password_hash=hash_password(f"Temp#{random_token(6)}"),
            role=_global_role_for(body.role),
        )
        user.profile = Profile(display_name=body.display_name or body.email.split("@")[0])
        db.add(user)
        db.flush()

    if body.role == MembershipRole.TENANT_GUIDE.value and tenant.type == TenantType.COMPANY.value:
        conflict = (
            db.query(TenantMembership)
            .join(Tenant, TenantMembership.tenant_id == Tenant.id)
            .filter(
                TenantMembership.user_id == user.id,
                TenantMembership.role == MembershipRole.TENANT_GUIDE.value,
                TenantMembership.tenant_id != tenant.id,
                Tenant.type == TenantType.COMPANY.value,
            )
            .first()
        )
        if conflict:
            raise ApiError(
                status.HTTP_400_BAD_REQUEST,
                "guide_tenant_conflict",
                "Guide is already assigned to another company tenant.",
            )

    membership = db.query(TenantMembership).filter(
        TenantMembership.tenant_id == tenant.id,
        TenantMembership.user_id == user.id,
    ).first()
    if membership:
        membership.role = body.role
    else:
        membership = TenantMembership(tenant_id=tenant.id, user_id=user.id, role=body.role)
        db.add(membership)

    if user.role in REASSIGNABLE_ROLES:
        user.role = _global_role_for(body.role)
    db.flush()

    log_from_request(
        db=db,
        request=request,
        action="team.upsert_member",
        actor_id=ctx.user.id,
        entity_type="tenant_membership",
        entity_id=membership.id,
        tenant_id=ctx.tenant_id,
        metadata={"email": user.email, "role": body.role},
    )
    db.commit()

    return DataResponse(data=TeamMemberResponse(
        id=membership.id,
        user_id=user.id,
        email=user.email,
        display_name=user.display_name,
        role=membership.role,
    ))


@router.patch("/team/{membership_id}", response_model=DataResponse[TeamRoleResponse])
def update_team_member(
    membership_id: UUID,
    body: TeamMemberUpdate,
    request: Request,
    ctx: TeamManagerScope,
    db: Annotated[Session, Depends(get_db)],
):
    """Change a member's role.

    Raises:
        ApiError 404 membership_not_found
    """
    membership = db.query(TenantMembership).filter(
        TenantMembership.id == membership_id,
        TenantMembership.tenant_id == ctx.tenant_id,
    ).first()
    if not membership:
        raise ApiError(status.HTTP_404_NOT_FOUND, "membership_not_found", "Team member not found.")

    membership.role = body.role
    if membership.user.role in REASSIGNABLE_ROLES:
        membership.user.role = _global_role_for(body.role)

    log_from_request(
        db=db,
        request=request,
        action="team.update_role",
        actor_id=ctx.user.id,
        entity_type="tenant_membership",
        entity_id=membership.id,
        tenant_id=ctx.tenant_id,
        metadata={"role": body.role},
    )
    db.commit()
    return DataResponse(data=TeamRoleResponse(id=membership.id, role=membership.role))
