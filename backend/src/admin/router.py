"""Platform admin endpoints.

Only platform admins with a verified email reach these routes. Admin
actions are not tenant scoped, so they see every tenant's rows.
"""

import logging
from datetime import datetime, timezone
from typing import Annotated, List
from uuid import UUID

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session, joinedload

from audit.service import log_from_request
from auth.dependencies import PlatformAdmin
from auth.tokens import slugify
from catalog.mappers import to_event_responses, to_location_response
from catalog.schemas import EventResponse, LocationResponse
from database import get_db
from errors import ApiError
from models.event import Event, EventRequest, EventStatus, RequestStatus
from models.location import Location
from models.tenant import (
    ApplicationStatus,
    MembershipRole,
    OrganizerApplication,
    Tenant,
    TenantMembership,
    TenantStatus,
)
from models.user import User, UserRole
from schemas.common import DataResponse, MessageResponse
from .schemas import (
    ApplicationDecision,
    ApplicationResponse,
    EventModeration,
    LocationCreate,
    LocationUpdate,
    PlatformMetrics,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])

NULLABLE_LOCATION_FIELDS = frozenset({
    "distance", "duration", "elevation", "camping_type", "latitude", "longitude",
})


def unique_tenant_slug(db: Session, requested: str) -> str:
    """First free slug among base, base-1, base-2, ..."""
    base = slugify(requested)
    candidate = base
    attempt = 1
    while db.query(Tenant.id).filter(Tenant.slug == candidate).first():
        candidate = f"{base}-{attempt}"
        attempt += 1
    return candidate


def _location_values(body) -> dict:
    values = body.model_dump(exclude_unset=True)
    if values.get("images") is not None:
        values["images"] = [str(url) for url in values["images"]]
    return values


# Locations

@router.get("/locations", response_model=DataResponse[List[LocationResponse]])
def list_all_locations(
    admin: PlatformAdmin,
    db: Annotated[Session, Depends(get_db)],
):
    """Every location in any status, newest first."""
    locations = db.query(Location).order_by(Location.created_at.desc()).all()
    return DataResponse(data=[to_location_response(location) for location in locations])


@router.post(
    "/locations",
    response_model=DataResponse[LocationResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_location(
    body: LocationCreate,
    request: Request,
    admin: PlatformAdmin,
    db: Annotated[Session, Depends(get_db)],
):
    values = body.model_dump()
    values["images"] = [str(url) for url in body.images]
    location = Location(**values)
    db.add(location)
    db.flush()

    log_from_request(
        db=db,
        request=request,
        action="location.create",
        actor_id=admin.id,
        entity_type="location",
        entity_id=location.id,
    )
    db.commit()
    db.refresh(location)

    logger.info(f"Location {location.id} created", extra={"user_id": admin.id})
    return DataResponse(data=to_location_response(location))


@router.patch("/locations/{location_id}", response_model=DataResponse[LocationResponse])
def update_location(
    location_id: UUID,
    body: LocationUpdate,
    request: Request,
    admin: PlatformAdmin,
    db: Annotated[Session, Depends(get_db)],
):
    """Partially update a location.

    Raises:
        ApiError 404 location_not_found
    """
    location = db.get(Location, location_id)
    if not location:
        raise ApiError(status.HTTP_404_NOT_FOUND, "location_not_found", "Location not found.")

    for field, value in _location_values(body).items():
        if value is None and field not in NULLABLE_LOCATION_FIELDS:
            continue
        setattr(location, field, value)

    log_from_request(
        db=db,
        request=request,
        action="location.update",
        actor_id=admin.id,
        entity_type="location",
        entity_id=location.id,
    )
    db.commit()
    db.refresh(location)
    return DataResponse(data=to_location_response(location))


# Organizer applications

@router.get("/organizer-applications", response_model=DataResponse[List[ApplicationResponse]])
def list_applications(
    admin: PlatformAdmin,
    db: Annotated[Session, Depends(get_db)],
):
    applications = (
        db.query(OrganizerApplication)
        .options(joinedload(OrganizerApplication.applicant).joinedload(User.profile))
        .order_by(OrganizerApplication.created_at.desc())
        .all()
    )
    return DataResponse(data=[
        ApplicationResponse(
            id=item.id,
            applicant_id=item.applicant_id,
            applicant_email=item.applicant.email,
            applicant_name=item.applicant.display_name,
            requested_name=item.requested_name,
            requested_type=item.requested_type,
            requested_slug=item.requested_slug,
            requested_tenant_id=item.requested_tenant_id,
            status=item.status,
            reviewer_note=item.reviewer_note,
            created_at=item.created_at,
        )
        for item in applications
    ])


@router.patch("/organizer-applications/{application_id}", response_model=MessageResponse)
def decide_application(
    application_id: UUID,
    body: ApplicationDecision,
    request: Request,
    admin: PlatformAdmin,
    db: Annotated[Session, Depends(get_db)],
):
    """Approve or reject a pending organizer application.

    Approval creates an active tenant with a unique slug, makes the applicant
    its owner and promotes their global role to tenant_owner, all in one
    transaction.

    Raises:
        ApiError 404 application_not_found
        ApiError 400 application_finalized: Already approved or rejected
    """
    application = db.get(OrganizerApplication, application_id)
    if not application:
        raise ApiError(status.HTTP_404_NOT_FOUND, "application_not_found", "Organizer application was not found.")
    if application.status != ApplicationStatus.PENDING.value:
        raise ApiError(status.HTTP_400_BAD_REQUEST, "application_finalized", "Application is already finalized.")

    tenant_id = None
    if body.status == ApplicationStatus.APPROVED.value:
        tenant = Tenant(
            name=application.requested_name,
            slug=unique_tenant_slug(db, application.requested_slug),
            type=application.requested_type,
            status=TenantStatus.ACTIVE.value,
            owner_id=application.applicant_id,
        )
        db.add(tenant)
        db.flush()

        db.add(TenantMembership(
            tenant_id=tenant.id,
            user_id=application.applicant_id,
            role=MembershipRole.TENANT_OWNER.value,
        ))
        applicant = db.get(User, application.applicant_id)
        if applicant.role != UserRole.PLATFORM_ADMIN.value:
            applicant.role = UserRole.TENANT_OWNER.value
        application.requested_tenant_id = tenant.id
        tenant_id = tenant.id

    application.status = body.status
    application.reviewer_id = admin.id
    application.reviewer_note = body.reviewer_note
    application.reviewed_at = datetime.now(timezone.utc)

    log_from_request(
        db=db,
        request=request,
        action=f"organizer_application.{body.status}",
        actor_id=admin.id,
        entity_type="organizer_application",
        entity_id=application.id,
        tenant_id=tenant_id,
    )
    db.commit()

    logger.info(f"Organizer application {application.id} {body.status}", extra={"user_id": admin.id})
    return MessageResponse(message=f"Application {body.status}.")


# Event moderation

@router.get("/events/moderation", response_model=DataResponse[List[EventResponse]])
def list_events_for_moderation(
    admin: PlatformAdmin,
    db: Annotated[Session, Depends(get_db)],
):
    """Every event of every tenant, soonest first."""
    events = (
        db.query(Event)
        .options(
            joinedload(Event.location),
            joinedload(Event.tenant),
            joinedload(Event.guide).joinedload(User.profile),
        )
        .order_by(Event.start_at.asc())
        .all()
    )
    return DataResponse(data=to_event_responses(db, events))


@router.patch("/events/moderation/{event_id}", response_model=MessageResponse)
def moderate_event(
    event_id: UUID,
    body: EventModeration,
    request: Request,
    admin: PlatformAdmin,
    db: Annotated[Session, Depends(get_db)],
):
    """Suspend an event, or restore it to published.

    Raises:
        ApiError 404 event_not_found
    """
    event = db.get(Event, event_id)
    if not event:
        raise ApiError(status.HTTP_404_NOT_FOUND, "event_not_found", "Event not found.")

    event.status = (
        EventStatus.SUSPENDED.value if body.action == "suspend" else EventStatus.PUBLISHED.value
    )
    log_from_request(
        db=db,
        request=request,
        action=f"event.{body.action}",
        actor_id=admin.id,
        entity_type="event",
        entity_id=event.id,
        tenant_id=event.tenant_id,
    )
    db.commit()
    return MessageResponse(message=f"Event {body.action}ed successfully.")


@router.get("/metrics", response_model=DataResponse[PlatformMetrics])
def platform_metrics(
    admin: PlatformAdmin,
    db: Annotated[Session, Depends(get_db)],
):
    """Headline counts for the admin dashboard."""
    return DataResponse(data=PlatformMetrics(
        tenants=db.query(Tenant).filter(Tenant.status == TenantStatus.ACTIVE.value).count(),
        events=db.query(Event).count(),
        pending_applications=db.query(OrganizerApplication).filter(
            OrganizerApplication.status == ApplicationStatus.PENDING.value
        ).count(),
        pending_requests=db.query(EventRequest).filter(
            EventRequest.status == RequestStatus.PENDING.value
        ).count(),
    ))
