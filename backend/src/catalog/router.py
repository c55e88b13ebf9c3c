"""Public catalog endpoints and visitor join requests.

Browsing locations and published events needs no authentication. Creating
or cancelling a join request needs a verified account.
"""

import logging
from typing import Annotated, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session, joinedload, selectinload

from auth.dependencies import VerifiedUser
from database import get_db
from domain.capacity import assert_capacity_available
from errors import ApiError
from models.event import Event, EventParticipant, EventRequest, EventStatus, RequestStatus
from models.location import Location, LocationStatus
from models.user import User
from observability.metrics import join_requests_total
from schemas.common import DataResponse, MessageResponse
from .mappers import count_participants, to_event_detail, to_event_responses, to_location_response
from .schemas import (
    EventDetailResponse,
    EventResponse,
    JoinRequestCreate,
    JoinRequestResponse,
    LocationResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Catalog"])

ACTIVE_REQUEST_STATUSES = (RequestStatus.PENDING.value, RequestStatus.APPROVED.value)


def _event_not_found() -> ApiError:
    return ApiError(status.HTTP_404_NOT_FOUND, "event_not_found", "Event not found.")


def _event_listing_options():
    return (
        joinedload(Event.location),
        joinedload(Event.tenant),
        joinedload(Event.guide).joinedload(User.profile),
    )


@router.get("/locations", response_model=DataResponse[List[LocationResponse]])
def list_locations(
    db: Annotated[Session, Depends(get_db)],
    activity_type: Optional[str] = Query(None, alias="activityType", pattern="^(hiking|camping)$"),
    featured: Optional[bool] = Query(None),
):
    """Active locations, featured first, then newest."""
    query = db.query(Location).filter(Location.status == LocationStatus.ACTIVE.value)
    if activity_type:
        query = query.filter(Location.activity_type == activity_type)
    if featured is not None:
        query = query.filter(Location.featured == featured)

    locations = query.order_by(Location.featured.desc(), Location.created_at.desc()).all()
    return DataResponse(data=[to_location_response(location) for location in locations])


@router.get("/events", response_model=DataResponse[List[EventResponse]])
def list_events(db: Annotated[Session, Depends(get_db)]):
    """Published events at active locations, soonest first."""
    events = (
        db.query(Event)
        .join(Location, Event.location_id == Location.id)
        .options(*_event_listing_options())
        .filter(
            Event.status == EventStatus.PUBLISHED.value,
            Location.status == LocationStatus.ACTIVE.value,
        )
        .order_by(Event.start_at.asc())
        .all()
    )
    return DataResponse(data=to_event_responses(db, events))


@router.get("/events/{event_id}", response_model=DataResponse[EventDetailResponse])
def get_event(event_id: UUID, db: Annotated[Session, Depends(get_db)]):
    """Published event with its description, participants and location."""
    event = (
        db.query(Event)
        .join(Location, Event.location_id == Location.id)
        .options(
            *_event_listing_options(),
            selectinload(Event.participants).joinedload(EventParticipant.user).joinedload(User.profile),
        )
        .filter(
            Event.id == event_id,
            Event.status == EventStatus.PUBLISHED.value,
            Location.status == LocationStatus.ACTIVE.value,
        )
        .first()
    )
    if not event:
        raise _event_not_found()
    return DataResponse(data=to_event_detail(event))


@router.post(
    "/events/{event_id}/requests",
    response_model=DataResponse[JoinRequestResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_join_request(
    event_id: UUID,
    body: JoinRequestCreate,
    current_user: VerifiedUser,
    db: Annotated[Session, Depends(get_db)],
):
    """Request a seat on a published event.

    A previously rejected or cancelled request is reopened instead of
    creating a second row.

    Raises:
        ApiError 404 event_not_found: Event missing or not published
        ApiError 400 event_full: No seat left
        ApiError 409 request_exists: A pending or approved request already exists
    """
    event = db.query(Event).filter(
        Event.id == event_id,
        Event.status == EventStatus.PUBLISHED.value,
    ).first()
    if not event:
        raise _event_not_found()

    try:
        assert_capacity_available(event.capacity, count_participants(db, event.id))
    except ApiError:
        join_requests_total.labels("rejected_full").inc()
        raise

    existing = db.query(EventRequest).filter(
        EventRequest.event_id == event.id,
        EventRequest.user_id == current_user.id,
    ).first()

    if existing and existing.status in ACTIVE_REQUEST_STATUSES:
        raise ApiError(
            status.HTTP_409_CONFLICT,
            "request_exists",
            "You already have an active request for this event.",
        )

    if existing:
        existing.status = RequestStatus.PENDING.value
        existing.note = body.note if body.note is not None else existing.note
        existing.organizer_note = None
        existing.reviewed_at = None
        existing.reviewed_by_id = None
        join_request = existing
    else:
        join_request = EventRequest(
            event_id=event.id,
            user_id=current_user.id,
            note=body.note,
            status=RequestStatus.PENDING.value,
        )
        db.add(join_request)

    db.commit()
    db.refresh(join_request)

    join_requests_total.labels("created").inc()
    logger.info(
        f"Join request {join_request.id} created for event {event.id}",
        extra={"user_id": current_user.id, "tenant_id": event.tenant_id},
    )
    return DataResponse(data=JoinRequestResponse.model_validate(join_request))


@router.patch(
    "/events/{event_id}/requests/{request_id}/cancel",
    response_model=MessageResponse,
)
def cancel_join_request(
    event_id: UUID,
    request_id: UUID,
    current_user: VerifiedUser,
    db: Annotated[Session, Depends(get_db)],
):
    """Cancel the caller's own pending or approved request and free the seat.

    Raises:
        ApiError 404 request_not_found
        ApiError 400 request_not_cancellable: Request already rejected or cancelled
    """
    join_request = db.query(EventRequest).filter(
        EventRequest.id == request_id,
        EventRequest.event_id == event_id,
        EventRequest.user_id == current_user.id,
    ).first()
    if not join_request:
        raise ApiError(status.HTTP_404_NOT_FOUND, "request_not_found", "Request not found.")

    if join_request.status not in ACTIVE_REQUEST_STATUSES:
        raise ApiError(
            status.HTTP_400_BAD_REQUEST,
            "request_not_cancellable",
            "This request cannot be cancelled.",
        )

    join_request.status = RequestStatus.CANCELLED.value
    db.query(EventParticipant).filter(
        EventParticipant.request_id == join_request.id
    ).delete()
    db.commit()

    join_requests_total.labels("cancelled").inc()
    return MessageResponse(message="Request cancelled successfully.")
