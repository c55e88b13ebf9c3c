"""ORM to response mapping for events and locations."""

from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from domain.capacity import slots_available
from models.event import Event, EventParticipant
from models.location import Location
from .schemas import EventDetailResponse, EventResponse, LocationResponse, ParticipantSummary


def as_utc(value: datetime) -> datetime:
    """Aware values are converted to UTC; naive values (SQLite) are already UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_date(value: datetime) -> str:
    return as_utc(value).strftime("%Y-%m-%d")


def format_time(value: datetime) -> str:
    return as_utc(value).strftime("%H:%M")


def participant_counts(db: Session, event_ids: Iterable[UUID]) -> Dict[UUID, int]:
    """Approved participant count per event in a single grouped query."""
    ids = list(event_ids)
    if not ids:
        return {}
    rows = (
        db.query(EventParticipant.event_id, func.count(EventParticipant.id))
        .filter(EventParticipant.event_id.in_(ids))
        .group_by(EventParticipant.event_id)
        .all()
    )
    return {event_id: count for event_id, count in rows}


def count_participants(db: Session, event_id: UUID) -> int:
    return db.query(func.count(EventParticipant.id)).filter(EventParticipant.event_id == event_id).scalar() or 0


def to_location_response(location: Location) -> LocationResponse:
    return LocationResponse.model_validate(location)


def _organizer(event: Event) -> tuple[str, Optional[str]]:
    """Guide's display name and avatar, falling back to the tenant name."""
    guide = event.guide
    if guide is not None and guide.profile is not None:
        return guide.profile.display_name, guide.profile.avatar_url
    return event.tenant.name, None


def to_event_response(event: Event, participant_count: int) -> EventResponse:
    organizer_name, organizer_avatar = _organizer(event)
    return EventResponse(
        id=event.id,
        tenant_id=event.tenant_id,
        location_id=event.location_id,
        location_name=event.location.name,
        activity_type=event.location.activity_type,
        title=event.title,
        date=format_date(event.start_at),
        time=format_time(event.start_at),
        price=event.price_aed,
        slots_total=event.capacity,
        slots_available=slots_available(event.capacity, participant_count),
        status=event.status,
        meeting_point=event.meeting_point,
        itinerary=list(event.itinerary or []),
        requirements=list(event.requirements or []),
        organizer_name=organizer_name,
        organizer_avatar=organizer_avatar,
    )


def to_event_responses(db: Session, events: List[Event]) -> List[EventResponse]:
    counts = participant_counts(db, [event.id for event in events])
    return [to_event_response(event, counts.get(event.id, 0)) for event in events]


def to_event_detail(event: Event) -> EventDetailResponse:
    summary = to_event_response(event, len(event.participants))
    participants = [
        ParticipantSummary(
            id=participant.user_id,
            name=participant.user.display_name,
            avatar=participant.user.profile.avatar_url if participant.user.profile else None,
        )
        for participant in event.participants
    ]
    return EventDetailResponse(
        **summary.model_dump(),
        description=event.description,
        end_date=format_date(event.end_at) if event.end_at else None,
        end_time=format_time(event.end_at) if event.end_at else None,
        participants=participants,
        location=to_location_response(event.location),
    )
