"""Integration tests for organizer endpoints

Tests cover:
- Event lifecycle: create (draft), update, publish, cancel
- Join request review with capacity enforcement and notifications
- Team management and the one-company-per-guide rule
"""

from datetime import datetime
from uuid import UUID

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from models import (
    AuditLog,
    Event,
    EventParticipant,
    EventRequest,
    EventStatus,
    MembershipRole,
    Notification,
    TenantMembership,
    TenantType,
    User,
)


pytestmark = pytest.mark.integration

ORGANIZER = "/api/v1/organizer"


def event_payload(location_id, **overrides) -> dict:
    payload = {
        "locationId": str(location_id),
        "title": "Full Moon Desert Walk",
        "description": "Night walk across the dunes under the full moon.",
        "date": "2030-03-20",
        "time": "19:00",
        "meetingPoint": "Al Qudra Lake car park",
        "itinerary": ["Meet", "Walk", "Tea"],
        "requirements": ["Headlamp"],
        "price": 120,
        "capacity": 12,
    }
    payload.update(overrides)
    return payload


def add_request(db: Session, event: Event, user: User, status: str = "pending") -> EventRequest:
    join_request = EventRequest(event_id=event.id, user_id=user.id, status=status)
    db.add(join_request)
    db.commit()
    db.refresh(join_request)
    return join_request


class TestEventManagement:
    def test_create_event_as_draft(
        self, client: TestClient, tenant, location, owner_user, auth_headers, db_session: Session
    ):
        response = client.post(
            f"{ORGANIZER}/events",
            json=event_payload(location.id),
            headers=auth_headers(owner_user, tenant),
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["status"] == "draft"
        assert data["date"] == "2030-03-20"
        assert data["time"] == "19:00"
        assert data["tenantId"] == str(tenant.id)
        assert data["slotsAvailable"] == 12
        assert data["organizerName"] == "Tenant Owner"

        event = db_session.get(Event, UUID(data["id"]))
        assert event.guide_id == owner_user.id
        assert event.end_at is None
        assert db_session.query(AuditLog).filter(AuditLog.action == "event.create").count() == 1

    def test_create_with_end_and_guide(
        self, client: TestClient, tenant, location, owner_user, guide_user, auth_headers, db_session: Session
    ):
        response = client.post(
            f"{ORGANIZER}/events",
            json=event_payload(
                location.id,
                endDate="2030-03-21",
                endTime="07:30",
                guideId=str(guide_user.id),
            ),
            headers=auth_headers(owner_user, tenant),
        )

        assert response.status_code == 201
        event = db_session.get(Event, UUID(response.json()["data"]["id"]))
        assert event.guide_id == guide_user.id
        assert event.end_at.replace(tzinfo=None) == datetime(2030, 3, 21, 7, 30)

    def test_inactive_location_rejected(
        self, client: TestClient, tenant, make_location, owner_user, auth_headers
    ):
        closed = make_location("Closed Trail", status="inactive")

        response = client.post(
            f"{ORGANIZER}/events",
            json=event_payload(closed.id),
            headers=auth_headers(owner_user, tenant),
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "invalid_location"

    def test_guide_outside_tenant_rejected(
        self, client: TestClient, tenant, location, owner_user, visitor_user, auth_headers
    ):
        response = client.post(
            f"{ORGANIZER}/events",
            json=event_payload(location.id, guideId=str(visitor_user.id)),
            headers=auth_headers(owner_user, tenant),
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "invalid_guide"

    @pytest.mark.parametrize("field,value", [
        ("title", "Hi"),
        ("description", "Too short"),
        ("date", "20-03-2030"),
        ("time", "7pm"),
        ("capacity", 0),
        ("price", -1),
    ])
    def test_invalid_payload(
        self, client: TestClient, tenant, location, owner_user, auth_headers, field, value
    ):
        response = client.post(
            f"{ORGANIZER}/events",
            json=event_payload(location.id, **{field: value}),
            headers=auth_headers(owner_user, tenant),
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "validation_error"

    def test_impossible_date_rejected(
        self, client: TestClient, tenant, location, owner_user, auth_headers
    ):
        response = client.post(
            f"{ORGANIZER}/events",
            json=event_payload(location.id, date="2030-02-30"),
            headers=auth_headers(owner_user, tenant),
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "validation_error"

    def test_update_event(
        self, client: TestClient, tenant, published_event, owner_user, auth_headers
    ):
        response = client.patch(
            f"{ORGANIZER}/events/{published_event.id}",
            json={"title": "Sunset Wadi Hike", "capacity": 25, "date": "2030-04-01", "time": "16:15"},
            headers=auth_headers(owner_user, tenant),
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["title"] == "Sunset Wadi Hike"
        assert data["slotsTotal"] == 25
        assert data["date"] == "2030-04-01"
        assert data["time"] == "16:15"
        assert data["price"] == 150

    def test_list_includes_every_status(
        self, client: TestClient, make_event, tenant, location, owner_user, auth_headers
    ):
        make_event(tenant, location, owner_user, title="Draft One", status=EventStatus.DRAFT, days_ahead=2)
        make_event(tenant, location, owner_user, title="Live One", days_ahead=5)

        response = client.get(f"{ORGANIZER}/events", headers=auth_headers(owner_user, tenant))

        assert response.status_code == 200
        assert [item["title"] for item in response.json()["data"]] == ["Draft One", "Live One"]

    def test_publish_event(
        self, client: TestClient, make_event, tenant, location, owner_user, auth_headers, db_session: Session
    ):
        draft = make_event(tenant, location, owner_user, status=EventStatus.DRAFT)

        response = client.post(
            f"{ORGANIZER}/events/{draft.id}/publish",
            headers=auth_headers(owner_user, tenant),
        )

        assert response.status_code == 200
        assert response.json() == {"message": "Event published.", "eventId": str(draft.id)}
        db_session.refresh(draft)
        assert draft.status == "published"
        assert draft.published_at is not None

    def test_cancel_event_keeps_row(
        self, client: TestClient, tenant, published_event, owner_user, auth_headers, db_session: Session
    ):
        response = client.delete(
            f"{ORGANIZER}/events/{published_event.id}",
            headers=auth_headers(owner_user, tenant),
        )

        assert response.status_code == 204
        db_session.refresh(published_event)
        assert published_event.status == "cancelled"

    def test_guide_member_can_manage_events(
        self, client: TestClient, tenant, location, guide_user, auth_headers
    ):
        response = client.post(
            f"{ORGANIZER}/events",
            json=event_payload(location.id),
            headers=auth_headers(guide_user, tenant),
        )

        assert response.status_code == 201
        assert response.json()["data"]["organizerName"] == "Trail Guide"


class TestRequestReview:
    def test_list_requests(
        self, client: TestClient, tenant, published_event, owner_user, visitor_user, auth_headers, db_session
    ):
        add_request(db_session, published_event, visitor_user)

        response = client.get(f"{ORGANIZER}/requests", headers=auth_headers(owner_user, tenant))

        assert response.status_code == 200
        item = response.json()["data"][0]
        assert item["status"] == "pending"
        assert item["user"]["email"] == "visitor@test.com"
        assert item["user"]["displayName"] == "Visitor One"
        assert item["event"]["title"] == "Sunrise Wadi Hike"
        assert item["event"]["locationName"] == "Wadi Shawka Loop"

    def test_approve_creates_participant_and_notification(
        self, client: TestClient, tenant, published_event, owner_user, visitor_user, auth_headers, db_session
    ):
        join_request = add_request(db_session, published_event, visitor_user)

        response = client.patch(
            f"{ORGANIZER}/requests/{join_request.id}",
            json={"status": "approved"},
            headers=auth_headers(owner_user, tenant),
        )

        assert response.status_code == 200
        assert response.json() == {"message": "Request approved."}

        participant = db_session.query(EventParticipant).one()
        assert participant.user_id == visitor_user.id
        assert participant.approved_by_id == owner_user.id
        notification = db_session.query(Notification).one()
        assert notification.user_id == visitor_user.id
        assert notification.title == "Join request approved"
        assert notification.meta["requestId"] == str(join_request.id)
        assert db_session.query(AuditLog).filter(AuditLog.action == "request.approved").count() == 1

    def test_reject_uses_organizer_note(
        self, client: TestClient, tenant, published_event, owner_user, visitor_user, auth_headers, db_session
    ):
        join_request = add_request(db_session, published_event, visitor_user)

        response = client.patch(
            f"{ORGANIZER}/requests/{join_request.id}",
            json={"status": "rejected", "organizerNote": "Trip is for experienced hikers only."},
            headers=auth_headers(owner_user, tenant),
        )

        assert response.status_code == 200
        assert response.json() == {"message": "Request rejected."}
        assert db_session.query(EventParticipant).count() == 0
        notification = db_session.query(Notification).one()
        assert notification.body == "Trip is for experienced hikers only."
        db_session.refresh(join_request)
        assert join_request.reviewed_by_id == owner_user.id
        assert join_request.reviewed_at is not None

    def test_reject_default_message(
        self, client: TestClient, tenant, published_event, owner_user, visitor_user, auth_headers, db_session
    ):
        join_request = add_request(db_session, published_event, visitor_user)

        client.patch(
            f"{ORGANIZER}/requests/{join_request.id}",
            json={"status": "rejected"},
            headers=auth_headers(owner_user, tenant),
        )

        assert db_session.query(Notification).one().body == "Your request could not be approved at this time."

    def test_finalized_request_cannot_change(
        self, client: TestClient, tenant, published_event, owner_user, visitor_user, auth_headers, db_session
    ):
        join_request = add_request(db_session, published_event, visitor_user, status="rejected")

        response = client.patch(
            f"{ORGANIZER}/requests/{join_request.id}",
            json={"status": "approved"},
            headers=auth_headers(owner_user, tenant),
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "request_finalized"

    def test_approve_on_unpublished_event(
        self, client: TestClient, make_event, tenant, location, owner_user, visitor_user, auth_headers, db_session
    ):
        draft = make_event(tenant, location, owner_user, status=EventStatus.DRAFT)
        join_request = add_request(db_session, draft, visitor_user)

        response = client.patch(
            f"{ORGANIZER}/requests/{join_request.id}",
            json={"status": "approved"},
            headers=auth_headers(owner_user, tenant),
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "event_not_publishable"

    def test_approve_beyond_capacity(
        self, client: TestClient, make_event, make_user, tenant, location, owner_user, auth_headers, db_session
    ):
        event = make_event(tenant, location, owner_user, capacity=1)
        first = add_request(db_session, event, make_user("first@test.com"))
        second = add_request(db_session, event, make_user("second@test.com"))
        headers = auth_headers(owner_user, tenant)

        approved = client.patch(f"{ORGANIZER}/requests/{first.id}", json={"status": "approved"}, headers=headers)
        assert approved.status_code == 200

        response = client.patch(f"{ORGANIZER}/requests/{second.id}", json={"status": "approved"}, headers=headers)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "event_full"
        assert db_session.query(EventParticipant).count() == 1
        db_session.refresh(second)
        assert second.status == "pending"

    def test_unknown_request(self, client: TestClient, tenant, owner_user, auth_headers, db_session):
        response = client.patch(
            f"{ORGANIZER}/requests/00000000-0000-0000-0000-000000000000",
            json={"status": "approved"},
            headers=auth_headers(owner_user, tenant),
        )

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "request_not_found"


class TestTeam:
    def test_list_team(self, client: TestClient, tenant, owner_user, auth_headers):
        response = client.get(f"{ORGANIZER}/team", headers=auth_headers(owner_user, tenant))

        assert response.status_code == 200
        members = {item["email"]: item["role"] for item in response.json()["data"]}
        assert members == {"owner@test.com": "tenant_owner", "guide@test.com": "tenant_guide"}

    def test_add_new_member_creates_account(
        self, client: TestClient, tenant, owner_user, auth_headers, db_session: Session
    ):
        response = client.post(
            f"{ORGANIZER}/team",
            json={"email": "New.Guide@test.com", "displayName": "Noura", "role": "tenant_guide"},
            headers=auth_headers(owner_user, tenant),
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["email"] == "new.guide@test.com"
        assert data["displayName"] == "Noura"
        assert data["role"] == "tenant_guide"
        assert "createdAt" not in data

        user = db_session.query(User).filter(User.email == "new.guide@test.com").one()
        assert user.role == "tenant_guide"
        assert user.email_verified_at is None

    def test_existing_visitor_promoted_to_admin(
        self, client: TestClient, tenant, owner_user, visitor_user, auth_headers, db_session: Session
    ):
        response = client.post(
            f"{ORGANIZER}/team",
            json={"email": "visitor@test.com", "role": "tenant_admin"},
            headers=auth_headers(owner_user, tenant),
        )

        assert response.status_code == 201
        db_session.refresh(visitor_user)
        assert visitor_user.role == "tenant_admin"

    def test_upsert_updates_existing_membership(
        self, client: TestClient, tenant, owner_user, guide_user, auth_headers, db_session: Session
    ):
        response = client.post(
            f"{ORGANIZER}/team",
            json={"email": "guide@test.com", "role": "tenant_admin"},
            headers=auth_headers(owner_user, tenant),
        )

        assert response.status_code == 201
        memberships = db_session.query(TenantMembership).filter(TenantMembership.user_id == guide_user.id).all()
        assert [membership.role for membership in memberships] == ["tenant_admin"]

    def test_guide_in_another_company_conflicts(
        self, client: TestClient, make_tenant, make_user, tenant, owner_user, auth_headers, db_session: Session
    ):
        rival_owner = make_user("rival@test.com", display_name="Rival Owner")
        rival = make_tenant(rival_owner, slug="rival-trails", name="Rival Trails")
        roaming = make_user("roaming@test.com", display_name="Roaming Guide")
        db_session.add(TenantMembership(
            tenant_id=rival.id,
            user_id=roaming.id,
            role=MembershipRole.TENANT_GUIDE.value,
        ))
        db_session.commit()

        response = client.post(
            f"{ORGANIZER}/team",
            json={"email": "roaming@test.com", "role": "tenant_guide"},
            headers=auth_headers(owner_user, tenant),
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "guide_tenant_conflict"

    def test_guide_owned_tenant_has_no_conflict_rule(
        self, client: TestClient, make_tenant, make_user, tenant, auth_headers, db_session: Session
    ):
        solo_owner = make_user("solo@test.com", display_name="Solo Guide")
        solo = make_tenant(solo_owner, slug="solo-guide", name="Solo Guide", tenant_type=TenantType.GUIDE_OWNED)
        solo_owner.role = "tenant_owner"
        db_session.commit()

        response = client.post(
            f"{ORGANIZER}/team",
            json={"email": "guide@test.com", "role": "tenant_guide"},
            headers=auth_headers(solo_owner, solo),
        )

        assert response.status_code == 201

    def test_guide_cannot_manage_team(self, client: TestClient, tenant, guide_user, auth_headers):
        response = client.post(
            f"{ORGANIZER}/team",
            json={"email": "someone@test.com", "role": "tenant_guide"},
            headers=auth_headers(guide_user, tenant),
        )

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "forbidden"

    def test_update_member_role(
        self, client: TestClient, tenant, owner_user, guide_user, auth_headers, db_session: Session
    ):
        membership = db_session.query(TenantMembership).filter(
            TenantMembership.tenant_id == tenant.id,
            TenantMembership.user_id == guide_user.id,
        ).one()

        response = client.patch(
            f"{ORGANIZER}/team/{membership.id}",
            json={"role": "tenant_admin"},
            headers=auth_headers(owner_user, tenant),
        )

        assert response.status_code == 200
        assert response.json()["data"] == {"id": str(membership.id), "role": "tenant_admin"}
        db_session.refresh(guide_user)
        assert guide_user.role == "tenant_admin"

    def test_update_unknown_membership(self, client: TestClient, tenant, owner_user, auth_headers, db_session):
        response = client.patch(
            f"{ORGANIZER}/team/00000000-0000-0000-0000-000000000000",
            json={"role": "tenant_admin"},
            headers=auth_headers(owner_user, tenant),
        )

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "membership_not_found"
