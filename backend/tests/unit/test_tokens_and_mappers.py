"""Unit tests for token helpers and event response mapping"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from auth.tokens import random_token, sha256_hex, slugify
from catalog.mappers import format_date, format_time, to_event_response
from models import Event, Location, Profile, Tenant, User


class TestSlugify:
    @pytest.mark.parametrize("value,slug", [
        ("Desert Trails & Co.", "desert-trails-co"),
        ("  Hajar   Mountains  ", "hajar-mountains"),
        ("Jebel-Jais 2030", "jebel-jais-2030"),
        ("!!!", "organizer"),
    ])
    def test_slugify(self, value, slug):
        assert slugify(value) == slug


class TestTokens:
    def test_random_token_length(self):
        assert len(random_token(6)) == 12
        assert len(random_token()) == 64

    def test_sha256_hex_is_stable(self):
        assert sha256_hex("abc") == sha256_hex("abc")
        assert sha256_hex("abc") != sha256_hex("abd")
        assert len(sha256_hex("abc")) == 64


def _event(guide=None, capacity=8):
    tenant = Tenant(id=uuid4(), name="Desert Trails", slug="desert-trails", type="company")
    location = Location(id=uuid4(), name="Jebel Jais Ridge", activity_type="hiking")
    return Event(
        id=uuid4(),
        tenant_id=tenant.id,
        tenant=tenant,
        location_id=location.id,
        location=location,
        guide=guide,
        title="Ridge Sunrise",
        start_at=datetime(2030, 2, 3, 5, 45, tzinfo=timezone.utc),
        itinerary=["Meet", "Summit"],
        requirements=[],
        price_aed=200,
        capacity=capacity,
        status="published",
    )


class TestEventMapping:
    def test_date_and_time_formatting(self):
        start = datetime(2030, 2, 3, 5, 45, tzinfo=timezone.utc)
        assert format_date(start) == "2030-02-03"
        assert format_time(start) == "05:45"

    def test_offset_datetimes_render_in_utc(self):
        start = datetime(2030, 1, 2, 2, 30, tzinfo=timezone(timedelta(hours=4)))

        assert (format_date(start), format_time(start)) == ("2030-01-01", "22:30")

    def test_naive_datetimes_are_taken_as_utc(self):
        start = datetime(2030, 1, 2, 2, 30)

        assert (format_date(start), format_time(start)) == ("2030-01-02", "02:30")

    def test_event_response_uses_utc_schedule(self):
        event = _event()
        event.start_at = datetime(2030, 1, 2, 2, 30, tzinfo=timezone(timedelta(hours=4)))

        response = to_event_response(event, participant_count=0)

        assert (response.date, response.time) == ("2030-01-01", "22:30")

    def test_organizer_falls_back_to_tenant_name(self):
        response = to_event_response(_event(), participant_count=3)

        assert response.organizer_name == "Desert Trails"
        assert response.organizer_avatar is None
        assert response.slots_total == 8
        assert response.slots_available == 5
        assert response.location_name == "Jebel Jais Ridge"

    def test_organizer_is_guide_profile(self):
        guide = User(id=uuid4(), email="guide@test.com")
        guide.profile = Profile(display_name="Salem", avatar_url="http://cdn.test/salem.jpg")

        response = to_event_response(_event(guide=guide), participant_count=0)

        assert response.organizer_name == "Salem"
        assert response.organizer_avatar == "http://cdn.test/salem.jpg"

    def test_overbooked_event_shows_no_free_slots(self):
        response = to_event_response(_event(capacity=2), participant_count=5)
        assert response.slots_available == 0

    def test_camel_case_wire_format(self):
        payload = to_event_response(_event(), participant_count=0).model_dump(by_alias=True)

        assert payload["slotsAvailable"] == 8
        assert payload["locationName"] == "Jebel Jais Ridge"
        assert payload["date"] == "2030-02-03"
        assert payload["time"] == "05:45"
