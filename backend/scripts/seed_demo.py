#!/usr/bin/env python
"""Seed script for a local demo database.

Creates a platform admin, an organizer company with an owner and a guide,
two visitors, a few locations and published events. Users are verified so
they can log in and use every route group right away. Running it again
updates the same rows instead of duplicating them.

Usage:
    python backend/scripts/seed_demo.py

Environment Variables:
    DATABASE_URL, JWT_ACCESS_SECRET, JWT_REFRESH_SECRET, PASSWORD_PEPPER:
        Same as the API (see config.py)
"""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Add backend/src to Python path
backend_src = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(backend_src))

from sqlalchemy.exc import SQLAlchemyError  # noqa: E402

from auth.password import hash_password, validate_password_strength  # noqa: E402
from database import get_db_session  # noqa: E402
from models import (  # noqa: E402
    Event,
    EventStatus,
    Location,
    MembershipRole,
    Profile,
    Tenant,
    TenantMembership,
    TenantStatus,
    TenantType,
    User,
    UserRole,
    UserStatus,
)

DEMO_USERS = [
    ("admin@uaetrails.app", "Admin@12345", UserRole.PLATFORM_ADMIN, "UAE Trails Admin"),
    ("organizer@uaetrails.app", "Organizer@12345", UserRole.TENANT_OWNER, "Adventure Organizer"),
    ("guide@uaetrails.app", "Guide@12345", UserRole.TENANT_GUIDE, "Trail Guide"),
    ("visitor@uaetrails.app", "Visitor@12345", UserRole.VISITOR, "Visitor User"),
    ("visitor2@uaetrails.app", "Visitor2@12345", UserRole.VISITOR, "Pending Visitor"),
]

DEMO_TENANT_SLUG = "uae-adventure-co"

DEMO_LOCATIONS = [
    {
        "name": "Jebel Jais Summit Trail",
        "region": "RAK",
        "activity_type": "hiking",
        "difficulty": "hard",
        "description": (
            "A demanding mountain route with panoramic views of the Hajar Mountains, "
            "ending at the highest peak in the UAE."
        ),
        "season": ["winter", "year-round"],
        "child_friendly": False,
        "max_group_size": 12,
        "accessibility": "car-accessible",
        "images": ["https://images.unsplash.com/photo-1506905925346-21bda4d32df4?w=800"],
        "featured": True,
        "distance": "12.5 km",
        "duration": "6 h",
        "elevation": "1934 m",
        "latitude": 25.9545,
        "longitude": 56.2730,
        "highlights": ["Summit views", "Rock formations", "Wildlife spotting"],
    },
    {
        "name": "Wadi Shawka Loop",
        "region": "RAK",
        "activity_type": "hiking",
        "difficulty": "moderate",
        "description": (
            "Scenic wadi route suitable for groups with pools and rock formations "
            "along a seasonal riverbed."
        ),
        "season": ["winter", "year-round"],
        "child_friendly": True,
        "max_group_size": 20,
        "accessibility": "car-accessible",
        "images": ["https://images.unsplash.com/photo-1501555088652-021faa106b9b?w=800"],
        "featured": True,
        "distance": "8 km",
        "duration": "4 h",
        "elevation": "450 m",
        "latitude": 25.3400,
        "longitude": 56.1200,
        "highlights": ["Natural pools", "Canyon views", "Family friendly"],
    },
    {
        "name": "Fossil Rock Desert Camp",
        "region": "Sharjah",
        "activity_type": "camping",
        "difficulty": "easy",
        "description": (
            "Desert camping for group overnights near the Fossil Rock formation, "
            "good for stargazing."
        ),
        "season": ["winter"],
        "child_friendly": True,
        "max_group_size": 30,
        "accessibility": "remote",
        "images": [],
        "featured": False,
        "camping_type": "operator-led",
        "latitude": 25.1500,
        "longitude": 55.8900,
        "highlights": ["Stargazing", "Dune walks"],
    },
]


def upsert_user(session, email: str, password: str, role: UserRole, display_name: str) -> User:
    is_valid, error_msg = validate_password_strength(password)
    if not is_valid:
        raise ValueError(f"Demo password for {email} is too weak: {error_msg}")

    user = session.query(User).filter(User.email == email).first()
    if user is None:
        user = User(email=email)
        session.add(user)
    user.password_hash = hash_password(password)
    user.role = role.value
    user.status = UserStatus.ACTIVE.value
    user.email_verified_at = user.email_verified_at or datetime.now(timezone.utc)

    if user.profile is None:
        user.profile = Profile(display_name=display_name)
    else:
        user.profile.display_name = display_name
    session.flush()
    return user


def upsert_membership(session, tenant: Tenant, user: User, role: MembershipRole) -> None:
    membership = session.query(TenantMembership).filter(
        TenantMembership.tenant_id == tenant.id,
        TenantMembership.user_id == user.id,
    ).first()
    if membership is None:
        session.add(TenantMembership(tenant_id=tenant.id, user_id=user.id, role=role.value))
    else:
        membership.role = role.value


def upsert_location(session, values: dict) -> Location:
    location = session.query(Location).filter(Location.name == values["name"]).first()
    if location is None:
        location = Location(**values)
        session.add(location)
    else:
        for field, value in values.items():
            setattr(location, field, value)
    session.flush()
    return location


def main():
    """Seed demo data."""
    try:
        with get_db_session() as session:
            users = {
                email: upsert_user(session, email, password, role, name)
                for email, password, role, name in DEMO_USERS
            }
            organizer = users["organizer@uaetrails.app"]
            guide = users["guide@uaetrails.app"]

            tenant = session.query(Tenant).filter(Tenant.slug == DEMO_TENANT_SLUG).first()
            if tenant is None:
                tenant = Tenant(slug=DEMO_TENANT_SLUG)
                session.add(tenant)
            tenant.name = "UAE Adventure Co"
            tenant.type = TenantType.COMPANY.value
            tenant.status = TenantStatus.ACTIVE.value
            tenant.owner_id = organizer.id
            session.flush()

            upsert_membership(session, tenant, organizer, MembershipRole.TENANT_OWNER)
            upsert_membership(session, tenant, guide, MembershipRole.TENANT_GUIDE)

            locations = [upsert_location(session, values) for values in DEMO_LOCATIONS]

            start = (datetime.now(timezone.utc) + timedelta(days=14)).replace(
                hour=6, minute=0, second=0, microsecond=0
            )
            for offset, location in enumerate(locations):
                title = f"{location.name} Group Outing"
                if session.query(Event).filter(Event.tenant_id == tenant.id, Event.title == title).first():
                    continue
                session.add(Event(
                    tenant_id=tenant.id,
                    location_id=location.id,
                    created_by_id=organizer.id,
                    guide_id=guide.id,
                    title=title,
                    description=f"A guided group trip to {location.name} with an experienced local guide.",
                    start_at=start + timedelta(days=7 * offset),
                    meeting_point="Main parking area",
                    itinerary=["Meet and briefing", "Main activity", "Wrap up"],
                    requirements=["Water (3L)", "Sturdy shoes"],
                    price_aed=150 + 50 * offset,
                    capacity=location.max_group_size,
                    status=EventStatus.PUBLISHED.value,
                    published_at=datetime.now(timezone.utc),
                ))

        print("SUCCESS: Demo data seeded")
        for email, password, role, _ in DEMO_USERS:
            print(f"  {role.value:<15} {email} / {password}")

    except (SQLAlchemyError, ValueError) as e:
        print(f"ERROR: Failed to seed demo data: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
