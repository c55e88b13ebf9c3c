"""Pytest fixtures for the UAE Trails API.

Provides reusable test fixtures for:
- Database session on an in-memory SQLite database (fresh schema per test)
- Users for every global role, with verified email
- An organizer tenant with owner and guide memberships
- Locations and events
- Test client with the database dependency overridden

Usage:
    def test_admin_endpoint(client, admin_user, auth_headers):
        response = client.get("/api/v1/admin/metrics", headers=auth_headers(admin_user))
        assert response.status_code == 200
"""

import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Dict, Generator

# Set environment variables BEFORE any imports to ensure they take effect
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_ACCESS_SECRET", "test-access-secret-at-least-24-chars")
os.environ.setdefault("JWT_REFRESH_SECRET", "test-refresh-secret-at-least-24-chars")
os.environ.setdefault("PASSWORD_PEPPER", "test-pepper-secret-key")
os.environ.setdefault("LOG_JSON", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ["REDIS_URL"] = ""
for _storage_var in ("S3_ENDPOINT", "S3_ACCESS_KEY_ID", "S3_SECRET_ACCESS_KEY"):
    os.environ.pop(_storage_var, None)

backend_src = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(backend_src))

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from auth.jwt import create_access_token  # noqa: E402
from auth.password import hash_password  # noqa: E402
from database import get_db as database_get_db  # noqa: E402
from models import (  # noqa: E402
    Base,
    Event,
    EventStatus,
    Location,
    MembershipRole,
    Profile,
    Tenant,
    TenantMembership,
    TenantType,
    User,
    UserRole,
)

DEFAULT_PASSWORD = "Trail2025pass"

# Single shared connection so every session sees the same in-memory database
test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture(scope="function", autouse=True)
def reset_rate_limiter():
    """Start each test with a fresh rate limiter connection state."""
    from auth.rate_limit import rate_limiter
    rate_limiter.reset()
    yield


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Create a fresh database session for each test.

    Creates all tables before the test and drops them after.
    """
    Base.metadata.create_all(bind=test_engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """Unauthenticated test client bound to the test session.

    Pass per-request headers (see auth_headers) to act as a user.
    """
    from main import app

    def override_get_db():
        try:
            yield db_session
        finally:
            # Mirrors closing a request session: uncommitted work is discarded
            db_session.rollback()

    app.dependency_overrides[database_get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def make_user(db_session: Session) -> Callable[..., User]:
    """Factory creating a user with a profile.

    Users are verified unless verified=False is passed.
    """
    def _make_user(
        email: str,
        role: UserRole = UserRole.VISITOR,
        display_name: str = "Test User",
        verified: bool = True,
        password: str = DEFAULT_PASSWORD,
        status: str = "active",
    ) -> User:
        user = User(
            email=email,
            password_hash=hash_password(password),
            role=role.value,
            status=status,
            email_verified_at=datetime.now(timezone.utc) if verified else None,
        )
        user.profile = Profile(display_name=display_name)
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture(scope="function")
def auth_headers() -> Callable[..., Dict[str, str]]:
    """Build request headers with a bearer token, optionally tenant scoped."""
    def _headers(user: User, tenant: Tenant = None) -> Dict[str, str]:
        headers = {"Authorization": f"Bearer {create_access_token(user.id, user.email, user.role)}"}
        if tenant is not None:
            headers["x-tenant-id"] = str(tenant.id)
        return headers

    return _headers


@pytest.fixture(scope="function")
def admin_user(make_user) -> User:
    return make_user("admin@test.com", UserRole.PLATFORM_ADMIN, "Platform Admin")


@pytest.fixture(scope="function")
def owner_user(make_user) -> User:
    return make_user("owner@test.com", UserRole.TENANT_OWNER, "Tenant Owner")


@pytest.fixture(scope="function")
def guide_user(make_user) -> User:
    return make_user("guide@test.com", UserRole.TENANT_GUIDE, "Trail Guide")


@pytest.fixture(scope="function")
def visitor_user(make_user) -> User:
    return make_user("visitor@test.com", UserRole.VISITOR, "Visitor One")


@pytest.fixture(scope="function")
def make_tenant(db_session: Session) -> Callable[..., Tenant]:
    """Factory creating a tenant with an owner membership."""
    def _make_tenant(
        owner: User,
        slug: str = "desert-trails",
        name: str = "Desert Trails",
        tenant_type: TenantType = TenantType.COMPANY,
        status: str = "active",
    ) -> Tenant:
        tenant = Tenant(name=name, slug=slug, type=tenant_type.value, status=status, owner_id=owner.id)
        db_session.add(tenant)
        db_session.flush()
        db_session.add(TenantMembership(
            tenant_id=tenant.id,
            user_id=owner.id,
            role=MembershipRole.TENANT_OWNER.value,
        ))
        db_session.commit()
        db_session.refresh(tenant)
        return tenant

    return _make_tenant


@pytest.fixture(scope="function")
def tenant(make_tenant, owner_user: User, guide_user: User, db_session: Session) -> Tenant:
    """Company tenant owned by owner_user with guide_user as guide."""
    tenant = make_tenant(owner_user)
    db_session.add(TenantMembership(
        tenant_id=tenant.id,
        user_id=guide_user.id,
        role=MembershipRole.TENANT_GUIDE.value,
    ))
    db_session.commit()
    return tenant


@pytest.fixture(scope="function")
def make_location(db_session: Session) -> Callable[..., Location]:
    def _make_location(
        name: str = "Wadi Shawka Loop",
        activity_type: str = "hiking",
        status: str = "active",
        featured: bool = False,
    ) -> Location:
        location = Location(
            name=name,
            region="RAK",
            activity_type=activity_type,
            description="Scenic wadi route with pools and rock formations.",
            difficulty="moderate",
            season=["winter"],
            child_friendly=True,
            max_group_size=20,
            accessibility="car-accessible",
            images=[],
            featured=featured,
            status=status,
            highlights=["Natural pools"],
        )
        db_session.add(location)
        db_session.commit()
        db_session.refresh(location)
        return location

    return _make_location


@pytest.fixture(scope="function")
def location(make_location) -> Location:
    return make_location()


@pytest.fixture(scope="function")
def make_event(db_session: Session) -> Callable[..., Event]:
    def _make_event(
        tenant: Tenant,
        location: Location,
        creator: User,
        title: str = "Sunrise Wadi Hike",
        capacity: int = 10,
        status: EventStatus = EventStatus.PUBLISHED,
        days_ahead: int = 14,
        guide: User = None,
    ) -> Event:
        event = Event(
            tenant_id=tenant.id,
            location_id=location.id,
            created_by_id=creator.id,
            guide_id=guide.id if guide else None,
            title=title,
            description="Guided morning hike through the wadi with breakfast.",
            start_at=datetime(2030, 1, 1, 6, 30, tzinfo=timezone.utc) + timedelta(days=days_ahead),
            itinerary=["Meet", "Hike"],
            requirements=["Water"],
            price_aed=150,
            capacity=capacity,
            status=status.value,
            published_at=datetime.now(timezone.utc) if status == EventStatus.PUBLISHED else None,
        )
        db_session.add(event)
        db_session.commit()
        db_session.refresh(event)
        return event

    return _make_event


@pytest.fixture(scope="function")
def published_event(make_event, tenant: Tenant, location: Location, owner_user: User) -> Event:
    return make_event(tenant, location, owner_user)
