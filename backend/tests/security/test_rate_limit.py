"""Security tests for login rate limiting and lockout

Tests cover:
- Limiting is off when no Redis is configured
- Sliding attempt window per client
- Account failure counter and client lockout
- Successful login resets the failure counter

The limiter runs against an in-memory fakeredis server.
"""

import time
from types import SimpleNamespace

import fakeredis
import pytest
from fastapi.testclient import TestClient

from auth import rate_limit
from auth.rate_limit import rate_limiter
from config import get_settings


pytestmark = pytest.mark.security

LOGIN = "/api/v1/auth/login"
PASSWORD = "Trail2025pass"
WRONG_PASSWORD = "WrongPass1"


@pytest.fixture
def fake_redis(monkeypatch):
    """Point the shared rate limiter at an in-memory Redis."""
    server = fakeredis.FakeRedis(decode_responses=True)
    monkeypatch.setattr(rate_limiter, "_redis", server)
    monkeypatch.setattr(rate_limiter, "_connected", True)
    return server


def login(client: TestClient, password: str):
    return client.post(LOGIN, json={"email": "visitor@test.com", "password": password})


class TestWithoutRedis:
    def test_disabled_without_redis(self, client: TestClient, visitor_user):
        for _ in range(12):
            assert login(client, WRONG_PASSWORD).status_code == 401

        assert rate_limiter.redis is None


class TestAttemptWindow:
    def test_blocks_after_max_attempts(self, client: TestClient, visitor_user, fake_redis):
        settings = get_settings()
        for _ in range(settings.RATE_LIMIT_MAX_ATTEMPTS):
            assert login(client, WRONG_PASSWORD).status_code == 401

        response = login(client, PASSWORD)

        assert response.status_code == 429
        error = response.json()["error"]
        assert error["code"] == "rate_limited"
        assert error["details"] == {"retryAfter": settings.RATE_LIMIT_WINDOW_SECONDS}

    def test_attempts_below_limit_pass(self, client: TestClient, visitor_user, fake_redis):
        for _ in range(get_settings().RATE_LIMIT_MAX_ATTEMPTS - 1):
            login(client, WRONG_PASSWORD)

        assert login(client, PASSWORD).status_code == 200

    def test_old_attempts_leave_the_window(self, client: TestClient, visitor_user, fake_redis, monkeypatch):
        settings = get_settings()
        for _ in range(settings.RATE_LIMIT_MAX_ATTEMPTS):
            login(client, WRONG_PASSWORD)

        later = time.time() + settings.RATE_LIMIT_WINDOW_SECONDS + 1
        monkeypatch.setattr(rate_limit, "time", SimpleNamespace(time=lambda: later))

        assert login(client, PASSWORD).status_code == 200


class TestLockout:
    @pytest.fixture(autouse=True)
    def wide_window(self, monkeypatch):
        """Let enough attempts through the window to reach the lockout threshold."""
        settings = get_settings()
        monkeypatch.setattr(settings, "RATE_LIMIT_MAX_ATTEMPTS", settings.LOCKOUT_THRESHOLD + 5)

    def test_locks_out_after_threshold(self, client: TestClient, visitor_user, fake_redis):
        settings = get_settings()
        for _ in range(settings.LOCKOUT_THRESHOLD):
            assert login(client, WRONG_PASSWORD).status_code == 401

        response = login(client, PASSWORD)

        assert response.status_code == 429
        error = response.json()["error"]
        assert error["message"].startswith("Too many failed attempts.")
        assert 0 < error["details"]["retryAfter"] <= settings.LOCKOUT_DURATION_SECONDS

    def test_no_lockout_below_threshold(self, client: TestClient, visitor_user, fake_redis):
        for _ in range(get_settings().LOCKOUT_THRESHOLD - 1):
            login(client, WRONG_PASSWORD)

        assert login(client, PASSWORD).status_code == 200
        assert not list(fake_redis.scan_iter("uaetrail:lockout:*"))

    def test_success_clears_failure_counter(self, client: TestClient, visitor_user, fake_redis):
        for _ in range(3):
            login(client, WRONG_PASSWORD)
        assert len(list(fake_redis.scan_iter("uaetrail:failures:*"))) == 1

        assert login(client, PASSWORD).status_code == 200

        assert not list(fake_redis.scan_iter("uaetrail:failures:*"))

    def test_failures_counted_case_insensitively(self, client: TestClient, visitor_user, fake_redis):
        client.post(LOGIN, json={"email": "Visitor@Test.com", "password": WRONG_PASSWORD})
        client.post(LOGIN, json={"email": "visitor@test.com", "password": WRONG_PASSWORD})

        keys = list(fake_redis.scan_iter("uaetrail:failures:*"))
        assert len(keys) == 1
        assert fake_redis.get(keys[0]) == "2"
