"""Integration tests for the JSON error envelope"""

import pytest
from fastapi.testclient import TestClient

from config import get_settings
from main import create_app


pytestmark = pytest.mark.integration

FRONTEND_ORIGIN = "http://localhost:5173"


@pytest.fixture
def failing_client():
    """Fresh app with a route that raises an unhandled exception."""
    application = create_app()

    def explode():
        raise RuntimeError("database password is hunter2")

    application.add_api_route("/api/v1/explode", explode, methods=["GET"])
    return TestClient(application, raise_server_exceptions=False)


class TestErrorEnvelope:
    def test_unknown_route(self, client: TestClient):
        response = client.get("/api/v1/does-not-exist", headers={"x-trace-id": "trace-404"})

        assert response.status_code == 404
        assert response.json() == {
            "error": {"code": "not_found", "message": "Resource not found.", "traceId": "trace-404"}
        }
        assert response.headers["x-trace-id"] == "trace-404"

    def test_method_not_allowed(self, client: TestClient):
        response = client.delete("/api/v1/locations")

        assert response.status_code == 405
        assert response.json()["error"]["code"] == "method_not_allowed"

    def test_validation_error_lists_issues(self, client: TestClient, db_session):
        response = client.post("/api/v1/auth/login", json={"email": "not-an-email"})

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "validation_error"
        assert error["message"] == "Request validation failed."
        paths = {issue["path"] for issue in error["details"]["issues"]}
        assert paths == {"body.email", "body.password"}
        assert error["traceId"]

    def test_malformed_uuid_path(self, client: TestClient, db_session):
        response = client.get("/api/v1/events/not-a-uuid")

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "validation_error"

    def test_api_error_has_no_details_key_when_empty(self, client: TestClient, db_session):
        response = client.get("/api/v1/events/00000000-0000-0000-0000-000000000000")

        assert response.status_code == 404
        assert "details" not in response.json()["error"]

    def test_payload_too_large(self, client: TestClient):
        limit = get_settings().MAX_BODY_BYTES

        response = client.post(
            "/api/v1/auth/login",
            content=b"x" * (limit + 1),
            headers={"content-type": "application/json"},
        )

        assert response.status_code == 413
        assert response.json()["error"]["code"] == "payload_too_large"

    def test_chunked_payload_too_large(self, client: TestClient):
        limit = get_settings().MAX_BODY_BYTES

        def chunks():
            for _ in range(limit // 65536 + 2):
                yield b" " * 65536

        response = client.post(
            "/api/v1/auth/login",
            content=chunks(),
            headers={"content-type": "application/json"},
        )

        assert response.status_code == 413
        error = response.json()["error"]
        assert error["code"] == "payload_too_large"
        assert error["traceId"] == response.headers["x-trace-id"]

    def test_chunked_body_within_limit_reaches_route(self, client: TestClient, db_session):
        def chunks():
            yield b'{"email": "nobody@test.com", '
            yield b'"password": "Trail2025pass"}'

        response = client.post(
            "/api/v1/auth/login",
            content=chunks(),
            headers={"content-type": "application/json"},
        )

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "invalid_credentials"


class TestUnhandledErrors:
    def test_internal_error_envelope(self, failing_client: TestClient):
        response = failing_client.get("/api/v1/explode")

        assert response.status_code == 500
        error = response.json()["error"]
        assert error["code"] == "internal_error"
        assert error["message"] == "Internal server error."
        assert "details" not in error
        assert error["traceId"] == response.headers["x-trace-id"]
        assert "hunter2" not in response.text

    def test_incoming_trace_id_is_kept(self, failing_client: TestClient):
        response = failing_client.get("/api/v1/explode", headers={"x-trace-id": "trace-500"})

        assert response.json()["error"]["traceId"] == "trace-500"

    def test_cors_and_security_headers_present(self, failing_client: TestClient):
        response = failing_client.get("/api/v1/explode", headers={"Origin": FRONTEND_ORIGIN})

        assert response.status_code == 500
        assert response.headers["access-control-allow-origin"] == FRONTEND_ORIGIN
        assert response.headers["x-content-type-options"] == "nosniff"
        assert "content-security-policy" in response.headers
