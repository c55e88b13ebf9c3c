"""Integration tests for authentication flow

Tests cover:
- Registration, including organizer sign-ups
- Email verification
- Login with valid/invalid credentials
- Refresh token rotation and logout
- Password reset
- Current user lookup
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from models import AuditLog, OrganizerApplication, RefreshToken, User


pytestmark = pytest.mark.integration

AUTH = "/api/v1/auth"
PASSWORD = "Trail2025pass"


def register(client: TestClient, email: str = "new@test.com", **extra) -> dict:
    payload = {
        "email": email,
        "password": "Trail2025pass",
        "displayName": "New Hiker",
        **extra,
    }
    response = client.post(f"{AUTH}/register", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


class TestRegister:
    """Test POST /auth/register"""

    def test_register_visitor(self, client: TestClient, db_session: Session):
        body = register(client, email="New@Test.com")

        assert body["user"]["email"] == "new@test.com"
        assert body["user"]["role"] == "visitor"
        assert body["tokens"]["tokenType"] == "bearer"
        assert body["tokens"]["expiresIn"] == 900
        assert body["requiresEmailVerification"] is True
        assert len(body["verificationToken"]) >= 20

        user = db_session.query(User).filter(User.email == "new@test.com").one()
        assert user.email_verified_at is None
        assert user.profile.display_name == "New Hiker"
        assert db_session.query(OrganizerApplication).count() == 0

    def test_register_company_files_application(self, client: TestClient, db_session: Session):
        body = register(
            client,
            email="founder@test.com",
            accountType="company",
            organizationName="Hajar Peaks Tours",
        )

        assert body["user"]["role"] == "visitor"
        application = db_session.query(OrganizerApplication).one()
        assert application.requested_name == "Hajar Peaks Tours"
        assert application.requested_slug == "hajar-peaks-tours"
        assert application.requested_type == "company"
        assert application.status == "pending"

    def test_register_guide_without_organization_uses_display_name(self, client: TestClient, db_session: Session):
        register(client, email="solo@test.com", accountType="guide")

        application = db_session.query(OrganizerApplication).one()
        assert application.requested_name == "New Hiker"
        assert application.requested_type == "guide_owned"

    def test_duplicate_email_conflicts(self, client: TestClient, visitor_user: User):
        response = client.post(f"{AUTH}/register", json={
            "email": "visitor@test.com",
            "password": "Trail2025pass",
            "displayName": "Again",
        })

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "email_taken"

    def test_weak_password_rejected(self, client: TestClient):
        response = client.post(f"{AUTH}/register", json={
            "email": "weak@test.com",
            "password": "password",
            "displayName": "Weak",
        })

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "validation_error"
        assert error["details"]["issues"][0]["path"] == "body.password"


class TestEmailVerification:
    def test_verify_email(self, client: TestClient):
        body = register(client)
        token = body["verificationToken"]

        response = client.post(f"{AUTH}/verify-email", json={"token": token})
        assert response.status_code == 200
        assert response.json() == {"message": "Email verified successfully."}

        me = client.get(f"{AUTH}/me", headers=bearer(body["tokens"]["accessToken"]))
        assert me.json()["emailVerified"] is True

    def test_token_is_single_use(self, client: TestClient):
        token = register(client)["verificationToken"]
        client.post(f"{AUTH}/verify-email", json={"token": token})

        response = client.post(f"{AUTH}/verify-email", json={"token": token})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "invalid_token"

    def test_unknown_token(self, client: TestClient, db_session: Session):
        response = client.post(f"{AUTH}/verify-email", json={"token": "f" * 64})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "invalid_token"


class TestLogin:
    """Test POST /auth/login"""

    def test_login_success(self, client: TestClient, visitor_user: User, db_session: Session):
        response = client.post(f"{AUTH}/login", json={
            "email": "VISITOR@test.com",
            "password": PASSWORD,
        })

        assert response.status_code == 200
        body = response.json()
        assert body["user"]["id"] == str(visitor_user.id)
        assert body["emailVerified"] is True
        assert body["tokens"]["accessToken"]

        actions = [entry.action for entry in db_session.query(AuditLog).all()]
        assert "auth.login_success" in actions

    def test_wrong_password(self, client: TestClient, visitor_user: User, db_session: Session):
        response = client.post(f"{AUTH}/login", json={
            "email": "visitor@test.com",
            "password": "WrongPass1",
        })

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "invalid_credentials"

        failed = db_session.query(AuditLog).filter(AuditLog.action == "auth.login_failed").one()
        assert failed.metadata_json["reason"] == "invalid_credentials"

    def test_unknown_email_same_error(self, client: TestClient, db_session: Session):
        response = client.post(f"{AUTH}/login", json={
            "email": "nobody@test.com",
            "password": "WrongPass1",
        })

        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Invalid email or password."

    def test_suspended_account(self, client: TestClient, make_user):
        make_user("banned@test.com", status="suspended")

        response = client.post(f"{AUTH}/login", json={
            "email": "banned@test.com",
            "password": PASSWORD,
        })

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "account_suspended"


class TestRefreshAndLogout:
    def test_refresh_rotates_token(self, client: TestClient):
        old_refresh = register(client)["tokens"]["refreshToken"]

        response = client.post(f"{AUTH}/refresh", json={"refreshToken": old_refresh})
        assert response.status_code == 200
        new_refresh = response.json()["tokens"]["refreshToken"]
        assert new_refresh != old_refresh

        reuse = client.post(f"{AUTH}/refresh", json={"refreshToken": old_refresh})
        assert reuse.status_code == 401
        assert reuse.json()["error"]["code"] == "invalid_refresh_token"

        again = client.post(f"{AUTH}/refresh", json={"refreshToken": new_refresh})
        assert again.status_code == 200

    def test_access_token_is_not_a_refresh_token(self, client: TestClient):
        access = register(client)["tokens"]["accessToken"]

        response = client.post(f"{AUTH}/refresh", json={"refreshToken": access})

        assert response.status_code == 401

    def test_logout_revokes_refresh_token(self, client: TestClient):
        refresh_token = register(client)["tokens"]["refreshToken"]

        response = client.post(f"{AUTH}/logout", json={"refreshToken": refresh_token})
        assert response.status_code == 204

        after = client.post(f"{AUTH}/refresh", json={"refreshToken": refresh_token})
        assert after.status_code == 401

    def test_logout_with_unknown_token_is_ignored(self, client: TestClient, db_session: Session):
        response = client.post(f"{AUTH}/logout", json={"refreshToken": "x" * 40})

        assert response.status_code == 204


class TestPasswordReset:
    def test_forgot_password_unknown_email_same_message(self, client: TestClient, db_session: Session):
        response = client.post(f"{AUTH}/forgot-password", json={"email": "ghost@test.com"})

        assert response.status_code == 200
        assert response.json() == {"message": "If the account exists, a password reset link has been sent."}

    def test_reset_password_flow(self, client: TestClient, db_session: Session):
        register(client, email="reset@test.com")

        forgot = client.post(f"{AUTH}/forgot-password", json={"email": "reset@test.com"})
        reset_token = forgot.json()["resetToken"]

        response = client.post(f"{AUTH}/reset-password", json={
            "token": reset_token,
            "password": "NewTrail2026",
        })
        assert response.status_code == 200
        assert response.json()["message"] == "Password updated successfully."

        user = db_session.query(User).filter(User.email == "reset@test.com").one()
        active = db_session.query(RefreshToken).filter(
            RefreshToken.user_id == user.id,
            RefreshToken.revoked_at.is_(None),
        ).count()
        assert active == 0

        old = client.post(f"{AUTH}/login", json={"email": "reset@test.com", "password": "Trail2025pass"})
        assert old.status_code == 401
        new = client.post(f"{AUTH}/login", json={"email": "reset@test.com", "password": "NewTrail2026"})
        assert new.status_code == 200

        reuse = client.post(f"{AUTH}/reset-password", json={"token": reset_token, "password": "Other2026x"})
        assert reuse.status_code == 400
        assert reuse.json()["error"]["code"] == "invalid_token"


class TestMe:
    def test_me(self, client: TestClient, guide_user: User, auth_headers):
        response = client.get(f"{AUTH}/me", headers=auth_headers(guide_user))

        assert response.status_code == 200
        body = response.json()
        assert body["email"] == "guide@test.com"
        assert body["role"] == "tenant_guide"
        assert body["displayName"] == "Trail Guide"
        assert "passwordHash" not in body

    def test_me_allows_unverified(self, client: TestClient, make_user, auth_headers):
        user = make_user("fresh@test.com", verified=False)

        response = client.get(f"{AUTH}/me", headers=auth_headers(user))

        assert response.status_code == 200
        assert response.json()["emailVerified"] is False
