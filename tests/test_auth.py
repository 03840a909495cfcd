# =============================================================================
# tests/test_auth.py - Magic-Link Authentication Tests
# =============================================================================
# Tests cover:
# - Requesting a magic link (email sent, token stored hashed)
# - Exchanging the link for a session (database strategy in test mode,
#   JWT strategy in production)
# - Single-use and expiry rules
# - /me, /verify and /sign-out
# =============================================================================

from datetime import timedelta

from fastapi.security import HTTPAuthorizationCredentials
from jose import jwt
from sqlalchemy import func, select, update

from app.auth import get_current_user_optional
from core.models.db import User, VerificationToken
from core.services.auth_service import JWT_ALGORITHM, build_magic_link_url
from lib.resend_client import ResendError
from lib.utils import hash_token, utcnow


def _count(database, model) -> int:
    with database.session() as session:
        return session.execute(select(func.count()).select_from(model)).scalar_one()


# =============================================================================
# Magic Link
# =============================================================================

class TestRequestMagicLink:
    """Tests for POST /api/v1/auth/magic-link."""

    def test_sends_link_and_stores_hashed_token(self, client, mailer, database, last_magic_link):
        response = client.post("/api/v1/auth/magic-link", json={"email": "maker@example.com"})

        assert response.status_code == 202
        assert response.json()["message"] == "Check your email for a sign-in link"

        to, url = mailer.send_magic_link.call_args.args
        assert to == "maker@example.com"
        assert url.startswith("http://localhost:8000/api/v1/auth/callback?")

        email, token = last_magic_link()
        with database.session() as session:
            row = session.get(VerificationToken, (email, hash_token(token)))
            assert row is not None
            assert row.token != token

    def test_email_is_normalized(self, client, last_magic_link):
        client.post("/api/v1/auth/magic-link", json={"email": "Maker@Example.com"})

        email, _ = last_magic_link()
        assert email == "maker@example.com"

    def test_invalid_email_returns_422(self, client, mailer):
        response = client.post("/api/v1/auth/magic-link", json={"email": "not-an-email"})

        assert response.status_code == 422
        assert response.json()["code"] == "VALIDATION_ERROR"
        mailer.send_magic_link.assert_not_called()

    def test_delivery_failure_returns_502_and_keeps_no_token(self, client, mailer, database):
        mailer.send_magic_link.side_effect = ResendError("Resend rejected the email (401)")

        response = client.post("/api/v1/auth/magic-link", json={"email": "maker@example.com"})

        assert response.status_code == 502
        assert response.json()["code"] == "EMAIL_DELIVERY_FAILED"
        assert _count(database, VerificationToken) == 0


def test_build_magic_link_url():
    url = build_magic_link_url("https://pdx.diy/", "a@b.c", "tok")

    assert url == "https://pdx.diy/api/v1/auth/callback?email=a%40b.c&token=tok"


# =============================================================================
# Callback (database strategy)
# =============================================================================

class TestCallback:
    """Tests for GET /api/v1/auth/callback in test mode."""

    def test_issues_database_session(self, client, sign_in_as, database):
        body = sign_in_as(client)

        assert body["strategy"] == "database"
        assert body["token_type"] == "bearer"
        assert body["user"]["email"] == "maker@example.com"
        assert body["user"]["email_verified"] is not None
        assert _count(database, User) == 1

    def test_identifies_user_in_analytics(self, client, sign_in_as, posthog_client):
        body = sign_in_as(client)

        posthog_client.set.assert_called_once_with(
            distinct_id=body["user"]["id"],
            properties={"email_verified": True},
        )

    def test_second_sign_in_reuses_user(self, client, sign_in_as, database):
        first = sign_in_as(client)
        second = sign_in_as(client)

        assert first["user"]["id"] == second["user"]["id"]
        assert first["access_token"] != second["access_token"]
        assert _count(database, User) == 1

    def test_unknown_token_returns_400(self, client):
        response = client.get(
            "/api/v1/auth/callback",
            params={"email": "maker@example.com", "token": "made-up"},
        )

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_MAGIC_LINK"

    def test_token_is_single_use(self, client, last_magic_link):
        client.post("/api/v1/auth/magic-link", json={"email": "maker@example.com"})
        email, token = last_magic_link()

        first = client.get("/api/v1/auth/callback", params={"email": email, "token": token})
        second = client.get("/api/v1/auth/callback", params={"email": email, "token": token})

        assert first.status_code == 200
        assert second.status_code == 400

    def test_token_bound_to_email(self, client, last_magic_link):
        client.post("/api/v1/auth/magic-link", json={"email": "maker@example.com"})
        _, token = last_magic_link()

        response = client.get("/api/v1/auth/callback", params={"email": "other@example.com", "token": token})

        assert response.status_code == 400

    def test_expired_token_returns_400(self, client, database, last_magic_link):
        client.post("/api/v1/auth/magic-link", json={"email": "maker@example.com"})
        email, token = last_magic_link()
        with database.session() as session:
            session.execute(
                update(VerificationToken).values(expires=utcnow() - timedelta(minutes=1))
            )

        response = client.get("/api/v1/auth/callback", params={"email": email, "token": token})

        assert response.status_code == 400
        assert _count(database, User) == 0
        assert _count(database, VerificationToken) == 0

    def test_expired_tokens_purged_on_next_request(self, client, database):
        with database.session() as session:
            session.add(VerificationToken(
                identifier="old@example.com",
                token=hash_token("stale"),
                expires=utcnow() - timedelta(hours=1),
            ))

        client.post("/api/v1/auth/magic-link", json={"email": "maker@example.com"})

        with database.session() as session:
            identifiers = session.execute(select(VerificationToken.identifier)).scalars().all()
        assert identifiers == ["maker@example.com"]


# =============================================================================
# Session Endpoints (database strategy)
# =============================================================================

class TestDatabaseSessions:
    """Tests for /me, /verify and /sign-out with database sessions."""

    def test_me(self, client, auth_headers):
        response = client.get("/api/v1/auth/me", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["email"] == "maker@example.com"

    def test_verify(self, client, auth_headers):
        response = client.get("/api/v1/auth/verify", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["valid"] is True
        assert response.json()["email"] == "maker@example.com"

    def test_unknown_session_token_returns_401(self, client):
        response = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer nope"})

        assert response.status_code == 401

    def test_missing_token_is_rejected(self, client):
        response = client.get("/api/v1/auth/me")

        assert response.status_code in (401, 403)

    def test_sign_out_revokes_session(self, client, auth_headers):
        response = client.post("/api/v1/auth/sign-out", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {"signed_out": True, "strategy": "database"}
        assert client.get("/api/v1/auth/me", headers=auth_headers).status_code == 401
        assert client.post("/api/v1/auth/sign-out", headers=auth_headers).status_code == 401


# =============================================================================
# JWT Sessions (production)
# =============================================================================

class TestJwtSessions:
    """Tests for the production JWT strategy."""

    def test_callback_issues_signed_jwt(self, production_client, sign_in_as, production_settings):
        body = sign_in_as(production_client)

        assert body["strategy"] == "jwt"
        payload = jwt.decode(
            body["access_token"],
            production_settings.AUTH_SECRET,
            algorithms=[JWT_ALGORITHM],
        )
        assert payload["sub"] == body["user"]["id"]
        assert payload["email"] == "maker@example.com"
        assert payload["exp"] - payload["iat"] == production_settings.SESSION_MAX_AGE_SECONDS

    def test_me_with_jwt(self, production_client, sign_in_as):
        token = sign_in_as(production_client)["access_token"]

        response = production_client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200
        assert response.json()["email"] == "maker@example.com"

    def test_jwt_signed_with_other_secret_is_rejected(self, production_client):
        now = int(utcnow().timestamp())
        token = jwt.encode(
            {"sub": "user-1", "iat": now, "exp": now + 60},
            "some-other-secret",
            algorithm=JWT_ALGORITHM,
        )

        response = production_client.get("/api/v1/auth/verify", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401

    def test_expired_jwt_is_rejected(self, production_client, production_settings):
        now = int(utcnow().timestamp())
        token = jwt.encode(
            {"sub": "user-1", "iat": now - 120, "exp": now - 60},
            production_settings.AUTH_SECRET,
            algorithm=JWT_ALGORITHM,
        )

        response = production_client.get("/api/v1/auth/verify", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json()["detail"] == "Token has expired"

    def test_jwt_without_subject_is_rejected(self, production_client, production_settings):
        now = int(utcnow().timestamp())
        token = jwt.encode(
            {"email": "maker@example.com", "iat": now, "exp": now + 60},
            production_settings.AUTH_SECRET,
            algorithm=JWT_ALGORITHM,
        )

        response = production_client.get("/api/v1/auth/verify", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid token: malformed claims"

    def test_jwt_with_empty_subject_is_rejected(self, production_client, production_settings):
        now = int(utcnow().timestamp())
        token = jwt.encode(
            {"sub": "", "iat": now, "exp": now + 60},
            production_settings.AUTH_SECRET,
            algorithm=JWT_ALGORITHM,
        )

        response = production_client.get("/api/v1/auth/verify", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid token: missing user ID"

    def test_sign_out_is_client_side(self, production_client, sign_in_as):
        token = sign_in_as(production_client)["access_token"]

        response = production_client.post("/api/v1/auth/sign-out", headers={"Authorization": f"Bearer {token}"})

        assert response.json() == {"signed_out": True, "strategy": "jwt"}


# =============================================================================
# Optional Authentication
# =============================================================================

class TestOptionalUser:
    """Tests for get_current_user_optional."""

    def test_no_credentials_returns_none(self, settings, db_session):
        assert get_current_user_optional(settings, db_session, None) is None

    def test_invalid_credentials_return_none(self, settings, db_session):
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials="nope")

        assert get_current_user_optional(settings, db_session, credentials) is None
