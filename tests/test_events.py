# =============================================================================
# tests/test_events.py - Event Endpoint Tests
# =============================================================================
# Tests cover:
# - Creating events (auth required, title validation, analytics capture)
# - Listing events (public, newest first)
# - Reading one event (404 for unknown IDs)
# =============================================================================

import pytest


def _create(client, headers, title="Bike repair night"):
    return client.post("/api/v1/events", json={"title": title}, headers=headers)


class TestCreateEvent:
    """Tests for POST /api/v1/events."""

    def test_create_event(self, client, auth_headers):
        me = client.get("/api/v1/auth/me", headers=auth_headers).json()

        response = _create(client, auth_headers, "  Bike repair night ")

        assert response.status_code == 201
        data = response.json()
        assert data["title"] == "Bike repair night"
        assert data["created_by_id"] == me["id"]
        assert data["id"]
        assert data["created_at"]

    def test_capture_is_sent(self, client, auth_headers, posthog_client):
        event = _create(client, auth_headers).json()

        posthog_client.capture.assert_called_once_with(
            event="event_created",
            distinct_id=event["created_by_id"],
            properties={"event_id": event["id"]},
        )

    def test_requires_authentication(self, client):
        response = _create(client, headers={})

        assert response.status_code in (401, 403)
        assert client.get("/api/v1/events").json()["total"] == 0

    def test_invalid_session_is_rejected(self, client):
        response = _create(client, headers={"Authorization": "Bearer nope"})

        assert response.status_code == 401

    @pytest.mark.parametrize("title,message", [
        ("", "Title is required"),
        ("x" * 121, "Title is too long"),
        ("two\nlines", "Title must be a single line"),
    ])
    def test_invalid_title_returns_422(self, client, auth_headers, title, message):
        response = _create(client, auth_headers, title)

        assert response.status_code == 422
        body = response.json()
        assert body["code"] == "VALIDATION_ERROR"
        assert body["errors"][0]["field"] == "body.title"
        assert body["errors"][0]["message"] == message

    def test_analytics_failure_does_not_fail_request(self, client, auth_headers, posthog_client):
        posthog_client.capture.side_effect = RuntimeError("PostHog is down")

        response = _create(client, auth_headers)

        assert response.status_code == 201

    def test_create_with_production_jwt(self, production_client, sign_in_as):
        token = sign_in_as(production_client)["access_token"]

        response = _create(production_client, {"Authorization": f"Bearer {token}"})

        assert response.status_code == 201


class TestReadEvents:
    """Tests for GET /api/v1/events and GET /api/v1/events/{id}."""

    def test_list_is_public(self, client):
        response = client.get("/api/v1/events")

        assert response.status_code == 200
        assert response.json() == {"events": [], "total": 0}

    def test_list_newest_first(self, client, auth_headers):
        _create(client, auth_headers, "First")
        _create(client, auth_headers, "Second")

        data = client.get("/api/v1/events").json()

        assert data["total"] == 2
        assert [e["title"] for e in data["events"]] == ["Second", "First"]

    def test_get_event(self, client, auth_headers):
        created = _create(client, auth_headers).json()

        response = client.get(f"/api/v1/events/{created['id']}")

        assert response.status_code == 200
        assert response.json() == created

    def test_get_unknown_event_returns_404(self, client):
        response = client.get("/api/v1/events/does-not-exist")

        assert response.status_code == 404
        assert response.json()["code"] == "EVENT_NOT_FOUND"
