# =============================================================================
# lib/analytics.py - Server-side PostHog Analytics
# =============================================================================
# Wraps the PostHog SDK with:
# - A lazily-created, lock-guarded client handle (one client per app)
# - Safe helpers that never let analytics failures break a request
#
# The handle is created in create_app() and stored on app.state. It builds
# its client from POSTHOG_KEY / POSTHOG_HOST on first use; shutdown()
# flushes pending events and clears the handle so the next use re-creates it.
#
# Usage:
#   analytics = AnalyticsHandle(settings)
#   capture_event(analytics, user_id, "event_created", {"event_id": event_id})
#   analytics.shutdown()
# =============================================================================

from __future__ import annotations

import logging
import threading
from typing import Any

from posthog import Posthog

logger = logging.getLogger(__name__)


class AnalyticsHandle:
    """
    Lazily-constructed PostHog client.

    get() is safe to call from many threads; only one client is ever
    created per handle until shutdown() clears it.
    """

    def __init__(self, settings, client_factory=Posthog):
        self._api_key = settings.POSTHOG_KEY
        self._host = settings.POSTHOG_HOST
        self._client_factory = client_factory
        self._client: Posthog | None = None
        self._lock = threading.Lock()

    @property
    def is_initialized(self) -> bool:
        return self._client is not None

    def get(self) -> Posthog:
        """Get or create the PostHog client."""
        client = self._client
        if client is not None:
            return client

        with self._lock:
            if self._client is None:
                self._client = self._client_factory(self._api_key, host=self._host)
                logger.info(f"PostHog client initialized for {self._host}")
            return self._client

    def shutdown(self) -> None:
        """
        Flush pending events and clear the client.

        Call on application shutdown or in test teardown.
        """
        with self._lock:
            client, self._client = self._client, None

        if client is not None:
            client.shutdown()
            logger.info("PostHog client shut down")


# =============================================================================
# Safe Helpers
# =============================================================================

def capture_event(
    analytics: AnalyticsHandle,
    distinct_id: str,
    event: str,
    properties: dict[str, Any] | None = None,
) -> None:
    """
    Capture an event, logging instead of raising on failure.

    Args:
        analytics: The app's analytics handle
        distinct_id: Unique identifier for the user/session
        event: Event name (e.g., 'event_created')
        properties: Optional event properties

    Example:
        capture_event(analytics, "user123", "button_clicked", {"button_name": "signup"})
    """
    trimmed_distinct_id = (distinct_id or "").strip()
    trimmed_event = (event or "").strip()

    if not trimmed_distinct_id:
        logger.error("PostHog capture_event: distinct_id must be a non-empty string")
        return

    if not trimmed_event:
        logger.error("PostHog capture_event: event must be a non-empty string")
        return

    try:
        analytics.get().capture(
            event=trimmed_event,
            distinct_id=trimmed_distinct_id,
            properties=dict(properties or {}),
        )
    except Exception as e:
        logger.error(f"Failed to capture PostHog event: {e}")


def identify_user(
    analytics: AnalyticsHandle,
    distinct_id: str,
    properties: dict[str, Any] | None = None,
) -> None:
    """
    Set person properties for a user.

    Only send non-sensitive data. Never include passwords or tokens.
    """
    trimmed_distinct_id = (distinct_id or "").strip()
    if not trimmed_distinct_id:
        logger.warning("PostHog identify_user: distinct_id must be a non-empty string")
        return

    if properties is not None and not isinstance(properties, dict):
        logger.warning("PostHog identify_user: properties must be a dict")
        return

    try:
        analytics.get().set(distinct_id=trimmed_distinct_id, properties=properties or {})
    except Exception as e:
        logger.error(f"Failed to identify user in PostHog: {e}")


def get_feature_flags(
    analytics: AnalyticsHandle,
    distinct_id: str,
    groups: dict[str, str] | None = None,
) -> dict[str, bool | str] | None:
    """All feature flags for a user, or None if unavailable."""
    try:
        return analytics.get().get_all_flags(distinct_id, groups=groups or {})
    except Exception as e:
        logger.error(f"Failed to get feature flags from PostHog: {e}")
        return None


def is_feature_enabled(
    analytics: AnalyticsHandle,
    distinct_id: str,
    flag_key: str,
    groups: dict[str, str] | None = None,
) -> bool:
    """Whether one flag is on for a user. False on any failure."""
    try:
        result = analytics.get().feature_enabled(flag_key, distinct_id, groups=groups or {})
        return bool(result)
    except Exception as e:
        logger.error(f"Failed to check feature flag in PostHog: {e}")
        return False
