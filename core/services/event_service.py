# =============================================================================
# core/services/event_service.py - Event Business Logic
# =============================================================================
# Handles event creation and lookup.
# Separates HTTP concerns from database/business logic.
# =============================================================================

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.exceptions import EventNotFoundError
from core.models.db import Event

logger = logging.getLogger(__name__)


class EventService:
    """
    Service for event operations.

    Provides a clean interface between API routes and database.
    """

    @staticmethod
    def create_event(db: Session, title: str, user_id: str) -> Event:
        """
        Create a new event owned by user_id.

        Args:
            db: Open database session
            title: Already-validated event title
            user_id: The creating user's ID

        Returns:
            The persisted Event
        """
        event = Event(title=title, created_by_id=user_id)
        db.add(event)
        db.flush()
        db.refresh(event)
        logger.info(f"Created event: {event.id} for user: {user_id}")
        return event

    @staticmethod
    def list_events(db: Session) -> list[Event]:
        """All events, newest first."""
        result = db.execute(select(Event).order_by(Event.created_at.desc()))
        return list(result.scalars().all())

    @staticmethod
    def get_event(db: Session, event_id: str) -> Event:
        """
        Get an event by ID.

        Raises:
            EventNotFoundError: If the event doesn't exist
        """
        event = db.get(Event, event_id)
        if event is None:
            raise EventNotFoundError(event_id)
        return event
