# =============================================================================
# app/routers/events.py - Event Endpoints
# =============================================================================
# Creating an event requires authentication.
# Listing and reading events is public.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Depends, Path, status

from app.auth import AuthUser, get_current_user
from app.dependencies import AnalyticsDep, DbSessionDep
from core.models.event import EventCreate, EventList, EventResponse
from core.services.event_service import EventService
from lib.analytics import capture_event

router = APIRouter()


@router.post("", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
def create_event(
    request: EventCreate,
    db: DbSessionDep,
    analytics: AnalyticsDep,
    user: AuthUser = Depends(get_current_user),
) -> EventResponse:
    """
    Create a new event.

    The authenticated user becomes the event's creator.
    """
    event = EventService.create_event(db, title=request.title, user_id=user.id)

    capture_event(analytics, user.id, "event_created", {"event_id": event.id})

    return EventResponse.model_validate(event)


@router.get("", response_model=EventList)
def list_events(db: DbSessionDep) -> EventList:
    """
    List all events, newest first.

    Public endpoint.
    """
    events = EventService.list_events(db)
    return EventList(
        events=[EventResponse.model_validate(e) for e in events],
        total=len(events),
    )


@router.get("/{event_id}", response_model=EventResponse)
def get_event(
    event_id: Annotated[str, Path(description="Event ID")],
    db: DbSessionDep,
) -> EventResponse:
    """
    Get one event.

    Raises:
        404: If the event doesn't exist
    """
    return EventResponse.model_validate(EventService.get_event(db, event_id))
