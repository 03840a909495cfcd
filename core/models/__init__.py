# =============================================================================
# core/models/ - Data Models
# =============================================================================
# This package contains:
# - db.py: SQLAlchemy tables (user, session, verification_token, event)
# - event.py: Event request/response schemas
#
# The pydantic schemas define the "contract" between API and clients.
# =============================================================================

from .db import Base, Event, User, UserSession, VerificationToken
from .event import EventCreate, EventList, EventResponse

__all__ = [
    # Tables
    "Base",
    "Event",
    "User",
    "UserSession",
    "VerificationToken",
    # Event schemas
    "EventCreate",
    "EventList",
    "EventResponse",
]
