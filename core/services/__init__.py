# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .auth_service import AuthService
from .event_service import EventService

__all__ = [
    "AuthService",
    "EventService",
]
