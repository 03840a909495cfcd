# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends().
#
# Everything comes from app.state, populated once by create_app():
# - settings:  the configuration snapshot
# - database:  engine + session factory
# - analytics: lazily-created PostHog client handle
# - mailer:    Resend client for magic-link emails
# =============================================================================

from collections.abc import Iterator
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from app.config import ConfigSnapshot
from lib.analytics import AnalyticsHandle
from lib.database import Database
from lib.resend_client import ResendClient


def get_settings(request: Request) -> ConfigSnapshot:
    """Get the configuration snapshot loaded at startup."""
    return request.app.state.settings


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_db(database: Annotated[Database, Depends(get_database)]) -> Iterator[Session]:
    """
    Database session for one request.

    Commits when the handler returns, rolls back if it raises.
    """
    with database.session() as session:
        yield session


def get_analytics(request: Request) -> AnalyticsHandle:
    return request.app.state.analytics


def get_mailer(request: Request) -> ResendClient:
    return request.app.state.mailer


# Type aliases for dependency injection
SettingsDep = Annotated[ConfigSnapshot, Depends(get_settings)]
DatabaseDep = Annotated[Database, Depends(get_database)]
DbSessionDep = Annotated[Session, Depends(get_db)]
AnalyticsDep = Annotated[AnalyticsHandle, Depends(get_analytics)]
MailerDep = Annotated[ResendClient, Depends(get_mailer)]
