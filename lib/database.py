# =============================================================================
# lib/database.py - SQLAlchemy Database Wrapper
# =============================================================================
# Owns the engine (connection pool) and session factory built from
# DATABASE_URL. One Database is created per app in create_app() and stored
# on app.state; route handlers get a session through the get_db dependency.
#
# Usage:
#   db = Database(settings.DATABASE_URL)
#   with db.session() as session:
#       session.add(Event(title="Repair cafe"))
# =============================================================================

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from core.models.db import Base
from lib.utils import ApplicationError

logger = logging.getLogger(__name__)


class DatabaseError(ApplicationError):
    """Error while connecting to or querying the database."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, code="DATABASE_ERROR", **kwargs)


def normalize_database_url(url: str) -> str:
    """
    Pick the psycopg (v3) driver for plain postgres URLs.

    Example: "postgresql://u:p@host/db" -> "postgresql+psycopg://u:p@host/db"
    """
    for prefix in ("postgresql://", "postgres://"):
        if url.startswith(prefix):
            return "postgresql+psycopg://" + url[len(prefix):]
    return url


class Database:
    """
    Engine + session factory for one database URL.

    In-memory SQLite URLs share a single connection so that every session
    sees the same data.
    """

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        self.echo = echo
        self._engine: Engine | None = None
        self._session_factory: sessionmaker | None = None

    @property
    def engine(self) -> Engine:
        """Engine, created on first use."""
        if self._engine is None:
            self._engine = self._create_engine()
        return self._engine

    def _create_engine(self) -> Engine:
        url = normalize_database_url(self.url)
        engine_kwargs: dict = {"echo": self.echo}
        if url.startswith("sqlite"):
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if ":memory:" in url or url in ("sqlite://", "sqlite:///"):
                engine_kwargs["poolclass"] = StaticPool
        else:
            engine_kwargs["pool_pre_ping"] = True

        logger.info("Database engine created")
        return create_engine(url, **engine_kwargs)

    def create_all(self) -> None:
        """Create all tables (idempotent)."""
        Base.metadata.create_all(bind=self.engine)

    @property
    def session_factory(self) -> sessionmaker:
        if self._session_factory is None:
            self._session_factory = sessionmaker(
                bind=self.engine,
                autocommit=False,
                autoflush=False,
                expire_on_commit=False,
            )
        return self._session_factory

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Session that commits on success and rolls back on error."""
        session = self.session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def ping(self) -> None:
        """
        Run a trivial query.

        Raises:
            DatabaseError: If the database cannot be reached
        """
        try:
            with self.engine.connect() as connection:
                connection.execute(text("SELECT 1"))
        except Exception as e:
            raise DatabaseError(
                f"Database ping failed: {e}",
                suggestion="Check DATABASE_URL and that the database is reachable",
            ) from e

    def dispose(self) -> None:
        """Close pooled connections."""
        if self._engine is not None:
            self._engine.dispose()
            logger.info("Database connections closed")
