# =============================================================================
# core/models/db.py - Database Tables
# =============================================================================
# SQLAlchemy table definitions. Every table name carries the "pdx-diy_"
# prefix so several projects can share one database.
#
# Tables:
# - user:               People who signed in with a magic link
# - session:            Database-backed sign-in sessions (development/test)
# - verification_token: Pending magic-link tokens (hashed)
# - event:              Community events
# =============================================================================

from uuid import uuid4

from sqlalchemy import Column, DateTime, ForeignKey, Index, String, func
from sqlalchemy.orm import DeclarativeBase, relationship

from lib.utils import utcnow

TABLE_PREFIX = "pdx-diy_"


class Base(DeclarativeBase):
    """Base class for all database models"""
    pass


def _uuid_str() -> str:
    return str(uuid4())


class User(Base):
    __tablename__ = f"{TABLE_PREFIX}user"

    id = Column(String(255), primary_key=True, default=_uuid_str)
    name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=False, unique=True)
    email_verified = Column(DateTime(timezone=True), nullable=True)
    image = Column(String(255), nullable=True)

    sessions = relationship("UserSession", back_populates="user", cascade="all, delete-orphan")


class UserSession(Base):
    __tablename__ = f"{TABLE_PREFIX}session"

    session_token = Column(String(255), primary_key=True)
    user_id = Column(String(255), ForeignKey(f"{TABLE_PREFIX}user.id"), nullable=False)
    expires = Column(DateTime(timezone=True), nullable=False)

    user = relationship("User", back_populates="sessions")

    __table_args__ = (
        Index("t_user_id_idx", "user_id"),
    )


class VerificationToken(Base):
    __tablename__ = f"{TABLE_PREFIX}verification_token"

    # Email address the token was issued to
    identifier = Column(String(255), primary_key=True)
    # SHA-256 of the emailed token; the token itself is never stored
    token = Column(String(255), primary_key=True)
    expires = Column(DateTime(timezone=True), nullable=False)


class Event(Base):
    __tablename__ = f"{TABLE_PREFIX}event"

    id = Column(String(255), primary_key=True, default=_uuid_str)
    title = Column(String(255), nullable=False)
    created_by_id = Column(String(255), ForeignKey(f"{TABLE_PREFIX}user.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=utcnow, nullable=True)
