# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for authentication data.
# =============================================================================

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr


class AuthUser(BaseModel):
    """
    Authenticated user resolved from a session token.

    This is the minimal user info carried by the session itself.
    """
    id: str
    email: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class UserResponse(BaseModel):
    """
    Full user response for API endpoints.

    Includes profile data from the user table.
    """
    id: str
    email: Optional[str] = None
    name: Optional[str] = None
    image: Optional[str] = None
    email_verified: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class MagicLinkRequest(BaseModel):
    """Request body for POST /auth/magic-link."""
    email: EmailStr


class MagicLinkResponse(BaseModel):
    """Response after a sign-in email was sent."""
    message: str = "Check your email for a sign-in link"


class SessionTokenResponse(BaseModel):
    """
    Issued session.

    strategy tells the client how the token is backed:
    - jwt: signed token, valid until expires
    - database: opaque token stored server-side, revocable via sign-out
    """
    access_token: str
    token_type: Literal["bearer"] = "bearer"
    strategy: Literal["jwt", "database"]
    expires_at: datetime
    user: UserResponse


class TokenPayload(BaseModel):
    """Decoded JWT session payload (production strategy)."""
    sub: str  # User ID
    email: Optional[str] = None
    exp: int  # Expiration timestamp
    iat: int  # Issued at timestamp
