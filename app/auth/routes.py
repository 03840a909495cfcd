# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# Magic-link sign-in via Resend:
# - POST /magic-link  email a single-use sign-in link
# - GET  /callback    exchange the link's token for a session
# - GET  /me          current user's profile
# - GET  /verify      check a stored token
# - POST /sign-out    revoke a database session
# =============================================================================

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.security import HTTPAuthorizationCredentials

from app.auth.dependencies import get_current_user, security
from app.auth.models import (
    AuthUser,
    MagicLinkRequest,
    MagicLinkResponse,
    SessionTokenResponse,
    UserResponse,
)
from app.dependencies import AnalyticsDep, DbSessionDep, MailerDep, SettingsDep
from core.services.auth_service import AuthService
from lib.analytics import identify_user

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/magic-link", response_model=MagicLinkResponse, status_code=status.HTTP_202_ACCEPTED)
def request_magic_link(
    request: MagicLinkRequest,
    settings: SettingsDep,
    db: DbSessionDep,
    mailer: MailerDep,
) -> MagicLinkResponse:
    """
    Email a sign-in link.

    The link is valid once, for MAGIC_LINK_MAX_AGE_SECONDS.
    """
    AuthService.request_magic_link(db, settings, mailer, request.email)
    return MagicLinkResponse()


@router.get("/callback", response_model=SessionTokenResponse)
def magic_link_callback(
    settings: SettingsDep,
    db: DbSessionDep,
    analytics: AnalyticsDep,
    email: str = Query(..., description="Email address the link was sent to"),
    token: str = Query(..., description="Token from the sign-in link"),
) -> SessionTokenResponse:
    """
    Exchange a magic-link token for a session token.

    Raises:
        400: If the link is invalid, expired or already used
    """
    user = AuthService.consume_magic_link(db, email, token)
    issued = AuthService.issue_session(db, settings, user)

    identify_user(analytics, user.id, {"email_verified": True})

    return SessionTokenResponse(
        access_token=issued.token,
        strategy=issued.strategy,
        expires_at=issued.expires_at,
        user=UserResponse.model_validate(user),
    )


@router.get("/me", response_model=UserResponse)
def get_current_user_info(
    db: DbSessionDep,
    user: AuthUser = Depends(get_current_user),
) -> UserResponse:
    """
    Get the current authenticated user's profile.

    Raises:
        401: If not authenticated
    """
    profile = AuthService.get_user(db, user.id)
    if profile is not None:
        return UserResponse.model_validate(profile)

    # JWT sessions can outlive the user row
    return UserResponse(id=user.id, email=user.email)


@router.get("/verify")
def verify_token(
    user: AuthUser = Depends(get_current_user),
) -> dict:
    """
    Verify that the current token is valid.

    Raises:
        401: If token is invalid or expired
    """
    return {
        "valid": True,
        "user_id": user.id,
        "email": user.email
    }


@router.post("/sign-out")
def sign_out(
    settings: SettingsDep,
    db: DbSessionDep,
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> dict:
    """
    Revoke the current session.

    JWT sessions cannot be revoked server-side; clients discard the token.
    """
    if settings.session_strategy == "jwt":
        return {"signed_out": True, "strategy": "jwt"}

    if not AuthService.sign_out(db, credentials.credentials):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Session is invalid or has expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return {"signed_out": True, "strategy": "database"}
