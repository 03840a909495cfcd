# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# Provides dependency injection for authentication.
#
# The session strategy follows the runtime mode:
# - production:        Bearer token is an HS256 JWT signed with AUTH_SECRET
# - development/test:  Bearer token is a database session token
#
# Usage:
#   from app.auth import get_current_user, AuthUser
#
#   @router.get("/protected")
#   async def protected(user: AuthUser = Depends(get_current_user)):
#       return {"user_id": user.id}
# =============================================================================

import logging
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt
from pydantic import ValidationError

from app.auth.models import AuthUser, TokenPayload
from app.dependencies import DbSessionDep, SettingsDep
from core.services.auth_service import JWT_ALGORITHM, AuthService

logger = logging.getLogger(__name__)

# HTTP Bearer token extractor
security = HTTPBearer()
security_optional = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _user_from_jwt(token: str, secret: str) -> AuthUser:
    try:
        payload = jwt.decode(token, secret, algorithms=[JWT_ALGORITHM])
    except ExpiredSignatureError:
        logger.warning("JWT token has expired")
        raise _unauthorized("Token has expired")
    except JWTError as e:
        logger.warning(f"JWT validation failed: {e}")
        raise _unauthorized(f"Invalid token: {str(e)}")

    try:
        claims = TokenPayload.model_validate(payload)
    except ValidationError as e:
        logger.warning(f"JWT claims are malformed: {e.error_count()} error(s)")
        raise _unauthorized("Invalid token: malformed claims")

    if not claims.sub:
        logger.warning("JWT token missing 'sub' claim")
        raise _unauthorized("Invalid token: missing user ID")

    return AuthUser(id=claims.sub, email=claims.email)


def get_current_user(
    settings: SettingsDep,
    db: DbSessionDep,
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> AuthUser:
    """
    Resolve the user behind a Bearer session token.

    Returns:
        AuthUser: The authenticated user

    Raises:
        HTTPException: 401 if the token is invalid or expired
    """
    token = credentials.credentials

    if settings.session_strategy == "jwt":
        return _user_from_jwt(token, settings.AUTH_SECRET)

    user = AuthService.get_session_user(db, token)
    if user is None:
        logger.warning("Unknown or expired session token")
        raise _unauthorized("Session is invalid or has expired")

    logger.debug(f"Authenticated user: {user.id}")
    return AuthUser(id=user.id, email=user.email)


def get_current_user_optional(
    settings: SettingsDep,
    db: DbSessionDep,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_optional),
) -> Optional[AuthUser]:
    """
    Optionally get the current user.

    Returns None if no token is provided or the token is invalid.
    """
    if credentials is None:
        return None

    try:
        return get_current_user(settings, db, credentials)
    except HTTPException:
        return None
