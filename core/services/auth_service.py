# =============================================================================
# core/services/auth_service.py - Magic-Link Authentication Logic
# =============================================================================
# Sign-in flow:
# 1. request_magic_link: store a hashed single-use token and email the link
# 2. consume_magic_link: check and delete the token, upsert the user
# 3. issue_session: hand out a session under the mode's strategy
#    - production:        HS256 JWT signed with AUTH_SECRET
#    - development/test:  random token stored in the session table
# =============================================================================

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from urllib.parse import urlencode

from jose import jwt
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from app.exceptions import EmailDeliveryError, InvalidMagicLinkError
from core.models.db import User, UserSession, VerificationToken
from lib.resend_client import ResendClient, ResendError
from lib.utils import as_utc, generate_token, hash_token, utcnow

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"
CALLBACK_PATH = "/api/v1/auth/callback"


@dataclass(frozen=True)
class IssuedSession:
    token: str
    strategy: str
    expires_at: datetime


def normalize_email(email: str) -> str:
    return email.strip().lower()


def build_magic_link_url(base_url: str, email: str, token: str) -> str:
    """
    Example:
        build_magic_link_url("https://pdx.diy", "a@b.c", "tok")
        -> "https://pdx.diy/api/v1/auth/callback?email=a%40b.c&token=tok"
    """
    query = urlencode({"email": email, "token": token})
    return f"{base_url.rstrip('/')}{CALLBACK_PATH}?{query}"


class AuthService:
    """
    Service for magic-link sign-in and session management.
    """

    @staticmethod
    def request_magic_link(db: Session, settings, mailer: ResendClient, email: str) -> None:
        """
        Create a verification token and email the sign-in link.

        Expired tokens for any address are purged first.

        Raises:
            EmailDeliveryError: If Resend fails. The token is only flushed,
                so it is discarded when the caller rolls back.
        """
        email = normalize_email(email)
        token = generate_token()
        now = utcnow()
        expires = now + timedelta(seconds=int(settings.MAGIC_LINK_MAX_AGE_SECONDS))

        purged = db.execute(delete(VerificationToken).where(VerificationToken.expires <= now)).rowcount
        if purged:
            logger.info(f"Purged {purged} expired magic-link tokens")

        db.add(VerificationToken(identifier=email, token=hash_token(token), expires=expires))
        db.flush()

        url = build_magic_link_url(settings.APP_BASE_URL, email, token)
        try:
            mailer.send_magic_link(email, url)
        except ResendError as e:
            logger.error(f"Failed to send magic link: {e}")
            raise EmailDeliveryError(e.message) from e

        logger.info("Sent magic link")

    @staticmethod
    def consume_magic_link(db: Session, email: str, token: str) -> User:
        """
        Verify a magic-link token and return the (possibly new) user.

        Tokens are single use. An expired token is deleted and committed
        before the error is raised.

        Raises:
            InvalidMagicLinkError: If the token is unknown or expired
        """
        email = normalize_email(email)
        row = db.get(VerificationToken, (email, hash_token(token)))
        if row is None:
            raise InvalidMagicLinkError(email)

        db.delete(row)
        if as_utc(row.expires) <= utcnow():
            db.commit()
            raise InvalidMagicLinkError(email)
        db.flush()

        user = db.execute(select(User).where(User.email == email)).scalar_one_or_none()
        if user is None:
            user = User(email=email)
            db.add(user)
            logger.info("Created user from magic link")

        user.email_verified = utcnow()
        db.flush()
        return user

    @staticmethod
    def issue_session(db: Session, settings, user: User) -> IssuedSession:
        """Create a session for user under the active strategy."""
        now = utcnow()
        expires_at = now + timedelta(seconds=int(settings.SESSION_MAX_AGE_SECONDS))

        if settings.session_strategy == "jwt":
            payload = {
                "sub": str(user.id),
                "email": user.email,
                "iat": int(now.timestamp()),
                "exp": int(expires_at.timestamp()),
            }
            token = jwt.encode(payload, settings.AUTH_SECRET, algorithm=JWT_ALGORITHM)
            return IssuedSession(token=token, strategy="jwt", expires_at=expires_at)

        token = generate_token()
        db.add(UserSession(session_token=token, user_id=user.id, expires=expires_at))
        db.flush()
        logger.info(f"Created database session for user: {user.id}")
        return IssuedSession(token=token, strategy="database", expires_at=expires_at)

    @staticmethod
    def get_session_user(db: Session, token: str) -> User | None:
        """
        Resolve a database session token.

        Returns None for unknown or expired sessions.
        """
        session = db.get(UserSession, token)
        if session is None:
            return None
        if as_utc(session.expires) <= utcnow():
            return None
        return session.user

    @staticmethod
    def sign_out(db: Session, token: str) -> bool:
        """Delete a database session. Returns whether one was deleted."""
        result = db.execute(delete(UserSession).where(UserSession.session_token == token))
        return bool(result.rowcount)

    @staticmethod
    def get_user(db: Session, user_id: str) -> User | None:
        return db.get(User, user_id)
