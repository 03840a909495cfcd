# =============================================================================
# lib/resend_client.py - Resend Email Client
# =============================================================================
# Sends magic-link emails through Resend's HTTP API.
#
# Usage:
#   mailer = ResendClient(api_key=settings.AUTH_RESEND_KEY, sender=settings.AUTH_RESEND_FROM)
#   mailer.send_magic_link("someone@example.com", "https://pdx.diy/auth/callback?...")
# =============================================================================

from __future__ import annotations

import html as html_lib
import logging

import httpx

from lib.utils import ApplicationError

logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"


class ResendError(ApplicationError):
    """Email could not be handed to Resend."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, code="RESEND_ERROR", **kwargs)


class ResendClient:
    """Minimal client for Resend's send-email endpoint."""

    def __init__(
        self,
        api_key: str,
        sender: str,
        api_url: str = RESEND_API_URL,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.api_key = api_key
        self.sender = sender
        self.api_url = api_url
        self.timeout = timeout
        self._transport = transport

    def send_email(self, to: str, subject: str, html: str, text: str) -> str:
        """
        Send one email.

        Returns:
            The Resend message id

        Raises:
            ResendError: On HTTP or network failure
        """
        payload = {
            "from": self.sender,
            "to": [to],
            "subject": subject,
            "html": html,
            "text": text,
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}

        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.post(self.api_url, json=payload, headers=headers)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ResendError(
                f"Resend rejected the email ({e.response.status_code}): {e.response.text[:200]}",
                suggestion="Check AUTH_RESEND_KEY and that AUTH_RESEND_FROM is a verified sender",
            ) from e
        except httpx.HTTPError as e:
            raise ResendError(f"Could not reach Resend: {e}") from e

        message_id = response.json().get("id", "")
        logger.debug(f"Sent email {message_id} to {to}")
        return message_id

    def send_magic_link(self, to: str, url: str) -> str:
        """Send the sign-in email containing the magic link."""
        subject = "Sign in to PDX-DIY"
        text = f"Sign in to PDX-DIY\n\n{url}\n\nIf you did not request this email you can safely ignore it.\n"
        html = (
            "<p>Sign in to PDX-DIY</p>"
            f'<p><a href="{html_lib.escape(url, quote=True)}">Sign in</a></p>'
            "<p>If you did not request this email you can safely ignore it.</p>"
        )
        return self.send_email(to, subject, html, text)
