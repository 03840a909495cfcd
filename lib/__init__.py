# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable clients and utilities:
# - database.py: SQLAlchemy engine and session wrapper
# - analytics.py: PostHog client handle and safe tracking helpers
# - resend_client.py: Resend email client for magic links
# - utils.py: Shared utilities (error base class, tokens, time)
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.utils import ApplicationError

__all__ = [
    "ApplicationError",
]
