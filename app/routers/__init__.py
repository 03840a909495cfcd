# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - events.py: Event creation and the public event list
# - public_config.py: Client-exposed configuration
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import events
from . import health
from . import public_config

__all__ = [
    "events",
    "health",
    "public_config",
]
