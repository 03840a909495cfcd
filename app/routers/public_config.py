# =============================================================================
# app/routers/public_config.py - Client-Exposed Configuration
# =============================================================================
# Hands browsers the NEXT_PUBLIC_* values they need to initialize
# client-side analytics. Server-only values never leave the process.
# =============================================================================

from fastapi import APIRouter

from app.dependencies import SettingsDep

router = APIRouter()


@router.get("/config/public")
async def public_config(settings: SettingsDep) -> dict:
    """Client-exposed configuration values."""
    return settings.public_config()
