"""Health check endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from vercel_notify import __version__
from vercel_notify.config import Settings
from vercel_notify.dependencies import get_settings

router = APIRouter()


@router.get("/health")
async def health_check():
    """Return service health status."""
    return {"status": "healthy", "service": "vercel-notify", "version": __version__}


@router.get("/health/live")
async def liveness():
    """Liveness probe — always returns 200 if process is running."""
    return {"status": "alive"}


@router.get("/health/ready")
async def readiness(settings: Annotated[Settings, Depends(get_settings)]):
    """Readiness probe — reports which settings are present, never their values.

    Without a signing secret every webhook would be refused, so that case is
    not ready. A missing chat id or bot token only disables delivery.
    """
    checks = {
        "webhook_secret": "ok" if settings.webhook_secret else "missing",
        "telegram_bot_token": "ok" if settings.bot_token else "missing",
        "telegram_target_chat_id": "ok" if settings.telegram_target_chat_id else "missing",
    }
    overall_ok = checks["webhook_secret"] == "ok"

    return JSONResponse(
        status_code=200 if overall_ok else 503,
        content={
            "status": "ready" if overall_ok else "not_ready",
            "checks": checks,
        },
    )
