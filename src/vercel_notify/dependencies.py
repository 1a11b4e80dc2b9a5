"""FastAPI dependency injection providers."""

from fastapi import Request

from vercel_notify.config import Settings
from vercel_notify.services.telegram import TelegramClient


def get_settings(request: Request) -> Settings:
    """Return the settings assembled at application start."""
    return request.app.state.settings


def get_telegram_client(request: Request) -> TelegramClient:
    return request.app.state.telegram_client


def get_trace_id(request: Request) -> str:
    """Extract trace_id from request state (set by middleware)."""
    return getattr(request.state, "trace_id", "unknown")
