"""FastAPI application factory and lifespan management."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from vercel_notify import __version__
from vercel_notify.config import Settings, load_settings
from vercel_notify.logging_config import configure_logging
from vercel_notify.services.telegram import TelegramClient

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Report configuration problems once at startup instead of on every delivery."""
    settings: Settings = app.state.settings
    if not settings.webhook_secret:
        logger.error("VERCEL_WEBHOOK_SECRET is not set; every webhook will be refused with 500")
    if not settings.bot_token:
        logger.warning("TELEGRAM_BOT_TOKEN is not set; notifications cannot be delivered")
    if not settings.telegram_target_chat_id:
        logger.warning("TELEGRAM_TARGET_CHAT_ID is not set; webhooks will be acknowledged only")

    logger.info(
        "vercel-notify started (signature=%s/%s, parse_mode=%s)",
        settings.vercel_signature_algorithm,
        settings.vercel_signature_scheme,
        settings.telegram_parse_mode,
    )
    yield
    logger.info("vercel-notify shutdown complete")


def create_app(settings: Settings | None = None, telegram_client: TelegramClient | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Settings are built once here and shared through ``app.state``; route code
    never reads the environment itself.
    """
    if settings is None:
        settings = load_settings()
    configure_logging(log_level=settings.log_level, json_output=settings.json_logs)

    app = FastAPI(
        title="Vercel Notify",
        version=__version__,
        description="Relays signed Vercel webhook events to a Telegram chat.",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.telegram_client = telegram_client or TelegramClient(
        bot_token=settings.bot_token,
        api_base=settings.telegram_api_base,
        timeout=settings.telegram_timeout_seconds,
    )

    from vercel_notify.api.middleware.trace_id import TraceIdMiddleware
    app.add_middleware(TraceIdMiddleware)

    from vercel_notify.errors.handlers import register_exception_handlers
    register_exception_handlers(app)

    from vercel_notify.api.router import api_router
    app.include_router(api_router)

    return app


app = create_app()
