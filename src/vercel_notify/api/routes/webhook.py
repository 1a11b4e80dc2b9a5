"""Vercel webhook receiver — verifies, formats and forwards events to Telegram."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError

from vercel_notify.config import Settings
from vercel_notify.dependencies import get_settings, get_telegram_client
from vercel_notify.errors.exceptions import (
    AuthenticationError,
    BodyReadError,
    ConfigurationError,
    DeliveryError,
    MalformedPayloadError,
    MethodNotAllowedError,
    RelayError,
)
from vercel_notify.logging_config import bind_event_context
from vercel_notify.models.responses import AckResponse
from vercel_notify.models.webhook import VercelWebhook
from vercel_notify.services.formatter import format_vercel_message, is_known_event_type
from vercel_notify.services.signature import verify_signature
from vercel_notify.services.telegram import TelegramClient

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Webhooks"])

WEBHOOK_PATH = "/vercel-notifications-to-telegram"

# Every method is routed here so the handler, not the router, owns the 405.
_ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "TRACE", "CONNECT"]


@router.api_route(WEBHOOK_PATH, methods=_ALL_METHODS, response_model=AckResponse)
async def receive_vercel_webhook(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
    telegram: Annotated[TelegramClient, Depends(get_telegram_client)],
) -> AckResponse:
    """Handle one Vercel webhook delivery.

    The body is read as raw bytes and verified before anything parses it;
    the signature covers the exact bytes Vercel sent.
    """
    if request.method != "POST":
        raise MethodNotAllowedError("POST")

    secret = settings.webhook_secret
    if not secret:
        raise ConfigurationError("VERCEL_WEBHOOK_SECRET is not set; refusing unauthenticated webhooks")

    signature = request.headers.get(settings.vercel_signature_header)
    if not signature:
        raise AuthenticationError()

    try:
        body = await request.body()
    except Exception as exc:
        logger.error("Failed to read webhook body: %s", type(exc).__name__)
        raise BodyReadError() from exc

    authentic = verify_signature(
        body,
        signature,
        secret,
        scheme=settings.vercel_signature_scheme,
        algorithm=settings.vercel_signature_algorithm,
    )
    if not authentic:
        raise AuthenticationError()

    try:
        event = VercelWebhook.model_validate_json(body)
    except ValidationError as exc:
        logger.info("Rejected verified webhook with malformed body (%d errors)", exc.error_count())
        raise MalformedPayloadError() from exc

    bind_event_context(event.type, event.id)
    if not is_known_event_type(event.type):
        logger.info("Unhandled Vercel event type %s: %s", event.type, event.raw_payload())

    chat_id = settings.telegram_target_chat_id
    if not chat_id:
        logger.warning("TELEGRAM_TARGET_CHAT_ID not configured, acknowledging without notification")
        return AckResponse(message="Webhook received, but Telegram chat ID not configured.")

    if not settings.bot_token:
        raise ConfigurationError("TELEGRAM_BOT_TOKEN is not set")

    try:
        message = format_vercel_message(event, settings.display_tz)
    except Exception as exc:
        logger.exception("Failed to format %s event", event.type)
        raise RelayError("FORMAT_ERROR", "Failed to format notification", status_code=500) from exc

    sent = await telegram.send_message(chat_id, message, settings.telegram_parse_mode)
    if not sent:
        raise DeliveryError()

    return AckResponse(message="Notification sent to Telegram.")
