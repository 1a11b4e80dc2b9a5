"""Telegram Bot API client — delivers formatted notifications via ``sendMessage``."""

from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from vercel_notify.models.telegram import ParseMode, SendMessagePayload, TelegramResponse

logger = logging.getLogger(__name__)


class TelegramClient:
    """Sends messages to a chat through a bot.

    The bot token is part of the request path, so request URLs are never
    logged. Every delivery outcome, including transport faults, is reported
    as a boolean; nothing is retried.
    """

    def __init__(
        self,
        bot_token: str | None,
        api_base: str = "https://api.telegram.org",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._bot_token = bot_token
        self._api_base = api_base.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    def _method_url(self, method: str) -> str:
        return f"{self._api_base}/bot{self._bot_token}/{method}"

    async def send_message(
        self,
        chat_id: str | int,
        text: str,
        parse_mode: ParseMode | None = None,
    ) -> bool:
        """Send ``text`` to ``chat_id``.

        Returns:
            True only when Telegram answers 2xx with ``ok: true``.
        """
        if not self._bot_token:
            logger.error("Telegram bot token not configured, cannot send to chat_id %s", chat_id)
            return False

        payload = SendMessagePayload(chat_id=chat_id, text=text, parse_mode=parse_mode)

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(
                    self._method_url("sendMessage"),
                    json=payload.model_dump(mode="json", exclude_none=True),
                    headers={"Content-Type": "application/json"},
                )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.error(
                "Network error sending Telegram message to chat_id %s: %s",
                chat_id,
                type(exc).__name__,
            )
            return False

        if not response.is_success:
            return self._report_http_error(chat_id, response)

        try:
            data = TelegramResponse.model_validate_json(response.content)
        except ValidationError:
            logger.error(
                "Telegram API returned HTTP %s for chat_id %s with an unreadable body",
                response.status_code,
                chat_id,
            )
            return False

        if not data.ok:
            logger.error(
                "Telegram API reported not OK for chat_id %s: %s",
                chat_id,
                data.description,
            )
            return False

        message_id = data.result.get("message_id") if isinstance(data.result, dict) else None
        logger.info("Message sent to chat_id %s (message_id=%s)", chat_id, message_id)
        return True

    @staticmethod
    def _report_http_error(chat_id: str | int, response: httpx.Response) -> bool:
        """Log a non-2xx answer, falling back to the raw status when the body is unreadable."""
        try:
            error = TelegramResponse.model_validate_json(response.content)
        except ValidationError:
            logger.error(
                "Telegram API error for chat_id %s: HTTP %s %s (unparseable error body)",
                chat_id,
                response.status_code,
                response.reason_phrase,
            )
            return False

        logger.error(
            "Telegram API error for chat_id %s: HTTP %s (error_code=%s) %s",
            chat_id,
            response.status_code,
            error.error_code,
            error.description or response.reason_phrase,
        )
        return False
