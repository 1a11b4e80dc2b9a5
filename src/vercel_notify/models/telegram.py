"""Telegram Bot API request and response shapes."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

ParseMode = Literal["MarkdownV2", "HTML"]


class SendMessagePayload(BaseModel):
    """Body of a ``sendMessage`` call. Dump with ``exclude_none`` so an unset mode is omitted."""

    model_config = ConfigDict(extra="forbid")

    chat_id: str | int
    text: str
    parse_mode: ParseMode | None = None


class TelegramResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    ok: bool
    result: Any = None
    description: str | None = None
    error_code: int | None = None
