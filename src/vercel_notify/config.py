"""Application configuration via environment variables."""

from datetime import timezone, tzinfo
from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Vercel webhook signing
    vercel_webhook_secret: SecretStr | None = None
    vercel_signature_header: str = "x-vercel-signature"
    # "bare" expects the hex digest alone, "prefixed" expects "<algorithm>=<hex>"
    vercel_signature_scheme: Literal["bare", "prefixed"] = "bare"
    vercel_signature_algorithm: Literal["sha1", "sha256"] = "sha1"

    # Telegram
    telegram_bot_token: SecretStr | None = None
    telegram_target_chat_id: str | None = None
    telegram_api_base: str = "https://api.telegram.org"
    telegram_parse_mode: Literal["MarkdownV2", "HTML"] | None = "MarkdownV2"
    telegram_timeout_seconds: float = 10.0

    # Message rendering
    display_timezone: str = "UTC"

    # Server
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "info"
    json_logs: bool = True

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "",
        "extra": "ignore",
    }

    @field_validator(
        "vercel_webhook_secret",
        "telegram_bot_token",
        "telegram_target_chat_id",
        "telegram_parse_mode",
        mode="before",
    )
    @classmethod
    def _blank_as_none(cls, value):
        """Treat empty environment values as unset."""
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("display_timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        if value.upper() != "UTC":
            try:
                ZoneInfo(value)
            except (ZoneInfoNotFoundError, ValueError) as exc:
                raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @property
    def display_tz(self) -> tzinfo:
        """Timezone used for timestamps in messages."""
        if self.display_timezone.upper() == "UTC":
            return timezone.utc
        return ZoneInfo(self.display_timezone)

    @property
    def webhook_secret(self) -> str | None:
        """Return the plain signing secret, or None when not configured."""
        if self.vercel_webhook_secret is None:
            return None
        return self.vercel_webhook_secret.get_secret_value()

    @property
    def bot_token(self) -> str | None:
        if self.telegram_bot_token is None:
            return None
        return self.telegram_bot_token.get_secret_value()


def load_settings() -> Settings:
    """Build the process-wide settings once, at application start."""
    return Settings()
