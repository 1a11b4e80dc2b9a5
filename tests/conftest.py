"""Shared test fixtures."""

import hashlib
import hmac
import json
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from vercel_notify.config import Settings
from vercel_notify.services.telegram import TelegramClient

WEBHOOK_SECRET = "whsec-test-0123456789"
BOT_TOKEN = "123456:ABC-test-token"
CHAT_ID = "-1001234567890"
WEBHOOK_URL = "/api/vercel-notifications-to-telegram"

SUCCEEDED_BODY = json.dumps(
    {
        "type": "deployment.succeeded",
        "createdAt": 1700000000000,
        "payload": {
            "deployment": {
                "name": "my-app",
                "url": "my-app.vercel.app",
                "target": "production",
                "alias": ["my-app.com"],
            }
        },
    }
).encode("utf-8")


def sign(body: bytes, secret: str = WEBHOOK_SECRET, algorithm=hashlib.sha1) -> str:
    """Sign a body the way Vercel does: lowercase hex HMAC of the raw bytes."""
    return hmac.new(secret.encode("utf-8"), body, algorithm).hexdigest()


def make_settings(**overrides) -> Settings:
    values = {
        "vercel_webhook_secret": WEBHOOK_SECRET,
        "telegram_bot_token": BOT_TOKEN,
        "telegram_target_chat_id": CHAT_ID,
        "log_level": "warning",
        "json_logs": False,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def telegram():
    """A dispatcher double that reports successful delivery."""
    mock = AsyncMock(spec=TelegramClient)
    mock.send_message.return_value = True
    return mock


@pytest.fixture
def app(settings, telegram):
    """Create a test application instance with injected settings and dispatcher."""
    from vercel_notify.main import create_app

    return create_app(settings, telegram_client=telegram)


@pytest.fixture
async def client(app):
    """Async HTTP test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
