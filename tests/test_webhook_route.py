"""End-to-end tests for the Vercel webhook receiver."""

import hashlib
import json
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from conftest import CHAT_ID, SUCCEEDED_BODY, WEBHOOK_SECRET, WEBHOOK_URL, make_settings, sign
from vercel_notify.api.routes.webhook import receive_vercel_webhook
from vercel_notify.errors.exceptions import BodyReadError
from vercel_notify.main import create_app
from vercel_notify.services.telegram import TelegramClient


async def _post(client, body: bytes, signature: str | None = None, header: str = "x-vercel-signature"):
    headers = {"Content-Type": "application/json"}
    if signature is not None:
        headers[header] = signature
    return await client.post(WEBHOOK_URL, content=body, headers=headers)


def _client_for(app):
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


# ---------------------------------------------------------------------------
# Happy path
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_succeeded_event_is_forwarded(client, telegram):
    response = await _post(client, SUCCEEDED_BODY, sign(SUCCEEDED_BODY))

    assert response.status_code == 200
    assert response.json() == {"ok": True, "message": "Notification sent to Telegram."}

    telegram.send_message.assert_awaited_once()
    chat_id, text, parse_mode = telegram.send_message.await_args.args
    assert chat_id == CHAT_ID
    assert parse_mode == "MarkdownV2"
    assert "Deployment Succeeded" in text
    assert "PRODUCTION" in text
    assert "my\\-app\\.com" in text


@pytest.mark.asyncio
async def test_response_carries_trace_id(client):
    response = await _post(client, SUCCEEDED_BODY, sign(SUCCEEDED_BODY))
    assert response.headers["X-Trace-Id"].startswith("trc_")


@pytest.mark.asyncio
async def test_incoming_trace_id_is_echoed(client):
    response = await client.post(
        WEBHOOK_URL,
        content=SUCCEEDED_BODY,
        headers={"x-vercel-signature": sign(SUCCEEDED_BODY), "x-trace-id": "trc_from_caller"},
    )
    assert response.headers["X-Trace-Id"] == "trc_from_caller"


@pytest.mark.asyncio
async def test_signature_covers_exact_bytes(client, telegram):
    """Whitespace and key order are part of the signed bytes."""
    body = b'{ "type" : "deployment.canceled",\n  "payload": {"deployment": {"name": "caf\xc3\xa9"}} }'
    response = await _post(client, body, sign(body))
    assert response.status_code == 200

    reserialized = json.dumps(json.loads(body)).encode("utf-8")
    assert reserialized != body
    response = await _post(client, body, sign(reserialized))
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_unknown_event_type_is_forwarded(client, telegram):
    body = json.dumps({"type": "domain.created", "payload": {"domain": {"name": "x.dev"}}}).encode()
    response = await _post(client, body, sign(body))

    assert response.status_code == 200
    text = telegram.send_message.await_args.args[1]
    assert "`domain\\.created`" in text


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "created_at,time_line",
    [
        (10**17, "*Time:* `N/A`"),
        (1700000000000.5, "*Time:* `2023\\-11\\-14 22:13:20 UTC`"),
    ],
)
async def test_unusual_created_at_is_still_forwarded(client, telegram, created_at, time_line):
    body = json.dumps({"type": "deployment.canceled", "createdAt": created_at, "payload": {}}).encode()
    response = await _post(client, body, sign(body))

    assert response.status_code == 200
    telegram.send_message.assert_awaited_once()
    assert telegram.send_message.await_args.args[1].split("\n")[-1] == time_line


# ---------------------------------------------------------------------------
# Method and configuration checks
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.parametrize("method", ["GET", "PUT", "DELETE", "PATCH", "OPTIONS", "TRACE"])
async def test_non_post_is_rejected_with_allow_header(client, telegram, method):
    response = await client.request(method, WEBHOOK_URL)

    assert response.status_code == 405
    assert response.headers["Allow"] == "POST"
    assert response.json()["error"]["code"] == "METHOD_NOT_ALLOWED"
    telegram.send_message.assert_not_awaited()


@pytest.mark.asyncio
async def test_missing_secret_is_a_server_error(telegram):
    app = create_app(make_settings(vercel_webhook_secret=None), telegram_client=telegram)
    async with _client_for(app) as client:
        # Checked before the signature header, so even unsigned requests get 500
        unsigned = await _post(client, SUCCEEDED_BODY)
        signed = await _post(client, SUCCEEDED_BODY, sign(SUCCEEDED_BODY))

    for response in (unsigned, signed):
        assert response.status_code == 500
        assert response.json()["error"]["code"] == "CONFIGURATION_ERROR"
    telegram.send_message.assert_not_awaited()


@pytest.mark.asyncio
async def test_blank_secret_counts_as_missing(telegram):
    app = create_app(make_settings(vercel_webhook_secret="  "), telegram_client=telegram)
    async with _client_for(app) as client:
        response = await _post(client, SUCCEEDED_BODY, sign(SUCCEEDED_BODY, secret="  "))
    assert response.status_code == 500


@pytest.mark.asyncio
async def test_rejection_leaks_neither_secret_nor_digest(client):
    response = await _post(client, SUCCEEDED_BODY, "0" * 40)
    assert response.status_code == 401
    assert WEBHOOK_SECRET not in response.text
    assert sign(SUCCEEDED_BODY) not in response.text


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_missing_signature_header(client, telegram):
    response = await _post(client, SUCCEEDED_BODY)
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "AUTHENTICATION_ERROR"
    telegram.send_message.assert_not_awaited()


@pytest.mark.asyncio
async def test_error_body_carries_request_trace_id(client):
    response = await client.post(WEBHOOK_URL, content=SUCCEEDED_BODY, headers={"x-trace-id": "trc_rejected"})

    assert response.status_code == 401
    assert response.headers["X-Trace-Id"] == "trc_rejected"
    assert response.json()["error"]["trace_id"] == "trc_rejected"


@pytest.mark.asyncio
async def test_generated_trace_id_matches_error_body(client):
    response = await _post(client, SUCCEEDED_BODY, "0" * 40)
    assert response.json()["error"]["trace_id"] == response.headers["X-Trace-Id"]


@pytest.mark.asyncio
async def test_signature_length_mismatch(client, telegram):
    response = await _post(client, SUCCEEDED_BODY, sign(SUCCEEDED_BODY)[:-1])
    assert response.status_code == 401
    telegram.send_message.assert_not_awaited()


@pytest.mark.asyncio
async def test_signature_with_wrong_secret(client, telegram):
    response = await _post(client, SUCCEEDED_BODY, sign(SUCCEEDED_BODY, secret="other-secret"))
    assert response.status_code == 401
    telegram.send_message.assert_not_awaited()


@pytest.mark.asyncio
async def test_all_auth_failures_look_identical(client):
    missing = await _post(client, SUCCEEDED_BODY)
    short = await _post(client, SUCCEEDED_BODY, "deadbeef")
    wrong = await _post(client, SUCCEEDED_BODY, sign(b"something else"))

    messages = {r.json()["error"]["message"] for r in (missing, short, wrong)}
    assert len(messages) == 1
    assert {r.status_code for r in (missing, short, wrong)} == {401}


@pytest.mark.asyncio
async def test_prefixed_scheme_accepts_prefixed_header(telegram):
    settings = make_settings(vercel_signature_scheme="prefixed")
    app = create_app(settings, telegram_client=telegram)
    async with _client_for(app) as client:
        prefixed = await _post(client, SUCCEEDED_BODY, "sha1=" + sign(SUCCEEDED_BODY))
        bare = await _post(client, SUCCEEDED_BODY, sign(SUCCEEDED_BODY))

    assert prefixed.status_code == 200
    assert bare.status_code == 401
    telegram.send_message.assert_awaited_once()


@pytest.mark.asyncio
async def test_bare_scheme_rejects_prefixed_header(client, telegram):
    response = await _post(client, SUCCEEDED_BODY, "sha1=" + sign(SUCCEEDED_BODY))
    assert response.status_code == 401
    telegram.send_message.assert_not_awaited()


@pytest.mark.asyncio
async def test_custom_header_and_sha256(telegram):
    settings = make_settings(vercel_signature_header="x-hook-signature", vercel_signature_algorithm="sha256")
    app = create_app(settings, telegram_client=telegram)
    async with _client_for(app) as client:
        response = await _post(
            client,
            SUCCEEDED_BODY,
            sign(SUCCEEDED_BODY, algorithm=hashlib.sha256),
            header="x-hook-signature",
        )
    assert response.status_code == 200


# ---------------------------------------------------------------------------
# Body parsing
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        b"{not json",
        b"",
        b"[1, 2, 3]",
        b'{"payload": {}}',
        b'{"type": 42}',
    ],
)
async def test_malformed_body_after_valid_signature(client, telegram, body):
    response = await _post(client, body, sign(body))
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "MALFORMED_PAYLOAD"
    telegram.send_message.assert_not_awaited()


@pytest.mark.asyncio
async def test_malformed_body_with_bad_signature_is_401(client):
    response = await _post(client, b"{not json", sign(b"other"))
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_body_read_failure_is_server_error(settings, telegram):
    request = MagicMock()
    request.method = "POST"
    request.headers = {"x-vercel-signature": "a" * 40}
    request.body = AsyncMock(side_effect=OSError("connection reset"))

    with pytest.raises(BodyReadError) as exc_info:
        await receive_vercel_webhook(request, settings, telegram)

    assert exc_info.value.status_code == 500
    telegram.send_message.assert_not_awaited()


# ---------------------------------------------------------------------------
# Target resolution and dispatch
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_missing_chat_id_is_acknowledged(telegram):
    app = create_app(make_settings(telegram_target_chat_id=None), telegram_client=telegram)
    async with _client_for(app) as client:
        response = await _post(client, SUCCEEDED_BODY, sign(SUCCEEDED_BODY))

    assert response.status_code == 200
    assert response.json()["message"] == "Webhook received, but Telegram chat ID not configured."
    telegram.send_message.assert_not_awaited()


@pytest.mark.asyncio
async def test_missing_bot_token_is_a_server_error(telegram):
    app = create_app(make_settings(telegram_bot_token=None), telegram_client=telegram)
    async with _client_for(app) as client:
        response = await _post(client, SUCCEEDED_BODY, sign(SUCCEEDED_BODY))

    assert response.status_code == 500
    assert response.json()["error"]["code"] == "CONFIGURATION_ERROR"
    telegram.send_message.assert_not_awaited()


@pytest.mark.asyncio
async def test_dispatch_failure_is_server_error(client, telegram):
    telegram.send_message.return_value = False

    response = await _post(client, SUCCEEDED_BODY, sign(SUCCEEDED_BODY))

    assert response.status_code == 500
    assert response.json()["error"]["code"] == "DELIVERY_FAILED"
    telegram.send_message.assert_awaited_once()


@pytest.mark.asyncio
async def test_parse_mode_can_be_disabled(telegram):
    app = create_app(make_settings(telegram_parse_mode=None), telegram_client=telegram)
    async with _client_for(app) as client:
        response = await _post(client, SUCCEEDED_BODY, sign(SUCCEEDED_BODY))

    assert response.status_code == 200
    assert telegram.send_message.await_args.args[2] is None


@pytest.mark.asyncio
async def test_remote_non_2xx_maps_to_500():
    """Full path through the real dispatcher against a failing Telegram API."""
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(502, text="Bad Gateway")

    settings = make_settings()
    dispatcher = TelegramClient(
        bot_token=settings.bot_token,
        api_base=settings.telegram_api_base,
        transport=httpx.MockTransport(handler),
    )
    app = create_app(settings, telegram_client=dispatcher)
    async with _client_for(app) as client:
        response = await _post(client, SUCCEEDED_BODY, sign(SUCCEEDED_BODY))

    assert response.status_code == 500
    assert len(calls) == 1
    assert json.loads(calls[0].content)["chat_id"] == CHAT_ID
