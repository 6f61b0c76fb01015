"""Integration tests for the /line/webhook endpoint."""

import json
import re
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from expense_bot.app import app
from expense_bot.config import get_settings

WEBHOOK = "/line/webhook"


def _message_event(text: str, *, reply_token: str = "reply-token-1", event_id: str = "E1") -> dict:
    return {
        "type": "message",
        "mode": "active",
        "timestamp": 1736467200000,
        "webhookEventId": event_id,
        "replyToken": reply_token,
        "source": {"type": "group", "groupId": "G1", "userId": "U1"},
        "message": {"type": "text", "id": "M1", "text": text},
    }


@pytest.fixture
def store(make_store):
    return make_store()


@pytest.fixture
def reply():
    with patch("expense_bot.line.handlers.send_reply", new_callable=AsyncMock) as mock_reply:
        mock_reply.return_value = True
        yield mock_reply


@pytest.fixture
def client(settings, store):
    """TestClient with test settings, an in-memory store and a stub LINE client."""
    app.dependency_overrides[get_settings] = lambda: settings
    with (
        patch("expense_bot.line.router.get_record_store", return_value=store),
        patch("expense_bot.line.router.get_messaging_api", return_value=MagicMock()),
        TestClient(app) as test_client,
    ):
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def post_signed(client, signer):
    """POST a payload with a valid signature."""

    def _post(payload: dict | bytes):
        body = payload if isinstance(payload, bytes) else json.dumps(payload).encode()
        return client.post(
            WEBHOOK,
            content=body,
            headers={"X-Line-Signature": signer(body), "Content-Type": "application/json"},
        )

    return _post


# -- Verification and transport --


def test_zero_event_connectivity_check(post_signed, store, reply):
    """An empty batch with a valid signature returns 200 and touches nothing."""
    response = post_signed({"destination": "U0", "events": []})

    assert response.status_code == 200
    assert response.json() == {"success": True, "eventsProcessed": 0, "processedCount": 0}
    assert store.inserts == []
    reply.assert_not_called()


def test_missing_signature_returns_401(client, store):
    """No X-Line-Signature header is rejected before any processing."""
    response = client.post(WEBHOOK, json={"events": [_message_event("ค่าไฟ 500 บาท")]})

    assert response.status_code == 401
    assert store.inserts == []


def test_invalid_signature_returns_401(client, store):
    """A wrong signature is rejected before any processing."""
    body = json.dumps({"events": [_message_event("ค่าไฟ 500 บาท")]}).encode()
    response = client.post(WEBHOOK, content=body, headers={"X-Line-Signature": "bm90LXZhbGlk"})

    assert response.status_code == 401
    assert store.inserts == []


def test_malformed_json_with_valid_signature_returns_500(post_signed):
    """A correctly signed body that is not JSON is a server-side failure."""
    response = post_signed(b"{not json")
    assert response.status_code == 500


def test_get_is_not_allowed(client):
    """Only POST and OPTIONS are routed."""
    response = client.get(WEBHOOK)
    assert response.status_code == 405


def test_preflight_returns_cors_headers(client):
    """OPTIONS answers 204 with permissive CORS headers."""
    response = client.options(WEBHOOK)

    assert response.status_code == 204
    assert response.headers["access-control-allow-origin"] == "*"
    assert "X-Line-Signature" in response.headers["access-control-allow-headers"]


def test_missing_channel_secret_returns_500(settings, signer):
    """The endpoint refuses to run without a channel secret."""
    app.dependency_overrides[get_settings] = lambda: settings.model_copy(
        update={"line_channel_secret": ""}
    )
    try:
        body = b'{"events": []}'
        response = TestClient(app).post(
            WEBHOOK, content=body, headers={"X-Line-Signature": signer(body)}
        )
    finally:
        app.dependency_overrides.clear()
    assert response.status_code == 500


# -- End-to-end expense flow --


def test_rent_message_is_recorded_and_confirmed(post_signed, store, settings, reply):
    """A rent message is inserted once and confirmed with a single reply."""
    response = post_signed({"events": [_message_event("ค่าเช่า 3000 บาท")]})

    assert response.status_code == 200
    assert response.json()["eventsProcessed"] == 1
    assert response.json()["processedCount"] == 1

    expenses = store.inserted(settings.expenses_table)
    assert len(expenses) == 1
    assert expenses[0]["category"] == "rental"
    assert expenses[0]["amount"] == "3000"

    reply.assert_called_once()
    texts = reply.call_args.args[2]
    assert len(texts) == 1
    assert "3000" in texts[0]
    assert re.search(r"บันทึก.*เรียบร้อย", texts[0])


def test_redelivered_event_is_not_recorded_twice(post_signed, store, settings, reply):
    """LINE re-delivering the same event finds the stored row as a duplicate."""
    payload = {"events": [_message_event("ค่าเช่า 3000 บาท")]}

    post_signed(payload)
    response = post_signed(payload)

    assert response.status_code == 200
    assert len(store.inserted(settings.expenses_table)) == 1
    second_texts = reply.call_args_list[1].args[2]
    assert second_texts[0].startswith("ℹ️")


def test_raw_message_is_logged(post_signed, store, settings, reply):
    """Every text message is written to the raw message log."""
    post_signed({"events": [_message_event("สวัสดีครับ")]})

    logged = store.inserted(settings.messages_table)
    assert len(logged) == 1
    assert logged[0]["message_text"] == "สวัสดีครับ"
    assert logged[0]["source_id"] == "G1"
    reply.assert_not_called()


def test_unknown_event_types_are_counted_but_not_processed(post_signed, store, reply):
    """Unsupported event types are skipped without failing the batch."""
    response = post_signed({"events": [{"type": "beacon"}, {"type": "follow", "source": {"type": "user", "userId": "U1"}}]})

    assert response.status_code == 200
    assert response.json() == {"success": True, "eventsProcessed": 2, "processedCount": 0}
    assert store.inserts == []


def test_unexpected_failure_returns_500(post_signed):
    """An error escaping the batch handler is reported as a generic 500."""
    with patch("expense_bot.line.router.handle_webhook", new_callable=AsyncMock) as mock_handle:
        mock_handle.side_effect = RuntimeError("boom")
        response = post_signed({"events": []})

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "Internal server error"}
