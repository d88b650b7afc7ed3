from __future__ import annotations

import logging
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
import requests

from repairdesk.services.receipts import auto_send_message
from repairdesk.services.whatsapp import ReceiptDispatcher, WhatsAppCloudClient, build_dispatcher


def _response(status_code: int, payload=None, text: str = "") -> MagicMock:
    r = MagicMock()
    r.status_code = status_code
    r.ok = 200 <= status_code < 300
    r.text = text
    if payload is None:
        r.json.side_effect = ValueError("no json")
    else:
        r.json.return_value = payload
    return r


def _client(session) -> WhatsAppCloudClient:
    return WhatsAppCloudClient("tok-secret", "1234567890", session=session)


def _settings(token: str = "", phone_id: str = "") -> SimpleNamespace:
    return SimpleNamespace(
        WHATSAPP_API_TOKEN=token,
        WHATSAPP_PHONE_ID=phone_id,
        WHATSAPP_GRAPH_HOST="graph.facebook.com",
        WHATSAPP_API_VERSION="v17.0",
        WHATSAPP_TIMEOUT_SEC=None,
        COMPANY_NAME="SRI SAI TECHNOLOGIES",
        whatsapp_configured=bool(token and phone_id),
    )


def test_client_requires_both_credentials() -> None:
    with pytest.raises(RuntimeError):
        WhatsAppCloudClient("", "123")
    with pytest.raises(RuntimeError):
        WhatsAppCloudClient("tok", "  ")


def test_client_posts_expected_payload() -> None:
    session = MagicMock()
    session.post.return_value = _response(200, {"messages": [{"id": "wamid.1"}]})

    result = _client(session).send_text("919876500000", "hello")

    assert result == {"messages": [{"id": "wamid.1"}]}
    session.post.assert_called_once_with(
        "https://graph.facebook.com/v17.0/1234567890/messages",
        json={
            "messaging_product": "whatsapp",
            "to": "919876500000",
            "type": "text",
            "text": {"body": "hello"},
        },
        headers={"Authorization": "Bearer tok-secret", "Content-Type": "application/json"},
        timeout=None,
    )


def test_client_error_masks_token() -> None:
    session = MagicMock()
    session.post.return_value = _response(401, {"error": {"message": "bad token tok-secret"}})

    with pytest.raises(RuntimeError) as excinfo:
        _client(session).send_text("91", "hi")

    assert "401" in str(excinfo.value)
    assert "tok-secret" not in str(excinfo.value)


def test_client_handles_non_json_error_body() -> None:
    session = MagicMock()
    session.post.return_value = _response(502, None, text="<html>Bad gateway</html>")

    with pytest.raises(RuntimeError, match="502"):
        _client(session).send_text("91", "hi")


@pytest.mark.asyncio
async def test_dispatch_without_credentials_only_logs(ravi_job, caplog) -> None:
    dispatcher = build_dispatcher(_settings())
    assert not dispatcher.configured

    with patch("requests.Session.post") as session_post, patch("requests.post") as plain_post, \
            caplog.at_level(logging.INFO, logger="repairdesk.whatsapp"):
        await dispatcher.dispatch(ravi_job)

    session_post.assert_not_called()
    plain_post.assert_not_called()
    assert "simulating automatic send" in caplog.text
    assert "SST-0001" in caplog.text


@pytest.mark.asyncio
async def test_dispatch_sends_auto_message_to_digits_only_phone(ravi_job) -> None:
    session = MagicMock()
    session.post.return_value = _response(200, {"messages": []})
    dispatcher = ReceiptDispatcher(_client(session))

    await dispatcher.dispatch(ravi_job)

    kwargs = session.post.call_args.kwargs
    assert kwargs["json"]["to"] == "919876500000"
    assert kwargs["json"]["text"]["body"] == auto_send_message(ravi_job)


@pytest.mark.asyncio
async def test_dispatch_swallows_api_error(ravi_job, caplog) -> None:
    session = MagicMock()
    session.post.return_value = _response(400, {"error": {"message": "invalid recipient"}})
    dispatcher = ReceiptDispatcher(_client(session))

    with caplog.at_level(logging.ERROR, logger="repairdesk.whatsapp"):
        await dispatcher.dispatch(ravi_job)

    assert session.post.call_count == 1  # no retry
    assert "WhatsApp API error" in caplog.text


@pytest.mark.asyncio
async def test_dispatch_swallows_network_error(ravi_job, caplog) -> None:
    session = MagicMock()
    session.post.side_effect = requests.ConnectionError("unreachable")
    dispatcher = ReceiptDispatcher(_client(session))

    with caplog.at_level(logging.ERROR, logger="repairdesk.whatsapp"):
        await dispatcher.dispatch(ravi_job)

    assert "WhatsApp network error" in caplog.text


def test_build_dispatcher_with_credentials() -> None:
    dispatcher = build_dispatcher(_settings("tok", "555"))

    assert dispatcher.configured
    assert dispatcher.client.url == "https://graph.facebook.com/v17.0/555/messages"
