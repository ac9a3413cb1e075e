from __future__ import annotations

import asyncio
import http.client
import io
import json
import socket
import urllib.error
import urllib.parse
import urllib.request

import pytest

from adapters.bot_api import HTTP_TIMEOUT_MARGIN, TelegramBotApi
from core.ports import TransientNetworkError

TOKEN = "123456:SECRET-token"


class FakeResponse:
    def __init__(self, payload) -> None:
        self._body = json.dumps(payload).encode("utf-8") if not isinstance(payload, bytes) else payload

    def read(self) -> bytes:
        return self._body

    def __enter__(self) -> "FakeResponse":
        return self

    def __exit__(self, *exc) -> None:
        return None


def _install(monkeypatch, handler) -> list:
    calls = []

    def fake_urlopen(request, timeout=None):
        calls.append((request.full_url, timeout))
        return handler(request)

    monkeypatch.setattr(urllib.request, "urlopen", fake_urlopen)
    return calls


def test_fetch_updates_sends_offset_and_timeout(monkeypatch) -> None:
    payload = {
        "ok": True,
        "result": [
            {
                "update_id": 11,
                "message": {"message_id": 1, "date": 5, "chat": {"id": 9, "type": "private"}, "text": "hi"},
            }
        ],
    }
    calls = _install(monkeypatch, lambda request: FakeResponse(payload))
    client = TelegramBotApi(TOKEN, base_url="https://example.test/")

    response = asyncio.run(client.fetch_updates(11, 30))

    assert response.ok
    assert [update.update_id for update in response.updates] == [11]
    url, timeout = calls[0]
    parsed = urllib.parse.urlparse(url)
    assert parsed.path == f"/bot{TOKEN}/getUpdates"
    assert urllib.parse.parse_qs(parsed.query) == {"offset": ["11"], "timeout": ["30"]}
    assert timeout == 30 + HTTP_TIMEOUT_MARGIN


def test_http_error_with_json_body_is_returned(monkeypatch) -> None:
    def handler(request):
        body = io.BytesIO(json.dumps({"ok": False, "error_code": 409, "description": "Conflict"}).encode())
        raise urllib.error.HTTPError(request.full_url, 409, "Conflict", {}, body)

    _install(monkeypatch, handler)
    response = asyncio.run(TelegramBotApi(TOKEN).fetch_updates(1, 0))

    assert not response.ok
    assert response.description == "Conflict"


def test_http_error_without_json_raises(monkeypatch) -> None:
    def handler(request):
        raise urllib.error.HTTPError(request.full_url, 502, "Bad Gateway", {}, io.BytesIO(b"<html>"))

    _install(monkeypatch, handler)
    with pytest.raises(TransientNetworkError) as excinfo:
        asyncio.run(TelegramBotApi(TOKEN).fetch_updates(1, 0))
    assert "502" in str(excinfo.value)
    assert TOKEN not in str(excinfo.value)


@pytest.mark.parametrize(
    "error",
    [
        urllib.error.URLError("Name or service not known"),
        socket.timeout("timed out"),
        ConnectionResetError("reset"),
        http.client.RemoteDisconnected("Remote end closed connection"),
    ],
)
def test_network_failures_become_transient_errors(monkeypatch, error) -> None:
    def handler(request):
        raise error

    _install(monkeypatch, handler)
    with pytest.raises(TransientNetworkError) as excinfo:
        asyncio.run(TelegramBotApi(TOKEN).fetch_updates(1, 0))
    assert TOKEN not in str(excinfo.value)


class BrokenBody:
    def __init__(self, error: Exception) -> None:
        self.error = error

    def read(self) -> bytes:
        raise self.error

    def __enter__(self) -> "BrokenBody":
        return self

    def __exit__(self, *exc) -> None:
        return None


@pytest.mark.parametrize(
    "error",
    [http.client.IncompleteRead(b"{\"ok\": tr"), ConnectionResetError("reset")],
)
def test_truncated_body_is_transient(monkeypatch, error) -> None:
    _install(monkeypatch, lambda request: BrokenBody(error))
    with pytest.raises(TransientNetworkError) as excinfo:
        asyncio.run(TelegramBotApi(TOKEN).fetch_updates(1, 0))
    assert type(error).__name__ in str(excinfo.value)
    assert TOKEN not in str(excinfo.value)


def test_unreadable_http_error_body_is_transient(monkeypatch) -> None:
    def handler(request):
        raise urllib.error.HTTPError(request.full_url, 500, "Server Error", {}, BrokenBody(TimeoutError("timed out")))

    _install(monkeypatch, handler)
    with pytest.raises(TransientNetworkError) as excinfo:
        asyncio.run(TelegramBotApi(TOKEN).get_me())
    assert "500" in str(excinfo.value)


def test_invalid_json_is_transient(monkeypatch) -> None:
    _install(monkeypatch, lambda request: FakeResponse(b"not json"))
    with pytest.raises(TransientNetworkError):
        asyncio.run(TelegramBotApi(TOKEN).fetch_updates(1, 0))


def test_get_me_returns_bot_user(monkeypatch) -> None:
    payload = {"ok": True, "result": {"id": 123456, "is_bot": True, "first_name": "Scope", "username": "scope_bot"}}
    calls = _install(monkeypatch, lambda request: FakeResponse(payload))

    bot = asyncio.run(TelegramBotApi(TOKEN).get_me())

    assert bot is not None
    assert bot.is_bot
    assert bot.username == "scope_bot"
    assert calls[0][0].endswith("/getMe")


def test_get_me_rejected_token(monkeypatch) -> None:
    def handler(request):
        body = io.BytesIO(json.dumps({"ok": False, "error_code": 401, "description": "Unauthorized"}).encode())
        raise urllib.error.HTTPError(request.full_url, 401, "Unauthorized", {}, body)

    _install(monkeypatch, handler)
    assert asyncio.run(TelegramBotApi(TOKEN).get_me()) is None
