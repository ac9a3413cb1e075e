"""Telegram Bot API adapter.

Implements the core UpdateSource port on top of getUpdates, plus getMe for
token validation. Requests are plain blocking urllib calls pushed to a worker
thread so the caller's event loop (the TUI) keeps running during long polls.
"""

from __future__ import annotations

import asyncio
import http.client
import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from typing import Any, Optional

from adapters.telegram_mapper import parse_updates_response, parse_user
from core.models import UpdatesResponse, User
from core.ports import TransientNetworkError

LOGGER = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.telegram.org"
# Extra seconds on top of the long-poll timeout before the socket gives up.
HTTP_TIMEOUT_MARGIN = 10


class TelegramBotApi:
    """Minimal Bot API client for polling and token checks."""

    def __init__(self, token: str, base_url: str = DEFAULT_BASE_URL) -> None:
        self._token = token
        self._base_url = base_url.rstrip("/")

    def _endpoint(self, method: str) -> str:
        # The URL embeds the bot token; never log it.
        return f"{self._base_url}/bot{self._token}/{method}"

    def _call(self, method: str, params: dict[str, Any], timeout: float) -> Any:
        url = self._endpoint(method)
        if params:
            url = f"{url}?{urllib.parse.urlencode(params)}"
        request = urllib.request.Request(url, method="GET")
        try:
            with urllib.request.urlopen(request, timeout=timeout) as response:
                raw = response.read()
        except urllib.error.HTTPError as e:
            try:
                body = e.read()
            except (http.client.HTTPException, OSError) as read_error:
                raise TransientNetworkError(f"{method} failed: HTTP {e.code}") from read_error
            # Telegram explains 4xx errors in a JSON body with ok=false.
            try:
                return json.loads(body.decode("utf-8"))
            except (UnicodeDecodeError, json.JSONDecodeError):
                raise TransientNetworkError(f"{method} failed: HTTP {e.code}") from e
        except urllib.error.URLError as e:
            raise TransientNetworkError(f"{method} failed: {e.reason}") from e
        except (http.client.HTTPException, OSError) as e:
            # Socket timeouts, resets and truncated bodies.
            raise TransientNetworkError(f"{method} failed: {type(e).__name__}") from e

        try:
            return json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise TransientNetworkError(f"{method} failed: invalid JSON") from e

    async def fetch_updates(self, offset: int, timeout: int) -> UpdatesResponse:
        """Long-poll getUpdates for updates with update_id >= offset."""

        params = {"offset": offset, "timeout": timeout}
        payload = await asyncio.to_thread(self._call, "getUpdates", params, timeout + HTTP_TIMEOUT_MARGIN)
        return parse_updates_response(payload)

    async def get_me(self) -> Optional[User]:
        """Return the bot user, or None if Telegram rejects the token."""

        payload = await asyncio.to_thread(self._call, "getMe", {}, HTTP_TIMEOUT_MARGIN)
        if not isinstance(payload, dict) or payload.get("ok") is not True:
            description = payload.get("description") if isinstance(payload, dict) else None
            LOGGER.info("getMe rejected: %s", description or "no description")
            return None
        return parse_user(payload.get("result"))
