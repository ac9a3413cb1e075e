"""Bot API client factory for botscope.

The token is read from the environment (optionally via a .env file) so it
never has to live in config.json or the repository.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

from dotenv import load_dotenv

from adapters.bot_api import DEFAULT_BASE_URL, TelegramBotApi

TOKEN_ENV = "BOT_TOKEN"
BASE_URL_ENV = "BOT_API_BASE_URL"


def read_token() -> Optional[str]:
    """Return the bot token from the environment, if one is set."""

    load_dotenv()
    token = (os.getenv(TOKEN_ENV) or "").strip()
    return token or None


def build_client(token: Optional[str] = None) -> TelegramBotApi:
    """Create a Bot API client from an explicit token or BOT_TOKEN."""

    token = token or read_token()
    # Fail fast on missing credentials instead of polling with a bad URL.
    if not token:
        raise RuntimeError(f"Missing {TOKEN_ENV} in environment")

    logging.getLogger(__name__).info("Initializing Bot API client")

    return TelegramBotApi(token, base_url=os.getenv(BASE_URL_ENV) or DEFAULT_BASE_URL)
