"""Validation helpers for user-entered values."""

from __future__ import annotations

from dataclasses import dataclass

MAX_TOKEN_LENGTH = 256


@dataclass
class TokenInfo:
    normalized: str | None
    error: str | None = None


def parse_token(raw_value: str) -> TokenInfo:
    """Check the shape of a bot token before asking Telegram about it."""

    token = raw_value.strip()
    if not token:
        return TokenInfo(None, "Token cannot be empty")
    if len(token) > MAX_TOKEN_LENGTH:
        return TokenInfo(None, f"Token too long (max {MAX_TOKEN_LENGTH} characters)")

    bot_id, sep, secret = token.partition(":")
    if not sep or not bot_id.isdigit() or not secret:
        return TokenInfo(None, "Token must look like <bot_id>:<secret>")
    return TokenInfo(token)
