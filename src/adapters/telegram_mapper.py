"""Bot API JSON to core model mapping adapter.

This keeps raw getUpdates payload details out of the core. Parsing is lenient:
a missing or malformed nested field drops only the part that depends on it,
never the whole update.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from core.models import KNOWN_UPDATE_KINDS, Chat, Message, Update, UpdatesResponse, User

LOGGER = logging.getLogger(__name__)

# Update kinds whose payload is a Message object.
MESSAGE_PAYLOAD_KINDS = ("message", "edited_message", "channel_post", "edited_channel_post")


def _as_int(value: Any) -> Optional[int]:
    # bool is an int subclass but never a valid id.
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, str) and value:
        return value
    return None


def update_kind(raw: dict[str, Any]) -> str:
    """Return the update kind, "other_<key>" for unknown payloads, or "unknown"."""

    for kind in KNOWN_UPDATE_KINDS:
        if kind in raw:
            return kind
    for key in raw:
        if key != "update_id":
            return f"other_{key}"
    return "unknown"


def parse_user(raw: Any) -> Optional[User]:
    if not isinstance(raw, dict):
        return None
    user_id = _as_int(raw.get("id"))
    if user_id is None:
        return None
    return User(
        id=user_id,
        is_bot=bool(raw.get("is_bot", False)),
        first_name=_as_str(raw.get("first_name")) or "",
        last_name=_as_str(raw.get("last_name")),
        username=_as_str(raw.get("username")),
    )


def parse_chat(raw: Any) -> Optional[Chat]:
    if not isinstance(raw, dict):
        return None
    chat_id = _as_int(raw.get("id"))
    if chat_id is None:
        return None
    return Chat(
        id=chat_id,
        type=_as_str(raw.get("type")) or "unknown",
        title=_as_str(raw.get("title")),
        username=_as_str(raw.get("username")),
        first_name=_as_str(raw.get("first_name")),
        last_name=_as_str(raw.get("last_name")),
    )


def _topic_name(raw: dict[str, Any]) -> Optional[str]:
    for key in ("forum_topic_created", "forum_topic_edited"):
        service = raw.get(key)
        if isinstance(service, dict):
            name = _as_str(service.get("name"))
            if name is not None:
                return name
    return None


def parse_message(raw: Any) -> Optional[Message]:
    """Build a Message; returns None when the chat cannot be identified."""

    if not isinstance(raw, dict):
        return None
    chat = parse_chat(raw.get("chat"))
    if chat is None:
        return None
    # Media messages carry their text in the caption.
    text = raw.get("text")
    if not isinstance(text, str):
        text = raw.get("caption") if isinstance(raw.get("caption"), str) else None
    return Message(
        message_id=_as_int(raw.get("message_id")) or 0,
        chat=chat,
        date=_as_int(raw.get("date")) or 0,
        text=text,
        thread_id=_as_int(raw.get("message_thread_id")),
        sender=parse_user(raw.get("from")),
        topic_name=_topic_name(raw),
    )


def parse_update(raw: dict[str, Any]) -> Optional[Update]:
    """Map one getUpdates entry. Returns None if it has no usable update_id."""

    update_id = _as_int(raw.get("update_id"))
    if update_id is None:
        LOGGER.warning("Skipping update without a valid update_id")
        return None

    kind = update_kind(raw)
    message = None
    if kind in MESSAGE_PAYLOAD_KINDS:
        message = parse_message(raw.get(kind))
        if message is None:
            LOGGER.debug("Update %s (%s) has no parsable message payload", update_id, kind)

    return Update(update_id=update_id, kind=kind, message=message, raw=raw)


def parse_updates_response(payload: Any) -> UpdatesResponse:
    """Map a decoded getUpdates response body."""

    if not isinstance(payload, dict):
        return UpdatesResponse(ok=False, updates=[], description="response is not a JSON object")

    ok = payload.get("ok") is True
    description = _as_str(payload.get("description"))
    result = payload.get("result")
    if not ok or not isinstance(result, list):
        return UpdatesResponse(ok=ok, updates=[], description=description)

    updates = []
    for entry in result:
        if not isinstance(entry, dict):
            continue
        update = parse_update(entry)
        if update is not None:
            updates.append(update)
    return UpdatesResponse(ok=True, updates=updates, description=description)
