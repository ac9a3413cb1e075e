"""Core domain models.

Received Bot API values (users, chats, messages, updates) are frozen
dataclasses. The registry aggregates (DiscoveredChat, TopicInfo) are mutable
and owned by the UpdateProcessor; everything outside the processor only sees
copies.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Optional


class ChatType:
    """Chat kinds reported by the Bot API."""

    PRIVATE = "private"
    GROUP = "group"
    SUPERGROUP = "supergroup"
    CHANNEL = "channel"


# Detection order matters: the first kind present in the payload wins.
KNOWN_UPDATE_KINDS = (
    "message",
    "edited_message",
    "channel_post",
    "edited_channel_post",
    "business_connection",
    "business_message",
    "edited_business_message",
    "deleted_business_messages",
    "message_reaction",
    "message_reaction_count",
    "inline_query",
    "chosen_inline_result",
    "callback_query",
    "shipping_query",
    "pre_checkout_query",
    "purchased_paid_media",
    "poll",
    "poll_answer",
    "my_chat_member",
    "chat_member",
    "chat_join_request",
    "chat_boost",
    "removed_chat_boost",
)

NEW_MESSAGE_KINDS = frozenset({"message", "channel_post"})
EDIT_KINDS = frozenset({"edited_message"})


@dataclass(frozen=True)
class User:
    """Sender identity."""

    id: int
    is_bot: bool
    first_name: str
    last_name: Optional[str] = None
    username: Optional[str] = None

    def label(self) -> str:
        return self.username or self.first_name


@dataclass(frozen=True)
class Chat:
    """A conversation endpoint. Negative ids are groups/channels."""

    id: int
    type: str
    title: Optional[str] = None
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    def display_name(self) -> str:
        """Return a human-readable name: title, @username, full name, then id."""

        if self.title:
            return self.title
        if self.username:
            return f"@{self.username}"
        if self.first_name:
            if self.last_name:
                return f"{self.first_name} {self.last_name}"
            return self.first_name
        return f"Chat {self.id}"


@dataclass(frozen=True)
class Message:
    """Message-like payload shared by messages, edits, and channel posts."""

    message_id: int
    chat: Chat
    date: int
    text: Optional[str] = None
    thread_id: Optional[int] = None
    sender: Optional[User] = None
    # Only set on forum topic service messages (created/edited).
    topic_name: Optional[str] = None


@dataclass(frozen=True)
class Update:
    """One event from getUpdates, tagged by kind."""

    update_id: int
    kind: str
    message: Optional[Message] = None
    raw: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def is_new_message(self) -> bool:
        return self.kind in NEW_MESSAGE_KINDS

    @property
    def is_edit(self) -> bool:
        return self.kind in EDIT_KINDS

    @property
    def chat_id(self) -> Optional[int]:
        if self.message is None:
            return None
        return self.message.chat.id


@dataclass(frozen=True)
class UpdatesResponse:
    """Result of a single getUpdates call."""

    ok: bool
    updates: list[Update]
    description: Optional[str] = None


@dataclass
class TopicInfo:
    """Per-thread aggregate inside a forum chat.

    The name is only known when supplied out-of-band; regular messages never
    carry it.
    """

    thread_id: int
    name: Optional[str] = None
    message_count: int = 0
    last_seen: int = 0


@dataclass
class DiscoveredChat:
    """Registry entry for one chat id.

    ``chat`` is the first-seen snapshot and is never overwritten by later
    messages.
    """

    chat: Chat
    last_seen: int
    message_count: int = 0
    topics: dict[int, TopicInfo] = field(default_factory=dict)

    def topic_list(self) -> list[TopicInfo]:
        return list(self.topics.values())

    def copy(self) -> "DiscoveredChat":
        return copy.deepcopy(self)

    def to_cache_record(self) -> dict[str, Any]:
        """Project the entry onto the flat cache schema."""

        return {
            "chat_id": self.chat.id,
            "chat_type": self.chat.type,
            "title": self.chat.title,
            "username": self.chat.username,
            "first_name": self.chat.first_name,
            "last_name": self.chat.last_name,
            "last_seen": self.last_seen,
            "message_count": self.message_count,
            "topics": [
                {
                    "thread_id": topic.thread_id,
                    "name": topic.name,
                    "message_count": topic.message_count,
                    "last_seen": topic.last_seen,
                }
                for topic in self.topics.values()
            ],
        }


@dataclass(frozen=True)
class MonitorMessage:
    """A line in the live monitor feed."""

    timestamp: int
    chat_name: str
    sender: Optional[str]
    text: str
