"""Core update ingestion.

The processor folds update batches into the chat registry. It is the only
writer of the registry; readers receive deep copies from
get_discovered_chats(). Processing order per update:
1) Advance the offset watermark (max, duplicates are not filtered)
2) New messages and channel posts create/bump the chat entry
3) Messages with a thread id create/bump the topic entry
4) Edits only move last_seen of an already known chat
5) Everything else only affects the watermark
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from core.models import DiscoveredChat, Message, TopicInfo, Update

LOGGER = logging.getLogger(__name__)


class UpdateProcessor:
    """Maintains discovered chats, topics, and the update_id watermark."""

    def __init__(self, initial_offset: int = 0) -> None:
        self._chats: dict[int, DiscoveredChat] = {}
        self._last_update_id = initial_offset

    @property
    def last_update_id(self) -> int:
        """Highest update_id observed so far."""

        return self._last_update_id

    @property
    def chat_count(self) -> int:
        return len(self._chats)

    def process_updates(self, updates: Iterable[Update]) -> None:
        """Fold a batch of updates into the registry, in the order received."""

        for update in updates:
            if update.update_id > self._last_update_id:
                self._last_update_id = update.update_id

            message = update.message
            # Payloads the mapper could not parse only move the watermark.
            if message is None:
                continue

            if update.is_new_message:
                self._record_message(message)
            elif update.is_edit:
                entry = self._chats.get(message.chat.id)
                if entry is not None:
                    entry.last_seen = max(entry.last_seen, message.date)

    def _record_message(self, message: Message) -> None:
        chat_id = message.chat.id
        entry = self._chats.get(chat_id)
        if entry is None:
            entry = DiscoveredChat(chat=message.chat, last_seen=message.date)
            self._chats[chat_id] = entry
            LOGGER.debug("Discovered chat %s (%s)", chat_id, message.chat.type)

        entry.message_count += 1
        entry.last_seen = max(entry.last_seen, message.date)

        thread_id = message.thread_id
        if thread_id is None:
            return
        topic = entry.topics.get(thread_id)
        if topic is None:
            topic = TopicInfo(thread_id=thread_id, last_seen=message.date)
            entry.topics[thread_id] = topic
            LOGGER.debug("Discovered topic %s in chat %s", thread_id, chat_id)
        topic.message_count += 1
        topic.last_seen = max(topic.last_seen, message.date)

    def set_topic_name(self, chat_id: int, thread_id: int, name: Optional[str]) -> bool:
        """Attach a name learned elsewhere to a known topic.

        BotSession calls this for forum topic service messages, the only
        updates that carry a topic name.

        Returns False if the chat or topic has not been discovered yet; this
        never creates registry entries.
        """

        entry = self._chats.get(chat_id)
        if entry is None:
            return False
        topic = entry.topics.get(thread_id)
        if topic is None:
            return False
        topic.name = name
        return True

    def get_discovered_chats(self) -> list[DiscoveredChat]:
        """Return a snapshot of all chats, most recently active first.

        Ties on last_seen are ordered by chat id so output is reproducible.
        """

        chats = sorted(self._chats.values(), key=lambda entry: (-entry.last_seen, entry.chat.id))
        return [entry.copy() for entry in chats]
