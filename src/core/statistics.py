"""Statistics derived from a registry snapshot (core domain)."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional

from core.models import DiscoveredChat

# Bucket for timestamps the platform cannot convert.
FALLBACK_HOUR = 0


def _local_hour(timestamp: int) -> int:
    try:
        return datetime.fromtimestamp(timestamp).hour
    except (ValueError, OverflowError, OSError):
        return FALLBACK_HOUR


@dataclass(frozen=True)
class Statistics:
    """Read-only aggregate view over discovered chats.

    The hourly distribution is keyed by each chat's last_seen hour: a chat's
    whole message_count lands in one bucket. It shows when chats were last
    active, not a per-message histogram.
    """

    total_messages: int = 0
    total_chats: int = 0
    total_topics: int = 0
    messages_per_chat: list[tuple[str, int]] = field(default_factory=list)
    hourly_distribution: list[tuple[int, int]] = field(default_factory=list)
    chat_type_distribution: dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_chats(cls, chats: Iterable[DiscoveredChat]) -> "Statistics":
        """Compute statistics from chats; the input is not modified."""

        chats = list(chats)
        total_messages = 0
        total_topics = 0
        messages_per_chat: list[tuple[str, int]] = []
        hourly: Counter[int] = Counter()
        chat_types: Counter[str] = Counter()

        for entry in chats:
            total_messages += entry.message_count
            total_topics += len(entry.topics)
            messages_per_chat.append((entry.chat.display_name(), entry.message_count))
            chat_types[entry.chat.type] += 1
            hourly[_local_hour(entry.last_seen)] += entry.message_count

        # sorted() is stable, so equal counts keep their input order.
        messages_per_chat = sorted(messages_per_chat, key=lambda item: item[1], reverse=True)

        return cls(
            total_messages=total_messages,
            total_chats=len(chats),
            total_topics=total_topics,
            messages_per_chat=messages_per_chat,
            hourly_distribution=sorted(hourly.items()),
            chat_type_distribution=dict(chat_types),
        )

    def top_chats(self, limit: int) -> list[tuple[str, int]]:
        """Return up to ``limit`` chats with the most messages."""

        if limit <= 0:
            return []
        return self.messages_per_chat[:limit]

    def busiest_hour(self) -> Optional[tuple[int, int]]:
        if not self.hourly_distribution:
            return None
        return max(self.hourly_distribution, key=lambda item: item[1])
