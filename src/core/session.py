"""Consumer side of live monitoring.

BotSession is the single place that touches the registry while monitoring:
it drains the monitoring queue on the caller's schedule (a UI tick or a
headless loop), feeds each batch to the processor, and keeps the rolling
buffers the UI displays. Pausing only stops the buffers from growing; every
batch is still ingested.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from typing import Iterable, Optional

from core.config import FeedConfig
from core.models import MonitorMessage, Update
from core.monitoring import MonitoringService
from core.ports import UpdateSource
from core.processor import UpdateProcessor
from core.statistics import Statistics

LOGGER = logging.getLogger(__name__)

NO_TEXT = "[No text]"


class BotSession:
    """Wires the processor, the monitoring service, and the activity feed."""

    def __init__(
        self,
        processor: Optional[UpdateProcessor] = None,
        monitoring: Optional[MonitoringService] = None,
        feed_config: Optional[FeedConfig] = None,
    ) -> None:
        feed_config = feed_config or FeedConfig()
        self.processor = processor or UpdateProcessor()
        self.monitoring = monitoring or MonitoringService()
        self.feed: deque[MonitorMessage] = deque(maxlen=feed_config.limit)
        self.raw_updates: deque[Update] = deque(maxlen=feed_config.raw_limit)

    @property
    def last_update_id(self) -> int:
        return self.processor.last_update_id

    def start_monitoring(self, source: UpdateSource) -> None:
        # Resume right after the last update we ingested.
        self.monitoring.start(source, self.processor.last_update_id)

    async def stop_monitoring(self) -> None:
        await self.monitoring.stop()

    async def toggle_monitoring(self, source: UpdateSource) -> bool:
        """Start or stop monitoring; returns whether it is now active."""

        await self.monitoring.toggle(source, self.processor.last_update_id)
        return self.monitoring.is_active

    def toggle_pause(self) -> bool:
        return self.monitoring.toggle_pause()

    def clear_feed(self) -> None:
        self.feed.clear()

    def process_received_updates(self) -> int:
        """Drain queued batches into the registry; returns batches handled."""

        batches = self.monitoring.receive_updates()
        if not batches:
            return 0
        display = not self.monitoring.paused
        for batch in batches:
            self.process_updates_batch(batch, display=display)
        LOGGER.debug("Ingested %s batches (display=%s)", len(batches), display)
        return len(batches)

    def process_updates_batch(self, updates: Iterable[Update], *, display: bool = True) -> list[MonitorMessage]:
        """Ingest one batch; returns the feed entries it added."""

        updates = list(updates)
        added: list[MonitorMessage] = []
        if display:
            newest = self.processor.last_update_id
            for update in updates:
                # Replayed ids were already shown once.
                if update.update_id <= newest:
                    continue
                newest = update.update_id
                self.raw_updates.append(update)
                monitor_message = self._to_monitor_message(update)
                if monitor_message is not None:
                    self.feed.append(monitor_message)
                    added.append(monitor_message)
        self.processor.process_updates(updates)
        self._apply_topic_names(updates)
        return added

    def _apply_topic_names(self, updates: list[Update]) -> None:
        for update in updates:
            message = update.message
            if message is None or message.topic_name is None or message.thread_id is None:
                continue
            if self.processor.set_topic_name(message.chat.id, message.thread_id, message.topic_name):
                LOGGER.debug("Topic %s in chat %s is named %r", message.thread_id, message.chat.id, message.topic_name)

    def statistics(self) -> Statistics:
        return Statistics.from_chats(self.processor.get_discovered_chats())

    def get_messages_for_chat(self, chat_id: int) -> list[Update]:
        return [update for update in self.raw_updates if update.is_new_message and update.chat_id == chat_id]

    @staticmethod
    def _to_monitor_message(update: Update) -> Optional[MonitorMessage]:
        if not update.is_new_message or update.message is None:
            return None
        message = update.message
        sender = message.sender.label() if message.sender is not None else None
        return MonitorMessage(
            timestamp=int(time.time()),
            chat_name=message.chat.display_name(),
            sender=sender,
            text=message.text or NO_TEXT,
        )
