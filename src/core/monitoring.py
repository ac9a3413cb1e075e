"""Live monitoring service.

A single background asyncio task long-polls an UpdateSource and hands each
non-empty batch to the consumer through a bounded queue. The consumer drains
the queue on its own schedule with receive_updates(), which never blocks.

Cancellation is cooperative: the task checks a stop event once per loop and
the idle sleep wakes up as soon as the event is set. When the queue is full
the producer blocks (racing the stop event), so a stalled consumer pauses
polling instead of dropping batches.
"""

from __future__ import annotations

import asyncio
import contextlib
import enum
import logging
from typing import Optional

from core.config import MonitoringConfig
from core.models import Update
from core.ports import TransientNetworkError, UpdateSource

LOGGER = logging.getLogger(__name__)


class MonitorState(enum.Enum):
    STOPPED = "stopped"
    RUNNING = "running"
    PAUSED = "paused"


class MonitoringService:
    """Owns the polling task, its stop event, and the delivery queue."""

    def __init__(self, config: Optional[MonitoringConfig] = None) -> None:
        self._config = config or MonitoringConfig()
        self._task: Optional[asyncio.Task] = None
        self._queue: Optional[asyncio.Queue] = None
        self._stop_event: Optional[asyncio.Event] = None
        self._offset = 0
        self.paused = False

    @property
    def config(self) -> MonitoringConfig:
        return self._config

    @property
    def is_active(self) -> bool:
        return self._task is not None

    @property
    def state(self) -> MonitorState:
        if self._task is None:
            return MonitorState.STOPPED
        if self.paused:
            return MonitorState.PAUSED
        return MonitorState.RUNNING

    @property
    def offset(self) -> int:
        """Highest update_id the polling task has fetched."""

        return self._offset

    @property
    def pending_batches(self) -> int:
        if self._queue is None:
            return 0
        return self._queue.qsize()

    def toggle_pause(self) -> bool:
        """Flip display pausing; polling itself is unaffected."""

        self.paused = not self.paused
        return self.paused

    def start(self, source: UpdateSource, offset: int) -> None:
        """Spawn the polling task. Does nothing if one is already running."""

        if self._task is not None:
            return

        queue: asyncio.Queue = asyncio.Queue(maxsize=self._config.channel_capacity)
        stop_event = asyncio.Event()
        self._offset = offset
        self._queue = queue
        self._stop_event = stop_event
        self._task = asyncio.get_running_loop().create_task(
            self._poll_loop(source, offset, queue, stop_event),
            name="botscope-monitor",
        )
        LOGGER.info("Monitoring started at offset %s", offset)

    async def stop(self) -> None:
        """Signal the task to exit and wait for it. Safe when already stopped."""

        task = self._task
        if self._stop_event is not None:
            self._stop_event.set()

        if task is not None:
            try:
                await asyncio.wait_for(asyncio.shield(task), timeout=self._config.stop_timeout)
            except asyncio.TimeoutError:
                LOGGER.warning("Monitoring task did not exit in %ss, cancelling", self._config.stop_timeout)
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task

        self._task = None
        self._queue = None
        self._stop_event = None
        if task is not None:
            LOGGER.info("Monitoring stopped at offset %s", self._offset)

    async def toggle(self, source: UpdateSource, offset: int) -> None:
        if self.is_active:
            await self.stop()
        else:
            self.start(source, offset)

    def receive_updates(self) -> Optional[list[list[Update]]]:
        """Drain every queued batch without blocking.

        Returns None when nothing is queued or monitoring is stopped.
        """

        if self._queue is None:
            return None
        batches: list[list[Update]] = []
        while True:
            try:
                batches.append(self._queue.get_nowait())
            except asyncio.QueueEmpty:
                break
        return batches or None

    async def _poll_loop(
        self,
        source: UpdateSource,
        offset: int,
        queue: asyncio.Queue,
        stop_event: asyncio.Event,
    ) -> None:
        current = offset
        while not stop_event.is_set():
            try:
                response = await source.fetch_updates(current + 1, self._config.poll_timeout)
            except TransientNetworkError as exc:
                LOGGER.warning("Fetching updates failed, retrying in %ss: %s", self._config.idle_interval, exc)
            except Exception:
                LOGGER.exception("Unexpected error while fetching updates")
            else:
                if response.ok and response.updates:
                    current = max(current, max(update.update_id for update in response.updates))
                    self._offset = current
                    LOGGER.debug("Fetched %s updates, offset now %s", len(response.updates), current)
                    if not await self._deliver(queue, response.updates, stop_event):
                        break
                elif not response.ok:
                    LOGGER.warning("getUpdates returned ok=false: %s", response.description)

            if await self._idle(stop_event):
                break

    async def _deliver(self, queue: asyncio.Queue, batch: list[Update], stop_event: asyncio.Event) -> bool:
        """Put a batch on the queue; False means the task should exit."""

        if self._queue is not queue:
            # The consumer side was torn down.
            return False
        try:
            queue.put_nowait(batch)
            return True
        except asyncio.QueueFull:
            LOGGER.warning("Update queue full (%s batches), waiting for consumer", queue.maxsize)

        put = asyncio.ensure_future(queue.put(batch))
        stopped = asyncio.ensure_future(stop_event.wait())
        try:
            await asyncio.wait({put, stopped}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for pending in (put, stopped):
                if not pending.done():
                    pending.cancel()
        return put.done() and not put.cancelled()

    async def _idle(self, stop_event: asyncio.Event) -> bool:
        """Sleep for the idle interval; True if stop was requested meanwhile."""

        try:
            await asyncio.wait_for(stop_event.wait(), timeout=self._config.idle_interval)
        except asyncio.TimeoutError:
            return False
        return True
