"""Monitor tab: live feed of incoming messages."""

from __future__ import annotations

from typing import Any, Iterable

from rich.text import Text
from textual.containers import Container, Vertical
from textual.widgets import DataTable, Static

from core.models import MonitorMessage
from core.monitoring import MonitorState

from ..formatting import clip_text, format_timestamp

STATE_LABELS = {
    MonitorState.STOPPED: "stopped",
    MonitorState.RUNNING: "running",
    MonitorState.PAUSED: "paused (ingesting, display frozen)",
}


class MonitorTab(Container):
    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._table_ready = False

    def compose(self):
        with Vertical(id="monitor-panel"):
            yield Static("", id="monitor-status")
            yield DataTable(id="monitor-table", cursor_type="row")
            yield Static("m start/stop  p pause  c clear", classes="subtle")

    def on_mount(self) -> None:
        table = self.query_one("#monitor-table", DataTable)
        table.add_column("received", key="timestamp", width=20)
        table.add_column("chat", key="chat", width=24)
        table.add_column("sender", key="sender", width=16)
        table.add_column("text", key="text", width=48)
        table.zebra_stripes = True
        table.styles.height = "1fr"
        self._table_ready = True

    def refresh_status(self, state: MonitorState, offset: int, pending: int) -> None:
        status = f"monitor: {STATE_LABELS[state]} | offset {offset} | queued batches {pending}"
        self.query_one("#monitor-status", Static).update(status)

    def refresh_feed(self, feed: Iterable[MonitorMessage]) -> None:
        if not self._table_ready:
            return
        table = self.query_one("#monitor-table", DataTable)
        table.clear()
        # Newest first.
        for message in reversed(list(feed)):
            table.add_row(
                format_timestamp(message.timestamp),
                Text(clip_text(message.chat_name, 24)),
                Text(message.sender or "-"),
                Text(clip_text(message.text, 48)),
            )
