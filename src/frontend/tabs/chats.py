"""Chats tab: discovered chats and their forum topics."""

from __future__ import annotations

from typing import Any

from rich.text import Text
from textual import on
from textual.containers import Container, Vertical
from textual.widgets import DataTable, Static

from core.models import DiscoveredChat

from ..formatting import format_timestamp


class ChatsTab(Container):
    """Table of discovered chats with a topic breakdown for the selection."""

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._chats: dict[str, DiscoveredChat] = {}
        self._table_ready = False

    def compose(self):
        with Vertical(id="chats-panel"):
            yield Static("Discovered chats", id="chats-title")
            yield DataTable(id="chats-table", cursor_type="row")
            yield Static("", id="chats-detail")

    def on_mount(self) -> None:
        table = self.query_one("#chats-table", DataTable)
        table.add_column("name", key="name", width=28)
        table.add_column("type", key="type", width=11)
        table.add_column("chat id", key="chat_id", width=16)
        table.add_column("messages", key="messages", width=9)
        table.add_column("topics", key="topics", width=7)
        table.add_column("last seen", key="last_seen", width=20)
        table.zebra_stripes = True
        table.styles.height = "1fr"
        self._table_ready = True

    def refresh_chats(self, chats: list[DiscoveredChat]) -> None:
        if not self._table_ready:
            return
        table = self.query_one("#chats-table", DataTable)
        table.clear()
        self._chats = {}
        for entry in chats:
            key = str(entry.chat.id)
            self._chats[key] = entry
            table.add_row(
                Text(entry.chat.display_name()),
                entry.chat.type,
                key,
                str(entry.message_count),
                str(len(entry.topics)),
                format_timestamp(entry.last_seen),
                key=key,
            )
        if not chats:
            self._set_detail("No chats yet. Start monitoring (m) or fetch once (f).")

    @on(DataTable.RowHighlighted, "#chats-table")
    def _on_row_highlighted(self, event: DataTable.RowHighlighted) -> None:
        entry = self._chats.get(str(event.row_key.value))
        if entry is None:
            return
        self._set_detail(self._describe(entry))

    @staticmethod
    def _describe(entry: DiscoveredChat) -> str:
        lines = [f"{entry.chat.display_name()} ({entry.chat.type}, id {entry.chat.id})"]
        if not entry.topics:
            lines.append("No topics seen.")
        for topic in entry.topic_list():
            name = topic.name or f"topic {topic.thread_id}"
            lines.append(
                f"  #{topic.thread_id} {name}: {topic.message_count} messages, "
                f"last {format_timestamp(topic.last_seen)}"
            )
        lines.append("Enter lists recent messages for this chat.")
        return "\n".join(lines)

    def _set_detail(self, message: str) -> None:
        self.query_one("#chats-detail", Static).update(Text(message))
