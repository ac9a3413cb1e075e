"""Analytics tab rendering a Statistics snapshot."""

from __future__ import annotations

from typing import Any

from rich.text import Text
from textual.containers import ScrollableContainer
from textual.widgets import Static

from core.statistics import Statistics

from ..formatting import render_ranking, render_summary


class AnalyticsTab(ScrollableContainer):
    """Totals, top chats, activity by hour, and chat type split."""

    def __init__(self, top_chats: int = 10, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._top_chats = top_chats

    def compose(self):
        yield Static("Summary", classes="section-title")
        yield Static("", id="analytics-summary")
        yield Static(f"Top {self._top_chats} chats", classes="section-title")
        yield Static("", id="analytics-top")
        yield Static("Messages by hour of last activity", classes="section-title")
        yield Static("", id="analytics-hourly")
        yield Static("Chat types", classes="section-title")
        yield Static("", id="analytics-types")

    def refresh_statistics(self, stats: Statistics) -> None:
        self.query_one("#analytics-summary", Static).update(Text(render_summary(stats)))
        self._update("#analytics-top", render_ranking(stats.top_chats(self._top_chats)))
        hourly = [(f"{hour:02d}:00", count) for hour, count in stats.hourly_distribution]
        self._update("#analytics-hourly", render_ranking(hourly, label_width=6))
        types = sorted(stats.chat_type_distribution.items(), key=lambda item: item[1], reverse=True)
        self._update("#analytics-types", render_ranking(types, label_width=12))

    def _update(self, selector: str, lines: list[str]) -> None:
        self.query_one(selector, Static).update(Text("\n".join(lines) or "No data yet."))
