"""Plain-text rendering helpers shared by the tabs."""

from __future__ import annotations

import json
from datetime import datetime

from core.models import Update
from core.session import NO_TEXT
from core.statistics import Statistics

BAR_CHAR = "█"


def clip_text(value: str, limit: int = 64) -> str:
    value = " ".join(value.split())
    if len(value) <= limit:
        return value
    return value[: limit - 3] + "..."


def format_timestamp(timestamp: int) -> str:
    if timestamp <= 0:
        return "-"
    try:
        return datetime.fromtimestamp(timestamp).strftime("%Y-%m-%d %H:%M:%S")
    except (ValueError, OverflowError, OSError):
        return "-"


def render_bar(value: int, maximum: int, width: int = 30) -> str:
    """Return a bar proportional to value/maximum; non-zero values get one cell."""

    if maximum <= 0 or value <= 0:
        return ""
    cells = max(1, round(width * value / maximum))
    return BAR_CHAR * min(cells, width)


def render_ranking(rows: list[tuple[str, int]], width: int = 30, label_width: int = 24) -> list[str]:
    """Render (label, count) pairs as aligned bar-chart lines."""

    if not rows:
        return []
    maximum = max(count for _, count in rows)
    return [
        f"{clip_text(label, label_width):<{label_width}} {render_bar(count, maximum, width):<{width}} {count}"
        for label, count in rows
    ]


def render_summary(stats: Statistics) -> str:
    lines = [
        f"Total messages: {stats.total_messages}",
        f"Chats: {stats.total_chats}",
        f"Topics: {stats.total_topics}",
    ]
    busiest = stats.busiest_hour()
    if busiest is not None:
        lines.append(f"Busiest hour (by last activity): {busiest[0]:02d}:00 ({busiest[1]} messages)")
    return "\n".join(lines)


def describe_update(update: Update) -> tuple[str, str, str]:
    """Return (date, sender, preview) columns for an update list row."""

    message = update.message
    if message is None:
        return "-", update.kind, f"[{update.kind}]"
    sender = message.sender.label() if message.sender is not None else "-"
    if update.is_edit:
        sender = f"{sender} (edited)"
    return format_timestamp(message.date), sender, clip_text(message.text or NO_TEXT, 48)


def render_raw_update(update: Update) -> str:
    return json.dumps(update.raw, indent=2, ensure_ascii=False, sort_keys=True)
