"""Shared constants for the Textual UI."""

from __future__ import annotations

TELEGRAM_BLUE = "#2AABEE"
# How often the UI drains the monitoring queue, in seconds.
TICK_INTERVAL = 0.25
