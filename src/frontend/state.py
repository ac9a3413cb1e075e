"""State container for the connection and status line."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class UiState:
    bot_name: str | None = None
    status: str | None = None
    error: str | None = None
    dirty: bool = True
