"""Ports (interfaces) used by the core.

The monitoring service only needs one thing from the outside world: a way to
fetch updates after a given offset. Keeping it behind a Protocol lets tests
and alternative transports plug in without touching the core.
"""

from __future__ import annotations

from typing import Protocol

from core.models import UpdatesResponse


class TransientNetworkError(RuntimeError):
    """Raised by update sources when a fetch fails and may be retried."""


class UpdateSource(Protocol):
    """Source of raw update batches (getUpdates or a test double)."""

    async def fetch_updates(self, offset: int, timeout: int) -> UpdatesResponse:
        ...
