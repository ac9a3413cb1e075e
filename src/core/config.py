"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class MonitoringConfig:
    """Polling loop tuning for the live monitoring service."""

    # Long-poll timeout passed to getUpdates, in seconds.
    poll_timeout: int = 1
    # Pause between fetch attempts, also the fixed retry interval.
    idle_interval: float = 2.0
    # Maximum number of undelivered batches held for the consumer.
    channel_capacity: int = 100
    # How long stop() waits for the task before cancelling it.
    stop_timeout: float = 5.0


@dataclass(frozen=True)
class FeedConfig:
    """Limits for the consumer-side activity buffers."""

    limit: int = 100
    raw_limit: int = 50
