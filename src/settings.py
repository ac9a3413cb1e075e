"""Static configuration for botscope.

All user-editable settings (polling, feed sizes, analytics, logging) live in
a single optional JSON file. Secrets such as the bot token come from the
environment instead (see client.py).
"""

import json
import os

from core.config import FeedConfig, MonitoringConfig

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

# config.json sits next to the project root unless BOTSCOPE_CONFIG points
# elsewhere.
CONFIG_PATH = os.getenv("BOTSCOPE_CONFIG") or os.path.join(PROJECT_ROOT, "config.json")


def _load_json_config() -> dict:
    """Load config.json; a missing file means all defaults."""

    if not os.path.exists(CONFIG_PATH):
        return {}

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        try:
            loaded = json.load(handle)
        except json.JSONDecodeError as exc:
            raise RuntimeError(f"Invalid JSON in {CONFIG_PATH}: {exc.msg}") from exc
    if not isinstance(loaded, dict):
        raise RuntimeError(f"Config root must be an object: {CONFIG_PATH}")
    return loaded


def build_monitoring_config(raw: dict) -> MonitoringConfig:
    """Build MonitoringConfig from the "monitoring" section."""

    defaults = MonitoringConfig()
    return MonitoringConfig(
        poll_timeout=int(raw.get("poll_timeout", defaults.poll_timeout)),
        idle_interval=float(raw.get("idle_interval", defaults.idle_interval)),
        channel_capacity=int(raw.get("channel_capacity", defaults.channel_capacity)),
        stop_timeout=float(raw.get("stop_timeout", defaults.stop_timeout)),
    )


def build_feed_config(raw: dict) -> FeedConfig:
    """Build FeedConfig from the "feed" section."""

    defaults = FeedConfig()
    return FeedConfig(
        limit=int(raw.get("limit", defaults.limit)),
        raw_limit=int(raw.get("raw_limit", defaults.raw_limit)),
    )


_CONFIG = _load_json_config()

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

# Polling cadence and queue bounds for the live monitor.
MONITORING = build_monitoring_config(_CONFIG.get("monitoring", {}))

# Rolling buffers shown in the monitor tab.
FEED = build_feed_config(_CONFIG.get("feed", {}))

# How many chats the analytics views rank.
_analytics = _CONFIG.get("analytics", {})
TOP_CHATS = int(_analytics.get("top_chats", 10))

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})
