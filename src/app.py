"""Application entry point for botscope."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

from art import tprint
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

import settings
from adapters.bot_api import TelegramBotApi
from client import TOKEN_ENV, build_client, read_token
from core.models import MonitorMessage
from core.monitoring import MonitoringService
from core.ports import TransientNetworkError
from core.processor import UpdateProcessor
from core.session import BotSession
from core.statistics import Statistics
from frontend.formatting import format_timestamp, render_ranking, render_summary

NAME = "BOTSCOPE"
FONT = "tarty-1"

# How often the headless watcher drains the monitoring queue, in seconds.
WATCH_TICK = 0.5

console = Console()


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


class _RedactingFormatter(logging.Formatter):
    def __init__(self, secrets: list[str], fmt: str, datefmt: Optional[str] = None) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self._secrets = [secret for secret in secrets if secret]

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for secret in self._secrets:
            message = message.replace(secret, "***")
        return message


def _collect_redaction_values(config: dict) -> list[str]:
    # The bot token is embedded in every request URL, so it is always masked.
    names = {TOKEN_ENV}
    redact_cfg = config.get("redact", {}) if config else {}
    if redact_cfg.get("enabled", False):
        names.update(redact_cfg.get("patterns", []))
    values = []
    for name in names:
        value = os.getenv(name)
        if value:
            values.append(value)
    return sorted(set(values), key=len, reverse=True)


def _configure_logging(allow_console: bool = True) -> None:
    config = settings.LOGGING or {}
    if not config.get("enabled", False):
        return

    load_dotenv()
    level_name = str(config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    secrets = _collect_redaction_values(config)
    formatter = _RedactingFormatter(secrets, fmt=fmt, datefmt=datefmt)

    handlers: list[logging.Handler] = []

    # Console output would corrupt the TUI, so only files are used there.
    if allow_console and config.get("console", True):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        path = file_cfg.get("path", "logs/botscope.log")
        if not os.path.isabs(path):
            path = os.path.join(settings.PROJECT_ROOT, path)
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        max_bytes = int(file_cfg.get("max_bytes", 5 * 1024 * 1024))
        backup_count = int(file_cfg.get("backup_count", 5))
        file_handler = RotatingFileHandler(
            path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        return

    logging.basicConfig(level=level, handlers=handlers)


def _build_session() -> BotSession:
    return BotSession(
        processor=UpdateProcessor(),
        monitoring=MonitoringService(settings.MONITORING),
        feed_config=settings.FEED,
    )


def _print_feed_line(message: MonitorMessage) -> None:
    sender = f" {message.sender}:" if message.sender else ""
    console.print(
        f"{format_timestamp(message.timestamp)} {message.chat_name}{sender} {message.text}",
        markup=False,
        highlight=False,
    )


def _print_chats(session: BotSession) -> None:
    table = Table(title="Discovered chats")
    table.add_column("name")
    table.add_column("type")
    table.add_column("chat id", justify="right")
    table.add_column("messages", justify="right")
    table.add_column("topics", justify="right")
    table.add_column("last seen")
    for entry in session.processor.get_discovered_chats():
        table.add_row(
            entry.chat.display_name(),
            entry.chat.type,
            str(entry.chat.id),
            str(entry.message_count),
            str(len(entry.topics)),
            format_timestamp(entry.last_seen),
        )
    console.print(table)


def _print_statistics(stats: Statistics) -> None:
    console.print(render_summary(stats), markup=False, highlight=False)
    for line in render_ranking(stats.top_chats(settings.TOP_CHATS)):
        console.print(line, markup=False, highlight=False)


def _run_tui() -> None:
    from frontend.app import BotScopeApp

    _configure_logging(allow_console=False)
    token = read_token()
    client = build_client(token) if token else None
    BotScopeApp(_build_session(), client=client, top_chats=settings.TOP_CHATS).run()


async def _watch(client: TelegramBotApi, session: BotSession) -> None:
    logger = logging.getLogger(__name__)
    session.start_monitoring(client)
    logger.info("Watching for updates. Press Ctrl+C to stop.")
    try:
        while True:
            for batch in session.monitoring.receive_updates() or []:
                for message in session.process_updates_batch(batch):
                    _print_feed_line(message)
            await asyncio.sleep(WATCH_TICK)
    finally:
        await session.stop_monitoring()
        _print_statistics(session.statistics())


def _run_watch() -> None:
    _print_banner()
    _configure_logging()
    client = build_client()
    session = _build_session()
    try:
        asyncio.run(_watch(client, session))
    except KeyboardInterrupt:
        console.print("Stopped.")


async def _discover_once(client: TelegramBotApi, session: BotSession) -> bool:
    try:
        response = await client.fetch_updates(0, 0)
    except TransientNetworkError as exc:
        console.print(f"Fetching updates failed: {exc}", markup=False)
        return False
    if not response.ok:
        console.print(f"getUpdates rejected: {response.description or 'ok=false'}", markup=False)
        return False
    session.process_updates_batch(response.updates)
    return True


def _run_discover() -> None:
    _print_banner()
    _configure_logging()
    client = build_client()
    session = _build_session()
    if not asyncio.run(_discover_once(client, session)):
        return
    if not session.processor.chat_count:
        console.print("No pending updates. Send the bot a message and try again.")
        return
    _print_chats(session)
    _print_statistics(session.statistics())


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="botscope")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("tui", help="Launch the interactive inspector (default)")
    subparsers.add_parser("watch", help="Print incoming messages until Ctrl+C")
    subparsers.add_parser(
        "discover",
        help="Fetch pending updates once and list the chats they came from.",
    )

    args = parser.parse_args(argv)
    if args.command == "watch":
        _run_watch()
        return
    if args.command == "discover":
        _run_discover()
        return
    _run_tui()


if __name__ == "__main__":
    main()
