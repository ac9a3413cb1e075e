"""Main Textual app for botscope."""

from __future__ import annotations

import logging
from typing import Any, Optional

from rich.text import Text
from textual import on
from textual.app import App, ComposeResult
from textual.containers import Center, Container, Horizontal, Vertical
from textual.widgets import ContentSwitcher, DataTable, Footer, Static, Tab, Tabs

from adapters.bot_api import TelegramBotApi
from client import build_client
from core.ports import TransientNetworkError
from core.session import BotSession

from .constants import TELEGRAM_BLUE, TICK_INTERVAL
from .modals import QuitConfirmScreen, TokenScreen, UpdateListScreen
from .state import UiState
from .tabs.analytics import AnalyticsTab
from .tabs.chats import ChatsTab
from .tabs.monitor import MonitorTab

LOGGER = logging.getLogger(__name__)


class BotScopeApp(App):
    """Bot inspector with chats, live monitor, and analytics tabs."""

    CSS = """
    Screen {
        background: #0f1a21;
        color: #e8eef5;
    }

    #header {
        height: 6;
        padding: 1 4;
        border-bottom: solid #2a3a46;
    }

    #header-left, #header-right {
        width: 1fr;
    }

    #header-right {
        text-align: right;
    }

    #title {
        text-style: bold;
    }

    .subtle {
        color: #c6d2dd;
    }

    #tabs-bar {
        height: 4;
        padding: 0 4;
        border-bottom: solid #2a3a46;
    }

    #tabs {
        width: auto;
    }

    #content {
        height: 1fr;
        padding: 0 2;
    }

    #chats-detail, #monitor-status {
        height: auto;
        padding: 1 0;
    }

    .section-title {
        text-style: bold;
        color: #2AABEE;
        padding-top: 1;
    }

    TokenScreen, QuitConfirmScreen, UpdateListScreen, RawUpdateScreen {
        align: center middle;
    }

    .modal-dialog {
        width: 60;
        height: auto;
        padding: 1 2;
        border: round #2AABEE;
        background: #15232c;
    }

    .modal-dialog--wide {
        width: 110;
        height: 80%;
    }

    #updates-table, #raw-json {
        height: 1fr;
    }

    .modal-title {
        text-style: bold;
    }

    .modal-error {
        color: #ff6b6b;
    }

    .modal-actions {
        height: 3;
        margin-top: 1;
    }
    """

    BINDINGS = [
        ("m", "toggle_monitoring", "Monitor on/off"),
        ("p", "toggle_pause", "Pause"),
        ("c", "clear_feed", "Clear feed"),
        ("f", "fetch_once", "Fetch once"),
        ("r", "show_raw_updates", "Raw updates"),
        ("q", "request_quit", "Quit"),
    ]

    def __init__(
        self,
        session: BotSession,
        client: Optional[TelegramBotApi] = None,
        top_chats: int = 10,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.session = session
        self.client = client
        self.ui_state = UiState()
        self._top_chats = top_chats

    def compose(self) -> ComposeResult:
        with Container(id="header"):
            with Horizontal(id="header-row"):
                with Vertical(id="header-left"):
                    yield Static(self._title_text(), id="title")
                    yield Static("", id="header-bot", classes="subtle")
                with Vertical(id="header-right"):
                    yield Static("", id="header-monitor", classes="subtle")
                    yield Static("", id="header-status")

        with Container(id="tabs-bar"):
            with Center(id="tabs-center"):
                yield Tabs(
                    Tab("Chats", id="chats"),
                    Tab("Monitor", id="monitor"),
                    Tab("Analytics", id="analytics"),
                    id="tabs",
                )

        with ContentSwitcher(id="content"):
            yield ChatsTab(id="chats")
            yield MonitorTab(id="monitor")
            yield AnalyticsTab(top_chats=self._top_chats, id="analytics")
        yield Footer()

    def on_mount(self) -> None:
        self._set_active_tab("chats")
        self.set_interval(TICK_INTERVAL, self._tick)
        if self.client is None:
            self.push_screen(TokenScreen(), self._handle_token)
        else:
            self.run_worker(self._connect(self.client), exclusive=True, group="connect")

    def on_tabs_tab_activated(self, event: Tabs.TabActivated) -> None:
        tab_id = event.tab.id or ""
        if not tab_id:
            label = event.tab.label
            if hasattr(label, "plain"):
                label = label.plain
            tab_id = str(label).strip().lower()
        self._set_active_tab(tab_id)

    def _set_active_tab(self, tab_id: str) -> None:
        switcher = self.query_one("#content", ContentSwitcher)
        switcher.current = tab_id
        self.ui_state.dirty = True

    def _handle_token(self, token: Optional[str]) -> None:
        if token is None:
            self.exit()
            return
        self.run_worker(self._connect(build_client(token)), exclusive=True, group="connect")

    async def _connect(self, client: TelegramBotApi) -> None:
        """Validate the client with getMe before using it for polling."""

        self._set_status("Checking token...")
        try:
            bot = await client.get_me()
        except TransientNetworkError as exc:
            LOGGER.warning("Token check failed: %s", exc)
            self.push_screen(TokenScreen(error=f"Network error: {exc}"), self._handle_token)
            return
        if bot is None:
            self.push_screen(TokenScreen(error="Invalid token"), self._handle_token)
            return

        self.client = client
        self.ui_state.bot_name = f"@{bot.username}" if bot.username else bot.first_name
        self._set_status("Token validated successfully!")

    def _tick(self) -> None:
        try:
            if self.session.process_received_updates():
                self.ui_state.dirty = True
        except Exception:
            LOGGER.exception("Error while processing received updates")
        if self._main_screen_active():
            self._refresh()

    def _main_screen_active(self) -> bool:
        # Widgets below a modal are not reachable through query_one.
        return len(self.screen_stack) == 1

    def _refresh(self) -> None:
        monitoring = self.session.monitoring
        self.query_one("#header-bot", Static).update(Text(f"bot: {self.ui_state.bot_name or 'not connected'}"))
        self.query_one("#header-monitor", Static).update(
            f"monitor: {monitoring.state.value} | last update {self.session.last_update_id}"
        )
        self.query_one(MonitorTab).refresh_status(monitoring.state, monitoring.offset, monitoring.pending_batches)
        self._refresh_header_status()

        if not self.ui_state.dirty:
            return
        self.ui_state.dirty = False
        current = self.query_one("#content", ContentSwitcher).current
        if current == "chats":
            self.query_one(ChatsTab).refresh_chats(self.session.processor.get_discovered_chats())
        elif current == "monitor":
            self.query_one(MonitorTab).refresh_feed(self.session.feed)
        elif current == "analytics":
            self.query_one(AnalyticsTab).refresh_statistics(self.session.statistics())

    def _refresh_header_status(self) -> None:
        if not self._main_screen_active():
            return
        status = self.query_one("#header-status", Static)
        status.update(Text(self.ui_state.error or self.ui_state.status or ""))

    def _set_status(self, message: str) -> None:
        self.ui_state.status = message
        self.ui_state.error = None
        self._refresh_header_status()

    def _set_error(self, message: str) -> None:
        self.ui_state.error = message
        self._refresh_header_status()

    async def action_toggle_monitoring(self) -> None:
        if self.client is None:
            self._set_error("Connect a bot token first")
            return
        active = await self.session.toggle_monitoring(self.client)
        self._set_status("Monitoring started" if active else "Monitoring stopped")

    def action_toggle_pause(self) -> None:
        paused = self.session.toggle_pause()
        self._set_status("Monitor display paused" if paused else "Monitor display resumed")
        self.ui_state.dirty = True

    def action_clear_feed(self) -> None:
        self.session.clear_feed()
        self.ui_state.dirty = True

    async def action_fetch_once(self) -> None:
        """Pull pending updates once without starting the monitor."""

        if self.client is None:
            self._set_error("Connect a bot token first")
            return
        if self.session.monitoring.is_active:
            self._set_error("Monitoring is running; updates arrive automatically")
            return
        try:
            response = await self.client.fetch_updates(self.session.last_update_id + 1, 0)
        except TransientNetworkError as exc:
            self._set_error(f"Fetch failed: {exc}")
            return
        if not response.ok:
            self._set_error(f"Fetch failed: {response.description or 'ok=false'}")
            return
        self.session.process_updates_batch(response.updates)
        self.ui_state.dirty = True
        self._set_status(f"Fetched {len(response.updates)} updates")

    @on(DataTable.RowSelected, "#chats-table")
    def _on_chat_selected(self, event: DataTable.RowSelected) -> None:
        chat_id = int(str(event.row_key.value))
        names = {entry.chat.id: entry.chat.display_name() for entry in self.session.processor.get_discovered_chats()}
        title = names.get(chat_id, f"Chat {chat_id}")
        self.push_screen(UpdateListScreen(f"Messages - {title}", self.session.get_messages_for_chat(chat_id)))

    def action_show_raw_updates(self) -> None:
        self.push_screen(UpdateListScreen("Recent updates", list(self.session.raw_updates)))

    async def action_request_quit(self) -> None:
        if self.session.monitoring.is_active:
            self.push_screen(QuitConfirmScreen(), self._handle_quit_choice)
            return
        self.exit()

    def _handle_quit_choice(self, confirmed: Optional[bool]) -> None:
        if confirmed:
            self.run_worker(self._shutdown(), exclusive=True, group="shutdown")

    async def _shutdown(self) -> None:
        await self.session.stop_monitoring()
        self.exit()

    async def on_unmount(self) -> None:
        # Never leave the polling task behind.
        await self.session.stop_monitoring()

    @staticmethod
    def _title_text() -> Text:
        return Text.assemble(
            ("BOT", TELEGRAM_BLUE),
            ("SCOPE > Bot Inspector", "bold"),
        )
