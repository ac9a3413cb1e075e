"""Modal dialogs for the botscope TUI."""

from __future__ import annotations

from typing import Optional

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container, Horizontal, VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import Button, DataTable, Input, Static

from core.models import Update

from .formatting import describe_update, render_raw_update
from .validators import parse_token


class TokenScreen(ModalScreen[Optional[str]]):
    """Ask for a bot token when none is configured or the last one failed."""

    def __init__(self, error: Optional[str] = None) -> None:
        super().__init__()
        self._error = error or ""

    def compose(self) -> ComposeResult:
        yield Container(
            Static("Bot token", classes="modal-title"),
            Static("Paste the token issued by @BotFather.", classes="modal-body"),
            Static(Text(self._error), id="token-error", classes="modal-error"),
            Input(placeholder="123456:ABC-DEF...", password=True, id="token-input"),
            Horizontal(
                Button("Connect", id="token-connect", variant="success"),
                Button("Quit", id="token-quit"),
                classes="modal-actions",
            ),
            classes="modal-dialog modal-dialog--form",
        )

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self._submit()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "token-quit":
            self.dismiss(None)
        elif event.button.id == "token-connect":
            self._submit()

    def _submit(self) -> None:
        info = parse_token(self.query_one("#token-input", Input).value)
        if info.error or info.normalized is None:
            self.query_one("#token-error", Static).update(info.error or "invalid token")
            return
        self.dismiss(info.normalized)


class QuitConfirmScreen(ModalScreen[bool]):
    """Confirm quitting while monitoring is running."""

    def compose(self) -> ComposeResult:
        yield Container(
            Static("Monitoring is running", classes="modal-title"),
            Static("Stop monitoring and quit?", classes="modal-body"),
            Horizontal(
                Button("Quit", id="quit-confirm", variant="error"),
                Button("Cancel", id="quit-cancel"),
                classes="modal-actions",
            ),
            classes="modal-dialog modal-dialog--confirm",
        )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "quit-confirm")


class UpdateListScreen(ModalScreen[None]):
    """List buffered updates; Enter opens the raw payload of the selected one."""

    BINDINGS = [("escape", "close", "Close")]

    def __init__(self, title: str, updates: list[Update]) -> None:
        super().__init__()
        self._title = title
        self._updates = {str(index): update for index, update in enumerate(updates)}

    def compose(self) -> ComposeResult:
        yield Container(
            Static(Text(self._title), classes="modal-title"),
            DataTable(id="updates-table", cursor_type="row"),
            Static("", id="updates-empty", classes="subtle"),
            Horizontal(
                Button("Close", id="updates-close"),
                classes="modal-actions",
            ),
            classes="modal-dialog modal-dialog--wide",
        )

    def on_mount(self) -> None:
        table = self.query_one("#updates-table", DataTable)
        table.add_column("update", key="update_id", width=12)
        table.add_column("date", key="date", width=20)
        table.add_column("sender", key="sender", width=22)
        table.add_column("text", key="text", width=48)
        table.zebra_stripes = True
        for key, update in self._updates.items():
            date, sender, preview = describe_update(update)
            table.add_row(str(update.update_id), date, Text(sender), Text(preview), key=key)
        if not self._updates:
            self.query_one("#updates-empty", Static).update("No buffered updates.")

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        update = self._updates.get(str(event.row_key.value))
        if update is not None:
            self.app.push_screen(RawUpdateScreen(update))

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(None)

    def action_close(self) -> None:
        self.dismiss(None)


class RawUpdateScreen(ModalScreen[None]):
    """Pretty-printed JSON of one update as Telegram sent it."""

    BINDINGS = [("escape", "close", "Close")]

    def __init__(self, update: Update) -> None:
        super().__init__()
        self._update = update

    def compose(self) -> ComposeResult:
        yield Container(
            Static(f"Update {self._update.update_id} ({self._update.kind})", classes="modal-title"),
            VerticalScroll(Static(Text(render_raw_update(self._update))), id="raw-json"),
            Horizontal(
                Button("Close", id="raw-close"),
                classes="modal-actions",
            ),
            classes="modal-dialog modal-dialog--wide",
        )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(None)

    def action_close(self) -> None:
        self.dismiss(None)
