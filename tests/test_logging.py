from __future__ import annotations

import logging

import app


def test_bot_token_is_always_redacted(monkeypatch) -> None:
    monkeypatch.setenv("BOT_TOKEN", "123:secret")
    monkeypatch.setenv("OTHER_SECRET", "hunter2")

    assert app._collect_redaction_values({}) == ["123:secret"]
    values = app._collect_redaction_values({"redact": {"enabled": True, "patterns": ["OTHER_SECRET"]}})
    assert set(values) == {"123:secret", "hunter2"}


def test_formatter_masks_secrets() -> None:
    formatter = app._RedactingFormatter(["123:secret"], fmt="%(message)s")
    record = logging.LogRecord("x", logging.INFO, __file__, 1, "GET /bot%s/getUpdates", ("123:secret",), None)
    assert formatter.format(record) == "GET /bot***/getUpdates"
