from __future__ import annotations

from typing import Optional

from core.models import Chat, Message, Update, User


def make_chat(chat_id: int = -100, chat_type: str = "supergroup", **kwargs) -> Chat:
    return Chat(id=chat_id, type=chat_type, **kwargs)


def make_update(
    update_id: int,
    *,
    kind: str = "message",
    chat: Optional[Chat] = None,
    date: int = 1_700_000_000,
    text: Optional[str] = "hello",
    thread_id: Optional[int] = None,
    sender: Optional[User] = None,
) -> Update:
    chat = chat or make_chat()
    message = Message(
        message_id=update_id,
        chat=chat,
        date=date,
        text=text,
        thread_id=thread_id,
        sender=sender,
    )
    return Update(update_id=update_id, kind=kind, message=message)
