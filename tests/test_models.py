from __future__ import annotations

from core.models import Chat, DiscoveredChat, TopicInfo, Update


def test_display_name_prefers_title() -> None:
    chat = Chat(id=-1, type="group", title="Team", username="team", first_name="A")
    assert chat.display_name() == "Team"


def test_display_name_falls_back_to_username() -> None:
    chat = Chat(id=-1, type="channel", username="news")
    assert chat.display_name() == "@news"


def test_display_name_uses_full_name_then_id() -> None:
    assert Chat(id=5, type="private", first_name="Ann", last_name="Lee").display_name() == "Ann Lee"
    assert Chat(id=5, type="private", first_name="Ann").display_name() == "Ann"
    assert Chat(id=5, type="private").display_name() == "Chat 5"


def test_empty_title_is_skipped() -> None:
    chat = Chat(id=7, type="group", title="", username="grp")
    assert chat.display_name() == "@grp"


def test_update_without_message_has_no_chat_id() -> None:
    update = Update(update_id=1, kind="poll")
    assert update.chat_id is None
    assert not update.is_new_message
    assert not update.is_edit


def test_copy_is_independent() -> None:
    entry = DiscoveredChat(chat=Chat(id=1, type="private"), last_seen=10, message_count=2)
    entry.topics[3] = TopicInfo(thread_id=3, message_count=1, last_seen=10)

    snapshot = entry.copy()
    snapshot.message_count = 99
    snapshot.topics[3].message_count = 99

    assert entry.message_count == 2
    assert entry.topics[3].message_count == 1


def test_cache_record_flattens_chat_and_topics() -> None:
    entry = DiscoveredChat(
        chat=Chat(id=-100, type="supergroup", title="Forum"),
        last_seen=50,
        message_count=4,
    )
    entry.topics[9] = TopicInfo(thread_id=9, name="General", message_count=4, last_seen=50)

    record = entry.to_cache_record()

    assert record["chat_id"] == -100
    assert record["chat_type"] == "supergroup"
    assert record["title"] == "Forum"
    assert record["username"] is None
    assert record["message_count"] == 4
    assert record["topics"] == [
        {"thread_id": 9, "name": "General", "message_count": 4, "last_seen": 50}
    ]
