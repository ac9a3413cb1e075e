from __future__ import annotations

from datetime import datetime

from adapters.telegram_mapper import parse_updates_response
from core.models import Chat, DiscoveredChat, TopicInfo
from core.processor import UpdateProcessor
from core.statistics import FALLBACK_HOUR, Statistics

from helpers import make_chat, make_update


def _entry(chat_id: int, count: int, *, chat_type: str = "group", last_seen: int = 1_700_000_000, topics: int = 0):
    entry = DiscoveredChat(
        chat=Chat(id=chat_id, type=chat_type, title=f"chat {chat_id}"),
        last_seen=last_seen,
        message_count=count,
    )
    for thread_id in range(topics):
        entry.topics[thread_id] = TopicInfo(thread_id=thread_id, message_count=1)
    return entry


def test_empty_statistics() -> None:
    stats = Statistics.from_chats([])
    assert stats.total_messages == 0
    assert stats.total_chats == 0
    assert stats.top_chats(5) == []
    assert stats.busiest_hour() is None


def test_totals_match_per_chat_counts() -> None:
    chats = [_entry(1, 3, topics=2), _entry(2, 7), _entry(3, 0, topics=1)]
    stats = Statistics.from_chats(chats)

    assert stats.total_messages == 10
    assert stats.total_messages == sum(count for _, count in stats.messages_per_chat)
    assert stats.total_chats == 3
    assert stats.total_topics == 3


def test_messages_per_chat_sorted_descending_and_stable() -> None:
    stats = Statistics.from_chats([_entry(1, 5), _entry(2, 9), _entry(3, 5)])
    assert stats.messages_per_chat == [("chat 2", 9), ("chat 1", 5), ("chat 3", 5)]


def test_top_chats_limits() -> None:
    stats = Statistics.from_chats([_entry(1, 100), _entry(2, 200)])

    assert stats.top_chats(0) == []
    assert stats.top_chats(-1) == []
    assert stats.top_chats(1) == [("chat 2", 200)]
    assert stats.top_chats(10) == [("chat 2", 200), ("chat 1", 100)]


def test_chat_type_distribution() -> None:
    stats = Statistics.from_chats(
        [
            _entry(1, 1, chat_type="private"),
            _entry(2, 1, chat_type="supergroup"),
            _entry(3, 1, chat_type="supergroup"),
        ]
    )
    assert stats.chat_type_distribution == {"private": 1, "supergroup": 2}


def test_hourly_distribution_uses_local_last_seen_hour() -> None:
    morning = int(datetime(2024, 1, 1, 9, 30).timestamp())
    evening = int(datetime(2024, 1, 1, 21, 5).timestamp())
    stats = Statistics.from_chats([_entry(1, 4, last_seen=evening), _entry(2, 6, last_seen=morning)])

    assert stats.hourly_distribution == [(9, 6), (21, 4)]
    assert stats.busiest_hour() == (9, 6)


def test_input_is_not_modified() -> None:
    chats = [_entry(1, 2), _entry(2, 5)]
    Statistics.from_chats(chats)
    assert [entry.chat.id for entry in chats] == [1, 2]
    assert chats[0].message_count == 2


def test_two_chat_scenario_from_processor() -> None:
    processor = UpdateProcessor()
    processor.process_updates(
        [
            make_update(1, chat=make_chat(100, title="hundred")),
            make_update(2, chat=make_chat(200, title="two hundred")),
            make_update(3, chat=make_chat(100, title="hundred")),
        ]
    )
    stats = Statistics.from_chats(processor.get_discovered_chats())

    assert stats.total_chats == 2
    assert stats.total_messages == 3
    assert stats.top_chats(1) == [("hundred", 2)]


def test_out_of_range_timestamp_falls_back_to_fixed_hour() -> None:
    payload = {
        "ok": True,
        "result": [
            {
                "update_id": 1,
                "message": {"message_id": 1, "date": 10**15, "chat": {"id": 5, "type": "private"}, "text": "ms"},
            }
        ],
    }
    processor = UpdateProcessor()
    processor.process_updates(parse_updates_response(payload).updates)

    stats = Statistics.from_chats(processor.get_discovered_chats())

    assert stats.total_messages == 1
    assert stats.hourly_distribution == [(FALLBACK_HOUR, 1)]
