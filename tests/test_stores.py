"""Local JSON stores and the Supabase-backed repositories."""

from __future__ import annotations

from datetime import datetime, timedelta
from pathlib import Path
from types import SimpleNamespace
from typing import Any, List
from zoneinfo import ZoneInfo

import httpx
import orjson
import pytest

from conftest import OTHER_OWNER, OWNER, REF, TickingClock
from planpal.config import SupabaseSettings
from planpal.data import (
    LocalConversationRepository,
    LocalDatabase,
    LocalEventRepository,
    LocalMessageRepository,
    LocalTaskRepository,
    SupabaseGateway,
    SupabaseNotInitializedError,
)
from planpal.data.repositories import EventRepository, MessageRepository, TaskRepository
from planpal.domain import MessageRole, TaskPriority
from planpal.domain.errors import UpstreamError
from planpal.tools import ToolDispatcher


class TestLocalDatabase:
    def test_round_trips_through_disk(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "planpal.json"
        database = LocalDatabase(path, clock=TickingClock())
        event = LocalEventRepository(database).create(
            OWNER, {"title": "Dentist", "starts_at": REF, "ends_at": REF + timedelta(hours=1), "location": "Main St"}
        )
        LocalTaskRepository(database).create(OWNER, {"title": "Floss", "priority": TaskPriority.HIGH})

        document = orjson.loads(path.read_bytes())
        assert document["metadata"] == {"schema_version": 1}
        assert document["events"][0]["start_date_time"] == "2024-01-10T09:00:00"

        reopened = LocalDatabase(path)
        assert LocalEventRepository(reopened).get(OWNER, event.id) == event
        [task] = LocalTaskRepository(reopened).list_for_owner(OWNER)
        assert task.priority is TaskPriority.HIGH

    def test_in_memory_without_path(self, database: LocalDatabase, tasks: LocalTaskRepository) -> None:
        tasks.create(OWNER, {"title": "Ephemeral"})

        assert [row["title"] for row in database.rows("tasks")] == ["Ephemeral"]


class TestLocalEvents:
    def test_window_is_inclusive_and_sorted(self, events: LocalEventRepository) -> None:
        day_start = datetime(2024, 1, 11)
        for hour, title in ((15, "Late"), (0, "Midnight"), (9, "Morning")):
            start = day_start + timedelta(hours=hour)
            events.create(OWNER, {"title": title, "starts_at": start, "ends_at": start + timedelta(minutes=30)})
        events.create(
            OWNER, {"title": "Next day", "starts_at": datetime(2024, 1, 12), "ends_at": datetime(2024, 1, 12, 1)}
        )

        window = events.list_in_window(OWNER, day_start, datetime(2024, 1, 11, 23, 59, 59, 999999))

        assert [event.title for event in window] == ["Midnight", "Morning", "Late"]
        assert [e.title for e in events.list_in_window(OWNER, day_start, day_start + timedelta(days=1), limit=1)] == [
            "Midnight"
        ]

    def test_end_must_follow_start(self, events: LocalEventRepository) -> None:
        with pytest.raises(ValueError):
            events.create(OWNER, {"title": "Backwards", "starts_at": REF, "ends_at": REF})

    def test_owner_scoping(self, events: LocalEventRepository) -> None:
        event = events.create(OWNER, {"title": "Mine", "starts_at": REF, "ends_at": REF + timedelta(hours=1)})

        assert events.get(OTHER_OWNER, event.id) is None
        assert events.update(OTHER_OWNER, event.id, {"title": "Stolen"}) is None
        assert events.delete(OTHER_OWNER, event.id) is False
        assert events.get(OWNER, event.id).title == "Mine"

    def test_update_stamps_updated_at(self, events: LocalEventRepository) -> None:
        event = events.create(OWNER, {"title": "Mine", "starts_at": REF, "ends_at": REF + timedelta(hours=1)})

        updated = events.update(OWNER, event.id, {"title": "Renamed"})

        assert updated.updated_at > event.updated_at
        assert updated.created_at == event.created_at


class TestLocalConversations:
    def test_most_recent_activity_first(self, conversations: LocalConversationRepository) -> None:
        older = conversations.create(OWNER, "Older")
        newer = conversations.create(OWNER, "Newer")
        conversations.create(OTHER_OWNER, "Theirs")

        assert [c.id for c in conversations.list_for_owner(OWNER)] == [newer.id, older.id]

        conversations.update(OWNER, older.id, {"updated_at": REF + timedelta(days=1)})

        assert [c.id for c in conversations.list_for_owner(OWNER)] == [older.id, newer.id]

    def test_messages_keep_creation_order(self, messages: LocalMessageRepository) -> None:
        for index in range(5):
            messages.append("conv-1", MessageRole.USER, f"m{index}")
        messages.append("conv-2", MessageRole.USER, "elsewhere")

        assert [m.content for m in messages.list_recent("conv-1", 3)] == ["m2", "m3", "m4"]
        assert messages.list_recent("conv-1", 0) == []
        assert messages.delete_for_conversation("conv-1") == 5
        assert [m.content for m in messages.list_for_conversation("conv-2")] == ["elsewhere"]


class FakeQuery:
    """Records the builder chain and returns canned rows on ``execute``."""

    def __init__(self, table: str, log: List[Any], rows: List[dict], error: Exception | None = None) -> None:
        self.table = table
        self.log = log
        self.rows = rows
        self.error = error

    def __getattr__(self, name: str):
        def step(*args: Any, **kwargs: Any) -> "FakeQuery":
            self.log.append((self.table, name, args, kwargs))
            return self

        return step

    def execute(self) -> SimpleNamespace:
        if self.error is not None:
            raise self.error
        return SimpleNamespace(data=self.rows)


class FakeClient:
    def __init__(self, rows: List[dict] | None = None, error: Exception | None = None) -> None:
        self.log: List[Any] = []
        self.rows = rows or []
        self.error = error

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(name, self.log, self.rows, self.error)


def _gateway(client: FakeClient) -> SupabaseGateway:
    return SupabaseGateway(SupabaseSettings(url="https://example.supabase.co", key="anon"), _client=client)


class TestSupabaseRepositories:
    def test_window_query_is_scoped_and_ordered(self) -> None:
        record = {
            "id": "evt-1",
            "user_id": OWNER,
            "title": "Dentist",
            "start_date_time": "2024-01-11T15:00:00+00:00",
            "end_date_time": "2024-01-11T16:00:00+00:00",
            "category": "meeting",
        }
        client = FakeClient(rows=[record])
        repository = EventRepository(gateway=_gateway(client), table_name="calendar_events")

        [event] = repository.list_in_window(OWNER, datetime(2024, 1, 11), datetime(2024, 1, 11, 23, 59), limit=5)

        assert event.title == "Dentist"
        assert event.duration_minutes == 60
        steps = [(name, args) for _, name, args, _ in client.log]
        assert ("eq", ("user_id", OWNER)) in steps
        assert ("gte", ("start_date_time", "2024-01-11T00:00:00")) in steps
        assert ("limit", (5,)) in steps

    def test_update_maps_attribute_names_to_columns(self) -> None:
        client = FakeClient(rows=[])
        repository = EventRepository(gateway=_gateway(client), table_name="calendar_events")

        assert repository.update(OWNER, "evt-1", {"starts_at": REF, "title": "Moved"}) is None

        [(_, _, (payload,), _)] = [entry for entry in client.log if entry[1] == "update"]
        assert payload["start_date_time"] == "2024-01-10T09:00:00"
        assert payload["title"] == "Moved"
        assert "updated_at" in payload

    def test_recent_messages_come_back_oldest_first(self) -> None:
        rows = [
            {"id": "m2", "conversation_id": "c", "role": "assistant", "content": "second"},
            {"id": "m1", "conversation_id": "c", "role": "user", "content": "first"},
        ]
        repository = MessageRepository(gateway=_gateway(FakeClient(rows=rows)), table_name="chat_messages")

        assert [m.content for m in repository.list_recent("c", 2)] == ["first", "second"]

    def test_transport_errors_become_upstream_errors(self) -> None:
        error = httpx.ConnectError("connection refused")
        repository = EventRepository(gateway=_gateway(FakeClient(error=error)), table_name="calendar_events")

        with pytest.raises(UpstreamError):
            repository.list_for_owner(OWNER)

    def test_unconfigured_gateway(self) -> None:
        gateway = SupabaseGateway(SupabaseSettings(url=None, key=None))

        with pytest.raises(SupabaseNotInitializedError):
            gateway.table("calendar_events")


NEW_YORK = ZoneInfo("America/New_York")


def _utc_event_row(**overrides: Any) -> dict:
    return {
        "id": "evt-1",
        "user_id": OWNER,
        "title": "Dentist",
        "start_date_time": "2024-01-11T20:00:00+00:00",
        "end_date_time": "2024-01-11T21:00:00+00:00",
        "category": "meeting",
        "reminder_minutes": 30,
        **overrides,
    }


class TestSupabaseTimesInLocalZone:
    """Supabase returns timestamptz columns in UTC; the assistant answers in the configured zone."""

    def _dispatcher(self, client: FakeClient) -> ToolDispatcher:
        gateway = _gateway(client)
        return ToolDispatcher(
            events=EventRepository(gateway=gateway, table_name="calendar_events"),
            tasks=TaskRepository(gateway=gateway, table_name="todo_tasks"),
            clock=lambda: datetime(2024, 1, 10, 9, 0, tzinfo=NEW_YORK),
        )

    def test_created_event_is_confirmed_in_local_time(self) -> None:
        client = FakeClient(rows=[_utc_event_row()])

        text = self._dispatcher(client).execute(
            "create_calendar_event", orjson.dumps({"title": "Dentist", "dateTime": "tomorrow at 3pm"}), OWNER
        )

        assert "Thursday, January 11, 2024" in text
        assert "3:00 PM - 4:00 PM" in text
        assert "8:00 PM" not in text
        [inserted] = [args[0] for _, name, args, _ in client.log if name == "insert"]
        assert inserted["start_date_time"] == "2024-01-11T15:00:00-05:00"

    def test_agenda_lists_local_times(self) -> None:
        client = FakeClient(rows=[_utc_event_row()])

        text = self._dispatcher(client).execute("list_calendar_events", orjson.dumps({"date": "tomorrow"}), OWNER)

        assert "#### 1. Dentist" in text
        assert "3:00 PM - 4:00 PM" in text
        steps = [(name, args) for _, name, args, _ in client.log]
        assert ("gte", ("start_date_time", "2024-01-11T00:00:00-05:00")) in steps

    def test_deleted_and_updated_events_are_reported_in_local_time(self) -> None:
        client = FakeClient(rows=[_utc_event_row()])
        dispatcher = self._dispatcher(client)

        deleted = dispatcher.execute("delete_calendar_event", orjson.dumps({"eventTitle": "Dentist"}), OWNER)
        updated = dispatcher.execute(
            "update_calendar_event", orjson.dumps({"eventTitle": "Dentist", "newLocation": "Main St"}), OWNER
        )

        assert "Thursday, January 11 at 3:00 PM" in deleted
        assert "3:00 PM - 4:00 PM" in updated

    def test_due_dates_are_shown_on_the_local_day(self) -> None:
        # 02:00 UTC on the 13th is still the evening of the 12th in New York
        row = {"id": "task-1", "user_id": OWNER, "title": "Pay rent", "due_date": "2024-01-13T02:00:00+00:00"}
        client = FakeClient(rows=[row])

        text = self._dispatcher(client).execute("list_todos", orjson.dumps({"filter": "all"}), OWNER)

        assert "📅 **Due:** Jan 12" in text
