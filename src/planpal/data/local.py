"""Local JSON-backed stores used offline and in tests.

The database keeps every table in memory and, when given a path, mirrors the
whole document to disk after each write.
"""

from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional
from uuid import uuid4

import orjson

from ..domain import CalendarEvent, ChatMessage, Conversation, MessageRole, TodoTask, in_zone_of

Clock = Callable[[], datetime]

DEFAULT_DATABASE_CONTENT: Dict[str, Any] = {
    "conversations": [],
    "messages": [],
    "events": [],
    "tasks": [],
    "metadata": {"schema_version": 1},
}


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class LocalDatabase:
    def __init__(self, path: Optional[Path] = None, *, clock: Clock = _utc_now) -> None:
        self._path = path
        self._clock = clock
        self._lock = threading.RLock()
        self._cache: Dict[str, Any] | None = None

    def now(self) -> datetime:
        return self._clock()

    def _load_raw(self) -> Dict[str, Any]:
        if self._cache is None:
            data: Dict[str, Any] = {}
            if self._path is not None and self._path.exists():
                data = orjson.loads(self._path.read_bytes() or b"{}")
            self._cache = {
                "conversations": list(data.get("conversations", [])),
                "messages": list(data.get("messages", [])),
                "events": list(data.get("events", [])),
                "tasks": list(data.get("tasks", [])),
                "metadata": dict(data.get("metadata", DEFAULT_DATABASE_CONTENT["metadata"])),
            }
        return self._cache

    def _persist(self) -> None:
        if self._cache is None or self._path is None:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = orjson.dumps(self._cache, option=orjson.OPT_INDENT_2)
        self._path.write_bytes(payload + b"\n")

    def rows(self, table: str) -> List[Dict[str, Any]]:
        with self._lock:
            return list(self._load_raw()[table])

    def insert(self, table: str, record: Dict[str, Any]) -> Dict[str, Any]:
        with self._lock:
            self._load_raw()[table].append(record)
            self._persist()
        return record

    def replace(self, table: str, record: Dict[str, Any]) -> None:
        with self._lock:
            items = self._load_raw()[table]
            for idx, existing in enumerate(items):
                if existing["id"] == record["id"]:
                    items[idx] = record
                    break
            self._persist()

    def remove(self, table: str, predicate: Callable[[Dict[str, Any]], bool]) -> int:
        with self._lock:
            data = self._load_raw()
            kept = [item for item in data[table] if not predicate(item)]
            removed = len(data[table]) - len(kept)
            if removed:
                data[table] = kept
                self._persist()
        return removed


class LocalEventRepository:
    table = "events"

    def __init__(self, database: LocalDatabase) -> None:
        self.database = database

    def _owned(self, owner_id: str) -> List[CalendarEvent]:
        return [
            CalendarEvent.from_record(record)
            for record in self.database.rows(self.table)
            if record["user_id"] == owner_id
        ]

    def create(self, owner_id: str, fields: Mapping[str, Any]) -> CalendarEvent:
        now = self.database.now()
        event = CalendarEvent(id=str(uuid4()), user_id=owner_id, created_at=now, updated_at=now, **fields)
        self.database.insert(self.table, event.to_record())
        return event

    def list_for_owner(self, owner_id: str) -> List[CalendarEvent]:
        return self._owned(owner_id)

    def list_in_window(
        self, owner_id: str, start: datetime, end: datetime, *, limit: Optional[int] = None
    ) -> List[CalendarEvent]:
        # rows written before a zone was configured may be naive
        events = sorted(
            (event for event in self._owned(owner_id) if start <= in_zone_of(event.starts_at, start) <= end),
            key=lambda event: in_zone_of(event.starts_at, start),
        )
        return events[:limit] if limit is not None else events

    def get(self, owner_id: str, event_id: str) -> Optional[CalendarEvent]:
        for event in self._owned(owner_id):
            if event.id == event_id:
                return event
        return None

    def update(self, owner_id: str, event_id: str, changes: Mapping[str, Any]) -> Optional[CalendarEvent]:
        existing = self.get(owner_id, event_id)
        if existing is None:
            return None
        updated = replace(existing, **changes, updated_at=self.database.now())
        self.database.replace(self.table, updated.to_record())
        return updated

    def delete(self, owner_id: str, event_id: str) -> bool:
        removed = self.database.remove(
            self.table, lambda record: record["id"] == event_id and record["user_id"] == owner_id
        )
        return bool(removed)


class LocalTaskRepository:
    table = "tasks"

    def __init__(self, database: LocalDatabase) -> None:
        self.database = database

    def create(self, owner_id: str, fields: Mapping[str, Any]) -> TodoTask:
        now = self.database.now()
        task = TodoTask(id=str(uuid4()), user_id=owner_id, created_at=now, updated_at=now, **fields)
        self.database.insert(self.table, task.to_record())
        return task

    def list_for_owner(self, owner_id: str, *, completed: Optional[bool] = None) -> List[TodoTask]:
        tasks = [
            TodoTask.from_record(record)
            for record in self.database.rows(self.table)
            if record["user_id"] == owner_id
        ]
        if completed is None:
            return tasks
        return [task for task in tasks if task.completed == completed]

    def get(self, owner_id: str, task_id: str) -> Optional[TodoTask]:
        for task in self.list_for_owner(owner_id):
            if task.id == task_id:
                return task
        return None

    def update(self, owner_id: str, task_id: str, changes: Mapping[str, Any]) -> Optional[TodoTask]:
        existing = self.get(owner_id, task_id)
        if existing is None:
            return None
        updated = replace(existing, **changes, updated_at=self.database.now())
        self.database.replace(self.table, updated.to_record())
        return updated

    def delete(self, owner_id: str, task_id: str) -> bool:
        removed = self.database.remove(
            self.table, lambda record: record["id"] == task_id and record["user_id"] == owner_id
        )
        return bool(removed)


class LocalConversationRepository:
    table = "conversations"

    def __init__(self, database: LocalDatabase) -> None:
        self.database = database

    def create(self, owner_id: str, title: str) -> Conversation:
        now = self.database.now()
        conversation = Conversation(id=str(uuid4()), user_id=owner_id, title=title, created_at=now, updated_at=now)
        self.database.insert(self.table, conversation.to_record())
        return conversation

    def get(self, owner_id: str, conversation_id: str) -> Optional[Conversation]:
        for record in self.database.rows(self.table):
            if record["id"] == conversation_id and record["user_id"] == owner_id:
                return Conversation.from_record(record)
        return None

    def list_for_owner(self, owner_id: str) -> List[Conversation]:
        conversations = [
            Conversation.from_record(record)
            for record in self.database.rows(self.table)
            if record["user_id"] == owner_id
        ]
        # newest activity first; insertion order breaks ties
        indexed = sorted(
            enumerate(conversations),
            key=lambda pair: (pair[1].updated_at or pair[1].created_at or _utc_now(), pair[0]),
            reverse=True,
        )
        return [conversation for _, conversation in indexed]

    def update(self, owner_id: str, conversation_id: str, changes: Mapping[str, Any]) -> Optional[Conversation]:
        existing = self.get(owner_id, conversation_id)
        if existing is None:
            return None
        updated = replace(existing, **changes)
        self.database.replace(self.table, updated.to_record())
        return updated

    def delete(self, owner_id: str, conversation_id: str) -> bool:
        removed = self.database.remove(
            self.table, lambda record: record["id"] == conversation_id and record["user_id"] == owner_id
        )
        return bool(removed)


class LocalMessageRepository:
    table = "messages"

    def __init__(self, database: LocalDatabase) -> None:
        self.database = database

    def append(
        self,
        conversation_id: str,
        role: MessageRole,
        content: str,
        *,
        tool_call_id: Optional[str] = None,
    ) -> ChatMessage:
        message = ChatMessage(
            id=str(uuid4()),
            conversation_id=conversation_id,
            role=role,
            content=content,
            tool_call_id=tool_call_id,
            created_at=self.database.now(),
        )
        self.database.insert(self.table, message.to_record())
        return message

    def list_for_conversation(self, conversation_id: str) -> List[ChatMessage]:
        # rows are append-only, so storage order is creation order
        return [
            ChatMessage.from_record(record)
            for record in self.database.rows(self.table)
            if record["conversation_id"] == conversation_id
        ]

    def list_recent(self, conversation_id: str, limit: int) -> List[ChatMessage]:
        messages = self.list_for_conversation(conversation_id)
        return messages[-limit:] if limit > 0 else []

    def delete_for_conversation(self, conversation_id: str) -> int:
        return self.database.remove(self.table, lambda record: record["conversation_id"] == conversation_id)
