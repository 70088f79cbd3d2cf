from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Dict, Mapping, Optional

from .enums import EventCategory, MessageRole, Recurrence, TaskPriority, TaskProvenance


def _parse_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    raise ValueError(f"Unsupported datetime value: {value!r}")


def _optional_datetime(value: Any) -> Optional[datetime]:
    return _parse_datetime(value) if value else None


def in_zone_of(value: datetime, reference: datetime) -> datetime:
    """Express ``value`` in the zone ``reference`` is in.

    A naive ``value`` is a wall-clock time in that zone and only gains its
    ``tzinfo``. A naive ``reference`` stands for the system's local zone, so
    aware values are converted to local time and lose their ``tzinfo``.
    """
    if reference.tzinfo is None:
        return value if value.tzinfo is None else value.astimezone().replace(tzinfo=None)
    if value.tzinfo is None:
        return value.replace(tzinfo=reference.tzinfo)
    return value.astimezone(reference.tzinfo)


def _column_value(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return value


class _Record:
    """Maps dataclass attribute names onto storage column names."""

    COLUMNS: ClassVar[Dict[str, str]] = {}

    @classmethod
    def columns(cls, changes: Mapping[str, Any]) -> Dict[str, Any]:
        return {cls.COLUMNS.get(name, name): _column_value(value) for name, value in changes.items()}


@dataclass(slots=True)
class Conversation(_Record):
    id: str
    user_id: str
    title: str = "New Conversation"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Conversation":
        return cls(
            id=str(record["id"]),
            user_id=str(record["user_id"]),
            title=record.get("title") or "New Conversation",
            created_at=_optional_datetime(record.get("created_at")),
            updated_at=_optional_datetime(record.get("updated_at")),
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "title": self.title,
            "created_at": _column_value(self.created_at),
            "updated_at": _column_value(self.updated_at),
        }


@dataclass(slots=True)
class ChatMessage(_Record):
    id: str
    conversation_id: str
    role: MessageRole
    content: str
    tool_call_id: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "ChatMessage":
        return cls(
            id=str(record["id"]),
            conversation_id=str(record["conversation_id"]),
            role=MessageRole(record["role"]),
            content=record.get("content") or "",
            tool_call_id=record.get("tool_call_id"),
            created_at=_optional_datetime(record.get("created_at")),
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "conversation_id": self.conversation_id,
            "role": self.role.value,
            "content": self.content,
            "tool_call_id": self.tool_call_id,
            "created_at": _column_value(self.created_at),
        }


@dataclass(slots=True)
class CalendarEvent(_Record):
    COLUMNS: ClassVar[Dict[str, str]] = {"starts_at": "start_date_time", "ends_at": "end_date_time"}

    id: str
    user_id: str
    title: str
    starts_at: datetime
    ends_at: datetime
    description: Optional[str] = None
    location: Optional[str] = None
    category: EventCategory = EventCategory.OTHER
    reminder_minutes: int = 30
    recurrence: Recurrence = Recurrence.NONE
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.ends_at <= self.starts_at:
            raise ValueError("Event end must be after its start.")

    @property
    def duration_minutes(self) -> int:
        return int((self.ends_at - self.starts_at).total_seconds() // 60)

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "CalendarEvent":
        return cls(
            id=str(record["id"]),
            user_id=str(record["user_id"]),
            title=str(record["title"]),
            starts_at=_parse_datetime(record["start_date_time"]),
            ends_at=_parse_datetime(record["end_date_time"]),
            description=record.get("description"),
            location=record.get("location"),
            category=EventCategory(record.get("category") or EventCategory.OTHER),
            reminder_minutes=int(record.get("reminder_minutes") if record.get("reminder_minutes") is not None else 30),
            recurrence=Recurrence(record.get("recurrence") or Recurrence.NONE),
            created_at=_optional_datetime(record.get("created_at")),
            updated_at=_optional_datetime(record.get("updated_at")),
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "title": self.title,
            "start_date_time": self.starts_at.isoformat(),
            "end_date_time": self.ends_at.isoformat(),
            "description": self.description,
            "location": self.location,
            "category": self.category.value,
            "reminder_minutes": self.reminder_minutes,
            "recurrence": self.recurrence.value,
            "created_at": _column_value(self.created_at),
            "updated_at": _column_value(self.updated_at),
        }


@dataclass(slots=True)
class TodoTask(_Record):
    COLUMNS: ClassVar[Dict[str, str]] = {"provenance": "created_by"}

    id: str
    user_id: str
    title: str
    description: Optional[str] = None
    completed: bool = False
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: Optional[datetime] = None
    category: Optional[str] = None
    provenance: TaskProvenance = TaskProvenance.USER
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "TodoTask":
        return cls(
            id=str(record["id"]),
            user_id=str(record["user_id"]),
            title=str(record["title"]),
            description=record.get("description"),
            completed=bool(record.get("completed")),
            priority=TaskPriority(record.get("priority") or TaskPriority.MEDIUM),
            due_date=_optional_datetime(record.get("due_date")),
            category=record.get("category"),
            provenance=TaskProvenance(record.get("created_by") or TaskProvenance.USER),
            completed_at=_optional_datetime(record.get("completed_at")),
            created_at=_optional_datetime(record.get("created_at")),
            updated_at=_optional_datetime(record.get("updated_at")),
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "title": self.title,
            "description": self.description,
            "completed": self.completed,
            "priority": self.priority.value,
            "due_date": _column_value(self.due_date),
            "category": self.category,
            "created_by": self.provenance.value,
            "completed_at": _column_value(self.completed_at),
            "created_at": _column_value(self.created_at),
            "updated_at": _column_value(self.updated_at),
        }

    def completion_changes(self, completed: bool, now: datetime) -> Dict[str, Any]:
        """Changes that move the task to ``completed``, stamping ``completed_at`` only on a transition."""

        if completed == self.completed:
            return {}
        return {"completed": completed, "completed_at": now if completed else None}
