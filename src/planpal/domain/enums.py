from __future__ import annotations

from enum import Enum


class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"
    SYSTEM = "system"


class EventCategory(str, Enum):
    WORK = "work"
    PERSONAL = "personal"
    APPOINTMENT = "appointment"
    MEETING = "meeting"
    OTHER = "other"


class Recurrence(str, Enum):
    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return {TaskPriority.LOW: 0, TaskPriority.MEDIUM: 1, TaskPriority.HIGH: 2}[self]


class TaskProvenance(str, Enum):
    USER = "user"
    AI = "ai"


class TaskFilter(str, Enum):
    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"

    @property
    def completed(self) -> bool | None:
        if self is TaskFilter.ACTIVE:
            return False
        if self is TaskFilter.COMPLETED:
            return True
        return None


class EntityKind(str, Enum):
    EVENT = "event"
    TASK = "task"
