"""Domain models for calendar events, tasks and conversations."""

from __future__ import annotations

from .enums import EntityKind, EventCategory, MessageRole, Recurrence, TaskFilter, TaskPriority, TaskProvenance
from .models import CalendarEvent, ChatMessage, Conversation, TodoTask, in_zone_of

__all__ = [
    "CalendarEvent",
    "ChatMessage",
    "Conversation",
    "EntityKind",
    "EventCategory",
    "MessageRole",
    "Recurrence",
    "TaskFilter",
    "TaskPriority",
    "TaskProvenance",
    "TodoTask",
    "in_zone_of",
]
