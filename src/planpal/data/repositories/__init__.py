"""Supabase repositories and the store interfaces they satisfy."""

from __future__ import annotations

from .base import ConversationStore, EventStore, MessageStore, TaskStore
from .conversations import ConversationRepository, MessageRepository
from .events import EventRepository
from .tasks import TaskRepository

__all__ = [
    "ConversationRepository",
    "ConversationStore",
    "EventRepository",
    "EventStore",
    "MessageRepository",
    "MessageStore",
    "TaskRepository",
    "TaskStore",
]
