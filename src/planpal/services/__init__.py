"""Application services orchestrating data access and domain logic."""

from __future__ import annotations

from .calendar import CalendarService
from .context import ServiceContext
from .conversations import ConversationService
from .tasks import TaskService, TaskSort, sort_tasks

__all__ = [
    "CalendarService",
    "ConversationService",
    "ServiceContext",
    "TaskService",
    "TaskSort",
    "sort_tasks",
]
