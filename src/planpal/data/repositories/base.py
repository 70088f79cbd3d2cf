"""Store interfaces shared by the Supabase and local back ends.

Every read and write is scoped by the owning user id; a record owned by
someone else behaves exactly like a missing one.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, List, Mapping, Optional, Protocol

from ...domain import CalendarEvent, ChatMessage, Conversation, MessageRole, TodoTask


class EventStore(Protocol):
    def create(self, owner_id: str, fields: Mapping[str, Any]) -> CalendarEvent: ...

    def list_for_owner(self, owner_id: str) -> List[CalendarEvent]: ...

    def list_in_window(
        self, owner_id: str, start: datetime, end: datetime, *, limit: Optional[int] = None
    ) -> List[CalendarEvent]: ...

    def get(self, owner_id: str, event_id: str) -> Optional[CalendarEvent]: ...

    def update(self, owner_id: str, event_id: str, changes: Mapping[str, Any]) -> Optional[CalendarEvent]: ...

    def delete(self, owner_id: str, event_id: str) -> bool: ...


class TaskStore(Protocol):
    def create(self, owner_id: str, fields: Mapping[str, Any]) -> TodoTask: ...

    def list_for_owner(self, owner_id: str, *, completed: Optional[bool] = None) -> List[TodoTask]: ...

    def get(self, owner_id: str, task_id: str) -> Optional[TodoTask]: ...

    def update(self, owner_id: str, task_id: str, changes: Mapping[str, Any]) -> Optional[TodoTask]: ...

    def delete(self, owner_id: str, task_id: str) -> bool: ...


class ConversationStore(Protocol):
    def create(self, owner_id: str, title: str) -> Conversation: ...

    def get(self, owner_id: str, conversation_id: str) -> Optional[Conversation]: ...

    def list_for_owner(self, owner_id: str) -> List[Conversation]: ...

    def update(self, owner_id: str, conversation_id: str, changes: Mapping[str, Any]) -> Optional[Conversation]: ...

    def delete(self, owner_id: str, conversation_id: str) -> bool: ...


class MessageStore(Protocol):
    def append(
        self,
        conversation_id: str,
        role: MessageRole,
        content: str,
        *,
        tool_call_id: Optional[str] = None,
    ) -> ChatMessage: ...

    def list_for_conversation(self, conversation_id: str) -> List[ChatMessage]: ...

    def list_recent(self, conversation_id: str, limit: int) -> List[ChatMessage]: ...

    def delete_for_conversation(self, conversation_id: str) -> int: ...
