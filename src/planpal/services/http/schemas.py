from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ...domain import (
    CalendarEvent,
    ChatMessage,
    Conversation,
    EventCategory,
    MessageRole,
    Recurrence,
    TaskPriority,
    TaskProvenance,
    TodoTask,
)


class ApiModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    def dump(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


# ---------------------------------------------------------------------- payloads


class ConversationPayload(ApiModel):
    id: str
    user_id: str
    title: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, conversation: Conversation) -> "ConversationPayload":
        return cls(
            id=conversation.id,
            user_id=conversation.user_id,
            title=conversation.title,
            created_at=conversation.created_at,
            updated_at=conversation.updated_at,
        )


class MessagePayload(ApiModel):
    id: str
    conversation_id: str
    role: MessageRole
    content: str
    tool_call_id: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, message: ChatMessage) -> "MessagePayload":
        return cls(
            id=message.id,
            conversation_id=message.conversation_id,
            role=message.role,
            content=message.content,
            tool_call_id=message.tool_call_id,
            created_at=message.created_at,
        )


class EventPayload(ApiModel):
    id: str
    user_id: str
    title: str
    description: Optional[str] = None
    start_date_time: datetime
    end_date_time: datetime
    location: Optional[str] = None
    category: EventCategory
    reminder_minutes: int
    recurrence: Recurrence
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, event: CalendarEvent) -> "EventPayload":
        return cls(
            id=event.id,
            user_id=event.user_id,
            title=event.title,
            description=event.description,
            start_date_time=event.starts_at,
            end_date_time=event.ends_at,
            location=event.location,
            category=event.category,
            reminder_minutes=event.reminder_minutes,
            recurrence=event.recurrence,
            created_at=event.created_at,
            updated_at=event.updated_at,
        )


class TaskPayload(ApiModel):
    id: str
    user_id: str
    title: str
    description: Optional[str] = None
    completed: bool
    priority: TaskPriority
    due_date: Optional[datetime] = None
    category: Optional[str] = None
    created_by: TaskProvenance
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, task: TodoTask) -> "TaskPayload":
        return cls(
            id=task.id,
            user_id=task.user_id,
            title=task.title,
            description=task.description,
            completed=task.completed,
            priority=task.priority,
            due_date=task.due_date,
            category=task.category,
            created_by=task.provenance,
            completed_at=task.completed_at,
            created_at=task.created_at,
            updated_at=task.updated_at,
        )


# ---------------------------------------------------------------------- requests

_EVENT_ATTRIBUTES = {"start_date_time": "starts_at", "end_date_time": "ends_at"}
_TASK_ATTRIBUTES = {"created_by": "provenance"}


class RequestModel(ApiModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel, str_strip_whitespace=True)


def _blank_to_none(values: Dict[str, Any], *names: str) -> Dict[str, Any]:
    for name in names:
        if name in values and isinstance(values[name], str) and not values[name].strip():
            values[name] = None
    return values


class CreateConversationRequest(RequestModel):
    title: Optional[str] = Field(default=None, max_length=200)


class SendMessageRequest(RequestModel):
    conversation_id: str = Field(min_length=1)
    content: str = Field(min_length=1)


class EventCreateRequest(RequestModel):
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)
    start_date_time: datetime
    end_date_time: datetime
    location: Optional[str] = Field(default=None, max_length=200)
    category: EventCategory = EventCategory.OTHER
    reminder_minutes: int = Field(default=30, ge=0, le=10080)
    recurrence: Recurrence = Recurrence.NONE

    def to_fields(self) -> Dict[str, Any]:
        values = _blank_to_none(self.model_dump(), "description", "location")
        return {_EVENT_ATTRIBUTES.get(name, name): value for name, value in values.items()}


class EventUpdateRequest(RequestModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)
    start_date_time: Optional[datetime] = None
    end_date_time: Optional[datetime] = None
    location: Optional[str] = Field(default=None, max_length=200)
    category: Optional[EventCategory] = None
    reminder_minutes: Optional[int] = Field(default=None, ge=0, le=10080)
    recurrence: Optional[Recurrence] = None

    def to_changes(self) -> Dict[str, Any]:
        values = _blank_to_none(self.model_dump(exclude_unset=True), "description", "location")
        # these columns are not nullable; an explicit null leaves them alone
        for required in ("title", "start_date_time", "end_date_time", "category", "reminder_minutes", "recurrence"):
            if values.get(required, ...) is None:
                values.pop(required)
        return {_EVENT_ATTRIBUTES.get(name, name): value for name, value in values.items()}


class TaskCreateRequest(RequestModel):
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: Optional[datetime] = None
    category: Optional[str] = None
    created_by: TaskProvenance = TaskProvenance.USER

    def to_fields(self) -> Dict[str, Any]:
        values = _blank_to_none(self.model_dump(), "description", "category")
        return {_TASK_ATTRIBUTES.get(name, name): value for name, value in values.items()}


class TaskUpdateRequest(RequestModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    completed: Optional[bool] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[datetime] = None
    category: Optional[str] = None

    def to_changes(self) -> Dict[str, Any]:
        values = _blank_to_none(self.model_dump(exclude_unset=True), "description", "category")
        for required in ("title", "completed", "priority"):
            if values.get(required, ...) is None:
                values.pop(required)
        return values
