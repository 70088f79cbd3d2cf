"""One pydantic model per tool; field aliases are the wire names the model uses."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..domain import TaskFilter, TaskPriority


class ToolArguments(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True, extra="ignore")


def _lowercase(value: Any) -> Any:
    return value.strip().lower() if isinstance(value, str) else value


class CreateEventArguments(ToolArguments):
    title: str = Field(min_length=1)
    date_time: str = Field(alias="dateTime", min_length=1)
    description: Optional[str] = Field(default=None)
    duration: Optional[int] = Field(default=None, gt=0)
    location: Optional[str] = Field(default=None)
    attendees: Optional[str] = Field(default=None)

    @field_validator("attendees", mode="before")
    @classmethod
    def _join_attendees(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple)):
            return ", ".join(str(item) for item in value)
        return value


class ListEventsArguments(ToolArguments):
    date: Optional[str] = Field(default="today")
    limit: int = Field(default=10, gt=0)


class DeleteEventArguments(ToolArguments):
    event_title: str = Field(alias="eventTitle", min_length=1)


class UpdateEventArguments(ToolArguments):
    event_title: str = Field(alias="eventTitle", min_length=1)
    new_title: Optional[str] = Field(default=None, alias="newTitle")
    new_date_time: Optional[str] = Field(default=None, alias="newDateTime")
    new_duration: Optional[int] = Field(default=None, alias="newDuration", gt=0)
    new_location: Optional[str] = Field(default=None, alias="newLocation")
    new_description: Optional[str] = Field(default=None, alias="newDescription")


class CreateTodoArguments(ToolArguments):
    title: str = Field(min_length=1)
    description: Optional[str] = Field(default=None)
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM)
    due_date: Optional[str] = Field(default=None, alias="dueDate")
    category: Optional[str] = Field(default=None)

    @field_validator("priority", mode="before")
    @classmethod
    def _normalize_priority(cls, value: Any) -> Any:
        return TaskPriority.MEDIUM if value in (None, "") else _lowercase(value)


class ListTodosArguments(ToolArguments):
    filter: TaskFilter = Field(default=TaskFilter.ACTIVE)

    @field_validator("filter", mode="before")
    @classmethod
    def _normalize_filter(cls, value: Any) -> Any:
        return TaskFilter.ACTIVE if value in (None, "") else _lowercase(value)


class CompleteTodoArguments(ToolArguments):
    task_title: str = Field(alias="taskTitle", min_length=1)


class DeleteTodoArguments(ToolArguments):
    task_title: str = Field(alias="taskTitle", min_length=1)


def wire_names(model: type[ToolArguments]) -> set[str]:
    return {info.alias or name for name, info in model.model_fields.items()}


def required_wire_names(model: type[ToolArguments]) -> set[str]:
    return {info.alias or name for name, info in model.model_fields.items() if info.is_required()}
