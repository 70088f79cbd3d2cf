"""Static description of every tool the model may call.

The catalog is plain data. It is rendered into the OpenAI function-tool
format for the model and checked against the registered handlers when a
dispatcher is built.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

JsonSchema = Dict[str, Any]

CATALOG_VERSION = "1.0"


class ToolName(str, Enum):
    CREATE_CALENDAR_EVENT = "create_calendar_event"
    LIST_CALENDAR_EVENTS = "list_calendar_events"
    DELETE_CALENDAR_EVENT = "delete_calendar_event"
    UPDATE_CALENDAR_EVENT = "update_calendar_event"
    CREATE_TODO = "create_todo"
    LIST_TODOS = "list_todos"
    COMPLETE_TODO = "complete_todo"
    DELETE_TODO = "delete_todo"


@dataclass(frozen=True)
class ToolParameter:
    name: str
    type: str
    description: str
    required: bool = False
    enum: Optional[Tuple[str, ...]] = None

    def schema(self) -> JsonSchema:
        schema: JsonSchema = {"type": self.type, "description": self.description}
        if self.enum:
            schema["enum"] = list(self.enum)
        return schema


@dataclass(frozen=True)
class ToolDescriptor:
    name: ToolName
    description: str
    parameters: Tuple[ToolParameter, ...] = field(default_factory=tuple)

    @property
    def parameter_names(self) -> List[str]:
        return [param.name for param in self.parameters]

    @property
    def required(self) -> List[str]:
        return [param.name for param in self.parameters if param.required]

    @property
    def parameter_schema(self) -> JsonSchema:
        return {
            "type": "object",
            "properties": {param.name: param.schema() for param in self.parameters},
            "required": self.required,
        }

    def as_tool(self) -> Dict[str, Any]:
        return {
            "type": "function",
            "function": {
                "name": self.name.value,
                "description": self.description,
                "parameters": self.parameter_schema,
            },
        }


TOOL_CATALOG: Tuple[ToolDescriptor, ...] = (
    ToolDescriptor(
        name=ToolName.CREATE_CALENDAR_EVENT,
        description=(
            "Create a calendar event for the user. Use this when the user asks to schedule a meeting, "
            "create an appointment, or add an event to their calendar."
        ),
        parameters=(
            ToolParameter("title", "string", "The title/name of the event or meeting", required=True),
            ToolParameter("description", "string", "Additional details about the event (optional)"),
            ToolParameter(
                "dateTime",
                "string",
                'The date and time for the event in natural language (e.g., "tomorrow at 3 PM", '
                '"next Monday at 10 AM", "January 15 at 2:30 PM")',
                required=True,
            ),
            ToolParameter("duration", "number", "Duration of the event in minutes (default: 60)"),
            ToolParameter("location", "string", "Location of the event (optional)"),
            ToolParameter("attendees", "string", "Comma-separated list of attendee names or emails (optional)"),
        ),
    ),
    ToolDescriptor(
        name=ToolName.LIST_CALENDAR_EVENTS,
        description=(
            "List upcoming calendar events for the user. Use this when the user asks about their schedule, "
            "upcoming meetings, or what's on their calendar."
        ),
        parameters=(
            ToolParameter(
                "date",
                "string",
                'The date to check (e.g., "today", "tomorrow", "next week"). Defaults to today.',
            ),
            ToolParameter("limit", "number", "Maximum number of events to return (default: 10)"),
        ),
    ),
    ToolDescriptor(
        name=ToolName.DELETE_CALENDAR_EVENT,
        description=(
            "Delete a calendar event. Use this when the user asks to cancel, delete, or remove an event "
            "from their calendar."
        ),
        parameters=(
            ToolParameter(
                "eventTitle",
                "string",
                "The title of the event to delete (you must list events first to get the exact title)",
                required=True,
            ),
        ),
    ),
    ToolDescriptor(
        name=ToolName.UPDATE_CALENDAR_EVENT,
        description=(
            "Update/edit a calendar event. Use this when the user asks to change, reschedule, or modify an event."
        ),
        parameters=(
            ToolParameter("eventTitle", "string", "The current title of the event to update", required=True),
            ToolParameter("newTitle", "string", "New title for the event (optional)"),
            ToolParameter("newDateTime", "string", "New date/time in natural language (optional)"),
            ToolParameter("newDuration", "number", "New duration in minutes (optional)"),
            ToolParameter("newLocation", "string", "New location (optional)"),
            ToolParameter("newDescription", "string", "New description (optional)"),
        ),
    ),
    ToolDescriptor(
        name=ToolName.CREATE_TODO,
        description=(
            "Create a todo task for the user. Use this when the user asks to add a task, create a reminder, "
            "or add something to their todo list."
        ),
        parameters=(
            ToolParameter("title", "string", "The task title/description", required=True),
            ToolParameter("description", "string", "Additional details about the task (optional)"),
            ToolParameter(
                "priority", "string", "Task priority (default: medium)", enum=("low", "medium", "high")
            ),
            ToolParameter(
                "dueDate", "string", 'Due date in natural language (e.g., "tomorrow", "next week", "Friday")'
            ),
            ToolParameter("category", "string", "Category or tag for the task (optional)"),
        ),
    ),
    ToolDescriptor(
        name=ToolName.LIST_TODOS,
        description=(
            "List the user's todo tasks. Use this when the user asks about their tasks, what they need to do, "
            "or their todo list."
        ),
        parameters=(
            ToolParameter(
                "filter",
                "string",
                "Filter tasks by status (default: active)",
                enum=("all", "active", "completed"),
            ),
        ),
    ),
    ToolDescriptor(
        name=ToolName.COMPLETE_TODO,
        description="Mark a todo task as completed. Use this when the user says they finished or completed a task.",
        parameters=(
            ToolParameter("taskTitle", "string", "The title of the task to mark as complete", required=True),
        ),
    ),
    ToolDescriptor(
        name=ToolName.DELETE_TODO,
        description="Delete a todo task. Use this when the user asks to remove or delete a task.",
        parameters=(ToolParameter("taskTitle", "string", "The title of the task to delete", required=True),),
    ),
)


def get_descriptor(name: ToolName) -> ToolDescriptor:
    for descriptor in TOOL_CATALOG:
        if descriptor.name is name:
            return descriptor
    raise KeyError(f"Tool '{name}' is not in the catalog.")


def openai_tools(catalog: Tuple[ToolDescriptor, ...] = TOOL_CATALOG) -> List[Dict[str, Any]]:
    return [descriptor.as_tool() for descriptor in catalog]


def catalog_payload(catalog: Tuple[ToolDescriptor, ...] = TOOL_CATALOG) -> Dict[str, Any]:
    """The catalog with its version, as served by ``/api/tools`` and ``planpal tools``."""

    return {"version": CATALOG_VERSION, "tools": openai_tools(catalog)}
