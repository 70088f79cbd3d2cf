"""Markdown confirmations returned to the model as tool results."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Optional, Sequence

from ..domain import CalendarEvent, TaskFilter, TodoTask, in_zone_of


def local_event(event: CalendarEvent, reference: datetime) -> CalendarEvent:
    """A copy of ``event`` with its times shown in the zone of ``reference``.

    Supabase hands timestamps back in UTC; confirmations read in the user's zone.
    """
    return replace(
        event,
        starts_at=in_zone_of(event.starts_at, reference),
        ends_at=in_zone_of(event.ends_at, reference),
    )


def local_task(task: TodoTask, reference: datetime) -> TodoTask:
    if task.due_date is None:
        return task
    return replace(task, due_date=in_zone_of(task.due_date, reference))


def format_time(value: datetime) -> str:
    return value.strftime("%I:%M %p").lstrip("0")


def format_long_date(value: datetime) -> str:
    return f"{value:%A, %B} {value.day}, {value.year}"


def format_day(value: datetime) -> str:
    return f"{value:%A, %B} {value.day}"


def format_short_day(value: datetime) -> str:
    return f"{value:%b} {value.day}"


def _time_range(event: CalendarEvent) -> str:
    return f"{format_time(event.starts_at)} - {format_time(event.ends_at)}"


def _plural(count: int, noun: str) -> str:
    return f"**{count}** {noun}{'' if count == 1 else 's'}"


def event_created(event: CalendarEvent, *, attendees: Optional[str] = None) -> str:
    lines = [
        "### ✅ Event Created Successfully",
        f"**{event.title}**",
        f"📅 **Date:** {format_long_date(event.starts_at)}",
        f"🕐 **Time:** {_time_range(event)}",
    ]
    if event.location:
        lines.append(f"📍 **Location:** {event.location}")
    if attendees:
        lines.append(f"👥 **Attendees:** {attendees}")
    if event.description:
        lines.append(f"📝 **Details:**\n> {event.description}")
    lines.append("---")
    lines.append(f"*A reminder will be sent {event.reminder_minutes} minutes before the meeting.*")
    return "\n\n".join(lines)


def event_updated(event: CalendarEvent) -> str:
    lines = [
        "### ✅ Event Updated Successfully",
        f"**{event.title}**",
        f"📅 **Date:** {format_long_date(event.starts_at)}",
        f"🕐 **Time:** {_time_range(event)}",
    ]
    if event.location:
        lines.append(f"📍 **Location:** {event.location}")
    if event.description:
        lines.append(f"📝 **Details:**\n> {event.description}")
    lines.append("---")
    lines.append("*Event has been updated in your calendar.*")
    return "\n\n".join(lines)


def event_deleted(event: CalendarEvent) -> str:
    return (
        "### ✅ Event Deleted Successfully\n\n"
        f'The event **"{event.title}"** scheduled for {format_day(event.starts_at)} '
        f"at {format_time(event.starts_at)} has been removed from your calendar."
    )


def agenda(events: Sequence[CalendarEvent], day: datetime, phrase: str) -> str:
    if not events:
        return f"### 📅 No Events Scheduled\n\nYou have no events scheduled for {phrase}."
    parts = [
        f"### 📅 Your Schedule for {format_day(day)}",
        f"You have {_plural(len(events), 'event')} scheduled:",
        "---",
    ]
    for index, event in enumerate(events, start=1):
        parts.append(f"#### {index}. {event.title}")
        parts.append(f"🕐 **Time:** {_time_range(event)}")
        if event.location:
            parts.append(f"📍 **Location:** {event.location}")
        if event.description:
            parts.append(f"📝 **Details:** {event.description}")
        parts.append("---")
    return "\n\n".join(parts)


def task_created(task: TodoTask) -> str:
    lines = ["### ✅ Task Added Successfully", f"**{task.title}**"]
    if task.description:
        lines.append(f"📝 **Details:** {task.description}")
    lines.append(f"🎯 **Priority:** {task.priority.value.capitalize()}")
    if task.due_date:
        lines.append(f"📅 **Due:** {format_day(task.due_date)}")
    if task.category:
        lines.append(f"🏷️ **Category:** {task.category}")
    lines.append("---")
    lines.append("*Task added to your todo list.*")
    return "\n\n".join(lines)


def task_list(tasks: Sequence[TodoTask], task_filter: TaskFilter) -> str:
    qualifier = "" if task_filter is TaskFilter.ALL else f"{task_filter.value} "
    if not tasks:
        return f"### 📝 No Tasks Found\n\nYou don't have any {qualifier}tasks at the moment."
    parts = [
        f"### 📝 Your {qualifier.capitalize()}Tasks",
        f"You have {_plural(len(tasks), 'task')}:",
        "---",
    ]
    for index, task in enumerate(tasks, start=1):
        icon = "✅" if task.completed else "⭕"
        parts.append(f"#### {icon} {index}. {task.title}")
        if task.description:
            parts.append(f"📝 {task.description}")
        summary = f"🎯 **Priority:** {task.priority.value}"
        if task.category:
            summary += f" | 🏷️ **Category:** {task.category}"
        if task.due_date:
            summary += f" | 📅 **Due:** {format_short_day(task.due_date)}"
        parts.append(summary)
        parts.append("---")
    return "\n\n".join(parts)


def task_completed(task: TodoTask) -> str:
    return f"### ✅ Task Completed!\n\n**{task.title}** has been marked as complete. Great job! 🎉"


def task_deleted(task: TodoTask) -> str:
    return f'### 🗑️ Task Deleted\n\nThe task **"{task.title}"** has been removed from your todo list.'
