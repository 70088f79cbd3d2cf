from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, Dict

from ..domain import CalendarEvent, EntityKind, EventCategory, Recurrence
from ..domain.errors import NotFoundError, ParseError
from . import formatting
from .arguments import CreateEventArguments, DeleteEventArguments, ListEventsArguments, UpdateEventArguments
from .catalog import ToolName
from .registry import ToolContext, register_tool

logger = logging.getLogger(__name__)

AGENT_REMINDER_MINUTES = 30


def _unparsable(phrase: str) -> ParseError:
    return ParseError(
        f'I couldn\'t understand the date/time "{phrase}".',
        detail='Please try again with a clearer format like "tomorrow at 3 PM" or "January 15 at 2:30 PM".',
    )


def _resolve_event(context: ToolContext, title: str) -> CalendarEvent:
    event = context.entities.find(context.owner_id, EntityKind.EVENT, title)
    if event is None:
        raise NotFoundError(
            f'I couldn\'t find an event with the title "{title}".',
            detail="Please check your calendar and try again with the exact event name.",
            heading="Event Not Found",
        )
    return event


@register_tool(ToolName.CREATE_CALENDAR_EVENT, arguments=CreateEventArguments)
def create_calendar_event(context: ToolContext, args: CreateEventArguments) -> str:
    span = context.temporal.parse(args.date_time, context.now)
    if span is None:
        raise _unparsable(args.date_time)
    if args.duration:
        span = span.with_duration(args.duration)
    else:
        span = span.ensure_end(context.default_event_minutes)

    event = context.events.create(
        context.owner_id,
        {
            "title": args.title,
            "starts_at": span.start,
            "ends_at": span.end,
            "description": args.description or None,
            "location": args.location or None,
            "category": EventCategory.MEETING,
            "reminder_minutes": AGENT_REMINDER_MINUTES,
            "recurrence": Recurrence.NONE,
        },
    )
    logger.info("Created event %s for %s at %s", event.id, context.owner_id, event.starts_at.isoformat())
    return formatting.event_created(formatting.local_event(event, context.now), attendees=args.attendees)


@register_tool(ToolName.LIST_CALENDAR_EVENTS, arguments=ListEventsArguments)
def list_calendar_events(context: ToolContext, args: ListEventsArguments) -> str:
    phrase = args.date or "today"
    start, end = context.temporal.day_window(phrase, context.now)
    events = [
        formatting.local_event(event, context.now)
        for event in context.events.list_in_window(context.owner_id, start, end, limit=args.limit)
    ]
    return formatting.agenda(events, start, phrase)


@register_tool(ToolName.DELETE_CALENDAR_EVENT, arguments=DeleteEventArguments)
def delete_calendar_event(context: ToolContext, args: DeleteEventArguments) -> str:
    event = _resolve_event(context, args.event_title)
    if not context.events.delete(context.owner_id, event.id):
        raise NotFoundError(f'The event "{event.title}" no longer exists.', heading="Event Not Found")
    logger.info("Deleted event %s for %s", event.id, context.owner_id)
    return formatting.event_deleted(formatting.local_event(event, context.now))


@register_tool(ToolName.UPDATE_CALENDAR_EVENT, arguments=UpdateEventArguments)
def update_calendar_event(context: ToolContext, args: UpdateEventArguments) -> str:
    event = _resolve_event(context, args.event_title)

    changes: Dict[str, Any] = {}
    if args.new_title:
        changes["title"] = args.new_title
    if args.new_date_time:
        span = context.temporal.parse(args.new_date_time, context.now)
        if span is None:
            raise _unparsable(args.new_date_time)
        minutes = args.new_duration or event.duration_minutes
        changes["starts_at"] = span.start
        changes["ends_at"] = span.start + timedelta(minutes=minutes)
    elif args.new_duration:
        changes["ends_at"] = event.starts_at + timedelta(minutes=args.new_duration)
    # an empty string clears the field
    if args.new_location is not None:
        changes["location"] = args.new_location or None
    if args.new_description is not None:
        changes["description"] = args.new_description or None

    updated = context.events.update(context.owner_id, event.id, changes)
    if updated is None:
        raise NotFoundError(f'The event "{event.title}" no longer exists.', heading="Event Not Found")
    logger.info("Updated event %s for %s: %s", event.id, context.owner_id, sorted(changes))
    return formatting.event_updated(formatting.local_event(updated, context.now))
