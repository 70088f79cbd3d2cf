from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from ..domain import CalendarEvent, in_zone_of
from ..domain.errors import NotFoundError, ValidationError
from .context import ServiceContext

logger = logging.getLogger(__name__)

_TIME_FIELDS = ("starts_at", "ends_at")


@dataclass(slots=True)
class CalendarService:
    """Direct event CRUD for the calendar screens, outside the agent.

    Times without an offset are read as wall-clock times in the configured
    zone, the same zone the assistant schedules in.
    """

    context: ServiceContext

    def _local(self, value: datetime) -> datetime:
        return in_zone_of(value, self.context.clock())

    def _localized(self, fields: Mapping[str, Any]) -> Dict[str, Any]:
        payload = dict(fields)
        for name in _TIME_FIELDS:
            if payload.get(name) is not None:
                payload[name] = self._local(payload[name])
        return payload

    def list(
        self, owner_id: str, *, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> List[CalendarEvent]:
        events = self.context.events.list_for_owner(owner_id)
        if start is not None:
            start = self._local(start)
            events = [event for event in events if self._local(event.starts_at) >= start]
        if end is not None:
            end = self._local(end)
            events = [event for event in events if self._local(event.ends_at) <= end]
        return sorted(events, key=lambda event: self._local(event.starts_at))

    def get(self, owner_id: str, event_id: str) -> CalendarEvent:
        event = self.context.events.get(owner_id, event_id)
        if event is None:
            raise NotFoundError(f"Event {event_id} was not found.", heading="Event Not Found")
        return event

    def create(self, owner_id: str, fields: Mapping[str, Any]) -> CalendarEvent:
        payload = self._localized(fields)
        _check_order(payload.get("starts_at"), payload.get("ends_at"))
        event = self.context.events.create(owner_id, payload)
        logger.info("Created event %s for %s", event.id, owner_id)
        return event

    def update(self, owner_id: str, event_id: str, changes: Mapping[str, Any]) -> CalendarEvent:
        existing = self.get(owner_id, event_id)
        merged = self._localized(changes)
        if "starts_at" in merged or "ends_at" in merged:
            # both bounds are rewritten so a stored row never mixes naive and aware times
            merged.setdefault("starts_at", self._local(existing.starts_at))
            merged.setdefault("ends_at", self._local(existing.ends_at))
            _check_order(merged["starts_at"], merged["ends_at"])
        updated = self.context.events.update(owner_id, event_id, merged)
        if updated is None:
            raise NotFoundError(f"Event {event_id} was not found.", heading="Event Not Found")
        return updated

    def delete(self, owner_id: str, event_id: str) -> CalendarEvent:
        event = self.get(owner_id, event_id)
        self.context.events.delete(owner_id, event_id)
        logger.info("Deleted event %s for %s", event_id, owner_id)
        return event


def _check_order(starts_at: Optional[datetime], ends_at: Optional[datetime]) -> None:
    if starts_at is None or ends_at is None:
        raise ValidationError("Both start and end are required.")
    if ends_at <= starts_at:
        raise ValidationError("End date must be after start date.")
