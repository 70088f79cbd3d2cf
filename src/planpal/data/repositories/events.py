from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional
from uuid import uuid4

from ...domain import CalendarEvent
from ..supabase import SupabaseGateway


@dataclass(slots=True)
class EventRepository:
    gateway: SupabaseGateway
    table_name: str

    def create(self, owner_id: str, fields: Mapping[str, Any]) -> CalendarEvent:
        now = datetime.now(timezone.utc)
        event = CalendarEvent(id=str(uuid4()), user_id=owner_id, created_at=now, updated_at=now, **fields)
        rows = self.gateway.execute(self.gateway.table(self.table_name).insert(event.to_record()))
        return CalendarEvent.from_record(rows[0]) if rows else event

    def list_for_owner(self, owner_id: str) -> List[CalendarEvent]:
        query = (
            self.gateway.table(self.table_name)
            .select("*")
            .eq("user_id", owner_id)
            .order("created_at", desc=False)
        )
        return [CalendarEvent.from_record(record) for record in self.gateway.execute(query)]

    def list_in_window(
        self, owner_id: str, start: datetime, end: datetime, *, limit: Optional[int] = None
    ) -> List[CalendarEvent]:
        query = (
            self.gateway.table(self.table_name)
            .select("*")
            .eq("user_id", owner_id)
            .gte("start_date_time", start.isoformat())
            .lte("start_date_time", end.isoformat())
            .order("start_date_time", desc=False)
        )
        if limit is not None:
            query = query.limit(limit)
        return [CalendarEvent.from_record(record) for record in self.gateway.execute(query)]

    def get(self, owner_id: str, event_id: str) -> Optional[CalendarEvent]:
        query = self.gateway.table(self.table_name).select("*").eq("id", event_id).eq("user_id", owner_id).limit(1)
        rows = self.gateway.execute(query)
        return CalendarEvent.from_record(rows[0]) if rows else None

    def update(self, owner_id: str, event_id: str, changes: Mapping[str, Any]) -> Optional[CalendarEvent]:
        payload = CalendarEvent.columns({**changes, "updated_at": datetime.now(timezone.utc)})
        query = self.gateway.table(self.table_name).update(payload).eq("id", event_id).eq("user_id", owner_id)
        rows = self.gateway.execute(query)
        return CalendarEvent.from_record(rows[0]) if rows else None

    def delete(self, owner_id: str, event_id: str) -> bool:
        query = self.gateway.table(self.table_name).delete().eq("id", event_id).eq("user_id", owner_id)
        return bool(self.gateway.execute(query))
