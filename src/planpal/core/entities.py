from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, TypeVar, Union

from ..data.repositories.base import EventStore, TaskStore
from ..domain import CalendarEvent, EntityKind, TodoTask

logger = logging.getLogger(__name__)

_Entity = TypeVar("_Entity", CalendarEvent, TodoTask)


def _title_key(title: str) -> str:
    return title.strip().casefold()


def first_title_match(records: Iterable[_Entity], spoken_title: str) -> Optional[_Entity]:
    """First record, in the given order, whose title equals ``spoken_title`` ignoring case."""

    wanted = _title_key(spoken_title)
    for record in records:
        if record.title.casefold() == wanted:
            return record
    return None


@dataclass(slots=True)
class EntityResolver:
    """Locate one owned event or task from a spoken title.

    Matching is whole-title and case-insensitive. When several records share a
    title the first one in store order wins and nobody is asked to choose.
    """

    events: EventStore
    tasks: TaskStore

    def find(
        self,
        owner_id: str,
        kind: EntityKind,
        spoken_title: str,
        *,
        incomplete_only: bool = False,
    ) -> Optional[Union[CalendarEvent, TodoTask]]:
        match: Optional[Union[CalendarEvent, TodoTask]]
        if kind is EntityKind.EVENT:
            match = first_title_match(self.events.list_for_owner(owner_id), spoken_title)
        else:
            candidates = self.tasks.list_for_owner(owner_id, completed=False if incomplete_only else None)
            match = first_title_match(candidates, spoken_title)
        logger.debug(
            "Resolved %s title %r for %s -> %s", kind.value, spoken_title, owner_id, match.id if match else None
        )
        return match

    def find_event(self, owner_id: str, spoken_title: str) -> Optional[CalendarEvent]:
        return self.find(owner_id, EntityKind.EVENT, spoken_title)

    def find_task(self, owner_id: str, spoken_title: str, *, incomplete_only: bool = False) -> Optional[TodoTask]:
        return self.find(owner_id, EntityKind.TASK, spoken_title, incomplete_only=incomplete_only)
