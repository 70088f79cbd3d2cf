"""Title-based lookup of events and tasks."""

from __future__ import annotations

from datetime import timedelta

from conftest import OTHER_OWNER, OWNER, REF
from planpal.core import EntityResolver, first_title_match
from planpal.data import LocalEventRepository, LocalTaskRepository
from planpal.domain import EntityKind


def _resolver(events: LocalEventRepository, tasks: LocalTaskRepository) -> EntityResolver:
    return EntityResolver(events=events, tasks=tasks)


class TestEntityResolver:
    def test_matches_whole_title_ignoring_case_and_padding(
        self, events: LocalEventRepository, tasks: LocalTaskRepository
    ) -> None:
        event = events.create(OWNER, {"title": "Dentist", "starts_at": REF, "ends_at": REF + timedelta(hours=1)})

        resolver = _resolver(events, tasks)

        assert resolver.find(OWNER, EntityKind.EVENT, "  DENTIST ") == event
        assert resolver.find_event(OWNER, "Dent") is None

    def test_scoped_to_owner(self, events: LocalEventRepository, tasks: LocalTaskRepository) -> None:
        tasks.create(OWNER, {"title": "Buy milk"})

        assert _resolver(events, tasks).find_task(OTHER_OWNER, "Buy milk") is None

    def test_first_match_wins_among_duplicates(
        self, events: LocalEventRepository, tasks: LocalTaskRepository
    ) -> None:
        first = tasks.create(OWNER, {"title": "Buy milk"})
        tasks.create(OWNER, {"title": "buy milk"})

        assert _resolver(events, tasks).find_task(OWNER, "Buy Milk").id == first.id

    def test_incomplete_only_skips_finished_tasks(
        self, events: LocalEventRepository, tasks: LocalTaskRepository
    ) -> None:
        finished = tasks.create(OWNER, {"title": "Buy milk"})
        tasks.update(OWNER, finished.id, finished.completion_changes(True, REF))
        pending = tasks.create(OWNER, {"title": "Buy milk"})

        resolver = _resolver(events, tasks)

        assert resolver.find_task(OWNER, "Buy milk").id == finished.id
        assert resolver.find_task(OWNER, "Buy milk", incomplete_only=True).id == pending.id


def test_first_title_match_on_plain_records(tasks: LocalTaskRepository) -> None:
    tasks.create(OWNER, {"title": "Call Mom"})

    assert first_title_match(tasks.list_for_owner(OWNER), "call mom").title == "Call Mom"
    assert first_title_match([], "anything") is None
