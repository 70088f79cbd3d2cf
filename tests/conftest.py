"""Shared fixtures: local stores, a scripted model and a fixed reference instant."""

from __future__ import annotations

from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Callable, List, Sequence, Union

import pytest

from planpal.config import AgentSettings, AppSettings, LlmSettings, StorageSettings, SupabaseSettings
from planpal.data import (
    LocalConversationRepository,
    LocalDatabase,
    LocalEventRepository,
    LocalMessageRepository,
    LocalTaskRepository,
)
from planpal.orchestrator import ConversationOrchestrator, ModelResponse, ToolCall, TranscriptEntry
from planpal.services import ServiceContext
from planpal.tools import ToolDispatcher

# Wednesday
REF = datetime(2024, 1, 10, 9, 0)
OWNER = "user-1"
OTHER_OWNER = "user-2"

Scripted = Union[ModelResponse, Exception, Callable[[Sequence[TranscriptEntry]], ModelResponse]]


class ScriptedModel:
    """ModelClient double that replays queued responses and records every request."""

    def __init__(self, *responses: Scripted) -> None:
        self.responses: List[Scripted] = list(responses)
        self.calls: List[List[TranscriptEntry]] = []
        self.tools: List[List[dict]] = []

    def queue(self, *responses: Scripted) -> None:
        self.responses.extend(responses)

    def complete(self, messages: Sequence[TranscriptEntry], tools: Sequence[dict]) -> ModelResponse:
        self.calls.append(list(messages))
        self.tools.append(list(tools))
        if not self.responses:
            raise AssertionError("model called more often than scripted")
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        if callable(item):
            return item(messages)
        return item


class TickingClock:
    """Returns REF and moves forward one minute per call."""

    def __init__(self, start: datetime = REF) -> None:
        self.current = start

    def __call__(self) -> datetime:
        value = self.current
        self.current += timedelta(minutes=1)
        return value


def tool_call(call_id: str, name: str, arguments: str = "{}") -> ToolCall:
    return ToolCall(id=call_id, name=name, arguments=arguments)


def reply(content: str) -> ModelResponse:
    return ModelResponse(content=content)


def request_tools(*calls: ToolCall, content: Any = None) -> ModelResponse:
    return ModelResponse(content=content, tool_calls=tuple(calls))


def make_settings(local_path: Path, timezone: str = "UTC") -> AppSettings:
    return AppSettings(
        llm=LlmSettings(
            api_key=None,
            model="gpt-4o-mini",
            base_url=None,
            organization=None,
            project=None,
            temperature=0.7,
            max_tokens=1000,
            timeout_seconds=60.0,
        ),
        supabase=SupabaseSettings(url=None, key=None),
        storage=StorageSettings(
            events_table="calendar_events",
            tasks_table="todo_tasks",
            conversations_table="chat_conversations",
            messages_table="chat_messages",
            local_path=local_path,
        ),
        agent=AgentSettings(history_limit=20, default_event_minutes=60, title_max_length=50, timezone=timezone),
    )


@pytest.fixture
def database() -> LocalDatabase:
    return LocalDatabase(clock=TickingClock())


@pytest.fixture
def events(database: LocalDatabase) -> LocalEventRepository:
    return LocalEventRepository(database)


@pytest.fixture
def tasks(database: LocalDatabase) -> LocalTaskRepository:
    return LocalTaskRepository(database)


@pytest.fixture
def conversations(database: LocalDatabase) -> LocalConversationRepository:
    return LocalConversationRepository(database)


@pytest.fixture
def messages(database: LocalDatabase) -> LocalMessageRepository:
    return LocalMessageRepository(database)


@pytest.fixture
def dispatcher(events: LocalEventRepository, tasks: LocalTaskRepository) -> ToolDispatcher:
    return ToolDispatcher(events=events, tasks=tasks, clock=lambda: REF)


@pytest.fixture
def model() -> ScriptedModel:
    return ScriptedModel()


@pytest.fixture
def orchestrator(
    conversations: LocalConversationRepository,
    messages: LocalMessageRepository,
    model: ScriptedModel,
    dispatcher: ToolDispatcher,
) -> ConversationOrchestrator:
    return ConversationOrchestrator(
        conversations=conversations,
        messages=messages,
        model=model,
        dispatcher=dispatcher,
        clock=TickingClock(REF + timedelta(hours=1)),
    )


@pytest.fixture
def context(tmp_path: Path, database: LocalDatabase, model: ScriptedModel) -> ServiceContext:
    return ServiceContext(
        settings=make_settings(tmp_path / "planpal.json"),
        database=database,
        model=model,
        clock=lambda: REF,
    )
