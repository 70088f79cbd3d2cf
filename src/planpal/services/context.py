from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from functools import partial
from typing import Callable, Optional

from ..config import AppSettings, get_settings
from ..core import EntityResolver, TemporalResolver, local_now
from ..data import (
    LocalConversationRepository,
    LocalDatabase,
    LocalEventRepository,
    LocalMessageRepository,
    LocalTaskRepository,
    SupabaseGateway,
)
from ..data.repositories import (
    ConversationRepository,
    ConversationStore,
    EventRepository,
    EventStore,
    MessageRepository,
    MessageStore,
    TaskRepository,
    TaskStore,
)
from ..orchestrator import ConversationOrchestrator, ModelClient, OpenAIModelClient
from ..tools import ToolDispatcher

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ServiceContext:
    """Aggregate root wiring settings, stores, resolvers and the agent together.

    Stores come from Supabase when it is configured and from the local JSON
    store otherwise. Pass ``database`` (or individual stores) to override.
    """

    settings: AppSettings = field(default_factory=get_settings)
    database: Optional[LocalDatabase] = None
    events: Optional[EventStore] = None
    tasks: Optional[TaskStore] = None
    conversations: Optional[ConversationStore] = None
    messages: Optional[MessageStore] = None
    model: Optional[ModelClient] = None
    clock: Optional[Callable[[], datetime]] = None
    gateway: Optional[SupabaseGateway] = field(init=False, default=None)
    temporal: TemporalResolver = field(init=False)
    entities: EntityResolver = field(init=False)
    dispatcher: ToolDispatcher = field(init=False)
    orchestrator: ConversationOrchestrator = field(init=False)

    def __post_init__(self) -> None:
        if self.clock is None:
            self.clock = partial(local_now, self.settings.agent.timezone)
        self._wire_stores()
        self.temporal = TemporalResolver()
        self.entities = EntityResolver(events=self.events, tasks=self.tasks)
        self.dispatcher = ToolDispatcher(
            events=self.events,
            tasks=self.tasks,
            temporal=self.temporal,
            entities=self.entities,
            clock=self.clock,
            default_event_minutes=self.settings.agent.default_event_minutes,
        )
        if self.model is None:
            self.model = OpenAIModelClient(self.settings.llm)
        self.orchestrator = ConversationOrchestrator(
            conversations=self.conversations,
            messages=self.messages,
            model=self.model,
            dispatcher=self.dispatcher,
            history_limit=self.settings.agent.history_limit,
            title_max_length=self.settings.agent.title_max_length,
            clock=self.clock,
        )

    @property
    def backend(self) -> str:
        return "supabase" if self.gateway is not None else "local"

    def _wire_stores(self) -> None:
        if None not in (self.events, self.tasks, self.conversations, self.messages):
            return
        if self.database is None and self.settings.supabase.is_configured:
            storage = self.settings.storage
            self.gateway = SupabaseGateway(self.settings.supabase)
            self.events = self.events or EventRepository(gateway=self.gateway, table_name=storage.events_table)
            self.tasks = self.tasks or TaskRepository(gateway=self.gateway, table_name=storage.tasks_table)
            self.conversations = self.conversations or ConversationRepository(
                gateway=self.gateway, table_name=storage.conversations_table
            )
            self.messages = self.messages or MessageRepository(
                gateway=self.gateway, table_name=storage.messages_table
            )
            logger.info("Using Supabase stores at %s", self.settings.supabase.url)
            return

        if self.database is None:
            self.database = LocalDatabase(self.settings.storage.local_path)
            logger.info("Supabase is not configured; using local store at %s", self.settings.storage.local_path)
        self.events = self.events or LocalEventRepository(self.database)
        self.tasks = self.tasks or LocalTaskRepository(self.database)
        self.conversations = self.conversations or LocalConversationRepository(self.database)
        self.messages = self.messages or LocalMessageRepository(self.database)
