from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from platformdirs import user_data_dir

load_dotenv()

APP_NAME = "PlanPal"
APP_AUTHOR = "PlanPal"
DATA_DIR = Path(user_data_dir(APP_NAME, APP_AUTHOR))
DATABASE_FILE = DATA_DIR / "planpal.json"


@dataclass(frozen=True)
class LlmSettings:
    api_key: Optional[str]
    model: str
    base_url: Optional[str]
    organization: Optional[str]
    project: Optional[str]
    temperature: float
    max_tokens: int
    timeout_seconds: float

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key and self.model)

    @property
    def missing_env_vars(self) -> list[str]:
        missing = []
        if not self.api_key:
            missing.append("OPENAI_API_KEY")
        if not self.model:
            missing.append("OPENAI_MODEL")
        return missing


@dataclass(frozen=True)
class SupabaseSettings:
    url: Optional[str]
    key: Optional[str]

    @property
    def is_configured(self) -> bool:
        return bool(self.url and self.key)


@dataclass(frozen=True)
class StorageSettings:
    events_table: str
    tasks_table: str
    conversations_table: str
    messages_table: str
    local_path: Path


@dataclass(frozen=True)
class AgentSettings:
    history_limit: int
    default_event_minutes: int
    title_max_length: int
    timezone: str


@dataclass(frozen=True)
class AppSettings:
    llm: LlmSettings
    supabase: SupabaseSettings
    storage: StorageSettings
    agent: AgentSettings


def _float_from_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _int_from_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    llm = LlmSettings(
        api_key=os.getenv("OPENAI_API_KEY"),
        model=os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
        base_url=os.getenv("OPENAI_BASE_URL"),
        organization=os.getenv("OPENAI_ORG"),
        project=os.getenv("OPENAI_PROJECT"),
        temperature=_float_from_env("PLANPAL_LLM_TEMPERATURE", 0.7),
        max_tokens=_int_from_env("PLANPAL_LLM_MAX_TOKENS", 1000),
        timeout_seconds=_float_from_env("PLANPAL_LLM_TIMEOUT_SECONDS", 60.0),
    )

    supabase = SupabaseSettings(
        url=os.getenv("SUPABASE_URL"),
        key=os.getenv("SUPABASE_KEY") or os.getenv("SUPABASE_ANON_KEY"),
    )

    storage = StorageSettings(
        events_table=os.getenv("SUPABASE_EVENTS_TABLE", "calendar_events"),
        tasks_table=os.getenv("SUPABASE_TASKS_TABLE", "todo_tasks"),
        conversations_table=os.getenv("SUPABASE_CONVERSATIONS_TABLE", "chat_conversations"),
        messages_table=os.getenv("SUPABASE_MESSAGES_TABLE", "chat_messages"),
        local_path=Path(os.getenv("PLANPAL_DATA_FILE", str(DATABASE_FILE))),
    )

    agent = AgentSettings(
        history_limit=_int_from_env("PLANPAL_HISTORY_LIMIT", 20),
        default_event_minutes=_int_from_env("PLANPAL_DEFAULT_EVENT_MINUTES", 60),
        title_max_length=_int_from_env("PLANPAL_TITLE_MAX_LENGTH", 50),
        timezone=os.getenv("PLANPAL_TIMEZONE", "UTC"),
    )

    return AppSettings(llm=llm, supabase=supabase, storage=storage, agent=agent)
