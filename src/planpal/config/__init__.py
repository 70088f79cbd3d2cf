"""Configuration models and helpers."""

from __future__ import annotations

from .settings import AgentSettings, AppSettings, LlmSettings, StorageSettings, SupabaseSettings, get_settings

__all__ = ["AgentSettings", "AppSettings", "LlmSettings", "StorageSettings", "SupabaseSettings", "get_settings"]
