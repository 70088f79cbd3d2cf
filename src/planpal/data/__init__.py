"""Data access layer."""

from __future__ import annotations

from .local import (
    LocalConversationRepository,
    LocalDatabase,
    LocalEventRepository,
    LocalMessageRepository,
    LocalTaskRepository,
)
from .supabase import SupabaseGateway, SupabaseNotInitializedError

__all__ = [
    "LocalConversationRepository",
    "LocalDatabase",
    "LocalEventRepository",
    "LocalMessageRepository",
    "LocalTaskRepository",
    "SupabaseGateway",
    "SupabaseNotInitializedError",
]
