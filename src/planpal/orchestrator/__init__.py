"""Conversation orchestration around the language model."""

from __future__ import annotations

from .conversation import (
    ROUND1_FALLBACK,
    ROUND2_FALLBACK,
    ConversationOrchestrator,
    IllegalTransitionError,
    ToolInvocation,
    TurnMachine,
    TurnResult,
    TurnState,
    derive_title,
)
from .model_client import ModelClient, ModelResponse, OpenAIModelClient, ToolCall, TranscriptEntry
from .prompts import SYSTEM_PROMPT

__all__ = [
    "ConversationOrchestrator",
    "IllegalTransitionError",
    "ModelClient",
    "ModelResponse",
    "OpenAIModelClient",
    "ROUND1_FALLBACK",
    "ROUND2_FALLBACK",
    "SYSTEM_PROMPT",
    "ToolCall",
    "ToolInvocation",
    "TranscriptEntry",
    "TurnMachine",
    "TurnResult",
    "TurnState",
    "derive_title",
]
