"""Two-round conversational turn: ask the model, run the tools it asks for, ask again."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, List, Mapping, Sequence, Tuple

from ..data.repositories.base import ConversationStore, MessageStore
from ..domain import ChatMessage, Conversation, MessageRole
from ..domain.errors import ConversationNotFoundError, UpstreamError
from ..tools import TOOL_CATALOG, ToolDescriptor, ToolDispatcher, openai_tools
from .model_client import ModelClient, ModelResponse, ToolCall, TranscriptEntry
from .prompts import SYSTEM_PROMPT

logger = logging.getLogger(__name__)

ROUND1_FALLBACK = "Sorry, I couldn't generate a response."
ROUND2_FALLBACK = "Action completed successfully."

# tool-role rows are never persisted; the filter guards against foreign writers
_CONTEXT_ROLES = frozenset({MessageRole.USER, MessageRole.ASSISTANT, MessageRole.SYSTEM})


class TurnState(str, Enum):
    IDLE = "idle"
    ROUND1_PENDING = "round1_pending"
    TOOLS_REQUESTED = "tools_requested"
    EXECUTING_TOOLS = "executing_tools"
    ROUND2_PENDING = "round2_pending"
    DONE = "done"
    FAILED = "failed"


_TRANSITIONS: Mapping[TurnState, FrozenSet[TurnState]] = {
    TurnState.IDLE: frozenset({TurnState.ROUND1_PENDING, TurnState.FAILED}),
    TurnState.ROUND1_PENDING: frozenset({TurnState.TOOLS_REQUESTED, TurnState.DONE, TurnState.FAILED}),
    TurnState.TOOLS_REQUESTED: frozenset({TurnState.EXECUTING_TOOLS, TurnState.FAILED}),
    TurnState.EXECUTING_TOOLS: frozenset({TurnState.ROUND2_PENDING, TurnState.FAILED}),
    TurnState.ROUND2_PENDING: frozenset({TurnState.DONE, TurnState.FAILED}),
    TurnState.DONE: frozenset(),
    TurnState.FAILED: frozenset(),
}


class IllegalTransitionError(RuntimeError):
    pass


class TurnMachine:
    """Tracks one turn's state and rejects transitions outside the table."""

    def __init__(self) -> None:
        self.state = TurnState.IDLE
        self.trail: List[TurnState] = [TurnState.IDLE]

    @property
    def finished(self) -> bool:
        return self.state in (TurnState.DONE, TurnState.FAILED)

    def advance(self, target: TurnState) -> None:
        if target not in _TRANSITIONS[self.state]:
            raise IllegalTransitionError(f"Cannot move from {self.state.value} to {target.value}")
        logger.debug("Turn state %s -> %s", self.state.value, target.value)
        self.state = target
        self.trail.append(target)


@dataclass(frozen=True)
class ToolInvocation:
    call: ToolCall
    result: str


@dataclass(frozen=True)
class TurnResult:
    user_message: ChatMessage
    assistant_message: ChatMessage
    state: TurnState
    tool_results: Tuple[ToolInvocation, ...] = field(default_factory=tuple)
    trail: Tuple[TurnState, ...] = field(default_factory=tuple)


def derive_title(text: str, max_length: int = 50) -> str:
    title = text[:max_length]
    return f"{title}..." if len(text) > max_length else title


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ConversationOrchestrator:
    """Drive one user message through at most two model rounds.

    Tool calls from round 1 run one after another in the order the model
    returned them, and their side effects are stored before round 2 starts.
    An ``UpstreamError`` from the model or a store ends the turn in
    ``FAILED`` and propagates; the user's message stays stored without a
    reply.
    """

    def __init__(
        self,
        *,
        conversations: ConversationStore,
        messages: MessageStore,
        model: ModelClient,
        dispatcher: ToolDispatcher,
        catalog: Sequence[ToolDescriptor] = TOOL_CATALOG,
        system_prompt: str = SYSTEM_PROMPT,
        history_limit: int = 20,
        title_max_length: int = 50,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.conversations = conversations
        self.messages = messages
        self.model = model
        self.dispatcher = dispatcher
        self.system_prompt = system_prompt
        self.history_limit = history_limit
        self.title_max_length = title_max_length
        self.clock = clock
        self._tools: List[Dict[str, Any]] = openai_tools(tuple(catalog))

    def handle(self, conversation_id: str, owner_id: str, text: str) -> TurnResult:
        conversation = self.conversations.get(owner_id, conversation_id)
        if conversation is None:
            raise ConversationNotFoundError(f"Conversation {conversation_id} was not found.")

        machine = TurnMachine()
        user_message = self.messages.append(conversation_id, MessageRole.USER, text)
        try:
            history = self.messages.list_recent(conversation_id, self.history_limit)
            transcript = self._transcript(history)

            machine.advance(TurnState.ROUND1_PENDING)
            first = self.model.complete(transcript, self._tools)
            invocations: Tuple[ToolInvocation, ...] = ()
            if first.has_tool_calls:
                machine.advance(TurnState.TOOLS_REQUESTED)
                transcript.append(
                    TranscriptEntry(MessageRole.ASSISTANT, first.content or None, tool_calls=first.tool_calls)
                )
                machine.advance(TurnState.EXECUTING_TOOLS)
                invocations = self._run_tools(first, owner_id, transcript)
                machine.advance(TurnState.ROUND2_PENDING)
                second = self.model.complete(transcript, self._tools)
                if second.has_tool_calls:
                    logger.warning(
                        "Ignoring %d tool call(s) requested in the second round of %s",
                        len(second.tool_calls),
                        conversation_id,
                    )
                final = second.content or ROUND2_FALLBACK
            else:
                final = first.content or ROUND1_FALLBACK

            assistant_message = self.messages.append(conversation_id, MessageRole.ASSISTANT, final)
            self._refresh_conversation(conversation, text, len(history))
        except UpstreamError as exc:
            machine.advance(TurnState.FAILED)
            logger.error("Turn failed for conversation %s: %s", conversation_id, exc)
            raise

        machine.advance(TurnState.DONE)
        return TurnResult(
            user_message=user_message,
            assistant_message=assistant_message,
            state=machine.state,
            tool_results=invocations,
            trail=tuple(machine.trail),
        )

    def _transcript(self, history: Sequence[ChatMessage]) -> List[TranscriptEntry]:
        transcript = [TranscriptEntry(MessageRole.SYSTEM, self.system_prompt)]
        transcript.extend(
            TranscriptEntry(message.role, message.content) for message in history if message.role in _CONTEXT_ROLES
        )
        return transcript

    def _run_tools(
        self, response: ModelResponse, owner_id: str, transcript: List[TranscriptEntry]
    ) -> Tuple[ToolInvocation, ...]:
        invocations = []
        for call in response.tool_calls:
            logger.info("Executing tool %s (%s) for %s", call.name, call.id, owner_id)
            result = self.dispatcher.execute(call.name, call.arguments, owner_id)
            invocations.append(ToolInvocation(call=call, result=result))
            transcript.append(TranscriptEntry(MessageRole.TOOL, result, tool_call_id=call.id))
        return tuple(invocations)

    def _refresh_conversation(self, conversation: Conversation, text: str, message_count: int) -> None:
        changes: Dict[str, Any] = {"updated_at": self.clock()}
        # the history already holds this turn's user message
        if message_count <= 1:
            changes["title"] = derive_title(text, self.title_max_length)
        self.conversations.update(conversation.user_id, conversation.id, changes)

