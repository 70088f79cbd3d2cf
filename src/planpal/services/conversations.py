from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from ..domain import ChatMessage, Conversation
from ..domain.errors import ConversationNotFoundError, ValidationError
from ..orchestrator import TurnResult
from .context import ServiceContext

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "New Conversation"


@dataclass(slots=True)
class ConversationService:
    context: ServiceContext

    def list(self, owner_id: str) -> List[Conversation]:
        return self.context.conversations.list_for_owner(owner_id)

    def create(self, owner_id: str, title: Optional[str] = None) -> Conversation:
        conversation = self.context.conversations.create(owner_id, (title or "").strip() or DEFAULT_TITLE)
        logger.info("Created conversation %s for %s", conversation.id, owner_id)
        return conversation

    def get(self, owner_id: str, conversation_id: str) -> Conversation:
        conversation = self.context.conversations.get(owner_id, conversation_id)
        if conversation is None:
            raise ConversationNotFoundError(f"Conversation {conversation_id} was not found.")
        return conversation

    def delete(self, owner_id: str, conversation_id: str) -> None:
        """Delete a conversation and its messages; events and tasks it created stay."""

        self.get(owner_id, conversation_id)
        removed = self.context.messages.delete_for_conversation(conversation_id)
        self.context.conversations.delete(owner_id, conversation_id)
        logger.info("Deleted conversation %s (%d messages)", conversation_id, removed)

    def messages(self, owner_id: str, conversation_id: str) -> List[ChatMessage]:
        self.get(owner_id, conversation_id)
        return self.context.messages.list_for_conversation(conversation_id)

    def send(self, owner_id: str, conversation_id: str, content: str) -> TurnResult:
        if not content or not content.strip():
            raise ValidationError("Message content is required.")
        return self.context.orchestrator.handle(conversation_id, owner_id, content)
