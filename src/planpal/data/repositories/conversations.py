from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional
from uuid import uuid4

from ...domain import ChatMessage, Conversation, MessageRole
from ..supabase import SupabaseGateway


@dataclass(slots=True)
class ConversationRepository:
    gateway: SupabaseGateway
    table_name: str

    def create(self, owner_id: str, title: str) -> Conversation:
        now = datetime.now(timezone.utc)
        conversation = Conversation(id=str(uuid4()), user_id=owner_id, title=title, created_at=now, updated_at=now)
        rows = self.gateway.execute(self.gateway.table(self.table_name).insert(conversation.to_record()))
        return Conversation.from_record(rows[0]) if rows else conversation

    def get(self, owner_id: str, conversation_id: str) -> Optional[Conversation]:
        query = (
            self.gateway.table(self.table_name)
            .select("*")
            .eq("id", conversation_id)
            .eq("user_id", owner_id)
            .limit(1)
        )
        rows = self.gateway.execute(query)
        return Conversation.from_record(rows[0]) if rows else None

    def list_for_owner(self, owner_id: str) -> List[Conversation]:
        query = self.gateway.table(self.table_name).select("*").eq("user_id", owner_id).order("updated_at", desc=True)
        return [Conversation.from_record(record) for record in self.gateway.execute(query)]

    def update(self, owner_id: str, conversation_id: str, changes: Mapping[str, Any]) -> Optional[Conversation]:
        query = (
            self.gateway.table(self.table_name)
            .update(Conversation.columns(changes))
            .eq("id", conversation_id)
            .eq("user_id", owner_id)
        )
        rows = self.gateway.execute(query)
        return Conversation.from_record(rows[0]) if rows else None

    def delete(self, owner_id: str, conversation_id: str) -> bool:
        query = self.gateway.table(self.table_name).delete().eq("id", conversation_id).eq("user_id", owner_id)
        return bool(self.gateway.execute(query))


@dataclass(slots=True)
class MessageRepository:
    gateway: SupabaseGateway
    table_name: str

    def append(
        self,
        conversation_id: str,
        role: MessageRole,
        content: str,
        *,
        tool_call_id: Optional[str] = None,
    ) -> ChatMessage:
        message = ChatMessage(
            id=str(uuid4()),
            conversation_id=conversation_id,
            role=role,
            content=content,
            tool_call_id=tool_call_id,
            created_at=datetime.now(timezone.utc),
        )
        rows = self.gateway.execute(self.gateway.table(self.table_name).insert(message.to_record()))
        return ChatMessage.from_record(rows[0]) if rows else message

    def list_for_conversation(self, conversation_id: str) -> List[ChatMessage]:
        query = (
            self.gateway.table(self.table_name)
            .select("*")
            .eq("conversation_id", conversation_id)
            .order("created_at", desc=False)
        )
        return [ChatMessage.from_record(record) for record in self.gateway.execute(query)]

    def list_recent(self, conversation_id: str, limit: int) -> List[ChatMessage]:
        if limit <= 0:
            return []
        query = (
            self.gateway.table(self.table_name)
            .select("*")
            .eq("conversation_id", conversation_id)
            .order("created_at", desc=True)
            .limit(limit)
        )
        newest_first = [ChatMessage.from_record(record) for record in self.gateway.execute(query)]
        return list(reversed(newest_first))

    def delete_for_conversation(self, conversation_id: str) -> int:
        query = self.gateway.table(self.table_name).delete().eq("conversation_id", conversation_id)
        return len(self.gateway.execute(query))
