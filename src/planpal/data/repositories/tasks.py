from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional
from uuid import uuid4

from ...domain import TodoTask
from ..supabase import SupabaseGateway


@dataclass(slots=True)
class TaskRepository:
    gateway: SupabaseGateway
    table_name: str

    def create(self, owner_id: str, fields: Mapping[str, Any]) -> TodoTask:
        now = datetime.now(timezone.utc)
        task = TodoTask(id=str(uuid4()), user_id=owner_id, created_at=now, updated_at=now, **fields)
        rows = self.gateway.execute(self.gateway.table(self.table_name).insert(task.to_record()))
        return TodoTask.from_record(rows[0]) if rows else task

    def list_for_owner(self, owner_id: str, *, completed: Optional[bool] = None) -> List[TodoTask]:
        query = self.gateway.table(self.table_name).select("*").eq("user_id", owner_id)
        if completed is not None:
            query = query.eq("completed", completed)
        query = query.order("created_at", desc=False)
        return [TodoTask.from_record(record) for record in self.gateway.execute(query)]

    def get(self, owner_id: str, task_id: str) -> Optional[TodoTask]:
        query = self.gateway.table(self.table_name).select("*").eq("id", task_id).eq("user_id", owner_id).limit(1)
        rows = self.gateway.execute(query)
        return TodoTask.from_record(rows[0]) if rows else None

    def update(self, owner_id: str, task_id: str, changes: Mapping[str, Any]) -> Optional[TodoTask]:
        payload = TodoTask.columns({**changes, "updated_at": datetime.now(timezone.utc)})
        query = self.gateway.table(self.table_name).update(payload).eq("id", task_id).eq("user_id", owner_id)
        rows = self.gateway.execute(query)
        return TodoTask.from_record(rows[0]) if rows else None

    def delete(self, owner_id: str, task_id: str) -> bool:
        query = self.gateway.table(self.table_name).delete().eq("id", task_id).eq("user_id", owner_id)
        return bool(self.gateway.execute(query))
