from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping

from ..domain import TaskFilter, TaskProvenance, TodoTask, in_zone_of
from ..domain.errors import NotFoundError
from ..tools.tasks import newest_first
from .context import ServiceContext

logger = logging.getLogger(__name__)


class TaskSort(str, Enum):
    CREATED_AT = "createdAt"
    DUE_DATE = "dueDate"
    PRIORITY = "priority"


def sort_tasks(tasks: List[TodoTask], sort_by: TaskSort) -> List[TodoTask]:
    ordered = newest_first(tasks)
    if sort_by is TaskSort.DUE_DATE:
        # undated tasks go last; python's sort is stable so creation order breaks ties
        dated = sorted((task for task in ordered if task.due_date), key=lambda task: task.due_date.timestamp())
        return dated + [task for task in ordered if not task.due_date]
    if sort_by is TaskSort.PRIORITY:
        return sorted(ordered, key=lambda task: task.priority.rank, reverse=True)
    return ordered


@dataclass(slots=True)
class TaskService:
    """Direct task CRUD for the todo screens, outside the agent."""

    context: ServiceContext

    def _localize_due_date(self, payload: Dict[str, Any]) -> None:
        if payload.get("due_date") is not None:
            payload["due_date"] = in_zone_of(payload["due_date"], self.context.clock())

    def list(
        self,
        owner_id: str,
        *,
        task_filter: TaskFilter = TaskFilter.ALL,
        sort_by: TaskSort = TaskSort.CREATED_AT,
    ) -> List[TodoTask]:
        tasks = self.context.tasks.list_for_owner(owner_id, completed=task_filter.completed)
        return sort_tasks(tasks, sort_by)

    def get(self, owner_id: str, task_id: str) -> TodoTask:
        task = self.context.tasks.get(owner_id, task_id)
        if task is None:
            raise NotFoundError(f"Todo {task_id} was not found.", heading="Task Not Found")
        return task

    def create(self, owner_id: str, fields: Mapping[str, Any]) -> TodoTask:
        payload = {"provenance": TaskProvenance.USER, **fields}
        self._localize_due_date(payload)
        task = self.context.tasks.create(owner_id, payload)
        logger.info("Created task %s for %s", task.id, owner_id)
        return task

    def update(self, owner_id: str, task_id: str, changes: Mapping[str, Any]) -> TodoTask:
        existing = self.get(owner_id, task_id)
        payload: Dict[str, Any] = {key: value for key, value in changes.items() if key != "completed"}
        if "completed" in changes:
            payload.update(existing.completion_changes(bool(changes["completed"]), self.context.clock()))
        self._localize_due_date(payload)
        updated = self.context.tasks.update(owner_id, task_id, payload)
        if updated is None:
            raise NotFoundError(f"Todo {task_id} was not found.", heading="Task Not Found")
        return updated

    def delete(self, owner_id: str, task_id: str) -> TodoTask:
        task = self.get(owner_id, task_id)
        self.context.tasks.delete(owner_id, task_id)
        logger.info("Deleted task %s for %s", task_id, owner_id)
        return task
