from __future__ import annotations

import logging
from typing import List, Sequence

from ..domain import EntityKind, TaskProvenance, TodoTask
from ..domain.errors import NotFoundError
from . import formatting
from .arguments import CompleteTodoArguments, CreateTodoArguments, DeleteTodoArguments, ListTodosArguments
from .catalog import ToolName
from .registry import ToolContext, register_tool

logger = logging.getLogger(__name__)

TASK_LIST_LIMIT = 20


def newest_first(tasks: Sequence[TodoTask]) -> List[TodoTask]:
    # later insertions win ties on equal timestamps
    ordered = sorted(
        enumerate(tasks),
        key=lambda pair: (pair[1].created_at.timestamp() if pair[1].created_at else float("-inf"), pair[0]),
        reverse=True,
    )
    return [task for _, task in ordered]


@register_tool(ToolName.CREATE_TODO, arguments=CreateTodoArguments)
def create_todo(context: ToolContext, args: CreateTodoArguments) -> str:
    due_date = None
    if args.due_date:
        span = context.temporal.parse(args.due_date, context.now)
        if span is not None:
            due_date = span.start
        else:
            logger.info("Dropping unparsable due date %r for task %r", args.due_date, args.title)

    task = context.tasks.create(
        context.owner_id,
        {
            "title": args.title,
            "description": args.description or None,
            "priority": args.priority,
            "due_date": due_date,
            "category": args.category or None,
            "provenance": TaskProvenance.AI,
        },
    )
    logger.info("Created task %s for %s", task.id, context.owner_id)
    return formatting.task_created(formatting.local_task(task, context.now))


@register_tool(ToolName.LIST_TODOS, arguments=ListTodosArguments)
def list_todos(context: ToolContext, args: ListTodosArguments) -> str:
    tasks = context.tasks.list_for_owner(context.owner_id, completed=args.filter.completed)
    shown = [formatting.local_task(task, context.now) for task in newest_first(tasks)[:TASK_LIST_LIMIT]]
    return formatting.task_list(shown, args.filter)


@register_tool(ToolName.COMPLETE_TODO, arguments=CompleteTodoArguments)
def complete_todo(context: ToolContext, args: CompleteTodoArguments) -> str:
    task = context.entities.find(context.owner_id, EntityKind.TASK, args.task_title, incomplete_only=True)
    if task is None:
        raise NotFoundError(
            f'I couldn\'t find an active task with the title "{args.task_title}".',
            detail="Please check your task list and try again.",
            heading="Task Not Found",
        )
    updated = context.tasks.update(context.owner_id, task.id, task.completion_changes(True, context.now))
    if updated is None:
        raise NotFoundError(f'The task "{task.title}" no longer exists.', heading="Task Not Found")
    logger.info("Completed task %s for %s", task.id, context.owner_id)
    return formatting.task_completed(updated)


@register_tool(ToolName.DELETE_TODO, arguments=DeleteTodoArguments)
def delete_todo(context: ToolContext, args: DeleteTodoArguments) -> str:
    task = context.entities.find(context.owner_id, EntityKind.TASK, args.task_title)
    if task is None:
        raise NotFoundError(
            f'I couldn\'t find a task with the title "{args.task_title}".',
            detail="Please check your task list and try again.",
            heading="Task Not Found",
        )
    if not context.tasks.delete(context.owner_id, task.id):
        raise NotFoundError(f'The task "{task.title}" no longer exists.', heading="Task Not Found")
    logger.info("Deleted task %s for %s", task.id, context.owner_id)
    return formatting.task_deleted(task)
