from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ...domain import TaskFilter
from ...domain.errors import NotFoundError, UpstreamError, ValidationError
from ...tools import catalog_payload
from ..calendar import CalendarService
from ..context import ServiceContext
from ..conversations import ConversationService
from ..tasks import TaskService, TaskSort
from .schemas import (
    ConversationPayload,
    CreateConversationRequest,
    EventCreateRequest,
    EventPayload,
    EventUpdateRequest,
    MessagePayload,
    SendMessageRequest,
    TaskCreateRequest,
    TaskPayload,
    TaskUpdateRequest,
)

logger = logging.getLogger(__name__)


def caller_id(x_user_id: Optional[str] = Header(default=None, alias="X-User-Id")) -> str:
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Unauthorized")
    return x_user_id.strip()


def create_app(context: Optional[ServiceContext] = None) -> FastAPI:
    """Build the HTTP surface over one service context."""

    context = context or ServiceContext()
    conversations = ConversationService(context)
    calendar = CalendarService(context)
    tasks = TaskService(context)

    app = FastAPI(title="PlanPal API", version="0.1.0")
    app.state.context = context
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(HTTPException)
    async def _http_error(request: Request, exc: HTTPException) -> JSONResponse:
        return JSONResponse({"error": exc.detail}, status_code=exc.status_code)

    @app.exception_handler(NotFoundError)
    async def _not_found(request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse({"error": exc.message}, status_code=404)

    @app.exception_handler(ValidationError)
    async def _invalid(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse({"error": exc.message}, status_code=400)

    @app.exception_handler(UpstreamError)
    async def _upstream(request: Request, exc: UpstreamError) -> JSONResponse:
        logger.error("Upstream failure on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse({"error": "The assistant is unavailable right now. Please try again."}, status_code=502)

    # ------------------------------------------------------------------ chat

    @app.get("/api/chat/conversations")
    def list_conversations(owner_id: str = Depends(caller_id)) -> dict:
        items = conversations.list(owner_id)
        return {"conversations": [ConversationPayload.from_domain(item).dump() for item in items]}

    @app.post("/api/chat/conversations")
    def create_conversation(
        request: Optional[CreateConversationRequest] = None, owner_id: str = Depends(caller_id)
    ) -> dict:
        conversation = conversations.create(owner_id, request.title if request else None)
        return {"conversation": ConversationPayload.from_domain(conversation).dump()}

    @app.delete("/api/chat/conversations/{conversation_id}")
    def delete_conversation(conversation_id: str, owner_id: str = Depends(caller_id)) -> dict:
        conversations.delete(owner_id, conversation_id)
        return {"message": "Conversation deleted successfully"}

    @app.get("/api/chat/messages")
    def list_messages(
        conversation_id: str = Query(alias="conversationId", min_length=1), owner_id: str = Depends(caller_id)
    ) -> dict:
        items = conversations.messages(owner_id, conversation_id)
        return {"messages": [MessagePayload.from_domain(item).dump() for item in items]}

    @app.post("/api/chat/messages")
    def send_message(request: SendMessageRequest, owner_id: str = Depends(caller_id)) -> dict:
        result = conversations.send(owner_id, request.conversation_id, request.content)
        return {
            "userMessage": MessagePayload.from_domain(result.user_message).dump(),
            "assistantMessage": MessagePayload.from_domain(result.assistant_message).dump(),
        }

    # ------------------------------------------------------------------ calendar

    @app.get("/api/calendar/events")
    def list_events(
        start: Optional[datetime] = Query(default=None),
        end: Optional[datetime] = Query(default=None),
        owner_id: str = Depends(caller_id),
    ) -> dict:
        events = calendar.list(owner_id, start=start, end=end)
        return {"events": [EventPayload.from_domain(event).dump() for event in events], "count": len(events)}

    @app.post("/api/calendar/events", status_code=201)
    def create_event(request: EventCreateRequest, owner_id: str = Depends(caller_id)) -> dict:
        event = calendar.create(owner_id, request.to_fields())
        return {"event": EventPayload.from_domain(event).dump(), "message": "Event created successfully"}

    @app.get("/api/calendar/events/{event_id}")
    def get_event(event_id: str, owner_id: str = Depends(caller_id)) -> dict:
        return {"event": EventPayload.from_domain(calendar.get(owner_id, event_id)).dump()}

    @app.patch("/api/calendar/events/{event_id}")
    def update_event(event_id: str, request: EventUpdateRequest, owner_id: str = Depends(caller_id)) -> dict:
        event = calendar.update(owner_id, event_id, request.to_changes())
        return {"event": EventPayload.from_domain(event).dump(), "message": "Event updated successfully"}

    @app.delete("/api/calendar/events/{event_id}")
    def delete_event(event_id: str, owner_id: str = Depends(caller_id)) -> dict:
        calendar.delete(owner_id, event_id)
        return {"message": "Event deleted successfully"}

    # ------------------------------------------------------------------ todos

    @app.get("/api/todos")
    def list_todos(
        task_filter: TaskFilter = Query(default=TaskFilter.ALL, alias="filter"),
        sort_by: TaskSort = Query(default=TaskSort.CREATED_AT, alias="sortBy"),
        owner_id: str = Depends(caller_id),
    ) -> dict:
        items = tasks.list(owner_id, task_filter=task_filter, sort_by=sort_by)
        return {"tasks": [TaskPayload.from_domain(task).dump() for task in items]}

    @app.post("/api/todos", status_code=201)
    def create_todo(request: TaskCreateRequest, owner_id: str = Depends(caller_id)) -> dict:
        task = tasks.create(owner_id, request.to_fields())
        return {"task": TaskPayload.from_domain(task).dump()}

    @app.patch("/api/todos/{task_id}")
    def update_todo(task_id: str, request: TaskUpdateRequest, owner_id: str = Depends(caller_id)) -> dict:
        task = tasks.update(owner_id, task_id, request.to_changes())
        return {"task": TaskPayload.from_domain(task).dump()}

    @app.delete("/api/todos/{task_id}")
    def delete_todo(task_id: str, owner_id: str = Depends(caller_id)) -> dict:
        task = tasks.delete(owner_id, task_id)
        return {"message": "Todo deleted successfully", "task": TaskPayload.from_domain(task).dump()}

    # ------------------------------------------------------------------ tools

    @app.get("/api/tools")
    def list_tools() -> dict:
        return catalog_payload()

    return app


def run_local_server(host: str = "127.0.0.1", port: int = 8000, *, context: Optional[ServiceContext] = None) -> None:
    import asyncio

    from hypercorn.asyncio import serve
    from hypercorn.config import Config

    config = Config()
    config.bind = [f"{host}:{port}"]
    logger.info("Serving PlanPal API on http://%s:%s", host, port)
    asyncio.run(serve(create_app(context), config))
