"""Execute one tool call and always answer with text."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Iterable, Mapping, Optional, Union

import orjson
from pydantic import ValidationError as PydanticValidationError

from ..core import EntityResolver, TemporalResolver
from ..data.repositories.base import EventStore, TaskStore
from ..domain.errors import ToolError, UnsupportedOperationError, ValidationError
from . import events as _events  # noqa: F401  registers event handlers
from . import tasks as _tasks  # noqa: F401  registers task handlers
from .catalog import TOOL_CATALOG, ToolDescriptor, ToolName
from .registry import HANDLERS, ToolContext, ToolHandler, verify_catalog

logger = logging.getLogger(__name__)

RawArguments = Union[str, bytes, Mapping[str, Any], None]

GENERIC_FAILURE = (
    "### ❌ Something Went Wrong\n\n"
    "The request could not be completed because of an internal error. Please try again later."
)


def _system_now() -> datetime:
    return datetime.now().astimezone()


def _describe_errors(exc: PydanticValidationError) -> str:
    lines = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())) or "arguments"
        lines.append(f"- `{location}`: {error.get('msg', 'invalid value')}")
    return "\n".join(lines)


class ToolDispatcher:
    """Route a tool call to its handler for one owner.

    Handler failures never escape: business errors come back as their
    templated text and anything unexpected is logged and replaced with a
    generic failure message.
    """

    def __init__(
        self,
        *,
        events: EventStore,
        tasks: TaskStore,
        temporal: Optional[TemporalResolver] = None,
        entities: Optional[EntityResolver] = None,
        clock: Callable[[], datetime] = _system_now,
        default_event_minutes: int = 60,
        catalog: Iterable[ToolDescriptor] = TOOL_CATALOG,
        handlers: Optional[Mapping[ToolName, ToolHandler]] = None,
    ) -> None:
        self.catalog = tuple(catalog)
        self._handlers = dict(HANDLERS if handlers is None else handlers)
        verify_catalog(self.catalog, self._handlers)
        self.events = events
        self.tasks = tasks
        self.temporal = temporal or TemporalResolver()
        self.entities = entities or EntityResolver(events=events, tasks=tasks)
        self.clock = clock
        self.default_event_minutes = default_event_minutes

    def execute(self, tool_name: str, raw_args: RawArguments, owner_id: str) -> str:
        try:
            name = ToolName(tool_name)
        except ValueError:
            logger.warning("Model requested unknown tool %r", tool_name)
            return UnsupportedOperationError(
                f'"{tool_name}" is not an operation I can perform.',
                detail="I can create, list, update and delete calendar events, and create, list, complete and delete tasks.",
            ).as_text()

        handler = self._handlers[name]
        try:
            arguments = handler.arguments.model_validate(self._decode(raw_args))
        except ValidationError as exc:
            return exc.as_text()
        except PydanticValidationError as exc:
            logger.info("Rejected arguments for %s: %s", name.value, exc.error_count())
            return ValidationError(
                f"The arguments for {name.value} were not valid:\n\n{_describe_errors(exc)}"
            ).as_text()

        context = ToolContext(
            owner_id=owner_id,
            now=self.clock(),
            events=self.events,
            tasks=self.tasks,
            temporal=self.temporal,
            entities=self.entities,
            default_event_minutes=self.default_event_minutes,
        )
        try:
            return handler(context, arguments)
        except ToolError as exc:
            logger.info("Tool %s failed for %s: %s", name.value, owner_id, exc.message)
            return exc.as_text()
        except Exception:  # noqa: BLE001
            logger.exception("Tool %s raised for %s", name.value, owner_id)
            return GENERIC_FAILURE

    @staticmethod
    def _decode(raw_args: RawArguments) -> Mapping[str, Any]:
        if raw_args is None:
            return {}
        if isinstance(raw_args, (str, bytes)):
            if not raw_args.strip():
                return {}
            try:
                decoded = orjson.loads(raw_args)
            except orjson.JSONDecodeError as exc:
                raise ValidationError("The tool arguments were not valid JSON.", detail=f"({exc})") from exc
        else:
            decoded = raw_args
        if not isinstance(decoded, Mapping):
            raise ValidationError("The tool arguments must be a JSON object.")
        return decoded
