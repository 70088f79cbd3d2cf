from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, Iterable, Mapping, Type

from ..core import EntityResolver, TemporalResolver
from ..data.repositories.base import EventStore, TaskStore
from ..domain.errors import CatalogMismatchError
from .arguments import ToolArguments, required_wire_names, wire_names
from .catalog import ToolDescriptor, ToolName


@dataclass(frozen=True)
class ToolContext:
    """Everything a handler needs for one invocation on behalf of one owner."""

    owner_id: str
    now: datetime
    events: EventStore
    tasks: TaskStore
    temporal: TemporalResolver
    entities: EntityResolver
    default_event_minutes: int = 60


HandlerFunc = Callable[[ToolContext, ToolArguments], str]


@dataclass(frozen=True)
class ToolHandler:
    name: ToolName
    func: HandlerFunc
    arguments: Type[ToolArguments]

    def __call__(self, context: ToolContext, arguments: ToolArguments) -> str:
        return self.func(context, arguments)


HANDLERS: Dict[ToolName, ToolHandler] = {}


def register_tool(name: ToolName, *, arguments: Type[ToolArguments]) -> Callable[[HandlerFunc], HandlerFunc]:
    def decorator(func: HandlerFunc) -> HandlerFunc:
        if name in HANDLERS:
            raise ValueError(f"Tool handler '{name.value}' is already registered.")
        HANDLERS[name] = ToolHandler(name=name, func=func, arguments=arguments)
        return func

    return decorator


def verify_catalog(catalog: Iterable[ToolDescriptor], handlers: Mapping[ToolName, ToolHandler]) -> None:
    """Raise ``CatalogMismatchError`` unless catalog entries and handlers pair up one to one.

    Each handler's argument model must also accept exactly the parameters its
    descriptor advertises, with the same ones required.
    """

    problems = []
    described: Dict[ToolName, ToolDescriptor] = {}
    for descriptor in catalog:
        if descriptor.name in described:
            problems.append(f"'{descriptor.name.value}' is described twice")
        described[descriptor.name] = descriptor

    for name in ToolName:
        if name not in described:
            problems.append(f"'{name.value}' has no catalog entry")
        if name not in handlers:
            problems.append(f"'{name.value}' has no handler")

    for name, descriptor in described.items():
        handler = handlers.get(name)
        if handler is None:
            continue
        advertised = set(descriptor.parameter_names)
        accepted = wire_names(handler.arguments)
        if advertised != accepted:
            problems.append(
                f"'{name.value}' parameters differ: catalog {sorted(advertised)}, handler {sorted(accepted)}"
            )
        if set(descriptor.required) != required_wire_names(handler.arguments):
            problems.append(f"'{name.value}' required parameters differ")

    if problems:
        raise CatalogMismatchError("; ".join(problems))
