"""The static tool catalog and its pairing with registered handlers."""

from __future__ import annotations

from typing import Optional

import pytest
from pydantic import Field

from planpal.domain.errors import CatalogMismatchError
from planpal.tools import (
    CATALOG_VERSION,
    HANDLERS,
    TOOL_CATALOG,
    ToolDescriptor,
    ToolHandler,
    ToolName,
    ToolParameter,
    catalog_payload,
    openai_tools,
    register_tool,
    verify_catalog,
)
from planpal.tools.arguments import ToolArguments


class TestCatalog:
    def test_one_descriptor_per_tool_name(self) -> None:
        assert [descriptor.name for descriptor in TOOL_CATALOG] == list(ToolName)

    def test_registered_handlers_match(self) -> None:
        assert set(HANDLERS) == set(ToolName)
        verify_catalog(TOOL_CATALOG, HANDLERS)

    def test_openai_function_format(self) -> None:
        tools = {tool["function"]["name"]: tool for tool in openai_tools()}
        create = tools["create_calendar_event"]

        assert create["type"] == "function"
        parameters = create["function"]["parameters"]
        assert parameters["type"] == "object"
        assert parameters["required"] == ["title", "dateTime"]
        assert parameters["properties"]["duration"]["type"] == "number"
        assert tools["create_todo"]["function"]["parameters"]["properties"]["priority"]["enum"] == [
            "low",
            "medium",
            "high",
        ]
        assert tools["list_todos"]["function"]["parameters"]["required"] == []

    def test_payload_is_versioned(self) -> None:
        payload = catalog_payload()

        assert payload["version"] == CATALOG_VERSION == "1.0"
        assert len(payload["tools"]) == 8


class TestVerifyCatalog:
    def test_missing_handler(self) -> None:
        handlers = {name: handler for name, handler in HANDLERS.items() if name is not ToolName.DELETE_TODO}

        with pytest.raises(CatalogMismatchError, match="'delete_todo' has no handler"):
            verify_catalog(TOOL_CATALOG, handlers)

    def test_missing_descriptor(self) -> None:
        catalog = tuple(d for d in TOOL_CATALOG if d.name is not ToolName.LIST_TODOS)

        with pytest.raises(CatalogMismatchError, match="'list_todos' has no catalog entry"):
            verify_catalog(catalog, HANDLERS)

    def test_duplicate_descriptor(self) -> None:
        with pytest.raises(CatalogMismatchError, match="described twice"):
            verify_catalog(TOOL_CATALOG + TOOL_CATALOG[:1], HANDLERS)

    def test_parameter_drift(self) -> None:
        class WrongArguments(ToolArguments):
            task_title: str = Field(alias="taskTitle", min_length=1)
            reason: Optional[str] = None

        handlers = dict(HANDLERS)
        original = handlers[ToolName.DELETE_TODO]
        handlers[ToolName.DELETE_TODO] = ToolHandler(
            name=original.name, func=original.func, arguments=WrongArguments
        )

        with pytest.raises(CatalogMismatchError, match="'delete_todo' parameters differ"):
            verify_catalog(TOOL_CATALOG, handlers)

    def test_required_drift(self) -> None:
        loosened = ToolDescriptor(
            name=ToolName.COMPLETE_TODO,
            description="Mark a todo task as completed.",
            parameters=(ToolParameter("taskTitle", "string", "The title of the task"),),
        )
        catalog = tuple(loosened if d.name is ToolName.COMPLETE_TODO else d for d in TOOL_CATALOG)

        with pytest.raises(CatalogMismatchError, match="'complete_todo' required parameters differ"):
            verify_catalog(catalog, HANDLERS)


def test_registering_a_tool_twice_is_rejected() -> None:
    with pytest.raises(ValueError, match="already registered"):

        @register_tool(ToolName.CREATE_TODO, arguments=ToolArguments)
        def duplicate(context, args):
            return ""

    assert HANDLERS[ToolName.CREATE_TODO].func.__name__ == "create_todo"
