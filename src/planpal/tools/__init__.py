"""Tools the model can call: catalog, argument models, handlers and dispatcher."""

from .catalog import CATALOG_VERSION, TOOL_CATALOG, ToolDescriptor, ToolName, ToolParameter, catalog_payload, openai_tools
from .dispatcher import GENERIC_FAILURE, ToolDispatcher
from .registry import HANDLERS, ToolContext, ToolHandler, register_tool, verify_catalog

__all__ = [
    "CATALOG_VERSION",
    "GENERIC_FAILURE",
    "HANDLERS",
    "TOOL_CATALOG",
    "ToolContext",
    "ToolDescriptor",
    "ToolDispatcher",
    "ToolHandler",
    "ToolName",
    "ToolParameter",
    "catalog_payload",
    "openai_tools",
    "register_tool",
    "verify_catalog",
]
