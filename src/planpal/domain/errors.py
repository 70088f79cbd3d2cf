"""Error taxonomy shared by the agent core and the outer services."""

from __future__ import annotations

from typing import Optional


class PlanPalError(Exception):
    """Base class for application errors."""


class ToolError(PlanPalError):
    """A tool failure that is reported back into the conversation as text."""

    heading = "Request Failed"

    def __init__(self, message: str, *, detail: str = "", heading: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail
        if heading:
            self.heading = heading

    def as_text(self) -> str:
        body = f"### ❌ {self.heading}\n\n{self.message}"
        if self.detail:
            body += f" {self.detail}"
        return body


class ValidationError(ToolError):
    """A tool argument is missing or malformed."""

    heading = "Invalid Request"


class ParseError(ToolError):
    """A natural-language date/time expression was not recognized."""

    heading = "Invalid Date"


class NotFoundError(ToolError):
    """No stored record matches the requested title or id."""

    heading = "Not Found"


class UnsupportedOperationError(ToolError):
    heading = "Unsupported Operation"


class ConversationNotFoundError(NotFoundError):
    heading = "Conversation Not Found"


class UpstreamError(PlanPalError):
    """The model provider or a store is unreachable or returned an error."""


class CatalogMismatchError(PlanPalError):
    """The tool catalog and the handler set have drifted apart."""
