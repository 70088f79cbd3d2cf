"""Language model access behind a small request/response interface."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

import openai
from openai import OpenAI

from ..config import LlmSettings
from ..domain import MessageRole
from ..domain.errors import UpstreamError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolCall:
    id: str
    name: str
    arguments: str = "{}"


@dataclass(frozen=True)
class ModelResponse:
    content: Optional[str] = None
    tool_calls: Tuple[ToolCall, ...] = ()

    @property
    def has_tool_calls(self) -> bool:
        return bool(self.tool_calls)


@dataclass(frozen=True)
class TranscriptEntry:
    """One message sent to the model.

    Assistant entries may carry the tool calls they requested; tool entries
    carry the id of the call they answer.
    """

    role: MessageRole
    content: Optional[str]
    tool_call_id: Optional[str] = None
    tool_calls: Tuple[ToolCall, ...] = field(default_factory=tuple)

    def as_openai(self) -> Dict[str, Any]:
        message: Dict[str, Any] = {"role": self.role.value, "content": self.content}
        if self.tool_calls:
            message["tool_calls"] = [
                {
                    "id": call.id,
                    "type": "function",
                    "function": {"name": call.name, "arguments": call.arguments},
                }
                for call in self.tool_calls
            ]
        if self.tool_call_id is not None:
            message["tool_call_id"] = self.tool_call_id
        return message


class ModelClient(Protocol):
    def complete(self, messages: Sequence[TranscriptEntry], tools: Sequence[Dict[str, Any]]) -> ModelResponse: ...


class OpenAIModelClient:
    """Chat completions with function tools through the ``openai`` SDK."""

    def __init__(self, settings: LlmSettings, *, client: Optional[OpenAI] = None) -> None:
        self.settings = settings
        self._client = client

    def _ensure_client(self) -> OpenAI:
        if self._client is not None:
            return self._client
        if not self.settings.is_configured:
            missing = ", ".join(self.settings.missing_env_vars)
            raise UpstreamError(f"OpenAI is not configured. Missing: {missing or 'unknown'}")
        self._client = OpenAI(
            api_key=self.settings.api_key,
            base_url=self.settings.base_url or None,
            organization=self.settings.organization or None,
            project=self.settings.project or None,
            timeout=self.settings.timeout_seconds,
        )
        return self._client

    def complete(self, messages: Sequence[TranscriptEntry], tools: Sequence[Dict[str, Any]]) -> ModelResponse:
        client = self._ensure_client()
        request: Dict[str, Any] = {
            "model": self.settings.model,
            "messages": [entry.as_openai() for entry in messages],
            "temperature": self.settings.temperature,
            "max_tokens": self.settings.max_tokens,
        }
        if tools:
            request["tools"] = list(tools)
            request["tool_choice"] = "auto"
        try:
            completion = client.chat.completions.create(**request)
        except openai.OpenAIError as exc:
            logger.error("OpenAI request failed: %s", exc)
            raise UpstreamError(f"OpenAI request failed: {exc}") from exc

        if not completion.choices:
            raise UpstreamError("OpenAI returned no choices.")
        message = completion.choices[0].message
        return ModelResponse(content=message.content, tool_calls=_tool_calls(message))


def _tool_calls(message: Any) -> Tuple[ToolCall, ...]:
    calls: List[ToolCall] = []
    for call in getattr(message, "tool_calls", None) or []:
        function = getattr(call, "function", None)
        if getattr(call, "type", "function") != "function" or function is None:
            logger.warning("Ignoring non-function tool call %s", getattr(call, "id", "?"))
            continue
        calls.append(ToolCall(id=call.id, name=function.name, arguments=function.arguments or "{}"))
    return tuple(calls)
