"""
Provider interface and the response types shared by all providers.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional

from kog_shell.llm.config import LLMConfig, Message


@dataclass
class ToolCall:
    """
    A function call requested by the model.

    Attributes:
        id: Identifier the tool result must echo back
        name: Tool name
        arguments: Decoded JSON arguments (empty if the model sent invalid JSON)
        raw_arguments: Arguments exactly as the model sent them
    """

    id: str
    name: str
    arguments: dict[str, Any] = field(default_factory=dict)
    raw_arguments: str = "{}"

    def to_api_dict(self) -> dict[str, Any]:
        """Echo the call back in the chat completions wire format."""
        return {
            "id": self.id,
            "type": "function",
            "function": {"name": self.name, "arguments": self.raw_arguments},
        }


@dataclass
class LLMResponse:
    """
    One completion: either final text or a batch of tool calls (or both).

    ``content`` is "" when the model only called tools. ``raw_response``
    keeps the decoded body for debugging.
    """

    content: str
    model: str
    finish_reason: Optional[str] = None
    tool_calls: list[ToolCall] = field(default_factory=list)
    usage: Optional[dict[str, int]] = None
    raw_response: Optional[dict[str, Any]] = field(default=None, repr=False)

    @property
    def has_tool_calls(self) -> bool:
        return bool(self.tool_calls)

    @property
    def total_tokens(self) -> Optional[int]:
        return self.usage.get("total_tokens") if self.usage else None


class LLMProvider(ABC):
    """
    A text-generation backend.

    The chat layer needs exactly one operation: send the running
    conversation plus the tool schemas and get one response back.
    Providers are async context managers that release their connections
    on exit.
    """

    def __init__(self, config: LLMConfig):
        self.config = config

    @property
    def provider_name(self) -> str:
        return self.config.provider.value

    @property
    def model_name(self) -> str:
        return self.config.model

    @abstractmethod
    async def complete(
        self,
        prompt: str | list[Message],
        *,
        system_prompt: Optional[str] = None,
        tools: Optional[list[dict[str, Any]]] = None,
        **kwargs: Any,
    ) -> LLMResponse:
        """
        Request one completion.

        Args:
            prompt: A single user message, or the whole conversation so far
            system_prompt: Prepended as a system message (default: config's)
            tools: OpenAI function-calling schemas the model may call
            **kwargs: Per-call overrides of generation parameters

        Raises:
            LLMError: Any provider failure; see ``kog_shell.llm.exceptions``
        """

    def _prepare_messages(
        self,
        prompt: str | list[Message],
        system_prompt: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        """Wire-format messages, system prompt first."""
        system = system_prompt or self.config.system_prompt
        messages: list[dict[str, Any]] = [{"role": "system", "content": system}] if system else []
        if isinstance(prompt, str):
            messages.append(Message.user(prompt).to_api_dict())
        else:
            messages.extend(message.to_api_dict() for message in prompt)
        return messages

    def _merge_generation_params(self, **kwargs: Any) -> dict[str, Any]:
        """Config parameters with the non-None per-call overrides applied."""
        overrides = {key: value for key, value in kwargs.items() if value is not None}
        return {**self.config.to_generation_params(), **overrides}

    async def close(self) -> None:
        """Release resources held by the provider."""

    async def __aenter__(self) -> "LLMProvider":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.provider_name}, model={self.model_name!r})"
