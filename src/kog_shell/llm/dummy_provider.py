"""
Dummy LLM provider for offline use and tests.

Returns scripted responses without any network access. Queue
``LLMResponse`` objects (including ones that request tool calls) to drive a
whole tool-calling conversation deterministically.
"""

import json
from collections import deque
from typing import Any, Optional

from kog_shell.llm.base import LLMProvider, LLMResponse, ToolCall
from kog_shell.llm.config import DummyProviderConfig, LLMConfig, Message
from kog_shell.llm.exceptions import LLMError


class DummyProvider(LLMProvider):
    """
    A scripted LLM provider.

    Example:
        ```python
        provider = DummyProvider(LLMConfig(provider=ProviderType.DUMMY))
        provider.queue_tool_call("getCurrentDirectory")
        provider.queue_text("You are in /tmp.")

        first = await provider.complete("Where am I?")   # asks for a tool
        second = await provider.complete([...])          # final answer
        ```
    """

    def __init__(
        self,
        config: LLMConfig,
        dummy_config: Optional[DummyProviderConfig] = None,
    ):
        super().__init__(config)
        self.dummy_config = dummy_config or DummyProviderConfig()
        self._script: deque[LLMResponse] = deque()
        self._call_count = 0
        self._last_prompt: Optional[str | list[Message]] = None
        self._last_tools: Optional[list[dict[str, Any]]] = None

    @property
    def call_count(self) -> int:
        """Number of times complete() was called."""
        return self._call_count

    @property
    def last_prompt(self) -> Optional[str | list[Message]]:
        return self._last_prompt

    @property
    def last_tools(self) -> Optional[list[dict[str, Any]]]:
        return self._last_tools

    def queue_response(self, response: LLMResponse) -> None:
        """Append a response to return from a future complete() call."""
        self._script.append(response)

    def queue_text(self, text: str) -> None:
        self.queue_response(
            LLMResponse(content=text, model=self.config.model, finish_reason="stop")
        )

    def queue_tool_call(
        self, name: str, arguments: Optional[dict[str, Any]] = None, call_id: Optional[str] = None
    ) -> None:
        """Queue a response in which the model calls one tool."""
        arguments = arguments or {}
        call = ToolCall(
            id=call_id or f"call_{len(self._script)}_{name}",
            name=name,
            arguments=arguments,
            raw_arguments=json.dumps(arguments),
        )
        self.queue_response(
            LLMResponse(
                content="",
                model=self.config.model,
                finish_reason="tool_calls",
                tool_calls=[call],
            )
        )

    def set_should_fail(self, should_fail: bool, error_message: Optional[str] = None) -> None:
        self.dummy_config.should_fail = should_fail
        if error_message:
            self.dummy_config.error_message = error_message

    async def complete(
        self,
        prompt: str | list[Message],
        *,
        system_prompt: Optional[str] = None,
        tools: Optional[list[dict[str, Any]]] = None,
        **kwargs: Any,
    ) -> LLMResponse:
        """
        Return the next scripted response, or the configured static text.

        Raises:
            LLMError: If dummy_config.should_fail is True
        """
        self._call_count += 1
        self._last_prompt = list(prompt) if isinstance(prompt, list) else prompt
        self._last_tools = tools

        if self.dummy_config.should_fail:
            raise LLMError(
                self.dummy_config.error_message,
                provider=self.provider_name,
                model=self.model_name,
            )

        if self._script:
            return self._script.popleft()

        return LLMResponse(
            content=self.dummy_config.response_text,
            model=self.config.model,
            finish_reason="stop",
        )
