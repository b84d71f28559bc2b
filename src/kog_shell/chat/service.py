"""
Conversational layer: one natural-language request in, one reply out.

The model sees the filesystem tool schemas; every tool call it makes is
dispatched through ``ShellTools.execute_tool`` and the resulting status
string is fed back until the model answers in plain text.
"""

import logging
from typing import Callable, Optional

from kog_shell.filesystem.tools import ShellTools
from kog_shell.llm.base import LLMProvider, ToolCall
from kog_shell.llm.config import Message
from kog_shell.llm.exceptions import LLMError

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = (
    "You are a careful shell assistant working inside the user's current "
    "working directory. Use the provided tools to inspect and change files; "
    "never claim a file operation happened unless a tool reported it. "
    "Relative paths are resolved against the current working directory."
)

MAX_ROUNDS_MESSAGE = "Maximum tool rounds reached"

ToolCallListener = Callable[[ToolCall, str], None]


class ChatService:
    """
    Bridges an LLM provider and the filesystem tool surface.

    Each ``exchange`` starts a fresh conversation; the only state carried
    between exchanges is the tool surface's current directory.

    Usage:
        service = ChatService(provider, ShellTools())
        reply = await service.exchange("create notes.txt containing 'hello'")
    """

    def __init__(
        self,
        provider: LLMProvider,
        tools: Optional[ShellTools] = None,
        *,
        max_tool_rounds: int = 8,
        system_prompt: Optional[str] = DEFAULT_SYSTEM_PROMPT,
        on_tool_call: Optional[ToolCallListener] = None,
    ):
        """
        Initialize the chat service.

        Args:
            provider: Text-generation backend
            tools: Tool surface exposed to the model (None = plain chat)
            max_tool_rounds: Tool-calling responses honored per exchange
            system_prompt: System prompt sent with every exchange
            on_tool_call: Called with each tool call and its result string
        """
        self.provider = provider
        self.tools = tools
        self.max_tool_rounds = max_tool_rounds
        self.system_prompt = system_prompt
        self.on_tool_call = on_tool_call

    async def exchange(self, message: str) -> str:
        """
        Send one message and return the model's final reply.

        Provider failures are returned as text rather than raised.
        """
        conversation = [Message.user(message)]
        schemas = self.tools.get_tool_schemas() if self.tools else None
        rounds = 0

        while True:
            try:
                response = await self.provider.complete(
                    conversation, system_prompt=self.system_prompt, tools=schemas
                )
            except LLMError as e:
                logger.error(f"LLM request failed: {e}")
                return f"LLM request failed: {e}"

            if not response.has_tool_calls or self.tools is None:
                return response.content

            if rounds >= self.max_tool_rounds:
                logger.warning(f"Stopping after {rounds} tool rounds")
                return MAX_ROUNDS_MESSAGE
            rounds += 1

            conversation.append(
                Message.assistant(
                    response.content,
                    tool_calls=[call.to_api_dict() for call in response.tool_calls],
                )
            )
            for call in response.tool_calls:
                result = self.tools.execute_tool(call.name, call.arguments)
                logger.info(f"Tool {call.name}({call.arguments}) -> {result[:200]!r}")
                if self.on_tool_call:
                    self.on_tool_call(call, result)
                conversation.append(Message.tool(call.id, result))
