"""
Endpoint and conversation models for the LLM layer.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, SecretStr, field_validator


class ProviderType(str, Enum):
    """Backends the factory knows how to build."""

    OPENAI = "openai"
    OLLAMA = "ollama"
    LMSTUDIO = "lmstudio"
    DUMMY = "dummy"


DEFAULT_BASE_URLS: dict[ProviderType, str] = {
    ProviderType.OPENAI: "https://api.openai.com/v1",
    ProviderType.OLLAMA: "http://localhost:11434/v1",
    ProviderType.LMSTUDIO: "http://localhost:1234/v1",
    ProviderType.DUMMY: "",
}


class MessageRole(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


class Message(BaseModel):
    """
    One turn of a tool-calling conversation.

    An assistant turn that asked for tools keeps the calls in ``tool_calls``
    (wire format); each tool turn answers one of them via ``tool_call_id``.
    """

    role: MessageRole
    content: str = ""
    tool_calls: Optional[list[dict[str, Any]]] = None
    tool_call_id: Optional[str] = None

    @classmethod
    def user(cls, content: str) -> "Message":
        return cls(role=MessageRole.USER, content=content)

    @classmethod
    def assistant(
        cls, content: str, tool_calls: Optional[list[dict[str, Any]]] = None
    ) -> "Message":
        return cls(role=MessageRole.ASSISTANT, content=content, tool_calls=tool_calls)

    @classmethod
    def tool(cls, tool_call_id: str, content: str) -> "Message":
        """Result string of one tool call, fed back to the model."""
        return cls(role=MessageRole.TOOL, content=content, tool_call_id=tool_call_id)

    def to_api_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"role": self.role.value, "content": self.content}
        if self.tool_calls:
            data["tool_calls"] = self.tool_calls
        if self.tool_call_id is not None:
            data["tool_call_id"] = self.tool_call_id
        return data


class LLMConfig(BaseModel):
    """
    Which chat-completions endpoint to call and how.

    Example:
        ```python
        # Local model served by Ollama
        config = LLMConfig(
            provider=ProviderType.OLLAMA,
            model="llama3.1",
            base_url="http://localhost:11434/v1",
        )
        ```
    """

    provider: ProviderType = Field(
        default=ProviderType.LMSTUDIO,
        description="Backend type",
    )
    model: str = Field(
        default="qwen2.5-7b-instruct",
        description="Model name as the endpoint knows it (must support tool calls)",
    )
    base_url: str = Field(
        default=DEFAULT_BASE_URLS[ProviderType.LMSTUDIO],
        description="Endpoint root, '/chat/completions' is appended",
    )
    api_key: Optional[SecretStr] = Field(
        default=None,
        description="Bearer token; local servers usually need none",
    )
    temperature: float = Field(
        default=0.2,
        ge=0.0,
        le=2.0,
        description="Sampling temperature; low values keep tool use predictable",
    )
    max_tokens: Optional[int] = Field(
        default=None,
        gt=0,
        description="Completion length cap (None = endpoint default)",
    )
    timeout: float = Field(
        default=120.0,
        gt=0,
        description="Seconds to wait for one completion",
    )
    max_retries: int = Field(
        default=2,
        ge=0,
        description="Extra attempts for retryable failures (connection, timeout, 429, 5xx)",
    )
    retry_backoff: float = Field(
        default=1.0,
        ge=0.0,
        description="Base delay in seconds, doubled after each failed attempt",
    )
    system_prompt: Optional[str] = Field(
        default=None,
        description="Used when a request does not pass its own system prompt",
    )
    extra_options: dict[str, Any] = Field(
        default_factory=dict,
        description="Extra request body fields (top_p, seed, stop, ...)",
    )

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    def get_api_key(self) -> Optional[str]:
        return self.api_key.get_secret_value() if self.api_key else None

    def to_generation_params(self) -> dict[str, Any]:
        """Request body fields other than messages and tools."""
        params: dict[str, Any] = {"model": self.model, "temperature": self.temperature}
        if self.max_tokens is not None:
            params["max_tokens"] = self.max_tokens
        return {**params, **self.extra_options}


class DummyProviderConfig(BaseModel):
    """Behavior of the offline provider once its script runs out."""

    response_text: str = Field(
        default="This is a dummy response for testing purposes.",
        description="Reply returned when nothing is queued",
    )
    should_fail: bool = Field(
        default=False,
        description="Raise LLMError on every call",
    )
    error_message: str = Field(
        default="Simulated dummy provider error",
        description="Message of the raised LLMError",
    )
