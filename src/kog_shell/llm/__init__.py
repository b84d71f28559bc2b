"""
LLM provider abstraction layer.

The text-generation collaborator of the chat layer: one prompt (or a
conversation plus tool schemas) in, one response out.

Example:
    ```python
    from kog_shell.llm import create_provider

    provider = create_provider("lmstudio", model="qwen2.5-7b-instruct")
    response = await provider.complete("What is in my home directory?")
    print(response.content)
    ```
"""

from kog_shell.llm.base import LLMProvider, LLMResponse, ToolCall
from kog_shell.llm.config import (
    DEFAULT_BASE_URLS,
    DummyProviderConfig,
    LLMConfig,
    Message,
    MessageRole,
    ProviderType,
)
from kog_shell.llm.dummy_provider import DummyProvider
from kog_shell.llm.exceptions import (
    LLMAuthenticationError,
    LLMConnectionError,
    LLMContextLengthError,
    LLMError,
    LLMModelNotFoundError,
    LLMProviderNotFoundError,
    LLMRateLimitError,
    LLMResponseError,
    LLMServerError,
    LLMTimeoutError,
)
from kog_shell.llm.factory import (
    create_provider,
    get_provider,
    list_providers,
    register_provider,
)
from kog_shell.llm.openai_provider import OpenAIProvider

__all__ = [
    # Config
    "LLMConfig",
    "DummyProviderConfig",
    "ProviderType",
    "DEFAULT_BASE_URLS",
    "Message",
    "MessageRole",
    # Base classes
    "LLMProvider",
    "LLMResponse",
    "ToolCall",
    # Providers
    "OpenAIProvider",
    "DummyProvider",
    # Factory
    "get_provider",
    "create_provider",
    "list_providers",
    "register_provider",
    # Exceptions
    "LLMError",
    "LLMConnectionError",
    "LLMAuthenticationError",
    "LLMRateLimitError",
    "LLMTimeoutError",
    "LLMResponseError",
    "LLMServerError",
    "LLMModelNotFoundError",
    "LLMContextLengthError",
    "LLMProviderNotFoundError",
]
