"""
Kog Shell - an LLM shell assistant with sandboxed filesystem tools.

The core is a stateful tool surface: one current directory, shell-like path
expansion without a shell, and containment checks before mutations. The LLM
and chat layers sit on top of it and are optional.
"""

__version__ = "0.1.0"

from kog_shell.chat import ChatService
from kog_shell.filesystem import (
    ErrorKind,
    ShellToolError,
    ShellTools,
    ShellToolsConfig,
    ToolResult,
)
from kog_shell.llm import (
    DummyProvider,
    LLMConfig,
    LLMProvider,
    LLMResponse,
    OpenAIProvider,
    ProviderType,
    create_provider,
    get_provider,
)
from kog_shell.settings import KogShellConfig

__all__ = [
    "__version__",
    # Tools
    "ShellTools",
    "ShellToolsConfig",
    "ToolResult",
    "ErrorKind",
    "ShellToolError",
    # LLM
    "LLMConfig",
    "LLMProvider",
    "LLMResponse",
    "ProviderType",
    "OpenAIProvider",
    "DummyProvider",
    "create_provider",
    "get_provider",
    # Chat
    "ChatService",
    # Settings
    "KogShellConfig",
]
