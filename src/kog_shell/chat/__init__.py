"""
Chat layer connecting an LLM provider to the filesystem tools.
"""

from kog_shell.chat.service import DEFAULT_SYSTEM_PROMPT, MAX_ROUNDS_MESSAGE, ChatService

__all__ = ["ChatService", "DEFAULT_SYSTEM_PROMPT", "MAX_ROUNDS_MESSAGE"]
