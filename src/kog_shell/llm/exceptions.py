"""
Errors raised by LLM providers.

Every error names the provider and model it came from. ``retryable`` marks
failures where sending the same request again may succeed; the OpenAI
provider retries those up to ``LLMConfig.max_retries`` times.
"""

from typing import Any, Optional


class LLMError(Exception):
    """Base exception for provider failures."""

    retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        provider: Optional[str] = None,
        model: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.provider = provider
        self.model = model
        self.status_code = status_code
        self.details = details or {}

    def __str__(self) -> str:
        source = "/".join(part for part in (self.provider, self.model) if part)
        return f"{self.message} ({source})" if source else self.message


class LLMConnectionError(LLMError):
    """The endpoint could not be reached."""

    retryable = True


class LLMTimeoutError(LLMError):
    """The endpoint did not answer within ``LLMConfig.timeout``."""

    retryable = True


class LLMRateLimitError(LLMError):
    """HTTP 429. ``retry_after`` holds the server's hint in seconds, if any."""

    retryable = True

    def __init__(self, message: str, *, retry_after: Optional[float] = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.retry_after = retry_after


class LLMAuthenticationError(LLMError):
    """HTTP 401, the API key was rejected."""


class LLMModelNotFoundError(LLMError):
    """HTTP 404, the endpoint does not serve the configured model."""


class LLMContextLengthError(LLMError):
    """The conversation, tool results included, no longer fits the model."""


class LLMResponseError(LLMError):
    """Any other error status, or a body that is not a chat completion."""


class LLMServerError(LLMResponseError):
    """HTTP 5xx from the endpoint."""

    retryable = True


class LLMProviderNotFoundError(LLMError):
    """No factory is registered for the requested provider type."""
