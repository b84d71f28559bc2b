"""
OpenAI-compatible LLM provider.

Works with any server exposing ``/chat/completions`` with function calling:
OpenAI, LM Studio, Ollama's OpenAI endpoint, vLLM and similar.
"""

import asyncio
import json
import logging
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Optional

import httpx

from kog_shell.llm.base import LLMProvider, LLMResponse, ToolCall
from kog_shell.llm.config import LLMConfig, Message
from kog_shell.llm.exceptions import (
    LLMAuthenticationError,
    LLMConnectionError,
    LLMContextLengthError,
    LLMError,
    LLMModelNotFoundError,
    LLMRateLimitError,
    LLMResponseError,
    LLMServerError,
    LLMTimeoutError,
)

logger = logging.getLogger(__name__)


def parse_retry_after(value: Optional[str], now: Optional[datetime] = None) -> Optional[float]:
    """
    Seconds to wait according to a Retry-After header.

    The header is either a number of seconds or an HTTP date. Dates in the
    past give 0; values that are neither give None.
    """
    if not value or not value.strip():
        return None
    try:
        return max(0.0, float(value))
    except ValueError:
        pass
    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        logger.warning(f"Ignoring unparseable Retry-After header: {value!r}")
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    return max(0.0, (when - now).total_seconds())


class OpenAIProvider(LLMProvider):
    """
    OpenAI-compatible LLM provider.

    Retryable failures (see ``LLMError.retryable``) are retried with
    exponential backoff; a 429's ``Retry-After`` replaces the computed delay.

    Example:
        ```python
        provider = OpenAIProvider(LLMConfig(base_url="http://localhost:1234/v1"))
        response = await provider.complete("List my files", tools=schemas)
        for call in response.tool_calls:
            print(call.name, call.arguments)
        ```
    """

    def __init__(self, config: LLMConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Initialize the OpenAI-compatible provider.

        Args:
            config: LLM configuration with base_url, model, etc.
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        super().__init__(config)
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url,
                timeout=httpx.Timeout(self.config.timeout),
                headers=self._build_headers(),
                transport=self._transport,
            )
        return self._client

    def _build_headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        api_key = self.config.get_api_key()
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        return headers

    def _error_for(self, response: httpx.Response) -> LLMError:
        """Map an unsuccessful HTTP response to an LLMError."""
        status = response.status_code
        try:
            error = response.json().get("error", {})
            if isinstance(error, str):
                detail, error_type = error, None
            else:
                detail = error.get("message") or response.text
                error_type = error.get("type") or error.get("code")
        except (ValueError, AttributeError):
            detail = response.text or f"HTTP {status}"
            error_type = None

        source = {"provider": self.provider_name, "model": self.model_name, "status_code": status}

        if status == 401:
            return LLMAuthenticationError(detail, **source)
        if status == 404:
            return LLMModelNotFoundError(f"Model '{self.config.model}' not found: {detail}", **source)
        if status == 429:
            return LLMRateLimitError(
                detail, retry_after=parse_retry_after(response.headers.get("Retry-After")), **source
            )
        if status == 400 and (error_type == "context_length_exceeded" or "context" in detail.lower()):
            return LLMContextLengthError(detail, **source)
        if status >= 500:
            return LLMServerError(f"Server error: {detail}", **source)
        return LLMResponseError(detail, **source)

    @staticmethod
    def _parse_tool_calls(message: dict[str, Any]) -> list[ToolCall]:
        calls = []
        for index, raw in enumerate(message.get("tool_calls") or []):
            function = raw.get("function", {})
            raw_arguments = function.get("arguments") or "{}"
            if isinstance(raw_arguments, dict):
                arguments = raw_arguments
                raw_arguments = json.dumps(raw_arguments)
            else:
                try:
                    arguments = json.loads(raw_arguments)
                except json.JSONDecodeError:
                    logger.warning(f"Tool call arguments are not valid JSON: {raw_arguments!r}")
                    arguments = {}
                if not isinstance(arguments, dict):
                    arguments = {}
            calls.append(
                ToolCall(
                    id=raw.get("id") or f"call_{index}",
                    name=function.get("name", ""),
                    arguments=arguments,
                    raw_arguments=raw_arguments,
                )
            )
        return calls

    def _retry_delay(self, error: LLMError, attempt: int) -> float:
        if isinstance(error, LLMRateLimitError) and error.retry_after is not None:
            return error.retry_after
        return self.config.retry_backoff * (2**attempt)

    async def complete(
        self,
        prompt: str | list[Message],
        *,
        system_prompt: Optional[str] = None,
        tools: Optional[list[dict[str, Any]]] = None,
        **kwargs: Any,
    ) -> LLMResponse:
        request_body: dict[str, Any] = {
            "messages": self._prepare_messages(prompt, system_prompt),
            "stream": False,
            **self._merge_generation_params(**kwargs),
        }
        if tools:
            request_body["tools"] = tools

        attempt = 0
        while True:
            try:
                return await self._send(request_body)
            except LLMError as e:
                if not e.retryable or attempt >= self.config.max_retries:
                    raise
                delay = self._retry_delay(e, attempt)
                attempt += 1
                logger.warning(
                    f"{e}; retrying in {delay:.1f}s "
                    f"(attempt {attempt} of {self.config.max_retries})"
                )
                await asyncio.sleep(delay)

    async def _send(self, request_body: dict[str, Any]) -> LLMResponse:
        """Send one request and parse the completion."""
        client = await self._get_client()
        source = {"provider": self.provider_name, "model": self.model_name}
        logger.debug(f"POST {self.config.base_url}/chat/completions")

        try:
            response = await client.post("/chat/completions", json=request_body)
        except httpx.TimeoutException as e:
            raise LLMTimeoutError(
                f"Request timed out after {self.config.timeout}s: {e}", **source
            ) from e
        except httpx.ConnectError as e:
            raise LLMConnectionError(
                f"Failed to connect to {self.config.base_url}: {e}", **source
            ) from e
        except httpx.HTTPError as e:
            raise LLMConnectionError(f"Request failed: {e}", **source) from e

        if not response.is_success:
            raise self._error_for(response)

        try:
            data = response.json()
            choice = data["choices"][0]
            message = choice.get("message") or {}
            return LLMResponse(
                content=message.get("content") or "",
                model=data.get("model", self.config.model),
                finish_reason=choice.get("finish_reason"),
                tool_calls=self._parse_tool_calls(message),
                usage=data.get("usage"),
                raw_response=data,
            )
        except (KeyError, IndexError, TypeError, ValueError, AttributeError) as e:
            raise LLMResponseError(f"Malformed completion response: {e}", **source) from e

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
