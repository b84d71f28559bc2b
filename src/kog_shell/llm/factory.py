"""
Provider registry.

Each provider type maps to a factory taking the config plus any
provider-specific keyword arguments (``dummy_config`` for the dummy
provider, ``transport`` for the HTTP ones).
"""

from typing import Any, Callable, Optional

from kog_shell.llm.base import LLMProvider
from kog_shell.llm.config import DEFAULT_BASE_URLS, LLMConfig, ProviderType
from kog_shell.llm.dummy_provider import DummyProvider
from kog_shell.llm.exceptions import LLMProviderNotFoundError
from kog_shell.llm.openai_provider import OpenAIProvider

ProviderFactory = Callable[..., LLMProvider]

_PROVIDER_REGISTRY: dict[ProviderType, ProviderFactory] = {}


def register_provider(
    provider_type: ProviderType,
    factory: Optional[ProviderFactory] = None,
) -> Callable[[ProviderFactory], ProviderFactory]:
    """
    Register a factory for a provider type, replacing any earlier one.

    Works as a decorator or as a plain call with ``factory`` given.
    """

    def decorator(func: ProviderFactory) -> ProviderFactory:
        _PROVIDER_REGISTRY[provider_type] = func
        return func

    if factory is not None:
        return decorator(factory)
    return decorator


def get_provider(config: LLMConfig, **provider_kwargs: Any) -> LLMProvider:
    """
    Build the provider selected by ``config.provider``.

    Raises:
        LLMProviderNotFoundError: If no factory is registered for the type
    """
    factory = _PROVIDER_REGISTRY.get(config.provider)
    if factory is None:
        raise LLMProviderNotFoundError(
            f"Unknown provider type: {config.provider.value}. "
            f"Available providers: {', '.join(list_providers())}",
            provider=config.provider.value,
        )
    return factory(config, **provider_kwargs)


def create_provider(
    provider: str | ProviderType = ProviderType.LMSTUDIO,
    model: str = "qwen2.5-7b-instruct",
    base_url: Optional[str] = None,
    **kwargs: Any,
) -> LLMProvider:
    """
    Build a provider from a type name, filling in its default base URL.

    Example:
        ```python
        provider = create_provider("ollama", model="llama3.1")
        ```
    """
    provider = ProviderType(provider)
    config = LLMConfig(
        provider=provider,
        model=model,
        base_url=base_url if base_url is not None else DEFAULT_BASE_URLS[provider],
        **kwargs,
    )
    return get_provider(config)


def list_providers() -> list[str]:
    return [p.value for p in _PROVIDER_REGISTRY]


@register_provider(ProviderType.OPENAI)
@register_provider(ProviderType.LMSTUDIO)
@register_provider(ProviderType.OLLAMA)
def _create_openai_compatible_provider(config: LLMConfig, **kwargs: Any) -> LLMProvider:
    """OpenAI, LM Studio and Ollama all speak the OpenAI wire format."""
    return OpenAIProvider(config, transport=kwargs.get("transport"))


@register_provider(ProviderType.DUMMY)
def _create_dummy_provider(config: LLMConfig, **kwargs: Any) -> LLMProvider:
    return DummyProvider(config, kwargs.get("dummy_config"))
