"""
Kog Shell configuration.

Combines LLM endpoint settings and tool-surface settings, loadable from a
YAML/JSON file or from environment variables.
"""

import json
import os
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import BaseModel, Field, SecretStr, field_validator

from kog_shell.filesystem.config import ShellToolsConfig
from kog_shell.llm.config import DEFAULT_BASE_URLS, LLMConfig, ProviderType


class LLMSettings(BaseModel):
    """
    LLM provider settings.

    SECURITY: the API key is masked in string representations and in
    ``KogShellConfig.to_dict()`` unless secrets are requested explicitly.

    Example:
        ```python
        settings = LLMSettings(provider="ollama", model="llama3.1")
        ```
    """

    model_config = {"extra": "forbid"}

    provider: ProviderType = Field(
        default=ProviderType.LMSTUDIO,
        description="LLM provider type (openai, ollama, lmstudio, dummy)",
    )
    model: str = Field(
        default="qwen2.5-7b-instruct",
        description="Model name to use",
    )
    base_url: Optional[str] = Field(
        default=None,
        description="Base URL for the API (None = provider default)",
    )
    api_key: Optional[SecretStr] = Field(
        default=None,
        description="API key (if required)",
    )
    temperature: float = Field(
        default=0.2,
        ge=0.0,
        le=2.0,
        description="Sampling temperature",
    )
    max_tokens: Optional[int] = Field(
        default=None,
        gt=0,
        description="Maximum tokens to generate",
    )
    timeout: float = Field(
        default=120.0,
        gt=0,
        description="Request timeout in seconds",
    )
    max_retries: int = Field(
        default=2,
        ge=0,
        description="Extra attempts for connection errors, timeouts, 429 and 5xx",
    )

    def get_api_key(self) -> Optional[str]:
        """Get the API key as a plain string. Internal use only."""
        if self.api_key:
            return self.api_key.get_secret_value()
        return None

    def to_llm_config(self, system_prompt: Optional[str] = None) -> LLMConfig:
        """Build the provider configuration."""
        return LLMConfig(
            provider=self.provider,
            model=self.model,
            base_url=self.base_url if self.base_url is not None else DEFAULT_BASE_URLS[self.provider],
            api_key=self.api_key,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            timeout=self.timeout,
            max_retries=self.max_retries,
            system_prompt=system_prompt,
        )

    def __repr__(self) -> str:
        """Safe representation that hides the API key."""
        api_key_str = "'***'" if self.api_key else "None"
        return (
            f"LLMSettings(provider={self.provider.value!r}, model={self.model!r}, "
            f"api_key={api_key_str})"
        )

    def __str__(self) -> str:
        return f"LLMSettings(provider={self.provider.value}, model={self.model})"


class KogShellConfig(BaseModel):
    """
    Complete Kog Shell configuration.

    File format (YAML):
        ```yaml
        llm:
          provider: ollama
          model: llama3.1
          base_url: http://localhost:11434/v1
        tools:
          initial_directory: ~/scratch
        max_tool_rounds: 8
        ```
    """

    model_config = {"extra": "forbid"}

    llm: LLMSettings = Field(
        default_factory=LLMSettings,
        description="LLM provider settings",
    )
    tools: ShellToolsConfig = Field(
        default_factory=ShellToolsConfig,
        description="Filesystem tool settings",
    )
    max_tool_rounds: int = Field(
        default=8,
        ge=1,
        le=100,
        description="Tool-calling responses honored per chat exchange",
    )
    system_prompt: Optional[str] = Field(
        default=None,
        description="Override for the chat system prompt",
    )

    @field_validator("tools", mode="before")
    @classmethod
    def expand_tool_directories(cls, v: Any) -> Any:
        """Allow '~' in directory settings."""
        if isinstance(v, dict):
            v = dict(v)
            for key in ("initial_directory", "home_directory"):
                if isinstance(v.get(key), str):
                    v[key] = os.path.expanduser(v[key])
        return v

    def __repr__(self) -> str:
        return (
            f"KogShellConfig(llm={self.llm!r}, "
            f"initial_directory={str(self.tools.initial_directory)!r}, "
            f"max_tool_rounds={self.max_tool_rounds})"
        )

    def __str__(self) -> str:
        return f"KogShellConfig(llm={self.llm}, max_tool_rounds={self.max_tool_rounds})"

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "KogShellConfig":
        """
        Load configuration from a YAML or JSON file.

        Raises:
            FileNotFoundError: If the config file doesn't exist
        """
        path = Path(path).expanduser().resolve()

        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        content = path.read_text()

        if path.suffix in (".yaml", ".yml"):
            data = yaml.safe_load(content)
        elif path.suffix == ".json":
            data = json.loads(content)
        else:
            # JSON is a subset of YAML
            data = yaml.safe_load(content)

        return cls.from_dict(data or {})

    @classmethod
    def from_dict(cls, data: dict) -> "KogShellConfig":
        return cls(**data)

    @classmethod
    def from_env(cls, prefix: str = "KOG_") -> "KogShellConfig":
        """
        Load configuration from environment variables.

        Environment variables:
            KOG_LLM_PROVIDER - LLM provider type
            KOG_LLM_MODEL - Model name
            KOG_LLM_BASE_URL - LLM API base URL
            KOG_LLM_API_KEY - LLM API key (falls back to OPENAI_API_KEY)
            KOG_LLM_TEMPERATURE - Sampling temperature
            KOG_LLM_MAX_TOKENS - Max tokens
            KOG_WORKING_DIRECTORY - Initial working directory
            KOG_MAX_TOOL_ROUNDS - Tool rounds per exchange

        Args:
            prefix: Environment variable prefix
        """
        env = os.environ
        llm: dict[str, Any] = {}
        if env.get(f"{prefix}LLM_PROVIDER"):
            llm["provider"] = env[f"{prefix}LLM_PROVIDER"]
        if env.get(f"{prefix}LLM_MODEL"):
            llm["model"] = env[f"{prefix}LLM_MODEL"]
        if env.get(f"{prefix}LLM_BASE_URL"):
            llm["base_url"] = env[f"{prefix}LLM_BASE_URL"]
        api_key = env.get(f"{prefix}LLM_API_KEY") or env.get("OPENAI_API_KEY")
        if api_key:
            llm["api_key"] = api_key
        if env.get(f"{prefix}LLM_TEMPERATURE"):
            llm["temperature"] = float(env[f"{prefix}LLM_TEMPERATURE"])
        if env.get(f"{prefix}LLM_MAX_TOKENS"):
            llm["max_tokens"] = int(env[f"{prefix}LLM_MAX_TOKENS"])

        data: dict[str, Any] = {"llm": llm}
        if env.get(f"{prefix}WORKING_DIRECTORY"):
            data["tools"] = {"initial_directory": env[f"{prefix}WORKING_DIRECTORY"]}
        if env.get(f"{prefix}MAX_TOOL_ROUNDS"):
            data["max_tool_rounds"] = int(env[f"{prefix}MAX_TOOL_ROUNDS"])

        return cls.from_dict(data)

    def to_dict(self, include_secrets: bool = False) -> dict:
        """
        Convert to a plain dictionary.

        Args:
            include_secrets: Include the API key in clear text
        """
        data = self.model_dump(mode="json")
        if self.llm.api_key:
            data["llm"]["api_key"] = self.llm.get_api_key() if include_secrets else "***"
        return data
