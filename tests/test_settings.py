"""Tests for configuration loading."""

import json
import os
import tempfile
from pathlib import Path

import pytest
from pydantic import ValidationError

from kog_shell.llm import ProviderType
from kog_shell.settings import KogShellConfig, LLMSettings


@pytest.fixture
def temp_dir():
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


class TestLLMSettings:
    """Tests for LLMSettings."""

    def test_defaults(self):
        settings = LLMSettings()
        assert settings.provider == ProviderType.LMSTUDIO
        assert settings.base_url is None

    def test_to_llm_config_uses_provider_default_url(self):
        config = LLMSettings(provider="ollama", model="llama3.1").to_llm_config("sys")
        assert config.base_url == "http://localhost:11434/v1"
        assert config.system_prompt == "sys"

    def test_to_llm_config_keeps_explicit_url(self):
        config = LLMSettings(provider="openai", base_url="http://proxy/v1/").to_llm_config()
        assert config.base_url == "http://proxy/v1"

    def test_api_key_hidden(self):
        settings = LLMSettings(api_key="sk-secret")
        assert "sk-secret" not in repr(settings)
        assert "sk-secret" not in str(settings)
        assert settings.get_api_key() == "sk-secret"

    def test_extra_fields_forbidden(self):
        with pytest.raises(ValidationError):
            LLMSettings(unknown="x")


class TestKogShellConfig:
    """Tests for KogShellConfig."""

    def test_from_dict(self, temp_dir):
        config = KogShellConfig.from_dict(
            {
                "llm": {"provider": "dummy", "model": "m"},
                "tools": {"initial_directory": str(temp_dir)},
                "max_tool_rounds": 3,
            }
        )
        assert config.llm.provider == ProviderType.DUMMY
        assert config.tools.initial_directory == temp_dir
        assert config.max_tool_rounds == 3

    def test_max_tool_rounds_bounds(self):
        with pytest.raises(ValidationError):
            KogShellConfig(max_tool_rounds=0)

    def test_unknown_top_level_key(self):
        with pytest.raises(ValidationError):
            KogShellConfig.from_dict({"nope": 1})

    def test_tilde_expanded(self):
        config = KogShellConfig.from_dict({"tools": {"initial_directory": "~"}})
        assert config.tools.initial_directory == Path(os.path.expanduser("~"))

    def test_from_yaml_file(self, temp_dir):
        path = temp_dir / "kog.yaml"
        path.write_text(
            "llm:\n"
            "  provider: ollama\n"
            "  model: llama3.1\n"
            f"tools:\n  initial_directory: {temp_dir}\n"
        )

        config = KogShellConfig.from_file(path)

        assert config.llm.provider == ProviderType.OLLAMA
        assert config.tools.initial_directory == temp_dir

    def test_from_json_file(self, temp_dir):
        path = temp_dir / "kog.json"
        path.write_text(json.dumps({"llm": {"model": "gpt-4o-mini", "provider": "openai"}}))

        config = KogShellConfig.from_file(path)

        assert config.llm.model == "gpt-4o-mini"

    def test_empty_file_gives_defaults(self, temp_dir):
        path = temp_dir / "empty.yml"
        path.write_text("")
        assert KogShellConfig.from_file(path).max_tool_rounds == 8

    def test_missing_file(self, temp_dir):
        with pytest.raises(FileNotFoundError, match="Configuration file not found"):
            KogShellConfig.from_file(temp_dir / "missing.yaml")

    def test_from_env(self, monkeypatch, temp_dir):
        monkeypatch.setenv("KOG_LLM_PROVIDER", "openai")
        monkeypatch.setenv("KOG_LLM_MODEL", "gpt-4o-mini")
        monkeypatch.setenv("KOG_LLM_TEMPERATURE", "0.7")
        monkeypatch.setenv("KOG_WORKING_DIRECTORY", str(temp_dir))
        monkeypatch.setenv("KOG_MAX_TOOL_ROUNDS", "4")
        monkeypatch.delenv("KOG_LLM_API_KEY", raising=False)
        monkeypatch.setenv("OPENAI_API_KEY", "sk-env")

        config = KogShellConfig.from_env()

        assert config.llm.provider == ProviderType.OPENAI
        assert config.llm.temperature == 0.7
        assert config.llm.get_api_key() == "sk-env"
        assert config.tools.initial_directory == temp_dir
        assert config.max_tool_rounds == 4

    def test_to_dict_masks_api_key(self):
        config = KogShellConfig.from_dict({"llm": {"api_key": "sk-secret"}})

        assert config.to_dict()["llm"]["api_key"] == "***"
        assert config.to_dict(include_secrets=True)["llm"]["api_key"] == "sk-secret"
        assert "sk-secret" not in repr(config)
