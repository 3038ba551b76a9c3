"""Tests for configuration loading."""

from pathlib import Path

import pytest

from knowledge_assistant.config import (
    AssistantConfig,
    BackendConfig,
    PromptConfig,
    StoreConfig,
    load_config,
)


def test_load_config_defaults():
    config = load_config()
    assert isinstance(config, AssistantConfig)
    assert config.backend.type == "openai"
    assert config.backend.model == "gpt-4.1-mini"
    assert config.backend.temperature == 0.2
    assert config.backend.connect_timeout == 10.0
    assert config.backend.timeout == 60.0
    assert config.backend.has_credential is False
    assert config.store.path.name == "knowledge.json"
    assert config.prompt.default_top_k == 5


def test_load_config_from_dict():
    config = load_config(
        {
            "backend": {"model": "gpt-4o", "temperature": 0.5, "api_key": "sk-test", "organization": "org-1"},
            "store": {"path": "/tmp/kb.json", "save_attempts": 1},
            "prompt": {"language": "German", "default_top_k": 3},
        }
    )
    assert config.backend.model == "gpt-4o"
    assert config.backend.temperature == 0.5
    assert config.backend.has_credential is True
    assert config.backend.extra == {"organization": "org-1"}
    assert config.store.path == Path("/tmp/kb.json")
    assert config.store.save_attempts == 1
    assert config.prompt.language == "German"
    assert config.prompt.default_top_k == 3


def test_load_config_from_yaml(tmp_path):
    path = tmp_path / "assistant.yaml"
    path.write_text("backend:\n  type: litellm\n  model: ollama/llama3\nprompt:\n  language: French\n")
    config = load_config(path)
    assert config.backend.type == "litellm"
    assert config.backend.model == "ollama/llama3"
    assert config.prompt.language == "French"


def test_load_config_missing_file_uses_defaults(tmp_path):
    config = load_config(tmp_path / "nope.yaml")
    assert config.backend.model == "gpt-4.1-mini"


def test_load_config_passthrough():
    config = AssistantConfig()
    assert load_config(config) is config


def test_load_config_env_override(monkeypatch, tmp_path):
    monkeypatch.setenv("AI_ASSISTANT_API_KEY", "  sk-env  ")
    monkeypatch.setenv("AI_ASSISTANT_BASE_URL", "https://llm.example.com/")
    monkeypatch.setenv("AI_ASSISTANT_MODEL", "env-model")
    monkeypatch.setenv("AI_ASSISTANT_KB_PATH", str(tmp_path / "env.json"))
    config = load_config({"backend": {"model": "dict-model"}})
    assert config.backend.api_key == "sk-env"
    assert config.backend.base_url == "https://llm.example.com"
    assert config.backend.model == "env-model"
    assert config.store.path == tmp_path / "env.json"


def test_blank_env_var_ignored(monkeypatch):
    monkeypatch.setenv("AI_ASSISTANT_MODEL", "   ")
    config = load_config({"backend": {"model": "dict-model"}})
    assert config.backend.model == "dict-model"


def test_api_key_hidden_from_repr():
    assert "sk-secret" not in repr(BackendConfig(api_key="sk-secret"))


class TestConfigValidation:
    """Validation tests for the config dataclasses."""

    def test_empty_model_raises(self):
        with pytest.raises(ValueError, match="model must be a non-empty string"):
            BackendConfig(model="")

    def test_negative_temperature_raises(self):
        with pytest.raises(ValueError, match="temperature must be >= 0"):
            BackendConfig(temperature=-0.1)

    def test_zero_max_tokens_raises(self):
        with pytest.raises(ValueError, match="max_tokens must be > 0"):
            BackendConfig(max_tokens=0)

    def test_zero_timeout_raises(self):
        with pytest.raises(ValueError, match="timeouts must be > 0"):
            BackendConfig(connect_timeout=0)

    def test_zero_save_attempts_raises(self):
        with pytest.raises(ValueError, match="save_attempts must be > 0"):
            StoreConfig(save_attempts=0)

    def test_zero_top_k_raises(self):
        with pytest.raises(ValueError, match="default_top_k must be > 0"):
            PromptConfig(default_top_k=0)

    def test_store_path_expanded(self):
        assert StoreConfig(path="~/kb.json").path == Path.home() / "kb.json"
