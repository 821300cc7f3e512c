import pytest
from pydantic import ValidationError

from docs_agent.config import AgentSettings, GeminiConfig, OpenAIConfig
from docs_agent.storage.settings_store import SQLiteSettingsStore


def test_empty_store_loads_defaults(tmp_path) -> None:
    settings = SQLiteSettingsStore(tmp_path / "settings.db").load_settings()

    assert settings.provider == "openai"
    assert settings.api_key.get_secret_value() == ""
    assert settings.max_tokens == 4000
    assert settings.save_history is True


def test_saved_settings_load_back(tmp_path) -> None:
    store = SQLiteSettingsStore(tmp_path / "nested" / "settings.db")
    original = AgentSettings(
        provider="gemini",
        api_key="g-secret",
        model="gemini-2.0-flash",
        max_tokens=1200,
        temperature=0.2,
        save_history=False,
    )

    assert store.save_settings(original).success is True
    loaded = store.load_settings()

    assert loaded.provider == "gemini"
    assert loaded.api_key.get_secret_value() == "g-secret"
    assert loaded.model == "gemini-2.0-flash"
    assert loaded.max_tokens == 1200
    assert loaded.temperature == 0.2
    assert loaded.save_history is False


def test_status_hides_the_key(tmp_path) -> None:
    store = SQLiteSettingsStore(tmp_path / "settings.db")
    store.save_settings(AgentSettings(api_key="sk-very-secret"))

    status = store.status()

    assert status["has_api_key"] is True
    assert "sk-very-secret" not in str(status)


def test_settings_bounds_are_validated() -> None:
    with pytest.raises(ValidationError):
        AgentSettings(max_tokens=50)
    with pytest.raises(ValidationError):
        AgentSettings(temperature=1.5)


def test_settings_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("DOCS_AGENT_PROVIDER", "gemini")
    monkeypatch.setenv("GEMINI_API_KEY", "env-key")
    monkeypatch.setenv("DOCS_AGENT_MAX_TOKENS", "900")
    monkeypatch.delenv("DOCS_AGENT_MODEL", raising=False)
    monkeypatch.delenv("DOCS_AGENT_TEMPERATURE", raising=False)

    settings = AgentSettings.from_env()
    config = settings.to_provider_config()

    assert isinstance(config, GeminiConfig)
    assert config.api_key.get_secret_value() == "env-key"
    assert config.max_tokens == 900
    assert config.model == "gemini-1.5-flash"


def test_provider_config_defaults_to_openai() -> None:
    config = AgentSettings(api_key="sk-x", model="gpt-4o").to_provider_config()

    assert isinstance(config, OpenAIConfig)
    assert config.model == "gpt-4o"
    assert config.redacted()["api_key_set"] is True
