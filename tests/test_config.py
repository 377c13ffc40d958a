from __future__ import annotations

from pf_engine import config


def test_load_completion_settings_defaults() -> None:
    settings = config.load_completion_settings()
    assert settings.api_url == "https://api.x.ai/v1/chat/completions"
    assert settings.model == "grok-3-mini"
    assert settings.temperature == 0.3
    assert settings.top_p == 0.8
    assert settings.max_tokens == 4096


def test_load_completion_settings_reads_env(monkeypatch) -> None:
    monkeypatch.setenv("PATHFINDER_API_URL", "https://llm.internal.test/v1/chat/completions")
    monkeypatch.setenv("PATHFINDER_MODEL", "grok-test")
    monkeypatch.setenv("PATHFINDER_TEMPERATURE", "0.5")
    monkeypatch.setenv("PATHFINDER_MAX_TOKENS", "8000")
    settings = config.load_completion_settings()
    assert settings.api_url == "https://llm.internal.test/v1/chat/completions"
    assert settings.model == "grok-test"
    assert settings.temperature == 0.5
    assert settings.max_tokens == 8000


def test_unparseable_env_value_uses_default(monkeypatch) -> None:
    monkeypatch.setenv("PATHFINDER_TEMPERATURE", "warm")
    assert config.load_completion_settings().temperature == 0.3


def test_out_of_range_env_value_falls_back_to_defaults(monkeypatch) -> None:
    monkeypatch.setenv("PATHFINDER_TOP_P", "7")
    monkeypatch.setenv("PATHFINDER_MODEL", "grok-test")
    settings = config.load_completion_settings()
    assert settings.top_p == 0.8
    assert settings.model == "grok-3-mini"


def test_get_api_key(monkeypatch) -> None:
    assert config.get_api_key() is None
    monkeypatch.setenv("XAI_API_KEY", "   ")
    assert config.get_api_key() is None
    monkeypatch.setenv("XAI_API_KEY", " xai-abc ")
    assert config.get_api_key() == "xai-abc"


def test_looks_like_xai_key() -> None:
    assert config.looks_like_xai_key("xai-" + "a" * 40)
    assert not config.looks_like_xai_key("xai-short")
    assert not config.looks_like_xai_key("sk-" + "a" * 40)
    assert not config.looks_like_xai_key(None)
