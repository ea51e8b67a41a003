"""Tests for hot-swappable extraction provider factory."""

import pytest

from news_curator.config import CurationConfig, ExtractConfig, LoggingConfig, ProviderConfig
from news_curator.llm.providers.factory import available_providers, create_provider
from news_curator.llm.providers.gemini import GeminiProvider
from news_curator.llm.providers.openai_compatible import OpenAICompatibleProvider


def _create(cfg: ProviderConfig):
    return create_provider(cfg, ExtractConfig(), CurationConfig(), LoggingConfig(), llm_logger=None)


def test_available_providers_contains_expected_backends():
    names = available_providers()
    assert "gemini" in names
    assert "openai" in names
    assert "openai_compatible" in names
    assert "openrouter" in names


def test_create_provider_gemini():
    provider = _create(ProviderConfig(name="gemini", model="gemini-2.0-flash", api_key="test-key"))
    assert isinstance(provider, GeminiProvider)


def test_create_provider_openrouter_is_openai_compatible():
    provider = _create(ProviderConfig(name="openrouter", api_key="test-key"))
    assert isinstance(provider, OpenAICompatibleProvider)
    assert provider._base_url() == "https://openrouter.ai/api/v1"


def test_create_provider_openai_uses_openai_base_url():
    provider = _create(ProviderConfig(name="openai", model="gpt-4o-mini", api_key="test-key"))
    assert provider._base_url() == "https://api.openai.com/v1"


def test_create_provider_reads_key_from_env(monkeypatch):
    monkeypatch.setenv("GOOGLE_API_KEY", "env-key")
    provider = _create(ProviderConfig(name="gemini", model="gemini-2.0-flash"))
    assert provider.api_key == "env-key"


def test_create_provider_requires_api_key(monkeypatch):
    monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)
    with pytest.raises(ValueError, match="Missing API key"):
        _create(ProviderConfig(name="openrouter"))


def test_create_provider_rejects_unknown_backend():
    with pytest.raises(ValueError, match="Unsupported provider"):
        _create(
            ProviderConfig(
                name="unknown-provider",
                model="x",
                api_key="test-key",
                base_url="https://example.com",
            )
        )
