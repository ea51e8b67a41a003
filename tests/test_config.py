"""Tests for YAML configuration loading."""

from __future__ import annotations

from news_curator.config import AppConfig, ProviderConfig, get_api_key, load_config


def test_load_config_without_path_returns_defaults():
    cfg = load_config(None)

    assert cfg == AppConfig()
    assert cfg.selection.min_score_to_show == 6.0
    assert cfg.extract.request_delay_seconds == 0.3
    assert cfg.fetch.freshness_hours_by_tier == {1: 48.0}


def test_load_config_merges_sections_and_ignores_unknown_keys(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        """
provider:
  name: gemini
  model: gemini-2.0-flash
selection:
  total_limit: 12
  not_a_field: true
scoring:
  tier_weight:
    "1": 1.5
    "2": 0.7
unknown_section:
  foo: bar
""",
        encoding="utf-8",
    )

    cfg = load_config(str(path))

    assert cfg.provider.name == "gemini"
    assert cfg.provider.model == "gemini-2.0-flash"
    assert cfg.selection.total_limit == 12
    assert cfg.selection.min_score_to_show == 6.0
    assert cfg.scoring.tier_weight == {1: 1.5, 2: 0.7}
    assert cfg.scoring.category_boost["security_breach"] == 2


def test_get_api_key_prefers_inline_then_custom_env(monkeypatch):
    monkeypatch.setenv("MY_KEY", "from-env")

    assert get_api_key(ProviderConfig(api_key="inline", api_key_env="MY_KEY")) == "inline"
    assert get_api_key(ProviderConfig(api_key_env="MY_KEY")) == "from-env"


def test_get_api_key_uses_provider_default_env(monkeypatch):
    monkeypatch.setenv("GOOGLE_API_KEY", "g-key")
    monkeypatch.setenv("OPENROUTER_API_KEY", "or-key")
    monkeypatch.setenv("OPENAI_API_KEY", "oa-key")

    assert get_api_key(ProviderConfig(name="gemini")) == "g-key"
    assert get_api_key(ProviderConfig(name="openrouter")) == "or-key"
    assert get_api_key(ProviderConfig(name="openai")) == "oa-key"
