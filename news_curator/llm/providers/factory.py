"""Provider factory and registry for hot-swappable extraction backends."""

from __future__ import annotations

from ...config import (
    CurationConfig,
    ExtractConfig,
    LoggingConfig,
    ProviderConfig,
    get_api_key,
)
from .base import ExtractionProvider
from .gemini import GeminiProvider
from .openai_compatible import OpenAICompatibleProvider


ProviderBuilder = type[ExtractionProvider]

_PROVIDER_REGISTRY: dict[str, ProviderBuilder] = {
    "gemini": GeminiProvider,
    "openai": OpenAICompatibleProvider,
    "openai_compatible": OpenAICompatibleProvider,
    "openai-compatible": OpenAICompatibleProvider,
    "openrouter": OpenAICompatibleProvider,
}


def available_providers() -> list[str]:
    """Return the set of registered provider names."""
    return sorted(_PROVIDER_REGISTRY.keys())


def create_provider(
    provider_cfg: ProviderConfig,
    extract_cfg: ExtractConfig,
    curation_cfg: CurationConfig,
    log_cfg: LoggingConfig,
    llm_logger=None,
) -> ExtractionProvider:
    """Build a provider instance from runtime config.

    Raises:
        ValueError: If the provider is unknown or its API key is missing
    """
    name = provider_cfg.name.lower().strip()
    builder = _PROVIDER_REGISTRY.get(name)
    if builder is None:
        supported = ", ".join(available_providers())
        raise ValueError(f"Unsupported provider: {provider_cfg.name}. Supported: {supported}")
    api_key = get_api_key(provider_cfg)
    return builder(provider_cfg, extract_cfg, curation_cfg, api_key, log_cfg, llm_logger)
