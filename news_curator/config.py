"""
Configuration management using YAML files and dataclasses.

This module defines all configuration dataclasses and provides loading
from YAML files with defaults. Configuration sections:
- ProviderConfig: Extraction oracle (LLM provider) settings
- FetchConfig: Feed fetching and freshness settings
- ResolverConfig: Full-text resolution settings
- ExtractConfig: Story extraction settings
- DedupConfig: Headline similarity settings
- ScoringConfig: Boost tables and tier weights
- SelectionConfig: Source balancing budget and output threshold
- CurationConfig: Audience description used in prompts
- LoggingConfig: Logging behavior
- LangfuseConfig: Langfuse tracing settings
- AppConfig: Root configuration container
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
import os
from typing import Any

import yaml


CATEGORIES: tuple[str, ...] = (
    "price_movement",
    "exchange_news",
    "defi_update",
    "nft_news",
    "regulation",
    "security_breach",
    "funding",
    "partnership",
    "protocol_upgrade",
    "market_analysis",
    "other",
)


@dataclass
class ProviderConfig:
    """Configuration for pluggable extraction providers.

    Attributes:
        name: Provider name ("openai_compatible", "openai", "openrouter", "gemini")
        model: Model identifier
        api_key_env: Environment variable holding the API key (provider default if None)
        base_url: Base URL for the provider API (provider default if None)
        api_key: Optional inline API key (overrides env var)
        trust_env: Whether to respect system proxy settings for API requests
        timeout_seconds: Request timeout for a single extraction call
        temperature: Sampling temperature
        max_output_tokens: Maximum tokens in the extraction response
    """

    name: str = "openrouter"
    model: str = "google/gemini-2.0-flash-001"
    api_key_env: str | None = None
    base_url: str | None = None
    api_key: str | None = None
    trust_env: bool = True
    timeout_seconds: float = 60.0
    temperature: float = 0.2
    max_output_tokens: int = 3000


@dataclass
class FetchConfig:
    """Configuration for source fetching.

    Attributes:
        timeout_seconds: HTTP request timeout per source
        retries: Number of retry attempts for failed requests
        trust_env: Whether to respect system proxy settings
        user_agent: HTTP User-Agent header string
        max_items_per_source: Entries kept from each source response
        freshness_hours: Default freshness window
        freshness_hours_by_tier: Per-tier overrides of the freshness window
        reader_proxy_url: Reader proxy template, "{url}" is replaced by the target
    """

    timeout_seconds: float = 20.0
    retries: int = 1
    trust_env: bool = True
    user_agent: str = "Mozilla/5.0 (compatible; NewsCurator/1.0)"
    max_items_per_source: int = 10
    freshness_hours: float = 24.0
    freshness_hours_by_tier: dict[int, float] = field(default_factory=lambda: {1: 48.0})
    reader_proxy_url: str = "https://r.jina.ai/{url}"


@dataclass
class ResolverConfig:
    """Configuration for full-text content resolution.

    Attributes:
        enabled: Whether sparse items are resolved to full text at all
        timeout_seconds: HTTP timeout for direct and proxy requests
        retries: Retry attempts for direct and proxy requests
        trust_env: Whether to respect system proxy settings for resolver requests
        user_agent: Browser-like User-Agent used for direct requests
        min_direct_chars: Direct extraction is accepted only above this length
        max_chars: Resolved text is truncated to this length
        strategies: Ordered strategy names ("direct", "reader_proxy")
        extractors: Ordered HTML extractors tried by the direct strategy
    """

    enabled: bool = True
    timeout_seconds: float = 20.0
    retries: int = 0
    trust_env: bool = True
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    )
    min_direct_chars: int = 600
    max_chars: int = 15000
    strategies: list[str] = field(default_factory=lambda: ["direct", "reader_proxy"])
    extractors: list[str] = field(
        default_factory=lambda: ["selectors", "trafilatura", "readability", "body"]
    )


@dataclass
class ExtractConfig:
    """Configuration for story extraction.

    Attributes:
        max_chars: Maximum characters of content sent to the provider
        min_content_chars: Below this length the item is passed through ungraded
        resolve_below_chars: Items with less content than this are resolved first
        max_stories: Maximum stories kept per item
        request_delay_seconds: Pause between consecutive provider calls
    """

    max_chars: int = 10000
    min_content_chars: int = 100
    resolve_below_chars: int = 500
    max_stories: int = 6
    request_delay_seconds: float = 0.3


@dataclass
class DedupConfig:
    """Configuration for cross-source story merging.

    Attributes:
        similarity_threshold: Jaccard similarity a headline pair must exceed to merge
        min_word_length: Words must be longer than this to count
        expansions: Abbreviations expanded before comparison
    """

    similarity_threshold: float = 0.5
    min_word_length: int = 3
    expansions: dict[str, str] = field(
        default_factory=lambda: {
            "fed": "federal reserve",
            "bps": "basis points",
            "btc": "bitcoin",
            "eth": "ethereum",
            "sol": "solana",
            "govt": "government",
        }
    )


@dataclass
class ScoringConfig:
    """Configuration for final score computation.

    Attributes:
        cross_source_two: Boost for stories seen in two sources
        cross_source_three_plus: Boost for stories seen in three or more sources
        category_boost: Per-category additive bonus
        recency_boost_hours: Stories newer than this get the recency boost
        recency_boost: Size of the recency boost
        tier_weight: Per-tier multiplier applied after all additive boosts
        default_tier: Tier assumed when a story's tier is unknown
        max_score: Upper clamp for the final score
    """

    cross_source_two: float = 1
    cross_source_three_plus: float = 2
    category_boost: dict[str, float] = field(
        default_factory=lambda: {
            "price_movement": 1,
            "regulation": 1,
            "exchange_news": 1,
            "defi_update": 1,
            "security_breach": 2,
        }
    )
    recency_boost_hours: float = 12.0
    recency_boost: float = 1
    tier_weight: dict[int, float] = field(
        default_factory=lambda: {0: 1.0, 1: 1.3, 2: 0.8, 3: 1.1, 4: 0.9}
    )
    default_tier: int = 2
    max_score: float = 10.0


@dataclass
class SelectionConfig:
    """Configuration for source balancing and final selection.

    Attributes:
        min_score_to_show: Stories below this final score are dropped
        total_limit: Maximum items sent to extraction per run
        priority_tier: Tier whose sources are drained first
        priority_per_source: Items taken from each priority-tier source
        quota_per_source: Items taken from each other source
    """

    min_score_to_show: float = 6.0
    total_limit: int = 30
    priority_tier: int = 1
    priority_per_source: int = 5
    quota_per_source: int = 2


@dataclass
class CurationConfig:
    """Audience settings rendered into the extraction prompt."""

    newsletter_name: str = "L8R by Crypto Mafia"
    audience: str = (
        "18-40 year old crypto investors in Kerala who want to know what happened "
        "and why it matters to their portfolio"
    )


@dataclass
class LoggingConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level ("DEBUG", "INFO", "WARNING", "ERROR")
        console: Whether to log to console
        file: Whether to log to file
        format: Log file format ("jsonl" or "plain")
        filename: Name of the main log file
        llm_log_enabled: Whether to enable separate LLM interaction logging
        llm_log_detail: LLM log detail level ("response_only", "prompt_response")
        llm_log_redaction: Redaction mode for LLM logs ("none", "redact_content", "redact_urls_authors")
        llm_log_file: Name of the LLM log file
        usage_log_file: Name of the per-call usage ledger file
    """

    level: str = "INFO"
    console: bool = True
    file: bool = True
    format: str = "jsonl"
    filename: str = "run.jsonl"
    llm_log_enabled: bool = True
    llm_log_detail: str = "response_only"
    llm_log_redaction: str = "redact_urls_authors"
    llm_log_file: str = "llm.jsonl"
    usage_log_file: str = "usage.jsonl"


@dataclass
class LangfuseConfig:
    """Configuration for Langfuse tracing.

    Attributes:
        enabled: Whether to enable Langfuse tracing
        public_key: Langfuse public key (optional)
        secret_key: Langfuse secret key (optional)
        host: Langfuse host URL (optional)
        environment: Langfuse environment label (optional)
        release: Langfuse release identifier (optional)
        redaction: Redaction mode for prompt/response payloads
        max_text_chars: Maximum characters for prompt/response payloads
    """

    enabled: bool = False
    public_key: str | None = None
    secret_key: str | None = None
    host: str | None = None
    environment: str | None = None
    release: str | None = None
    redaction: str = "redact_urls_authors"
    max_text_chars: int = 20000


@dataclass
class AppConfig:
    """Root configuration container aggregating all config sections."""

    provider: ProviderConfig = field(default_factory=ProviderConfig)
    fetch: FetchConfig = field(default_factory=FetchConfig)
    resolver: ResolverConfig = field(default_factory=ResolverConfig)
    extract: ExtractConfig = field(default_factory=ExtractConfig)
    dedup: DedupConfig = field(default_factory=DedupConfig)
    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    selection: SelectionConfig = field(default_factory=SelectionConfig)
    curation: CurationConfig = field(default_factory=CurationConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    langfuse: LangfuseConfig = field(default_factory=LangfuseConfig)


_SECTIONS: dict[str, type] = {
    "provider": ProviderConfig,
    "fetch": FetchConfig,
    "resolver": ResolverConfig,
    "extract": ExtractConfig,
    "dedup": DedupConfig,
    "scoring": ScoringConfig,
    "selection": SelectionConfig,
    "curation": CurationConfig,
    "logging": LoggingConfig,
    "langfuse": LangfuseConfig,
}

# Tables keyed by tier must have int keys even when YAML gives strings.
_INT_KEYED = {("fetch", "freshness_hours_by_tier"), ("scoring", "tier_weight")}


def load_config(path: str | None) -> AppConfig:
    """Load configuration from a YAML file with defaults."""
    if not path:
        return AppConfig()

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    return _merge_config(AppConfig(), raw)


def _merge_config(base: AppConfig, raw: dict[str, Any]) -> AppConfig:
    """Merge raw YAML config into base AppConfig.

    Unknown sections and unknown keys are ignored so older config files keep
    loading after fields are renamed.
    """
    data = _asdict(base)
    for key, value in raw.items():
        if key not in data:
            continue
        if isinstance(value, dict) and isinstance(data[key], dict):
            known = {k: v for k, v in value.items() if k in data[key]}
            data[key].update(known)
    return _fromdict(data)


def _asdict(cfg: AppConfig) -> dict[str, Any]:
    """Convert AppConfig to nested dictionary."""
    data: dict[str, Any] = {}
    for name in _SECTIONS:
        section = getattr(cfg, name)
        data[name] = {f.name: getattr(section, f.name) for f in fields(section)}
    return data


def _fromdict(data: dict[str, Any]) -> AppConfig:
    """Reconstruct AppConfig from nested dictionary."""
    sections: dict[str, Any] = {}
    for name, section_cls in _SECTIONS.items():
        values = dict(data.get(name, {}))
        for section, key in _INT_KEYED:
            if section == name and isinstance(values.get(key), dict):
                values[key] = {int(k): float(v) for k, v in values[key].items()}
        sections[name] = section_cls(**values)
    return AppConfig(**sections)


def get_api_key(cfg: ProviderConfig) -> str | None:
    """Get API key from inline config or environment variable."""
    if cfg.api_key:
        return cfg.api_key
    if cfg.api_key_env:
        return os.getenv(cfg.api_key_env)
    defaults = {
        "gemini": "GOOGLE_API_KEY",
        "openrouter": "OPENROUTER_API_KEY",
        "openai": "OPENAI_API_KEY",
        "openai_compatible": "OPENROUTER_API_KEY",
        "openai-compatible": "OPENROUTER_API_KEY",
    }
    env_name = defaults.get(cfg.name.lower(), "OPENROUTER_API_KEY")
    return os.getenv(env_name)


def get_langfuse_host(cfg: LangfuseConfig) -> str | None:
    """Get Langfuse host from inline config or environment variable."""
    if cfg.host:
        return cfg.host
    return os.getenv("LANGFUSE_HOST")
