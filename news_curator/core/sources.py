"""
Source registry.

Holds the built-in source list and loads additional sources from YAML.
Custom sources replace built-in ones that share a name.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable

import yaml

from .types import Source


DEFAULT_SOURCES: tuple[Source, ...] = (
    # Tier 1: newsletters and digests (several stories per item)
    Source("Milk Road", "https://rss.beehiiv.com/feeds/v3hqiCe5Vw.xml", "newsletter", 1),
    Source("Bankless", "https://rss.beehiiv.com/feeds/2aeCe5g0lR.xml", "newsletter", 1),
    Source("The Defiant", "https://thedefiant.io/feed", "newsletter", 1),
    Source("Blockworks Daily", "https://blockworks.co/feed", "newsletter", 1),
    Source("TLDR Crypto", "https://tldr.tech/crypto/rss", "newsletter", 1),
    Source("The Pomp Letter", "https://pomp.substack.com/feed", "newsletter", 1),
    # Tier 2: news sites (one story per item)
    Source("CoinDesk", "https://www.coindesk.com/arc/outboundfeeds/rss/", "news", 2),
    Source("Cointelegraph", "https://cointelegraph.com/rss", "news", 2),
    Source("Decrypt", "https://decrypt.co/feed", "news", 2),
    Source("The Block", "https://www.theblock.co/rss.xml", "news", 2),
    Source("CryptoSlate", "https://cryptoslate.com/feed/", "news", 2),
    Source("Bitcoin Magazine", "https://bitcoinmagazine.com/.rss/full/", "news", 2),
    # Tier 3: official blogs and research
    Source("Ethereum Blog", "https://blog.ethereum.org/feed.xml", "blog", 3),
    Source("a16z Crypto", "https://a16zcrypto.com/posts/feed/", "blog", 3),
    Source("Messari Research", "https://messari.io/rss", "blog", 3),
    # Tier 4: community
    Source(
        "Hacker News Crypto",
        "https://hnrss.org/newest?q=Bitcoin+OR+Ethereum+OR+crypto+OR+blockchain&points=50",
        "social",
        4,
    ),
    Source("r/CryptoCurrency", "https://www.reddit.com/r/CryptoCurrency/top/.rss?t=day", "social", 4),
    Source("r/Bitcoin", "https://www.reddit.com/r/Bitcoin/top/.rss?t=day", "social", 4),
    Source("r/Ethereum", "https://www.reddit.com/r/ethereum/top/.rss?t=day", "social", 4),
    Source("r/CryptoMarkets", "https://www.reddit.com/r/CryptoMarkets/top/.rss?t=day", "social", 4),
    Source("r/altcoin", "https://www.reddit.com/r/altcoin/top/.rss?t=day", "social", 4),
    Source("r/defi", "https://www.reddit.com/r/defi/top/.rss?t=day", "social", 4),
)


def default_sources() -> list[Source]:
    return list(DEFAULT_SOURCES)


def parse_sources(data: Any) -> list[Source]:
    """Parse a YAML/JSON payload into Source objects.

    Accepts either a list of mappings or a mapping with a ``sources`` key.
    Each mapping needs ``name`` and ``url``; ``category`` and ``tier`` are
    optional.

    Raises:
        ValueError: If the payload shape is wrong or a source lacks name/url
    """
    if isinstance(data, dict):
        data = data.get("sources")
    if not isinstance(data, list):
        raise ValueError("Invalid sources file: expected a list of sources")

    sources: list[Source] = []
    for idx, entry in enumerate(data):
        if not isinstance(entry, dict) or not entry.get("name") or not entry.get("url"):
            raise ValueError(f"Invalid source at position {idx}: name and url are required")
        sources.append(
            Source(
                name=str(entry["name"]).strip(),
                url=str(entry["url"]).strip(),
                category=str(entry.get("category") or "news"),
                tier=int(entry.get("tier", 2)),
            )
        )
    return sources


def load_sources(path: str | Path) -> list[Source]:
    """Load sources from a YAML file."""
    with open(path, "r", encoding="utf-8") as f:
        try:
            raw = yaml.safe_load(f) or []
        except yaml.YAMLError as exc:
            raise ValueError(f"{path}: {exc}") from exc
    return parse_sources(raw)


def merge_sources(base: Iterable[Source], extra: Iterable[Source]) -> list[Source]:
    """Combine two source lists keeping names unique.

    Sources in ``extra`` override same-named sources in ``base`` in place;
    new names are appended.
    """
    merged: dict[str, Source] = {source.name: source for source in base}
    for source in extra:
        merged[source.name] = source
    return list(merged.values())
