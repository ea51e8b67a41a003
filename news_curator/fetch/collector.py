"""
Concurrent source collection.

Fetches every source in parallel, normalizes responses into RawItems,
drops cross-source title collisions and stale entries, and records a
health entry per source. A failing source never aborts the collection.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
import logging
import re

from ..config import FetchConfig
from ..core.types import RawItem, Source, SourceHealth
from ..utils.logging import log_event
from .feeds import listing_url, parse_feed, parse_reader_listing, uses_reader_listing
from .fetcher import fetch_url_async, reader_proxy_url


_TITLE_KEY_RE = re.compile(r"[^a-z0-9]")


@dataclass
class CollectionResult:
    """Items gathered from all sources plus per-source health."""
    items: list[RawItem] = field(default_factory=list)
    health: list[SourceHealth] = field(default_factory=list)
    total_before_filter: int = 0


async def fetch_source(
    source: Source,
    cfg: FetchConfig,
    fetched_at: datetime,
    logger: logging.Logger | None = None,
) -> tuple[list[RawItem], SourceHealth]:
    """Fetch and parse a single source.

    Returns an empty item list with the error recorded on the health entry
    when the request or parsing fails.
    """
    if uses_reader_listing(source):
        target = reader_proxy_url(cfg.reader_proxy_url, listing_url(source.url))
        headers = {"Accept": "text/plain"}
    else:
        target = source.url
        headers = None

    result = await fetch_url_async(
        target,
        timeout=cfg.timeout_seconds,
        retries=cfg.retries,
        user_agent=cfg.user_agent,
        trust_env=cfg.trust_env,
        headers=headers,
    )
    if not result.ok:
        log_event(
            logger,
            "Source fetch failed",
            event="source_failed",
            source=source.name,
            url=target,
            status_code=result.status_code,
            error=result.error,
        )
        return [], SourceHealth(source.name, 0, error=result.error)

    try:
        if uses_reader_listing(source):
            items = parse_reader_listing(
                result.text or "", source, fetched_at, cfg.max_items_per_source
            )
        else:
            items = parse_feed(result.text or "", source, cfg.max_items_per_source)
    except Exception as exc:  # noqa: BLE001
        error = f"{type(exc).__name__}: {exc}"
        log_event(logger, "Source parse failed", event="source_failed", source=source.name, error=error)
        return [], SourceHealth(source.name, 0, error=error)

    return items, SourceHealth(source.name, len(items))


async def fetch_all_sources(
    sources: list[Source],
    cfg: FetchConfig,
    fetched_at: datetime,
    logger: logging.Logger | None = None,
) -> tuple[list[RawItem], list[SourceHealth]]:
    """Fetch all sources concurrently; results keep the source order."""
    tasks = [
        asyncio.create_task(fetch_source(source, cfg, fetched_at, logger)) for source in sources
    ]
    results = await asyncio.gather(*tasks)

    items: list[RawItem] = []
    health: list[SourceHealth] = []
    for source_items, source_health in results:
        items.extend(source_items)
        health.append(source_health)
        if source_health.ok:
            log_event(
                logger,
                f"Fetched {source_health.count} items from {source_health.source_name}",
                event="source_fetched",
                source=source_health.source_name,
                count=source_health.count,
            )
        else:
            log_event(
                logger,
                f"No items from {source_health.source_name}",
                severity=logging.WARNING,
                event="source_empty",
                source=source_health.source_name,
                error=source_health.error,
            )
    return items, health


def collect_items(
    sources: list[Source],
    cfg: FetchConfig,
    now: datetime | None = None,
    logger: logging.Logger | None = None,
) -> CollectionResult:
    """Run the fetch stage: concurrent fetch, sort, title dedup, freshness.

    Args:
        sources: Sources to fetch
        cfg: Fetch configuration
        now: Reference time for freshness (defaults to the current UTC time)
        logger: Optional logger for events

    Returns:
        CollectionResult with fresh items sorted newest first
    """
    now = now or datetime.now(timezone.utc)
    items, health = asyncio.run(fetch_all_sources(sources, cfg, now, logger))

    items = sort_by_published(items, now)
    deduplicated = dedup_titles(items)
    fresh = filter_fresh(deduplicated, cfg, now)

    log_event(
        logger,
        "Fresh filter",
        event="fresh_filter",
        total=len(deduplicated),
        fresh=len(fresh),
        dropped=len(deduplicated) - len(fresh),
    )
    return CollectionResult(items=fresh, health=health, total_before_filter=len(items))


def sort_by_published(items: list[RawItem], now: datetime) -> list[RawItem]:
    """Sort newest first; items without a date are treated as just published."""
    return sorted(items, key=lambda item: item.published_at or now, reverse=True)


def title_key(title: str) -> str:
    """Normalize a title for collision checks.

    Examples:
        >>> title_key("Bitcoin hits $100K!")
        'bitcoinhits100k'
    """
    return _TITLE_KEY_RE.sub("", title.lower())


def dedup_titles(items: list[RawItem]) -> list[RawItem]:
    """Keep only the first item for each normalized title."""
    seen: set[str] = set()
    kept: list[RawItem] = []
    for item in items:
        key = title_key(item.title)
        if key in seen:
            continue
        seen.add(key)
        kept.append(item)
    return kept


def freshness_window(cfg: FetchConfig, tier: int) -> timedelta:
    hours = cfg.freshness_hours_by_tier.get(tier, cfg.freshness_hours)
    return timedelta(hours=hours)


def is_fresh(item: RawItem, cfg: FetchConfig, now: datetime) -> bool:
    """Unknown and future timestamps count as fresh."""
    published = item.published_at
    if published is None or published > now:
        return True
    return published >= now - freshness_window(cfg, item.tier)


def filter_fresh(items: list[RawItem], cfg: FetchConfig, now: datetime) -> list[RawItem]:
    return [item for item in items if is_fresh(item, cfg, now)]
