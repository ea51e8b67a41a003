"""
Source balancing before extraction and selection after scoring.

Balancing decides which fetched items are worth an extraction call:
priority-tier sources (digests) are drained first, then every other source
gets a small quota until the budget runs out. Selection filters scored
stories by threshold and ranks them.
"""

from __future__ import annotations

from datetime import datetime, timezone

from ..config import SelectionConfig
from .types import AggregatedStory, RawItem, RunStats, Source, SourceBreakdown


def balance_items(
    items: list[RawItem],
    sources: list[Source],
    cfg: SelectionConfig,
    now: datetime | None = None,
) -> list[RawItem]:
    """Pick items for extraction under the configured budget.

    Args:
        items: Fresh items from the fetch stage
        sources: Registry order used to visit sources
        cfg: Budget and quotas
        now: Stand-in publish time for undated items

    Returns:
        Selected items, priority tier first, then newest first
    """
    now = now or datetime.now(timezone.utc)

    def newest_first(batch: list[RawItem]) -> list[RawItem]:
        return sorted(batch, key=lambda item: item.published_at or now, reverse=True)

    by_source: dict[str, list[RawItem]] = {}
    for item in items:
        by_source.setdefault(item.source_name, []).append(item)

    # Sources with items but no registry entry are visited after registered ones.
    ordered_names = [s.name for s in sources if s.name in by_source]
    ordered_names += [name for name in by_source if name not in ordered_names]

    selected: list[RawItem] = []
    seen_urls: set[str] = set()

    def take(batch: list[RawItem]) -> None:
        for item in batch:
            if len(selected) >= cfg.total_limit:
                return
            if item.url in seen_urls:
                continue
            selected.append(item)
            seen_urls.add(item.url)

    for name in ordered_names:
        batch = by_source[name]
        if batch[0].tier != cfg.priority_tier:
            continue
        take(newest_first(batch)[: cfg.priority_per_source])

    for name in ordered_names:
        batch = by_source[name]
        if batch[0].tier == cfg.priority_tier:
            continue
        if len(selected) >= cfg.total_limit:
            break
        take(newest_first(batch)[: cfg.quota_per_source])

    priority = [item for item in selected if item.tier == cfg.priority_tier]
    rest = newest_first([item for item in selected if item.tier != cfg.priority_tier])
    return priority + rest


def select_stories(stories: list[AggregatedStory], min_score: float) -> list[AggregatedStory]:
    """Keep stories at or above ``min_score``, highest score first."""
    kept = [story for story in stories if story.final_score >= min_score]
    return sorted(kept, key=lambda story: story.final_score, reverse=True)


def build_run_stats(
    sources: list[Source],
    found: list[RawItem],
    processed: list[RawItem],
) -> RunStats:
    """Summarize a run with a per-source found/kept breakdown."""
    breakdown: dict[str, SourceBreakdown] = {
        source.name: SourceBreakdown(source.name) for source in sources
    }
    for item in found:
        if item.source_name in breakdown:
            breakdown[item.source_name].found += 1
    for item in processed:
        if item.source_name in breakdown:
            breakdown[item.source_name].kept += 1

    return RunStats(
        sources_analyzed=len(sources),
        total_articles_found=len(found),
        articles_processed=len(processed),
        breakdown=sorted(breakdown.values(), key=lambda b: b.kept, reverse=True),
    )
