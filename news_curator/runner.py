"""
Main pipeline orchestration for the News Curator.

This module coordinates one curation run:
1. Build the extraction provider (fails fast on missing credentials)
2. Fetch every source concurrently, sort, dedup titles, filter by freshness
3. Balance items across sources under the extraction budget
4. Extract candidate stories item by item, with a pause between calls
5. Merge candidates across sources
6. Score, select, and summarize the run

Progress is reported through an optional callback so the pipeline stays
usable without a terminal UI.
"""

from __future__ import annotations

from datetime import datetime, timezone
import logging
from pathlib import Path
import time
from typing import Callable

from .analyzers.story_extractor import StoryExtractor
from .config import AppConfig
from .core.aggregate import StoryAggregator
from .core.scoring import score_stories
from .core.selection import balance_items, build_run_stats, select_stories
from .core.sources import default_sources
from .core.types import CurationResult, ProgressEvent, RawItem, Source
from .fetch.collector import collect_items
from .fetch.resolver import ContentResolver, build_resolver
from .llm.providers.base import ExtractionProvider
from .llm.providers.factory import create_provider
from .llm.tracing import set_span_output, start_span
from .llm.usage import UsageMeter
from .utils.logging import log_event


ProgressCallback = Callable[[ProgressEvent], None]


def run_curation(
    cfg: AppConfig,
    sources: list[Source] | None = None,
    provider: ExtractionProvider | None = None,
    resolver: ContentResolver | None = None,
    on_progress: ProgressCallback | None = None,
    meter: UsageMeter | None = None,
    logger: logging.Logger | None = None,
    llm_logger: logging.Logger | None = None,
    now: datetime | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> CurationResult:
    """Run the complete curation pipeline.

    Args:
        cfg: Application configuration
        sources: Source registry (defaults to the built-in registry)
        provider: Extraction provider (built from ``cfg.provider`` if None)
        resolver: Content resolver (built from ``cfg.resolver`` if None and enabled)
        on_progress: Called on every stage transition
        meter: Receives a usage record after every provider call
        logger: Pipeline logger
        llm_logger: Logger for raw provider exchanges
        now: Reference time for freshness, balancing and recency
        sleep: Pause function used between provider calls

    Returns:
        CurationResult with ranked stories, run statistics and source health

    Raises:
        ValueError: If the provider cannot be configured (e.g. missing API key)
    """
    logger = logger or logging.getLogger("news_curator")
    # Provider construction validates credentials before any network activity.
    if provider is None:
        provider = create_provider(
            cfg.provider, cfg.extract, cfg.curation, cfg.logging, llm_logger
        )
    if resolver is None and cfg.resolver.enabled:
        resolver = build_resolver(cfg.resolver, cfg.fetch.reader_proxy_url, logger)

    sources = list(sources) if sources is not None else default_sources()
    now = now or datetime.now(timezone.utc)

    def report(stage: str, current: int, total: int, message: str = "") -> None:
        if on_progress is not None:
            on_progress(ProgressEvent(stage, current, total, message))

    with start_span(
        "news_curator.run",
        kind="chain",
        input_value={"sources": len(sources), "provider": cfg.provider.name},
        attributes={"llm.model": cfg.provider.model},
    ) as run_span:
        log_event(
            logger,
            "Pipeline start",
            event="pipeline_start",
            sources=len(sources),
            provider=cfg.provider.name,
            model=cfg.provider.model,
        )

        report("fetching", 0, len(sources), "Fetching sources...")
        with start_span(
            "news_curator.fetch",
            kind="retriever",
            input_value=[s.name for s in sources],
        ) as fetch_span:
            collection = collect_items(sources, cfg.fetch, now=now, logger=logger)
            set_span_output(
                fetch_span,
                {"items": len(collection.items), "failed": sum(1 for h in collection.health if not h.ok)},
            )

        selected = balance_items(collection.items, sources, cfg.selection, now=now)
        log_event(
            logger,
            "Balanced items",
            event="balance_selected",
            fresh=len(collection.items),
            selected=len(selected),
            limit=cfg.selection.total_limit,
        )

        aggregator = _extract_all(cfg, selected, provider, resolver, meter, logger, report, sleep)

        report("scoring", 0, len(aggregator), "Scoring stories...")
        scored = score_stories(aggregator.stories, cfg.scoring, now=now)
        ranked = select_stories(scored, cfg.selection.min_score_to_show)
        stats = build_run_stats(sources, collection.items, selected)

        log_event(
            logger,
            "Pipeline complete",
            event="pipeline_complete",
            stories=len(aggregator),
            shown=len(ranked),
            articles_found=stats.total_articles_found,
            articles_processed=stats.articles_processed,
        )
        set_span_output(run_span, {"stories": len(ranked), "stats": stats.to_dict()})
        report("done", len(ranked), len(ranked), f"{len(ranked)} stories selected")

    return CurationResult(stories=ranked, stats=stats, health=collection.health)


def _extract_all(
    cfg: AppConfig,
    items: list[RawItem],
    provider: ExtractionProvider,
    resolver: ContentResolver | None,
    meter: UsageMeter | None,
    logger: logging.Logger,
    report: Callable[..., None],
    sleep: Callable[[float], None],
) -> StoryAggregator:
    extractor = StoryExtractor(cfg.extract, provider, resolver, logger, meter)
    aggregator = StoryAggregator(cfg.dedup)
    total = len(items)
    for idx, item in enumerate(items):
        report("extracting", idx + 1, total, f"Analyzing [{item.source_name}] {item.title[:30]}...")
        for candidate in extractor.extract(item):
            aggregator.add(item, candidate)
        if idx < total - 1 and cfg.extract.request_delay_seconds > 0:
            sleep(cfg.extract.request_delay_seconds)
    return aggregator


def build_run_output_dir(output_dir: Path, now: datetime | None = None) -> Path:
    """Return a timestamped run folder under ``output_dir``."""
    stamp = (now or datetime.now()).strftime("%Y%m%d-%H%M%S")
    return output_dir / f"run-{stamp}"
