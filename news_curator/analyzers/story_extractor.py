"""Story extractor: turns one fetched item into candidate stories."""

from __future__ import annotations

import logging
import math
from typing import Any

from ..config import CATEGORIES, ExtractConfig
from ..core.types import CandidateStory, RawItem
from ..fetch.resolver import ContentResolver
from ..llm.providers.base import ExtractionProvider, ExtractionResponse
from ..llm.usage import UsageMeter, UsageRecord
from ..utils.logging import log_event


DEFAULT_SCORE = 5
MIN_SCORE = 1
MAX_SCORE = 10


def passthrough_story(item: RawItem) -> CandidateStory:
    """Ungraded story built from the item itself."""
    return CandidateStory(
        headline=item.title,
        summary=item.summary or item.title,
        category="other",
        base_score=DEFAULT_SCORE,
        entities=[],
        original_url=item.url,
    )


class StoryExtractor:
    """Extract candidate stories from a single item.

    Sparse items are first resolved to full text. Items that stay too short,
    and items whose provider call fails, yield a single passthrough story.
    ``extract`` never raises.
    """

    def __init__(
        self,
        cfg: ExtractConfig,
        provider: ExtractionProvider,
        resolver: ContentResolver | None = None,
        logger: logging.Logger | None = None,
        meter: UsageMeter | None = None,
    ) -> None:
        self.cfg = cfg
        self.provider = provider
        self.resolver = resolver
        self.logger = logger
        self.meter = meter or UsageMeter()

    def extract(self, item: RawItem) -> list[CandidateStory]:
        content = self._content_for(item)
        if len(content) < self.cfg.min_content_chars:
            log_event(
                self.logger,
                "Content too short, passing through",
                event="extract_passthrough",
                reason="short_content",
                source=item.source_name,
                title=item.title,
                chars=len(content),
            )
            return [passthrough_story(item)]

        try:
            response = self.provider.extract_stories(item, content)
            self._record_usage(item, response)
        except Exception as exc:  # noqa: BLE001
            log_event(
                self.logger,
                "Extraction raised, passing through",
                severity=logging.WARNING,
                event="extract_passthrough",
                reason="unexpected_error",
                source=item.source_name,
                title=item.title,
                error=f"{type(exc).__name__}: {exc}",
            )
            return [passthrough_story(item)]
        if not response.ok:
            log_event(
                self.logger,
                "Extraction failed, passing through",
                event="extract_passthrough",
                reason=response.status,
                source=item.source_name,
                title=item.title,
            )
            return [passthrough_story(item)]

        stories = [
            normalize_story(raw, item)
            for raw in response.stories[: self.cfg.max_stories]
        ]
        log_event(
            self.logger,
            "Stories extracted",
            event="extract_complete",
            source=item.source_name,
            title=item.title,
            stories=len(stories),
        )
        return stories

    def _content_for(self, item: RawItem) -> str:
        content = item.body_text or item.summary or ""
        if (
            len(content) < self.cfg.resolve_below_chars
            and item.url
            and self.resolver is not None
        ):
            resolved = self.resolver.resolve(item.url)
            if resolved:
                content = resolved
        return content

    def _record_usage(self, item: RawItem, response: ExtractionResponse) -> None:
        record = UsageRecord.from_usage(
            model=response.model,
            status=response.status,
            usage=response.usage,
            description=f"Story extraction: {item.source_name}",
        )
        self.meter.record(record)


def normalize_story(raw: dict[str, Any], item: RawItem) -> CandidateStory:
    """Coerce one provider story object into a CandidateStory."""
    headline = _clean_str(raw.get("headline")) or item.title
    summary = _clean_str(raw.get("summary")) or item.summary or headline
    category = _clean_str(raw.get("category")).lower()
    if category not in CATEGORIES:
        category = "other"
    score = raw.get("baseScore", raw.get("base_score"))
    entities = raw.get("entities")
    if isinstance(entities, list):
        entities = [str(e).strip() for e in entities if str(e).strip()]
    else:
        entities = []
    original_url = _clean_str(raw.get("originalUrl") or raw.get("original_url")) or item.url
    return CandidateStory(
        headline=headline,
        summary=summary,
        category=category,
        base_score=_normalize_score(score),
        entities=entities,
        original_url=original_url,
    )


def _clean_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _normalize_score(value: Any) -> float:
    if isinstance(value, bool):
        return DEFAULT_SCORE
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return DEFAULT_SCORE
    if not isinstance(value, (int, float)) or math.isnan(value):
        return DEFAULT_SCORE
    if value < MIN_SCORE or value > MAX_SCORE:
        return DEFAULT_SCORE
    return value
