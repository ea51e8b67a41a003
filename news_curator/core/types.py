"""
Core data types for the News Curator.

This module defines the fundamental data structures used throughout the pipeline:
- Source: A configured content source with its priority tier
- RawItem: A normalized entry fetched from a source
- CandidateStory: A single-source story produced by the extraction provider
- AggregatedStory: A cross-source merged story carrying its score trace
- SourceHealth / SourceBreakdown / RunStats: Observability records
- ProgressEvent: A stage transition reported to the caller
- CurationResult: The ranked stories and run statistics of one run
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
import hashlib
from typing import Any


def generate_id(title: str, url: str) -> str:
    """Return a stable identifier for an item derived from its title and URL.

    Examples:
        >>> generate_id("BTC hits 100k", "https://x/y") == generate_id("BTC hits 100k", "https://x/y")
        True
    """
    digest = hashlib.sha256(f"{title}-{url}".encode("utf-8")).hexdigest()
    return digest[:16]


@dataclass(frozen=True)
class Source:
    """A content source.

    Attributes:
        name: Unique display name (e.g., "CoinDesk", "r/Bitcoin")
        url: Feed or listing URL
        category: Source kind tag ("newsletter", "news", "blog", "social")
        tier: Priority class; 0=realtime-social, 1=digest, 2=single-story news,
            3=primary blog, 4=community
    """
    name: str
    url: str
    category: str = "news"
    tier: int = 2


@dataclass
class RawItem:
    """A normalized entry fetched from a source.

    Attributes:
        id: Stable hash of title and URL
        title: Sanitized headline
        url: Link to the original entry
        source_name: Name of the Source this item came from
        published_at: Publish time (timezone-aware), or None if missing/unparseable
        summary: Sanitized short description, at most 500 characters
        body_text: Longer sanitized text when the feed ships full content
        tier: Tier inherited from the Source
        image_url: Media or enclosure URL if present
        author: Author or creator if present
    """
    id: str
    title: str
    url: str
    source_name: str
    published_at: datetime | None = None
    summary: str = ""
    body_text: str = ""
    tier: int = 2
    image_url: str | None = None
    author: str | None = None


@dataclass
class CandidateStory:
    """A story extracted from a single RawItem, before merging."""
    headline: str
    summary: str
    category: str = "other"
    base_score: float = 5
    entities: list[str] = field(default_factory=list)
    original_url: str | None = None


@dataclass
class AggregatedStory:
    """A deduplicated story confirmed by one or more sources.

    ``sources`` keeps insertion order with no repeats; the cross-source count
    is derived from it so the two can never disagree. ``tier`` is only needed
    by the scorer and is cleared once the final score is computed.

    Attributes:
        id: Generated identifier
        headline: Display headline (from the highest-scored candidate)
        summary: Display summary (from the highest-scored candidate)
        category: Story category
        base_score: Highest base score among merged candidates
        final_score: Score after boosts, weighting and clamping
        entities: Named entities from the first candidate
        original_url: Source URL from the first candidate
        sources: Names of contributing sources
        published_at: Earliest known publish time of contributing items
        boosts: Human-readable trace of score adjustments, in order applied
        tier: Tier of the originating item, or None after scoring
    """
    id: str
    headline: str
    summary: str
    category: str
    base_score: float
    final_score: float = 0.0
    entities: list[str] = field(default_factory=list)
    original_url: str | None = None
    sources: list[str] = field(default_factory=list)
    published_at: datetime | None = None
    boosts: list[str] = field(default_factory=list)
    tier: int | None = None

    @property
    def cross_source_count(self) -> int:
        return len(self.sources)

    def add_source(self, source_name: str) -> bool:
        """Record a contributing source. Returns False if it was already known."""
        if source_name in self.sources:
            return False
        self.sources.append(source_name)
        return True

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "headline": self.headline,
            "summary": self.summary,
            "category": self.category,
            "base_score": self.base_score,
            "final_score": self.final_score,
            "entities": list(self.entities),
            "original_url": self.original_url,
            "sources": list(self.sources),
            "published_at": self.published_at.isoformat() if self.published_at else None,
            "cross_source_count": self.cross_source_count,
            "boosts": list(self.boosts),
        }


@dataclass
class SourceHealth:
    """Outcome of fetching one source.

    Attributes:
        source_name: Name of the source
        count: Number of items parsed from the response
        error: Error message when the fetch failed, None otherwise
    """
    source_name: str
    count: int
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.count > 0


@dataclass
class SourceBreakdown:
    source_name: str
    found: int = 0
    kept: int = 0


@dataclass
class RunStats:
    """Aggregate statistics of one curation run."""
    sources_analyzed: int
    total_articles_found: int
    articles_processed: int
    breakdown: list[SourceBreakdown] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "sources_analyzed": self.sources_analyzed,
            "total_articles_found": self.total_articles_found,
            "articles_processed": self.articles_processed,
            "breakdown": [
                {"source_name": b.source_name, "found": b.found, "kept": b.kept}
                for b in self.breakdown
            ],
        }


@dataclass
class ProgressEvent:
    """A pipeline stage transition.

    Attributes:
        stage: "fetching", "extracting", "scoring" or "done"
        current: Items completed in this stage
        total: Items in this stage
        message: Human-readable description
    """
    stage: str
    current: int
    total: int
    message: str = ""


@dataclass
class CurationResult:
    stories: list[AggregatedStory]
    stats: RunStats
    health: list[SourceHealth] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "count": len(self.stories),
            "stories": [s.to_dict() for s in self.stories],
            "stats": self.stats.to_dict(),
            "health": [
                {"source_name": h.source_name, "count": h.count, "ok": h.ok, "error": h.error}
                for h in self.health
            ],
        }
