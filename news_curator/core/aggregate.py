"""
Cross-source story merging using headline word overlap.

Each incoming candidate is compared against every story collected so far.
Headlines are reduced to sets of significant words and compared with
Jaccard similarity:
1. Lowercase, drop punctuation, split number/unit tokens ("50bps" -> "50 bps")
2. Expand known abbreviations ("fed" -> "federal reserve")
3. Keep words longer than the minimum length

A candidate joins the most similar story above the threshold; otherwise it
starts a new story.
"""

from __future__ import annotations

from datetime import datetime
import re
import uuid

from ..config import DedupConfig
from .types import AggregatedStory, CandidateStory, RawItem


_NON_ALNUM_RE = re.compile(r"[^a-z0-9\s]")
_NUMBER_SUFFIX_RE = re.compile(r"(\d)([a-z])")


def headline_words(
    text: str,
    min_length: int = 3,
    expansions: dict[str, str] | None = None,
) -> set[str]:
    """Reduce a headline to its set of significant words.

    Examples:
        >>> sorted(headline_words("Fed cuts rates by 50bps", expansions={"fed": "federal reserve", "bps": "basis points"}))
        ['basis', 'cuts', 'federal', 'points', 'rates', 'reserve']
    """
    normalized = _NON_ALNUM_RE.sub("", text.lower())
    normalized = _NUMBER_SUFFIX_RE.sub(r"\1 \2", normalized)
    words: set[str] = set()
    for token in normalized.split():
        expanded = expansions.get(token, token) if expansions else token
        for word in expanded.split():
            if len(word) > min_length:
                words.add(word)
    return words


def jaccard_similarity(words1: set[str], words2: set[str]) -> float:
    """Intersection over union of two word sets; 0 when either is empty."""
    if not words1 or not words2:
        return 0.0
    return len(words1 & words2) / len(words1 | words2)


class StoryAggregator:
    """Accumulates candidate stories into merged AggregatedStories.

    Stories are kept in creation order, which is also the tie-break order
    when two stories are equally similar to a candidate.
    """

    def __init__(self, cfg: DedupConfig | None = None) -> None:
        self.cfg = cfg or DedupConfig()
        self._stories: dict[str, AggregatedStory] = {}
        self._words: dict[str, set[str]] = {}

    @property
    def stories(self) -> list[AggregatedStory]:
        return list(self._stories.values())

    def __len__(self) -> int:
        return len(self._stories)

    def similarity(self, headline1: str, headline2: str) -> float:
        return jaccard_similarity(self._words_for(headline1), self._words_for(headline2))

    def find_match(self, headline: str) -> AggregatedStory | None:
        """Return the story most similar to ``headline`` above the threshold."""
        words = self._words_for(headline)
        best: AggregatedStory | None = None
        best_similarity = self.cfg.similarity_threshold
        for story_id, story in self._stories.items():
            similarity = jaccard_similarity(words, self._words[story_id])
            # Strict comparison keeps the earliest story on ties.
            if similarity > best_similarity:
                best = story
                best_similarity = similarity
        return best

    def add(self, item: RawItem, candidate: CandidateStory) -> AggregatedStory:
        """Merge a candidate into an existing story or create a new one."""
        existing = self.find_match(candidate.headline)
        if existing is None:
            return self._create(item, candidate)
        self._merge(existing, item, candidate)
        return existing

    def _create(self, item: RawItem, candidate: CandidateStory) -> AggregatedStory:
        story = AggregatedStory(
            id=uuid.uuid4().hex[:12],
            headline=candidate.headline,
            summary=candidate.summary,
            category=candidate.category or "other",
            base_score=candidate.base_score,
            entities=list(candidate.entities),
            original_url=candidate.original_url,
            sources=[item.source_name],
            published_at=item.published_at,
            tier=item.tier,
        )
        self._stories[story.id] = story
        self._words[story.id] = self._words_for(story.headline)
        return story

    def _merge(self, story: AggregatedStory, item: RawItem, candidate: CandidateStory) -> None:
        story.add_source(item.source_name)
        story.published_at = _earliest(story.published_at, item.published_at)
        if candidate.base_score > story.base_score:
            story.base_score = candidate.base_score
            story.headline = candidate.headline
            story.summary = candidate.summary
            self._words[story.id] = self._words_for(story.headline)

    def _words_for(self, headline: str) -> set[str]:
        return headline_words(headline, self.cfg.min_word_length, self.cfg.expansions)


def _earliest(current: datetime | None, incoming: datetime | None) -> datetime | None:
    if current is None:
        return incoming
    if incoming is None:
        return current
    return min(current, incoming)
