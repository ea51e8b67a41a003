"""Tests for cross-source story merging."""

from __future__ import annotations

from datetime import datetime, timezone

from news_curator.config import DedupConfig
from news_curator.core.aggregate import StoryAggregator, headline_words, jaccard_similarity
from news_curator.core.types import CandidateStory, RawItem


def _item(source: str, tier: int = 2, hour: int = 10) -> RawItem:
    return RawItem(
        id=f"{source}-{hour}",
        title="t",
        url=f"https://{source.lower()}.example/{hour}",
        source_name=source,
        published_at=datetime(2025, 1, 6, hour, 0, tzinfo=timezone.utc),
        tier=tier,
    )


def _candidate(headline: str, score: float = 5, summary: str = "s") -> CandidateStory:
    return CandidateStory(headline=headline, summary=summary, category="regulation", base_score=score)


def test_headline_words_drops_short_words_and_punctuation():
    words = headline_words("SEC sues Binance, CEO says: 'no comment'", min_length=3)

    assert words == {"sues", "binance", "says", "comment"}


def test_jaccard_similarity_bounds():
    assert jaccard_similarity(set(), {"a"}) == 0.0
    assert jaccard_similarity({"bitcoin"}, {"bitcoin"}) == 1.0


def test_fed_rate_cut_headlines_merge():
    aggregator = StoryAggregator(DedupConfig())

    aggregator.add(_item("CoinDesk"), _candidate("Fed cuts rates by 50bps"))
    aggregator.add(_item("Decrypt"), _candidate("Federal Reserve cuts interest rates 50 basis points"))

    assert len(aggregator) == 1
    story = aggregator.stories[0]
    assert story.sources == ["CoinDesk", "Decrypt"]
    assert story.cross_source_count == 2


def test_distinct_headlines_stay_separate():
    aggregator = StoryAggregator()

    aggregator.add(_item("CoinDesk"), _candidate("Ethereum upgrade goes live on mainnet"))
    aggregator.add(_item("Decrypt"), _candidate("Solana validators vote on fee changes"))

    assert len(aggregator) == 2


def test_same_source_twice_counts_once():
    aggregator = StoryAggregator()

    aggregator.add(_item("CoinDesk", hour=9), _candidate("Bitcoin breaks record high above 100k"))
    aggregator.add(_item("CoinDesk", hour=11), _candidate("Bitcoin breaks record high above 100k today"))

    story = aggregator.stories[0]
    assert story.sources == ["CoinDesk"]
    assert story.cross_source_count == 1


def test_merge_keeps_highest_score_headline_and_earliest_time():
    aggregator = StoryAggregator()

    aggregator.add(_item("A", hour=10), _candidate("Bitcoin breaks record high above 100k", 6, "first"))
    aggregator.add(_item("B", hour=8), _candidate("Bitcoin breaks record high above 100k again", 8, "second"))
    aggregator.add(_item("C", hour=12), _candidate("Bitcoin breaks record high above 100k", 7, "third"))

    story = aggregator.stories[0]
    assert story.base_score == 8
    assert story.headline == "Bitcoin breaks record high above 100k again"
    assert story.summary == "second"
    assert story.published_at == datetime(2025, 1, 6, 8, 0, tzinfo=timezone.utc)
    assert story.cross_source_count == 3


def test_equal_score_does_not_replace_headline():
    aggregator = StoryAggregator()

    aggregator.add(_item("A"), _candidate("Bitcoin breaks record high above 100k", 6, "first"))
    aggregator.add(_item("B"), _candidate("Bitcoin breaks record high above 100k", 6, "second"))

    assert aggregator.stories[0].summary == "first"


def test_tie_goes_to_earliest_created_story():
    aggregator = StoryAggregator(DedupConfig(similarity_threshold=0.4, expansions={}))

    first = aggregator.add(_item("A"), _candidate("alpha bravo charlie delta"))
    second = aggregator.add(_item("B"), _candidate("alpha bravo echo foxtrot"))
    assert first is not second

    # Equally similar (0.6) to both stories.
    merged = aggregator.add(_item("C"), _candidate("alpha bravo charlie echo"))

    assert merged is first
    assert first.sources == ["A", "C"]
    assert second.sources == ["B"]


def test_new_story_records_origin_tier():
    aggregator = StoryAggregator()

    story = aggregator.add(_item("Milk Road", tier=1), _candidate("Stablecoin bill passes senate vote"))

    assert story.tier == 1
    assert story.sources == ["Milk Road"]
