"""Tests for final score computation."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from news_curator.config import ScoringConfig
from news_curator.core.scoring import round_half_up, score_stories, score_story
from news_curator.core.types import AggregatedStory


NOW = datetime(2025, 1, 6, 12, 0, tzinfo=timezone.utc)


def _story(
    base: float = 5,
    sources: int = 1,
    category: str = "other",
    hours_old: float | None = 24,
    tier: int | None = 2,
) -> AggregatedStory:
    return AggregatedStory(
        id="s1",
        headline="h",
        summary="s",
        category=category,
        base_score=base,
        sources=[f"source-{i}" for i in range(sources)],
        published_at=None if hours_old is None else NOW - timedelta(hours=hours_old),
        tier=tier,
    )


def test_worked_example_clamps_to_ten():
    story = _story(base=6, sources=3, category="security_breach", hours_old=1, tier=1)

    score = score_story(story, ScoringConfig(), NOW)

    assert score == 10
    assert story.final_score == 10
    assert story.boosts == [
        "+2 (3+ sources)",
        "+2 (security_breach)",
        "+1 (recent)",
        "x1.3 (tier 1)",
    ]
    assert story.tier is None


def test_two_sources_and_category_boost():
    story = _story(base=5, sources=2, category="regulation", tier=0)

    score_story(story, ScoringConfig(), NOW)

    assert story.final_score == 7
    assert story.boosts == ["+1 (2 sources)", "+1 (regulation)"]


def test_tier_weight_rounds_half_up_to_one_decimal():
    # 7 * 0.8 = 5.6; 5.5 * 1.1 = 6.05 -> 6.1
    news = _story(base=7, tier=2)
    blog = _story(base=5.5, tier=3)

    score_story(news, ScoringConfig(), NOW)
    score_story(blog, ScoringConfig(), NOW)

    assert news.final_score == pytest.approx(5.6)
    assert news.boosts == ["x0.8 (tier 2)"]
    assert blog.final_score == pytest.approx(6.1)


def test_unit_weight_leaves_no_trace():
    story = _story(base=5, tier=0)

    score_story(story, ScoringConfig(), NOW)

    assert story.final_score == 5
    assert story.boosts == []


def test_missing_publish_time_gets_no_recency_boost():
    story = _story(base=5, hours_old=None, tier=0)

    score_story(story, ScoringConfig(), NOW)

    assert story.boosts == []


def test_recency_boundary_is_exclusive():
    fresh = _story(base=5, hours_old=11.9, tier=0)
    stale = _story(base=5, hours_old=12, tier=0)

    score_story(fresh, ScoringConfig(), NOW)
    score_story(stale, ScoringConfig(), NOW)

    assert fresh.final_score == 6
    assert stale.final_score == 5


def test_unknown_tier_uses_default_tier_weight():
    story = _story(base=5, tier=None)

    score_story(story, ScoringConfig(), NOW)

    assert story.boosts == ["x0.8 (tier 2)"]


def test_scores_stay_within_bounds():
    cfg = ScoringConfig()
    stories = [
        _story(base=base, sources=sources, category=category, hours_old=hours, tier=tier)
        for base in (1, 5, 10)
        for sources in (1, 2, 5)
        for category in ("other", "security_breach")
        for hours in (1, None)
        for tier in (0, 1, 2, 3, 4, None)
    ]

    score_stories(stories, cfg, NOW)

    assert all(0 <= s.final_score <= 10 for s in stories)
    assert all(s.tier is None for s in stories)


def test_custom_tables_are_honored():
    cfg = ScoringConfig(category_boost={"nft_news": 3}, tier_weight={2: 1.0})
    story = _story(base=4, category="nft_news", tier=2)

    score_story(story, cfg, NOW)

    assert story.final_score == 7
    assert story.boosts == ["+3 (nft_news)"]


def test_round_half_up():
    assert round_half_up(14.25) == pytest.approx(14.3)
    assert round_half_up(5.64) == pytest.approx(5.6)
