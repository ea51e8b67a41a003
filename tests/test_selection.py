"""Tests for source balancing, threshold selection and run statistics."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from news_curator.config import SelectionConfig
from news_curator.core.selection import balance_items, build_run_stats, select_stories
from news_curator.core.types import AggregatedStory, RawItem, Source


NOW = datetime(2025, 1, 6, 12, 0, tzinfo=timezone.utc)


def _story(story_id: str, score: float) -> AggregatedStory:
    return AggregatedStory(
        id=story_id, headline=story_id, summary="", category="other", base_score=5, final_score=score
    )


def _items(source: Source, count: int, start_hour: float = 1.0) -> list[RawItem]:
    return [
        RawItem(
            id=f"{source.name}-{i}",
            title=f"{source.name} {i}",
            url=f"https://{source.name.lower()}.example/{i}",
            source_name=source.name,
            published_at=NOW - timedelta(hours=start_hour + i),
            tier=source.tier,
        )
        for i in range(count)
    ]


def test_threshold_excludes_below_and_includes_equal():
    stories = [_story("low", 5.9), _story("edge", 6.0), _story("high", 9.1)]

    selected = select_stories(stories, 6)

    assert [s.id for s in selected] == ["high", "edge"]


def test_selection_is_idempotent_and_stable():
    stories = [_story("a", 7), _story("b", 8), _story("c", 7), _story("d", 3)]

    once = select_stories(stories, 6)
    twice = select_stories(once, 6)

    assert [s.id for s in once] == ["b", "a", "c"]
    assert [s.id for s in twice] == [s.id for s in once]


def test_priority_tier_sources_are_drained_first():
    digest = Source("Digest", "https://d/feed", "newsletter", 1)
    news = Source("News", "https://n/feed", "news", 2)
    blog = Source("Blog", "https://b/feed", "blog", 3)
    items = _items(news, 4, start_hour=0.5) + _items(digest, 7, start_hour=3) + _items(blog, 3, 1)

    selected = balance_items(items, [digest, news, blog], SelectionConfig(), now=NOW)

    assert [i.source_name for i in selected[:5]] == ["Digest"] * 5
    rest = selected[5:]
    assert len(rest) == 4
    assert {i.source_name for i in rest} == {"News", "Blog"}
    times = [i.published_at for i in rest]
    assert times == sorted(times, reverse=True)


def test_balancing_respects_total_limit_and_unique_urls():
    sources = [Source(f"S{i}", f"https://s{i}/feed", "news", 2) for i in range(5)]
    items = [item for source in sources for item in _items(source, 3)]
    duplicate = RawItem(
        id="dup",
        title="dup",
        url=items[0].url,
        source_name="S1",
        published_at=NOW,
        tier=2,
    )

    selected = balance_items(items + [duplicate], sources, SelectionConfig(total_limit=5), now=NOW)

    assert len(selected) == 5
    assert len({i.url for i in selected}) == 5


def test_quota_takes_most_recent_items_per_source():
    source = Source("News", "https://n/feed", "news", 2)
    items = _items(source, 5)

    selected = balance_items(list(reversed(items)), [source], SelectionConfig(), now=NOW)

    assert [i.id for i in selected] == ["News-0", "News-1"]


def test_run_stats_breakdown_sorted_by_kept():
    a = Source("A", "https://a/feed")
    b = Source("B", "https://b/feed")
    c = Source("C", "https://c/feed")
    found = _items(a, 3) + _items(b, 4)
    processed = found[:1] + found[3:6]

    stats = build_run_stats([a, b, c], found, processed)

    assert stats.sources_analyzed == 3
    assert stats.total_articles_found == 7
    assert stats.articles_processed == 4
    assert [(r.source_name, r.found, r.kept) for r in stats.breakdown] == [
        ("B", 4, 3),
        ("A", 3, 1),
        ("C", 0, 0),
    ]
    assert stats.to_dict()["breakdown"][0] == {"source_name": "B", "found": 4, "kept": 3}
