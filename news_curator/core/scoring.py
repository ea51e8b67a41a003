"""
Final score computation for aggregated stories.

The score is built in a fixed order because the tier weight multiplies
everything added before it:
1. Base score from extraction
2. Cross-source boost
3. Category boost
4. Recency boost
5. Tier weight multiplier (rounded to one decimal)
6. Clamp to the maximum score

Every applied step is appended to the story's ``boosts`` trace.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
import math

from ..config import ScoringConfig
from .types import AggregatedStory


def round_half_up(value: float, digits: int = 1) -> float:
    """Round half away from zero for non-negative scores.

    Examples:
        >>> round_half_up(14.25)
        14.3
    """
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def score_story(
    story: AggregatedStory,
    cfg: ScoringConfig,
    now: datetime | None = None,
) -> float:
    """Compute and store the final score of a single story.

    Clears the story's tier once it has been used for weighting.

    Args:
        story: The story to score (mutated in place)
        cfg: Boost tables and weights
        now: Reference time for the recency boost

    Returns:
        The final score
    """
    now = now or datetime.now(timezone.utc)
    score = float(story.base_score)
    boosts: list[str] = []

    if story.cross_source_count >= 3:
        score += cfg.cross_source_three_plus
        boosts.append(f"+{_fmt(cfg.cross_source_three_plus)} (3+ sources)")
    elif story.cross_source_count >= 2:
        score += cfg.cross_source_two
        boosts.append(f"+{_fmt(cfg.cross_source_two)} (2 sources)")

    category_boost = cfg.category_boost.get(story.category)
    if category_boost:
        score += category_boost
        boosts.append(f"+{_fmt(category_boost)} ({story.category})")

    if story.published_at is not None:
        age = now - story.published_at
        if age < timedelta(hours=cfg.recency_boost_hours):
            score += cfg.recency_boost
            boosts.append(f"+{_fmt(cfg.recency_boost)} (recent)")

    tier = story.tier if story.tier is not None else cfg.default_tier
    weight = cfg.tier_weight.get(tier, 1.0)
    if weight != 1.0:
        score = round_half_up(score * weight)
        boosts.append(f"x{_fmt(weight)} (tier {tier})")

    story.final_score = min(score, cfg.max_score)
    story.boosts = boosts
    story.tier = None
    return story.final_score


def score_stories(
    stories: list[AggregatedStory],
    cfg: ScoringConfig,
    now: datetime | None = None,
) -> list[AggregatedStory]:
    now = now or datetime.now(timezone.utc)
    for story in stories:
        score_story(story, cfg, now)
    return stories


def _fmt(value: float) -> str:
    return f"{value:g}"
