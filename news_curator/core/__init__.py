"""
Core domain models and business logic.

This package contains data types and the curation algorithms that are
independent of any transport or provider.
"""

from .aggregate import StoryAggregator, headline_words, jaccard_similarity
from .scoring import score_stories, score_story
from .selection import balance_items, build_run_stats, select_stories
from .sources import default_sources, load_sources, merge_sources
from .types import (
    AggregatedStory,
    CandidateStory,
    CurationResult,
    ProgressEvent,
    RawItem,
    RunStats,
    Source,
    SourceBreakdown,
    SourceHealth,
    generate_id,
)

__all__ = [
    "AggregatedStory",
    "CandidateStory",
    "CurationResult",
    "ProgressEvent",
    "RawItem",
    "RunStats",
    "Source",
    "SourceBreakdown",
    "SourceHealth",
    "generate_id",
    "StoryAggregator",
    "headline_words",
    "jaccard_similarity",
    "score_stories",
    "score_story",
    "balance_items",
    "build_run_stats",
    "select_stories",
    "default_sources",
    "load_sources",
    "merge_sources",
]
