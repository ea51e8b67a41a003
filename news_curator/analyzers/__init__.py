"""Per-item story extraction."""

from .story_extractor import StoryExtractor, normalize_story, passthrough_story

__all__ = ["StoryExtractor", "normalize_story", "passthrough_story"]
