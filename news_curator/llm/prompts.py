"""Prompt loading and rendering helpers for extraction providers."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from ..config import CATEGORIES, CurationConfig, ExtractConfig
from ..core.types import RawItem


_PROMPT_DIR = Path(__file__).resolve().parent.parent / "prompts"


@lru_cache(maxsize=None)
def _load_template(name: str) -> str:
    path = _PROMPT_DIR / f"{name}.md"
    return path.read_text(encoding="utf-8").strip()


def _render_template(name: str, **values: str) -> str:
    template = _load_template(name)
    return template.format(**values)


def build_extraction_prompt(
    item: RawItem,
    content: str,
    extract_cfg: ExtractConfig,
    curation_cfg: CurationConfig,
) -> str:
    date = item.published_at.isoformat() if item.published_at else "unknown"
    return _render_template(
        "story_extraction",
        newsletter_name=curation_cfg.newsletter_name,
        audience=curation_cfg.audience,
        categories=", ".join(c for c in CATEGORIES if c != "other"),
        max_stories=str(extract_cfg.max_stories),
        source=item.source_name,
        title=item.title,
        date=date,
        content=content[: extract_cfg.max_chars],
    )
