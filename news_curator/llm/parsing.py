"""Defensive parsing of provider responses into lists of story objects."""

from __future__ import annotations

import json
import re
from typing import Any


_FENCE_RE = re.compile(r"```(?:json)?\s*\n?", re.IGNORECASE)


def strip_code_fences(content: str) -> str:
    """Remove markdown code fence markers around a JSON payload.

    Examples:
        >>> strip_code_fences('```json\\n[1, 2]\\n```')
        '[1, 2]'
    """
    return _FENCE_RE.sub("", content).strip()


def parse_story_list(content: str) -> list[dict[str, Any]]:
    """Decode a provider response into a list of story dicts.

    Accepts a bare JSON array, an object with a ``stories`` array, or either
    wrapped in code fences or surrounded by stray prose.

    Raises:
        json.JSONDecodeError: If no JSON list of stories can be decoded
    """
    if not content or not content.strip():
        raise json.JSONDecodeError("Empty content", content or "", 0)

    cleaned = strip_code_fences(content)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError:
        data = json.loads(_extract_array_snippet(cleaned))

    if isinstance(data, dict) and isinstance(data.get("stories"), list):
        data = data["stories"]
    if not isinstance(data, list):
        raise json.JSONDecodeError("Expected a JSON array of stories", cleaned, 0)
    return [entry for entry in data if isinstance(entry, dict)]


def _extract_array_snippet(content: str) -> str:
    start = content.find("[")
    end = content.rfind("]")
    if start == -1 or end == -1 or end <= start:
        raise json.JSONDecodeError("No JSON array found", content, 0)
    return content[start : end + 1]
