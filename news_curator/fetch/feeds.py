"""
Protocol adapters that turn a source response into RawItems.

Two adapters are supported:
1. Syndication feeds: RSS 2.0 (<item>) and Atom (<entry>), parsed with feedparser
2. Reader-proxy listings: markdown-like pages where each entry starts with
   a "[title](url)" link line, used for community sites that block direct
   feed access from servers

Both adapters sanitize titles and text the same way and cap the number of
entries per source.
"""

from __future__ import annotations

import calendar
from datetime import datetime, timezone
import re
from typing import Any

from bs4 import BeautifulSoup
import feedparser

from ..core.types import RawItem, Source, generate_id


BLOCKED_MARKERS = ("<!DOCTYPE html>", "<html", "You've been blocked")
SUMMARY_MAX_CHARS = 500

LISTING_LINK_RE = re.compile(r"^\[(.+?)\]\((https://(?:www\.)?reddit\.com/r/[^)]+)\)")
_WHITESPACE_RE = re.compile(r"\s+")


def clean_text(text: str | None) -> str:
    """Strip markup, decode entities and collapse whitespace.

    Examples:
        >>> clean_text("<p>Bitcoin &amp; Ether&#8217;s   rally</p>")
        'Bitcoin & Ether’s rally'
    """
    if not text:
        return ""
    if "<" in text or "&" in text:
        text = BeautifulSoup(text, "html.parser").get_text(" ")
    return _WHITESPACE_RE.sub(" ", text).strip()


def is_blocked_response(text: str) -> bool:
    """Detect HTML error or block pages served in place of feed content."""
    return any(marker in text for marker in BLOCKED_MARKERS)


def uses_reader_listing(source: Source) -> bool:
    """Whether a source must be read through the reader proxy listing adapter."""
    return "reddit.com" in source.url or "/r/" in source.url


def listing_url(feed_url: str) -> str:
    """Turn a community feed URL into its HTML listing URL.

    Examples:
        >>> listing_url("https://www.reddit.com/r/Bitcoin/top/.rss?t=day")
        'https://www.reddit.com/r/Bitcoin/top/?t=day'
    """
    return feed_url.replace("/.rss", "/").replace(".rss", "")


def parse_feed(text: str, source: Source, max_items: int = 10) -> list[RawItem]:
    """Parse an RSS or Atom document into RawItems.

    Blocked responses produce an empty list. For each entry the longer of the
    full-content field and the description is used as body text.

    Args:
        text: Raw response body
        source: The Source the response belongs to
        max_items: Maximum entries to keep

    Returns:
        A list of RawItems in document order
    """
    if is_blocked_response(text):
        return []

    parsed = feedparser.parse(text)
    items: list[RawItem] = []
    for entry in parsed.entries[:max_items]:
        title = clean_text(entry.get("title")) or "Untitled"
        url = (entry.get("link") or "").strip()

        description = entry.get("summary") or ""
        full_content = _first_content_value(entry)
        best = full_content if len(full_content) > len(description) else description
        body = clean_text(best)

        items.append(
            RawItem(
                id=generate_id(title, url),
                title=title,
                url=url,
                source_name=source.name,
                published_at=_entry_datetime(entry),
                summary=body[:SUMMARY_MAX_CHARS],
                body_text=body,
                tier=source.tier,
                image_url=_entry_image(entry),
                author=(entry.get("author") or None),
            )
        )
    return items


def parse_reader_listing(
    text: str,
    source: Source,
    fetched_at: datetime,
    max_items: int = 10,
) -> list[RawItem]:
    """Parse a reader-proxy listing into RawItems.

    A line beginning with a ``[title](https://reddit.com/r/...)`` link starts
    a new entry; following non-blank lines are collected as its synopsis
    until the next link line. Listings carry no dates, so every item is
    stamped with the fetch time.
    """
    items: list[RawItem] = []
    title: str | None = None
    url: str | None = None
    synopsis: list[str] = []

    def flush() -> None:
        if not title or not url:
            return
        body = clean_text(" ".join(synopsis))
        clean_title = clean_text(title)
        items.append(
            RawItem(
                id=generate_id(clean_title, url),
                title=clean_title,
                url=url,
                source_name=source.name,
                published_at=fetched_at,
                summary=body[:SUMMARY_MAX_CHARS],
                body_text=body,
                tier=source.tier,
            )
        )

    for line in text.splitlines():
        match = LISTING_LINK_RE.match(line)
        if match:
            flush()
            title, url = match.group(1), match.group(2)
            synopsis = []
        elif title and line.strip():
            synopsis.append(line.strip())

    flush()
    return items[:max_items]


def _first_content_value(entry: Any) -> str:
    content = entry.get("content") or []
    for block in content:
        value = block.get("value") if isinstance(block, dict) else None
        if value:
            return value
    return ""


def _entry_datetime(entry: Any) -> datetime | None:
    for key in ("published_parsed", "updated_parsed"):
        parsed = entry.get(key)
        if parsed:
            return datetime.fromtimestamp(calendar.timegm(parsed), tz=timezone.utc)
    return None


def _entry_image(entry: Any) -> str | None:
    for media in entry.get("media_content") or []:
        if media.get("url"):
            return media["url"]
    for enclosure in entry.get("enclosures") or []:
        if enclosure.get("href"):
            return enclosure["href"]
    return None
