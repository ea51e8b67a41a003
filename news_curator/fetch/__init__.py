"""
Source fetching and content resolution.

This package handles HTTP fetching, feed and listing parsing,
freshness filtering and full-text resolution.
"""

from .collector import CollectionResult, collect_items, dedup_titles, filter_fresh
from .extractor import extract_text
from .feeds import clean_text, is_blocked_response, parse_feed, parse_reader_listing
from .fetcher import FetchResult, fetch_url, fetch_url_async
from .resolver import ContentResolver, build_resolver

__all__ = [
    "CollectionResult",
    "collect_items",
    "dedup_titles",
    "filter_fresh",
    "extract_text",
    "clean_text",
    "is_blocked_response",
    "parse_feed",
    "parse_reader_listing",
    "FetchResult",
    "fetch_url",
    "fetch_url_async",
    "ContentResolver",
    "build_resolver",
]
