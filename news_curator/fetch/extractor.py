"""
HTML content extraction with multiple fallback strategies.

This module provides a chain of extraction methods:
1. selectors: BeautifulSoup over semantic article containers (default)
2. trafilatura: Purpose-built main-content extraction
3. readability: Mozilla's readability algorithm
4. body: Whole-page text with navigation noise removed (last resort)
"""

from __future__ import annotations

import re
from typing import Callable

from bs4 import BeautifulSoup
import trafilatura
from readability import Document


CONTENT_SELECTORS = (
    "article",
    '[role="main"]',
    ".post-content",
    ".article-body",
    ".entry-content",
    "main",
)
NOISE_TAGS = ["script", "style", "noscript", "nav", "footer", "iframe", "form"]

# Below this a semantic container is assumed to be a teaser, not the article.
MIN_CONTAINER_CHARS = 500

_WHITESPACE_RE = re.compile(r"\s+")


def extract_text(html: str, order: list[str]) -> str | None:
    """Extract plain text from HTML using a chain of extractors.

    Tries each extraction method in order until one produces non-empty
    output.

    Args:
        html: The HTML content to extract text from
        order: Extraction method names to try, in order

    Returns:
        Extracted plain text with whitespace collapsed, or None if all
        methods fail

    Examples:
        >>> extract_text(html, ["selectors", "trafilatura", "body"])
        "Article content here..."
    """
    for method in order:
        extractor = _get_extractor(method)
        if not extractor:
            continue
        text = extractor(html)
        if text:
            return _WHITESPACE_RE.sub(" ", text).strip()
    return None


def is_placeholder_text(text: str) -> bool:
    """Detect JavaScript walls and bot-challenge pages.

    Args:
        text: The extracted text to validate

    Returns:
        True if text appears to be placeholder content
    """
    lowered = text.lower()
    if "javascript is disabled" in lowered or "please enable javascript" in lowered:
        return True
    if "enable javascript to continue" in lowered:
        return True
    if "verifying you are human" in lowered:
        return True
    if "just a moment..." in lowered:
        return True
    if "checking your browser before accessing" in lowered:
        return True
    # Legitimate pages behind Cloudflare mention the ray id too, but are long.
    return "ray id:" in lowered and len(text.strip()) < 1000


def _get_extractor(name: str) -> Callable[[str], str | None] | None:
    if name == "selectors":
        return _extract_selectors
    if name == "trafilatura":
        return _extract_trafilatura
    if name == "readability":
        return _extract_readability
    if name == "body":
        return _extract_body
    return None


def _clean_soup(html: str) -> BeautifulSoup:
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(NOISE_TAGS):
        tag.decompose()
    return soup


def _extract_selectors(html: str) -> str | None:
    """Return the text of the first semantic content container found."""
    soup = _clean_soup(html)
    for selector in CONTENT_SELECTORS:
        element = soup.select_one(selector)
        if element is None:
            continue
        text = element.get_text(separator=" ").strip()
        if len(text) >= MIN_CONTAINER_CHARS:
            return text
        return None
    return None


def _extract_trafilatura(html: str) -> str | None:
    return trafilatura.extract(html)


def _extract_readability(html: str) -> str | None:
    doc = Document(html)
    return _extract_body(doc.summary())


def _extract_body(html: str) -> str | None:
    soup = _clean_soup(html)
    root = soup.body or soup
    text = root.get_text(separator=" ").strip()
    return text or None
