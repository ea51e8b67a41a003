"""
Full-text resolution for sparse items.

The resolver walks an ordered list of strategies. Each strategy returns the
resolved text or None; the first non-None result wins. The resolver never
raises: when every strategy gives up the caller gets an empty string.
"""

from __future__ import annotations

import logging
from typing import Protocol

from ..config import ResolverConfig
from ..utils.logging import log_event
from .extractor import extract_text, is_placeholder_text
from .fetcher import fetch_url, reader_proxy_url


class ResolveStrategy(Protocol):
    name: str

    def resolve(self, url: str) -> str | None:
        ...


class DirectStrategy:
    """Fetch the page and extract the article body locally."""

    name = "direct"

    def __init__(self, cfg: ResolverConfig, logger: logging.Logger | None = None) -> None:
        self.cfg = cfg
        self.logger = logger

    def resolve(self, url: str) -> str | None:
        result = fetch_url(
            url,
            timeout=self.cfg.timeout_seconds,
            retries=self.cfg.retries,
            user_agent=self.cfg.user_agent,
            trust_env=self.cfg.trust_env,
            headers={"Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"},
        )
        if not result.ok:
            log_event(
                self.logger,
                "Direct fetch failed",
                event="resolve_direct_failed",
                url=url,
                status_code=result.status_code,
                error=result.error,
            )
            return None

        try:
            text = extract_text(result.text or "", self.cfg.extractors)
        except Exception as exc:  # noqa: BLE001
            log_event(
                self.logger,
                "Direct extraction failed",
                event="resolve_direct_failed",
                url=url,
                error=f"{type(exc).__name__}: {exc}",
            )
            return None

        if not text or is_placeholder_text(text):
            return None
        if len(text) <= self.cfg.min_direct_chars:
            log_event(
                self.logger,
                "Direct extraction too short",
                event="resolve_direct_short",
                url=url,
                length=len(text),
            )
            return None
        return text


class ReaderProxyStrategy:
    """Ask a third-party reader service to render and return the article text."""

    name = "reader_proxy"

    def __init__(
        self,
        cfg: ResolverConfig,
        proxy_template: str,
        logger: logging.Logger | None = None,
    ) -> None:
        self.cfg = cfg
        self.proxy_template = proxy_template
        self.logger = logger

    def resolve(self, url: str) -> str | None:
        result = fetch_url(
            reader_proxy_url(self.proxy_template, url),
            timeout=self.cfg.timeout_seconds,
            retries=self.cfg.retries,
            trust_env=self.cfg.trust_env,
            headers={"X-With-Generated-Alt": "true"},
        )
        if not result.ok:
            log_event(
                self.logger,
                "Reader proxy failed",
                event="resolve_proxy_failed",
                url=url,
                status_code=result.status_code,
                error=result.error,
            )
            return None
        text = (result.text or "").strip()
        return text or None


class ContentResolver:
    """Resolve a URL to plain text by trying strategies in order."""

    def __init__(
        self,
        strategies: list[ResolveStrategy],
        max_chars: int = 15000,
        logger: logging.Logger | None = None,
    ) -> None:
        self.strategies = strategies
        self.max_chars = max_chars
        self.logger = logger

    def resolve(self, url: str) -> str:
        if not url:
            return ""
        for strategy in self.strategies:
            text = strategy.resolve(url)
            if text:
                log_event(
                    self.logger,
                    "Content resolved",
                    event="resolve_ok",
                    url=url,
                    method=strategy.name,
                    length=len(text),
                )
                return text[: self.max_chars]
        log_event(self.logger, "Content unresolved", event="resolve_empty", url=url)
        return ""


def build_resolver(
    cfg: ResolverConfig,
    proxy_template: str,
    logger: logging.Logger | None = None,
) -> ContentResolver:
    """Build a resolver from the configured strategy names.

    Raises:
        ValueError: If a strategy name is not recognized
    """
    strategies: list[ResolveStrategy] = []
    for name in cfg.strategies:
        if name == "direct":
            strategies.append(DirectStrategy(cfg, logger))
        elif name == "reader_proxy":
            strategies.append(ReaderProxyStrategy(cfg, proxy_template, logger))
        else:
            raise ValueError(f"Unsupported resolver strategy: {name}")
    return ContentResolver(strategies, max_chars=cfg.max_chars, logger=logger)
