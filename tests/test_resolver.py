"""Tests for the full-text resolution strategy ladder."""

from __future__ import annotations

import pytest

from news_curator.config import ResolverConfig
from news_curator.fetch import resolver as resolver_mod
from news_curator.fetch.fetcher import FetchResult
from news_curator.fetch.resolver import (
    ContentResolver,
    DirectStrategy,
    ReaderProxyStrategy,
    build_resolver,
)


class _FakeStrategy:
    def __init__(self, name, result):  # noqa: ANN001
        self.name = name
        self.result = result
        self.calls: list[str] = []

    def resolve(self, url):  # noqa: ANN001
        self.calls.append(url)
        return self.result


ARTICLE_HTML = (
    "<html><body><nav>Home | About</nav><article>"
    + "<p>" + "Regulators approved the new stablecoin framework today. " * 20 + "</p>"
    + "</article><footer>Copyright</footer></body></html>"
)


def test_first_successful_strategy_wins():
    first = _FakeStrategy("direct", None)
    second = _FakeStrategy("reader_proxy", "resolved text")
    third = _FakeStrategy("other", "never used")

    text = ContentResolver([first, second, third]).resolve("https://example.com/a")

    assert text == "resolved text"
    assert first.calls == ["https://example.com/a"]
    assert third.calls == []


def test_all_strategies_failing_yields_empty_string():
    resolver = ContentResolver([_FakeStrategy("a", None), _FakeStrategy("b", "")])

    assert resolver.resolve("https://example.com/a") == ""


def test_resolved_text_is_truncated():
    resolver = ContentResolver([_FakeStrategy("a", "x" * 50)], max_chars=10)

    assert resolver.resolve("https://example.com/a") == "x" * 10


def test_direct_strategy_extracts_article(monkeypatch):
    monkeypatch.setattr(
        resolver_mod,
        "fetch_url",
        lambda url, **kwargs: FetchResult(url, 200, ARTICLE_HTML, None),
    )

    text = DirectStrategy(ResolverConfig()).resolve("https://example.com/a")

    assert text is not None
    assert text.startswith("Regulators approved")
    assert "Copyright" not in text


def test_direct_strategy_rejects_short_or_placeholder_pages(monkeypatch):
    pages = iter(
        [
            "<html><body><article>Too short</article></body></html>",
            "<html><body>Just a moment... Verifying you are human.</body></html>",
        ]
    )
    monkeypatch.setattr(
        resolver_mod,
        "fetch_url",
        lambda url, **kwargs: FetchResult(url, 200, next(pages), None),
    )
    strategy = DirectStrategy(ResolverConfig())

    assert strategy.resolve("https://example.com/short") is None
    assert strategy.resolve("https://example.com/challenge") is None


def test_direct_failure_falls_back_to_reader_proxy(monkeypatch):
    requested: list[str] = []

    def fake_fetch(url, **kwargs):  # noqa: ANN001
        requested.append(url)
        if url.startswith("https://r.jina.ai/"):
            return FetchResult(url, 200, "Proxy rendered article text", None)
        return FetchResult(url, 403, None, "HTTPStatusError: 403")

    monkeypatch.setattr(resolver_mod, "fetch_url", fake_fetch)
    resolver = build_resolver(ResolverConfig(), "https://r.jina.ai/{url}")

    text = resolver.resolve("https://example.com/a")

    assert text == "Proxy rendered article text"
    assert requested == ["https://example.com/a", "https://r.jina.ai/https://example.com/a"]


def test_strategies_pass_proxy_and_retry_settings(monkeypatch):
    calls: list[dict] = []

    def fake_fetch(url, **kwargs):  # noqa: ANN001
        calls.append(kwargs)
        return FetchResult(url, 500, None, "HTTPStatusError: 500")

    monkeypatch.setattr(resolver_mod, "fetch_url", fake_fetch)
    resolver = build_resolver(ResolverConfig(trust_env=False, retries=2), "https://r.jina.ai/{url}")

    assert resolver.resolve("https://example.com/a") == ""
    assert len(calls) == 2
    assert all(kwargs["trust_env"] is False for kwargs in calls)
    assert all(kwargs["retries"] == 2 for kwargs in calls)


def test_build_resolver_uses_configured_order():
    resolver = build_resolver(ResolverConfig(strategies=["reader_proxy", "direct"]), "https://p/{url}")

    assert isinstance(resolver.strategies[0], ReaderProxyStrategy)
    assert isinstance(resolver.strategies[1], DirectStrategy)


def test_build_resolver_rejects_unknown_strategy():
    with pytest.raises(ValueError, match="Unsupported resolver strategy"):
        build_resolver(ResolverConfig(strategies=["headless"]), "https://p/{url}")
