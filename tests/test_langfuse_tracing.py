"""Tests for Langfuse tracing setup behavior."""

from __future__ import annotations

import sys
import types

from news_curator.config import LangfuseConfig
from news_curator.llm import tracing


def test_setup_langfuse_passes_env_credentials(monkeypatch):
    captured: dict = {}

    class DummyLangfuse:
        def __init__(self, **kwargs):
            captured.update(kwargs)

    fake_module = types.SimpleNamespace(Langfuse=DummyLangfuse)
    monkeypatch.setitem(sys.modules, "langfuse", fake_module)
    monkeypatch.setenv("LANGFUSE_PUBLIC_KEY", "pk-test")
    monkeypatch.setenv("LANGFUSE_SECRET_KEY", "sk-test")
    monkeypatch.setenv("LANGFUSE_HOST", "https://us.cloud.langfuse.com")

    tracing.setup_langfuse(LangfuseConfig(enabled=True))

    assert captured["public_key"] == "pk-test"
    assert captured["secret_key"] == "sk-test"
    assert captured["host"] == "https://us.cloud.langfuse.com"
    assert tracing.get_tracer() is not None
    tracing.setup_langfuse(LangfuseConfig(enabled=False))


def test_setup_langfuse_disables_tracer_when_keys_missing(monkeypatch):
    monkeypatch.delenv("LANGFUSE_PUBLIC_KEY", raising=False)
    monkeypatch.delenv("LANGFUSE_SECRET_KEY", raising=False)

    tracing.setup_langfuse(LangfuseConfig(enabled=True))

    assert tracing.get_tracer() is None


def test_spans_are_noops_when_disabled():
    tracing.setup_langfuse(LangfuseConfig(enabled=False))

    with tracing.start_span("news_curator.run", kind="chain", input_value={"a": 1}) as span:
        assert span is None
        tracing.set_span_output(span, "ignored")
        tracing.record_span_error(span, RuntimeError("ignored"))

    tracing.flush()


def test_span_output_is_redacted_and_truncated(monkeypatch):
    updates: list[dict] = []

    class DummySpan:
        def update(self, **kwargs):
            updates.append(kwargs)

    class DummyContext:
        def __enter__(self):
            return DummySpan()

        def __exit__(self, *exc):
            return False

    class DummyTracer:
        def start_as_current_span(self, **kwargs):
            return DummyContext()

    monkeypatch.setattr(tracing, "_TRACER", DummyTracer())
    monkeypatch.setattr(tracing, "_CFG", LangfuseConfig(max_text_chars=40))

    with tracing.start_span("x", kind="llm") as span:
        tracing.set_span_output(span, "see https://example.com/secret " + "y" * 100)

    output = updates[0]["output"]
    assert "https://example.com" not in output
    assert output.endswith("...(truncated)")
