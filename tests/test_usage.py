"""Tests for usage metering."""

from __future__ import annotations

import json

import pytest

from news_curator.llm.usage import (
    FALLBACK_PRICING,
    JsonlUsageLog,
    TokenUsage,
    UsageLedger,
    UsageRecord,
    estimate_text_cost,
)


def test_estimate_text_cost_known_and_unknown_models():
    assert estimate_text_cost("google/gemini-2.0-flash-001", 1_000_000, 1_000_000) == pytest.approx(0.5)
    assert estimate_text_cost("mystery-model", 1_000_000, 0) == pytest.approx(FALLBACK_PRICING[0])


def test_record_from_missing_usage_is_free():
    record = UsageRecord.from_usage("google/gemini-2.0-flash-001", "provider_error", None)

    assert record.input_tokens == 0
    assert record.cost == 0.0


def test_ledger_summary():
    ledger = UsageLedger()
    ledger.record(UsageRecord.from_usage("gpt-4o-mini", "ok", TokenUsage(1_000_000, 0)))
    ledger.record(UsageRecord.from_usage("gpt-4o-mini", "parse_error", TokenUsage(0, 1_000_000)))
    ledger.record(UsageRecord.from_usage("gemini-2.0-flash", "ok", TokenUsage(1_000_000, 0)))

    summary = ledger.summary()

    assert summary["calls"] == 3
    assert summary["failed_calls"] == 1
    assert summary["input_tokens"] == 2_000_000
    assert summary["total_cost"] == pytest.approx(0.85)
    assert summary["by_model"]["gpt-4o-mini"] == pytest.approx(0.75)


def test_jsonl_usage_log_appends_and_forwards(tmp_path):
    path = tmp_path / "run" / "usage.jsonl"
    ledger = UsageLedger()
    meter = JsonlUsageLog(path, inner=ledger)

    meter.record(UsageRecord.from_usage("gpt-4o-mini", "ok", TokenUsage(10, 5), "Story extraction: A"))
    meter.record(UsageRecord.from_usage("gpt-4o-mini", "ok", TokenUsage(20, 5), "Story extraction: B"))

    lines = path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    assert json.loads(lines[1])["description"] == "Story extraction: B"
    assert len(ledger.records) == 2
