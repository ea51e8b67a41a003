"""
Token usage and cost metering for provider calls.

The pipeline does not keep usage state itself. A UsageMeter is injected
into the run and receives one UsageRecord after every provider call.
Two meters are provided:
- UsageLedger: in-memory totals for the current process
- JsonlUsageLog: append-only JSONL file, one line per call
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
import json
from pathlib import Path
from typing import Any


# USD per 1M tokens (input, output).
MODEL_PRICING: dict[str, tuple[float, float]] = {
    "google/gemini-2.0-flash-001": (0.10, 0.40),
    "google/gemini-2.5-flash-preview": (0.15, 0.60),
    "gemini-2.0-flash": (0.10, 0.40),
    "gemini-2.5-flash": (0.30, 2.50),
    "x-ai/grok-4.1-fast": (0.20, 0.50),
    "anthropic/claude-sonnet-4": (3.00, 15.00),
    "openai/gpt-4o": (2.50, 10.00),
    "gpt-4o-mini": (0.15, 0.60),
    "deepseek/deepseek-r1": (0.55, 2.19),
}
FALLBACK_PRICING = (1.0, 5.0)


def estimate_text_cost(model: str, input_tokens: int, output_tokens: int) -> float:
    """Estimate the USD cost of a text call; unknown models use a moderate rate.

    Examples:
        >>> round(estimate_text_cost("google/gemini-2.0-flash-001", 1_000_000, 0), 2)
        0.1
    """
    input_rate, output_rate = MODEL_PRICING.get(model, FALLBACK_PRICING)
    return (input_tokens / 1_000_000) * input_rate + (output_tokens / 1_000_000) * output_rate


@dataclass
class TokenUsage:
    input_tokens: int = 0
    output_tokens: int = 0


@dataclass
class UsageRecord:
    """One provider call.

    Attributes:
        model: Model identifier
        status: Outcome of the call ("ok", "provider_error", "parse_error")
        input_tokens: Prompt tokens reported by the provider
        output_tokens: Completion tokens reported by the provider
        cost: Estimated USD cost
        description: What the call was for
        timestamp: ISO 8601 UTC time of the call
    """
    model: str
    status: str
    input_tokens: int = 0
    output_tokens: int = 0
    cost: float = 0.0
    description: str = ""
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    @classmethod
    def from_usage(
        cls,
        model: str,
        status: str,
        usage: TokenUsage | None,
        description: str = "",
    ) -> "UsageRecord":
        usage = usage or TokenUsage()
        return cls(
            model=model,
            status=status,
            input_tokens=usage.input_tokens,
            output_tokens=usage.output_tokens,
            cost=estimate_text_cost(model, usage.input_tokens, usage.output_tokens),
            description=description,
        )


class UsageMeter:
    """Receives a record after every provider call. The base meter ignores it."""

    def record(self, record: UsageRecord) -> None:
        return None


class UsageLedger(UsageMeter):
    """Keeps usage records in memory and summarizes them."""

    def __init__(self) -> None:
        self.records: list[UsageRecord] = []

    def record(self, record: UsageRecord) -> None:
        self.records.append(record)

    @property
    def total_cost(self) -> float:
        return sum(r.cost for r in self.records)

    def cost_by_model(self) -> dict[str, float]:
        grouped: dict[str, float] = {}
        for r in self.records:
            grouped[r.model] = grouped.get(r.model, 0.0) + r.cost
        return grouped

    def summary(self) -> dict[str, Any]:
        return {
            "calls": len(self.records),
            "failed_calls": sum(1 for r in self.records if r.status != "ok"),
            "input_tokens": sum(r.input_tokens for r in self.records),
            "output_tokens": sum(r.output_tokens for r in self.records),
            "total_cost": round(self.total_cost, 6),
            "by_model": {k: round(v, 6) for k, v in self.cost_by_model().items()},
        }


class JsonlUsageLog(UsageMeter):
    """Appends each usage record as a JSON line.

    Attributes:
        path: Full path to the JSONL file
        inner: Optional meter that also receives every record
    """

    def __init__(self, path: Path, inner: UsageMeter | None = None):
        self.path = path
        self.inner = inner

    def record(self, record: UsageRecord) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(asdict(record), ensure_ascii=True))
            handle.write("\n")
        if self.inner is not None:
            self.inner.record(record)
