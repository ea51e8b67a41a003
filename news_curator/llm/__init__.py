"""LLM story extraction, usage metering and observability."""

from .providers.base import ExtractionProvider, ExtractionResponse
from .providers.factory import available_providers, create_provider
from .providers.gemini import GeminiProvider
from .providers.openai_compatible import OpenAICompatibleProvider
from .tracing import setup_langfuse, flush, start_span, set_span_output, record_span_error
from .usage import JsonlUsageLog, TokenUsage, UsageLedger, UsageMeter, UsageRecord

__all__ = [
    "ExtractionProvider",
    "ExtractionResponse",
    "GeminiProvider",
    "OpenAICompatibleProvider",
    "create_provider",
    "available_providers",
    "setup_langfuse",
    "flush",
    "start_span",
    "set_span_output",
    "record_span_error",
    "JsonlUsageLog",
    "TokenUsage",
    "UsageLedger",
    "UsageMeter",
    "UsageRecord",
]
