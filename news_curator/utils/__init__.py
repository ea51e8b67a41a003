"""
Shared utility functions.

This package contains utility code used across multiple
pipeline stages.
"""

from .logging import (
    JsonlFormatter,
    item_log_fields,
    log_event,
    redact_fields,
    scrub_text,
    setup_llm_logger,
    setup_logging,
)

__all__ = [
    "setup_logging",
    "setup_llm_logger",
    "log_event",
    "scrub_text",
    "redact_fields",
    "item_log_fields",
    "JsonlFormatter",
]
