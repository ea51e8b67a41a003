"""Run logging for the curation pipeline.

Two loggers are configured per run: the pipeline logger (Rich console plus a
JSONL or plain file in the run directory) and the LLM logger, which writes one
JSONL record per extraction call. Records carry structured fields passed
through ``log_event``; fields that identify an item (its URL, author, story
links) go through ``redact_fields`` before they reach the LLM log.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
import re
from typing import Any

from rich.logging import RichHandler

from ..config import LoggingConfig
from ..core.types import RawItem


PIPELINE_LOGGER = "news_curator"
LLM_LOGGER = "news_curator.llm"

# Fields that point back at an item or its author.
IDENTIFYING_FIELDS = frozenset({"item_url", "url", "author", "original_url"})

_URL_RE = re.compile(r"https?://\S+")
_TRUNCATION_MARK = "...(truncated)"

# LogRecord attributes that are not event fields.
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message",
    "asctime",
}


def setup_logging(cfg: LoggingConfig, run_output_dir: Path | None) -> logging.Logger:
    """Configure the pipeline logger for one run."""
    level = _level_from_string(cfg.level)
    logger = _fresh_logger(PIPELINE_LOGGER, level)

    if cfg.console:
        console_handler = RichHandler(rich_tracebacks=True, show_time=False, show_level=True)
        console_handler.setLevel(level)
        console_handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(console_handler)

    if cfg.file and run_output_dir is not None:
        formatter = JsonlFormatter() if cfg.format == "jsonl" else _PLAIN_FORMATTER
        logger.addHandler(_run_file_handler(run_output_dir / cfg.filename, level, formatter))

    return logger


def setup_llm_logger(cfg: LoggingConfig, run_output_dir: Path | None) -> logging.Logger | None:
    """Configure the per-call LLM log, or return None when it is off."""
    if not cfg.llm_log_enabled or run_output_dir is None:
        return None
    level = _level_from_string(cfg.level)
    logger = _fresh_logger(LLM_LOGGER, level)
    logger.addHandler(_run_file_handler(run_output_dir / cfg.llm_log_file, level, JsonlFormatter()))
    return logger


def log_event(
    logger: logging.Logger | None,
    message: str,
    *,
    severity: int = logging.INFO,
    **fields: Any,
) -> None:
    """Log ``message`` with ``fields`` attached as record attributes.

    A None logger is allowed so pipeline stages can run unlogged. Field names
    that clash with LogRecord attributes are prefixed with ``field_``.
    """
    if logger is None:
        return
    extra = {
        (f"field_{key}" if key in _RECORD_ATTRS else key): value
        for key, value in fields.items()
    }
    logger.log(severity, message, extra=extra)


def scrub_text(text: str, mode: str, max_chars: int = 20000) -> str:
    """Redact ``text`` for ``mode`` and cap it at ``max_chars``."""
    if mode == "redact_content":
        return ""
    if mode == "redact_urls_authors":
        text = _URL_RE.sub("[REDACTED_URL]", text)
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + _TRUNCATION_MARK


def redact_fields(fields: dict[str, Any], mode: str) -> dict[str, Any]:
    """Return a copy of ``fields`` with identifying values redacted.

    ``redact_urls_authors`` masks identifying values; ``redact_content``
    drops them. Empty values are left alone.
    """
    redacted: dict[str, Any] = {}
    for key, value in fields.items():
        if key in IDENTIFYING_FIELDS and value:
            if mode == "redact_content":
                continue
            if mode == "redact_urls_authors":
                value = "[REDACTED]"
        redacted[key] = value
    return redacted


def item_log_fields(item: RawItem, mode: str) -> dict[str, Any]:
    """Fields describing ``item`` in an LLM log record."""
    return redact_fields(
        {
            "item_title": item.title,
            "item_source": item.source_name,
            "item_url": item.url,
            "author": item.author,
        },
        mode,
    )


class JsonlFormatter(logging.Formatter):
    """One JSON object per record: timestamp, level, logger, message and event fields."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(event_fields(record))
        return json.dumps(payload, ensure_ascii=True, default=str)


def event_fields(record: logging.LogRecord) -> dict[str, Any]:
    """Fields attached to ``record`` through ``log_event``."""
    return {key: value for key, value in vars(record).items() if key not in _RECORD_ATTRS}


_PLAIN_FORMATTER = logging.Formatter("%(asctime)s %(levelname)s %(message)s")


def _fresh_logger(name: str, level: int) -> logging.Logger:
    logger = logging.getLogger(name)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers = []
    logger.propagate = False
    return logger


def _run_file_handler(path: Path, level: int, formatter: logging.Formatter) -> logging.Handler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def _level_from_string(level: str) -> int:
    return getattr(logging, level.upper(), logging.INFO)
