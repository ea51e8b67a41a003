"""Provider interface for story extraction.

A provider turns one item's content into a list of raw story dicts. Concrete
providers only implement the HTTP exchange (``_generate``); prompting,
response parsing, error classification, logging and tracing are shared here.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
import json
import logging
from typing import Any

import httpx

from ...config import CurationConfig, ExtractConfig, LoggingConfig, ProviderConfig
from ...core.types import RawItem
from ...utils.logging import item_log_fields, log_event, scrub_text
from ..parsing import parse_story_list
from ..prompts import build_extraction_prompt
from ..tracing import record_span_error, set_span_output, start_span
from ..usage import TokenUsage


@dataclass
class ExtractionResponse:
    """Outcome of one extraction call.

    Attributes:
        status: "ok", "provider_error" or "parse_error"
        stories: Raw story dicts; empty unless status is "ok"
        raw: Response text (or error message) for logging
        usage: Token usage reported by the provider, if any
        model: Model that served the call
    """
    status: str
    stories: list[dict[str, Any]] = field(default_factory=list)
    raw: str = ""
    usage: TokenUsage | None = None
    model: str = ""

    @property
    def ok(self) -> bool:
        return self.status == "ok"


class ExtractionProvider(ABC):
    """Base class for extraction oracles."""

    provider_name = "base"

    def __init__(
        self,
        cfg: ProviderConfig,
        extract_cfg: ExtractConfig,
        curation_cfg: CurationConfig,
        api_key: str | None,
        log_cfg: LoggingConfig,
        llm_logger: logging.Logger | None = None,
    ):
        if not api_key:
            raise ValueError(
                f"Missing API key for provider '{cfg.name}'. "
                "Set it in the config, pass --api-key, or export the provider's key variable."
            )
        self.cfg = cfg
        self.extract_cfg = extract_cfg
        self.curation_cfg = curation_cfg
        self.api_key = api_key
        self.log_cfg = log_cfg
        self.llm_logger = llm_logger

    @abstractmethod
    def _generate(self, prompt: str) -> tuple[str, TokenUsage | None]:
        """Send the prompt and return (response text, usage).

        Raises:
            httpx.HTTPError: On transport failures or non-2xx responses
            ValueError: If the response body is not the expected JSON object
        """
        raise NotImplementedError

    def extract_stories(self, item: RawItem, content: str) -> ExtractionResponse:
        """Ask the provider for the stories contained in ``content``.

        Never raises; failures are reported through the response status.
        """
        prompt = build_extraction_prompt(item, content, self.extract_cfg, self.curation_cfg)
        with start_span(
            f"{self.provider_name}.extract_stories",
            kind="llm",
            input_value=prompt,
            attributes={
                "llm.model": self.cfg.model,
                "llm.provider": self.provider_name,
                "item.title": item.title,
                "item.source": item.source_name,
            },
        ) as span:
            content_text = ""
            usage: TokenUsage | None = None
            try:
                text, usage = self._generate(prompt)
                if not isinstance(text, str):
                    content_text = repr(text)
                    raise TypeError(f"Response text is {type(text).__name__}, not str")
                content_text = text
                set_span_output(span, content_text)
                stories = parse_story_list(content_text)
            except httpx.HTTPError as exc:
                record_span_error(span, exc)
                message = f"{type(exc).__name__}: {exc}"
                self._log_llm_response(item, "provider_error", message, prompt)
                return ExtractionResponse("provider_error", raw=message, model=self.cfg.model)
            except (json.JSONDecodeError, ValueError, KeyError, TypeError) as exc:
                record_span_error(span, exc)
                self._log_llm_response(item, "parse_error", content_text, prompt)
                return ExtractionResponse(
                    "parse_error", raw=content_text, usage=usage, model=self.cfg.model
                )

        self._log_llm_response(item, "ok", content_text, prompt)
        return ExtractionResponse(
            "ok", stories=stories, raw=content_text, usage=usage, model=self.cfg.model
        )

    def _log_llm_response(self, item: RawItem, status: str, content: str, prompt: str) -> None:
        if self.llm_logger is None:
            return
        redaction = self.log_cfg.llm_log_redaction
        payload = {
            "event": "llm_extract_stories",
            "status": status,
            "model": self.cfg.model,
            **item_log_fields(item, redaction),
        }
        if self.log_cfg.llm_log_detail == "prompt_response":
            payload["raw_prompt"] = scrub_text(prompt, redaction)
        payload["raw_response"] = scrub_text(content, redaction)
        log_event(self.llm_logger, "LLM response", **payload)

