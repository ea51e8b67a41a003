"""OpenAI-compatible chat completions provider (OpenRouter, OpenAI and friends)."""

from __future__ import annotations

from typing import Any

import httpx

from ..usage import TokenUsage
from .base import ExtractionProvider


DEFAULT_BASE_URLS = {
    "openai": "https://api.openai.com/v1",
    "openrouter": "https://openrouter.ai/api/v1",
}

SYSTEM_PROMPT = "You extract news stories from content and answer with a JSON array only."


class OpenAICompatibleProvider(ExtractionProvider):
    """Extraction through a ``/chat/completions`` endpoint."""

    provider_name = "openai_compatible"

    def _generate(self, prompt: str) -> tuple[str, TokenUsage | None]:
        payload = {
            "model": self.cfg.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "temperature": self.cfg.temperature,
            "max_tokens": self.cfg.max_output_tokens,
        }
        data = self._post(payload)
        if not isinstance(data, dict):
            raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
        return _extract_text(data), _extract_usage(data)

    def _base_url(self) -> str:
        if self.cfg.base_url:
            return self.cfg.base_url.rstrip("/")
        name = self.cfg.name.lower().strip()
        return DEFAULT_BASE_URLS.get(name, DEFAULT_BASE_URLS["openrouter"])

    def _post(self, payload: dict[str, Any]) -> Any:
        url = f"{self._base_url()}/chat/completions"
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": "https://github.com/news-curator",
            "X-Title": self.curation_cfg.newsletter_name,
        }
        with httpx.Client(
            timeout=self.cfg.timeout_seconds, trust_env=self.cfg.trust_env
        ) as client:
            resp = client.post(url, headers=headers, json=payload)
            resp.raise_for_status()
            return resp.json()


def _extract_text(data: dict[str, Any]) -> str:
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return ""
    return content if isinstance(content, str) else ""


def _extract_usage(data: dict[str, Any]) -> TokenUsage | None:
    usage = data.get("usage")
    if not isinstance(usage, dict):
        return None
    return TokenUsage(
        input_tokens=int(usage.get("prompt_tokens") or 0),
        output_tokens=int(usage.get("completion_tokens") or 0),
    )
