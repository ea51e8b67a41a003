"""Google Gemini provider for story extraction."""

from __future__ import annotations

from typing import Any

import httpx

from ..usage import TokenUsage
from .base import ExtractionProvider


DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com"


class GeminiProvider(ExtractionProvider):
    """Gemini-backed extraction via the generateContent endpoint."""

    provider_name = "gemini"

    def _generate(self, prompt: str) -> tuple[str, TokenUsage | None]:
        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self.cfg.temperature,
                "maxOutputTokens": self.cfg.max_output_tokens,
                "responseMimeType": "application/json",
            },
        }
        data = self._post(payload)
        if not isinstance(data, dict):
            raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
        return _extract_text(data), _extract_usage(data)

    def _post(self, payload: dict[str, Any]) -> Any:
        base_url = (self.cfg.base_url or DEFAULT_BASE_URL).rstrip("/")
        url = f"{base_url}/v1beta/models/{self.cfg.model}:generateContent"
        params = {"key": self.api_key}
        with httpx.Client(
            timeout=self.cfg.timeout_seconds, trust_env=self.cfg.trust_env
        ) as client:
            resp = client.post(url, params=params, json=payload)
            resp.raise_for_status()
            return resp.json()


def _extract_text(data: dict[str, Any]) -> str:
    """Join the text parts of the first candidate, skipping thought parts.

    If every part is a thought, all text is returned instead.
    """
    try:
        parts = data["candidates"][0]["content"]["parts"]
    except (KeyError, IndexError, TypeError):
        return ""
    parts = [part for part in parts if isinstance(part, dict)]
    answer = [part.get("text", "") for part in parts if not part.get("thought")]
    if any(answer):
        return "".join(answer)
    return "".join(part.get("text", "") for part in parts)


def _extract_usage(data: dict[str, Any]) -> TokenUsage | None:
    meta = data.get("usageMetadata")
    if not isinstance(meta, dict):
        return None
    return TokenUsage(
        input_tokens=int(meta.get("promptTokenCount") or 0),
        output_tokens=int(meta.get("candidatesTokenCount") or 0),
    )
