"""
HTTP transport for feeds, pages and the reader proxy.

Two entry points share the same retry policy:
1. fetch_url_async: used by the concurrent source fetch stage
2. fetch_url: synchronous, used by the content resolver inside the
   sequential extraction loop

Neither raises on transport problems; failures are reported through
FetchResult.error.
"""

from __future__ import annotations

from dataclasses import dataclass
import asyncio
import time

import httpx


@dataclass
class FetchResult:
    """Result of an HTTP fetch operation.

    Either text will be populated (success) or error will be populated (failure),
    but never both. status_code may be None for network-level failures.

    Attributes:
        url: The URL that was fetched
        status_code: HTTP status code, or None if request failed before getting response
        text: The response body text, or None on error
        error: Error message if fetch failed, None on success
    """
    url: str
    status_code: int | None
    text: str | None
    error: str | None

    @property
    def ok(self) -> bool:
        return self.error is None and self.text is not None


def reader_proxy_url(template: str, target_url: str) -> str:
    """Build a reader proxy URL for a target page.

    Examples:
        >>> reader_proxy_url("https://r.jina.ai/{url}", "https://example.com/a")
        'https://r.jina.ai/https://example.com/a'
    """
    return template.replace("{url}", target_url)


def fetch_url(
    url: str,
    timeout: float,
    retries: int,
    user_agent: str | None = None,
    trust_env: bool = True,
    headers: dict[str, str] | None = None,
) -> FetchResult:
    """Fetch a URL using httpx with retry logic.

    Non-2xx responses are returned as errors with their status code so the
    caller can decide whether to fall back to another strategy.

    Args:
        url: The URL to fetch
        timeout: Request timeout in seconds
        retries: Number of retry attempts after initial failure
        user_agent: User-Agent header string
        trust_env: Whether to respect system proxy settings from environment
        headers: Extra request headers

    Returns:
        FetchResult with text on success or error message on failure
    """
    request_headers = _build_headers(user_agent, headers)
    last_error: str | None = None
    last_status: int | None = None

    for attempt in range(retries + 1):
        try:
            with httpx.Client(
                timeout=timeout,
                headers=request_headers,
                follow_redirects=True,
                trust_env=trust_env,
            ) as client:
                resp = client.get(url)
            if resp.is_success:
                return FetchResult(url=url, status_code=resp.status_code, text=resp.text, error=None)
            last_status = resp.status_code
            last_error = f"HTTPStatusError: {resp.status_code}"
        except httpx.HTTPError as exc:
            last_error = f"{type(exc).__name__}: {exc}"
        if attempt < retries:
            # Linear backoff: 0.5s, 1.0s, 1.5s...
            time.sleep(0.5 * (attempt + 1))

    return FetchResult(url=url, status_code=last_status, text=None, error=last_error)


async def fetch_url_async(
    url: str,
    timeout: float,
    retries: int,
    user_agent: str | None = None,
    trust_env: bool = True,
    headers: dict[str, str] | None = None,
) -> FetchResult:
    """Async counterpart of fetch_url for the concurrent fetch stage."""
    request_headers = _build_headers(user_agent, headers)
    last_error: str | None = None
    last_status: int | None = None

    for attempt in range(retries + 1):
        try:
            async with httpx.AsyncClient(
                timeout=timeout,
                headers=request_headers,
                follow_redirects=True,
                trust_env=trust_env,
            ) as client:
                resp = await client.get(url)
            if resp.is_success:
                return FetchResult(url=url, status_code=resp.status_code, text=resp.text, error=None)
            last_status = resp.status_code
            last_error = f"HTTPStatusError: {resp.status_code}"
        except httpx.TimeoutException as exc:
            last_error = f"TimeoutError: {exc}"
        except httpx.HTTPError as exc:
            last_error = f"{type(exc).__name__}: {exc}"
        if attempt < retries:
            await asyncio.sleep(0.5 * (attempt + 1))

    return FetchResult(url=url, status_code=last_status, text=None, error=last_error)


def _build_headers(user_agent: str | None, headers: dict[str, str] | None) -> dict[str, str]:
    merged: dict[str, str] = {}
    if user_agent:
        merged["User-Agent"] = user_agent
    if headers:
        merged.update(headers)
    return merged
