"""
LLM Client
==========
Thin synchronous client for an OpenAI-compatible chat-completions endpoint.

It sends a request body exactly as the payload builder persisted it and
returns the assistant's raw text. Parsing and validation of that text is
the fix parser's job, never this module's.

Retry Policy:
    - Up to ``max_retries`` attempts per call
    - Retries on timeout, transport errors and HTTP 5xx
    - HTTP 4xx (auth, bad request, rate limit) fails immediately
    - Exhaustion or an empty reply raises ModelRequestError
"""
import logging
from typing import Optional

import httpx

from autoheal.core import config
from autoheal.core.errors import ModelRequestError

logger = logging.getLogger(__name__)


class LLMClient:
    """
    Sync HTTP client for the model provider.

    Usage:
        with LLMClient() as client:
            raw_text = client.complete(request_body)
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        max_retries: int = 2,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else (config.OPENAI_API_KEY or "")
        self.base_url = (base_url or config.OPENAI_BASE_URL).rstrip("/")
        self.max_retries = max(1, max_retries)
        self._http = httpx.Client(
            timeout=httpx.Timeout(timeout_seconds or config.OPENAI_TIMEOUT_SECONDS),
            transport=transport,
        )

    def __enter__(self) -> "LLMClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        """Close the HTTP client."""
        if not self._http.is_closed:
            self._http.close()

    def complete(self, request_body: dict) -> str:
        """
        POST ``request_body`` to ``/chat/completions`` and return the reply text.

        Raises
        ------
        ModelRequestError
            Missing API key, HTTP failure after retries, or an empty reply.
        """
        if not self.api_key:
            raise ModelRequestError("OPENAI_API_KEY is not set")

        url = f"{self.base_url}/chat/completions"
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        last_error = ""
        for attempt in range(1, self.max_retries + 1):
            try:
                resp = self._http.post(url, json=request_body, headers=headers)
                resp.raise_for_status()
            except httpx.TimeoutException:
                last_error = "timeout"
                logger.warning("Model request attempt %d: timeout", attempt)
                continue
            except httpx.HTTPStatusError as e:
                status = e.response.status_code
                last_error = f"HTTP {status}"
                logger.warning("Model request attempt %d: HTTP %d", attempt, status)
                if status < 500:
                    break
                continue
            except httpx.TransportError as e:
                last_error = str(e)
                logger.warning("Model request attempt %d: %s", attempt, e)
                continue

            text = _extract_content(resp)
            if not text.strip():
                raise ModelRequestError("Model returned an empty response")
            return text

        raise ModelRequestError(f"Model request failed: {last_error}")


def _extract_content(resp: httpx.Response) -> str:
    """Pull ``choices[0].message.content`` out of an OpenAI-style response."""
    try:
        data = resp.json()
    except ValueError as e:
        raise ModelRequestError(f"Model response is not JSON: {e}") from e

    try:
        choices = data.get("choices", [])
        if choices:
            return choices[0].get("message", {}).get("content") or ""
    except (AttributeError, IndexError, KeyError, TypeError):
        pass
    return ""
