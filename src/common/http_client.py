"""HTTP access for repository lookups.

``robust_get`` is the only entry point. It retries transient failures
(timeouts, connection errors, 5xx) with exponential backoff, keeps a short
in-memory cache of text responses, and never raises: when every
attempt fails the caller gets status 0 and a message body.
"""
from __future__ import annotations

import logging
import time
from typing import Any, Dict, NamedTuple, Optional, Tuple, Union

import requests

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer

logger = logging.getLogger(__name__)

Body = Union[str, bytes]
Result = Tuple[int, Dict[str, str], Body]


class _Cached(NamedTuple):
    result: Result
    stored_at: float


_http_cache: Dict[str, _Cached] = {}


def clear_cache() -> None:
    """Drop every cached response."""
    _http_cache.clear()


def _cache_key(url: str, binary: bool, headers: Optional[Dict[str, str]]) -> str:
    kind = "bin" if binary else "text"
    return f"{kind} {url} {sorted(headers.items()) if headers else ''}"


def _cached(key: str) -> Optional[Result]:
    entry = _http_cache.get(key)
    if entry is None:
        return None
    if time.time() - entry.stored_at >= Constants.HTTP_CACHE_TTL_SEC:
        del _http_cache[key]
        return None
    return entry.result


def _trace(message: str, target: str, **fields: Any) -> None:
    if is_debug_enabled(logger):
        logger.debug(message, extra=extra_context(
            component="http_client", action="GET", target=target, **fields
        ))


def _backoff(attempt: int) -> None:
    if attempt:
        time.sleep(Constants.HTTP_RETRY_BASE_DELAY_SEC * (2 ** (attempt - 1)))


def robust_get(
    url: str,
    *,
    headers: Optional[Dict[str, str]] = None,
    binary: bool = False,
    **kwargs: Any
) -> Result:
    """GET ``url`` and return ``(status_code, headers, body)``.

    Args:
        url: Target URL
        headers: Optional request headers
        binary: Return ``response.content`` instead of ``response.text``
        **kwargs: Passed through to ``requests.get``

    Returns:
        The response triple; status 0 when every attempt failed.
    """
    key = _cache_key(url, binary, headers)
    target = safe_url(url)

    # jar bodies are fetched once per walk; only text responses are cached
    hit = None if binary else _cached(key)
    if hit is not None:
        _trace("HTTP cache hit", target, event="cache_hit")
        return hit

    reason = "no attempt made"
    for attempt in range(Constants.HTTP_RETRY_MAX):
        _backoff(attempt)
        _trace("HTTP request", target, event="http_request", attempt=attempt + 1)
        with Timer() as timer:
            try:
                response = requests.get(url, timeout=Constants.REQUEST_TIMEOUT, headers=headers, **kwargs)
            except requests.Timeout:
                reason = "timeout"
                _trace("HTTP timeout", target, event="http_exception", outcome="timeout", attempt=attempt + 1)
                continue
            except requests.RequestException as exc:
                reason = str(exc)
                _trace("HTTP request exception", target, event="http_exception",
                       outcome="request_exception", attempt=attempt + 1)
                continue

        if response.status_code >= 500:
            reason = f"HTTP {response.status_code}"
            _trace("HTTP server error", target, event="http_response", outcome="retry",
                   status_code=response.status_code, attempt=attempt + 1)
            continue

        result: Result = (
            response.status_code,
            dict(response.headers),
            response.content if binary else response.text,
        )
        if not binary:
            _http_cache[key] = _Cached(result, time.time())
        _trace("HTTP response", target, event="http_response", outcome="success",
               status_code=response.status_code, duration_ms=timer.duration_ms())
        return result

    message = f"Request failed after {Constants.HTTP_RETRY_MAX} attempts: {reason}"
    logger.warning("GET %s failed: %s", target, reason)
    return 0, {}, message.encode("utf-8") if binary else message
