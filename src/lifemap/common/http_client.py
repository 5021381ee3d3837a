"""Shared HTTP helpers used by the remote artifact resolver.

Encapsulates request/timeout/retry handling so callers only deal with a
status code and a body. Transport failures never raise: they are reported as
status ``0`` and the caller decides how to surface them.
"""
from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional, Tuple

import requests

from lifemap.constants import Constants
from lifemap.common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer

logger = logging.getLogger(__name__)


def robust_get(
    url: str,
    *,
    headers: Optional[Dict[str, str]] = None,
    **kwargs: Any
) -> Tuple[int, Dict[str, str], bytes]:
    """Perform GET request with timeout and retries, with DEBUG traces.

    Server errors (5xx) and transport exceptions are retried up to
    ``Constants.HTTP_RETRY_MAX`` times with exponential backoff.

    Args:
        url: Target URL
        headers: Optional request headers
        **kwargs: Additional requests.get parameters

    Returns:
        Tuple of (status_code, headers_dict, content). Status is 0 when every
        attempt failed at the transport level; content then holds the last error.
    """
    safe_target = safe_url(url)
    last_exception = None

    for attempt in range(Constants.HTTP_RETRY_MAX):
        if attempt:
            time.sleep(Constants.HTTP_RETRY_BASE_DELAY_SEC * (2 ** (attempt - 1)))
        with Timer() as t:
            try:
                if is_debug_enabled(logger):
                    logger.debug(
                        "HTTP request",
                        extra=extra_context(
                            event="http_request",
                            component="http_client",
                            action="GET",
                            target=safe_target,
                            attempt=attempt + 1
                        )
                    )

                response = requests.get(
                    url,
                    timeout=Constants.REQUEST_TIMEOUT,
                    headers=headers,
                    **kwargs
                )

                if is_debug_enabled(logger):
                    logger.debug(
                        "HTTP response",
                        extra=extra_context(
                            event="http_response",
                            component="http_client",
                            action="GET",
                            outcome="success" if response.status_code < 400 else "http_error",
                            status_code=response.status_code,
                            duration_ms=t.duration_ms(),
                            target=safe_target
                        )
                    )
                if response.status_code >= 500 and attempt + 1 < Constants.HTTP_RETRY_MAX:
                    last_exception = f"HTTP {response.status_code}"
                    continue
                return response.status_code, dict(response.headers), response.content

            except requests.RequestException as exc:
                timed_out = isinstance(exc, requests.Timeout)
                last_exception = "timeout" if timed_out else str(exc)
                if is_debug_enabled(logger):
                    logger.debug(
                        "Artifact download attempt failed",
                        extra=extra_context(
                            event="http_exception",
                            component="http_client",
                            action="GET",
                            outcome="timeout" if timed_out else "request_exception",
                            attempt=attempt + 1,
                            retries_left=Constants.HTTP_RETRY_MAX - attempt - 1,
                            target=safe_target,
                        )
                    )

    message = f"Request failed after {Constants.HTTP_RETRY_MAX} attempts: {last_exception}"
    return 0, {}, message.encode("utf-8")
