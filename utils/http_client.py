"""Shared HTTP client utilities.

One pooled session for every gateway call. Reads get retried on transient
failures; POSTs never do, since a retried transaction could land twice.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = (3.05, 10)  # (connect, read)

IDEMPOTENT_METHODS = ("GET", "HEAD", "OPTIONS")


def _build_retry() -> Retry:
    return Retry(
        total=3,
        connect=3,
        read=3,
        backoff_factor=0.4,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=IDEMPOTENT_METHODS,
        raise_on_status=False,
        respect_retry_after_header=True,
    )


def build_session() -> requests.Session:
    s = requests.Session()

    adapter = HTTPAdapter(max_retries=_build_retry(), pool_connections=10, pool_maxsize=10)
    s.mount("https://", adapter)
    s.mount("http://", adapter)

    return s


session = build_session()


def request(method: str, url: str, *, timeout: Any = None, **kwargs) -> requests.Response:
    """Perform an HTTP request with shared defaults."""
    if timeout is None:
        timeout = DEFAULT_TIMEOUT
    logger.debug("[HTTP] %s %s", method, url)
    return session.request(method=method, url=url, timeout=timeout, **kwargs)


def get_json(url: str, *, timeout: Any = None, **kwargs) -> Any:
    """GET and parse JSON; raises for non-2xx."""
    resp = request("GET", url, timeout=timeout, **kwargs)
    resp.raise_for_status()
    return resp.json()


def post_json(url: str, data: Any = None, *, timeout: Any = None, headers: Optional[dict] = None, **kwargs) -> Any:
    """POST JSON data and parse response; raises for non-2xx."""
    resp = request("POST", url, timeout=timeout, json=data, headers=headers, **kwargs)
    resp.raise_for_status()
    return resp.json()
