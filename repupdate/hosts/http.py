"""
HTTP helper shared by the provider clients.

Wraps httpx so that transport errors and unexpected status codes both
surface as HostError with the host name attached.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable

import httpx

from ..errors import HostError

logger = logging.getLogger(__name__)

USER_AGENT = "repupdate/1.0"


def api_request(
    host: str,
    method: str,
    url: str,
    headers: Dict[str, str],
    timeout: float,
    expected: Iterable[int] = (200,),
    **kwargs: Any,
) -> httpx.Response:
    """
    Perform one API call.

    Raises:
        HostError: on transport failure or a status code not in `expected`
    """
    logger.debug(f"[{host}] {method} {url}")

    try:
        resp = httpx.request(method, url, headers=headers, timeout=timeout, **kwargs)
    except httpx.HTTPError as e:
        raise HostError(host, f"{method} {url} failed: {e}") from e

    if resp.status_code not in tuple(expected):
        raise HostError(host, f"{method} {url}: HTTP {resp.status_code}: {resp.text[:200]}")

    return resp


def response_json(host: str, resp: httpx.Response) -> Any:
    """Decoded JSON body of a response. An undecodable body raises HostError."""
    try:
        return resp.json()
    except ValueError as e:
        raise HostError(host, f"invalid JSON in response: {e}") from e
