"""Bounded HTTP retrieval and a connectivity probe."""
from __future__ import annotations

import time
from typing import Optional

import requests
import urllib3

from utils.logging_utils import get_tagged_logger
from weather_report.errors import FetchError, FetchResponseError, FetchTimeoutError

logger = get_tagged_logger(__name__, tag="network")

CHUNK_SIZE = 8192

session = requests.Session()


def _limit_read_timeout(resp: requests.Response, remaining: float) -> None:
    """Cap the next socket read of a streamed response at `remaining` seconds."""
    conn = getattr(resp.raw, "connection", None)
    sock = getattr(conn, "sock", None)
    if sock is not None:
        sock.settimeout(remaining)


def _is_read_timeout(exc: requests.exceptions.ConnectionError) -> bool:
    """requests reports read timeouts during streaming as ConnectionError."""
    cause = exc.args[0] if exc.args else None
    return isinstance(cause, urllib3.exceptions.ReadTimeoutError)


def fetch(url: str, timeout_seconds: float, *, http: Optional[requests.Session] = None) -> bytes:
    """
    GET `url` and return the raw body.

    The whole operation (connect + read) is bounded by `timeout_seconds`.
    requests bounds connecting and the response headers; the body is then
    read with read1() so each read returns as soon as any data arrives, and
    before every read the socket timeout is lowered to the time left.
    Raises FetchTimeoutError when the bound is exceeded, FetchError for any
    other failure. No retries.
    """
    http = http or session
    started = time.monotonic()
    deadline = started + timeout_seconds
    chunks = []

    try:
        with http.get(url, timeout=(timeout_seconds, timeout_seconds), stream=True) as resp:
            if not 200 <= resp.status_code < 300:
                raise FetchResponseError(resp.status_code, f"Server answered with HTTP {resp.status_code}")
            while True:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise FetchTimeoutError(f"Fetch exceeded {timeout_seconds:.1f}s while reading the body")
                _limit_read_timeout(resp, remaining)
                chunk = resp.raw.read1(CHUNK_SIZE, decode_content=True)
                if not chunk:
                    break
                chunks.append(chunk)
    except (requests.exceptions.Timeout, urllib3.exceptions.TimeoutError) as exc:
        raise FetchTimeoutError(f"Fetch exceeded {timeout_seconds:.1f}s") from exc
    except requests.exceptions.ConnectionError as exc:
        if _is_read_timeout(exc):
            raise FetchTimeoutError(f"Fetch exceeded {timeout_seconds:.1f}s") from exc
        raise FetchError(f"Fetch failed: {exc}") from exc
    except (requests.exceptions.RequestException, urllib3.exceptions.HTTPError) as exc:
        raise FetchError(f"Fetch failed: {exc}") from exc

    body = b"".join(chunks)
    logger.debug("Fetched %d bytes in %.2fs", len(body), time.monotonic() - started)
    return body


def is_reachable(url: str, timeout_seconds: float = 3.0, *, http: Optional[requests.Session] = None) -> bool:
    """
    Non-fatal connectivity probe: a single HEAD request.

    Any HTTP response counts as reachable; transport failures do not.
    This NEVER raises.
    """
    http = http or session
    try:
        resp = http.head(url, timeout=timeout_seconds, allow_redirects=False)
    except requests.exceptions.RequestException as exc:
        logger.warning("Network probe failed", extra={"probe_url": url, "error": str(exc)})
        return False
    logger.debug("Network probe answered with HTTP %s", getattr(resp, "status_code", "?"))
    return True
