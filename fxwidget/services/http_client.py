from __future__ import annotations

"""Lightweight HTTP client util with optional retry.

Uses stdlib urllib; the rate APIs are plain unauthenticated GET + JSON.
Transport and status failures raise NetworkError (retried when retries > 0);
a body that does not decode as JSON raises ParseError immediately.
"""
import json
import logging
import time
import urllib.request
import urllib.error
from typing import Any, Optional

from fxwidget.core.errors import NetworkError, ParseError

logger = logging.getLogger("fxwidget.http")


def _fetch_body(url: str, timeout: float) -> bytes:
    try:
        with urllib.request.urlopen(url, timeout=timeout) as resp:  # nosec B310
            if resp.status >= 400:
                raise NetworkError(f"HTTP {resp.status} for {url}")
            return resp.read()
    except urllib.error.HTTPError as e:
        raise NetworkError(f"HTTP {e.code} for {url}") from e
    except (urllib.error.URLError, TimeoutError, OSError) as e:
        raise NetworkError(f"Request to {url} failed: {e}") from e


def get_json(
    url: str, *, timeout: float = 10.0, retries: int = 0, backoff: float = 0.5
) -> Any:
    last_err: Optional[NetworkError] = None
    for attempt in range(retries + 1):
        try:
            data = _fetch_body(url, timeout)
            break
        except NetworkError as e:
            last_err = e
            logger.warning("http attempt failed", extra={"url": url, "attempt": attempt})
            if attempt == retries:
                raise
            time.sleep(backoff * (2**attempt))
    else:  # pragma: no cover - loop always breaks or raises
        raise NetworkError(f"Failed to fetch JSON from {url}: {last_err}")
    try:
        return json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        raise ParseError(f"Invalid JSON from {url}: {e}") from e
