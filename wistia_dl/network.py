"""HTTP request helpers shared by the catalog resolver and the downloader."""

import http.client
import random
import urllib.error
import urllib.request
from typing import Optional

from .errors import TransportError
from .models import DEFAULT_TIMEOUT, USER_AGENTS


def select_random_user_agent() -> str:
    """Select a random user agent from the pool."""
    return random.choice(USER_AGENTS)


def build_request(url: str, user_agent: Optional[str] = None) -> urllib.request.Request:
    """Build a GET request with a browser-like user agent."""
    headers = {
        "User-Agent": user_agent or select_random_user_agent(),
        "Accept": "*/*",
    }
    return urllib.request.Request(url, headers=headers, method="GET")


def open_url(url: str, timeout: Optional[float] = None, user_agent: Optional[str] = None):
    """Open *url* and return the response; failures raise TransportError."""
    effective_timeout = timeout if timeout and timeout > 0 else DEFAULT_TIMEOUT
    try:
        request = build_request(url, user_agent)
        return urllib.request.urlopen(request, timeout=effective_timeout)
    except urllib.error.HTTPError as exc:
        raise TransportError(f"HTTP {exc.code} from {url}: {exc.reason}") from exc
    except urllib.error.URLError as exc:
        raise TransportError(f"Failed to reach {url}: {exc.reason}") from exc
    except (OSError, http.client.HTTPException) as exc:
        # Connect timeouts and resets surface as plain OSError subclasses
        raise TransportError(f"Request to {url} failed: {exc}") from exc
    except ValueError as exc:
        raise TransportError(f"Invalid URL {url!r}: {exc}") from exc


def read_chunk(response, size: int, url: str) -> bytes:
    """Read up to *size* bytes from *response*, mapping read failures."""
    try:
        return response.read(size)
    except (OSError, http.client.HTTPException) as exc:
        raise TransportError(f"Reading {url} failed: {exc}") from exc


def content_length(response) -> Optional[int]:
    """Return the declared Content-Length, or None when absent or invalid."""
    headers = getattr(response, "headers", None)
    raw = headers.get("Content-Length") if headers is not None else None
    if raw is None:
        return None
    try:
        value = int(str(raw).strip())
    except ValueError:
        return None
    return value if value >= 0 else None
