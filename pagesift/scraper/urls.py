"""Strict parsing of absolute http(s) URLs.

``httpx.URL`` percent-encodes whatever it is given, so a host containing a
space or ``<`` still parses.  :func:`parse_http_url` adds the host and port
checks a browser would apply before navigating.
"""

from __future__ import annotations

import ipaddress
import re
from typing import Union

import httpx

from pagesift.scraper.errors import InvalidUrlError

_LABEL = r"[a-z0-9_](?:[a-z0-9_-]*[a-z0-9_])?"
_HOSTNAME_RE = re.compile(rf"^{_LABEL}(?:\.{_LABEL})*\.?$")
MAX_PORT = 65535


def _valid_host(host: str) -> bool:
    try:
        ipaddress.ip_address(host.strip("[]"))
        return True
    except ValueError:
        return bool(_HOSTNAME_RE.match(host.lower()))


def parse_http_url(url: Union[str, httpx.URL]) -> httpx.URL:
    """Parse *url* and check it is an absolute http(s) URL.

    Raises:
        InvalidUrlError: Wrong scheme, missing or malformed host, or a port
            outside 0-65535.
    """
    raw = str(url)
    try:
        parsed = url if isinstance(url, httpx.URL) else httpx.URL(url.strip())
    except httpx.InvalidURL as exc:
        raise InvalidUrlError(raw, str(exc)) from exc
    if parsed.scheme not in ("http", "https"):
        raise InvalidUrlError(raw, "scheme must be http or https")
    if not parsed.raw_host:
        raise InvalidUrlError(raw, "missing host")
    if not _valid_host(parsed.raw_host.decode("ascii", errors="replace")):
        raise InvalidUrlError(raw, "malformed host")
    if parsed.port is not None and not 0 <= parsed.port <= MAX_PORT:
        raise InvalidUrlError(raw, f"port out of range: {parsed.port}")
    return parsed
