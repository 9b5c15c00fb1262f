"""
Query-string and URL helpers shared by the resolver and the fetcher.
"""

from typing import Any
from urllib.parse import parse_qsl, urlencode, urljoin, urlsplit, urlunsplit


def parse_qs_first(query: str) -> dict[str, str]:
    """Parse a query string, keeping the first value of repeated keys."""
    result: dict[str, str] = {}
    for key, value in parse_qsl(query, keep_blank_values=True):
        result.setdefault(key, value)
    return result


def get_query_param(url: str, key: str) -> str | None:
    """Return the first value of *key* in the URL's query, or None."""
    return parse_qs_first(urlsplit(url).query).get(key)


def set_query_param(url: str, key: str, value: Any) -> str:
    """
    Set *key* on the URL's query string.

    The first occurrence is replaced in place and any later duplicates are
    dropped; a missing key is appended. The query is re-serialized in
    form-urlencoded style.
    """
    parts = urlsplit(url)
    pairs = parse_qsl(parts.query, keep_blank_values=True)

    updated: list[tuple[str, str]] = []
    found = False
    for k, v in pairs:
        if k == key:
            if found:
                continue
            found = True
            v = str(value)
        updated.append((k, v))
    if not found:
        updated.append((key, str(value)))

    return urlunsplit(parts._replace(query=urlencode(updated)))


def absolute_player_url(identifier: str, base_url: str) -> str:
    """Turn a relative or protocol-relative player path into an absolute URL."""
    identifier = identifier.strip()
    if identifier.startswith(("http://", "https://")):
        return identifier
    if identifier.startswith("//"):
        return f"https:{identifier}"
    return urljoin(base_url.rstrip("/") + "/", identifier.lstrip("/"))


def truncate(value: Any, limit: int = 16) -> str:
    """Shorten a token for log output."""
    text = str(value)
    return text if len(text) <= limit else f"{text[:limit]}..."
