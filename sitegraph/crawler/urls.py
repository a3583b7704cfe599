"""URL resolution and internal/external classification."""

from __future__ import annotations

from typing import Optional
from urllib.parse import urljoin, urlparse

_NON_NAVIGABLE_PREFIXES = ("#", "mailto:", "tel:", "javascript:")


def is_navigable(href: str) -> bool:
    """Return ``False`` for empty, fragment-only and non-HTTP scheme hrefs."""
    if not href:
        return False
    return not href.strip().lower().startswith(_NON_NAVIGABLE_PREFIXES)


def resolve_href(href: str, page_url: str) -> Optional[str]:
    """Resolve *href* against *page_url* and return an absolute URL.

    Returns ``None`` when the href is not navigable or cannot be resolved to
    an absolute ``scheme://host`` URL.
    """
    if not is_navigable(href):
        return None
    try:
        absolute = urljoin(page_url, href.strip())
        parsed = urlparse(absolute)
        # Accessing .port validates the netloc and raises on garbage.
        parsed.port
    except ValueError:
        return None
    if not parsed.scheme or not parsed.hostname:
        return None
    return absolute


def hostname(url: str) -> str:
    """Return the lowercased hostname of *url*, or ``""`` when unparsable."""
    try:
        return urlparse(url).hostname or ""
    except ValueError:
        return ""


def origin_of(url: str) -> str:
    """Return ``scheme://netloc`` for *url*.

    Raises:
        ValueError: If *url* has no scheme or host.
    """
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        raise ValueError(f"Not an absolute http(s) URL: {url!r}")
    return f"{parsed.scheme}://{parsed.netloc}"


def is_internal(url: str, seed_host: str) -> bool:
    """A URL is internal iff its hostname exactly equals the seed's hostname."""
    return bool(seed_host) and hostname(url) == seed_host
