"""Sitemap discovery: try well-known sitemap URLs and parse ``<loc>`` entries."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

import httpx
from bs4 import BeautifulSoup

from sitegraph.config import settings
from sitegraph.crawler.fetcher import FetchError, read_capped

SITEMAP_PATHS = ("/sitemap.xml", "/sitemap_index.xml", "/sitemap-index.xml")


@dataclass
class SitemapDiscovery:
    """The first usable sitemap found for an origin, and its same-origin URLs."""

    sitemap_url: Optional[str] = None
    urls: List[str] = field(default_factory=list)


def parse_sitemap(xml: str, origin: str) -> List[str]:
    """Return the ``<loc>`` values in *xml* that start with *origin*.

    Duplicates are dropped, document order is preserved.  Malformed XML
    simply yields whatever ``<loc>`` elements the lenient parser recovers.
    """
    soup = BeautifulSoup(xml or "", "html.parser")
    seen: set[str] = set()
    urls: List[str] = []
    for loc in soup.find_all("loc"):
        value = loc.get_text().strip()
        if value and value.startswith(origin) and value not in seen:
            seen.add(value)
            urls.append(value)
    return urls


async def _read_sitemap(client: httpx.AsyncClient, sitemap_url: str) -> Optional[str]:
    """Return the sitemap body, or ``None`` unless it answers 200 within the size cap."""
    async with client.stream(
        "GET", sitemap_url, timeout=settings.sitemap_timeout, follow_redirects=True
    ) as response:
        if response.status_code != 200:
            return None
        body = await read_capped(response, settings.max_response_bytes)
        return body.decode(response.encoding or "utf-8", errors="replace")


async def discover_sitemap(client: httpx.AsyncClient, origin: str) -> SitemapDiscovery:
    """Try the well-known sitemap locations under *origin* in fixed order.

    Stops at the first candidate that answers 200 with at least one usable
    ``<loc>``.  Every failure (HTTP error, timeout, oversized or unparsable
    body) is non-fatal and moves on to the next candidate.
    """
    for path in SITEMAP_PATHS:
        sitemap_url = origin.rstrip("/") + path
        try:
            xml = await _read_sitemap(client, sitemap_url)
        except httpx.HTTPError as exc:
            print(f"[SITEMAP] {sitemap_url} unavailable: {type(exc).__name__}")
            continue
        except FetchError as exc:
            print(f"[SITEMAP] {sitemap_url} skipped: {exc}")
            continue
        if xml is None:
            continue

        urls = parse_sitemap(xml, origin)
        if urls:
            print(f"[SITEMAP] Found sitemap {sitemap_url} with {len(urls)} URL(s).")
            return SitemapDiscovery(sitemap_url=sitemap_url, urls=urls)

    return SitemapDiscovery()
