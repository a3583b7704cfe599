"""Bounded HTTP fetcher used by the crawl engine and sitemap discovery."""

from __future__ import annotations

import asyncio
import time
from typing import Optional
from urllib.parse import urljoin

import httpx

from sitegraph.config import settings
from sitegraph.crawler.models import FetchedPage
from sitegraph.crawler.urls import hostname


class FetchError(Exception):
    """Transport-level failure: the URL could not be crawled."""


def _default_headers() -> dict[str, str]:
    return {
        "User-Agent": settings.user_agent,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    }


def build_client(timeout: Optional[float] = None) -> httpx.AsyncClient:
    """Return an :class:`httpx.AsyncClient` configured for crawling.

    Redirects are *not* followed automatically; :func:`fetch_page` follows
    them itself so it can refuse hops onto another host.
    """
    return httpx.AsyncClient(
        headers=_default_headers(),
        timeout=timeout if timeout is not None else settings.request_timeout,
        follow_redirects=False,
    )


async def read_capped(response: httpx.Response, max_bytes: int) -> bytes:
    """Read the streamed body, aborting once it grows past *max_bytes*."""
    declared = response.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > max_bytes:
        raise FetchError(f"Response too large ({declared} bytes > {max_bytes})")

    chunks: list[bytes] = []
    total = 0
    async for chunk in response.aiter_bytes():
        total += len(chunk)
        if total > max_bytes:
            raise FetchError(f"Response too large (>{max_bytes} bytes)")
        chunks.append(chunk)
    return b"".join(chunks)


async def _follow(
    client: httpx.AsyncClient, url: str, max_bytes: int, hops: int
) -> FetchedPage:
    origin_host = hostname(url)
    start = time.perf_counter()
    current = url
    for _ in range(hops + 1):
        try:
            async with client.stream("GET", current) as response:
                if response.is_redirect:
                    target = urljoin(current, response.headers.get("location", ""))
                    if hostname(target) != origin_host:
                        raise FetchError(f"Redirect to external host: {target}")
                    current = target
                    continue
                if response.status_code >= 400:
                    raise FetchError(f"HTTP {response.status_code}")
                body = await read_capped(response, max_bytes)
                status_code = response.status_code
                encoding = response.encoding or "utf-8"
        except httpx.HTTPError as exc:
            raise FetchError(f"{type(exc).__name__}: {exc}") from exc

        load_time_ms = int((time.perf_counter() - start) * 1000)
        return FetchedPage(
            url=url,
            html=body.decode(encoding, errors="replace"),
            status_code=status_code,
            load_time_ms=load_time_ms,
            final_url=current,
        )

    raise FetchError(f"Too many redirects (>{hops})")


async def fetch_page(
    client: httpx.AsyncClient,
    url: str,
    *,
    max_bytes: Optional[int] = None,
    max_redirects: Optional[int] = None,
    timeout: Optional[float] = None,
) -> FetchedPage:
    """Fetch *url* and return a :class:`FetchedPage`.

    Same-host redirects are followed up to *max_redirects* hops.  The page is
    keyed by the requested URL; ``final_url`` records where it ended up.
    *timeout* bounds the whole fetch, redirects and body included, on top of
    the client's per-phase httpx timeouts.

    Raises:
        FetchError: On any transport failure (timeout, DNS, refused
            connection), an oversized body, an HTTP status >= 400, a redirect
            to a different host, too many redirects, or a fetch that runs
            past *timeout*.
    """
    limit = max_bytes if max_bytes is not None else settings.max_response_bytes
    hops = max_redirects if max_redirects is not None else settings.max_redirects
    deadline = timeout if timeout is not None else settings.request_timeout

    try:
        return await asyncio.wait_for(_follow(client, url, limit, hops), deadline)
    except asyncio.TimeoutError as exc:
        raise FetchError(f"Request timed out after {deadline}s") from exc
