"""Breadth-first, budget-bounded site crawler.

Every call to :func:`crawl_site_async` builds its own :class:`CrawlSession`;
the frontier, visited set and collected pages live on that session and are
discarded with it, so concurrent crawls of different seeds never share state.

Traversal
---------
1. The seed is fetched at depth 0.  Failure here is a :class:`CrawlError`.
2. Sitemap discovery runs once and seeds the frontier at depth 1.
3. The frontier drains in FIFO order; each fetched page enqueues up to
   ``max_links_per_page`` unseen internal links at ``depth + 1``.
4. The crawl stops when the frontier is empty or ``max_pages`` URLs have
   been visited.  Whatever was gathered is returned.
"""

from __future__ import annotations

import asyncio
import time
from collections import deque
from enum import Enum
from typing import Deque, Iterable, List, Optional, Set, Tuple

import httpx

from sitegraph.config import settings
from sitegraph.crawler.extractor import clean_html, extract_links, extract_title, page_text
from sitegraph.crawler.fetcher import FetchError, build_client, fetch_page
from sitegraph.crawler.models import CrawledPage, CrawlResult, ExtractedLink
from sitegraph.crawler.sitemap import discover_sitemap
from sitegraph.crawler.urls import hostname, origin_of

_DESCRIPTION_MIN_LINE = 50
_DESCRIPTION_MAX_CHARS = 200
_NO_DESCRIPTION = "No description available"


class CrawlError(Exception):
    """The crawl as a whole could not run (bad seed URL or seed unreachable)."""


class CrawlState(str, Enum):
    IDLE = "idle"
    SEEDING = "seeding"
    DRAINING = "frontier-draining"
    DONE = "done"


def _describe(page: Optional[CrawledPage]) -> str:
    if page is None:
        return _NO_DESCRIPTION
    for line in page.raw_content.split("\n"):
        if len(line.strip()) > _DESCRIPTION_MIN_LINE:
            return line[:_DESCRIPTION_MAX_CHARS]
    return _NO_DESCRIPTION


class CrawlSession:
    """State for exactly one crawl: frontier, visited set, collected pages."""

    def __init__(
        self,
        seed_url: str,
        *,
        max_pages: Optional[int] = None,
        max_depth: Optional[int] = None,
        max_links_per_page: Optional[int] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        try:
            self.origin = origin_of(seed_url)
        except ValueError as exc:
            raise CrawlError(f"Invalid seed URL {seed_url!r}: {exc}") from exc

        self.seed_url = seed_url
        self.seed_host = hostname(seed_url)
        self.max_pages = settings.max_pages if max_pages is None else max_pages
        self.max_depth = settings.max_depth if max_depth is None else max_depth
        self.max_links_per_page = (
            settings.max_links_per_page if max_links_per_page is None else max_links_per_page
        )
        if self.max_pages < 1:
            raise ValueError("max_pages must be at least 1")
        if self.max_depth < 0:
            raise ValueError("max_depth must be >= 0")

        self.state = CrawlState.IDLE
        self.frontier: Deque[Tuple[str, int]] = deque()
        self.visited: Set[str] = set()
        self.queued: Set[str] = set()
        self.pages: List[CrawledPage] = []
        self.sitemaps: List[str] = []
        self._client = client

    # ------------------------------------------------------------------
    # Frontier
    # ------------------------------------------------------------------
    def is_seen(self, url: str) -> bool:
        return url in self.visited or url in self.queued

    def enqueue(self, url: str, depth: int) -> bool:
        """Append *url* to the frontier unless seen or deeper than allowed."""
        if depth > self.max_depth or self.is_seen(url):
            return False
        self.frontier.append((url, depth))
        self.queued.add(url)
        return True

    def _enqueue_links(self, links: Iterable[ExtractedLink], depth: int) -> None:
        fresh: List[str] = []
        for link in links:
            if len(fresh) >= self.max_links_per_page:
                break
            if not link.is_internal or link.href in fresh or self.is_seen(link.href):
                continue
            fresh.append(link.href)
        for href in fresh:
            self.enqueue(href, depth)

    @property
    def budget_left(self) -> int:
        return max(self.max_pages - len(self.visited), 0)

    # ------------------------------------------------------------------
    # Fetch + record
    # ------------------------------------------------------------------
    async def _visit(
        self, client: httpx.AsyncClient, url: str, depth: int
    ) -> Optional[CrawledPage]:
        self.visited.add(url)
        if settings.rate_limit_delay > 0:
            await asyncio.sleep(settings.rate_limit_delay)

        try:
            fetched = await fetch_page(client, url)
        except FetchError as exc:
            print(f"[CRAWL] ✗ Failed to crawl {url}: {exc}")
            return None

        soup = clean_html(fetched.html, keep_structured_data=True)
        title = extract_title(soup)
        text = page_text(soup)
        word_count = len(text.split())

        page = CrawledPage(
            url=url,
            title=title,
            raw_content=text[: settings.max_content_chars],
            html=str(soup),
            status_code=fetched.status_code,
            depth=depth,
            load_time_ms=fetched.load_time_ms,
            word_count=word_count,
        )
        self.pages.append(page)
        print(f"[CRAWL] ✓ {url} ({title[:40]}) - {word_count} words")

        if len(self.visited) < self.max_pages:
            self._enqueue_links(extract_links(soup, url, self.seed_host), depth + 1)
        return page

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------
    async def _seed(self, client: httpx.AsyncClient) -> None:
        self.state = CrawlState.SEEDING
        if await self._visit(client, self.seed_url, 0) is None:
            raise CrawlError(f"Seed URL could not be crawled: {self.seed_url}")

        discovery = await discover_sitemap(client, self.origin)
        if discovery.sitemap_url:
            self.sitemaps.append(discovery.sitemap_url)
        for url in discovery.urls[: self.budget_left]:
            self.enqueue(url, 1)

    async def _drain(self, client: httpx.AsyncClient) -> None:
        self.state = CrawlState.DRAINING
        while self.frontier and len(self.visited) < self.max_pages:
            url, depth = self.frontier.popleft()
            self.queued.discard(url)
            if url in self.visited or depth > self.max_depth:
                continue
            if hostname(url) != self.seed_host:
                continue
            await self._visit(client, url, depth)

    async def run(self) -> CrawlResult:
        """Run the crawl to completion and return its :class:`CrawlResult`.

        Raises:
            CrawlError: If the seed page itself cannot be fetched.
            RuntimeError: If the session has already been run.
        """
        if self.state is not CrawlState.IDLE:
            raise RuntimeError("A CrawlSession can only be run once.")

        print(f"[CRAWL] Starting crawl of {self.seed_url}")
        print(f"[CRAWL] Max pages: {self.max_pages}, max depth: {self.max_depth}")
        start = time.perf_counter()

        if self._client is not None:
            await self._seed(self._client)
            await self._drain(self._client)
        else:
            async with build_client() as client:
                await self._seed(client)
                await self._drain(client)

        self.state = CrawlState.DONE
        duration = int((time.perf_counter() - start) * 1000)
        print(f"[CRAWL] Crawl complete: {len(self.pages)} page(s) in {duration}ms")

        first = self.pages[0] if self.pages else None
        return CrawlResult(
            url=self.seed_url,
            title=first.title if first else "Website",
            description=_describe(first),
            pages=list(self.pages),
            total_pages=len(self.pages),
            crawled_at=int(time.time() * 1000),
            duration=duration,
            sitemaps=list(self.sitemaps),
        )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

async def crawl_site_async(
    seed_url: str,
    *,
    max_pages: Optional[int] = None,
    max_depth: Optional[int] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> CrawlResult:
    """Crawl *seed_url* breadth-first within the page and depth budget.

    Args:
        seed_url: Absolute http(s) URL; its host is the internal boundary.
        max_pages: Maximum URLs to visit, seed included (default 50).
        max_depth: Maximum link hops from the seed (default 3).
        client: Optional pre-built client; the caller keeps ownership.

    Raises:
        CrawlError: If the seed URL is invalid or cannot be fetched.
    """
    session = CrawlSession(
        seed_url, max_pages=max_pages, max_depth=max_depth, client=client
    )
    return await session.run()


def crawl_site(
    seed_url: str,
    *,
    max_pages: Optional[int] = None,
    max_depth: Optional[int] = None,
) -> CrawlResult:
    """Synchronous wrapper for :func:`crawl_site_async`."""
    return asyncio.run(
        crawl_site_async(seed_url, max_pages=max_pages, max_depth=max_depth)
    )
