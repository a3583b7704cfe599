"""Link graph derivation over a completed crawl.

:func:`build_link_map` is a pure function: for the same pages and per-page
links it always returns the same :class:`LinkMap`, ordered by the page list
and by link discovery order within each page.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Set

from sitegraph.analysis.models import LinkMap, SitePage
from sitegraph.crawler.models import CrawledPage, ExtractedLink


# ---------------------------------------------------------------------------
# URL-structure helpers
# ---------------------------------------------------------------------------

def structure_depth(url: str) -> int:
    """Number of non-empty ``/``-separated parts of *url*, minus one.

    Scheme and host count as parts, so ``https://x.com/`` is 1 and
    ``https://x.com/blog/post`` is 3.
    """
    return len([part for part in url.split("/") if part]) - 1


def _base(url: str) -> str:
    return url.rstrip("/")


def is_descendant(url: str, ancestor: str) -> bool:
    """``True`` if *url* strictly extends *ancestor* at a ``/`` boundary."""
    child, parent = _base(url), _base(ancestor)
    return child != parent and child.startswith(parent + "/")


def _find_parent(url: str, candidates: Sequence[str]) -> Optional[str]:
    best: Optional[str] = None
    for candidate in candidates:
        if candidate == url or not is_descendant(url, candidate):
            continue
        if best is None or len(_base(candidate)) > len(_base(best)):
            best = candidate
    return best


def build_site_structure(pages: Sequence[CrawledPage]) -> List[SitePage]:
    """Arrange *pages* into a forest keyed by URL path prefix."""
    ordered = sorted(_unique(pages), key=lambda p: structure_depth(p.url))
    urls = [p.url for p in ordered]

    structure: List[SitePage] = []
    for page in ordered:
        structure.append(
            SitePage(
                url=page.url,
                title=page.title,
                depth=structure_depth(page.url),
                parent=_find_parent(page.url, urls),
                children=[u for u in urls if is_descendant(u, page.url)],
            )
        )
    return structure


def _unique(pages: Iterable[CrawledPage]) -> List[CrawledPage]:
    seen: Set[str] = set()
    out: List[CrawledPage] = []
    for page in pages:
        if page.url not in seen:
            seen.add(page.url)
            out.append(page)
    return out


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def build_link_map(
    pages: Sequence[CrawledPage],
    per_page_links: Mapping[str, Sequence[ExtractedLink]],
    sitemaps: Iterable[str] = (),
) -> LinkMap:
    """Derive the site's :class:`LinkMap` from a completed crawl.

    Args:
        pages: Crawled pages in crawl order.
        per_page_links: Links extracted from each page, keyed by page URL.
            Entries for URLs that are not crawled pages are ignored.
        sitemaps: Sitemap URLs found during the crawl.

    Returns:
        Internal/external adjacency (duplicates kept), broken links (internal
        targets never crawled), orphan pages (no inbound internal link from
        another crawled page) and the URL-structure hierarchy.
    """
    unique_pages = _unique(pages)
    crawled = {p.url for p in unique_pages}

    internal: Dict[str, List[str]] = {}
    external: Dict[str, List[str]] = {}
    incoming: Dict[str, Set[str]] = {}

    for page in unique_pages:
        for link in per_page_links.get(page.url, ()):
            if link.is_internal:
                internal.setdefault(page.url, []).append(link.href)
                if link.href != page.url:
                    incoming.setdefault(link.href, set()).add(page.url)
            elif link.is_external:
                external.setdefault(page.url, []).append(link.href)

    orphans = [p.url for p in unique_pages if not incoming.get(p.url)]

    broken: List[str] = []
    seen_broken: Set[str] = set()
    for targets in internal.values():
        for target in targets:
            if target not in crawled and target not in seen_broken:
                seen_broken.add(target)
                broken.append(target)

    return LinkMap(
        internal_links=internal,
        external_links=external,
        sitemaps=list(dict.fromkeys(sitemaps)),
        broken_links=broken,
        orphan_pages=orphans,
        site_structure=build_site_structure(unique_pages),
    )


def link_map_metrics(link_map: LinkMap) -> Dict[str, Any]:
    """Headline counts for a :class:`LinkMap`."""
    unique_internal = {t for targets in link_map.internal_links.values() for t in targets}
    unique_external = {t for targets in link_map.external_links.values() for t in targets}
    return {
        "total_internal_links": sum(len(v) for v in link_map.internal_links.values()),
        "total_external_links": sum(len(v) for v in link_map.external_links.values()),
        "unique_internal_urls": len(unique_internal),
        "unique_external_urls": len(unique_external),
        "orphan_pages": len(link_map.orphan_pages),
        "broken_links": len(link_map.broken_links),
        "sitemaps": len(link_map.sitemaps),
    }
