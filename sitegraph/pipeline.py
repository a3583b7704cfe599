"""Site analysis pipeline.

``run_site_analysis_async`` orchestrates the full pipeline from a seed URL to
a saved analysis:

    crawl → extract every page → link map → schema analysis → save JSON

The crawl is network-bound and runs on the event loop; the rest is
:func:`analyse_crawl`, which runs in a worker thread.
"""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import httpx

from sitegraph.analysis.links import build_link_map, link_map_metrics
from sitegraph.analysis.models import LinkMap, SchemaAnalysis
from sitegraph.analysis.schema import analyze_schema
from sitegraph.config import settings
from sitegraph.crawler.engine import crawl_site_async
from sitegraph.crawler.extractor import convert_to_markdown, extract_content
from sitegraph.crawler.fetcher import build_client, fetch_page
from sitegraph.crawler.models import CrawledPage, CrawlResult, ExtractedContent, ExtractedLink
from sitegraph.store.crawls import save_analysis


@dataclass
class SiteAnalysis:
    crawl_id: str
    crawl: CrawlResult
    extracted: List[ExtractedContent] = field(default_factory=list)
    link_map: LinkMap = field(default_factory=LinkMap)
    schema: SchemaAnalysis = field(default_factory=SchemaAnalysis)


def extract_pages(pages: Sequence[CrawledPage], origin: str) -> List[ExtractedContent]:
    """Run the content extractor over every crawled page.

    A page whose extraction raises is reported and skipped; the rest of the
    batch carries on.
    """
    print(f"[EXTRACT] Processing {len(pages)} page(s)")
    extracted: List[ExtractedContent] = []
    for page in pages:
        try:
            extracted.append(extract_content(page.html, page.url, origin=origin))
        except Exception as exc:
            print(f"[EXTRACT] ✗ Failed to extract {page.url}: {exc}")
            continue
        if len(extracted) % 10 == 0:
            print(f"[EXTRACT] Processed {len(extracted)}/{len(pages)} pages")
    print(f"[EXTRACT] Extraction complete: {len(extracted)} page(s)")
    return extracted


def analyse_crawl(crawl: CrawlResult, origin: str, *, save: bool = True) -> SiteAnalysis:
    """Extract, map links, analyse schema markup and optionally save *crawl*.

    Pure CPU and disk work; the async pipeline runs it in a worker thread.
    """
    extracted = extract_pages(crawl.pages, origin=origin)
    per_page_links: Dict[str, List[ExtractedLink]] = {
        content.page_url: content.links for content in extracted
    }

    print(f"[LINKS] Mapping links across {len(extracted)} page(s)")
    link_map = build_link_map(crawl.pages, per_page_links, crawl.sitemaps)
    metrics = link_map_metrics(link_map)
    print(
        f"[LINKS] Internal: {metrics['unique_internal_urls']}  "
        f"External: {metrics['unique_external_urls']}  "
        f"Orphans: {metrics['orphan_pages']}  Broken: {metrics['broken_links']}"
    )

    print(f"[SCHEMA] Analysing schema markup across {len(crawl.pages)} page(s)")
    schema = analyze_schema(crawl.pages, extracted)
    print(
        f"[SCHEMA] Types: {len(schema.schema_types)}  "
        f"Rich results: {sum(1 for r in schema.rich_results if r.detected)}  "
        f"Gaps: {len(schema.gaps)}"
    )

    analysis = SiteAnalysis(
        crawl_id=str(uuid.uuid4()),
        crawl=crawl,
        extracted=extracted,
        link_map=link_map,
        schema=schema,
    )

    if save:
        settings.ensure_workspace()
        directory = save_analysis(analysis.crawl_id, crawl, link_map, schema)
        print(f"[PIPELINE] Analysis saved to: {directory}")

    return analysis


async def run_site_analysis_async(
    url: str,
    *,
    max_pages: Optional[int] = None,
    max_depth: Optional[int] = None,
    save: bool = True,
    client: Optional[httpx.AsyncClient] = None,
) -> SiteAnalysis:
    """Crawl *url* and derive its link map and schema analysis.

    Only the crawl runs on the event loop; everything after it goes through
    :func:`analyse_crawl` in a worker thread.

    Args:
        url: Seed URL of the site.
        max_pages: Page budget (defaults to ``settings.max_pages``).
        max_depth: Depth budget (defaults to ``settings.max_depth``).
        save: Persist the four JSON files under ``settings.crawls_dir``.
        client: Optional pre-built HTTP client, passed to the crawler.

    Raises:
        CrawlError: If the seed page cannot be crawled.
    """
    crawl = await crawl_site_async(
        url, max_pages=max_pages, max_depth=max_depth, client=client
    )
    return await asyncio.to_thread(analyse_crawl, crawl, url, save=save)


def run_site_analysis(
    url: str,
    *,
    max_pages: Optional[int] = None,
    max_depth: Optional[int] = None,
    save: bool = True,
) -> SiteAnalysis:
    """Synchronous wrapper for :func:`run_site_analysis_async`."""
    return asyncio.run(
        run_site_analysis_async(url, max_pages=max_pages, max_depth=max_depth, save=save)
    )


def _extract_with_markdown(html: str, url: str) -> Tuple[ExtractedContent, str]:
    return extract_content(html, url), convert_to_markdown(html, url)


async def fetch_and_extract_async(url: str) -> Tuple[ExtractedContent, str]:
    """Fetch one page and return its structured content and markdown.

    Raises:
        FetchError: If the page cannot be fetched.
    """
    async with build_client() as client:
        fetched = await fetch_page(client, url)
    return await asyncio.to_thread(_extract_with_markdown, fetched.html, url)


def fetch_and_extract(url: str) -> Tuple[ExtractedContent, str]:
    """Synchronous wrapper for :func:`fetch_and_extract_async`."""
    return asyncio.run(fetch_and_extract_async(url))
