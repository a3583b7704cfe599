"""Crawler package: site crawl, page fetch & content extraction."""

from sitegraph.crawler.engine import CrawlError, CrawlSession, crawl_site, crawl_site_async
from sitegraph.crawler.extractor import convert_to_markdown, extract_content
from sitegraph.crawler.fetcher import FetchError, fetch_page
from sitegraph.crawler.models import CrawledPage, CrawlResult, ExtractedContent, ExtractedLink

__all__ = [
    "crawl_site",
    "crawl_site_async",
    "CrawlSession",
    "CrawlError",
    "fetch_page",
    "FetchError",
    "extract_content",
    "convert_to_markdown",
    "CrawledPage",
    "CrawlResult",
    "ExtractedContent",
    "ExtractedLink",
]
