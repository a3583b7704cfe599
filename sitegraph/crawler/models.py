"""Data models for the crawler pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class FetchedPage:
    """The raw HTTP response for a single URL fetch."""

    url: str
    html: str
    status_code: int
    load_time_ms: int
    final_url: str = ""


@dataclass(frozen=True)
class CrawledPage:
    """One fetched document, recorded exactly once per URL per crawl.

    ``depth`` is the BFS hop count from the seed at which the URL was first
    enqueued.  ``html`` is the document after noise stripping.
    """

    url: str
    title: str
    raw_content: str
    html: str
    status_code: int
    depth: int
    load_time_ms: int
    word_count: int


@dataclass(frozen=True)
class CrawlResult:
    """Final, immutable output of one crawl invocation."""

    url: str
    title: str
    description: str
    pages: List[CrawledPage] = field(default_factory=list)
    total_pages: int = 0
    crawled_at: int = 0
    duration: int = 0
    sitemaps: List[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Extraction output
# ---------------------------------------------------------------------------

@dataclass
class ExtractedLink:
    href: str
    text: str
    is_internal: bool
    is_external: bool
    title: Optional[str] = None


@dataclass
class Heading:
    level: int
    text: str
    id: str


@dataclass
class TableData:
    headers: List[str] = field(default_factory=list)
    rows: List[List[str]] = field(default_factory=list)


@dataclass
class ImageInfo:
    src: str
    alt: str
    title: Optional[str] = None


@dataclass
class PageMetadata:
    """SEO and social metadata; every field is ``None`` when its tag is absent."""

    description: Optional[str] = None
    keywords: Optional[List[str]] = None
    author: Optional[str] = None
    canonical: Optional[str] = None
    og_title: Optional[str] = None
    og_description: Optional[str] = None
    og_image: Optional[str] = None
    twitter_card: Optional[str] = None
    robots: Optional[str] = None


@dataclass
class ExtractedContent:
    """Structured content pulled out of one page's cleaned HTML."""

    page_url: str
    title: str
    headings: List[Heading] = field(default_factory=list)
    paragraphs: List[str] = field(default_factory=list)
    lists: List[str] = field(default_factory=list)
    tables: List[TableData] = field(default_factory=list)
    images: List[ImageInfo] = field(default_factory=list)
    code_blocks: List[str] = field(default_factory=list)
    links: List[ExtractedLink] = field(default_factory=list)
    metadata: PageMetadata = field(default_factory=PageMetadata)
