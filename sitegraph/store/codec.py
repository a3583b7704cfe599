"""Dict <-> dataclass conversion for everything the JSON store persists.

``*_to_dict`` output is plain JSON-compatible data; ``*_from_dict`` rebuilds
an equal object, preserving page and link order.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

from sitegraph.analysis.models import (
    LinkMap,
    RichResult,
    SchemaAnalysis,
    SchemaGap,
    SchemaType,
    SitePage,
)
from sitegraph.crawler.models import CrawledPage, CrawlResult


def crawl_result_to_dict(result: CrawlResult) -> Dict[str, Any]:
    return asdict(result)


def crawl_result_from_dict(data: Dict[str, Any]) -> CrawlResult:
    return CrawlResult(
        url=data["url"],
        title=data["title"],
        description=data["description"],
        pages=[CrawledPage(**page) for page in data.get("pages", [])],
        total_pages=data.get("total_pages", 0),
        crawled_at=data.get("crawled_at", 0),
        duration=data.get("duration", 0),
        sitemaps=list(data.get("sitemaps", [])),
    )


def link_map_to_dict(link_map: LinkMap) -> Dict[str, Any]:
    return asdict(link_map)


def link_map_from_dict(data: Dict[str, Any]) -> LinkMap:
    return LinkMap(
        internal_links={k: list(v) for k, v in data.get("internal_links", {}).items()},
        external_links={k: list(v) for k, v in data.get("external_links", {}).items()},
        sitemaps=list(data.get("sitemaps", [])),
        broken_links=list(data.get("broken_links", [])),
        orphan_pages=list(data.get("orphan_pages", [])),
        site_structure=[SitePage(**page) for page in data.get("site_structure", [])],
    )


def schema_analysis_to_dict(analysis: SchemaAnalysis) -> Dict[str, Any]:
    return asdict(analysis)


def schema_analysis_from_dict(data: Dict[str, Any]) -> SchemaAnalysis:
    return SchemaAnalysis(
        schema_types=[SchemaType(**s) for s in data.get("schema_types", [])],
        missing_schemas=list(data.get("missing_schemas", [])),
        rich_results=[RichResult(**r) for r in data.get("rich_results", [])],
        gaps=[SchemaGap(**g) for g in data.get("gaps", [])],
    )
