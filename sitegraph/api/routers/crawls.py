"""Crawl endpoints.

Routes
------
POST /crawls                     Body: {"url": "https://...", "max_pages": 20}
GET  /crawls                     Summaries of every saved crawl, newest first
GET  /crawls/{id}                Full CrawlResult
GET  /crawls/{id}/link-map       LinkMap
GET  /crawls/{id}/schema         SchemaAnalysis
GET  /crawls/{id}/metrics        Link-graph headline numbers
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Any, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field, field_validator

from sitegraph.analysis.links import link_map_metrics
from sitegraph.crawler.engine import CrawlError
from sitegraph.crawler.urls import origin_of
from sitegraph.pipeline import run_site_analysis_async
from sitegraph.store.crawls import (
    CrawlNotFoundError,
    build_summary,
    list_crawls,
    load_crawl_result,
    load_link_map,
    load_schema_analysis,
)

router = APIRouter()


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

class CrawlRequest(BaseModel):
    """The seed URL is kept exactly as sent; it is the crawl's dedup key."""

    url: str
    max_pages: Optional[int] = Field(default=None, ge=1)
    max_depth: Optional[int] = Field(default=None, ge=0)

    @field_validator("url")
    @classmethod
    def check_absolute_http_url(cls, value: str) -> str:
        origin_of(value)
        return value


class CrawlSummary(BaseModel):
    crawl_id: str
    url: str
    title: str
    description: str
    total_pages: int
    crawled_at: int
    duration: int
    orphan_pages: int
    broken_links: int
    schema_types: int
    gaps: int


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _not_found(crawl_id: str, exc: Exception) -> HTTPException:
    return HTTPException(status_code=404, detail=f"Crawl '{crawl_id}' not found: {exc}")


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post("", response_model=CrawlSummary, status_code=201)
async def create_crawl_endpoint(body: CrawlRequest) -> dict[str, Any]:
    """Crawl the site, analyse it, save the results and return the summary."""
    try:
        analysis = await run_site_analysis_async(
            body.url, max_pages=body.max_pages, max_depth=body.max_depth
        )
    except CrawlError as exc:
        raise HTTPException(status_code=502, detail=f"Crawl failed: {exc}") from exc
    return build_summary(
        analysis.crawl_id, analysis.crawl, analysis.link_map, analysis.schema
    )


@router.get("", response_model=list[CrawlSummary])
def list_crawls_endpoint() -> list[dict[str, Any]]:
    return list_crawls()


@router.get("/{crawl_id}", response_model=dict[str, Any])
def get_crawl_endpoint(crawl_id: str) -> dict[str, Any]:
    try:
        return asdict(load_crawl_result(crawl_id))
    except CrawlNotFoundError as exc:
        raise _not_found(crawl_id, exc) from exc


@router.get("/{crawl_id}/link-map", response_model=dict[str, Any])
def get_link_map_endpoint(crawl_id: str) -> dict[str, Any]:
    try:
        return asdict(load_link_map(crawl_id))
    except CrawlNotFoundError as exc:
        raise _not_found(crawl_id, exc) from exc


@router.get("/{crawl_id}/schema", response_model=dict[str, Any])
def get_schema_endpoint(crawl_id: str) -> dict[str, Any]:
    try:
        return asdict(load_schema_analysis(crawl_id))
    except CrawlNotFoundError as exc:
        raise _not_found(crawl_id, exc) from exc


@router.get("/{crawl_id}/metrics", response_model=dict[str, int])
def get_metrics_endpoint(crawl_id: str) -> dict[str, int]:
    """Counts derived from the saved link map."""
    try:
        return link_map_metrics(load_link_map(crawl_id))
    except CrawlNotFoundError as exc:
        raise _not_found(crawl_id, exc) from exc
