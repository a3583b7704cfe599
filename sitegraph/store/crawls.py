"""Flat-file persistence for saved crawls.

Each saved crawl lives in ``settings.crawls_dir / <crawl_id>/``:

    crawl-result.json     the CrawlResult, pages in crawl order
    link-map.json         the LinkMap
    schema-analysis.json  the SchemaAnalysis
    summary.json          headline numbers for listings
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Dict, List

from sitegraph.analysis.links import link_map_metrics
from sitegraph.analysis.models import LinkMap, SchemaAnalysis
from sitegraph.config import settings
from sitegraph.crawler.models import CrawlResult
from sitegraph.store.codec import (
    crawl_result_from_dict,
    crawl_result_to_dict,
    link_map_from_dict,
    link_map_to_dict,
    schema_analysis_from_dict,
    schema_analysis_to_dict,
)

CRAWL_RESULT_FILE = "crawl-result.json"
LINK_MAP_FILE = "link-map.json"
SCHEMA_FILE = "schema-analysis.json"
SUMMARY_FILE = "summary.json"

_CRAWL_ID_RE = re.compile(r"^[A-Za-z0-9_-]+$")


class CrawlNotFoundError(FileNotFoundError):
    """No saved crawl (or no such file within it) for the given id."""


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _crawl_dir(crawl_id: str) -> Path:
    if not _CRAWL_ID_RE.match(crawl_id or ""):
        raise CrawlNotFoundError(f"Invalid crawl id: {crawl_id!r}")
    return settings.crawls_dir / crawl_id


def _write_json(path: Path, data: Any) -> None:
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")


def _read_json(crawl_id: str, filename: str) -> Dict[str, Any]:
    path = _crawl_dir(crawl_id) / filename
    if not path.exists():
        raise CrawlNotFoundError(f"Crawl {crawl_id!r} has no {filename}")
    return json.loads(path.read_text(encoding="utf-8"))


def build_summary(
    crawl_id: str,
    result: CrawlResult,
    link_map: LinkMap,
    schema: SchemaAnalysis,
) -> Dict[str, Any]:
    """Headline numbers for one analysed crawl."""
    metrics = link_map_metrics(link_map)
    return {
        "crawl_id": crawl_id,
        "url": result.url,
        "title": result.title,
        "description": result.description,
        "total_pages": result.total_pages,
        "crawled_at": result.crawled_at,
        "duration": result.duration,
        "orphan_pages": metrics["orphan_pages"],
        "broken_links": metrics["broken_links"],
        "schema_types": len(schema.schema_types),
        "gaps": len(schema.gaps),
    }


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def save_analysis(
    crawl_id: str,
    result: CrawlResult,
    link_map: LinkMap,
    schema: SchemaAnalysis,
) -> Path:
    """Write all four JSON files for *crawl_id* and return its directory."""
    directory = _crawl_dir(crawl_id)
    directory.mkdir(parents=True, exist_ok=True)

    _write_json(directory / CRAWL_RESULT_FILE, crawl_result_to_dict(result))
    _write_json(directory / LINK_MAP_FILE, link_map_to_dict(link_map))
    _write_json(directory / SCHEMA_FILE, schema_analysis_to_dict(schema))
    _write_json(
        directory / SUMMARY_FILE, build_summary(crawl_id, result, link_map, schema)
    )
    return directory


def load_crawl_result(crawl_id: str) -> CrawlResult:
    return crawl_result_from_dict(_read_json(crawl_id, CRAWL_RESULT_FILE))


def load_link_map(crawl_id: str) -> LinkMap:
    return link_map_from_dict(_read_json(crawl_id, LINK_MAP_FILE))


def load_schema_analysis(crawl_id: str) -> SchemaAnalysis:
    return schema_analysis_from_dict(_read_json(crawl_id, SCHEMA_FILE))


def load_summary(crawl_id: str) -> Dict[str, Any]:
    return _read_json(crawl_id, SUMMARY_FILE)


def list_crawls() -> List[Dict[str, Any]]:
    """Return the summary of every saved crawl, newest first."""
    if not settings.crawls_dir.exists():
        return []
    summaries: List[Dict[str, Any]] = []
    for directory in settings.crawls_dir.iterdir():
        summary_path = directory / SUMMARY_FILE
        if directory.is_dir() and summary_path.exists():
            summaries.append(json.loads(summary_path.read_text(encoding="utf-8")))
    return sorted(summaries, key=lambda s: s.get("crawled_at", 0), reverse=True)
