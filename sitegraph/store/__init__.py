"""Store package: flat JSON persistence of crawls and their analyses."""

from sitegraph.store.crawls import (
    CrawlNotFoundError,
    list_crawls,
    load_crawl_result,
    load_link_map,
    load_schema_analysis,
    load_summary,
    save_analysis,
)

__all__ = [
    "CrawlNotFoundError",
    "save_analysis",
    "load_crawl_result",
    "load_link_map",
    "load_schema_analysis",
    "load_summary",
    "list_crawls",
]
