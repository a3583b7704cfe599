"""Analysis package: link graph and schema.org markup over a completed crawl."""

from sitegraph.analysis.links import build_link_map, link_map_metrics
from sitegraph.analysis.models import LinkMap, SchemaAnalysis, SitePage
from sitegraph.analysis.schema import analyze_schema

__all__ = [
    "build_link_map",
    "link_map_metrics",
    "analyze_schema",
    "LinkMap",
    "SchemaAnalysis",
    "SitePage",
]
