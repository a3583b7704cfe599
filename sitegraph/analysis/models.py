"""Dataclass models produced by the analysis phase.

These are plain Python objects.  The JSON store serialises / deserialises
to and from these types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass
class SitePage:
    """A node of the URL-structure hierarchy.

    ``depth`` counts URL segments, it is *not* the crawl's BFS depth.
    """

    url: str
    title: str
    depth: int
    parent: Optional[str] = None
    children: List[str] = field(default_factory=list)


@dataclass
class LinkMap:
    internal_links: Dict[str, List[str]] = field(default_factory=dict)
    external_links: Dict[str, List[str]] = field(default_factory=dict)
    sitemaps: List[str] = field(default_factory=list)
    broken_links: List[str] = field(default_factory=list)
    orphan_pages: List[str] = field(default_factory=list)
    site_structure: List[SitePage] = field(default_factory=list)


@dataclass
class SchemaType:
    type: str
    url: str
    properties: List[str] = field(default_factory=list)


@dataclass
class RichResult:
    type: str
    detected: bool
    valid: bool


@dataclass
class SchemaGap:
    recommended: str
    importance: str  # high | medium | low
    reason: str


@dataclass
class SchemaAnalysis:
    schema_types: List[SchemaType] = field(default_factory=list)
    missing_schemas: List[str] = field(default_factory=list)
    rich_results: List[RichResult] = field(default_factory=list)
    gaps: List[SchemaGap] = field(default_factory=list)
