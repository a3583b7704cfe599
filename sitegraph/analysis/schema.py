"""schema.org markup detection, rich-result eligibility and gap analysis."""

from __future__ import annotations

import json
import re
from dataclasses import replace
from typing import Any, Dict, List, Sequence, Set

from bs4 import BeautifulSoup, Tag

from sitegraph.analysis.models import RichResult, SchemaAnalysis, SchemaGap, SchemaType
from sitegraph.crawler.models import CrawledPage, ExtractedContent

_SCHEMA_PREFIX = re.compile(r"^https?://schema\.org/", re.IGNORECASE)

RECOMMENDED_SCHEMAS: Dict[str, SchemaGap] = {
    "organization": SchemaGap("Organization", "high", "Essential for brand visibility and knowledge panel"),
    "website": SchemaGap("WebSite", "high", "Required for search console and sitelinks"),
    "breadcrumb_list": SchemaGap("BreadcrumbList", "high", "Improves navigation and SERP appearance"),
    "local_business": SchemaGap("LocalBusiness", "medium", "Critical for local SEO if you have a physical location"),
    "product": SchemaGap("Product", "medium", "Enables rich product snippets in search"),
    "faq": SchemaGap("FAQPage", "medium", "Generates rich results with expanded snippets"),
    "article": SchemaGap("Article", "medium", "Enables rich results for blog posts and news"),
    "video": SchemaGap("VideoObject", "low", "Enables video rich results"),
    "review": SchemaGap("Review", "low", "Shows star ratings in search results"),
    "how_to": SchemaGap("HowTo", "low", "Creates step-by-step rich results"),
    "person": SchemaGap("Person", "medium", "Important for personal brands and team pages"),
    "contact_page": SchemaGap("ContactPage", "medium", "Helps search engines understand contact information"),
    "about_page": SchemaGap("AboutPage", "medium", "Provides organizational information"),
    "service": SchemaGap("Service", "medium", "Enables service-rich results"),
}

# Rich result type -> schema types that make a page eligible for it.
RICH_RESULT_TYPES: List[tuple[str, tuple[str, ...]]] = [
    ("Organization", ("Organization", "Corporation", "LocalBusiness")),
    ("WebSite", ("WebSite",)),
    ("BreadcrumbList", ("BreadcrumbList",)),
    ("FAQPage", ("FAQPage",)),
    ("Article", ("Article", "BlogPosting", "NewsArticle")),
    ("Product", ("Product",)),
    ("Review", ("Review", "AggregateRating")),
    ("Recipe", ("Recipe",)),
    ("VideoObject", ("VideoObject",)),
    ("Course", ("Course",)),
    ("Event", ("Event",)),
    ("HowTo", ("HowTo",)),
    ("JobPosting", ("JobPosting",)),
    ("SoftwareApplication", ("SoftwareApplication",)),
    ("Book", ("Book",)),
    ("Movie", ("Movie",)),
    ("Person", ("Person",)),
]

_IMPORTANCE_ORDER = {"high": 0, "medium": 1, "low": 2}

# Content signal -> (gap key, schema type that already covers it)
_CONTENT_GAPS = [
    ("about", "about_page", "aboutpage"),
    ("contact", "contact_page", "contactpage"),
    ("product", "product", "product"),
    ("service", "service", "service"),
    ("faq", "faq", "faqpage"),
    ("article", "article", "article"),
    ("review", "review", "review"),
    ("person", "person", "person"),
]


# ---------------------------------------------------------------------------
# Detection
# ---------------------------------------------------------------------------

def _clean_type(raw: Any) -> str:
    if isinstance(raw, list):
        raw = raw[0] if raw else ""
    return _SCHEMA_PREFIX.sub("", str(raw))


def _walk_json_ld(
    data: Any, url: str, seen: Set[str], found: List[SchemaType]
) -> None:
    if isinstance(data, list):
        for item in data:
            _walk_json_ld(item, url, seen, found)
        return
    if not isinstance(data, dict):
        return

    if data.get("@type"):
        schema_type = _clean_type(data["@type"])
        if schema_type and schema_type not in seen:
            seen.add(schema_type)
            found.append(
                SchemaType(
                    type=schema_type,
                    url=url,
                    properties=[k for k in data if not k.startswith("@")],
                )
            )

    graph = data.get("@graph")
    if isinstance(graph, list):
        for item in graph:
            _walk_json_ld(item, url, seen, found)


def _microdata_properties(element: Tag) -> List[str]:
    props: List[str] = []
    for child in element.find_all(attrs={"itemprop": True}):
        prop = child.get("itemprop")
        if prop and prop not in props:
            props.append(prop)
    return props


def detect_schema_types(pages: Sequence[CrawledPage]) -> List[SchemaType]:
    """Return each distinct schema.org type found across *pages*.

    A type is recorded once, against the first page it appears on.  JSON-LD
    blocks that fail to parse are skipped.
    """
    seen: Set[str] = set()
    found: List[SchemaType] = []

    for page in pages:
        soup = BeautifulSoup(page.html or "", "html.parser")

        for script in soup.find_all("script", attrs={"type": "application/ld+json"}):
            try:
                data = json.loads(script.string or script.get_text() or "")
            except json.JSONDecodeError:
                continue
            _walk_json_ld(data, page.url, seen, found)

        for element in soup.find_all(attrs={"itemscope": True}):
            item_type = element.get("itemtype")
            if not item_type:
                continue
            schema_type = _clean_type(item_type)
            if schema_type not in seen:
                seen.add(schema_type)
                found.append(
                    SchemaType(
                        type=schema_type,
                        url=page.url,
                        properties=_microdata_properties(element),
                    )
                )

    return found


def detect_rich_results(schema_types: Sequence[SchemaType]) -> List[RichResult]:
    present = {s.type.lower() for s in schema_types}
    results: List[RichResult] = []
    for result_type, accepted in RICH_RESULT_TYPES:
        detected = any(a.lower() in present for a in accepted)
        results.append(RichResult(type=result_type, detected=detected, valid=detected))
    return results


def _content_signals(extracted: Sequence[ExtractedContent]) -> Set[str]:
    signals: Set[str] = set()
    for content in extracted:
        title = (content.title or "").lower()
        body = " ".join(content.paragraphs).lower()

        if "about" in title or "about us" in body:
            signals.add("about")
        if "contact" in title or "contact" in body:
            signals.add("contact")
        if "product" in title or "product" in body:
            signals.add("product")
        if "service" in title or "service" in body:
            signals.add("service")
        if "faq" in title or "frequently asked" in body:
            signals.add("faq")
        if "blog" in title or "news" in title or "article" in title:
            signals.add("article")
        if "review" in body or "testimonial" in body:
            signals.add("review")
        if "team" in title or "person" in title:
            signals.add("person")
    return signals


def identify_gaps(
    schema_types: Sequence[SchemaType], extracted: Sequence[ExtractedContent]
) -> List[SchemaGap]:
    """Recommend schema types the site's content suggests but its markup lacks.

    Organization, WebSite and BreadcrumbList are always recommended when
    absent.  The result is ordered high → medium → low importance.
    """
    existing = {s.type.lower() for s in schema_types}
    signals = _content_signals(extracted)
    gaps: List[SchemaGap] = []

    for signal, key, covered_by in _CONTENT_GAPS:
        if signal in signals and covered_by not in existing:
            gaps.append(replace(RECOMMENDED_SCHEMAS[key]))

    for key, covered_by in (
        ("organization", "organization"),
        ("website", "website"),
        ("breadcrumb_list", "breadcrumblist"),
    ):
        if covered_by not in existing:
            gaps.append(replace(RECOMMENDED_SCHEMAS[key]))

    return sorted(gaps, key=lambda g: _IMPORTANCE_ORDER[g.importance])


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def analyze_schema(
    pages: Sequence[CrawledPage], extracted: Sequence[ExtractedContent]
) -> SchemaAnalysis:
    """Run detection, rich-result eligibility and gap analysis in one pass."""
    schema_types = detect_schema_types(pages)
    gaps = identify_gaps(schema_types, extracted)
    return SchemaAnalysis(
        schema_types=schema_types,
        missing_schemas=[g.recommended for g in gaps],
        rich_results=detect_rich_results(schema_types),
        gaps=gaps,
    )
