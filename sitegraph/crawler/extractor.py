"""Content extraction: turns raw page HTML into :class:`ExtractedContent`."""

from __future__ import annotations

import re
from typing import List, Optional

import trafilatura
from bs4 import BeautifulSoup, NavigableString, Tag

from sitegraph.crawler.models import (
    ExtractedContent,
    ExtractedLink,
    Heading,
    ImageInfo,
    PageMetadata,
    TableData,
)
from sitegraph.crawler.urls import hostname, is_internal, resolve_href

# Navigation, structural and ad noise removed before any extraction.
NOISE_SELECTORS: List[str] = [
    "script",
    "style",
    "nav",
    "footer",
    "header",
    "aside",
    ".nav",
    ".menu",
    ".sidebar",
    ".ad",
    ".advertisement",
    ".cookie",
    ".popup",
    ".modal",
]

_MIN_PARAGRAPH_CHARS = 20
_MIN_CODE_CHARS = 10
_SLUG_RE = re.compile(r"[^a-z0-9]+")


# ---------------------------------------------------------------------------
# Cleaning
# ---------------------------------------------------------------------------

def _is_structured_data(tag: Tag) -> bool:
    return tag.name == "script" and (tag.get("type") or "").lower() == "application/ld+json"


def clean_html(html: str, *, keep_structured_data: bool = False) -> BeautifulSoup:
    """Parse *html* into a fresh tree with noise elements removed.

    With *keep_structured_data* the JSON-LD ``<script>`` blocks survive so
    schema.org markup can still be analysed from the stored HTML.
    """
    soup = BeautifulSoup(html or "", "html.parser")
    for tag in soup.select(", ".join(NOISE_SELECTORS)):
        if tag.decomposed:
            continue
        if keep_structured_data and _is_structured_data(tag):
            continue
        tag.decompose()
    return soup


def _text(tag: Tag) -> str:
    """Return the tag's text with whitespace runs collapsed."""
    return " ".join(tag.get_text(" ").split())


def page_text(soup: BeautifulSoup) -> str:
    """Visible text of the ``<body>`` (or whole document), one text node per line.

    Only plain strings count: script/style bodies (including JSON-LD kept for
    schema analysis), comments and doctypes are skipped.
    """
    container = soup.body or soup
    parts = [
        s.strip()
        for s in container.find_all(string=True)
        if type(s) is NavigableString and s.parent.name not in ("script", "style")
    ]
    return "\n".join(p for p in parts if p)


# ---------------------------------------------------------------------------
# Field extractors
# ---------------------------------------------------------------------------

def _meta(soup: BeautifulSoup, **attrs: str) -> Optional[str]:
    tag = soup.find("meta", attrs=attrs)
    if tag is None:
        return None
    content = (tag.get("content") or "").strip()
    return content or None


def extract_title(soup: BeautifulSoup) -> str:
    """``<title>`` → first ``<h1>`` → ``og:title`` → ``"Untitled"``."""
    if soup.title is not None:
        title = _text(soup.title)
        if title:
            return title
    h1 = soup.find("h1")
    if h1 is not None:
        text = _text(h1)
        if text:
            return text
    return _meta(soup, property="og:title") or "Untitled"


def _slugify(text: str) -> str:
    return _SLUG_RE.sub("-", text.lower()).strip("-")


def extract_headings(soup: BeautifulSoup) -> List[Heading]:
    headings: List[Heading] = []
    counter = 0
    for tag in soup.find_all(["h1", "h2", "h3", "h4", "h5", "h6"]):
        text = _text(tag)
        if not text:
            continue
        slug = _slugify(text)
        if not slug:
            slug = f"heading-{counter}"
            counter += 1
        headings.append(Heading(level=int(tag.name[1]), text=text, id=slug))
    return headings


def extract_paragraphs(soup: BeautifulSoup) -> List[str]:
    paragraphs: List[str] = []
    for tag in soup.find_all("p"):
        text = _text(tag)
        if len(text) >= _MIN_PARAGRAPH_CHARS:
            paragraphs.append(text)
    return paragraphs


def extract_lists(soup: BeautifulSoup) -> List[str]:
    items: List[str] = []
    for li in soup.select("ul li, ol li"):
        text = _text(li)
        if text:
            items.append(text)
    return items


def extract_tables(soup: BeautifulSoup) -> List[TableData]:
    tables: List[TableData] = []
    for table in soup.find_all("table"):
        headers = [_text(cell) for cell in table.select("thead th, thead td")]
        if not headers:
            first_row = table.find("tr")
            if first_row is not None:
                headers = [_text(th) for th in first_row.find_all("th", recursive=False)]

        rows: List[List[str]] = []
        for tr in table.find_all("tr"):
            if tr.find_parent("thead") is not None:
                continue
            cells = [_text(td) for td in tr.find_all("td", recursive=False)]
            if cells:
                rows.append(cells)

        if headers or rows:
            tables.append(TableData(headers=headers, rows=rows))
    return tables


def extract_images(soup: BeautifulSoup) -> List[ImageInfo]:
    images: List[ImageInfo] = []
    for img in soup.find_all("img"):
        src = (img.get("src") or "").strip()
        if not src or src.startswith("data:"):
            continue
        images.append(
            ImageInfo(src=src, alt=img.get("alt") or "", title=img.get("title") or None)
        )
    return images


def extract_code_blocks(soup: BeautifulSoup) -> List[str]:
    blocks: List[str] = []
    for pre in soup.find_all("pre"):
        code = pre.get_text().strip()
        if len(code) > _MIN_CODE_CHARS:
            blocks.append(code)
    return blocks


def extract_links(
    soup: BeautifulSoup, page_url: str, seed_host: Optional[str] = None
) -> List[ExtractedLink]:
    """Return every navigable ``<a href>`` resolved against *page_url*.

    Classification uses *seed_host* when given, otherwise the page's own host.
    Unresolvable hrefs are skipped.
    """
    host = seed_host or hostname(page_url)
    links: List[ExtractedLink] = []
    for anchor in soup.find_all("a", href=True):
        absolute = resolve_href(anchor["href"], page_url)
        if absolute is None:
            continue
        internal = is_internal(absolute, host)
        links.append(
            ExtractedLink(
                href=absolute,
                text=_text(anchor),
                title=anchor.get("title") or None,
                is_internal=internal,
                is_external=not internal,
            )
        )
    return links


def _parse_keywords(raw: Optional[str]) -> Optional[List[str]]:
    if not raw:
        return None
    return [k.strip() for k in raw.split(",") if k.strip()]


def extract_metadata(soup: BeautifulSoup) -> PageMetadata:
    canonical_tag = soup.find("link", rel="canonical")
    canonical = (canonical_tag.get("href") or "").strip() if canonical_tag else ""

    return PageMetadata(
        description=_meta(soup, name="description") or _meta(soup, property="og:description"),
        keywords=_parse_keywords(_meta(soup, name="keywords")),
        author=_meta(soup, name="author"),
        canonical=canonical or None,
        og_title=_meta(soup, property="og:title"),
        og_description=_meta(soup, property="og:description"),
        og_image=_meta(soup, property="og:image"),
        twitter_card=_meta(soup, name="twitter:card"),
        robots=_meta(soup, name="robots"),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def extract_content(
    html: str, page_url: str, origin: Optional[str] = None
) -> ExtractedContent:
    """Extract structured content from *html*.

    Noise elements are stripped first; every field is read from the cleaned
    tree.  *origin* (the crawl's seed URL or origin) sets the boundary for
    internal-link classification.
    """
    soup = clean_html(html)
    seed_host = hostname(origin) if origin else None

    return ExtractedContent(
        page_url=page_url,
        title=extract_title(soup),
        headings=extract_headings(soup),
        paragraphs=extract_paragraphs(soup),
        lists=extract_lists(soup),
        tables=extract_tables(soup),
        images=extract_images(soup),
        code_blocks=extract_code_blocks(soup),
        links=extract_links(soup, page_url, seed_host),
        metadata=extract_metadata(soup),
    )


def convert_to_markdown(html: str, url: str = "") -> str:
    """Convert page HTML to Markdown.

    Tries ``trafilatura`` first; falls back to the cleaned tree's plain text
    when trafilatura returns nothing (minimal or unusual pages).
    """
    markdown: Optional[str] = trafilatura.extract(
        html,
        output_format="markdown",
        include_links=True,
        include_tables=True,
        include_images=False,
        url=url or None,
    )
    if not markdown:
        markdown = page_text(clean_html(html))
    return re.sub(r"\n{3,}", "\n\n", markdown).strip()
