"""SiteGraph CLI, entry-point for crawling and inspecting saved analyses.

Usage:
    python cli/main.py --help

Commands:
    crawl     crawl a site, build its link map and schema analysis
    extract   fetch one page and print its extracted content
    links     show the link map of a saved crawl
    schema    show the schema.org analysis of a saved crawl
    crawls    list saved crawls
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from sitegraph.xxx import ...`
# works when the CLI is invoked as `python cli/main.py` from any directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from datetime import datetime
from typing import Optional

import typer

from cli.rendering import render_site_list, render_site_tree
from sitegraph.analysis.links import link_map_metrics
from sitegraph.crawler.engine import CrawlError
from sitegraph.crawler.fetcher import FetchError
from sitegraph.store.crawls import (
    CrawlNotFoundError,
    list_crawls,
    load_crawl_result,
    load_link_map,
    load_schema_analysis,
)

app = typer.Typer(
    name="sitegraph",
    help="SiteGraph crawler CLI.",
    no_args_is_help=True,
)


# ---------------------------------------------------------------------------
# Crawl
# ---------------------------------------------------------------------------
@app.command("crawl")
def crawl(
    url: str = typer.Option(..., help="Seed URL; its host bounds the crawl."),
    max_pages: Optional[int] = typer.Option(None, "--max-pages", min=1, help="Page budget."),
    max_depth: Optional[int] = typer.Option(None, "--max-depth", min=0, help="Depth budget."),
    save: bool = typer.Option(True, "--save/--no-save", help="Persist the analysis as JSON."),
) -> None:
    """Crawl a site and analyse its links and structured data."""
    from sitegraph.pipeline import run_site_analysis

    typer.echo(f"[crawl] Crawling {url!r} …")
    try:
        analysis = run_site_analysis(
            url, max_pages=max_pages, max_depth=max_depth, save=save
        )
    except CrawlError as exc:
        typer.echo(f"[crawl] Crawl failed: {exc}")
        raise typer.Exit(1)

    metrics = link_map_metrics(analysis.link_map)
    typer.echo(f"[crawl] Title   : {analysis.crawl.title}")
    typer.echo(f"[crawl] Pages   : {analysis.crawl.total_pages}")
    typer.echo(f"[crawl] Internal: {metrics['total_internal_links']}  External: {metrics['total_external_links']}")
    typer.echo(f"[crawl] Orphans : {metrics['orphan_pages']}  Broken: {metrics['broken_links']}")
    typer.echo(f"[crawl] Schemas : {len(analysis.schema.schema_types)}  Gaps: {len(analysis.schema.gaps)}")
    if save:
        typer.echo(f"[crawl] Saved as crawl {analysis.crawl_id}")


# ---------------------------------------------------------------------------
# Extract
# ---------------------------------------------------------------------------
@app.command("extract")
def extract(
    url: str = typer.Option(..., help="URL of the page to extract."),
    markdown: bool = typer.Option(False, "--markdown", help="Print the page as Markdown."),
) -> None:
    """Fetch a single page and print what the extractor finds."""
    from sitegraph.pipeline import fetch_and_extract

    typer.echo(f"[extract] Fetching {url!r} …")
    try:
        content, md = fetch_and_extract(url)
    except FetchError as exc:
        typer.echo(f"[extract] Fetch failed: {exc}")
        raise typer.Exit(1)

    if markdown:
        typer.echo(md)
        return

    typer.echo(f"[extract] Title     : {content.title}")
    typer.echo(f"[extract] Headings  : {len(content.headings)}")
    typer.echo(f"[extract] Paragraphs: {len(content.paragraphs)}")
    typer.echo(f"[extract] Tables    : {len(content.tables)}")
    typer.echo(f"[extract] Images    : {len(content.images)}")
    typer.echo(f"[extract] Links     : {len(content.links)}")
    for heading in content.headings:
        typer.echo(f"  {'#' * heading.level} {heading.text}")


# ---------------------------------------------------------------------------
# Saved crawls
# ---------------------------------------------------------------------------
@app.command("links")
def links(
    crawl_id: str = typer.Option(..., "--crawl-id", help="Id of a saved crawl."),
    format: str = typer.Option("tree", "--format", help="Output format: tree | list."),
) -> None:
    """Show the site structure, orphans and broken links of a saved crawl."""
    if format not in ("tree", "list"):
        typer.echo(f"[links] Unknown format {format!r}. Use: tree | list")
        raise typer.Exit(1)
    try:
        link_map = load_link_map(crawl_id)
    except CrawlNotFoundError as exc:
        typer.echo(f"[links] {exc}")
        raise typer.Exit(1)

    if format == "tree":
        typer.echo(render_site_tree(link_map.site_structure))
    else:
        typer.echo(render_site_list(link_map.site_structure))

    if link_map.orphan_pages:
        typer.echo("\nOrphan pages:")
        for url in link_map.orphan_pages:
            typer.echo(f"  {url}")
    if link_map.broken_links:
        typer.echo("\nBroken links:")
        for url in link_map.broken_links:
            typer.echo(f"  {url}")


@app.command("schema")
def schema(
    crawl_id: str = typer.Option(..., "--crawl-id", help="Id of a saved crawl."),
) -> None:
    """Show detected schema.org types and recommended additions."""
    try:
        analysis = load_schema_analysis(crawl_id)
    except CrawlNotFoundError as exc:
        typer.echo(f"[schema] {exc}")
        raise typer.Exit(1)

    if not analysis.schema_types:
        typer.echo("[schema] No structured data found.")
    for s in analysis.schema_types:
        typer.echo(f"  {s.type}  {s.url}  ({len(s.properties)} properties)")

    detected = [r.type for r in analysis.rich_results if r.detected]
    typer.echo(f"\nRich results: {', '.join(detected) if detected else '(none)'}")

    if analysis.gaps:
        typer.echo("\nGaps:")
        for gap in analysis.gaps:
            typer.echo(f"  [{gap.importance}] {gap.recommended}: {gap.reason}")


@app.command("crawls")
def crawls() -> None:
    """List saved crawls, newest first."""
    summaries = list_crawls()
    if not summaries:
        typer.echo("[crawls] No saved crawls.")
        return
    for s in summaries:
        when = datetime.fromtimestamp(s["crawled_at"] / 1000).strftime("%Y-%m-%d %H:%M")
        typer.echo(f"  {s['crawl_id']}  {when}  {s['total_pages']:>3} pages  {s['url']}")


@app.command("show")
def show(
    crawl_id: str = typer.Option(..., "--crawl-id", help="Id of a saved crawl."),
) -> None:
    """List the pages of a saved crawl in crawl order."""
    try:
        result = load_crawl_result(crawl_id)
    except CrawlNotFoundError as exc:
        typer.echo(f"[show] {exc}")
        raise typer.Exit(1)
    typer.echo(f"{result.title}  ({result.url})")
    typer.echo(result.description)
    for page in result.pages:
        typer.echo(f"  d{page.depth}  {page.status_code}  {page.word_count:>6} words  {page.url}")


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
