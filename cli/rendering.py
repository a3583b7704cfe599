"""Utilities for rendering crawl output in the CLI."""

from __future__ import annotations

from typing import Dict, List

from sitegraph.analysis.models import SitePage


def render_site_tree(pages: List[SitePage]) -> str:
    """Render a site structure as an ASCII tree.

    Pages without a parent are roots; each page is listed under its
    ``parent``.  Children keep the order they appear in *pages*.
    """
    by_url = {p.url: p for p in pages}
    adj: Dict[str, List[SitePage]] = {}
    roots: List[SitePage] = []
    for page in pages:
        if page.parent and page.parent in by_url:
            adj.setdefault(page.parent, []).append(page)
        else:
            roots.append(page)

    lines: List[str] = []

    def _render(page: SitePage, prefix: str, is_last: bool, is_root: bool) -> None:
        label = f"{page.title}  ({page.url})"
        if is_root:
            lines.append(label)
            child_prefix = ""
        else:
            connector = "└── " if is_last else "├── "
            lines.append(f"{prefix}{connector}{label}")
            child_prefix = prefix + ("    " if is_last else "│   ")

        children = adj.get(page.url, [])
        for i, child in enumerate(children):
            _render(child, child_prefix, i == len(children) - 1, False)

    for root in roots:
        _render(root, "", True, True)

    return "\n".join(lines)


def render_site_list(pages: List[SitePage]) -> str:
    """One line per page, indented by URL-structure depth."""
    if not pages:
        return ""
    base = min(p.depth for p in pages)
    return "\n".join(
        f"{'  ' * (p.depth - base)}{p.url}  [{p.title}]" for p in pages
    )
