"""Tests for the link graph builder."""

from __future__ import annotations

import json
from dataclasses import asdict

from sitegraph.analysis.links import (
    build_link_map,
    build_site_structure,
    is_descendant,
    link_map_metrics,
    structure_depth,
)
from sitegraph.crawler.models import CrawledPage, ExtractedLink

X = "https://x.com"


def _crawled(url: str, title: str = "", depth: int = 0) -> CrawledPage:
    return CrawledPage(
        url=url,
        title=title or url,
        raw_content="",
        html="",
        status_code=200,
        depth=depth,
        load_time_ms=1,
        word_count=0,
    )


def _link(href: str, internal: bool = True) -> ExtractedLink:
    return ExtractedLink(href=href, text="", is_internal=internal, is_external=not internal)


class TestStructureHelpers:
    def test_structure_depth(self) -> None:
        assert structure_depth(f"{X}/") == 1
        assert structure_depth(f"{X}/blog") == 2
        assert structure_depth(f"{X}/blog/post") == 3

    def test_is_descendant_respects_segment_boundary(self) -> None:
        assert is_descendant(f"{X}/blog/post", f"{X}/blog")
        assert is_descendant(f"{X}/blog/post", f"{X}/blog/")
        assert not is_descendant(f"{X}/blogging", f"{X}/blog")
        assert not is_descendant(f"{X}/blog/", f"{X}/blog")

    def test_site_structure(self) -> None:
        pages = [
            _crawled(f"{X}/blog/post"),
            _crawled(f"{X}/"),
            _crawled(f"{X}/blog"),
            _crawled(f"{X}/about"),
        ]
        structure = {p.url: p for p in build_site_structure(pages)}

        assert [p.url for p in build_site_structure(pages)] == [
            f"{X}/",
            f"{X}/blog",
            f"{X}/about",
            f"{X}/blog/post",
        ]
        assert structure[f"{X}/"].parent is None
        assert structure[f"{X}/blog"].parent == f"{X}/"
        assert structure[f"{X}/blog/post"].parent == f"{X}/blog"
        assert structure[f"{X}/blog"].children == [f"{X}/blog/post"]
        assert structure[f"{X}/blog/post"].depth == 3


class TestBuildLinkMap:
    def test_external_links_per_source(self) -> None:
        pages = [_crawled(f"{X}/"), _crawled(f"{X}/a")]
        links = {
            f"{X}/": [_link(f"{X}/a"), _link("https://other.com", internal=False)],
            f"{X}/a": [_link("https://other.com", internal=False)],
        }
        link_map = build_link_map(pages, links)

        assert link_map.external_links == {
            f"{X}/": ["https://other.com"],
            f"{X}/a": ["https://other.com"],
        }
        assert "https://other.com" not in link_map.broken_links
        assert all("https://other.com" not in t for t in link_map.internal_links.values())

    def test_broken_links(self) -> None:
        pages = [_crawled(f"{X}/"), _crawled(f"{X}/ok")]
        links = {
            f"{X}/": [_link(f"{X}/missing"), _link(f"{X}/ok")],
            f"{X}/ok": [_link(f"{X}/missing"), _link(f"{X}/gone")],
        }
        link_map = build_link_map(pages, links)

        assert link_map.broken_links == [f"{X}/missing", f"{X}/gone"]

    def test_orphans(self) -> None:
        pages = [_crawled(f"{X}/"), _crawled(f"{X}/a"), _crawled(f"{X}/b"), _crawled(f"{X}/self")]
        links = {
            f"{X}/": [_link(f"{X}/a"), _link(f"{X}/b")],
            f"{X}/a": [_link(f"{X}/b")],
            f"{X}/self": [_link(f"{X}/self")],
        }
        link_map = build_link_map(pages, links)

        assert link_map.orphan_pages == [f"{X}/", f"{X}/self"]

    def test_seed_not_orphan_when_linked_back(self) -> None:
        pages = [_crawled(f"{X}/"), _crawled(f"{X}/a")]
        links = {f"{X}/": [_link(f"{X}/a")], f"{X}/a": [_link(f"{X}/")]}
        assert build_link_map(pages, links).orphan_pages == []

    def test_duplicates_kept_and_foreign_sources_ignored(self) -> None:
        pages = [_crawled(f"{X}/")]
        links = {
            f"{X}/": [_link(f"{X}/a"), _link(f"{X}/a")],
            f"{X}/not-crawled": [_link(f"{X}/")],
        }
        link_map = build_link_map(pages, links)

        assert link_map.internal_links == {f"{X}/": [f"{X}/a", f"{X}/a"]}
        assert link_map.orphan_pages == [f"{X}/"]

    def test_sitemaps_deduplicated(self) -> None:
        link_map = build_link_map([], {}, [f"{X}/sitemap.xml", f"{X}/sitemap.xml"])
        assert link_map.sitemaps == [f"{X}/sitemap.xml"]

    def test_idempotent(self) -> None:
        pages = [_crawled(f"{X}/"), _crawled(f"{X}/a/b"), _crawled(f"{X}/a")]
        links = {
            f"{X}/": [_link(f"{X}/a"), _link("https://o.com", internal=False)],
            f"{X}/a": [_link(f"{X}/a/b"), _link(f"{X}/zzz")],
        }
        first = json.dumps(asdict(build_link_map(pages, links)))
        second = json.dumps(asdict(build_link_map(pages, links)))
        assert first == second

    def test_metrics(self) -> None:
        pages = [_crawled(f"{X}/"), _crawled(f"{X}/a")]
        links = {
            f"{X}/": [_link(f"{X}/a"), _link(f"{X}/a"), _link("https://o.com", internal=False)],
            f"{X}/a": [_link(f"{X}/missing")],
        }
        metrics = link_map_metrics(build_link_map(pages, links, [f"{X}/sitemap.xml"]))

        assert metrics == {
            "total_internal_links": 3,
            "total_external_links": 1,
            "unique_internal_urls": 2,
            "unique_external_urls": 1,
            "orphan_pages": 1,
            "broken_links": 1,
            "sitemaps": 1,
        }
