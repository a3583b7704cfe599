"""Tests for the flat JSON crawl store.

All tests point ``settings.workspace_dir`` at ``tmp_path`` via the
``workspace`` fixture, so nothing touches the real workspace.
"""

from __future__ import annotations

import json

import pytest

from sitegraph.analysis.links import build_link_map
from sitegraph.analysis.schema import analyze_schema
from sitegraph.crawler.models import CrawledPage, CrawlResult, ExtractedLink
from sitegraph.store.crawls import (
    CRAWL_RESULT_FILE,
    SUMMARY_FILE,
    CrawlNotFoundError,
    list_crawls,
    load_crawl_result,
    load_link_map,
    load_schema_analysis,
    load_summary,
    save_analysis,
)


def _result(crawled_at: int = 1_700_000_000_000) -> CrawlResult:
    pages = [
        CrawledPage(
            url="https://x.com/", title="Home ✓", raw_content="Welcome",
            html='<html><script type="application/ld+json">{"@type": "WebSite"}</script></html>',
            status_code=200, depth=0, load_time_ms=12, word_count=1,
        ),
        CrawledPage(
            url="https://x.com/about", title="About", raw_content="About us",
            html="<html></html>", status_code=200, depth=1, load_time_ms=8, word_count=2,
        ),
    ]
    return CrawlResult(
        url="https://x.com/", title="Home ✓", description="No description available",
        pages=pages, total_pages=2, crawled_at=crawled_at, duration=20,
        sitemaps=["https://x.com/sitemap.xml"],
    )


def _save(crawl_id: str, result: CrawlResult):
    links = {
        "https://x.com/": [ExtractedLink("https://x.com/about", "About", True, False, "About us")],
        "https://x.com/about": [ExtractedLink("https://x.com/gone", "Gone", True, False)],
    }
    link_map = build_link_map(result.pages, links, result.sitemaps)
    schema = analyze_schema(result.pages, [])
    directory = save_analysis(crawl_id, result, link_map, schema)
    return directory, link_map, schema


class TestSaveAndLoad:
    def test_writes_four_files(self, workspace) -> None:
        directory, _, _ = _save("abc", _result())
        assert directory == workspace / "crawls" / "abc"
        assert sorted(p.name for p in directory.iterdir()) == [
            "crawl-result.json", "link-map.json", "schema-analysis.json", "summary.json",
        ]

    def test_crawl_result_round_trip(self, workspace) -> None:
        result = _result()
        _save("abc", result)
        assert load_crawl_result("abc") == result

    def test_link_map_and_schema_round_trip(self, workspace) -> None:
        _, link_map, schema = _save("abc", _result())
        assert load_link_map("abc") == link_map
        assert load_schema_analysis("abc") == schema

    def test_non_ascii_written_verbatim(self, workspace) -> None:
        directory, _, _ = _save("abc", _result())
        assert "Home ✓" in (directory / CRAWL_RESULT_FILE).read_text(encoding="utf-8")

    def test_summary(self, workspace) -> None:
        _save("abc", _result())
        summary = load_summary("abc")

        assert summary["crawl_id"] == "abc"
        assert summary["total_pages"] == 2
        assert summary["broken_links"] == 1
        assert summary["orphan_pages"] == 1
        assert summary["schema_types"] == 1


class TestMissing:
    def test_unknown_id(self, workspace) -> None:
        with pytest.raises(CrawlNotFoundError):
            load_crawl_result("nope")

    @pytest.mark.parametrize("crawl_id", ["../etc", "a/b", ""])
    def test_rejects_unsafe_ids(self, workspace, crawl_id: str) -> None:
        with pytest.raises(CrawlNotFoundError):
            load_link_map(crawl_id)

    def test_not_found_is_a_file_not_found_error(self, workspace) -> None:
        with pytest.raises(FileNotFoundError):
            load_summary("nope")


class TestListCrawls:
    def test_empty_workspace(self, workspace) -> None:
        assert list_crawls() == []

    def test_newest_first_and_ignores_stray_dirs(self, workspace) -> None:
        _save("old", _result(crawled_at=1))
        _save("new", _result(crawled_at=2))
        (workspace / "crawls" / "junk").mkdir()

        assert [s["crawl_id"] for s in list_crawls()] == ["new", "old"]

    def test_summary_file_is_plain_json(self, workspace) -> None:
        directory, _, _ = _save("abc", _result())
        data = json.loads((directory / SUMMARY_FILE).read_text(encoding="utf-8"))
        assert data["url"] == "https://x.com/"
