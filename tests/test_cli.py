"""Tests for the sitegraph CLI commands."""

from __future__ import annotations

import httpx
import pytest
from typer.testing import CliRunner

from cli.main import app
from cli.rendering import render_site_list, render_site_tree
from sitegraph.analysis.models import SitePage
from sitegraph.store.crawls import list_crawls

runner = CliRunner()

ORIGIN = "https://example.com"
SEED = f"{ORIGIN}/"

_HOME = (
    "<html><head><title>Home</title></head><body><main>"
    "<h2>Welcome</h2><p>Welcome to the example site and its many pages.</p>"
    '<a href="/blog">Blog</a><a href="/gone">Gone</a>'
    "</main></body></html>"
)
_BLOG = (
    "<html><head><title>Blog</title></head><body>"
    '<p>All the posts we have written.</p><a href="/blog/post">Post</a></body></html>'
)
_POST = "<html><head><title>Post</title></head><body><p>One single post here.</p></body></html>"


@pytest.fixture
def site(serve_site):
    return serve_site({
        SEED: _HOME,
        f"{ORIGIN}/blog": _BLOG,
        f"{ORIGIN}/blog/post": _POST,
        f"{ORIGIN}/gone": httpx.Response(404),
    })


def _crawl_id(workspace, site) -> str:
    result = runner.invoke(app, ["crawl", "--url", SEED])
    assert result.exit_code == 0, result.stdout
    return list_crawls()[0]["crawl_id"]


class TestCrawlCommand:
    def test_crawl_saves(self, workspace, site) -> None:
        result = runner.invoke(app, ["crawl", "--url", SEED, "--max-pages", "5"])

        assert result.exit_code == 0
        assert "Pages   : 3" in result.stdout
        assert "Saved as crawl" in result.stdout
        assert len(list_crawls()) == 1

    def test_no_save(self, workspace, site) -> None:
        result = runner.invoke(app, ["crawl", "--url", SEED, "--no-save"])

        assert result.exit_code == 0
        assert "Saved as crawl" not in result.stdout
        assert list_crawls() == []

    def test_failed_seed_exits_1(self, workspace, serve_site) -> None:
        serve_site({SEED: httpx.Response(500)})
        result = runner.invoke(app, ["crawl", "--url", SEED])

        assert result.exit_code == 1
        assert "Crawl failed" in result.stdout


class TestExtractCommand:
    def test_summary(self, site) -> None:
        result = runner.invoke(app, ["extract", "--url", SEED])

        assert result.exit_code == 0
        assert "Title     : Home" in result.stdout
        assert "## Welcome" in result.stdout

    def test_fetch_failure_exits_1(self, site) -> None:
        result = runner.invoke(app, ["extract", "--url", f"{ORIGIN}/gone"])
        assert result.exit_code == 1
        assert "HTTP 404" in result.stdout


class TestSavedCrawlCommands:
    def test_links_tree(self, workspace, site) -> None:
        crawl_id = _crawl_id(workspace, site)
        result = runner.invoke(app, ["links", "--crawl-id", crawl_id])

        assert result.exit_code == 0
        assert "└── Blog" in result.stdout
        assert "Post  (https://example.com/blog/post)" in result.stdout
        assert "Broken links:" in result.stdout
        assert f"{ORIGIN}/gone" in result.stdout

    def test_links_list(self, workspace, site) -> None:
        crawl_id = _crawl_id(workspace, site)
        result = runner.invoke(app, ["links", "--crawl-id", crawl_id, "--format", "list"])

        assert result.exit_code == 0
        assert f"    {ORIGIN}/blog/post  [Post]" in result.stdout

    def test_links_bad_format(self, workspace, site) -> None:
        crawl_id = _crawl_id(workspace, site)
        result = runner.invoke(app, ["links", "--crawl-id", crawl_id, "--format", "graph"])
        assert result.exit_code == 1

    def test_schema(self, workspace, site) -> None:
        crawl_id = _crawl_id(workspace, site)
        result = runner.invoke(app, ["schema", "--crawl-id", crawl_id])

        assert result.exit_code == 0
        assert "No structured data found." in result.stdout
        assert "[high] Organization" in result.stdout

    def test_show(self, workspace, site) -> None:
        crawl_id = _crawl_id(workspace, site)
        result = runner.invoke(app, ["show", "--crawl-id", crawl_id])

        assert result.exit_code == 0
        assert f"{ORIGIN}/blog/post" in result.stdout

    def test_crawls_listing(self, workspace, site) -> None:
        crawl_id = _crawl_id(workspace, site)
        result = runner.invoke(app, ["crawls"])

        assert result.exit_code == 0
        assert crawl_id in result.stdout

    def test_crawls_empty(self, workspace) -> None:
        result = runner.invoke(app, ["crawls"])
        assert "No saved crawls." in result.stdout

    @pytest.mark.parametrize("command", ["links", "schema", "show"])
    def test_unknown_crawl_exits_1(self, workspace, command: str) -> None:
        result = runner.invoke(app, [command, "--crawl-id", "missing"])
        assert result.exit_code == 1


class TestRendering:
    _PAGES = [
        SitePage("https://x.com/", "Home", 1, None, ["https://x.com/a", "https://x.com/a/b"]),
        SitePage("https://x.com/a", "A", 2, "https://x.com/", ["https://x.com/a/b"]),
        SitePage("https://x.com/c", "C", 2, "https://x.com/", []),
        SitePage("https://x.com/a/b", "B", 3, "https://x.com/a", []),
    ]

    def test_tree(self) -> None:
        assert render_site_tree(self._PAGES) == "\n".join([
            "Home  (https://x.com/)",
            "├── A  (https://x.com/a)",
            "│   └── B  (https://x.com/a/b)",
            "└── C  (https://x.com/c)",
        ])

    def test_list(self) -> None:
        assert render_site_list(self._PAGES).splitlines()[3] == "    https://x.com/a/b  [B]"

    def test_empty(self) -> None:
        assert render_site_tree([]) == ""
        assert render_site_list([]) == ""
