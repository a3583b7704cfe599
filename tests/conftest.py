"""Shared fixtures.

``serve_site`` stands a fake website up behind ``respx`` so crawls run
without touching the network.  Every test that crawls must use it: the
sitemap lookup always hits the three well-known sitemap URLs, and respx
rejects any request it has no route for.
"""

from __future__ import annotations

from typing import Callable, Dict, Optional, Union

import httpx
import pytest
import respx

from sitegraph.crawler.sitemap import SITEMAP_PATHS


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    """Point the crawl store at a throw-away directory."""
    monkeypatch.setattr("sitegraph.config.settings.workspace_dir", tmp_path)
    monkeypatch.setattr("sitegraph.config.settings.rate_limit_delay", 0.0)
    return tmp_path


@pytest.fixture
def serve_site() -> Callable[..., Dict[str, respx.Route]]:
    """Register pages (URL → HTML or ``httpx.Response``) on a respx router.

    Returns the page routes keyed by URL so tests can inspect their calls.
    """
    with respx.mock(assert_all_called=False) as router:

        def _serve(
            pages: Dict[str, Union[str, httpx.Response]],
            *,
            origin: str = "https://example.com",
            sitemap: Optional[str] = None,
        ) -> Dict[str, respx.Route]:
            routes: Dict[str, respx.Route] = {}
            for url, body in pages.items():
                response = body if isinstance(body, httpx.Response) else httpx.Response(200, html=body)
                routes[url] = router.get(url).mock(return_value=response)
            for path in SITEMAP_PATHS:
                if path == "/sitemap.xml" and sitemap is not None:
                    response = httpx.Response(
                        200, text=sitemap, headers={"content-type": "application/xml"}
                    )
                else:
                    response = httpx.Response(404)
                router.get(origin + path).mock(return_value=response)
            return routes

        yield _serve
