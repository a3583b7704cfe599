"""Crawl budgets, fetch limits and the workspace location.

Every field reads an environment variable (``SITEGRAPH_WORKSPACE``,
``REQUEST_TIMEOUT``, ``CRAWL_MAX_PAGES`` and so on) and falls back to the
default shown.  A ``.env`` beside the ``sitegraph`` package is honoured, but
never overrides variables already set in the environment.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# <repo>/.env
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)


@dataclass
class Settings:
    # where saved crawls live
    workspace_dir: Path = field(
        default_factory=lambda: Path(
            os.environ.get("SITEGRAPH_WORKSPACE", Path.home() / ".sitegraph_data")
        )
    )

    @property
    def crawls_dir(self) -> Path:
        """Directory holding one sub-directory of JSON files per saved crawl."""
        return self.workspace_dir / "crawls"

    # one HTTP request: identity, deadline, size and redirect limits
    user_agent: str = field(
        default_factory=lambda: os.environ.get(
            "SITEGRAPH_USER_AGENT",
            "Mozilla/5.0 (compatible; SiteGraph-Crawler/1.0; GEO site analysis)",
        )
    )
    request_timeout: float = field(
        default_factory=lambda: float(os.environ.get("REQUEST_TIMEOUT", "30.0"))
    )
    sitemap_timeout: float = field(
        default_factory=lambda: float(os.environ.get("SITEMAP_TIMEOUT", "10.0"))
    )
    max_response_bytes: int = field(
        default_factory=lambda: int(
            os.environ.get("MAX_RESPONSE_BYTES", str(10 * 1024 * 1024))
        )
    )
    max_redirects: int = field(
        default_factory=lambda: int(os.environ.get("MAX_REDIRECTS", "5"))
    )
    rate_limit_delay: float = field(
        default_factory=lambda: float(os.environ.get("RATE_LIMIT_DELAY", "0.0"))
    )

    # one crawl: page and depth budget, per-page fan-out, stored text size
    max_pages: int = field(
        default_factory=lambda: int(os.environ.get("CRAWL_MAX_PAGES", "50"))
    )
    max_depth: int = field(
        default_factory=lambda: int(os.environ.get("CRAWL_MAX_DEPTH", "3"))
    )
    max_links_per_page: int = field(
        default_factory=lambda: int(os.environ.get("CRAWL_MAX_LINKS_PER_PAGE", "15"))
    )
    max_content_chars: int = field(
        default_factory=lambda: int(os.environ.get("CRAWL_MAX_CONTENT_CHARS", "50000"))
    )

    def ensure_workspace(self) -> None:
        """Create the workspace directory if it does not exist."""
        self.workspace_dir.mkdir(parents=True, exist_ok=True)


# Shared by every module; tests monkeypatch its attributes, e.g.
#   monkeypatch.setattr("sitegraph.config.settings.workspace_dir", tmp_path)
settings = Settings()
