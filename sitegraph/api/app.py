"""FastAPI application factory.

Lifespan
--------
On startup the app makes sure the workspace directory exists so saved
crawls can be listed and written straight away.

Routers
-------
    /crawls    run a site analysis, list saved crawls, read their artefacts
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sitegraph.api.routers import crawls as crawls_router
from sitegraph.config import settings


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings.ensure_workspace()
    yield


def create_app() -> FastAPI:
    """Return a fully-configured FastAPI application instance."""
    app = FastAPI(
        title="SiteGraph API",
        description=(
            "REST interface for the SiteGraph crawler. Runs bounded "
            "breadth-first crawls and serves the resulting link maps "
            "and schema.org analyses."
        ),
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(crawls_router.router, prefix="/crawls", tags=["crawls"])

    return app


# Module-level instance used by uvicorn:
#   uvicorn sitegraph.api.app:app --reload
app = create_app()
