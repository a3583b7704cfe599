"""FastAPI HTTP layer package.

Public re-export so callers can write::

    uvicorn sitegraph.api:app --reload
"""

from sitegraph.api.app import app

__all__ = ["app"]
