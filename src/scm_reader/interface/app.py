"""FastAPI application factory.

The reader registry and its shared HTTP client live for the lifetime of the
app; see :mod:`scm_reader.interface.dependencies`.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from scm_reader.interface.dependencies import shutdown, startup
from scm_reader.interface.error_handlers import register_error_handlers
from scm_reader.interface.routes import router


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the upstream HTTP client and build the registry, then close it."""
    await startup()
    yield
    await shutdown()


def create_app() -> FastAPI:
    """Build and wire the FastAPI application."""
    app = FastAPI(
        title="SCM Reader",
        version="1.0.0",
        description=(
            "Reads files, directory snapshots and glob searches from "
            "GitHub and GitHub Enterprise repositories, with etag-based "
            "conditional re-fetch."
        ),
        lifespan=_lifespan,
    )

    register_error_handlers(app)
    app.include_router(router)
    return app
