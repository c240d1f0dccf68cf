"""FastAPI application factory."""

from __future__ import annotations

from contextlib import asynccontextmanager
from logging import getLogger
from typing import TYPE_CHECKING

from fastapi import FastAPI

from catalog_ingest import __version__

from .routes import github, health

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from catalog_ingest.app import IngestionServices

log = getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    services: IngestionServices = app.state.services
    log.info(
        "catalog-ingest API starting up (GitHub integration %s)",
        "ready" if services.github_initialised else "not configured",
    )

    yield

    if services.trigger.cancel():
        await services.trigger.wait()
    log.info("catalog-ingest API shutting down")


def create_app(services: IngestionServices) -> FastAPI:
    """Create the FastAPI application around an assembled pipeline."""

    app = FastAPI(
        title="catalog-ingest",
        description="GitHub ingestion and mapping into the software catalog",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.services = services

    app.include_router(health.router, tags=["Health"])
    app.include_router(github.router, prefix="/github", tags=["GitHub"])

    return app
