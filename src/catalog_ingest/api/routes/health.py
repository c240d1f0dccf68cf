"""Health check endpoint."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from catalog_ingest import __version__
from catalog_ingest.api.dependencies import get_services
from catalog_ingest.app import IngestionServices

router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    version: str
    github: str
    sync_running: bool


@router.get("/health", response_model=HealthResponse)
async def health_check(
    services: Annotated[IngestionServices, Depends(get_services)],
) -> HealthResponse:
    return HealthResponse(
        status="healthy",
        version=__version__,
        github="configured" if services.github_initialised else "not configured",
        sync_running=services.trigger.running,
    )
