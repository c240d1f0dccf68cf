from __future__ import annotations

from fastapi import Request

from catalog_ingest.app import IngestionServices


def get_services(request: Request) -> IngestionServices:
    return request.app.state.services
