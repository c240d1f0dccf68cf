"""GitHub webhook, sync and integration configuration endpoints."""

from __future__ import annotations

from http import HTTPStatus
from logging import getLogger
from typing import Annotated

from fastapi import APIRouter, Depends, Header, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from catalog_ingest.api.dependencies import get_services
from catalog_ingest.app import IngestionServices, find_context, setup_integration, update_mapping
from catalog_ingest.domain.errors import MappingConfigurationError, SignatureError
from catalog_ingest.domain.ingest import WebhookDelivery, WebhookStatus
from catalog_ingest.domain.model import tenant_scope

log = getLogger(__name__)

router = APIRouter()

Services = Annotated[IngestionServices, Depends(get_services)]


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class SetupRequest(_CamelModel):
    installation_id: str | int | None = Field(default=None, alias="installationId")
    organization_id: str | None = Field(default=None, alias="organizationId")
    tenant_id: str | None = Field(default=None, alias="tenantId")


class ConfigUpdateRequest(_CamelModel):
    organization_id: str | None = Field(default=None, alias="organizationId")
    tenant_id: str | None = Field(default=None, alias="tenantId")
    mapping_yaml: str = Field(alias="mappingYaml")


def _error(status: HTTPStatus, message: str) -> JSONResponse:
    return JSONResponse(status_code=status, content={"error": message})


def _reserved_tenant(tenant_id: str | None) -> JSONResponse | None:
    try:
        tenant_scope(tenant_id)
    except ValueError as exc:
        return _error(HTTPStatus.BAD_REQUEST, str(exc))
    return None


@router.post("/webhook")
async def receive_webhook(
    request: Request,
    services: Services,
    event_type: Annotated[str, Header(alias="X-GitHub-Event")] = "",
    signature: Annotated[str | None, Header(alias="X-Hub-Signature-256")] = None,
    delivery_id: Annotated[str | None, Header(alias="X-GitHub-Delivery")] = None,
) -> JSONResponse:
    delivery = WebhookDelivery(
        event_type=event_type,
        body=await request.body(),
        signature=signature,
        delivery_id=delivery_id,
    )
    try:
        outcome = await services.ingestor.handle(delivery)
    except SignatureError as exc:
        log.warning("Rejected webhook delivery %s: %s", delivery_id, exc)
        return _error(HTTPStatus.UNAUTHORIZED, "Invalid signature")
    except Exception:
        log.exception("Webhook processing error (delivery %s)", delivery_id)
        return _error(HTTPStatus.INTERNAL_SERVER_ERROR, "Internal Server Error")

    if outcome.status is WebhookStatus.UNAVAILABLE:
        return _error(HTTPStatus.SERVICE_UNAVAILABLE, "GitHub Integration not configured")
    return JSONResponse(
        content={
            "status": outcome.status.value,
            "kind": outcome.kind,
            "processed": outcome.processed,
        }
    )


@router.post("/sync", status_code=HTTPStatus.ACCEPTED)
async def trigger_sync(services: Services) -> dict[str, object]:
    started = services.trigger.start()
    message = "Sync started" if started else "Sync already in progress"
    return {"message": message, "started": started}


@router.post("/setup")
async def finalize_setup(body: SetupRequest, services: Services) -> JSONResponse:
    if not body.installation_id or not body.organization_id:
        return _error(HTTPStatus.BAD_REQUEST, "Missing installationId or organizationId")
    rejected = _reserved_tenant(body.tenant_id or None)
    if rejected is not None:
        return rejected

    context = setup_integration(
        services,
        installation_id=str(body.installation_id),
        organization_id=body.organization_id,
        tenant_id=body.tenant_id or None,
    )
    sync_started = services.github_initialised and services.trigger.start()
    return JSONResponse(
        content={"success": True, "configId": context.id, "syncStarted": sync_started}
    )


@router.put("/config")
async def replace_config(body: ConfigUpdateRequest, services: Services) -> JSONResponse:
    if not body.organization_id:
        return _error(HTTPStatus.BAD_REQUEST, "Missing organizationId")
    rejected = _reserved_tenant(body.tenant_id or None)
    if rejected is not None:
        return rejected
    try:
        updated = update_mapping(
            services,
            organization_id=body.organization_id,
            tenant_id=body.tenant_id or None,
            mapping_yaml=body.mapping_yaml,
        )
    except MappingConfigurationError as exc:
        return _error(HTTPStatus.BAD_REQUEST, str(exc))
    if not updated:
        return _error(HTTPStatus.NOT_FOUND, "Configuration not found")
    return JSONResponse(content={"success": True})


@router.get("/config")
async def read_config(
    services: Services,
    organization_id: Annotated[str | None, Query(alias="organizationId")] = None,
    tenant_id: Annotated[str | None, Query(alias="tenantId")] = None,
) -> JSONResponse:
    if not organization_id:
        return _error(HTTPStatus.BAD_REQUEST, "Missing organizationId")
    rejected = _reserved_tenant(tenant_id or None)
    if rejected is not None:
        return rejected
    context = find_context(services, organization_id=organization_id, tenant_id=tenant_id or None)
    if context is None:
        return JSONResponse(status_code=HTTPStatus.NOT_FOUND, content={"installed": False})
    return JSONResponse(
        content={
            "installed": True,
            "config": {
                "id": context.id,
                "provider": context.provider.value,
                "organizationId": context.organization_id,
                "tenantId": context.tenant_id,
                "installationId": context.installation_id,
                "mappingYaml": context.mapping_yaml,
            },
        }
    )
