"""Domain model of the catalog ingestion pipeline."""

from __future__ import annotations

from .entity import CanonicalEntity, EntityRecord
from .integration import (
    ORGANIZATION_WIDE,
    IntegrationContext,
    Provider,
    tenant_from_scope,
    tenant_scope,
)
from .types import JSONObject, JSONScalar, JSONValue

__all__ = [
    "ORGANIZATION_WIDE",
    "CanonicalEntity",
    "EntityRecord",
    "IntegrationContext",
    "JSONObject",
    "JSONScalar",
    "JSONValue",
    "Provider",
    "tenant_from_scope",
    "tenant_scope",
]
