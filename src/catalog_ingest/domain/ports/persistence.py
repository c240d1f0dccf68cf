"""Ports for persisting entities and reading integration contexts."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from catalog_ingest.domain.model import EntityRecord, IntegrationContext, Provider


@runtime_checkable
class EntitySink(Protocol):
    """Catalog store receiving mapped entities.

    ``create`` must upsert by ``(organization_id, tenant_id, blueprint_id,
    identifier)`` so repeated or overlapping ingestion converges.
    """

    def create(self, record: EntityRecord) -> object: ...


@runtime_checkable
class IntegrationContextRepository(Protocol):
    """Persistence contract for integration contexts."""

    def list_for_provider(self, provider: Provider) -> Sequence[IntegrationContext]: ...

    def get_by_installation(
        self, provider: Provider, installation_id: str
    ) -> IntegrationContext | None: ...

    def get_for_scope(
        self, provider: Provider, organization_id: str, tenant_id: str | None
    ) -> IntegrationContext | None: ...

    def save(self, context: IntegrationContext) -> IntegrationContext: ...

    def update_mapping(
        self,
        provider: Provider,
        organization_id: str,
        tenant_id: str | None,
        mapping_yaml: str,
    ) -> bool: ...
